"""Setup script for Gemstone Storefront Search."""

from setuptools import setup, find_packages

setup(
    name="gemstone-storefront-search",
    version="0.1.0",
    description="Multilingual gemstone catalog search with fuzzy matching and suggestions",
    packages=find_packages(include=["storefront", "storefront.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110.0",
        "uvicorn[standard]>=0.27.0",
        "sqlalchemy[asyncio]>=2.0.25",
        "asyncpg>=0.29.0",
        "alembic>=1.13.0",
        "pydantic>=2.6.0",
        "pydantic-settings>=2.1.0",
        "httpx>=0.26.0",
        "nltk>=3.8.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
        ],
    },
)
