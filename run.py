#!/usr/bin/env python3
"""
Development runner script for Gemstone Storefront Search.
"""

import sys
import subprocess
import argparse


def run_dev_server():
    """Run the development server with auto-reload."""
    print("Starting development server...")
    subprocess.run([
        "uvicorn",
        "storefront.main:app",
        "--reload",
        "--host", "0.0.0.0",
        "--port", "8000",
        "--log-level", "info"
    ])


def run_migrations():
    """Run database migrations."""
    print("Running database migrations...")
    subprocess.run(["alembic", "upgrade", "head"])


def create_migration(message: str):
    """Create a new migration."""
    print(f"Creating migration: {message}")
    subprocess.run(["alembic", "revision", "--autogenerate", "-m", message])


def run_tests():
    """Run tests."""
    print("Running tests...")
    subprocess.run(["pytest", "-v"])


def install_deps():
    """Install the package with test dependencies."""
    print("Installing dependencies...")
    subprocess.run(["pip", "install", "-e", ".[test]"])


def reindex():
    """Recompute the search vectors of every gemstone."""
    import asyncio
    from storefront.database import AsyncSessionLocal, close_db
    from storefront.services.catalog import GemstoneCatalog

    async def _reindex():
        async with AsyncSessionLocal() as session:
            count = await GemstoneCatalog(session).reindex_all()
        await close_db()
        return count

    print("Reindexing search vectors...")
    count = asyncio.run(_reindex())
    print(f"Reindexed {count} gemstones")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Gemstone Storefront Search Runner")
    parser.add_argument(
        "command",
        choices=["dev", "migrate", "new-migration", "test", "install", "reindex"],
        help="Command to run"
    )
    parser.add_argument(
        "-m", "--message",
        help="Migration message (for new-migration command)",
        default="Auto-generated migration"
    )

    args = parser.parse_args()

    if args.command == "dev":
        run_dev_server()
    elif args.command == "migrate":
        run_migrations()
    elif args.command == "new-migration":
        create_migration(args.message)
    elif args.command == "test":
        run_tests()
    elif args.command == "install":
        install_deps()
    elif args.command == "reindex":
        reindex()


if __name__ == "__main__":
    main()
