"""Multilingual gemstone storefront search."""

__version__ = "0.1.0"
