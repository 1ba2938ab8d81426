"""Storefront core: product queries, cart and wishlist stores, API client."""

__version__ = "0.1.0"
