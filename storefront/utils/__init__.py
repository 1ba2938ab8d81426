"""Client-session state: cart and wishlist stores and their persistence."""
from .persistence import Persistable, MemoryStorage, JsonFileStorage, DatabaseStorage, create_storage
from .cart import CartStore, CartItem, CartCandidate
from .wishlist import WishlistStore, WishlistItem, WishlistCandidate, query_wishlist

__all__ = [
    "Persistable",
    "MemoryStorage",
    "JsonFileStorage",
    "DatabaseStorage",
    "create_storage",
    "CartStore",
    "CartItem",
    "CartCandidate",
    "WishlistStore",
    "WishlistItem",
    "WishlistCandidate",
    "query_wishlist"
]
