"""Wishlist state management for a client session."""
from dataclasses import dataclass, asdict, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from storefront.querying.engine import effective_price, stable_sort, timestamp_key
from storefront.utils.cart import CartCandidate, CartStore
from storefront.utils.logger import get_logger
from storefront.utils.store import PersistentStore

logger = get_logger(__name__)

Category = Union[str, Dict[str, str]]

WISHLIST_SORT_KEYS = ("added", "price", "name", "rating")


def parse_added_at(value: Any) -> datetime:
    """Turn a persisted ``added_at`` back into an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class WishlistItem:
    """A product saved for later."""
    id: str
    product_id: str
    title: str
    price: float
    image: str
    short_description: str
    category: Category
    rating: float
    added_at: datetime
    sale_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["added_at"] = self.added_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WishlistItem":
        sale_price = data.get("sale_price")
        return cls(
            id=str(data["id"]),
            product_id=str(data["product_id"]),
            title=data.get("title") or "",
            price=float(data["price"]),
            sale_price=float(sale_price) if sale_price is not None else None,
            image=data.get("image") or "",
            short_description=data.get("short_description") or "",
            category=data.get("category") or "",
            rating=float(data.get("rating") or 0),
            added_at=parse_added_at(data["added_at"]),
        )


@dataclass
class WishlistCandidate:
    """What a caller hands to ``WishlistStore.add``."""
    product_id: str
    title: str
    price: float
    image: str = ""
    short_description: str = ""
    category: Category = ""
    rating: float = 0.0
    sale_price: Optional[float] = None


def _matches_category(item: WishlistItem, category: str) -> bool:
    if isinstance(item.category, dict):
        return category in (
            item.category.get("id"),
            item.category.get("slug"),
            item.category.get("name"),
        )
    return item.category == category


_SORT_KEY_FUNCS = {
    "added": lambda item: timestamp_key(item.added_at),
    "price": effective_price,
    "name": lambda item: item.title.lower(),
    "rating": lambda item: item.rating or 0.0,
}


def query_wishlist(
    items: Sequence[WishlistItem],
    search: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = "added",
    sort_order: str = "desc",
) -> List[WishlistItem]:
    """
    Search, filter and sort wishlist entries.

    Args:
        items: Wishlist entries
        search: Case-insensitive substring of the title or short description
        category: Category string, or id/slug/name of a structured category
        sort_by: added, price, name or rating (unknown keys sort by added)
        sort_order: asc or desc

    Returns:
        The matching entries in sorted order
    """
    result = list(items)

    if search:
        term = search.strip().lower()
        result = [
            item for item in result
            if term in item.title.lower() or term in item.short_description.lower()
        ]

    if category:
        result = [item for item in result if _matches_category(item, category)]

    key = _SORT_KEY_FUNCS.get(sort_by or "added", _SORT_KEY_FUNCS["added"])
    return stable_sort(result, key, descending=sort_order == "desc")


class WishlistStore(PersistentStore):
    """The wishlist of one client session, one entry per product."""

    name = "wishlist"

    def _item_from_dict(self, data: Dict[str, Any]) -> WishlistItem:
        return WishlistItem.from_dict(data)

    def _item_to_dict(self, item: WishlistItem) -> Dict[str, Any]:
        return item.to_dict()

    @property
    def items(self) -> List[WishlistItem]:
        return [replace(item) for item in self._items]

    def add(self, candidate: WishlistCandidate):
        """
        Save a product, or refresh the saved copy of it.

        Re-adding a product replaces its display fields but keeps the entry's
        id and the time it was first added.
        """
        for index, item in enumerate(self._items):
            if item.product_id == candidate.product_id:
                items = list(self._items)
                items[index] = WishlistItem(
                    id=item.id,
                    added_at=item.added_at,
                    **asdict(candidate),
                )
                self._commit(items)
                return

        self._commit(self._items + [WishlistItem(
            id=f"wishlist-{candidate.product_id}",
            added_at=self._clock(),
            **asdict(candidate),
        )])
        logger.debug("Wishlist: added %s", candidate.product_id)

    def remove(self, product_id: str):
        remaining = [item for item in self._items if item.product_id != product_id]
        if len(remaining) == len(self._items):
            return
        self._commit(remaining)

    def clear(self):
        self._commit([])

    def is_in_wishlist(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self._items)

    def count(self) -> int:
        return len(self._items)

    def query(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sort_by: Optional[str] = "added",
        sort_order: str = "desc",
    ) -> List[WishlistItem]:
        return query_wishlist(self.items, search, category, sort_by, sort_order)

    def move_to_cart(self, product_id: str, cart: CartStore) -> bool:
        """
        Move one entry into ``cart`` (quantity 1, at its effective price).

        Returns:
            True if the product was in the wishlist
        """
        for item in self._items:
            if item.product_id == product_id:
                cart.add(CartCandidate(
                    product_id=item.product_id,
                    title=item.title,
                    price=effective_price(item),
                    quantity=1,
                    image=item.image or None,
                ))
                self.remove(product_id)
                logger.info("Moved %s from wishlist to cart", product_id)
                return True
        return False
