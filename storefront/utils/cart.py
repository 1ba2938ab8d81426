"""Cart state management for a client session."""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, asdict, replace

from storefront.utils.logger import get_logger
from storefront.utils.store import PersistentStore

logger = get_logger(__name__)


@dataclass
class CartItem:
    """Represents an item in the cart."""
    id: str
    product_id: str
    title: str
    price: float
    quantity: int
    image: Optional[str] = None

    @property
    def subtotal(self) -> float:
        """Calculate subtotal for this cart item."""
        return float(self.price * self.quantity)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CartItem":
        return cls(
            id=str(data["id"]),
            product_id=str(data["product_id"]),
            title=data.get("title") or "",
            price=float(data["price"]),
            quantity=int(data["quantity"]),
            image=data.get("image"),
        )


@dataclass
class CartCandidate:
    """What a caller hands to ``CartStore.add``."""
    product_id: str
    title: str
    price: float
    quantity: int = 1
    image: Optional[str] = None


class CartStore(PersistentStore):
    """
    The cart of one client session.

    Holds at most one line per product; every mutation is written through to
    the injected storage before the call returns.
    """

    name = "cart"

    def _item_from_dict(self, data: Dict[str, Any]) -> CartItem:
        return CartItem.from_dict(data)

    def _item_to_dict(self, item: CartItem) -> Dict[str, Any]:
        return asdict(item)

    @property
    def items(self) -> List[CartItem]:
        return [replace(item) for item in self._items]

    def get(self, product_id: str) -> Optional[CartItem]:
        for item in self._items:
            if item.product_id == product_id:
                return replace(item)
        return None

    def _new_id(self, product_id: str) -> str:
        millis = int(self._clock().timestamp() * 1000)
        return f"{product_id}-{millis}"

    def add(self, candidate: CartCandidate):
        """
        Add a product to the cart.

        If the product is already in the cart only its quantity grows; the
        price captured when the line was created is kept. A merge that leaves
        the quantity at zero or below removes the line, and a new line is only
        created for a positive quantity.

        Args:
            candidate: Product snapshot and quantity to add
        """
        for index, item in enumerate(self._items):
            if item.product_id == candidate.product_id:
                quantity = item.quantity + candidate.quantity
                if quantity <= 0:
                    self.remove(item.product_id)
                    return
                items = list(self._items)
                items[index] = replace(item, quantity=quantity)
                self._commit(items)
                logger.debug("Cart: %s quantity -> %d", item.product_id, quantity)
                return

        if candidate.quantity <= 0:
            logger.debug("Cart: ignoring %s with quantity %d", candidate.product_id, candidate.quantity)
            return

        self._commit(self._items + [CartItem(
            id=self._new_id(candidate.product_id),
            product_id=candidate.product_id,
            title=candidate.title,
            price=float(candidate.price),
            quantity=candidate.quantity,
            image=candidate.image,
        )])
        logger.debug("Cart: added %dx %s", candidate.quantity, candidate.product_id)

    def remove(self, product_id: str):
        """Remove a product's line; unknown products are ignored."""
        remaining = [item for item in self._items if item.product_id != product_id]
        if len(remaining) == len(self._items):
            return
        self._commit(remaining)
        logger.debug("Cart: removed %s", product_id)

    def update(self, product_id: str, quantity: int):
        """
        Set the quantity of a product already in the cart.

        A quantity of zero or less removes the line. Unknown products are ignored.
        """
        if quantity <= 0:
            self.remove(product_id)
            return

        for index, item in enumerate(self._items):
            if item.product_id == product_id:
                items = list(self._items)
                items[index] = replace(item, quantity=quantity)
                self._commit(items)
                return

    def clear(self):
        """Clear all items from cart."""
        self._commit([])

    def total(self) -> float:
        """Sum of price x quantity over all lines."""
        return sum(item.subtotal for item in self._items)

    def count(self) -> int:
        """Number of units in the cart (not the number of lines)."""
        return sum(item.quantity for item in self._items)

    def summary(self) -> Dict[str, Any]:
        """
        Get formatted cart summary.

        Returns:
            Dictionary with cart summary
        """
        total = self.total()

        items = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "title": item.title,
                "price": float(item.price),
                "quantity": item.quantity,
                "subtotal": float(item.subtotal),
                "image": item.image
            }
            for item in self._items
        ]

        return {
            "items": items,
            "item_count": self.count(),
            "total": float(total),
            "total_formatted": f"${total:.2f}"
        }
