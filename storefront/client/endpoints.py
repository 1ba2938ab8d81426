"""Centralised endpoint paths; no hard-coded routes elsewhere."""
from typing import Optional
from urllib.parse import quote


def _with_query(path: str, query: Optional[str]) -> str:
    return f"{path}?{query}" if query else path


class ProductEndpoints:
    @staticmethod
    def list(query: Optional[str] = None) -> str:
        return _with_query("/products", query)

    @staticmethod
    def detail(product_id: str) -> str:
        return f"/products/{quote(product_id, safe='')}"

    @staticmethod
    def by_slug(slug: str) -> str:
        return f"/products/slug/{quote(slug, safe='')}"

    @staticmethod
    def search(query: str) -> str:
        # ``query`` is an already encoded query string (q=...&page=...)
        return _with_query("/products", query)

    @staticmethod
    def categories() -> str:
        return "/products/categories"

    @staticmethod
    def create() -> str:
        return "/admin/products"

    @staticmethod
    def update(product_id: str) -> str:
        return f"/admin/products/{quote(product_id, safe='')}"

    @staticmethod
    def delete(product_id: str) -> str:
        return f"/admin/products/{quote(product_id, safe='')}"


class OrderEndpoints:
    @staticmethod
    def me(query: Optional[str] = None) -> str:
        return _with_query("/orders/me", query)

    @staticmethod
    def detail(order_id: str) -> str:
        return f"/orders/{quote(order_id, safe='')}"

    @staticmethod
    def create() -> str:
        return "/orders"

    @staticmethod
    def cancel(order_id: str) -> str:
        return f"/orders/{quote(order_id, safe='')}/cancel"

    @staticmethod
    def track(order_id: str) -> str:
        return f"/orders/{quote(order_id, safe='')}/track"

    @staticmethod
    def reorder(order_id: str) -> str:
        return f"/orders/{quote(order_id, safe='')}/reorder"


products = ProductEndpoints()
orders = OrderEndpoints()
