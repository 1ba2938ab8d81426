"""Data access facade: HTTP client, endpoint paths, product and order adapters."""
from .api_client import ApiClient
from .orders import OrderAdapter, OrderFilters, build_order_query
from .products import ProductAdapter, ProductFilters, build_product_query

__all__ = [
    "ApiClient",
    "OrderAdapter",
    "OrderFilters",
    "ProductAdapter",
    "ProductFilters",
    "build_order_query",
    "build_product_query"
]
