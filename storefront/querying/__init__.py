"""Product querying: pure filter/sort/paginate engine and the query service."""
from .params import ProductQuery
from .engine import (
    effective_price,
    filter_products,
    sort_products,
    paginate,
    query_products,
    Page,
)

__all__ = [
    "ProductQuery",
    "effective_price",
    "filter_products",
    "sort_products",
    "paginate",
    "query_products",
    "Page",
]
