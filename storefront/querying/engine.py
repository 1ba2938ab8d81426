"""Product query engine: filtering, searching, sorting and pagination."""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from storefront.data.schemas import Pagination, Product, ProductListResponse
from storefront.querying.params import ProductQuery

T = TypeVar("T")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def effective_price(item: Any) -> float:
    """Price a shopper actually pays: the sale price when set, else the base price."""
    sale_price = getattr(item, "sale_price", None)
    if sale_price is not None:
        return float(sale_price)
    return float(getattr(item, "price", 0) or 0)


def timestamp_key(value: Optional[datetime]) -> float:
    """Sortable timestamp; missing values sort as the epoch, naive values as UTC."""
    if value is None:
        value = EPOCH
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def stable_sort(items: Iterable[T], key: Callable[[T], Any], descending: bool = False) -> List[T]:
    # sorted() keeps equal elements in input order even with reverse=True
    return sorted(items, key=key, reverse=descending)


def _matches_search(product: Product, term: str) -> bool:
    term = term.lower()
    if term in product.title.lower() or term in product.description.lower():
        return True
    return any(term in tag.lower() for tag in product.tags)


def _matches_category(product: Product, category: str) -> bool:
    if product.category is None:
        return False
    return product.category.id == category or product.category.slug == category


def _matches_tags(product: Product, tags) -> bool:
    return any(tag.lower() in tags for tag in product.tags)


def filter_products(products: Sequence[Product], query: ProductQuery) -> List[Product]:
    """
    Apply every active filter of ``query`` (logical AND).

    Args:
        products: Full product collection
        query: Parsed query parameters

    Returns:
        Matching products, in input order
    """
    result = list(products)

    if query.search:
        result = [p for p in result if _matches_search(p, query.search)]

    if query.min_price is not None:
        result = [p for p in result if effective_price(p) >= query.min_price]

    if query.max_price is not None:
        result = [p for p in result if effective_price(p) <= query.max_price]

    if query.in_stock is not None:
        if query.in_stock:
            result = [p for p in result if p.stock > 0]
        else:
            result = [p for p in result if p.stock == 0]

    if query.category:
        result = [p for p in result if _matches_category(p, query.category)]

    if query.tags:
        result = [p for p in result if _matches_tags(p, query.tags)]

    if query.featured is not None:
        result = [p for p in result if p.featured == query.featured]

    if query.min_rating is not None:
        result = [p for p in result if p.average_rating >= query.min_rating]

    if query.exclude:
        result = [p for p in result if p.id != query.exclude]

    return result


PRODUCT_SORT_KEYS = {
    "name": lambda p: p.title.lower(),
    "price": effective_price,
    "rating": lambda p: p.average_rating or 0.0,
    "created": lambda p: timestamp_key(p.created_at),
    "updated": lambda p: timestamp_key(p.updated_at),
}


def sort_products(
    products: Sequence[Product],
    sort_by: Optional[str] = "name",
    sort_order: str = "asc",
) -> List[Product]:
    """Stable sort by ``sort_by``; unknown keys fall back to the title."""
    key = PRODUCT_SORT_KEYS.get(sort_by or "name", PRODUCT_SORT_KEYS["name"])
    return stable_sort(products, key, descending=sort_order == "desc")


@dataclass
class Page:
    """One page of results plus the pagination totals."""
    items: List[Any]
    page: int
    limit: int
    total: int
    total_pages: int

    def pagination(self) -> Pagination:
        return Pagination(
            page=self.page,
            limit=self.limit,
            total=self.total,
            totalPages=self.total_pages,
        )


def paginate(items: Sequence[T], page: int = 1, limit: int = 20) -> Page:
    """Slice out a 1-based page; pages past the end are empty."""
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    total = len(items)
    start = (page - 1) * limit
    return Page(
        items=list(items[start:start + limit]),
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit),
    )


def query_products(products: Sequence[Product], query: ProductQuery) -> ProductListResponse:
    """
    Run a full product list query: filter, sort, then paginate.

    Without a ``sort_by`` the catalogue order is kept.
    """
    result = filter_products(products, query)
    if query.sort_by:
        result = sort_products(result, query.sort_by, query.sort_order)
    page = paginate(result, query.page, query.limit)
    return ProductListResponse(
        data=page.items,
        pagination=page.pagination(),
        message="Products retrieved successfully",
        status=200,
    )
