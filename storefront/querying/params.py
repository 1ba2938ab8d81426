"""Product list query parameters."""
import math
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional

from storefront.config import settings

SORT_KEYS = ("name", "price", "rating", "created", "updated")
SORT_ORDERS = ("asc", "desc")


def parse_bound(value: Any) -> Optional[float]:
    """Parse a price bound; anything that is not a finite number means no bound."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_flag(value: Any) -> Optional[bool]:
    """Parse a tri-state query flag: absent -> None, "true"/"1" -> True, else False."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1")


def parse_tags(value: Any) -> FrozenSet[str]:
    if not value:
        return frozenset()
    if isinstance(value, str):
        value = value.split(",")
    return frozenset(tag.strip().lower() for tag in value if tag and tag.strip())


def parse_positive_int(value: Any, default: int) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(number, 1)


@dataclass(frozen=True)
class ProductQuery:
    """
    One product list request.

    Built from a query-string-like mapping with ``from_params``; parsing never
    raises, invalid values fall back to "no filter" or to the defaults.
    """
    search: str = ""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    category: Optional[str] = None
    tags: FrozenSet[str] = field(default_factory=frozenset)
    featured: Optional[bool] = None
    min_rating: Optional[float] = None
    exclude: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: str = "asc"
    page: int = 1
    limit: int = 20

    @classmethod
    def from_params(cls, params: Mapping[str, Any], default_limit: Optional[int] = None) -> "ProductQuery":
        """
        Parse request parameters.

        Args:
            params: Mapping of raw parameter values (e.g. request query params)
            default_limit: Page size used when ``limit`` is missing or invalid

        Returns:
            ProductQuery
        """
        if default_limit is None:
            default_limit = settings.default_page_size

        # No sort_by keeps catalogue order; an unrecognised one sorts by name
        sort_by = params.get("sort_by") or None
        if sort_by is not None and sort_by not in SORT_KEYS:
            sort_by = "name"
        sort_order = params.get("sort_order")
        sort_order = sort_order if sort_order in SORT_ORDERS else "asc"

        return cls(
            search=params.get("q") or params.get("search") or "",
            min_price=parse_bound(params.get("min_price")),
            max_price=parse_bound(params.get("max_price")),
            in_stock=parse_flag(params.get("in_stock")),
            category=params.get("category") or None,
            tags=parse_tags(params.get("tags")),
            featured=parse_flag(params.get("featured")),
            min_rating=parse_bound(params.get("rating")),
            exclude=params.get("exclude") or None,
            sort_by=sort_by,
            sort_order=sort_order,
            page=parse_positive_int(params.get("page"), 1),
            limit=parse_positive_int(params.get("limit"), default_limit),
        )
