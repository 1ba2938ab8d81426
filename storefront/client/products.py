"""Product adapter: turns API responses into ``Product`` models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from storefront.client import endpoints
from storefront.client.api_client import ApiClient
from storefront.data.schemas import Pagination, Product, ProductCategory, ProductListResponse
from storefront.errors import ApiError, HttpError, NotFoundError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ProductFilters:
    """Caller-side product filters, encoded into the list query string."""
    category: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    featured: Optional[bool] = None
    tags: List[str] = field(default_factory=list)
    rating: Optional[float] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None
    exclude: Optional[str] = None


def _encode_flag(value: bool) -> str:
    return "true" if value else "false"


def build_product_query(filters: ProductFilters) -> str:
    """Encode only the filters that are set."""
    params: Dict[str, Any] = {}

    if filters.category:
        params["category"] = filters.category
    if filters.min_price is not None:
        params["min_price"] = filters.min_price
    if filters.max_price is not None:
        params["max_price"] = filters.max_price
    if filters.in_stock is not None:
        params["in_stock"] = _encode_flag(filters.in_stock)
    if filters.featured is not None:
        params["featured"] = _encode_flag(filters.featured)
    if filters.tags:
        params["tags"] = ",".join(filters.tags)
    if filters.rating:
        params["rating"] = filters.rating
    if filters.search:
        params["q"] = filters.search
    if filters.sort_by:
        params["sort_by"] = filters.sort_by
    if filters.sort_order:
        params["sort_order"] = filters.sort_order
    if filters.page:
        params["page"] = filters.page
    if filters.limit:
        params["limit"] = filters.limit
    if filters.exclude:
        params["exclude"] = filters.exclude

    return urlencode(params)


def transform_product(data: Dict[str, Any]) -> Product:
    return Product.model_validate(data)


def unwrap(response: Any) -> Any:
    """Payload of a ``{data: ...}`` envelope; bare bodies are returned as is."""
    if isinstance(response, dict) and "data" in response:
        return response["data"]
    return response


def transform_product_list(response: Dict[str, Any]) -> ProductListResponse:
    """Normalise a paginated response; missing pagination fields get defaults."""
    response = response or {}
    pagination = response.get("pagination") or {}
    return ProductListResponse(
        data=[transform_product(item) for item in response.get("data") or []],
        pagination=Pagination(
            page=pagination.get("page") or 1,
            limit=pagination.get("limit") or 20,
            total=pagination.get("total") or 0,
            totalPages=pagination.get("totalPages") or pagination.get("total_pages") or 0,
        ),
        message=response.get("message"),
        status=response.get("status") or 200,
    )


class ProductAdapter:
    """Product API calls on top of an ``ApiClient``."""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    async def get_products(self, filters: Optional[ProductFilters] = None) -> ProductListResponse:
        query = build_product_query(filters or ProductFilters())
        response = await self.client.get(endpoints.products.list(query))
        return transform_product_list(response)

    async def get_product(self, product_id: str) -> Product:
        """
        Fetch one product by id (the local routes also accept a slug).

        Raises:
            NotFoundError: the API answered 404
        """
        try:
            response = await self.client.get(endpoints.products.detail(product_id))
        except HttpError as e:
            if e.status == 404:
                raise NotFoundError("Product not found", data=e.data) from e
            raise
        return transform_product(unwrap(response))

    async def get_product_by_slug(self, slug: str) -> Product:
        """Look a product up by slug, falling back to the detail route."""
        try:
            response = await self.client.get(endpoints.products.by_slug(slug))
        except ApiError as e:
            logger.info("Slug lookup for '%s' failed (%r); trying the detail route", slug, e)
            return await self.get_product(slug)
        return transform_product(unwrap(response))

    async def search_products(
        self, query: str, filters: Optional[ProductFilters] = None
    ) -> ProductListResponse:
        filters = filters or ProductFilters()
        search_filters = ProductFilters(**{**filters.__dict__, "search": query})
        response = await self.client.get(endpoints.products.search(build_product_query(search_filters)))
        return transform_product_list(response)

    async def get_categories(self) -> List[ProductCategory]:
        response = await self.client.get(endpoints.products.categories())
        return [ProductCategory.model_validate(item) for item in (response or {}).get("data") or []]

    async def create_product(self, product: Dict[str, Any]) -> Product:
        """Admin: create a product from a ``ProductCreate``-shaped payload."""
        response = await self.client.post(endpoints.products.create(), body=product)
        return transform_product(unwrap(response))

    async def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        response = await self.client.put(endpoints.products.update(product_id), body=updates)
        return transform_product(unwrap(response))

    async def delete_product(self, product_id: str):
        await self.client.delete(endpoints.products.delete(product_id))
