"""Query service that answers product list queries."""
from typing import Optional
from storefront.client.products import ProductAdapter, ProductFilters
from storefront.data.catalog import ProductCatalog
from storefront.data.schemas import ProductListResponse
from storefront.errors import ApiError
from storefront.querying.engine import query_products
from storefront.querying.params import ProductQuery
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


def filters_from_query(query: ProductQuery) -> ProductFilters:
    return ProductFilters(
        category=query.category,
        min_price=query.min_price,
        max_price=query.max_price,
        in_stock=query.in_stock,
        featured=query.featured,
        tags=sorted(query.tags),
        rating=query.min_rating,
        search=query.search or None,
        sort_by=query.sort_by,
        sort_order=query.sort_order if query.sort_by else None,
        page=query.page,
        limit=query.limit,
        exclude=query.exclude,
    )


class ProductQueryService:
    """
    Service for handling product list queries.
    Uses the remote API when an adapter is configured and falls back to the
    local catalogue when that call fails.
    """

    def __init__(self, catalog: ProductCatalog, adapter: Optional[ProductAdapter] = None):
        """
        Initialize the query service.

        Args:
            catalog: Local product catalogue (always available)
            adapter: Optional remote product adapter
        """
        self.catalog = catalog
        self.adapter = adapter

    def query_local(self, query: ProductQuery) -> ProductListResponse:
        return query_products(self.catalog.all(), query)

    async def query(self, query: ProductQuery) -> ProductListResponse:
        """
        Answer a product list query.

        Args:
            query: Parsed query parameters

        Returns:
            Paginated product list response
        """
        if self.adapter is None:
            return self.query_local(query)

        try:
            return await self.adapter.get_products(filters_from_query(query))
        except ApiError as e:
            logger.warning("Remote product query failed (%r); using local catalogue", e)
            return self.query_local(query)
