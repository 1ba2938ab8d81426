"""Public product routes: list query surface and lookups."""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from storefront.data.catalog import ProductCatalog
from storefront.data.schemas import ProductListResponse
from storefront.querying.params import ProductQuery
from storefront.querying.service import ProductQueryService
from storefront.routes.dependencies import get_catalog, get_query_service

router = APIRouter(prefix="/api/products", tags=["products"])


def product_not_found() -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"message": "Product not found", "status": 404},
    )


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Get products with search, filters, sorting and pagination"
)
async def list_products(
    request: Request,
    service: ProductQueryService = Depends(get_query_service),
    q: Optional[str] = Query(None, description="Search in title, description and tags"),
    search: Optional[str] = Query(None, description="Alias of q"),
    min_price: Optional[str] = Query(None, description="Minimum effective price (ignored if not a number)"),
    max_price: Optional[str] = Query(None, description="Maximum effective price (ignored if not a number)"),
    in_stock: Optional[str] = Query(None, description="true/1 for in stock, anything else for sold out"),
    category: Optional[str] = Query(None, description="Category id or slug"),
    tags: Optional[str] = Query(None, description="Comma-separated tags (product must have at least one)"),
    featured: Optional[str] = Query(None, description="Filter by featured flag"),
    rating: Optional[str] = Query(None, description="Minimum average rating"),
    exclude: Optional[str] = Query(None, description="Product id to leave out"),
    sort_by: Optional[str] = Query(None, description="name, price, rating, created or updated"),
    sort_order: Optional[str] = Query(None, description="asc or desc"),
    page: Optional[str] = Query(None, description="Page number (1-indexed)"),
    limit: Optional[str] = Query(None, description="Number of items per page"),
):
    """
    Query the catalogue.

    All filters combine with AND. Invalid numbers are treated as "no filter"
    instead of failing the request, and an empty result is a normal 200.
    """
    query = ProductQuery.from_params(request.query_params)
    return await service.query(query)


@router.get("/categories", summary="Get product categories")
def list_categories(catalog: ProductCatalog = Depends(get_catalog)):
    categories = catalog.categories()
    return {
        "data": [category.model_dump(mode="json") for category in categories],
        "status": 200,
    }


@router.get("/slug/{slug}", summary="Get product by slug")
def get_product_by_slug(slug: str, catalog: ProductCatalog = Depends(get_catalog)):
    product = catalog.get(slug)
    if product is None:
        return product_not_found()
    return {"data": product.model_dump(mode="json"), "status": 200}


@router.get("/{product_id}", summary="Get product by ID or slug")
def get_product(product_id: str, catalog: ProductCatalog = Depends(get_catalog)):
    product = catalog.get(product_id)
    if product is None:
        return product_not_found()
    return {"data": product.model_dump(mode="json"), "status": 200}
