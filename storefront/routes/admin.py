"""Admin routes for product management."""
from fastapi import APIRouter, Depends, HTTPException, status
from storefront.data.catalog import ProductCatalog
from storefront.data.schemas import Product, ProductCreate, ProductUpdate
from storefront.routes.dependencies import get_catalog
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin/products", tags=["admin"])


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product in the catalogue"
)
def create_product(
    product: ProductCreate,
    catalog: ProductCatalog = Depends(get_catalog)
):
    """Create a new product."""
    # Check if SKU already exists
    if catalog.get_by_sku(product.sku):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Product with SKU '{product.sku}' already exists"
        )

    created = catalog.create(product)
    logger.info("Created product %s (%s)", created.id, created.sku)
    return created


@router.put(
    "/{product_id}",
    response_model=Product,
    summary="Update a product",
    description="Update an existing product by ID"
)
def update_product(
    product_id: str,
    product_update: ProductUpdate,
    catalog: ProductCatalog = Depends(get_catalog)
):
    """Update a product."""
    existing = catalog.get(product_id)
    if existing is None or existing.id != product_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )

    # Check if SKU is being updated and if it conflicts
    if product_update.sku and product_update.sku != existing.sku:
        if catalog.get_by_sku(product_update.sku):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Product with SKU '{product_update.sku}' already exists"
            )

    return catalog.update(product_id, product_update)


@router.patch(
    "/{product_id}",
    response_model=Product,
    summary="Partially update a product",
    description="Partially update an existing product by ID (alias for PUT)"
)
def patch_product(
    product_id: str,
    product_update: ProductUpdate,
    catalog: ProductCatalog = Depends(get_catalog)
):
    """Partially update a product (same as PUT)."""
    return update_product(product_id, product_update, catalog)


@router.delete(
    "/{product_id}",
    summary="Delete a product",
    description="Remove a product from the catalogue"
)
def delete_product(
    product_id: str,
    catalog: ProductCatalog = Depends(get_catalog)
):
    """Delete a product."""
    if not catalog.delete(product_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found"
        )
    logger.info("Deleted product %s", product_id)
    return {"message": "Product deleted", "status": 200}
