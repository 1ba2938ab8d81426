"""Cart routes for the calling session."""
from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from storefront.routes.dependencies import get_session_stores
from storefront.utils.cart import CartCandidate
from storefront.utils.session import SessionStores

router = APIRouter(prefix="/api/cart", tags=["cart"])


class CartItemCreate(BaseModel):
    """Request model for adding a product to the cart."""
    product_id: str = Field(..., min_length=1, description="Product to add")
    title: str = Field(..., description="Product title at the time of adding")
    price: float = Field(..., ge=0, description="Unit price captured at the time of adding")
    quantity: int = Field(1, ge=1, description="Quantity to add")
    image: Optional[str] = Field(None, description="Product image URL")


class CartItemUpdate(BaseModel):
    """Request model for setting a line's quantity (0 or less removes it)."""
    quantity: int = Field(..., description="New quantity")


class CartItemResponse(BaseModel):
    """Cart item response model."""
    id: str
    product_id: str
    title: str
    price: float
    quantity: int
    subtotal: float
    image: Optional[str] = None


class CartResponse(BaseModel):
    """Cart response model."""
    session_id: str
    items: List[CartItemResponse]
    item_count: int
    total: float
    total_formatted: str


def cart_response(stores: SessionStores) -> CartResponse:
    summary = stores.cart.summary()
    return CartResponse(session_id=stores.session_id, **summary)


@router.get("", response_model=CartResponse, summary="Get the session's cart")
def get_cart(stores: SessionStores = Depends(get_session_stores)):
    """
    Get the current session's shopping cart.

    Returns all items in the cart, including quantities, prices, and totals.
    """
    with stores.lock:
        return cart_response(stores)


@router.post("/items", response_model=CartResponse, summary="Add a product to the cart")
def add_item(item: CartItemCreate, stores: SessionStores = Depends(get_session_stores)):
    """Add a product; adding one that is already in the cart increases its quantity."""
    with stores.lock:
        stores.cart.add(CartCandidate(**item.model_dump()))
        return cart_response(stores)


@router.patch("/items/{product_id}", response_model=CartResponse, summary="Set a line's quantity")
def update_item(
    product_id: str,
    update: CartItemUpdate,
    stores: SessionStores = Depends(get_session_stores)
):
    with stores.lock:
        stores.cart.update(product_id, update.quantity)
        return cart_response(stores)


@router.delete("/items/{product_id}", response_model=CartResponse, summary="Remove a product from the cart")
def remove_item(product_id: str, stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        stores.cart.remove(product_id)
        return cart_response(stores)


@router.post("/clear", response_model=CartResponse, summary="Empty the cart")
def clear_cart(stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        stores.cart.clear()
        return cart_response(stores)


@router.get("/count", summary="Number of units in the cart")
def cart_count(stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        return {"count": stores.cart.count()}


@router.get("/total", summary="Cart total")
def cart_total(stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        total = stores.cart.total()
    return {"total": total, "total_formatted": f"${total:.2f}"}
