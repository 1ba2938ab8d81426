"""Wishlist routes for the calling session."""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from storefront.routes.cart import CartResponse, cart_response
from storefront.routes.dependencies import get_session_stores
from storefront.utils.session import SessionStores
from storefront.utils.wishlist import WishlistCandidate, WishlistItem

router = APIRouter(prefix="/api/wishlist", tags=["wishlist"])


class WishlistItemCreate(BaseModel):
    """Request model for saving a product to the wishlist."""
    product_id: str = Field(..., min_length=1)
    title: str
    price: float = Field(..., ge=0)
    sale_price: Optional[float] = Field(None, ge=0)
    image: str = ""
    short_description: str = ""
    category: Union[str, Dict[str, str]] = ""
    rating: float = Field(0.0, ge=0)


class WishlistItemResponse(BaseModel):
    id: str
    product_id: str
    title: str
    price: float
    sale_price: Optional[float] = None
    image: str
    short_description: str
    category: Union[str, Dict[str, Any]]
    rating: float
    added_at: datetime


class WishlistResponse(BaseModel):
    session_id: str
    items: List[WishlistItemResponse]
    count: int


def _item_response(item: WishlistItem) -> WishlistItemResponse:
    return WishlistItemResponse(**item.__dict__)


def wishlist_response(stores: SessionStores, items: Optional[List[WishlistItem]] = None) -> WishlistResponse:
    if items is None:
        items = stores.wishlist.query()
    return WishlistResponse(
        session_id=stores.session_id,
        items=[_item_response(item) for item in items],
        count=stores.wishlist.count(),
    )


@router.get("", response_model=WishlistResponse, summary="Get the session's wishlist")
def get_wishlist(
    stores: SessionStores = Depends(get_session_stores),
    search: Optional[str] = Query(None, description="Search in title and short description"),
    category: Optional[str] = Query(None, description="Category name, id or slug"),
    sort_by: str = Query("added", description="added, price, name or rating"),
    sort_order: str = Query("desc", description="asc or desc"),
):
    """List saved products; ``count`` is always the full wishlist size."""
    with stores.lock:
        items = stores.wishlist.query(search, category, sort_by, sort_order)
        return wishlist_response(stores, items)


@router.post("/items", response_model=WishlistResponse, summary="Save a product")
def add_item(item: WishlistItemCreate, stores: SessionStores = Depends(get_session_stores)):
    """Save a product; saving it again refreshes its details but keeps its added date."""
    with stores.lock:
        stores.wishlist.add(WishlistCandidate(**item.model_dump()))
        return wishlist_response(stores)


@router.get("/items/{product_id}", summary="Is a product in the wishlist")
def is_in_wishlist(product_id: str, stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        return {"product_id": product_id, "in_wishlist": stores.wishlist.is_in_wishlist(product_id)}


@router.delete("/items/{product_id}", response_model=WishlistResponse, summary="Remove a product")
def remove_item(product_id: str, stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        stores.wishlist.remove(product_id)
        return wishlist_response(stores)


@router.post("/clear", response_model=WishlistResponse, summary="Empty the wishlist")
def clear_wishlist(stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        stores.wishlist.clear()
        return wishlist_response(stores)


@router.get("/count", summary="Number of saved products")
def wishlist_count(stores: SessionStores = Depends(get_session_stores)):
    with stores.lock:
        return {"count": stores.wishlist.count()}


@router.post(
    "/items/{product_id}/move-to-cart",
    response_model=CartResponse,
    summary="Move a saved product into the cart"
)
def move_to_cart(product_id: str, stores: SessionStores = Depends(get_session_stores)):
    """Adds one unit at the saved effective price; unknown products leave both stores unchanged."""
    with stores.lock:
        stores.wishlist.move_to_cart(product_id, stores.cart)
        return cart_response(stores)
