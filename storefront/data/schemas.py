"""Product schemas for validation and raw-record normalisation."""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator


def _first(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-empty value among ``keys`` (snake_case or camelCase)."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return default


def to_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def to_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


class ProductImage(BaseModel):
    """One image of a product, ordered by ``position``."""
    id: str = ""
    url: str = ""
    alt: Optional[str] = None
    position: int = 0
    thumbnail: Optional[str] = None
    medium: Optional[str] = None
    large: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, str):
            return {"url": data}
        if isinstance(data, dict):
            data = dict(data)
            data["id"] = str(data.get("id") or "")
            data["position"] = to_int(data.get("position"), 0)
        return data


class ProductCategory(BaseModel):
    """Category a product belongs to."""
    id: str = ""
    name: str = ""
    slug: str = ""
    parent_id: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    product_count: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, str):
            return {"id": data, "name": data, "slug": data}
        if isinstance(data, dict):
            return {
                "id": str(data.get("id") or ""),
                "name": data.get("name") or "",
                "slug": data.get("slug") or "",
                "parent_id": _first(data, "parent_id", "parentId"),
                "description": data.get("description"),
                "image": data.get("image"),
                "product_count": to_int(_first(data, "product_count", "productCount"), None),
            }
        return data


class ProductAttribute(BaseModel):
    name: str
    value: str
    type: Literal["text", "number", "boolean", "select"] = "text"

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            data["value"] = "" if data.get("value") is None else str(data["value"])
            data["type"] = data.get("type") or "text"
        return data


class ProductVariant(BaseModel):
    id: str = ""
    name: str = ""
    price: float = 0.0
    stock: int = 0
    sku: str = ""
    attributes: List[ProductAttribute] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            data["id"] = str(data.get("id") or "")
            data["price"] = to_float(data.get("price"))
            data["stock"] = to_int(data.get("stock"))
            data["attributes"] = data.get("attributes") or []
        return data


class ProductReview(BaseModel):
    id: str = ""
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    rating: int = 0
    title: Optional[str] = None
    comment: str = ""
    verified: bool = False
    helpful: int = 0
    created_at: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            user_id = _first(data, "user_id", "userId")
            return {
                "id": str(data.get("id") or ""),
                "user_id": str(user_id) if user_id is not None else None,
                "user_name": _first(data, "user_name", "userName"),
                "rating": to_int(data.get("rating")),
                "title": data.get("title"),
                "comment": data.get("comment") or "",
                "verified": bool(data.get("verified")),
                "helpful": to_int(data.get("helpful")),
                "created_at": _first(data, "created_at", "createdAt"),
            }
        return data


class ProductDimensions(BaseModel):
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    unit: Literal["cm", "in"] = "cm"

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "length": to_float(data.get("length")),
                "width": to_float(data.get("width")),
                "height": to_float(data.get("height")),
                "unit": data.get("unit") or "cm",
            }
        return data


class Product(BaseModel):
    """
    A product record as served by the catalogue.

    Raw records may come in snake_case or camelCase and with numbers encoded
    as strings; they are normalised before validation so every consumer sees
    the same shape. ``sale_price`` wins over ``price`` wherever an effective
    price is needed.
    """
    id: str
    sku: str = ""
    title: str = ""
    slug: str = ""
    description: str = ""
    short_description: Optional[str] = None
    price: float = 0.0
    sale_price: Optional[float] = None
    stock: int = 0
    low_stock_threshold: Optional[int] = None
    images: List[ProductImage] = Field(default_factory=list)
    category: Optional[ProductCategory] = None
    tags: List[str] = Field(default_factory=list)
    attributes: List[ProductAttribute] = Field(default_factory=list)
    variants: List[ProductVariant] = Field(default_factory=list)
    reviews: List[ProductReview] = Field(default_factory=list)
    average_rating: float = 0.0
    review_count: int = 0
    status: Literal["draft", "published", "archived"] = "draft"
    featured: bool = False
    weight: Optional[float] = None
    dimensions: Optional[ProductDimensions] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if not isinstance(data, dict):
            return data
        sale_price = _first(data, "sale_price", "salePrice")
        weight = data.get("weight")
        return {
            "id": str(data.get("id") or ""),
            "sku": data.get("sku") or "",
            "title": _first(data, "title", "name", default=""),
            "slug": data.get("slug") or "",
            "description": data.get("description") or "",
            "short_description": _first(data, "short_description", "shortDescription"),
            "price": to_float(data.get("price")),
            "sale_price": to_float(sale_price, None) if sale_price else None,
            "stock": to_int(data.get("stock")),
            "low_stock_threshold": to_int(
                _first(data, "low_stock_threshold", "lowStockThreshold"), None
            ),
            "images": data.get("images") or [],
            "category": data.get("category"),
            "tags": [str(tag) for tag in data.get("tags") or []],
            "attributes": data.get("attributes") or [],
            "variants": data.get("variants") or [],
            "reviews": data.get("reviews") or [],
            "average_rating": to_float(_first(data, "average_rating", "averageRating")),
            "review_count": to_int(_first(data, "review_count", "reviewCount")),
            "status": data.get("status") or "draft",
            "featured": bool(data.get("featured")),
            "weight": to_float(weight, None) if weight else None,
            "dimensions": data.get("dimensions"),
            "seo_title": _first(data, "seo_title", "seoTitle"),
            "seo_description": _first(data, "seo_description", "seoDescription"),
            "created_at": to_datetime(_first(data, "created_at", "createdAt")),
            "updated_at": to_datetime(_first(data, "updated_at", "updatedAt")),
        }


class ProductCreate(BaseModel):
    """Schema for creating a new product from the admin panel."""
    sku: str = Field(..., min_length=1, max_length=100, description="Stock Keeping Unit")
    title: str = Field(..., min_length=1, max_length=255, description="Product title")
    slug: Optional[str] = Field(None, max_length=255, description="URL slug (derived from title if omitted)")
    description: str = Field("", description="Product description")
    short_description: Optional[str] = None
    price: float = Field(..., gt=0, description="Base price")
    sale_price: Optional[float] = Field(None, gt=0, description="Discounted price")
    stock: int = Field(0, ge=0, description="Available stock quantity")
    low_stock_threshold: Optional[int] = Field(10, ge=0, description="Alert threshold for low stock")
    category: Optional[Union[str, Dict[str, Any]]] = None
    tags: List[str] = Field(default_factory=list)
    images: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)
    status: Literal["draft", "published", "archived"] = "draft"
    featured: bool = False

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v):
        return [tag.strip() for tag in v if tag and tag.strip()]


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional)."""
    sku: Optional[str] = Field(None, min_length=1, max_length=100)
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    sale_price: Optional[float] = Field(None, gt=0)
    stock: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    category: Optional[Union[str, Dict[str, Any]]] = None
    tags: Optional[List[str]] = None
    images: Optional[List[Union[str, Dict[str, Any]]]] = None
    status: Optional[Literal["draft", "published", "archived"]] = None
    featured: Optional[bool] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class ProductListResponse(BaseModel):
    """Envelope of the product list query surface."""
    data: List[Product]
    pagination: Pagination
    message: Optional[str] = None
    status: int = 200
