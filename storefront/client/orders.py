"""Order adapter: order history, checkout and tracking calls."""
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, Field, model_validator

from storefront.client import endpoints
from storefront.client.api_client import ApiClient
from storefront.client.products import unwrap
from storefront.data.schemas import Pagination, _first, to_float, to_int
from storefront.errors import HttpError, NotFoundError
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

OrderStatus = Literal[
    "pending", "confirmed", "processing", "shipped",
    "delivered", "cancelled", "refunded", "returned",
]
PaymentStatus = Literal["pending", "paid", "failed", "refunded", "partially_refunded"]
ShippingStatus = Literal["pending", "shipped", "in_transit", "delivered", "returned"]


class Address(BaseModel):
    first_name: str = ""
    last_name: str = ""
    company: Optional[str] = None
    address1: str = ""
    address2: Optional[str] = None
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    phone: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "first_name": _first(data, "first_name", "firstName", default=""),
                "last_name": _first(data, "last_name", "lastName", default=""),
                "company": data.get("company"),
                "address1": _first(data, "address_1", "address1", default=""),
                "address2": _first(data, "address_2", "address2"),
                "city": data.get("city") or "",
                "state": data.get("state") or "",
                "postal_code": str(_first(data, "postal_code", "postalCode", default="")),
                "country": data.get("country") or "",
                "phone": data.get("phone"),
            }
        return data


class OrderItem(BaseModel):
    id: str = ""
    product_id: str = ""
    variant_id: Optional[str] = None
    product_name: str = ""
    product_sku: str = ""
    product_image: Optional[str] = None
    quantity: int = 0
    unit_price: float = 0.0
    total_price: float = 0.0
    attributes: Optional[Dict[str, str]] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            variant_id = _first(data, "variant_id", "variantId")
            return {
                "id": str(data.get("id") or ""),
                "product_id": str(_first(data, "product_id", "productId", default="")),
                "variant_id": str(variant_id) if variant_id is not None else None,
                "product_name": _first(data, "product_name", "productName", default=""),
                "product_sku": str(_first(data, "product_sku", "productSku", default="")),
                "product_image": _first(data, "product_image", "productImage"),
                "quantity": to_int(data.get("quantity")),
                "unit_price": to_float(_first(data, "unit_price", "unitPrice")),
                "total_price": to_float(_first(data, "total_price", "totalPrice")),
                "attributes": data.get("attributes"),
            }
        return data


class ShippingDetails(BaseModel):
    method: str = ""
    cost: float = 0.0
    estimated_delivery: Optional[str] = None
    address: Address = Field(default_factory=Address)
    carrier: Optional[str] = None
    tracking_number: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "method": data.get("method") or "",
                "cost": to_float(data.get("cost")),
                "estimated_delivery": _first(data, "estimated_delivery", "estimatedDelivery"),
                "address": data.get("address") or {},
                "carrier": data.get("carrier"),
                "tracking_number": _first(data, "tracking_number", "trackingNumber"),
            }
        return data


class BillingDetails(BaseModel):
    address: Address = Field(default_factory=Address)
    payment_method: str = ""

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "address": data.get("address") or {},
                "payment_method": _first(data, "payment_method", "paymentMethod", default=""),
            }
        return data


class PaymentDetails(BaseModel):
    method: str = ""
    transaction_id: Optional[str] = None
    amount: float = 0.0
    currency: str = "USD"
    gateway: str = ""
    gateway_transaction_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "method": data.get("method") or "",
                "transaction_id": _first(data, "transaction_id", "transactionId"),
                "amount": to_float(data.get("amount")),
                "currency": data.get("currency") or "USD",
                "gateway": data.get("gateway") or "",
                "gateway_transaction_id": _first(
                    data, "gateway_transaction_id", "gatewayTransactionId"
                ),
                "metadata": data.get("metadata"),
            }
        return data


class OrderTotals(BaseModel):
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    currency: str = "USD"

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            for key in ("subtotal", "tax", "shipping", "discount", "total"):
                data[key] = to_float(data.get(key))
            data["currency"] = data.get("currency") or "USD"
        return data


class OrderStatusHistory(BaseModel):
    id: str = ""
    status: OrderStatus
    note: Optional[str] = None
    created_at: Optional[str] = None
    created_by: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "id": str(data.get("id") or ""),
                "status": data.get("status") or "pending",
                "note": data.get("note"),
                "created_at": _first(data, "created_at", "createdAt"),
                "created_by": _first(data, "created_by", "createdBy"),
            }
        return data


class TrackingEvent(BaseModel):
    status: str = ""
    description: str = ""
    location: Optional[str] = None
    timestamp: Optional[str] = None


class TrackingInfo(BaseModel):
    carrier: str = ""
    tracking_number: str = ""
    tracking_url: Optional[str] = None
    events: List[TrackingEvent] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if isinstance(data, dict):
            return {
                "carrier": data.get("carrier") or "",
                "tracking_number": _first(data, "tracking_number", "trackingNumber", default=""),
                "tracking_url": _first(data, "tracking_url", "trackingUrl"),
                "events": data.get("events") or [],
            }
        return data


class Order(BaseModel):
    """
    A customer order as returned by the orders API.

    Like products, raw records may mix snake_case and camelCase and carry
    numbers as strings; nested blocks missing from the record get empty
    defaults rather than failing validation.
    """
    id: str
    order_number: str = ""
    status: OrderStatus = "pending"
    payment_status: PaymentStatus = "pending"
    shipping_status: ShippingStatus = "pending"
    customer_id: str = ""
    customer_email: str = ""
    customer_name: str = ""
    items: List[OrderItem] = Field(default_factory=list)
    shipping: ShippingDetails = Field(default_factory=ShippingDetails)
    billing: BillingDetails = Field(default_factory=BillingDetails)
    payment: PaymentDetails = Field(default_factory=PaymentDetails)
    totals: OrderTotals = Field(default_factory=OrderTotals)
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    status_history: List[OrderStatusHistory] = Field(default_factory=list)
    tracking: Optional[TrackingInfo] = None

    @model_validator(mode="before")
    @classmethod
    def normalize(cls, data):
        if not isinstance(data, dict):
            return data
        return {
            "id": str(data.get("id") or ""),
            "order_number": str(_first(data, "order_number", "orderNumber", default="")),
            "status": data.get("status") or "pending",
            "payment_status": _first(data, "payment_status", "paymentStatus", default="pending"),
            "shipping_status": _first(data, "shipping_status", "shippingStatus", default="pending"),
            "customer_id": str(_first(data, "customer_id", "customerId", default="")),
            "customer_email": _first(data, "customer_email", "customerEmail", default=""),
            "customer_name": _first(data, "customer_name", "customerName", default=""),
            "items": data.get("items") or [],
            "shipping": data.get("shipping") or {},
            "billing": data.get("billing") or {},
            "payment": data.get("payment") or {},
            "totals": data.get("totals") or {},
            "notes": data.get("notes"),
            "created_at": _first(data, "created_at", "createdAt"),
            "updated_at": _first(data, "updated_at", "updatedAt"),
            "status_history": _first(data, "status_history", "statusHistory", default=[]),
            "tracking": data.get("tracking") or None,
        }


class OrderListResponse(BaseModel):
    data: List[Order]
    pagination: Pagination
    message: Optional[str] = None
    status: int = 200


@dataclass
class OrderFilters:
    status: Optional[str] = None
    payment_status: Optional[str] = None
    shipping_status: Optional[str] = None
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    customer_id: Optional[str] = None
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    page: Optional[int] = None
    limit: Optional[int] = None


def build_order_query(filters: OrderFilters) -> str:
    """Encode only the filters that are set; ``search`` travels as ``q``."""
    names = {"search": "q"}
    params = {
        names.get(key, key): value
        for key, value in filters.__dict__.items()
        if value
    }
    return urlencode(params)


def transform_order(data: Dict[str, Any]) -> Order:
    return Order.model_validate(data)


def transform_order_list(response: Dict[str, Any]) -> OrderListResponse:
    response = response or {}
    pagination = response.get("pagination") or {}
    return OrderListResponse(
        data=[transform_order(item) for item in response.get("data") or []],
        pagination=Pagination(
            page=pagination.get("page") or 1,
            limit=pagination.get("limit") or 20,
            total=pagination.get("total") or 0,
            totalPages=pagination.get("totalPages") or pagination.get("total_pages") or 0,
        ),
        message=response.get("message"),
        status=response.get("status") or 200,
    )


def transform_tracking_info(data: Dict[str, Any]) -> TrackingInfo:
    return TrackingInfo.model_validate(data)


class OrderAdapter:
    """Customer order calls on top of an ``ApiClient``."""

    def __init__(self, client: Optional[ApiClient] = None):
        self.client = client or ApiClient()

    async def get_customer_orders(self, filters: Optional[OrderFilters] = None) -> OrderListResponse:
        query = build_order_query(filters or OrderFilters())
        response = await self.client.get(endpoints.orders.me(query))
        return transform_order_list(response)

    async def get_order(self, order_id: str) -> Order:
        """
        Fetch one order.

        Raises:
            NotFoundError: the API answered 404
        """
        try:
            response = await self.client.get(endpoints.orders.detail(order_id))
        except HttpError as e:
            if e.status == 404:
                raise NotFoundError("Order not found", data=e.data) from e
            raise
        return transform_order(unwrap(response))

    async def create_order(self, order: Dict[str, Any]) -> Order:
        """
        Place an order.

        Args:
            order: ``items`` (product id, optional variant id, quantity, unit
                price), ``shipping``, ``billing`` and ``payment`` blocks, and
                optional ``notes`` and ``couponCode``
        """
        response = await self.client.post(endpoints.orders.create(), body=order)
        created = transform_order(unwrap(response))
        logger.info("Created order %s (%s)", created.id, created.order_number)
        return created

    async def cancel_order(self, order_id: str, reason: Optional[str] = None) -> Order:
        response = await self.client.post(endpoints.orders.cancel(order_id), body={"reason": reason})
        return transform_order(unwrap(response))

    async def track_order(self, order_id: str) -> TrackingInfo:
        response = await self.client.get(endpoints.orders.track(order_id))
        return transform_tracking_info(unwrap(response))

    async def reorder(self, order_id: str) -> Order:
        """Create a new order from the lines of an existing one."""
        response = await self.client.post(endpoints.orders.reorder(order_id))
        return transform_order(unwrap(response))
