"""
Pydantic schemas for order API requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

OrderStatusValue = Literal[
    "pending", "confirmed", "preparing", "ready", "delivered", "cancelled"
]


class OrderItemCreateSchema(BaseModel):
    """A single cart line in an order creation request."""

    menu_item_id: int
    quantity: int = Field(..., ge=1, le=99)
    special_instructions: str = Field(default="", max_length=500)


class OrderCreateRequest(BaseModel):
    """
    Request body for POST /api/v1/orders.

    restaurant_id may be omitted when the tenant is resolved from the
    subdomain or X-Restaurant-Slug header.
    """

    restaurant_id: UUID | None = None
    location_id: UUID | None = None
    items: list[OrderItemCreateSchema] = Field(..., min_length=1)
    delivery_address: str = Field(default="", max_length=500)
    special_instructions: str = Field(default="", max_length=1000)


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatusValue


class OrderItemResponseSchema(BaseModel):
    """A line item in an order response."""

    id: int
    menu_item_id: int | None
    item_name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    special_instructions: str


class OrderResponse(BaseModel):
    """Order with its line items."""

    id: int
    restaurant_id: UUID
    location_id: UUID | None
    user_id: UUID
    status: str
    total_amount: Decimal
    delivery_address: str
    special_instructions: str
    items: list[OrderItemResponseSchema]
    created_at: datetime
    updated_at: datetime
