from pydantic import BaseModel, Field
from typing import Literal, Optional
from decimal import Decimal
from datetime import datetime


class InboundItemSchema(BaseModel):
    """Body for both create and full update; a changed inbound_order_id moves the item."""

    inbound_order_id: int = Field(gt=0)
    product_id: int = Field(gt=0)
    lot_id: int = Field(gt=0)
    location_id: Optional[int] = Field(None, gt=0)
    qty: int = Field(gt=0, description="Received quantity")
    invoice_price: Optional[Decimal] = Field(None, gt=0)
    currency: Optional[Literal["KRW", "THB"]] = None
    remark: Optional[str] = Field(None, max_length=500)


class InboundItemOutSchema(BaseModel):
    id: int
    inbound_order_id: int
    product_id: int
    lot_id: int
    location_id: Optional[int]
    qty: int
    invoice_price: Optional[Decimal]
    currency: Optional[str]
    remark: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
