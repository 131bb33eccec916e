from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class OutboundItemSchema(BaseModel):
    outbound_order_id: int = Field(gt=0)
    product_id: int = Field(gt=0)
    lot_id: int = Field(gt=0)
    location_id: Optional[int] = Field(None, gt=0)
    qty: int = Field(gt=0)
    box_type: Optional[str] = Field(None, max_length=80)
    box_count: int = Field(0, ge=0)
    remark: Optional[str] = Field(None, max_length=500)


class OutboundItemOutSchema(BaseModel):
    id: int
    outbound_order_id: int
    product_id: int
    lot_id: int
    location_id: Optional[int]
    qty: int
    box_type: Optional[str]
    box_count: int
    remark: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
