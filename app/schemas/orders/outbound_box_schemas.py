from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.constants.order_status import BoxStatus


class OutboundBoxCreateSchema(BaseModel):
    box_no: str = Field(min_length=1, max_length=80)
    courier: Optional[str] = Field(None, max_length=100)
    tracking_no: Optional[str] = Field(None, max_length=120)
    item_count: int = Field(ge=1)


class OutboundBoxUpdateSchema(OutboundBoxCreateSchema):
    status: BoxStatus = BoxStatus.OPEN


class OutboundBoxOutSchema(BaseModel):
    id: int
    outbound_order_id: int
    box_no: str
    courier: Optional[str]
    tracking_no: Optional[str]
    item_count: int
    status: str
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
