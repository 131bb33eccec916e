from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from app.constants.order_status import OutboundStatus


# ==============================
# INPUT SCHEMAS
# ==============================
class OutboundOrderCreateSchema(BaseModel):
    outbound_no: str = Field(min_length=1, max_length=80)
    client_id: int = Field(gt=0)
    warehouse_id: int = Field(gt=0)
    order_date: date
    sales_channel: Optional[str] = Field(None, max_length=80)
    order_no: Optional[str] = Field(None, max_length=120)
    tracking_no: Optional[str] = Field(None, max_length=120)
    status: OutboundStatus = OutboundStatus.DRAFT
    packed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    created_by: int = Field(gt=0)


class OutboundOrderUpdateSchema(OutboundOrderCreateSchema):
    status: OutboundStatus


# ==============================
# OUTPUT SCHEMAS
# ==============================
class OutboundOrderOutSchema(BaseModel):
    id: int
    outbound_no: str
    client_id: int
    warehouse_id: int
    order_date: date
    sales_channel: Optional[str]
    order_no: Optional[str]
    tracking_no: Optional[str]
    status: str
    packed_at: Optional[datetime]
    shipped_at: Optional[datetime]
    created_by: int
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
