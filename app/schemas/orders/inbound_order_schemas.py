from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from app.constants.order_status import InboundStatus


# ==============================
# INPUT SCHEMAS
# ==============================
class InboundOrderCreateSchema(BaseModel):
    inbound_no: str = Field(min_length=1, max_length=80)
    client_id: int = Field(gt=0)
    warehouse_id: int = Field(gt=0)
    inbound_date: date
    status: InboundStatus = InboundStatus.DRAFT
    memo: Optional[str] = Field(None, max_length=1000)
    created_by: int = Field(gt=0)
    received_at: Optional[datetime] = None


class InboundOrderUpdateSchema(InboundOrderCreateSchema):
    status: InboundStatus


# ==============================
# OUTPUT SCHEMAS
# ==============================
class InboundOrderOutSchema(BaseModel):
    id: int
    inbound_no: str
    client_id: int
    warehouse_id: int
    inbound_date: date
    status: str
    memo: Optional[str]
    created_by: int
    received_at: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True
