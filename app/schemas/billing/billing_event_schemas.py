from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import date, datetime


class BillingEventOutSchema(BaseModel):
    id: int
    client_id: int
    warehouse_id: Optional[int]
    service_code: str
    reference_type: str
    reference_id: str
    event_date: date
    qty: int
    pricing_policy: str
    unit_price_krw: Decimal
    amount_krw: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class ServiceEventOutSchema(BaseModel):
    id: int
    client_id: int
    outbound_order_id: int
    stock_transaction_id: int
    service_type: str
    event_date: date
    qty: int
    box_count: int
    remark: Optional[str]

    class Config:
        from_attributes = True
