from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class StockBalanceOutSchema(BaseModel):
    id: int
    client_id: int
    product_id: int
    lot_id: int
    warehouse_id: int
    location_id: Optional[int]
    available_qty: int
    reserved_qty: int
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class StockTransactionOutSchema(BaseModel):
    id: int
    client_id: int
    product_id: int
    lot_id: int
    warehouse_id: int
    location_id: Optional[int]
    txn_type: str
    txn_date: datetime
    qty_in: int
    qty_out: int
    ref_type: str
    ref_id: int
    note: Optional[str]
    created_by: Optional[int]
    deleted_at: Optional[datetime]

    class Config:
        from_attributes = True
