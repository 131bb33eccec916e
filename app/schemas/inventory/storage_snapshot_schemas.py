from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import date


class StorageSnapshotGenerateSchema(BaseModel):
    snapshot_date: Optional[date] = None
    warehouse_id: Optional[int] = Field(None, gt=0)
    client_id: Optional[int] = Field(None, gt=0)


class StorageSnapshotOutSchema(BaseModel):
    warehouse_id: int
    client_id: int
    snapshot_date: date
    total_cbm: Decimal
    total_pallet: Decimal
    total_sku: int

    class Config:
        from_attributes = True


class MissingCbmItemSchema(BaseModel):
    warehouse_id: int
    client_id: int
    product_id: int
    sku_code: str
    product_name: str
    available_qty: int


class StorageSnapshotGenerateResult(BaseModel):
    snapshot_date: date
    generated: int
    missing_product_cbm_count: int
    missing_product_cbm_items: List[MissingCbmItemSchema]
