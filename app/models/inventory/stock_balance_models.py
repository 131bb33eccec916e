from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, UniqueConstraint, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin

# Stands in for "no location" in the uniqueness key, since NULLs are distinct
# in most unique indexes.
NO_LOCATION_KEY = 0


class StockBalance(Base, TimestampMixin):
    """Running on-hand total per (client, product, lot, warehouse, location)."""

    __tablename__ = "stock_balances"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    lot_id = Column(Integer, ForeignKey("product_lots.id", ondelete="RESTRICT"), nullable=False)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False)
    location_id = Column(Integer, ForeignKey("warehouse_locations.id", ondelete="RESTRICT"), nullable=True)
    location_key = Column(Integer, nullable=False, default=NO_LOCATION_KEY)
    available_qty = Column(Integer, nullable=False, default=0)
    reserved_qty = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint(
            "client_id", "product_id", "lot_id", "warehouse_id", "location_key",
            name="uq_stock_balance_key",
        ),
        CheckConstraint("available_qty >= 0", name="ck_stock_balance_available_non_negative"),
        CheckConstraint("reserved_qty >= 0", name="ck_stock_balance_reserved_non_negative"),
        Index("ix_stock_balance_warehouse_client", "warehouse_id", "client_id"),
    )

    def __repr__(self):
        return (
            f"<StockBalance client={self.client_id} product={self.product_id} lot={self.lot_id} "
            f"wh={self.warehouse_id} loc={self.location_id} qty={self.available_qty}>"
        )
