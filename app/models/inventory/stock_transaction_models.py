from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class StockTransaction(Base, TimestampMixin, SoftDeleteMixin):
    """Ledger entry tied 1:1 to a source line item via (txn_type, ref_type, ref_id).

    A rolled-back entry is soft-deleted and resurrected in place if the same
    reference is applied again, so the key never has more than one row.
    """

    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    lot_id = Column(Integer, ForeignKey("product_lots.id", ondelete="RESTRICT"), nullable=False)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False)
    location_id = Column(Integer, ForeignKey("warehouse_locations.id", ondelete="RESTRICT"), nullable=True)
    txn_type = Column(String(30), nullable=False)
    txn_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    qty_in = Column(Integer, nullable=False, default=0)
    qty_out = Column(Integer, nullable=False, default=0)
    ref_type = Column(String(30), nullable=False)
    ref_id = Column(Integer, nullable=False)
    note = Column(String(500), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True)

    __table_args__ = (
        UniqueConstraint("txn_type", "ref_type", "ref_id", name="uq_stock_txn_reference"),
        CheckConstraint("qty_in >= 0 AND qty_out >= 0", name="ck_stock_txn_qty_non_negative"),
        Index("ix_stock_txn_reference", "ref_type", "ref_id"),
    )

    def __repr__(self):
        return f"<StockTransaction id={self.id} {self.txn_type} ref={self.ref_type}:{self.ref_id} in={self.qty_in} out={self.qty_out}>"
