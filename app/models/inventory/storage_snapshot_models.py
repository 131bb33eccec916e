from sqlalchemy import Column, Integer, Date, Numeric, ForeignKey, UniqueConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class StorageSnapshot(Base, TimestampMixin):
    __tablename__ = "storage_snapshots"

    id = Column(Integer, primary_key=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    snapshot_date = Column(Date, nullable=False, index=True)
    total_cbm = Column(Numeric(14, 4), nullable=False, default=0)
    total_pallet = Column(Numeric(14, 4), nullable=False, default=0)
    total_sku = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("warehouse_id", "client_id", "snapshot_date", name="uq_storage_snapshot_day"),
    )

    def __repr__(self):
        return f"<StorageSnapshot wh={self.warehouse_id} client={self.client_id} date={self.snapshot_date}>"
