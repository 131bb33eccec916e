from sqlalchemy import Column, Integer, String, Date, ForeignKey, UniqueConstraint
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class ServiceEvent(Base, TimestampMixin, SoftDeleteMixin):
    """Per-line shipment service record, one per outbound stock transaction."""

    __tablename__ = "service_events"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    outbound_order_id = Column(Integer, ForeignKey("outbound_orders.id", ondelete="RESTRICT"), nullable=False, index=True)
    stock_transaction_id = Column(Integer, ForeignKey("stock_transactions.id", ondelete="RESTRICT"), nullable=False)
    service_type = Column(String(40), nullable=False, default="OUTBOUND_SHIP")
    event_date = Column(Date, nullable=False)
    qty = Column(Integer, nullable=False, default=0)
    box_count = Column(Integer, nullable=False, default=0)
    remark = Column(String(500), nullable=True)

    __table_args__ = (UniqueConstraint("stock_transaction_id", name="uq_service_event_stock_txn"),)

    def __repr__(self):
        return f"<ServiceEvent id={self.id} txn={self.stock_transaction_id} qty={self.qty}>"
