from sqlalchemy import Column, Integer, String, Date, Numeric, ForeignKey, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class BillingEvent(Base, TimestampMixin, SoftDeleteMixin):
    """Billable fact derived from an order; priced later by invoice generation."""

    __tablename__ = "billing_events"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=True)
    service_code = Column(String(40), nullable=False)
    reference_type = Column(String(30), nullable=False)
    reference_id = Column(String(64), nullable=False)
    event_date = Column(Date, nullable=False, index=True)
    qty = Column(Integer, nullable=False, default=0)
    pricing_policy = Column(String(30), nullable=False, default="KRW_FIXED")
    unit_price_krw = Column(Numeric(14, 2), nullable=False, default=0)
    amount_krw = Column(Numeric(14, 2), nullable=False, default=0)
    invoice_id = Column(Integer, nullable=True, index=True)

    __table_args__ = (
        Index("ix_billing_event_reference", "reference_type", "reference_id", "service_code"),
    )

    def __repr__(self):
        return f"<BillingEvent id={self.id} {self.service_code} ref={self.reference_type}:{self.reference_id} qty={self.qty}>"
