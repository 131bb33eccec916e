from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, CheckConstraint, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, CreatedByMixin


class InboundOrder(Base, TimestampMixin, SoftDeleteMixin, CreatedByMixin):
    __tablename__ = "inbound_orders"

    id = Column(Integer, primary_key=True)
    inbound_no = Column(String(80), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    inbound_date = Column(Date, nullable=False)
    status = Column(String(30), nullable=False, default="draft", index=True)  # see InboundStatus
    memo = Column(Text, nullable=True)
    received_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_inbound_order_client_status", "client_id", "status"),)

    def __repr__(self):
        return f"<InboundOrder id={self.id} no={self.inbound_no} status={self.status}>"


class InboundItem(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "inbound_items"

    id = Column(Integer, primary_key=True)
    inbound_order_id = Column(Integer, ForeignKey("inbound_orders.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    lot_id = Column(Integer, ForeignKey("product_lots.id", ondelete="RESTRICT"), nullable=False)
    location_id = Column(Integer, ForeignKey("warehouse_locations.id", ondelete="RESTRICT"), nullable=True)
    qty = Column(Integer, nullable=False)
    invoice_price = Column(Numeric(14, 2), nullable=True)
    currency = Column(String(3), nullable=True)  # KRW | THB
    remark = Column(String(500), nullable=True)

    __table_args__ = (CheckConstraint("qty > 0", name="ck_inbound_item_qty_positive"),)

    def __repr__(self):
        return f"<InboundItem id={self.id} order={self.inbound_order_id} qty={self.qty}>"
