from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, CheckConstraint, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, CreatedByMixin


class OutboundOrder(Base, TimestampMixin, SoftDeleteMixin, CreatedByMixin):
    __tablename__ = "outbound_orders"

    id = Column(Integer, primary_key=True)
    outbound_no = Column(String(80), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    order_date = Column(Date, nullable=False)
    sales_channel = Column(String(80), nullable=True)
    order_no = Column(String(120), nullable=True)
    tracking_no = Column(String(120), nullable=True)
    status = Column(String(30), nullable=False, default="draft", index=True)  # see OutboundStatus
    packed_at = Column(DateTime(timezone=True), nullable=True)
    shipped_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_outbound_order_client_status", "client_id", "status"),)

    def __repr__(self):
        return f"<OutboundOrder id={self.id} no={self.outbound_no} status={self.status}>"


class OutboundItem(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "outbound_items"

    id = Column(Integer, primary_key=True)
    outbound_order_id = Column(Integer, ForeignKey("outbound_orders.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    lot_id = Column(Integer, ForeignKey("product_lots.id", ondelete="RESTRICT"), nullable=False)
    location_id = Column(Integer, ForeignKey("warehouse_locations.id", ondelete="RESTRICT"), nullable=True)
    qty = Column(Integer, nullable=False)
    box_type = Column(String(80), nullable=True)
    box_count = Column(Integer, nullable=False, default=0)
    remark = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_outbound_item_qty_positive"),
        CheckConstraint("box_count >= 0", name="ck_outbound_item_box_count_non_negative"),
    )

    def __repr__(self):
        return f"<OutboundItem id={self.id} order={self.outbound_order_id} qty={self.qty}>"
