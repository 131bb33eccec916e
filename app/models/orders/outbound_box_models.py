from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin


class OutboundBox(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "outbound_boxes"

    id = Column(Integer, primary_key=True)
    outbound_order_id = Column(Integer, ForeignKey("outbound_orders.id", ondelete="RESTRICT"), nullable=False)
    box_no = Column(String(80), nullable=False)
    courier = Column(String(100), nullable=True)
    tracking_no = Column(String(120), nullable=True)
    item_count = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="open")  # open | packed | shipped

    __table_args__ = (
        CheckConstraint("item_count >= 0", name="ck_outbound_box_item_count_non_negative"),
        Index("ix_outbound_box_order_box_no", "outbound_order_id", "box_no"),
    )

    def __repr__(self):
        return f"<OutboundBox id={self.id} order={self.outbound_order_id} box_no={self.box_no}>"
