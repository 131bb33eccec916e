from sqlalchemy import Column, Integer, String, ForeignKey, Index
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class InboundOrderLog(Base, TimestampMixin):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "inbound_order_logs"

    id = Column(Integer, primary_key=True)
    inbound_order_id = Column(Integer, ForeignKey("inbound_orders.id", ondelete="RESTRICT"), nullable=False)
    action = Column(String(40), nullable=False)
    from_status = Column(String(30), nullable=True)
    to_status = Column(String(30), nullable=True)
    note = Column(String(1000), nullable=True)
    actor_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (Index("ix_inbound_order_logs_order_created", "inbound_order_id", "created_at"),)

    def __repr__(self):
        return f"<InboundOrderLog id={self.id} order={self.inbound_order_id} action={self.action}>"


class OutboundOrderLog(Base, TimestampMixin):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "outbound_order_logs"

    id = Column(Integer, primary_key=True)
    outbound_order_id = Column(Integer, ForeignKey("outbound_orders.id", ondelete="RESTRICT"), nullable=False)
    action = Column(String(40), nullable=False)
    from_status = Column(String(30), nullable=True)
    to_status = Column(String(30), nullable=True)
    note = Column(String(1000), nullable=True)
    actor_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    __table_args__ = (Index("ix_outbound_order_logs_order_created", "outbound_order_id", "created_at"),)

    def __repr__(self):
        return f"<OutboundOrderLog id={self.id} order={self.outbound_order_id} action={self.action}>"
