# app/constants/order_status.py

from enum import Enum


class InboundStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    ARRIVED = "arrived"
    QC_HOLD = "qc_hold"
    RECEIVED = "received"
    CANCELLED = "cancelled"


class OutboundStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    ALLOCATED = "allocated"
    PICKING = "picking"
    PACKING = "packing"
    PACKED = "packed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class BoxStatus(str, Enum):
    OPEN = "open"
    PACKED = "packed"
    SHIPPED = "shipped"


# Statuses in which an order's items are reflected in stock balances.
INBOUND_APPLIED_STATUSES = frozenset({InboundStatus.RECEIVED.value})
OUTBOUND_APPLIED_STATUSES = frozenset({
    OutboundStatus.SHIPPED.value,
    OutboundStatus.DELIVERED.value,
})


def is_inbound_applied(status: str | None) -> bool:
    return status in INBOUND_APPLIED_STATUSES


def is_outbound_applied(status: str | None) -> bool:
    return status in OUTBOUND_APPLIED_STATUSES
