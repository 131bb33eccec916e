from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.constants.billing import BillingReferenceType, ServiceCode, PricingPolicy
from app.constants.error_codes import ErrorCode
from app.constants.order_status import is_inbound_applied, is_outbound_applied
from app.core.exceptions import AppException
from app.models.billing.billing_event_models import BillingEvent
from app.models.orders.inbound_order_models import InboundOrder, InboundItem
from app.models.orders.outbound_order_models import OutboundOrder, OutboundItem
from app.utils.datetime_utils import utcnow, to_date

import logging

logger = logging.getLogger(__name__)


# =====================================================
# SHARED HELPERS
# =====================================================
def _reference_filters(reference_type: BillingReferenceType, reference_id: int, service_code: ServiceCode):
    return (
        BillingEvent.reference_type == reference_type.value,
        BillingEvent.reference_id == str(reference_id),
        BillingEvent.service_code == service_code.value,
    )


async def remove_order_billing_event(
    db: AsyncSession,
    reference_type: BillingReferenceType,
    reference_id: int,
    service_code: ServiceCode,
) -> None:
    """Soft-delete every live event for the reference."""
    rows = await db.execute(
        select(BillingEvent).where(
            *_reference_filters(reference_type, reference_id, service_code),
            BillingEvent.deleted_at.is_(None),
        )
    )
    now = utcnow()
    for event in rows.scalars().all():
        event.deleted_at = now
    await db.flush()


async def _sum_live_item_qty(db: AsyncSession, item_model, order_fk, order_id: int) -> int:
    total = await db.scalar(
        select(func.coalesce(func.sum(item_model.qty), 0)).where(
            order_fk == order_id,
            item_model.deleted_at.is_(None),
        )
    )
    return int(total or 0)


async def _upsert_order_billing_event(
    db: AsyncSession,
    *,
    reference_type: BillingReferenceType,
    service_code: ServiceCode,
    order,
    event_date: date,
    total_qty: int,
) -> int:
    rows = await db.execute(
        select(BillingEvent)
        .where(*_reference_filters(reference_type, order.id, service_code))
        .order_by(BillingEvent.id.desc())
    )
    events = rows.scalars().all()

    # Prefer the latest live row; otherwise revive the latest removed one.
    live = [e for e in events if e.deleted_at is None]
    event = live[0] if live else (events[0] if events else None)

    if event is None:
        event = BillingEvent(
            service_code=service_code.value,
            reference_type=reference_type.value,
            reference_id=str(order.id),
            pricing_policy=PricingPolicy.KRW_FIXED.value,
            unit_price_krw=0,
            amount_krw=0,
        )
        db.add(event)
    else:
        if event.unit_price_krw is None:
            event.unit_price_krw = 0
        if event.amount_krw is None:
            event.amount_krw = 0
        event.pricing_policy = PricingPolicy.KRW_FIXED.value

    event.client_id = order.client_id
    event.warehouse_id = order.warehouse_id
    event.event_date = event_date
    event.qty = total_qty
    event.deleted_at = None

    # Collapse any stray duplicates left by older writers.
    now = utcnow()
    for extra in live[1:]:
        extra.deleted_at = now

    await db.flush()
    return event.id


# =====================================================
# OUTBOUND
# =====================================================
async def sync_outbound_order_billing_event(db: AsyncSession, outbound_order_id: int) -> int | None:
    order = await db.scalar(
        select(OutboundOrder).where(
            OutboundOrder.id == outbound_order_id,
            OutboundOrder.deleted_at.is_(None),
        )
    )
    if order is None:
        return None

    if not is_outbound_applied(order.status):
        await remove_order_billing_event(
            db, BillingReferenceType.OUTBOUND, outbound_order_id, ServiceCode.OUTBOUND_FEE
        )
        return None

    total_qty = await _sum_live_item_qty(
        db, OutboundItem, OutboundItem.outbound_order_id, outbound_order_id
    )
    if total_qty <= 0:
        await remove_order_billing_event(
            db, BillingReferenceType.OUTBOUND, outbound_order_id, ServiceCode.OUTBOUND_FEE
        )
        return None

    event_id = await _upsert_order_billing_event(
        db,
        reference_type=BillingReferenceType.OUTBOUND,
        service_code=ServiceCode.OUTBOUND_FEE,
        order=order,
        event_date=to_date(order.shipped_at) or order.order_date,
        total_qty=total_qty,
    )
    logger.debug("outbound order %s billing event %s qty=%s", order.id, event_id, total_qty)
    return event_id


# =====================================================
# INBOUND
# =====================================================
async def sync_inbound_order_billing_event(db: AsyncSession, inbound_order_id: int) -> int | None:
    order = await db.scalar(
        select(InboundOrder).where(
            InboundOrder.id == inbound_order_id,
            InboundOrder.deleted_at.is_(None),
        )
    )
    if order is None:
        return None

    if not is_inbound_applied(order.status):
        await remove_order_billing_event(
            db, BillingReferenceType.INBOUND, inbound_order_id, ServiceCode.INBOUND_FEE
        )
        return None

    total_qty = await _sum_live_item_qty(
        db, InboundItem, InboundItem.inbound_order_id, inbound_order_id
    )
    if total_qty <= 0:
        await remove_order_billing_event(
            db, BillingReferenceType.INBOUND, inbound_order_id, ServiceCode.INBOUND_FEE
        )
        return None

    event_id = await _upsert_order_billing_event(
        db,
        reference_type=BillingReferenceType.INBOUND,
        service_code=ServiceCode.INBOUND_FEE,
        order=order,
        event_date=to_date(order.received_at) or order.inbound_date,
        total_qty=total_qty,
    )
    logger.debug("inbound order %s billing event %s qty=%s", order.id, event_id, total_qty)
    return event_id


# =====================================================
# QUERIES (invoice feed)
# =====================================================
async def list_billing_events(
    db: AsyncSession,
    *,
    client_id: int | None,
    reference_type: str | None,
    reference_id: str | None,
    service_code: str | None,
    billing_month: str | None,
) -> list[BillingEvent]:
    filters = [BillingEvent.deleted_at.is_(None)]

    if client_id:
        filters.append(BillingEvent.client_id == client_id)
    if reference_type:
        filters.append(BillingEvent.reference_type == reference_type)
    if reference_id:
        filters.append(BillingEvent.reference_id == reference_id)
    if service_code:
        filters.append(BillingEvent.service_code == service_code)
    if billing_month:
        try:
            year, month = (int(part) for part in billing_month.split("-"))
            start = date(year, month, 1)
        except ValueError:
            raise AppException(ErrorCode.VALIDATION_ERROR, "billing_month must be YYYY-MM")
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        filters.append(BillingEvent.event_date >= start)
        filters.append(BillingEvent.event_date < end)

    rows = await db.execute(
        select(BillingEvent)
        .where(*filters)
        .order_by(BillingEvent.event_date.asc(), BillingEvent.id.asc())
    )
    return rows.scalars().all()
