from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.billing import OUTBOUND_SHIP_SERVICE
from app.models.billing.service_event_models import ServiceEvent
from app.utils.datetime_utils import utcnow


async def upsert_outbound_service_event(
    db: AsyncSession,
    *,
    client_id: int,
    outbound_order_id: int,
    stock_transaction_id: int,
    event_date: date,
    qty: int,
    box_count: int,
    remark: str | None = None,
) -> int:
    event = await db.scalar(
        select(ServiceEvent).where(ServiceEvent.stock_transaction_id == stock_transaction_id)
    )

    if event is None:
        event = ServiceEvent(
            stock_transaction_id=stock_transaction_id,
            service_type=OUTBOUND_SHIP_SERVICE,
        )
        db.add(event)

    event.client_id = client_id
    event.outbound_order_id = outbound_order_id
    event.event_date = event_date
    event.qty = qty
    event.box_count = box_count
    event.remark = remark or None
    event.deleted_at = None

    await db.flush()
    return event.id


async def soft_delete_outbound_service_event(db: AsyncSession, stock_transaction_id: int) -> None:
    event = await db.scalar(
        select(ServiceEvent).where(
            ServiceEvent.stock_transaction_id == stock_transaction_id,
            ServiceEvent.deleted_at.is_(None),
        )
    )
    if event is None:
        return

    event.deleted_at = utcnow()
    await db.flush()


async def list_service_events(
    db: AsyncSession,
    *,
    outbound_order_id: int | None,
    client_id: int | None,
) -> list[ServiceEvent]:
    filters = [ServiceEvent.deleted_at.is_(None)]
    if outbound_order_id:
        filters.append(ServiceEvent.outbound_order_id == outbound_order_id)
    if client_id:
        filters.append(ServiceEvent.client_id == client_id)

    rows = await db.execute(
        select(ServiceEvent).where(*filters).order_by(ServiceEvent.id.asc())
    )
    return rows.scalars().all()
