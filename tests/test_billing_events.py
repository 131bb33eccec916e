from datetime import date

from sqlalchemy import select

from app.constants.billing import BillingReferenceType, ServiceCode
from app.models.billing.billing_event_models import BillingEvent
from app.models.orders.inbound_order_models import InboundOrder, InboundItem
from app.services.billing.billing_event_service import (
    sync_inbound_order_billing_event,
    remove_order_billing_event,
)

from conftest import (
    ADMIN_ID,
    CLIENT_ID,
    WAREHOUSE_ID,
    PRODUCT_ID,
    LOT_ID,
    create_inbound_with_item,
    receive_inbound,
)


async def _make_order(db, status: str, qty: int | None = 5) -> InboundOrder:
    order = InboundOrder(
        inbound_no=f"IN-{status}",
        client_id=CLIENT_ID,
        warehouse_id=WAREHOUSE_ID,
        inbound_date=date(2026, 3, 2),
        status=status,
        created_by=ADMIN_ID,
    )
    db.add(order)
    await db.flush()
    if qty:
        db.add(InboundItem(inbound_order_id=order.id, product_id=PRODUCT_ID, lot_id=LOT_ID, qty=qty))
        await db.flush()
    return order


async def _events(db, order_id: int, live_only: bool = True):
    stmt = select(BillingEvent).where(BillingEvent.reference_id == str(order_id))
    if live_only:
        stmt = stmt.where(BillingEvent.deleted_at.is_(None))
    rows = await db.execute(stmt)
    return rows.scalars().all()


async def test_sync_missing_order_is_a_no_op(db):
    assert await sync_inbound_order_billing_event(db, 12345) is None


async def test_sync_is_idempotent(db):
    order = await _make_order(db, "received")

    first = await sync_inbound_order_billing_event(db, order.id)
    second = await sync_inbound_order_billing_event(db, order.id)
    await db.commit()

    assert first == second
    events = await _events(db, order.id)
    assert len(events) == 1
    assert events[0].qty == 5
    assert events[0].event_date.isoformat() == "2026-03-02"


async def test_non_billable_status_removes_event(db):
    order = await _make_order(db, "received")
    await sync_inbound_order_billing_event(db, order.id)

    order.status = "arrived"
    await db.flush()
    assert await sync_inbound_order_billing_event(db, order.id) is None
    assert await _events(db, order.id) == []


async def test_zero_quantity_billable_order_has_no_event(db):
    order = await _make_order(db, "received", qty=None)
    assert await sync_inbound_order_billing_event(db, order.id) is None
    assert await _events(db, order.id) == []


async def test_removed_event_is_revived_instead_of_duplicated(db):
    order = await _make_order(db, "received")
    event_id = await sync_inbound_order_billing_event(db, order.id)
    await remove_order_billing_event(db, BillingReferenceType.INBOUND, order.id, ServiceCode.INBOUND_FEE)

    revived_id = await sync_inbound_order_billing_event(db, order.id)
    await db.commit()

    assert revived_id == event_id
    assert len(await _events(db, order.id, live_only=False)) == 1


async def test_stray_duplicates_collapse_to_one(db):
    order = await _make_order(db, "received")
    for _ in range(2):
        db.add(BillingEvent(
            client_id=CLIENT_ID,
            warehouse_id=WAREHOUSE_ID,
            service_code="INBOUND_FEE",
            reference_type="INBOUND",
            reference_id=str(order.id),
            event_date=order.inbound_date,
            qty=1,
            pricing_policy="KRW_FIXED",
            unit_price_krw=0,
            amount_krw=0,
        ))
    await db.flush()

    await sync_inbound_order_billing_event(db, order.id)
    await db.commit()

    events = await _events(db, order.id)
    assert len(events) == 1
    assert events[0].qty == 5


async def test_billing_month_filter(client):
    order, _ = await create_inbound_with_item(client, qty=3)
    await receive_inbound(client, order)

    res = await client.get("/billing-events/", params={"billing_month": "2099-01"})
    assert res.json()["data"] == []

    res = await client.get("/billing-events/", params={"billing_month": "march"})
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"
