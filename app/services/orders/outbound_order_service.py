from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.billing import BillingReferenceType, ServiceCode
from app.constants.error_codes import ErrorCode
from app.constants.order_log_templates import OrderLogAction
from app.constants.order_status import OutboundStatus, is_outbound_applied
from app.constants.stock import StockTxnType, StockRefType
from app.core.db import transaction
from app.core.exceptions import AppException
from app.models.orders.outbound_order_models import OutboundOrder, OutboundItem
from app.models.users.user_models import User
from app.schemas.orders.outbound_order_schemas import (
    OutboundOrderCreateSchema,
    OutboundOrderUpdateSchema,
    OutboundOrderOutSchema,
)
from app.services.billing.billing_event_service import (
    sync_outbound_order_billing_event,
    remove_order_billing_event,
)
from app.services.billing.service_event_service import (
    upsert_outbound_service_event,
    soft_delete_outbound_service_event,
)
from app.services.inventory.stock_ledger_service import (
    StockKey,
    in_lock_order,
    adjust_available_qty,
    upsert_stock_txn,
    get_stock_txn_id,
    soft_delete_stock_txn,
)
from app.services.orders.order_common import ensure_unique_order_no, lock_live_order
from app.services.orders.order_log_service import (
    append_order_logs,
    build_outbound_log,
    derive_outbound_action,
    list_outbound_order_logs,
)
from app.utils.datetime_utils import utcnow
from app.utils.get_user import resolve_actor_user_id

import logging

logger = logging.getLogger(__name__)


async def get_outbound_items(db: AsyncSession, outbound_order_id: int) -> list[OutboundItem]:
    rows = await db.execute(
        select(OutboundItem)
        .where(
            OutboundItem.outbound_order_id == outbound_order_id,
            OutboundItem.deleted_at.is_(None),
        )
        .order_by(OutboundItem.id.asc())
    )
    return rows.scalars().all()


def _item_key(order, item) -> StockKey:
    return StockKey(
        client_id=order.client_id,
        product_id=item.product_id,
        lot_id=item.lot_id,
        warehouse_id=order.warehouse_id,
        location_id=item.location_id,
    )


def _stamp_phase_times(order: OutboundOrder, payload) -> None:
    """Fill packed_at / shipped_at on phase entry unless the caller supplied them."""
    now = utcnow()
    packed_at = payload.packed_at or order.packed_at
    shipped_at = payload.shipped_at or order.shipped_at

    if payload.status == OutboundStatus.PACKED and packed_at is None:
        packed_at = now
    if is_outbound_applied(payload.status.value) and shipped_at is None:
        shipped_at = now

    order.packed_at = packed_at
    order.shipped_at = shipped_at


# =====================================================
# LEDGER EFFECTS
# =====================================================
async def apply_shipment_effects(db: AsyncSession, order: OutboundOrder, items: list[OutboundItem]) -> None:
    """Take every line out of stock and record its shipment service event."""
    for item in in_lock_order(items, lambda item: _item_key(order, item)):
        key = _item_key(order, item)
        await adjust_available_qty(db, key, -item.qty)

        txn_id = await upsert_stock_txn(
            db,
            key=key,
            txn_type=StockTxnType.OUTBOUND_SHIP,
            ref_type=StockRefType.OUTBOUND_ITEM,
            ref_id=item.id,
            qty_in=0,
            qty_out=item.qty,
            created_by=order.created_by,
            note=item.remark,
        )

        await upsert_outbound_service_event(
            db,
            client_id=order.client_id,
            outbound_order_id=order.id,
            stock_transaction_id=txn_id,
            event_date=order.order_date,
            qty=item.qty,
            box_count=item.box_count or 0,
            remark=item.remark,
        )

    await sync_outbound_order_billing_event(db, order.id)
    logger.info("Outbound order %s shipped: %d item(s) applied", order.id, len(items))


async def rollback_shipment_effects(db: AsyncSession, order: OutboundOrder, items: list[OutboundItem]) -> None:
    reversed_count = 0
    for item in in_lock_order(items, lambda item: _item_key(order, item)):
        txn_id = await get_stock_txn_id(
            db, StockTxnType.OUTBOUND_SHIP, StockRefType.OUTBOUND_ITEM, item.id
        )
        if not txn_id:
            continue

        await adjust_available_qty(db, _item_key(order, item), item.qty)
        await soft_delete_stock_txn(
            db, StockTxnType.OUTBOUND_SHIP, StockRefType.OUTBOUND_ITEM, item.id
        )
        await soft_delete_outbound_service_event(db, txn_id)
        reversed_count += 1

    await sync_outbound_order_billing_event(db, order.id)
    logger.info("Outbound order %s shipment rolled back: %d item(s) reversed", order.id, reversed_count)


# =====================================================
# GET / LIST
# =====================================================
async def get_outbound_order(db: AsyncSession, outbound_order_id: int) -> OutboundOrderOutSchema:
    order = await db.scalar(
        select(OutboundOrder).where(
            OutboundOrder.id == outbound_order_id,
            OutboundOrder.deleted_at.is_(None),
        )
    )
    if not order:
        raise AppException(ErrorCode.NOT_FOUND, "Outbound order not found")
    return OutboundOrderOutSchema.model_validate(order)


async def list_outbound_orders(
    db: AsyncSession,
    *,
    client_id: int | None = None,
    warehouse_id: int | None = None,
    status: str | None = None,
) -> list[OutboundOrderOutSchema]:
    stmt = select(OutboundOrder).where(OutboundOrder.deleted_at.is_(None))
    if client_id:
        stmt = stmt.where(OutboundOrder.client_id == client_id)
    if warehouse_id:
        stmt = stmt.where(OutboundOrder.warehouse_id == warehouse_id)
    if status:
        stmt = stmt.where(OutboundOrder.status == status)

    rows = await db.execute(stmt.order_by(OutboundOrder.id.desc()))
    return [OutboundOrderOutSchema.model_validate(o) for o in rows.scalars().all()]


async def get_outbound_order_logs(db: AsyncSession, outbound_order_id: int) -> list[dict]:
    return await list_outbound_order_logs(db, outbound_order_id)


# =====================================================
# CREATE
# =====================================================
async def create_outbound_order(
    db: AsyncSession,
    payload: OutboundOrderCreateSchema,
    user: User | None,
) -> OutboundOrderOutSchema:
    status = payload.status.value

    async with transaction(db):
        await ensure_unique_order_no(
            db, OutboundOrder, OutboundOrder.outbound_no, payload.outbound_no, label="outbound_no"
        )

        order = OutboundOrder(
            outbound_no=payload.outbound_no,
            client_id=payload.client_id,
            warehouse_id=payload.warehouse_id,
            order_date=payload.order_date,
            sales_channel=payload.sales_channel,
            order_no=payload.order_no,
            tracking_no=payload.tracking_no,
            status=status,
            created_by=payload.created_by,
        )
        _stamp_phase_times(order, payload)
        db.add(order)
        await db.flush()
        order_id = order.id

    await append_order_logs(db, [
        build_outbound_log(
            order_id,
            OrderLogAction.CREATE,
            to_status=status,
            actor_user_id=resolve_actor_user_id(user, payload.created_by),
            order_no=payload.outbound_no,
        )
    ])

    await db.refresh(order)
    return OutboundOrderOutSchema.model_validate(order)


# =====================================================
# UPDATE (status machine)
# =====================================================
async def update_outbound_order(
    db: AsyncSession,
    outbound_order_id: int,
    payload: OutboundOrderUpdateSchema,
    user: User | None,
) -> OutboundOrderOutSchema:
    status = payload.status.value

    async with transaction(db):
        order = await lock_live_order(db, OutboundOrder, outbound_order_id)
        if not order:
            raise AppException(ErrorCode.NOT_FOUND, "Outbound order not found")

        previous_status = order.status
        was_applied = is_outbound_applied(previous_status)
        will_apply = is_outbound_applied(status)

        if was_applied and (
            order.client_id != payload.client_id
            or order.warehouse_id != payload.warehouse_id
        ):
            raise AppException(
                ErrorCode.ORDER_LOCKED_FIELDS,
                "Cannot change client/warehouse after shipment",
            )

        if payload.outbound_no != order.outbound_no:
            await ensure_unique_order_no(
                db,
                OutboundOrder,
                OutboundOrder.outbound_no,
                payload.outbound_no,
                exclude_id=order.id,
                label="outbound_no",
            )

        order.outbound_no = payload.outbound_no
        order.client_id = payload.client_id
        order.warehouse_id = payload.warehouse_id
        order.order_date = payload.order_date
        order.sales_channel = payload.sales_channel or None
        order.order_no = payload.order_no or None
        order.tracking_no = payload.tracking_no or None
        order.status = status
        order.created_by = payload.created_by
        _stamp_phase_times(order, payload)
        await db.flush()

        items = await get_outbound_items(db, order.id)

        if not was_applied and will_apply:
            await apply_shipment_effects(db, order, items)
        elif was_applied and not will_apply:
            await rollback_shipment_effects(db, order, items)
        elif will_apply:
            await sync_outbound_order_billing_event(db, order.id)

    await append_order_logs(db, [
        build_outbound_log(
            outbound_order_id,
            derive_outbound_action(previous_status, status),
            from_status=previous_status,
            to_status=status,
            actor_user_id=resolve_actor_user_id(user, payload.created_by),
        )
    ])

    await db.refresh(order)
    return OutboundOrderOutSchema.model_validate(order)


# =====================================================
# DELETE
# =====================================================
async def delete_outbound_order(
    db: AsyncSession,
    outbound_order_id: int,
    user: User | None,
) -> None:
    async with transaction(db):
        order = await lock_live_order(db, OutboundOrder, outbound_order_id)
        if not order:
            raise AppException(ErrorCode.NOT_FOUND, "Outbound order not found")

        previous_status = order.status
        fallback_actor = order.created_by

        if is_outbound_applied(previous_status):
            items = await get_outbound_items(db, order.id)
            await rollback_shipment_effects(db, order, items)

        order.deleted_at = utcnow()
        await db.flush()

        await remove_order_billing_event(
            db, BillingReferenceType.OUTBOUND, order.id, ServiceCode.OUTBOUND_FEE
        )

    await append_order_logs(db, [
        build_outbound_log(
            outbound_order_id,
            OrderLogAction.DELETE,
            from_status=previous_status,
            to_status=None,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
        )
    ])
