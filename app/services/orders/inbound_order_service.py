from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.billing import BillingReferenceType, ServiceCode
from app.constants.error_codes import ErrorCode
from app.constants.order_log_templates import OrderLogAction
from app.constants.order_status import is_inbound_applied
from app.constants.stock import StockTxnType, StockRefType
from app.core.db import transaction
from app.core.exceptions import AppException
from app.models.orders.inbound_order_models import InboundOrder, InboundItem
from app.models.users.user_models import User
from app.schemas.orders.inbound_order_schemas import (
    InboundOrderCreateSchema,
    InboundOrderUpdateSchema,
    InboundOrderOutSchema,
)
from app.services.billing.billing_event_service import (
    sync_inbound_order_billing_event,
    remove_order_billing_event,
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
    build_inbound_log,
    derive_inbound_action,
    list_inbound_order_logs,
)
from app.utils.datetime_utils import utcnow
from app.utils.get_user import resolve_actor_user_id

import logging

logger = logging.getLogger(__name__)


# =====================================================
# SHARED FETCH
# =====================================================
async def get_inbound_items(db: AsyncSession, inbound_order_id: int) -> list[InboundItem]:
    rows = await db.execute(
        select(InboundItem)
        .where(
            InboundItem.inbound_order_id == inbound_order_id,
            InboundItem.deleted_at.is_(None),
        )
        .order_by(InboundItem.id.asc())
    )
    return rows.scalars().all()


def inbound_item_key(order, item) -> StockKey:
    return StockKey(
        client_id=order.client_id,
        product_id=item.product_id,
        lot_id=item.lot_id,
        warehouse_id=order.warehouse_id,
        location_id=item.location_id,
    )


# =====================================================
# LEDGER EFFECTS
# =====================================================
async def apply_inbound_item_receipt(db: AsyncSession, order, item) -> int:
    key = inbound_item_key(order, item)
    await adjust_available_qty(db, key, item.qty)
    return await upsert_stock_txn(
        db,
        key=key,
        txn_type=StockTxnType.INBOUND_RECEIVE,
        ref_type=StockRefType.INBOUND_ITEM,
        ref_id=item.id,
        qty_in=item.qty,
        qty_out=0,
        created_by=order.created_by,
        note=item.remark,
    )


async def apply_receipt_effects(db: AsyncSession, order: InboundOrder, items: list[InboundItem]) -> None:
    for item in in_lock_order(items, lambda item: inbound_item_key(order, item)):
        await apply_inbound_item_receipt(db, order, item)

    await sync_inbound_order_billing_event(db, order.id)
    logger.info("Inbound order %s received: %d item(s) applied", order.id, len(items))


async def rollback_receipt_effects(db: AsyncSession, order, items: list[InboundItem]) -> None:
    """Reverse every item that actually has a live receipt entry."""
    reversed_count = 0
    for item in in_lock_order(items, lambda item: inbound_item_key(order, item)):
        txn_id = await get_stock_txn_id(
            db, StockTxnType.INBOUND_RECEIVE, StockRefType.INBOUND_ITEM, item.id
        )
        if not txn_id:
            continue

        await adjust_available_qty(db, inbound_item_key(order, item), -item.qty)
        await soft_delete_stock_txn(
            db, StockTxnType.INBOUND_RECEIVE, StockRefType.INBOUND_ITEM, item.id
        )
        reversed_count += 1

    await sync_inbound_order_billing_event(db, order.id)
    logger.info("Inbound order %s receipt rolled back: %d item(s) reversed", order.id, reversed_count)


# =====================================================
# GET / LIST
# =====================================================
async def _get_live_inbound_order(db: AsyncSession, inbound_order_id: int) -> InboundOrder:
    order = await db.scalar(
        select(InboundOrder).where(
            InboundOrder.id == inbound_order_id,
            InboundOrder.deleted_at.is_(None),
        )
    )
    if not order:
        raise AppException(ErrorCode.NOT_FOUND, "Inbound order not found")
    return order


async def get_inbound_order(db: AsyncSession, inbound_order_id: int) -> InboundOrderOutSchema:
    order = await _get_live_inbound_order(db, inbound_order_id)
    return InboundOrderOutSchema.model_validate(order)


async def list_inbound_orders(
    db: AsyncSession,
    *,
    client_id: int | None = None,
    warehouse_id: int | None = None,
    status: str | None = None,
) -> list[InboundOrderOutSchema]:
    stmt = select(InboundOrder).where(InboundOrder.deleted_at.is_(None))
    if client_id:
        stmt = stmt.where(InboundOrder.client_id == client_id)
    if warehouse_id:
        stmt = stmt.where(InboundOrder.warehouse_id == warehouse_id)
    if status:
        stmt = stmt.where(InboundOrder.status == status)

    rows = await db.execute(stmt.order_by(InboundOrder.id.desc()))
    return [InboundOrderOutSchema.model_validate(o) for o in rows.scalars().all()]


async def get_inbound_order_logs(db: AsyncSession, inbound_order_id: int) -> list[dict]:
    return await list_inbound_order_logs(db, inbound_order_id)


# =====================================================
# CREATE
# =====================================================
async def create_inbound_order(
    db: AsyncSession,
    payload: InboundOrderCreateSchema,
    user: User | None,
) -> InboundOrderOutSchema:
    status = payload.status.value

    async with transaction(db):
        await ensure_unique_order_no(
            db, InboundOrder, InboundOrder.inbound_no, payload.inbound_no, label="inbound_no"
        )

        order = InboundOrder(
            inbound_no=payload.inbound_no,
            client_id=payload.client_id,
            warehouse_id=payload.warehouse_id,
            inbound_date=payload.inbound_date,
            status=status,
            memo=payload.memo,
            created_by=payload.created_by,
            received_at=payload.received_at or (utcnow() if is_inbound_applied(status) else None),
        )
        db.add(order)
        await db.flush()
        order_id = order.id

    await append_order_logs(db, [
        build_inbound_log(
            order_id,
            OrderLogAction.CREATE,
            to_status=status,
            actor_user_id=resolve_actor_user_id(user, payload.created_by),
            order_no=payload.inbound_no,
        )
    ])

    await db.refresh(order)
    return InboundOrderOutSchema.model_validate(order)


# =====================================================
# UPDATE (status machine)
# =====================================================
async def update_inbound_order(
    db: AsyncSession,
    inbound_order_id: int,
    payload: InboundOrderUpdateSchema,
    user: User | None,
) -> InboundOrderOutSchema:
    status = payload.status.value

    async with transaction(db):
        order = await lock_live_order(db, InboundOrder, inbound_order_id)
        if not order:
            raise AppException(ErrorCode.NOT_FOUND, "Inbound order not found")

        previous_status = order.status
        was_applied = is_inbound_applied(previous_status)
        will_apply = is_inbound_applied(status)

        if was_applied and (
            order.client_id != payload.client_id
            or order.warehouse_id != payload.warehouse_id
        ):
            raise AppException(
                ErrorCode.ORDER_LOCKED_FIELDS,
                "Cannot change client/warehouse after receipt",
            )

        if payload.inbound_no != order.inbound_no:
            await ensure_unique_order_no(
                db,
                InboundOrder,
                InboundOrder.inbound_no,
                payload.inbound_no,
                exclude_id=order.id,
                label="inbound_no",
            )

        received_at = payload.received_at
        if received_at is None and will_apply:
            received_at = order.received_at or utcnow()

        order.inbound_no = payload.inbound_no
        order.client_id = payload.client_id
        order.warehouse_id = payload.warehouse_id
        order.inbound_date = payload.inbound_date
        order.status = status
        order.memo = payload.memo or None
        order.created_by = payload.created_by
        order.received_at = received_at
        await db.flush()

        items = await get_inbound_items(db, order.id)

        if not was_applied and will_apply:
            await apply_receipt_effects(db, order, items)
        elif was_applied and not will_apply:
            await rollback_receipt_effects(db, order, items)
        elif will_apply:
            await sync_inbound_order_billing_event(db, order.id)

    await append_order_logs(db, [
        build_inbound_log(
            inbound_order_id,
            derive_inbound_action(previous_status, status),
            from_status=previous_status,
            to_status=status,
            actor_user_id=resolve_actor_user_id(user, payload.created_by),
        )
    ])

    await db.refresh(order)
    return InboundOrderOutSchema.model_validate(order)


# =====================================================
# DELETE (soft, with ledger rollback)
# =====================================================
async def delete_inbound_order(
    db: AsyncSession,
    inbound_order_id: int,
    user: User | None,
) -> None:
    async with transaction(db):
        order = await lock_live_order(db, InboundOrder, inbound_order_id)
        if not order:
            raise AppException(ErrorCode.NOT_FOUND, "Inbound order not found")

        previous_status = order.status
        fallback_actor = order.created_by

        if is_inbound_applied(previous_status):
            items = await get_inbound_items(db, order.id)
            await rollback_receipt_effects(db, order, items)

        order.deleted_at = utcnow()
        await db.flush()

        # A deleted order is never billable, whatever its last status.
        await remove_order_billing_event(
            db, BillingReferenceType.INBOUND, order.id, ServiceCode.INBOUND_FEE
        )

    await append_order_logs(db, [
        build_inbound_log(
            inbound_order_id,
            OrderLogAction.DELETE,
            from_status=previous_status,
            to_status=None,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
        )
    ])
