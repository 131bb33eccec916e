from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.constants.order_log_templates import OrderLogAction
from app.constants.order_status import is_inbound_applied
from app.constants.stock import StockTxnType, StockRefType
from app.core.db import transaction
from app.core.exceptions import AppException
from app.models.orders.inbound_order_models import InboundOrder, InboundItem
from app.models.users.user_models import User
from app.schemas.orders.inbound_item_schemas import InboundItemSchema, InboundItemOutSchema
from app.services.billing.billing_event_service import sync_inbound_order_billing_event
from app.services.inventory.stock_ledger_service import (
    adjust_available_qty,
    get_stock_txn_id,
    soft_delete_stock_txn,
)
from app.services.orders.inbound_order_service import (
    apply_inbound_item_receipt,
    inbound_item_key,
)
from app.services.orders.order_common import (
    validate_lot_belongs_to_product,
    lock_live_order,
    lock_orders,
)
from app.services.orders.order_log_service import append_order_logs, build_inbound_log
from app.utils.datetime_utils import utcnow
from app.utils.get_user import resolve_actor_user_id

import logging

logger = logging.getLogger(__name__)


def _location_extra(location_id: int | None) -> str:
    return f", location={location_id}" if location_id else ""


async def _reverse_item_receipt(db: AsyncSession, order, item) -> bool:
    """Undo the receipt entry of an item, if it has one. Returns whether it did."""
    txn_id = await get_stock_txn_id(
        db, StockTxnType.INBOUND_RECEIVE, StockRefType.INBOUND_ITEM, item.id
    )
    if not txn_id:
        return False

    await adjust_available_qty(db, inbound_item_key(order, item), -item.qty)
    await soft_delete_stock_txn(
        db, StockTxnType.INBOUND_RECEIVE, StockRefType.INBOUND_ITEM, item.id
    )
    return True


async def _get_live_item(db: AsyncSession, item_id: int, *, lock: bool = False) -> InboundItem:
    stmt = select(InboundItem).where(
        InboundItem.id == item_id,
        InboundItem.deleted_at.is_(None),
    )
    if lock:
        stmt = stmt.with_for_update()

    item = await db.scalar(stmt)
    if not item:
        raise AppException(ErrorCode.NOT_FOUND, "Inbound item not found")
    return item


# =====================================================
# GET / LIST
# =====================================================
async def get_inbound_item(db: AsyncSession, item_id: int) -> InboundItemOutSchema:
    item = await _get_live_item(db, item_id)
    return InboundItemOutSchema.model_validate(item)


async def list_inbound_items(db: AsyncSession, inbound_order_id: int | None = None) -> list[InboundItemOutSchema]:
    stmt = select(InboundItem).where(InboundItem.deleted_at.is_(None))
    if inbound_order_id:
        stmt = stmt.where(InboundItem.inbound_order_id == inbound_order_id)

    rows = await db.execute(stmt.order_by(InboundItem.id.asc()))
    return [InboundItemOutSchema.model_validate(i) for i in rows.scalars().all()]


# =====================================================
# CREATE
# =====================================================
async def create_inbound_item(
    db: AsyncSession,
    payload: InboundItemSchema,
    user: User | None,
) -> InboundItemOutSchema:
    async with transaction(db):
        await validate_lot_belongs_to_product(db, payload.product_id, payload.lot_id)

        order = await lock_live_order(db, InboundOrder, payload.inbound_order_id)
        if not order:
            raise AppException(ErrorCode.INVALID_ORDER, "Invalid inbound_order_id")

        item = InboundItem(
            inbound_order_id=order.id,
            product_id=payload.product_id,
            lot_id=payload.lot_id,
            location_id=payload.location_id,
            qty=payload.qty,
            invoice_price=payload.invoice_price,
            currency=payload.currency,
            remark=payload.remark,
        )
        db.add(item)
        await db.flush()

        if is_inbound_applied(order.status):
            await apply_inbound_item_receipt(db, order, item)
            await sync_inbound_order_billing_event(db, order.id)

        order_id = order.id
        order_status = order.status
        fallback_actor = order.created_by

    await append_order_logs(db, [
        build_inbound_log(
            order_id,
            OrderLogAction.ITEM_CREATE,
            from_status=order_status,
            to_status=order_status,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
            product_id=payload.product_id,
            lot_id=payload.lot_id,
            qty=payload.qty,
            extra=_location_extra(payload.location_id),
        )
    ])

    await db.refresh(item)
    return InboundItemOutSchema.model_validate(item)


# =====================================================
# UPDATE (in place or moved to another order)
# =====================================================
async def update_inbound_item(
    db: AsyncSession,
    item_id: int,
    payload: InboundItemSchema,
    user: User | None,
) -> InboundItemOutSchema:
    async with transaction(db):
        await validate_lot_belongs_to_product(db, payload.product_id, payload.lot_id)

        item = await _get_live_item(db, item_id, lock=True)
        prev_order_id = item.inbound_order_id
        next_order_id = payload.inbound_order_id
        moved = prev_order_id != next_order_id

        orders = await lock_orders(db, InboundOrder, [prev_order_id, next_order_id])
        prev_order = orders.get(prev_order_id)
        next_order = orders.get(next_order_id)

        if next_order is None or next_order.deleted_at is not None:
            raise AppException(ErrorCode.INVALID_ORDER, "Invalid inbound_order_id")

        prev_applied = (
            prev_order is not None
            and prev_order.deleted_at is None
            and is_inbound_applied(prev_order.status)
        )
        next_applied = is_inbound_applied(next_order.status)
        old_qty = item.qty

        # 1. Reverse the previous effect with the pre-update key and qty
        if prev_applied:
            await _reverse_item_receipt(db, prev_order, item)

        # 2. Write the new values
        item.inbound_order_id = next_order_id
        item.product_id = payload.product_id
        item.lot_id = payload.lot_id
        item.location_id = payload.location_id
        item.qty = payload.qty
        item.invoice_price = payload.invoice_price
        item.currency = payload.currency
        item.remark = payload.remark
        await db.flush()

        # 3. Apply the new effect on the owning order
        if next_applied:
            await apply_inbound_item_receipt(db, next_order, item)

        # 4. Billing follows both orders
        await sync_inbound_order_billing_event(db, next_order_id)
        if moved:
            await sync_inbound_order_billing_event(db, prev_order_id)

        prev_status = prev_order.status if prev_order else None
        next_status = next_order.status
        fallback_actor = next_order.created_by

    actor_user_id = resolve_actor_user_id(user, fallback_actor)

    if moved:
        logs = [
            build_inbound_log(
                prev_order_id,
                OrderLogAction.ITEM_MOVE_OUT,
                from_status=prev_status,
                to_status=prev_status,
                actor_user_id=actor_user_id,
                target_order_id=next_order_id,
                item_id=item_id,
                qty=old_qty,
            ),
            build_inbound_log(
                next_order_id,
                OrderLogAction.ITEM_MOVE_IN,
                from_status=next_status,
                to_status=next_status,
                actor_user_id=actor_user_id,
                source_order_id=prev_order_id,
                item_id=item_id,
                qty=payload.qty,
            ),
        ]
    else:
        logs = [
            build_inbound_log(
                next_order_id,
                OrderLogAction.ITEM_UPDATE,
                from_status=next_status,
                to_status=next_status,
                actor_user_id=actor_user_id,
                item_id=item_id,
                old_qty=old_qty,
                qty=payload.qty,
                extra=_location_extra(payload.location_id),
            )
        ]
    await append_order_logs(db, logs)

    await db.refresh(item)
    return InboundItemOutSchema.model_validate(item)


# =====================================================
# DELETE
# =====================================================
async def delete_inbound_item(
    db: AsyncSession,
    item_id: int,
    user: User | None,
) -> None:
    async with transaction(db):
        item = await _get_live_item(db, item_id, lock=True)
        order = await lock_live_order(db, InboundOrder, item.inbound_order_id)

        if order is not None and is_inbound_applied(order.status):
            await _reverse_item_receipt(db, order, item)

        item.deleted_at = utcnow()
        await soft_delete_stock_txn(
            db, StockTxnType.INBOUND_RECEIVE, StockRefType.INBOUND_ITEM, item.id
        )
        await db.flush()

        await sync_inbound_order_billing_event(db, item.inbound_order_id)

        order_id = item.inbound_order_id
        order_status = order.status if order else None
        fallback_actor = order.created_by if order else None
        log_context = {
            "item_id": item.id,
            "product_id": item.product_id,
            "lot_id": item.lot_id,
            "qty": item.qty,
        }

    logger.info("Inbound item %s deleted from order %s", item_id, order_id)

    await append_order_logs(db, [
        build_inbound_log(
            order_id,
            OrderLogAction.ITEM_DELETE,
            from_status=order_status,
            to_status=order_status,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
            **log_context,
        )
    ])
