from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.constants.order_log_templates import OrderLogAction
from app.constants.order_status import is_outbound_applied
from app.core.db import transaction
from app.core.exceptions import AppException
from app.models.orders.outbound_order_models import OutboundOrder, OutboundItem
from app.models.users.user_models import User
from app.schemas.orders.outbound_item_schemas import OutboundItemSchema, OutboundItemOutSchema
from app.services.billing.billing_event_service import sync_outbound_order_billing_event
from app.services.orders.order_common import (
    validate_lot_belongs_to_product,
    lock_live_order,
    lock_orders,
)
from app.services.orders.order_log_service import append_order_logs, build_outbound_log
from app.utils.datetime_utils import utcnow
from app.utils.get_user import resolve_actor_user_id


def _ensure_not_shipped(order: OutboundOrder | None) -> None:
    # Stock for outbound lines moves only at the order level, so shipped lines are frozen.
    if order is not None and order.deleted_at is None and is_outbound_applied(order.status):
        raise AppException(ErrorCode.ORDER_LOCKED, "Cannot modify items after shipment")


def _box_extra(box_type: str | None, box_count: int | None) -> str:
    if not box_type and not box_count:
        return ""
    return f", box={box_type or '-'} x{box_count or 0}"


async def _get_live_item(db: AsyncSession, item_id: int, *, lock: bool = False) -> OutboundItem:
    stmt = select(OutboundItem).where(
        OutboundItem.id == item_id,
        OutboundItem.deleted_at.is_(None),
    )
    if lock:
        stmt = stmt.with_for_update()

    item = await db.scalar(stmt)
    if not item:
        raise AppException(ErrorCode.NOT_FOUND, "Outbound item not found")
    return item


async def get_outbound_item(db: AsyncSession, item_id: int) -> OutboundItemOutSchema:
    item = await _get_live_item(db, item_id)
    return OutboundItemOutSchema.model_validate(item)


async def list_outbound_items(db: AsyncSession, outbound_order_id: int | None = None) -> list[OutboundItemOutSchema]:
    stmt = select(OutboundItem).where(OutboundItem.deleted_at.is_(None))
    if outbound_order_id:
        stmt = stmt.where(OutboundItem.outbound_order_id == outbound_order_id)

    rows = await db.execute(stmt.order_by(OutboundItem.id.asc()))
    return [OutboundItemOutSchema.model_validate(i) for i in rows.scalars().all()]


# =====================================================
# CREATE
# =====================================================
async def create_outbound_item(
    db: AsyncSession,
    payload: OutboundItemSchema,
    user: User | None,
) -> OutboundItemOutSchema:
    async with transaction(db):
        await validate_lot_belongs_to_product(db, payload.product_id, payload.lot_id)

        order = await lock_live_order(db, OutboundOrder, payload.outbound_order_id)
        if not order:
            raise AppException(ErrorCode.INVALID_ORDER, "Invalid outbound_order_id")
        _ensure_not_shipped(order)

        item = OutboundItem(
            outbound_order_id=order.id,
            product_id=payload.product_id,
            lot_id=payload.lot_id,
            location_id=payload.location_id,
            qty=payload.qty,
            box_type=payload.box_type,
            box_count=payload.box_count,
            remark=payload.remark,
        )
        db.add(item)
        await db.flush()

        await sync_outbound_order_billing_event(db, order.id)

        order_id = order.id
        order_status = order.status
        fallback_actor = order.created_by

    await append_order_logs(db, [
        build_outbound_log(
            order_id,
            OrderLogAction.ITEM_CREATE,
            from_status=order_status,
            to_status=order_status,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
            product_id=payload.product_id,
            lot_id=payload.lot_id,
            qty=payload.qty,
            extra=_box_extra(payload.box_type, payload.box_count),
        )
    ])

    await db.refresh(item)
    return OutboundItemOutSchema.model_validate(item)


# =====================================================
# UPDATE
# =====================================================
async def update_outbound_item(
    db: AsyncSession,
    item_id: int,
    payload: OutboundItemSchema,
    user: User | None,
) -> OutboundItemOutSchema:
    async with transaction(db):
        await validate_lot_belongs_to_product(db, payload.product_id, payload.lot_id)

        item = await _get_live_item(db, item_id, lock=True)
        prev_order_id = item.outbound_order_id
        next_order_id = payload.outbound_order_id
        moved = prev_order_id != next_order_id

        orders = await lock_orders(db, OutboundOrder, [prev_order_id, next_order_id])
        prev_order = orders.get(prev_order_id)
        next_order = orders.get(next_order_id)

        if next_order is None or next_order.deleted_at is not None:
            raise AppException(ErrorCode.INVALID_ORDER, "Invalid outbound_order_id")

        _ensure_not_shipped(prev_order)
        _ensure_not_shipped(next_order)

        old_qty = item.qty

        item.outbound_order_id = next_order_id
        item.product_id = payload.product_id
        item.lot_id = payload.lot_id
        item.location_id = payload.location_id
        item.qty = payload.qty
        item.box_type = payload.box_type
        item.box_count = payload.box_count
        item.remark = payload.remark
        await db.flush()

        await sync_outbound_order_billing_event(db, next_order_id)
        if moved:
            await sync_outbound_order_billing_event(db, prev_order_id)

        prev_status = prev_order.status if prev_order else None
        next_status = next_order.status
        fallback_actor = next_order.created_by

    actor_user_id = resolve_actor_user_id(user, fallback_actor)

    if moved:
        logs = [
            build_outbound_log(
                prev_order_id,
                OrderLogAction.ITEM_MOVE_OUT,
                from_status=prev_status,
                to_status=prev_status,
                actor_user_id=actor_user_id,
                target_order_id=next_order_id,
                item_id=item_id,
                qty=old_qty,
            ),
            build_outbound_log(
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
            build_outbound_log(
                next_order_id,
                OrderLogAction.ITEM_UPDATE,
                from_status=next_status,
                to_status=next_status,
                actor_user_id=actor_user_id,
                item_id=item_id,
                old_qty=old_qty,
                qty=payload.qty,
                extra=_box_extra(payload.box_type, payload.box_count),
            )
        ]
    await append_order_logs(db, logs)

    await db.refresh(item)
    return OutboundItemOutSchema.model_validate(item)


# =====================================================
# DELETE
# =====================================================
async def delete_outbound_item(
    db: AsyncSession,
    item_id: int,
    user: User | None,
) -> None:
    async with transaction(db):
        item = await _get_live_item(db, item_id, lock=True)
        order = await lock_live_order(db, OutboundOrder, item.outbound_order_id)
        _ensure_not_shipped(order)

        item.deleted_at = utcnow()
        await db.flush()

        await sync_outbound_order_billing_event(db, item.outbound_order_id)

        order_id = item.outbound_order_id
        order_status = order.status if order else None
        fallback_actor = order.created_by if order else None
        log_context = {
            "item_id": item.id,
            "product_id": item.product_id,
            "lot_id": item.lot_id,
            "qty": item.qty,
        }

    await append_order_logs(db, [
        build_outbound_log(
            order_id,
            OrderLogAction.ITEM_DELETE,
            from_status=order_status,
            to_status=order_status,
            actor_user_id=resolve_actor_user_id(user, fallback_actor),
            **log_context,
        )
    ])
