from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.db import transaction
from app.core.exceptions import AppException
from app.models.orders.outbound_box_models import OutboundBox
from app.models.orders.outbound_order_models import OutboundOrder
from app.schemas.orders.outbound_box_schemas import (
    OutboundBoxCreateSchema,
    OutboundBoxUpdateSchema,
    OutboundBoxOutSchema,
)
from app.utils.datetime_utils import utcnow


async def _ensure_order_exists(db: AsyncSession, outbound_order_id: int) -> None:
    found = await db.scalar(
        select(OutboundOrder.id).where(
            OutboundOrder.id == outbound_order_id,
            OutboundOrder.deleted_at.is_(None),
        )
    )
    if not found:
        raise AppException(ErrorCode.NOT_FOUND, "Outbound order not found")


async def _ensure_unique_box_no(
    db: AsyncSession,
    outbound_order_id: int,
    box_no: str,
    exclude_id: int | None = None,
) -> None:
    stmt = select(OutboundBox.id).where(
        OutboundBox.outbound_order_id == outbound_order_id,
        OutboundBox.box_no == box_no,
        OutboundBox.deleted_at.is_(None),
    )
    if exclude_id is not None:
        stmt = stmt.where(OutboundBox.id != exclude_id)

    if await db.scalar(stmt.limit(1)):
        raise AppException(ErrorCode.DUPLICATE, "Duplicate box_no for this order")


async def _get_live_box(db: AsyncSession, outbound_order_id: int, box_id: int) -> OutboundBox:
    box = await db.scalar(
        select(OutboundBox).where(
            OutboundBox.id == box_id,
            OutboundBox.outbound_order_id == outbound_order_id,
            OutboundBox.deleted_at.is_(None),
        )
    )
    if not box:
        raise AppException(ErrorCode.NOT_FOUND, "Outbound box not found")
    return box


async def list_outbound_boxes(db: AsyncSession, outbound_order_id: int) -> list[OutboundBoxOutSchema]:
    await _ensure_order_exists(db, outbound_order_id)

    rows = await db.execute(
        select(OutboundBox)
        .where(
            OutboundBox.outbound_order_id == outbound_order_id,
            OutboundBox.deleted_at.is_(None),
        )
        .order_by(OutboundBox.id.asc())
    )
    return [OutboundBoxOutSchema.model_validate(b) for b in rows.scalars().all()]


async def create_outbound_box(
    db: AsyncSession,
    outbound_order_id: int,
    payload: OutboundBoxCreateSchema,
) -> OutboundBoxOutSchema:
    async with transaction(db):
        await _ensure_order_exists(db, outbound_order_id)
        await _ensure_unique_box_no(db, outbound_order_id, payload.box_no)

        box = OutboundBox(
            outbound_order_id=outbound_order_id,
            box_no=payload.box_no,
            courier=payload.courier,
            tracking_no=payload.tracking_no,
            item_count=payload.item_count,
            status="open",
        )
        db.add(box)
        await db.flush()

    await db.refresh(box)
    return OutboundBoxOutSchema.model_validate(box)


async def update_outbound_box(
    db: AsyncSession,
    outbound_order_id: int,
    box_id: int,
    payload: OutboundBoxUpdateSchema,
) -> OutboundBoxOutSchema:
    async with transaction(db):
        box = await _get_live_box(db, outbound_order_id, box_id)
        if payload.box_no != box.box_no:
            await _ensure_unique_box_no(db, outbound_order_id, payload.box_no, exclude_id=box.id)

        box.box_no = payload.box_no
        box.courier = payload.courier or None
        box.tracking_no = payload.tracking_no or None
        box.item_count = payload.item_count
        box.status = payload.status.value
        await db.flush()

    await db.refresh(box)
    return OutboundBoxOutSchema.model_validate(box)


async def delete_outbound_box(db: AsyncSession, outbound_order_id: int, box_id: int) -> None:
    async with transaction(db):
        box = await _get_live_box(db, outbound_order_id, box_id)
        box.deleted_at = utcnow()
