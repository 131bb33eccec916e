from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.masters.product_models import ProductLot


async def validate_lot_belongs_to_product(db: AsyncSession, product_id: int, lot_id: int) -> None:
    lot_id_found = await db.scalar(
        select(ProductLot.id).where(
            ProductLot.id == lot_id,
            ProductLot.product_id == product_id,
            ProductLot.deleted_at.is_(None),
        )
    )
    if lot_id_found is None:
        raise AppException(
            ErrorCode.INVALID_LOT_PRODUCT,
            "lot_id does not belong to product_id",
        )


async def ensure_unique_order_no(
    db: AsyncSession,
    model,
    column,
    value: str,
    *,
    exclude_id: int | None = None,
    label: str,
) -> None:
    stmt = select(model.id).where(column == value, model.deleted_at.is_(None))
    if exclude_id is not None:
        stmt = stmt.where(model.id != exclude_id)

    if await db.scalar(stmt.limit(1)):
        raise AppException(ErrorCode.DUPLICATE, f"Duplicate {label}")


async def lock_live_order(db: AsyncSession, model, order_id: int):
    """Return the live order row locked for update, or None."""
    return await db.scalar(
        select(model)
        .where(model.id == order_id, model.deleted_at.is_(None))
        .with_for_update()
    )


async def lock_orders(db: AsyncSession, model, order_ids) -> dict:
    """Lock several orders (live or not) in id order and return them by id."""
    ids = sorted({int(i) for i in order_ids})
    rows = await db.execute(
        select(model).where(model.id.in_(ids)).order_by(model.id).with_for_update()
    )
    return {order.id: order for order in rows.scalars().all()}
