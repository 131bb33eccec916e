from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.models.inventory.stock_balance_models import StockBalance
from app.models.inventory.stock_transaction_models import StockTransaction
from app.schemas.inventory.stock_schemas import StockBalanceOutSchema, StockTransactionOutSchema


async def list_stock_balances(
    db: AsyncSession,
    *,
    client_id: int | None = None,
    product_id: int | None = None,
    lot_id: int | None = None,
    warehouse_id: int | None = None,
    location_id: int | None = None,
    only_positive: bool = False,
) -> list[StockBalanceOutSchema]:
    stmt = select(StockBalance)

    if client_id:
        stmt = stmt.where(StockBalance.client_id == client_id)
    if product_id:
        stmt = stmt.where(StockBalance.product_id == product_id)
    if lot_id:
        stmt = stmt.where(StockBalance.lot_id == lot_id)
    if warehouse_id:
        stmt = stmt.where(StockBalance.warehouse_id == warehouse_id)
    if location_id:
        stmt = stmt.where(StockBalance.location_id == location_id)
    if only_positive:
        stmt = stmt.where(StockBalance.available_qty > 0)

    rows = await db.execute(stmt.order_by(StockBalance.id.asc()))
    return [StockBalanceOutSchema.model_validate(b) for b in rows.scalars().all()]


async def list_stock_transactions(
    db: AsyncSession,
    *,
    client_id: int | None = None,
    product_id: int | None = None,
    txn_type: str | None = None,
    ref_type: str | None = None,
    ref_id: int | None = None,
    include_deleted: bool = False,
) -> list[StockTransactionOutSchema]:
    stmt = select(StockTransaction)

    if not include_deleted:
        stmt = stmt.where(StockTransaction.deleted_at.is_(None))
    if client_id:
        stmt = stmt.where(StockTransaction.client_id == client_id)
    if product_id:
        stmt = stmt.where(StockTransaction.product_id == product_id)
    if txn_type:
        stmt = stmt.where(StockTransaction.txn_type == txn_type)
    if ref_type:
        stmt = stmt.where(StockTransaction.ref_type == ref_type)
    if ref_id:
        stmt = stmt.where(StockTransaction.ref_id == ref_id)

    rows = await db.execute(stmt.order_by(StockTransaction.id.asc()))
    return [StockTransactionOutSchema.model_validate(t) for t in rows.scalars().all()]
