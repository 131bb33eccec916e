from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.constants.error_codes import ErrorCode
from app.constants.stock import StockTxnType, StockRefType
from app.core.exceptions import AppException
from app.models.inventory.stock_balance_models import StockBalance, NO_LOCATION_KEY
from app.models.inventory.stock_transaction_models import StockTransaction
from app.utils.datetime_utils import utcnow

import logging

logger = logging.getLogger(__name__)


class StockKey(NamedTuple):
    client_id: int
    product_id: int
    lot_id: int
    warehouse_id: int
    location_id: int | None = None

    @property
    def location_key(self) -> int:
        return self.location_id if self.location_id is not None else NO_LOCATION_KEY

    @property
    def lock_order(self) -> tuple:
        return (self.client_id, self.product_id, self.lot_id, self.warehouse_id, self.location_key)


def in_lock_order(items, key_of) -> list:
    """Items sorted by the balance row they touch, then by id."""
    return sorted(items, key=lambda item: (key_of(item).lock_order, item.id))


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else value


# =====================================================
# BALANCES
# =====================================================
async def adjust_available_qty(
    db: AsyncSession,
    key: StockKey,
    delta: int,
) -> StockBalance:
    """Apply a signed delta to one balance row, refusing to go below zero.

    The row is locked for the rest of the caller's transaction so concurrent
    receipts and shipments against the same key serialize.
    """
    # ------------------------------------
    # 1. Lock balance row (NULL location matched via location_key)
    # ------------------------------------
    result = await db.execute(
        select(StockBalance)
        .where(
            StockBalance.client_id == key.client_id,
            StockBalance.product_id == key.product_id,
            StockBalance.lot_id == key.lot_id,
            StockBalance.warehouse_id == key.warehouse_id,
            StockBalance.location_key == key.location_key,
        )
        .with_for_update()
    )
    balance = result.scalar_one_or_none()

    # ------------------------------------
    # 2. Validate non-negative stock
    # ------------------------------------
    current = balance.available_qty if balance else 0
    next_qty = current + delta
    if next_qty < 0:
        raise AppException(
            ErrorCode.INSUFFICIENT_STOCK,
            "Insufficient stock",
            details={
                "client_id": key.client_id,
                "product_id": key.product_id,
                "lot_id": key.lot_id,
                "warehouse_id": key.warehouse_id,
                "location_id": key.location_id,
                "available_qty": current,
                "requested_delta": delta,
            },
        )

    # ------------------------------------
    # 3. Create or update
    # ------------------------------------
    if balance is None:
        balance = StockBalance(
            client_id=key.client_id,
            product_id=key.product_id,
            lot_id=key.lot_id,
            warehouse_id=key.warehouse_id,
            location_id=key.location_id,
            location_key=key.location_key,
            available_qty=next_qty,
            reserved_qty=0,
        )
        db.add(balance)
    else:
        balance.available_qty = next_qty

    await db.flush()

    logger.debug("stock %s adjusted %+d -> %d", tuple(key), delta, next_qty)
    return balance


# =====================================================
# TRANSACTION LOG
# =====================================================
async def _find_stock_txn(
    db: AsyncSession,
    txn_type: StockTxnType | str,
    ref_type: StockRefType | str,
    ref_id: int,
    *,
    live_only: bool,
) -> StockTransaction | None:
    stmt = select(StockTransaction).where(
        StockTransaction.txn_type == _enum_value(txn_type),
        StockTransaction.ref_type == _enum_value(ref_type),
        StockTransaction.ref_id == int(ref_id),
    )
    if live_only:
        stmt = stmt.where(StockTransaction.deleted_at.is_(None))

    result = await db.execute(stmt.order_by(StockTransaction.id).limit(1))
    return result.scalar_one_or_none()


async def upsert_stock_txn(
    db: AsyncSession,
    *,
    key: StockKey,
    txn_type: StockTxnType,
    ref_type: StockRefType,
    ref_id: int,
    qty_in: int = 0,
    qty_out: int = 0,
    created_by: int | None = None,
    note: str | None = None,
) -> int:
    """Write the ledger entry for a reference, reusing (and reviving) any prior row."""
    txn = await _find_stock_txn(db, txn_type, ref_type, ref_id, live_only=False)

    if txn is None:
        txn = StockTransaction(
            txn_type=_enum_value(txn_type),
            ref_type=_enum_value(ref_type),
            ref_id=int(ref_id),
        )
        db.add(txn)

    txn.client_id = key.client_id
    txn.product_id = key.product_id
    txn.lot_id = key.lot_id
    txn.warehouse_id = key.warehouse_id
    txn.location_id = key.location_id
    txn.qty_in = qty_in
    txn.qty_out = qty_out
    txn.note = note or None
    txn.created_by = created_by
    txn.txn_date = utcnow()
    txn.deleted_at = None

    await db.flush()
    return txn.id


async def get_stock_txn_id(
    db: AsyncSession,
    txn_type: StockTxnType,
    ref_type: StockRefType,
    ref_id: int,
) -> int | None:
    txn = await _find_stock_txn(db, txn_type, ref_type, ref_id, live_only=True)
    return txn.id if txn else None


async def soft_delete_stock_txn(
    db: AsyncSession,
    txn_type: StockTxnType,
    ref_type: StockRefType,
    ref_id: int,
) -> None:
    txn = await _find_stock_txn(db, txn_type, ref_type, ref_id, live_only=True)
    if txn is None:
        return

    txn.deleted_at = utcnow()
    await db.flush()
