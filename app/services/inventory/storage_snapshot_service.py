from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.core.config import PALLET_CBM
from app.core.db import transaction
from app.models.inventory.stock_balance_models import StockBalance
from app.models.inventory.storage_snapshot_models import StorageSnapshot
from app.models.masters.product_models import Product
from app.schemas.inventory.storage_snapshot_schemas import (
    StorageSnapshotOutSchema,
    StorageSnapshotGenerateResult,
    MissingCbmItemSchema,
)
from app.utils.datetime_utils import utcnow

import logging

logger = logging.getLogger(__name__)

ML_PER_CBM = Decimal(1_000_000)
FOUR_PLACES = Decimal("0.0001")


def _round4(value: Decimal) -> Decimal:
    return value.quantize(FOUR_PLACES, rounding=ROUND_HALF_UP)


def _scope_filters(warehouse_id: int | None, client_id: int | None) -> list:
    filters = [StockBalance.available_qty > 0, Product.deleted_at.is_(None)]
    if warehouse_id:
        filters.append(StockBalance.warehouse_id == warehouse_id)
    if client_id:
        filters.append(StockBalance.client_id == client_id)
    return filters


async def _aggregate_volumes(db: AsyncSession, filters: list) -> list:
    rows = await db.execute(
        select(
            StockBalance.warehouse_id,
            StockBalance.client_id,
            func.sum(StockBalance.available_qty * func.coalesce(Product.volume_ml, 0)).label("total_ml"),
            func.count(func.distinct(StockBalance.product_id)).label("total_sku"),
        )
        .join(Product, Product.id == StockBalance.product_id)
        .where(*filters)
        .group_by(StockBalance.warehouse_id, StockBalance.client_id)
        .order_by(StockBalance.warehouse_id, StockBalance.client_id)
    )
    return rows.all()


async def _missing_volume_items(db: AsyncSession, filters: list) -> list[MissingCbmItemSchema]:
    rows = await db.execute(
        select(
            StockBalance.warehouse_id,
            StockBalance.client_id,
            Product.id,
            Product.sku_code,
            Product.name,
            func.sum(StockBalance.available_qty),
        )
        .join(Product, Product.id == StockBalance.product_id)
        .where(*filters, or_(Product.volume_ml.is_(None), Product.volume_ml <= 0))
        .group_by(
            StockBalance.warehouse_id,
            StockBalance.client_id,
            Product.id,
            Product.sku_code,
            Product.name,
        )
        .order_by(StockBalance.warehouse_id, StockBalance.client_id, Product.id)
    )
    return [
        MissingCbmItemSchema(
            warehouse_id=wh_id,
            client_id=client_id,
            product_id=product_id,
            sku_code=sku_code,
            product_name=name,
            available_qty=int(qty or 0),
        )
        for wh_id, client_id, product_id, sku_code, name, qty in rows.all()
    ]


async def _upsert_snapshot(
    db: AsyncSession,
    *,
    warehouse_id: int,
    client_id: int,
    snapshot_date: date,
    total_cbm: Decimal,
    total_pallet: Decimal,
    total_sku: int,
) -> StorageSnapshot:
    snapshot = await db.scalar(
        select(StorageSnapshot).where(
            StorageSnapshot.warehouse_id == warehouse_id,
            StorageSnapshot.client_id == client_id,
            StorageSnapshot.snapshot_date == snapshot_date,
        )
    )
    if snapshot is None:
        snapshot = StorageSnapshot(
            warehouse_id=warehouse_id,
            client_id=client_id,
            snapshot_date=snapshot_date,
        )
        db.add(snapshot)

    snapshot.total_cbm = total_cbm
    snapshot.total_pallet = total_pallet
    snapshot.total_sku = total_sku
    await db.flush()
    return snapshot


# =====================================================
# GENERATE
# =====================================================
async def generate_storage_snapshots(
    db: AsyncSession,
    *,
    snapshot_date: date | None = None,
    warehouse_id: int | None = None,
    client_id: int | None = None,
) -> StorageSnapshotGenerateResult:
    """Record today's (or the given day's) stored volume per warehouse and client.

    Volume is sum(qty * volume_ml) over positive balances, in cubic metres.
    Products without a usable volume_ml count as zero and are reported back
    so they can be fixed before invoicing.
    """
    snapshot_date = snapshot_date or utcnow().date()
    filters = _scope_filters(warehouse_id, client_id)
    pallet_cbm = Decimal(str(PALLET_CBM))

    async with transaction(db):
        generated = 0
        for wh_id, c_id, total_ml, total_sku in await _aggregate_volumes(db, filters):
            raw_cbm = Decimal(int(total_ml or 0)) / ML_PER_CBM
            total_cbm = _round4(raw_cbm)
            total_pallet = _round4(raw_cbm / pallet_cbm) if pallet_cbm > 0 else Decimal("0")

            await _upsert_snapshot(
                db,
                warehouse_id=wh_id,
                client_id=c_id,
                snapshot_date=snapshot_date,
                total_cbm=total_cbm,
                total_pallet=total_pallet,
                total_sku=int(total_sku or 0),
            )
            generated += 1

        missing = await _missing_volume_items(db, filters)

    logger.info(
        "Storage snapshots generated for %s: %d row(s), %d product(s) missing volume",
        snapshot_date,
        generated,
        len(missing),
    )

    return StorageSnapshotGenerateResult(
        snapshot_date=snapshot_date,
        generated=generated,
        missing_product_cbm_count=len(missing),
        missing_product_cbm_items=missing,
    )


# =====================================================
# LIST
# =====================================================
async def list_storage_snapshots(
    db: AsyncSession,
    *,
    snapshot_date: date | None = None,
    warehouse_id: int | None = None,
    client_id: int | None = None,
) -> list[StorageSnapshotOutSchema]:
    stmt = select(StorageSnapshot)
    if snapshot_date:
        stmt = stmt.where(StorageSnapshot.snapshot_date == snapshot_date)
    if warehouse_id:
        stmt = stmt.where(StorageSnapshot.warehouse_id == warehouse_id)
    if client_id:
        stmt = stmt.where(StorageSnapshot.client_id == client_id)

    rows = await db.execute(
        stmt.order_by(
            StorageSnapshot.snapshot_date.desc(),
            StorageSnapshot.warehouse_id.asc(),
            StorageSnapshot.client_id.asc(),
        )
    )
    return [StorageSnapshotOutSchema.model_validate(s) for s in rows.scalars().all()]
