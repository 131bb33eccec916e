from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.inventory.stock_schemas import StockBalanceOutSchema, StockTransactionOutSchema
from app.services.inventory.stock_query_service import list_stock_balances, list_stock_transactions

balance_router = APIRouter(
    prefix="/stock-balances",
    tags=["Stock"],
)

transaction_router = APIRouter(
    prefix="/stock-transactions",
    tags=["Stock"],
)


@balance_router.get("/", response_model=APIResponse[List[StockBalanceOutSchema]])
async def list_stock_balances_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    client_id: int | None = Query(None),
    product_id: int | None = Query(None),
    lot_id: int | None = Query(None),
    warehouse_id: int | None = Query(None),
    location_id: int | None = Query(None),
    only_positive: bool = Query(False),
):
    balances = await list_stock_balances(
        db,
        client_id=client_id,
        product_id=product_id,
        lot_id=lot_id,
        warehouse_id=warehouse_id,
        location_id=location_id,
        only_positive=only_positive,
    )
    return success_response(balances)


@transaction_router.get("/", response_model=APIResponse[List[StockTransactionOutSchema]])
async def list_stock_transactions_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    client_id: int | None = Query(None),
    product_id: int | None = Query(None),
    txn_type: str | None = Query(None),
    ref_type: str | None = Query(None),
    ref_id: int | None = Query(None),
    include_deleted: bool = Query(False),
):
    txns = await list_stock_transactions(
        db,
        client_id=client_id,
        product_id=product_id,
        txn_type=txn_type,
        ref_type=ref_type,
        ref_id=ref_id,
        include_deleted=include_deleted,
    )
    return success_response(txns)
