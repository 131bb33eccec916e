from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import WRITE_ROLES
from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.orders.inbound_order_schemas import (
    InboundOrderCreateSchema,
    InboundOrderUpdateSchema,
    InboundOrderOutSchema,
)
from app.schemas.orders.order_log_schemas import OrderLogOutSchema

from app.services.orders.inbound_order_service import (
    create_inbound_order,
    update_inbound_order,
    delete_inbound_order,
    get_inbound_order,
    list_inbound_orders,
    get_inbound_order_logs,
)

router = APIRouter(
    prefix="/inbound-orders",
    tags=["Inbound Orders"],
)


# =========================
# CREATE
# =========================
@router.post("/", status_code=201, response_model=APIResponse[InboundOrderOutSchema])
async def create_inbound_order_api(
    payload: InboundOrderCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    order = await create_inbound_order(db, payload, user)
    return success_response(order)


# =========================
# LIST
# =========================
@router.get("/", response_model=APIResponse[List[InboundOrderOutSchema]])
async def list_inbound_orders_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    client_id: int | None = Query(None),
    warehouse_id: int | None = Query(None),
    status: str | None = Query(None),
):
    orders = await list_inbound_orders(
        db, client_id=client_id, warehouse_id=warehouse_id, status=status
    )
    return success_response(orders)


# =========================
# GET BY ID
# =========================
@router.get("/{inbound_order_id}", response_model=APIResponse[InboundOrderOutSchema])
async def get_inbound_order_api(
    inbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    order = await get_inbound_order(db, inbound_order_id)
    return success_response(order)


# =========================
# AUDIT LOG
# =========================
@router.get("/{inbound_order_id}/logs", response_model=APIResponse[List[OrderLogOutSchema]])
async def get_inbound_order_logs_api(
    inbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    logs = await get_inbound_order_logs(db, inbound_order_id)
    return success_response(logs)


# =========================
# UPDATE (STATUS MACHINE)
# =========================
@router.put("/{inbound_order_id}", response_model=APIResponse[InboundOrderOutSchema])
async def update_inbound_order_api(
    inbound_order_id: int,
    payload: InboundOrderUpdateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    order = await update_inbound_order(db, inbound_order_id, payload, user)
    return success_response(order)


# =========================
# DELETE (SOFT, WITH ROLLBACK)
# =========================
@router.delete("/{inbound_order_id}", response_model=APIResponse[dict])
async def delete_inbound_order_api(
    inbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    await delete_inbound_order(db, inbound_order_id, user)
    return success_response({"id": inbound_order_id})
