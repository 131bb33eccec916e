from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import WRITE_ROLES
from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.orders.outbound_order_schemas import (
    OutboundOrderCreateSchema,
    OutboundOrderUpdateSchema,
    OutboundOrderOutSchema,
)
from app.schemas.orders.order_log_schemas import OrderLogOutSchema
from app.schemas.orders.outbound_box_schemas import (
    OutboundBoxCreateSchema,
    OutboundBoxUpdateSchema,
    OutboundBoxOutSchema,
)

from app.services.orders.outbound_order_service import (
    create_outbound_order,
    update_outbound_order,
    delete_outbound_order,
    get_outbound_order,
    list_outbound_orders,
    get_outbound_order_logs,
)
from app.services.orders.outbound_box_service import (
    list_outbound_boxes,
    create_outbound_box,
    update_outbound_box,
    delete_outbound_box,
)

router = APIRouter(
    prefix="/outbound-orders",
    tags=["Outbound Orders"],
)


# =========================
# CREATE
# =========================
@router.post("/", status_code=201, response_model=APIResponse[OutboundOrderOutSchema])
async def create_outbound_order_api(
    payload: OutboundOrderCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    order = await create_outbound_order(db, payload, user)
    return success_response(order)


# =========================
# LIST
# =========================
@router.get("/", response_model=APIResponse[List[OutboundOrderOutSchema]])
async def list_outbound_orders_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    client_id: int | None = Query(None),
    warehouse_id: int | None = Query(None),
    status: str | None = Query(None),
):
    orders = await list_outbound_orders(
        db, client_id=client_id, warehouse_id=warehouse_id, status=status
    )
    return success_response(orders)


# =========================
# GET BY ID
# =========================
@router.get("/{outbound_order_id}", response_model=APIResponse[OutboundOrderOutSchema])
async def get_outbound_order_api(
    outbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    order = await get_outbound_order(db, outbound_order_id)
    return success_response(order)


# =========================
# AUDIT LOG
# =========================
@router.get("/{outbound_order_id}/logs", response_model=APIResponse[List[OrderLogOutSchema]])
async def get_outbound_order_logs_api(
    outbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    logs = await get_outbound_order_logs(db, outbound_order_id)
    return success_response(logs)


# =========================
# UPDATE (STATUS MACHINE)
# =========================
@router.put("/{outbound_order_id}", response_model=APIResponse[OutboundOrderOutSchema])
async def update_outbound_order_api(
    outbound_order_id: int,
    payload: OutboundOrderUpdateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    order = await update_outbound_order(db, outbound_order_id, payload, user)
    return success_response(order)


# =========================
# DELETE (SOFT, WITH ROLLBACK)
# =========================
@router.delete("/{outbound_order_id}", response_model=APIResponse[dict])
async def delete_outbound_order_api(
    outbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    await delete_outbound_order(db, outbound_order_id, user)
    return success_response({"id": outbound_order_id})


# =========================
# BOXES
# =========================
@router.get("/{outbound_order_id}/boxes", response_model=APIResponse[List[OutboundBoxOutSchema]])
async def list_outbound_boxes_api(
    outbound_order_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    boxes = await list_outbound_boxes(db, outbound_order_id)
    return success_response(boxes)


@router.post("/{outbound_order_id}/boxes", status_code=201, response_model=APIResponse[OutboundBoxOutSchema])
async def create_outbound_box_api(
    outbound_order_id: int,
    payload: OutboundBoxCreateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    box = await create_outbound_box(db, outbound_order_id, payload)
    return success_response(box)


@router.put("/{outbound_order_id}/boxes/{box_id}", response_model=APIResponse[OutboundBoxOutSchema])
async def update_outbound_box_api(
    outbound_order_id: int,
    box_id: int,
    payload: OutboundBoxUpdateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    box = await update_outbound_box(db, outbound_order_id, box_id, payload)
    return success_response(box)


@router.delete("/{outbound_order_id}/boxes/{box_id}", response_model=APIResponse[dict])
async def delete_outbound_box_api(
    outbound_order_id: int,
    box_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    await delete_outbound_box(db, outbound_order_id, box_id)
    return success_response({"id": box_id})
