from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import WRITE_ROLES
from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.orders.outbound_item_schemas import OutboundItemSchema, OutboundItemOutSchema

from app.services.orders.outbound_item_service import (
    create_outbound_item,
    update_outbound_item,
    delete_outbound_item,
    get_outbound_item,
    list_outbound_items,
)

router = APIRouter(
    prefix="/outbound-items",
    tags=["Outbound Items"],
)


@router.post("/", status_code=201, response_model=APIResponse[OutboundItemOutSchema])
async def create_outbound_item_api(
    payload: OutboundItemSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    item = await create_outbound_item(db, payload, user)
    return success_response(item)


@router.get("/", response_model=APIResponse[List[OutboundItemOutSchema]])
async def list_outbound_items_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    outbound_order_id: int | None = Query(None),
):
    items = await list_outbound_items(db, outbound_order_id)
    return success_response(items)


@router.get("/{item_id}", response_model=APIResponse[OutboundItemOutSchema])
async def get_outbound_item_api(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    item = await get_outbound_item(db, item_id)
    return success_response(item)


@router.put("/{item_id}", response_model=APIResponse[OutboundItemOutSchema])
async def update_outbound_item_api(
    item_id: int,
    payload: OutboundItemSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    item = await update_outbound_item(db, item_id, payload, user)
    return success_response(item)


@router.delete("/{item_id}", response_model=APIResponse[dict])
async def delete_outbound_item_api(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    await delete_outbound_item(db, item_id, user)
    return success_response({"id": item_id})
