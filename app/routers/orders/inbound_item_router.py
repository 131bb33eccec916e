from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import WRITE_ROLES
from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.orders.inbound_item_schemas import InboundItemSchema, InboundItemOutSchema

from app.services.orders.inbound_item_service import (
    create_inbound_item,
    update_inbound_item,
    delete_inbound_item,
    get_inbound_item,
    list_inbound_items,
)

router = APIRouter(
    prefix="/inbound-items",
    tags=["Inbound Items"],
)


@router.post("/", status_code=201, response_model=APIResponse[InboundItemOutSchema])
async def create_inbound_item_api(
    payload: InboundItemSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    item = await create_inbound_item(db, payload, user)
    return success_response(item)


@router.get("/", response_model=APIResponse[List[InboundItemOutSchema]])
async def list_inbound_items_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    inbound_order_id: int | None = Query(None),
):
    items = await list_inbound_items(db, inbound_order_id)
    return success_response(items)


@router.get("/{item_id}", response_model=APIResponse[InboundItemOutSchema])
async def get_inbound_item_api(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    item = await get_inbound_item(db, item_id)
    return success_response(item)


# Changing inbound_order_id moves the item (and its stock effect) to that order.
@router.put("/{item_id}", response_model=APIResponse[InboundItemOutSchema])
async def update_inbound_item_api(
    item_id: int,
    payload: InboundItemSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    item = await update_inbound_item(db, item_id, payload, user)
    return success_response(item)


@router.delete("/{item_id}", response_model=APIResponse[dict])
async def delete_inbound_item_api(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    await delete_inbound_item(db, item_id, user)
    return success_response({"id": item_id})
