from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import WRITE_ROLES
from app.core.db import get_db
from app.utils.check_roles import require_role
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse

from app.schemas.inventory.storage_snapshot_schemas import (
    StorageSnapshotGenerateSchema,
    StorageSnapshotGenerateResult,
    StorageSnapshotOutSchema,
)
from app.services.inventory.storage_snapshot_service import (
    generate_storage_snapshots,
    list_storage_snapshots,
)

router = APIRouter(
    prefix="/storage-snapshots",
    tags=["Storage Snapshots"],
)


@router.post("/generate", response_model=APIResponse[StorageSnapshotGenerateResult])
async def generate_storage_snapshots_api(
    payload: StorageSnapshotGenerateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_role(WRITE_ROLES)),
):
    result = await generate_storage_snapshots(
        db,
        snapshot_date=payload.snapshot_date,
        warehouse_id=payload.warehouse_id,
        client_id=payload.client_id,
    )
    return success_response(result)


@router.get("/", response_model=APIResponse[List[StorageSnapshotOutSchema]])
async def list_storage_snapshots_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
    snapshot_date: date | None = Query(None, alias="date", description="YYYY-MM-DD"),
    warehouse_id: int | None = Query(None),
    client_id: int | None = Query(None),
):
    snapshots = await list_storage_snapshots(
        db,
        snapshot_date=snapshot_date,
        warehouse_id=warehouse_id,
        client_id=client_id,
    )
    return success_response(snapshots)
