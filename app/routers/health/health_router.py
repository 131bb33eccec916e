from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import APP_ENV, APP_VERSION
from app.core.db import get_db
from app.utils.response import success_response

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


@router.get("")
async def health_check():
    return success_response({
        "status": "ok",
        "service": "wms-ledger-api",
        "environment": APP_ENV,
        "version": APP_VERSION,
    })


@router.get("/db")
async def health_check_db(db: AsyncSession = Depends(get_db)):
    await db.execute(text("SELECT 1"))
    return success_response({"status": "ok", "database": "reachable"})
