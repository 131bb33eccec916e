from apscheduler.schedulers.asyncio import AsyncIOScheduler
from app.core.config import STORAGE_SNAPSHOT_SCHEDULE_HHMM
from app.core.db import AsyncSessionLocal

from app.services.inventory.storage_snapshot_service import generate_storage_snapshots

import logging

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def _parse_hhmm(value: str) -> tuple[int, int]:
    try:
        hour, minute = (int(part) for part in value.split(":"))
    except ValueError:
        raise ValueError("STORAGE_SNAPSHOT_SCHEDULE_HHMM must be HH:MM")
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError("STORAGE_SNAPSHOT_SCHEDULE_HHMM must be HH:MM")
    return hour, minute


SNAPSHOT_HOUR, SNAPSHOT_MINUTE = _parse_hhmm(STORAGE_SNAPSHOT_SCHEDULE_HHMM)


@scheduler.scheduled_job("cron", hour=SNAPSHOT_HOUR, minute=SNAPSHOT_MINUTE, id="storage_snapshot_daily")
async def storage_snapshot_job():
    async with AsyncSessionLocal() as db:
        try:
            await generate_storage_snapshots(db)
        except Exception:
            logger.exception("Daily storage snapshot failed")
