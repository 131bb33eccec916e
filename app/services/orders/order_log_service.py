from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from app.constants.order_log_templates import OrderLogAction, ORDER_LOG_TEMPLATES
from app.models.orders.order_log_models import InboundOrderLog, OutboundOrderLog
from app.models.users.user_models import User

import logging

logger = logging.getLogger(__name__)


# =====================================================
# ACTION NAMING
# =====================================================
INBOUND_MILESTONES = {
    "submitted": OrderLogAction.SUBMIT,
    "arrived": OrderLogAction.ARRIVE,
    "received": OrderLogAction.RECEIVE,
    "cancelled": OrderLogAction.CANCEL,
}

OUTBOUND_MILESTONES = {
    "allocated": OrderLogAction.ALLOCATE,
    "packed": OrderLogAction.PACK,
    "shipped": OrderLogAction.SHIP,
    "cancelled": OrderLogAction.CANCEL,
}


def _derive_action(milestones: dict, from_status: str | None, to_status: str) -> OrderLogAction:
    if not from_status:
        return OrderLogAction.CREATE
    if from_status != to_status and to_status in milestones:
        return milestones[to_status]
    if from_status != to_status:
        return OrderLogAction.STATUS_CHANGE
    return OrderLogAction.UPDATE


def derive_inbound_action(from_status: str | None, to_status: str) -> OrderLogAction:
    return _derive_action(INBOUND_MILESTONES, from_status, to_status)


def derive_outbound_action(from_status: str | None, to_status: str) -> OrderLogAction:
    return _derive_action(OUTBOUND_MILESTONES, from_status, to_status)


# =====================================================
# NOTE RENDERING
# =====================================================
def render_order_log_note(action: OrderLogAction, **context) -> str | None:
    template = ORDER_LOG_TEMPLATES.get(action)
    if not template:
        return None
    try:
        return template.format(**context)
    except (KeyError, IndexError, ValueError):
        logger.warning("Could not render note for order log action %s", action.value)
        return None


def _status_note_context(order_kind: str, from_status: str | None, to_status: str | None, **context) -> dict:
    return {
        "order_kind": order_kind,
        "order_kind_title": order_kind.capitalize(),
        "from_status": from_status,
        "to_status": to_status,
        **context,
    }


def build_inbound_log(
    inbound_order_id: int,
    action: OrderLogAction,
    *,
    from_status: str | None = None,
    to_status: str | None = None,
    actor_user_id: int | None = None,
    **context,
) -> InboundOrderLog:
    return InboundOrderLog(
        inbound_order_id=inbound_order_id,
        action=action.value,
        from_status=from_status,
        to_status=to_status,
        note=render_order_log_note(
            action, **_status_note_context("inbound", from_status, to_status, **context)
        ),
        actor_user_id=actor_user_id,
    )


def build_outbound_log(
    outbound_order_id: int,
    action: OrderLogAction,
    *,
    from_status: str | None = None,
    to_status: str | None = None,
    actor_user_id: int | None = None,
    **context,
) -> OutboundOrderLog:
    return OutboundOrderLog(
        outbound_order_id=outbound_order_id,
        action=action.value,
        from_status=from_status,
        to_status=to_status,
        note=render_order_log_note(
            action, **_status_note_context("outbound", from_status, to_status, **context)
        ),
        actor_user_id=actor_user_id,
    )


# =====================================================
# APPEND (after the business commit, best effort)
# =====================================================
async def append_order_logs(db: AsyncSession, logs: list) -> bool:
    """Persist audit rows in their own transaction.

    Runs after the business mutation has committed. A failure here is logged
    and swallowed; it never undoes the mutation it describes.
    """
    if not logs:
        return True

    try:
        db.add_all(logs)
        await db.commit()
        return True
    except SQLAlchemyError:
        await db.rollback()
        logger.exception(
            "Failed to append order logs",
            extra={"actions": [log.action for log in logs]},
        )
        return False


# =====================================================
# QUERIES
# =====================================================
async def _list_logs(db: AsyncSession, log_model, order_fk, order_id: int) -> list[dict]:
    rows = await db.execute(
        select(log_model, User.email, User.name)
        .outerjoin(User, User.id == log_model.actor_user_id)
        .where(order_fk == order_id)
        .order_by(log_model.id.asc())
    )
    return [
        {
            "id": log.id,
            "order_id": order_id,
            "action": log.action,
            "from_status": log.from_status,
            "to_status": log.to_status,
            "note": log.note,
            "actor_user_id": log.actor_user_id,
            "actor_email": email,
            "actor_name": name,
            "created_at": log.created_at,
        }
        for log, email, name in rows.all()
    ]


async def list_inbound_order_logs(db: AsyncSession, inbound_order_id: int) -> list[dict]:
    return await _list_logs(db, InboundOrderLog, InboundOrderLog.inbound_order_id, inbound_order_id)


async def list_outbound_order_logs(db: AsyncSession, outbound_order_id: int) -> list[dict]:
    return await _list_logs(db, OutboundOrderLog, OutboundOrderLog.outbound_order_id, outbound_order_id)
