import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.constants.order_log_templates import OrderLogAction
from app.core.scheduler import _parse_hhmm
from app.services.orders.order_log_service import (
    append_order_logs,
    build_outbound_log,
    derive_inbound_action,
    derive_outbound_action,
    render_order_log_note,
)
from app.utils.get_user import resolve_actor_user_id


@pytest.mark.parametrize(
    "from_status, to_status, expected",
    [
        (None, "draft", OrderLogAction.CREATE),
        ("draft", "submitted", OrderLogAction.SUBMIT),
        ("submitted", "arrived", OrderLogAction.ARRIVE),
        ("arrived", "received", OrderLogAction.RECEIVE),
        ("received", "cancelled", OrderLogAction.CANCEL),
        ("arrived", "qc_hold", OrderLogAction.STATUS_CHANGE),
        ("received", "received", OrderLogAction.UPDATE),
    ],
)
def test_inbound_action_naming(from_status, to_status, expected):
    assert derive_inbound_action(from_status, to_status) == expected


def test_outbound_action_naming():
    assert derive_outbound_action("confirmed", "allocated") == OrderLogAction.ALLOCATE
    assert derive_outbound_action("packing", "packed") == OrderLogAction.PACK
    assert derive_outbound_action("packed", "shipped") == OrderLogAction.SHIP
    assert derive_outbound_action("shipped", "delivered") == OrderLogAction.STATUS_CHANGE
    assert derive_outbound_action("draft", "cancelled") == OrderLogAction.CANCEL


def test_move_notes_name_the_other_order():
    log = build_outbound_log(
        3,
        OrderLogAction.ITEM_MOVE_OUT,
        from_status="draft",
        to_status="draft",
        target_order_id=8,
        item_id=11,
        qty=2,
    )
    assert log.note == "Item moved out to outbound_order_id=8 (item=11, qty=2)"
    assert log.action == "item_move_out"


def test_note_with_missing_context_is_dropped():
    assert render_order_log_note(OrderLogAction.ITEM_UPDATE, item_id=1) is None


def test_actor_falls_back_to_order_creator():
    assert resolve_actor_user_id(None, 7) == 7
    assert resolve_actor_user_id(None, None) is None


class _FailingSession:
    def __init__(self):
        self.rolled_back = False

    def add_all(self, rows):
        pass

    async def commit(self):
        raise SQLAlchemyError("boom")

    async def rollback(self):
        self.rolled_back = True


async def test_failed_log_append_does_not_raise():
    session = _FailingSession()
    log = build_outbound_log(1, OrderLogAction.UPDATE, from_status="draft", to_status="draft")

    assert await append_order_logs(session, [log]) is False
    assert session.rolled_back


def test_schedule_time_parsing():
    assert _parse_hhmm("00:10") == (0, 10)
    with pytest.raises(ValueError):
        _parse_hhmm("25:00")
    with pytest.raises(ValueError):
        _parse_hhmm("noon")
