from sqlalchemy import select

from app.models.billing.billing_event_models import BillingEvent
from app.services.orders import inbound_order_service

from conftest import (
    OTHER_LOT_ID,
    inbound_order_payload,
    item_payload,
    create_inbound_with_item,
    receive_inbound,
    balance_qty,
)


async def _live_txns(client, **params):
    res = await client.get("/stock-transactions/", params=params)
    assert res.status_code == 200
    return res.json()["data"]


async def _billing_events(client, order_id: int):
    res = await client.get(
        "/billing-events/",
        params={"reference_type": "INBOUND", "reference_id": str(order_id)},
    )
    assert res.status_code == 200
    return res.json()["data"]


async def _logs(client, order_id: int):
    res = await client.get(f"/inbound-orders/{order_id}/logs")
    assert res.status_code == 200
    return res.json()["data"]


async def test_receiving_an_order_applies_stock_and_billing(client):
    order, item = await create_inbound_with_item(client, qty=10)
    assert await balance_qty(client) == 0

    res = await receive_inbound(client, order)
    assert res.status_code == 200, res.text
    assert res.json()["data"]["received_at"] is not None

    assert await balance_qty(client) == 10

    txns = await _live_txns(client, ref_type="inbound_item", ref_id=item["id"])
    assert len(txns) == 1
    assert txns[0]["txn_type"] == "inbound_receive"
    assert txns[0]["qty_in"] == 10

    events = await _billing_events(client, order["id"])
    assert len(events) == 1
    assert events[0]["service_code"] == "INBOUND_FEE"
    assert events[0]["qty"] == 10
    assert events[0]["pricing_policy"] == "KRW_FIXED"


async def test_cancelling_a_received_order_rolls_everything_back(client):
    order, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    res = await receive_inbound(client, order, status="cancelled")
    assert res.status_code == 200, res.text

    assert await balance_qty(client) == 0
    assert await _live_txns(client, ref_type="inbound_item", ref_id=item["id"]) == []

    all_txns = await _live_txns(client, ref_type="inbound_item", ref_id=item["id"], include_deleted=True)
    assert len(all_txns) == 1
    assert all_txns[0]["deleted_at"] is not None

    assert await _billing_events(client, order["id"]) == []


async def test_toggling_status_leaves_stock_net_unchanged(client):
    order, item = await create_inbound_with_item(client, qty=7)

    for status in ("received", "arrived", "received", "qc_hold", "received"):
        res = await receive_inbound(client, order, status=status)
        assert res.status_code == 200, res.text

    assert await balance_qty(client) == 7
    all_txns = await _live_txns(client, ref_type="inbound_item", ref_id=item["id"], include_deleted=True)
    assert len(all_txns) == 1
    assert len(await _billing_events(client, order["id"])) == 1


async def test_client_and_warehouse_are_locked_after_receipt(client):
    order, _ = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    body = inbound_order_payload(status="received", warehouse_id=2)
    res = await client.put(f"/inbound-orders/{order['id']}", json=body)

    assert res.status_code == 409
    assert res.json()["ok"] is False
    assert res.json()["code"] == "ORDER_LOCKED_FIELDS"

    res = await client.get(f"/inbound-orders/{order['id']}")
    assert res.json()["data"]["warehouse_id"] == 1
    assert await balance_qty(client) == 10


async def test_duplicate_inbound_no_is_a_conflict(client):
    res = await client.post("/inbound-orders/", json=inbound_order_payload())
    assert res.status_code == 201

    res = await client.post("/inbound-orders/", json=inbound_order_payload())
    assert res.status_code == 409
    assert res.json()["code"] == "DUPLICATE"


async def test_deleting_a_received_order_reverses_its_receipt(client):
    order, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    res = await client.delete(f"/inbound-orders/{order['id']}")
    assert res.status_code == 200

    assert await balance_qty(client) == 0
    assert await _live_txns(client, ref_type="inbound_item", ref_id=item["id"]) == []
    assert await _billing_events(client, order["id"]) == []

    res = await client.get(f"/inbound-orders/{order['id']}")
    assert res.status_code == 404


async def test_delete_unknown_order_is_not_found(client):
    res = await client.delete("/inbound-orders/999")
    assert res.status_code == 404
    assert res.json()["code"] == "NOT_FOUND"


async def test_item_edit_on_received_order_adjusts_the_delta(client):
    order, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    res = await client.put(
        f"/inbound-items/{item['id']}",
        json=item_payload("inbound_order_id", order["id"], qty=4),
    )
    assert res.status_code == 200, res.text

    assert await balance_qty(client) == 4
    txns = await _live_txns(client, ref_type="inbound_item", ref_id=item["id"])
    assert [t["qty_in"] for t in txns] == [4]
    assert (await _billing_events(client, order["id"]))[0]["qty"] == 4


async def test_item_added_to_received_order_is_applied_immediately(client):
    order, _ = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    res = await client.post("/inbound-items/", json=item_payload("inbound_order_id", order["id"], qty=5))
    assert res.status_code == 201

    assert await balance_qty(client) == 15
    assert (await _billing_events(client, order["id"]))[0]["qty"] == 15


async def test_deleting_last_item_removes_billing_event(client):
    order, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, order)

    res = await client.delete(f"/inbound-items/{item['id']}")
    assert res.status_code == 200

    assert await balance_qty(client) == 0
    assert await _billing_events(client, order["id"]) == []


async def test_moving_item_out_of_received_order_into_draft(client):
    source, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, source)

    res = await client.post("/inbound-orders/", json=inbound_order_payload(inbound_no="IN-003"))
    target = res.json()["data"]

    res = await client.put(
        f"/inbound-items/{item['id']}",
        json=item_payload("inbound_order_id", target["id"], qty=10),
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["inbound_order_id"] == target["id"]

    assert await balance_qty(client) == 0
    assert await _billing_events(client, source["id"]) == []
    assert await _billing_events(client, target["id"]) == []

    source_actions = [log["action"] for log in await _logs(client, source["id"])]
    target_actions = [log["action"] for log in await _logs(client, target["id"])]
    assert source_actions[-1] == "item_move_out"
    assert target_actions[-1] == "item_move_in"


async def test_moving_item_between_received_orders_rebooks_stock_and_billing(client, db):
    source, item = await create_inbound_with_item(client, qty=10)
    await receive_inbound(client, source)

    res = await client.post("/inbound-orders/", json=inbound_order_payload(inbound_no="IN-003"))
    target = res.json()["data"]
    await receive_inbound(client, target)

    res = await client.put(
        f"/inbound-items/{item['id']}",
        json=item_payload("inbound_order_id", target["id"], qty=7),
    )
    assert res.status_code == 200, res.text

    assert await balance_qty(client) == 7

    txns = await _live_txns(client, ref_type="inbound_item", ref_id=item["id"])
    assert len(txns) == 1
    assert txns[0]["txn_type"] == "inbound_receive"
    assert txns[0]["qty_in"] == 7

    assert await _billing_events(client, source["id"]) == []
    source_rows = (await db.execute(
        select(BillingEvent).where(
            BillingEvent.reference_type == "INBOUND",
            BillingEvent.reference_id == str(source["id"]),
        )
    )).scalars().all()
    assert len(source_rows) == 1
    assert source_rows[0].deleted_at is not None

    target_events = await _billing_events(client, target["id"])
    assert len(target_events) == 1
    assert target_events[0]["qty"] == 7


async def test_lot_must_belong_to_product(client):
    res = await client.post("/inbound-orders/", json=inbound_order_payload())
    order = res.json()["data"]

    res = await client.post(
        "/inbound-items/",
        json=item_payload("inbound_order_id", order["id"], lot_id=OTHER_LOT_ID),
    )
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_LOT_PRODUCT"


async def test_item_for_unknown_order_is_rejected(client):
    res = await client.post("/inbound-items/", json=item_payload("inbound_order_id", 999))
    assert res.status_code == 400
    assert res.json()["code"] == "INVALID_ORDER"


async def test_order_log_trail_names_milestones(client):
    order, _ = await create_inbound_with_item(client, qty=3)
    await receive_inbound(client, order, status="submitted")
    await receive_inbound(client, order, status="received")
    await receive_inbound(client, order, status="received")

    logs = await _logs(client, order["id"])
    assert [log["action"] for log in logs] == [
        "create",
        "item_create",
        "submit",
        "receive",
        "update",
    ]
    assert logs[0]["note"] == "Created inbound order IN-001"
    assert logs[2]["note"] == "draft -> submitted"
    assert logs[0]["actor_email"] == "admin@example.com"


async def test_receipt_survives_a_failed_log_append(client, monkeypatch):
    order, item = await create_inbound_with_item(client, qty=10)
    build_log = inbound_order_service.build_inbound_log

    def build_log_for_missing_order(inbound_order_id, action, **kwargs):
        return build_log(999999, action, **kwargs)

    monkeypatch.setattr(inbound_order_service, "build_inbound_log", build_log_for_missing_order)

    res = await receive_inbound(client, order)
    assert res.status_code == 200, res.text
    assert res.json()["data"]["status"] == "received"

    res = await client.get(f"/inbound-orders/{order['id']}")
    assert res.json()["data"]["status"] == "received"
    assert await balance_qty(client) == 10
    assert len(await _live_txns(client, ref_type="inbound_item", ref_id=item["id"])) == 1
    assert [log["action"] for log in await _logs(client, order["id"])] == ["create", "item_create"]
