from conftest import (
    outbound_order_payload,
    item_payload,
    create_inbound_with_item,
    receive_inbound,
    set_outbound_status,
    balance_qty,
)


async def _create_outbound_with_item(client, qty: int = 4, **order_overrides):
    res = await client.post("/outbound-orders/", json=outbound_order_payload(**order_overrides))
    assert res.status_code == 201, res.text
    order = res.json()["data"]

    res = await client.post(
        "/outbound-items/",
        json=item_payload("outbound_order_id", order["id"], qty=qty, box_type="S", box_count=1),
    )
    assert res.status_code == 201, res.text
    return order, res.json()["data"]


async def _stock_in(client, qty: int = 10):
    order, _ = await create_inbound_with_item(client, qty=qty)
    res = await receive_inbound(client, order)
    assert res.status_code == 200, res.text


async def _outbound_events(client, order_id: int):
    res = await client.get(
        "/billing-events/",
        params={"reference_type": "OUTBOUND", "reference_id": str(order_id)},
    )
    return res.json()["data"]


async def test_shipping_without_stock_fails_and_writes_nothing(client):
    order, _ = await _create_outbound_with_item(client, qty=4)

    res = await set_outbound_status(client, order, "shipped")
    assert res.status_code == 400
    body = res.json()
    assert body["ok"] is False
    assert body["code"] == "INSUFFICIENT_STOCK"

    assert await balance_qty(client) == 0
    res = await client.get("/stock-transactions/", params={"txn_type": "outbound_ship", "include_deleted": True})
    assert res.json()["data"] == []
    res = await client.get("/service-events/", params={"outbound_order_id": order["id"]})
    assert res.json()["data"] == []
    assert await _outbound_events(client, order["id"]) == []

    res = await client.get(f"/outbound-orders/{order['id']}")
    assert res.json()["data"]["status"] == "draft"


async def test_shipping_takes_stock_and_records_events(client):
    await _stock_in(client, qty=10)
    order, item = await _create_outbound_with_item(client, qty=4)

    res = await set_outbound_status(client, order, "shipped")
    assert res.status_code == 200, res.text
    assert res.json()["data"]["shipped_at"] is not None

    assert await balance_qty(client) == 6

    res = await client.get("/stock-transactions/", params={"ref_type": "outbound_item", "ref_id": item["id"]})
    txns = res.json()["data"]
    assert len(txns) == 1
    assert txns[0]["qty_out"] == 4

    res = await client.get("/service-events/", params={"outbound_order_id": order["id"]})
    service_events = res.json()["data"]
    assert len(service_events) == 1
    assert service_events[0]["stock_transaction_id"] == txns[0]["id"]
    assert service_events[0]["box_count"] == 1
    assert service_events[0]["event_date"] == "2026-03-05"

    events = await _outbound_events(client, order["id"])
    assert len(events) == 1
    assert events[0]["service_code"] == "OUTBOUND_FEE"
    assert events[0]["qty"] == 4


async def test_items_are_frozen_after_shipment(client):
    await _stock_in(client, qty=10)
    order, item = await _create_outbound_with_item(client, qty=4)
    await set_outbound_status(client, order, "shipped")

    res = await client.put(
        f"/outbound-items/{item['id']}",
        json=item_payload("outbound_order_id", order["id"], qty=2),
    )
    assert res.status_code == 409
    assert res.json()["code"] == "ORDER_LOCKED"

    res = await client.post("/outbound-items/", json=item_payload("outbound_order_id", order["id"], qty=1))
    assert res.status_code == 409

    res = await client.delete(f"/outbound-items/{item['id']}")
    assert res.status_code == 409

    res = await client.get(f"/outbound-items/{item['id']}")
    assert res.json()["data"]["qty"] == 4
    assert await balance_qty(client) == 6


async def test_item_cannot_move_into_a_shipped_order(client):
    await _stock_in(client, qty=10)
    draft, item = await _create_outbound_with_item(client, qty=4)
    shipped, _ = await _create_outbound_with_item(client, qty=1, outbound_no="OUT-002")
    res = await set_outbound_status(client, shipped, "shipped")
    assert res.status_code == 200, res.text
    assert await balance_qty(client) == 9

    res = await client.put(
        f"/outbound-items/{item['id']}",
        json=item_payload("outbound_order_id", shipped["id"], qty=4, box_type="S", box_count=1),
    )
    assert res.status_code == 409
    assert res.json()["code"] == "ORDER_LOCKED"

    res = await client.get(f"/outbound-items/{item['id']}")
    assert res.json()["data"]["outbound_order_id"] == draft["id"]
    assert await balance_qty(client) == 9


async def test_moving_item_between_drafts_logs_both_sides(client):
    source, item = await _create_outbound_with_item(client, qty=4)
    res = await client.post("/outbound-orders/", json=outbound_order_payload(outbound_no="OUT-002"))
    target = res.json()["data"]

    res = await client.put(
        f"/outbound-items/{item['id']}",
        json=item_payload("outbound_order_id", target["id"], qty=4, box_type="S", box_count=1),
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["outbound_order_id"] == target["id"]

    res = await client.get(f"/outbound-orders/{source['id']}/logs")
    assert res.json()["data"][-1]["action"] == "item_move_out"
    res = await client.get(f"/outbound-orders/{target['id']}/logs")
    assert res.json()["data"][-1]["action"] == "item_move_in"


async def test_delivered_keeps_shipment_applied_once(client):
    await _stock_in(client, qty=10)
    order, _ = await _create_outbound_with_item(client, qty=4)

    await set_outbound_status(client, order, "shipped")
    res = await set_outbound_status(client, order, "delivered")
    assert res.status_code == 200

    assert await balance_qty(client) == 6
    assert len(await _outbound_events(client, order["id"])) == 1


async def test_unshipping_returns_stock_and_removes_events(client):
    await _stock_in(client, qty=10)
    order, _ = await _create_outbound_with_item(client, qty=4)
    await set_outbound_status(client, order, "shipped")

    res = await set_outbound_status(client, order, "packed")
    assert res.status_code == 200, res.text

    assert await balance_qty(client) == 10
    res = await client.get("/service-events/", params={"outbound_order_id": order["id"]})
    assert res.json()["data"] == []
    assert await _outbound_events(client, order["id"]) == []


async def test_packed_stamps_packed_at(client):
    order, _ = await _create_outbound_with_item(client, qty=1)

    res = await set_outbound_status(client, order, "packed")
    data = res.json()["data"]
    assert data["packed_at"] is not None
    assert data["shipped_at"] is None


async def test_deleting_shipped_order_returns_stock(client):
    await _stock_in(client, qty=10)
    order, _ = await _create_outbound_with_item(client, qty=4)
    await set_outbound_status(client, order, "shipped")

    res = await client.delete(f"/outbound-orders/{order['id']}")
    assert res.status_code == 200

    assert await balance_qty(client) == 10
    assert await _outbound_events(client, order["id"]) == []


async def test_locked_fields_on_shipped_order(client):
    await _stock_in(client, qty=10)
    order, _ = await _create_outbound_with_item(client, qty=4)
    await set_outbound_status(client, order, "shipped")

    res = await set_outbound_status(client, order, "shipped", client_id=2)
    assert res.status_code == 409
    assert res.json()["code"] == "ORDER_LOCKED_FIELDS"


# =====================================================
# BOXES
# =====================================================
async def test_box_crud(client):
    order, _ = await _create_outbound_with_item(client, qty=1)
    base = f"/outbound-orders/{order['id']}/boxes"

    res = await client.post(base, json={"box_no": "B-1", "item_count": 2})
    assert res.status_code == 201, res.text
    box = res.json()["data"]
    assert box["status"] == "open"

    res = await client.post(base, json={"box_no": "B-1", "item_count": 1})
    assert res.status_code == 409
    assert res.json()["code"] == "DUPLICATE"

    res = await client.put(
        f"{base}/{box['id']}",
        json={"box_no": "B-1", "item_count": 3, "courier": "CJ", "status": "packed"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "packed"
    assert res.json()["data"]["item_count"] == 3

    res = await client.delete(f"{base}/{box['id']}")
    assert res.status_code == 200

    res = await client.get(base)
    assert res.json()["data"] == []

    # box_no is free again once the old box is removed
    res = await client.post(base, json={"box_no": "B-1", "item_count": 1})
    assert res.status_code == 201


async def test_box_validation_and_missing_rows(client):
    order, _ = await _create_outbound_with_item(client, qty=1)

    res = await client.post(f"/outbound-orders/{order['id']}/boxes", json={"box_no": "B-1", "item_count": 0})
    assert res.status_code == 400
    assert res.json()["code"] == "VALIDATION_ERROR"

    res = await client.post("/outbound-orders/999/boxes", json={"box_no": "B-1", "item_count": 1})
    assert res.status_code == 404

    res = await client.delete(f"/outbound-orders/{order['id']}/boxes/999")
    assert res.status_code == 404
