from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import update

from app.models.masters.product_models import Product

from conftest import (
    OTHER_PRODUCT_ID,
    OTHER_LOT_ID,
    PRODUCT_ID,
    inbound_order_payload,
    item_payload,
    receive_inbound,
)


async def _receive(client, items: list[dict]):
    res = await client.post("/inbound-orders/", json=inbound_order_payload())
    order = res.json()["data"]
    for item in items:
        res = await client.post("/inbound-items/", json=item_payload("inbound_order_id", order["id"], **item))
        assert res.status_code == 201, res.text
    res = await receive_inbound(client, order)
    assert res.status_code == 200, res.text


async def test_generate_computes_cbm_pallets_and_missing_volume(client):
    # 2400 x 500 ml = 1.2 cbm = 1 pallet; the second product has no volume
    await _receive(client, [
        {"qty": 2400},
        {"product_id": OTHER_PRODUCT_ID, "lot_id": OTHER_LOT_ID, "qty": 3},
    ])

    res = await client.post("/storage-snapshots/generate", json={"snapshot_date": "2026-03-31"})
    assert res.status_code == 200, res.text
    result = res.json()["data"]

    assert result["generated"] == 1
    assert result["missing_product_cbm_count"] == 1
    missing = result["missing_product_cbm_items"][0]
    assert missing["product_id"] == OTHER_PRODUCT_ID
    assert missing["available_qty"] == 3

    res = await client.get("/storage-snapshots/", params={"date": "2026-03-31"})
    snapshots = res.json()["data"]
    assert len(snapshots) == 1
    assert Decimal(str(snapshots[0]["total_cbm"])) == Decimal("1.2")
    assert Decimal(str(snapshots[0]["total_pallet"])) == Decimal("1")
    assert snapshots[0]["total_sku"] == 2


async def test_regenerating_the_same_day_updates_in_place(client):
    await _receive(client, [{"qty": 100}])

    for _ in range(2):
        res = await client.post("/storage-snapshots/generate", json={"snapshot_date": "2026-04-01"})
        assert res.status_code == 200

    res = await client.get("/storage-snapshots/", params={"date": "2026-04-01"})
    snapshots = res.json()["data"]
    assert len(snapshots) == 1
    assert Decimal(str(snapshots[0]["total_cbm"])) == Decimal("0.05")


async def test_generate_with_no_stock_produces_nothing(client):
    res = await client.post("/storage-snapshots/generate", json={})
    assert res.status_code == 200
    assert res.json()["data"]["generated"] == 0


async def test_soft_deleted_products_are_not_counted(client, db):
    await _receive(client, [
        {"qty": 100},
        {"product_id": OTHER_PRODUCT_ID, "lot_id": OTHER_LOT_ID, "qty": 3},
    ])
    await db.execute(
        update(Product).where(Product.id == PRODUCT_ID).values(deleted_at=datetime.now(timezone.utc))
    )
    await db.commit()

    res = await client.post("/storage-snapshots/generate", json={"snapshot_date": "2026-04-02"})
    result = res.json()["data"]
    assert result["generated"] == 1
    assert result["missing_product_cbm_count"] == 1

    res = await client.get("/storage-snapshots/", params={"date": "2026-04-02"})
    snapshot = res.json()["data"][0]
    assert Decimal(str(snapshot["total_cbm"])) == Decimal("0")
    assert snapshot["total_sku"] == 1


async def test_pallets_are_derived_from_the_unrounded_volume(client, db):
    # 55 ml rounds up to 0.0001 cbm, but 0.000055 / 1.2 rounds down to zero pallets
    await db.execute(update(Product).where(Product.id == PRODUCT_ID).values(volume_ml=55))
    await db.commit()
    await _receive(client, [{"qty": 1}])

    res = await client.post("/storage-snapshots/generate", json={"snapshot_date": "2026-04-03"})
    assert res.status_code == 200, res.text

    res = await client.get("/storage-snapshots/", params={"date": "2026-04-03"})
    snapshot = res.json()["data"][0]
    assert Decimal(str(snapshot["total_cbm"])) == Decimal("0.0001")
    assert Decimal(str(snapshot["total_pallet"])) == Decimal("0")
