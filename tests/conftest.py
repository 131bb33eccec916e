"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("DB_TYPE", "sqlite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_ACCESS_SECRET_KEY", "test-secret")
os.environ.setdefault("AUTO_CREATE_SCHEMA", "false")
os.environ.setdefault("STORAGE_SNAPSHOT_SCHEDULE_ENABLED", "false")

from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.db import Base, get_db, enable_sqlite_foreign_keys
from app.models.users.user_models import User
from app.models.masters.client_models import Client
from app.models.masters.warehouse_models import Warehouse, WarehouseLocation
from app.models.masters.product_models import Product, ProductLot
from app.utils.get_user import get_current_user
from main import app


CLIENT_ID = 1
WAREHOUSE_ID = 1
LOCATION_ID = 1
PRODUCT_ID = 5
LOT_ID = 9
OTHER_PRODUCT_ID = 6
OTHER_LOT_ID = 10
ADMIN_ID = 1
VIEWER_ID = 2


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture
async def seeded(session_factory):
    """Master rows every scenario relies on."""
    async with session_factory() as session:
        session.add_all([
            User(id=ADMIN_ID, email="admin@example.com", name="Admin", role="admin"),
            User(id=VIEWER_ID, email="viewer@example.com", name="Viewer", role="viewer"),
            Client(id=CLIENT_ID, client_code="C001", name="Client One"),
            Client(id=2, client_code="C002", name="Client Two"),
            Warehouse(id=WAREHOUSE_ID, code="WH1", name="Main"),
            Warehouse(id=2, code="WH2", name="Overflow"),
        ])
        await session.flush()
        session.add_all([
            WarehouseLocation(id=LOCATION_ID, warehouse_id=WAREHOUSE_ID, location_code="A-01"),
            Product(id=PRODUCT_ID, client_id=CLIENT_ID, sku_code="SKU-5", name="Serum", volume_ml=500),
            Product(id=OTHER_PRODUCT_ID, client_id=CLIENT_ID, sku_code="SKU-6", name="Toner", volume_ml=None),
        ])
        await session.flush()
        session.add_all([
            ProductLot(id=LOT_ID, product_id=PRODUCT_ID, lot_no="L9", expiry_date=date(2027, 1, 1)),
            ProductLot(id=OTHER_LOT_ID, product_id=OTHER_PRODUCT_ID, lot_no="L10"),
        ])
        await session.commit()
    return True


@pytest.fixture
async def db(session_factory, seeded):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin_user(session_factory, seeded):
    async with session_factory() as session:
        return await session.get(User, ADMIN_ID)


@pytest.fixture
async def client(session_factory, admin_user):
    """API client authenticated as the seeded admin."""

    async def _get_db():
        async with session_factory() as session:
            yield session

    async def _current_user():
        return admin_user

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_current_user] = _current_user

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =====================================================
# PAYLOAD HELPERS
# =====================================================
def inbound_order_payload(**overrides) -> dict:
    payload = {
        "inbound_no": "IN-001",
        "client_id": CLIENT_ID,
        "warehouse_id": WAREHOUSE_ID,
        "inbound_date": "2026-03-02",
        "status": "draft",
        "created_by": ADMIN_ID,
    }
    payload.update(overrides)
    return payload


def outbound_order_payload(**overrides) -> dict:
    payload = {
        "outbound_no": "OUT-001",
        "client_id": CLIENT_ID,
        "warehouse_id": WAREHOUSE_ID,
        "order_date": "2026-03-05",
        "status": "draft",
        "created_by": ADMIN_ID,
    }
    payload.update(overrides)
    return payload


def item_payload(order_field: str, order_id: int, **overrides) -> dict:
    payload = {
        order_field: order_id,
        "product_id": PRODUCT_ID,
        "lot_id": LOT_ID,
        "location_id": None,
        "qty": 10,
    }
    payload.update(overrides)
    return payload


async def create_inbound_with_item(client, qty: int = 10, **order_overrides) -> tuple[dict, dict]:
    res = await client.post("/inbound-orders/", json=inbound_order_payload(**order_overrides))
    assert res.status_code == 201, res.text
    order = res.json()["data"]

    res = await client.post("/inbound-items/", json=item_payload("inbound_order_id", order["id"], qty=qty))
    assert res.status_code == 201, res.text
    return order, res.json()["data"]


async def receive_inbound(client, order: dict, status: str = "received"):
    body = inbound_order_payload(
        inbound_no=order["inbound_no"],
        inbound_date=order["inbound_date"],
        status=status,
    )
    return await client.put(f"/inbound-orders/{order['id']}", json=body)


async def set_outbound_status(client, order: dict, status: str, **overrides):
    body = outbound_order_payload(
        outbound_no=order["outbound_no"],
        order_date=order["order_date"],
        status=status,
        **overrides,
    )
    return await client.put(f"/outbound-orders/{order['id']}", json=body)


async def balance_qty(client, **filters) -> int:
    params = {"client_id": CLIENT_ID, "product_id": PRODUCT_ID, "lot_id": LOT_ID, **filters}
    res = await client.get("/stock-balances/", params=params)
    assert res.status_code == 200, res.text
    return sum(row["available_qty"] for row in res.json()["data"])
