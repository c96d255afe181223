"""Test fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from storefront_analytics.main import app
from storefront_analytics.services.date_range import DateRange
from storefront_analytics.services.records import Customer, Order, OrderItem, OrderStatus, Product

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def ts(day: str, hour: int = 10) -> datetime:
    """UTC timestamp for an ISO date at the given hour."""
    return datetime.fromisoformat(day).replace(hour=hour, tzinfo=timezone.utc)


def make_order(oid, status, total, day, items=(), **kw) -> Order:
    return Order(
        id=oid,
        status=OrderStatus(status),
        total=Decimal(str(total)),
        created_at=ts(day) if isinstance(day, str) else day,
        items=tuple(items),
        **kw,
    )


def make_item(pid, qty, price, name="", category="", product=True) -> OrderItem:
    return OrderItem(
        product_id=pid,
        quantity=qty,
        price=Decimal(str(price)),
        product=Product(id=pid, name=name, category=category) if product else None,
        product_name=name,
    )


def make_customer(cid, spent=0, orders=0, created=None, last_order=None) -> Customer:
    return Customer(
        id=cid,
        total_spent=Decimal(str(spent)),
        total_orders=orders,
        created_at=created or NOW,
        last_order_date=last_order,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def march_range():
    return DateRange(start=ts("2026-03-01", 0), end=datetime(2026, 3, 14, 23, 59, 59, 999999, tzinfo=timezone.utc))


@pytest.fixture
def sample_orders():
    """Mixed-status orders spread over the first half of March 2026."""
    return [
        make_order("ORD-001", "DELIVERED", "40.00", "2026-03-02", [
            make_item("P-A", 2, "10.00", "Widget A", "Widgets"),
            make_item("P-B", 1, "20.00", "Gadget B", "Gadgets"),
        ]),
        make_order("ORD-002", "SHIPPED", "60.00", "2026-03-02", [
            make_item("P-A", 3, "10.00", "Widget A", "Widgets"),
            make_item("P-C", 1, "30.00", "Gizmo C", "Gadgets"),
        ]),
        make_order("ORD-003", "CANCELLED", "500.00", "2026-03-03", [
            make_item("P-X", 10, "50.00", "Cancelled Thing", "Luxury"),
        ]),
        make_order("ORD-004", "CONFIRMED", "25.00", "2026-03-09", [
            make_item("P-B", 1, "25.00", "Gadget B", "Gadgets"),
        ]),
        make_order("ORD-005", "PENDING", "15.00", "2026-03-10", [
            make_item("P-A", 1, "15.00", "Widget A", "Widgets"),
        ]),
        make_order("ORD-006", "REFUNDED", "80.00", "2026-03-11", [
            make_item("P-C", 2, "40.00", "Gizmo C", "Gadgets"),
        ]),
        make_order("ORD-007", "PROCESSING", "12.00", "2026-03-12"),
    ]


@pytest.fixture
def sample_snapshot_json():
    """Snapshot body as the storefront posts it."""
    return {
        "orders": [
            {
                "id": "ORD-101", "status": "DELIVERED", "total": "100.00",
                "created_at": "2026-03-10T09:00:00Z",
                "items": [
                    {"product_id": "P-A", "quantity": 2, "price": "10.00",
                     "product": {"id": "P-A", "name": "Widget A", "category": "Widgets"}},
                    {"product_id": "P-B", "quantity": 1, "price": "80.00",
                     "product": {"id": "P-B", "name": "Gadget B", "category": "Gadgets"}},
                ],
            },
            {
                "id": "ORD-102", "status": "CANCELLED", "total": "50.00",
                "created_at": "2026-03-10T11:00:00Z", "items": [],
            },
            {
                "id": "ORD-103", "status": "SHIPPED", "total": "40.00",
                "created_at": "2026-03-12T15:00:00Z",
                "shipped_at": "2026-03-13T15:00:00Z",
                "items": [{"product_id": "P-A", "quantity": 4, "price": "10.00"}],
            },
            {
                "id": "ORD-090", "status": "DELIVERED", "total": "70.00",
                "created_at": "2026-03-03T08:00:00Z", "items": [],
            },
        ],
        "customers": [
            {"id": "C-1", "total_spent": "600", "total_orders": 1,
             "created_at": "2026-03-10T00:00:00Z", "last_order_date": "2026-03-10T09:00:00Z"},
            {"id": "C-2", "total_spent": "0", "total_orders": 0,
             "created_at": "2025-02-01T00:00:00Z"},
            {"id": "C-3", "total_spent": "40", "total_orders": 2,
             "created_at": "2026-03-12T00:00:00Z", "last_order_date": "2026-03-12T15:00:00Z"},
        ],
    }


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
