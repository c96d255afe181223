"""Pydantic schemas for the analytics API."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from storefront_analytics.services.report import Snapshot


# ── Snapshot records ─────────────────────────────────────
class ProductIn(BaseModel):
    id: str
    name: str = ""
    category: str = ""
    category_id: str = ""


class OrderItemIn(BaseModel):
    product_id: Optional[str] = None
    quantity: int = Field(1, gt=0)
    price: Decimal = Decimal("0")
    product: Optional[ProductIn] = None
    product_name: str = ""
    category: str = ""


class OrderIn(BaseModel):
    id: str
    status: str
    total: Decimal = Decimal("0")
    created_at: datetime
    items: list[OrderItemIn] = Field(default_factory=list)
    customer_id: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class CustomerIn(BaseModel):
    id: str
    email: str = ""
    name: str = ""
    total_spent: Decimal = Decimal("0")
    total_orders: int = Field(0, ge=0)
    last_order_date: Optional[datetime] = None
    created_at: datetime


class SnapshotIn(BaseModel):
    orders: list[OrderIn] = Field(default_factory=list)
    customers: list[CustomerIn] = Field(default_factory=list)

    def to_snapshot(self) -> Snapshot:
        return Snapshot.from_dict(self.model_dump())


class CustomersIn(BaseModel):
    customers: list[CustomerIn] = Field(default_factory=list)
