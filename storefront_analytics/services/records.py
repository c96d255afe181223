"""Read-only order and customer records consumed by the analytics engine.

Records are frozen snapshots. ``from_dict`` accepts the loose shapes the
storefront exports (camelCase or snake_case keys, ISO strings or datetime
objects) so the engine stays independent of any ORM.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


# Statuses that count toward revenue, product rankings and category breakdowns.
COMPLETED_ORDER_STATUSES = frozenset({
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
})

UNKNOWN_PRODUCT = "Unknown Product"
UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Product:
    id: str
    name: str = ""
    category: str = ""
    category_id: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        return cls(
            id=str(_pick(data, "id", "product_id", "productId", default="")),
            name=str(_pick(data, "name", "title", default="") or ""),
            category=_category_label(_pick(data, "category", "category_name", "categoryName")),
            category_id=str(_pick(data, "category_id", "categoryId", default="") or ""),
        )


@dataclass(frozen=True)
class OrderItem:
    product_id: Optional[str]
    quantity: int
    price: Decimal
    product: Optional[Product] = None
    product_name: str = ""
    category: str = ""

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError(f"Item quantity must be positive: {self.quantity}")

    @property
    def revenue(self) -> Decimal:
        return self.price * self.quantity

    @property
    def resolved_product_id(self) -> str:
        if self.product_id:
            return self.product_id
        if self.product is not None and self.product.id:
            return self.product.id
        return "unknown"

    @property
    def resolved_name(self) -> str:
        if self.product is not None and self.product.name:
            return self.product.name
        return self.product_name or UNKNOWN_PRODUCT

    @property
    def resolved_category(self) -> str:
        """Display label first, raw category identifier only when nothing else is known."""
        if self.product is not None and self.product.category:
            return self.product.category
        if self.category:
            return self.category
        if self.product is not None and self.product.category_id:
            return self.product.category_id
        return UNCATEGORIZED

    @classmethod
    def from_dict(cls, data: dict) -> "OrderItem":
        raw_product = data.get("product")
        product = Product.from_dict(raw_product) if isinstance(raw_product, dict) else None
        product_id = _pick(data, "product_id", "productId", "sku")
        return cls(
            product_id=str(product_id) if product_id else None,
            quantity=int(_pick(data, "quantity", default=1)),
            price=to_decimal(_pick(data, "price", "unit_price", "unitPrice", default=0)),
            product=product,
            product_name=str(_pick(data, "product_name", "productName", "title", default="") or ""),
            category=_category_label(_pick(data, "category", "category_name", "categoryName")),
        )


@dataclass(frozen=True)
class Order:
    id: str
    status: OrderStatus
    total: Decimal
    created_at: datetime
    items: tuple[OrderItem, ...] = ()
    customer_id: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "created_at", "shipped_at", "delivered_at")

    @property
    def is_completed(self) -> bool:
        return self.status in COMPLETED_ORDER_STATUSES

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        created = parse_timestamp(_pick(data, "created_at", "createdAt", "ordered_at", "order_date", "date"))
        if created is None:
            raise ValueError(f"Order {data.get('id', '?')} has no valid creation timestamp")
        status = str(data.get("status", "")).upper()
        try:
            order_status = OrderStatus(status)
        except ValueError:
            raise ValueError(f"Invalid order status: {data.get('status')!r}") from None
        customer_id = _pick(data, "customer_id", "customerId")
        return cls(
            id=str(_pick(data, "id", "order_number", "orderNumber", default="")),
            status=order_status,
            total=to_decimal(data.get("total", 0)),
            created_at=created,
            items=tuple(OrderItem.from_dict(i) for i in data.get("items") or []),
            customer_id=str(customer_id) if customer_id else None,
            shipped_at=parse_timestamp(_pick(data, "shipped_at", "shippedAt")),
            delivered_at=parse_timestamp(_pick(data, "delivered_at", "deliveredAt")),
        )


@dataclass(frozen=True)
class Customer:
    id: str
    total_spent: Decimal
    total_orders: int
    created_at: datetime
    last_order_date: Optional[datetime] = None
    email: str = ""
    name: str = ""

    def __post_init__(self) -> None:
        _normalize_timestamps(self, "created_at", "last_order_date")

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        created = parse_timestamp(_pick(data, "created_at", "createdAt", "registered_at"))
        if created is None:
            raise ValueError(f"Customer {data.get('id', '?')} has no valid registration timestamp")
        return cls(
            id=str(_pick(data, "id", "customer_id", "email", default="")),
            total_spent=to_decimal(_pick(data, "total_spent", "totalSpent", default=0)),
            total_orders=int(_pick(data, "total_orders", "totalOrders", default=0)),
            created_at=created,
            last_order_date=parse_timestamp(
                _pick(data, "last_order_date", "lastOrderDate", "last_order_at")
            ),
            email=str(data.get("email", "") or ""),
            name=str(data.get("name", "") or ""),
        )


# ── Helpers ─────────────────────────────────────────

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a datetime, date or ISO string to an aware UTC datetime.

    Naive values are taken to be UTC. Returns None for missing values and
    raises ValueError for unparseable strings.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))
        except ValueError:
            raise ValueError(f"Invalid timestamp: {value!r}") from None
    raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")


def as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_decimal(value: Any) -> Decimal:
    """Parse a money amount; NaN and infinities are rejected."""
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return result


def _normalize_timestamps(record: Any, *names: str) -> None:
    # Frozen records: rewrite naive or non-UTC datetimes in place.
    for name in names:
        value = getattr(record, name)
        if value is not None:
            object.__setattr__(record, name, as_utc(value))


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        val = data.get(key)
        if val is not None:
            return val
    return default


def _category_label(value: Any) -> str:
    # Storefront exports either a plain label or a nested {"name": ...} relation.
    if isinstance(value, dict):
        return str(value.get("name", "") or "")
    return str(value or "")
