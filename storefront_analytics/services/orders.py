"""Order status distribution and fulfillment metrics.

Unlike the revenue aggregators these consider every order regardless of status.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Sequence

from storefront_analytics.services.buckets import Granularity, bucket_index, calendar_buckets
from storefront_analytics.services.date_range import DateRange
from storefront_analytics.services.records import Order, OrderStatus

_STATUS_ORDER = {s: i for i, s in enumerate(OrderStatus)}


@dataclass(frozen=True)
class OrderStatusCount:
    status: OrderStatus
    count: int
    percentage_of_total: Decimal


@dataclass(frozen=True)
class OrderMetrics:
    total_orders: int = 0
    average_fulfillment_time: int = 0  # hours
    completion_rate: Decimal = Decimal("0")


@dataclass(frozen=True)
class OrdersOverTimePoint:
    label: str
    order_count: int
    completed_count: int
    revenue: Decimal = Decimal("0")  # every order placed in the bucket, any status


def status_distribution(orders: Sequence[Order]) -> tuple[OrderStatusCount, ...]:
    counts = Counter(o.status for o in orders)
    total = len(orders)
    ranked = sorted(counts.items(), key=lambda x: (-x[1], _STATUS_ORDER[x[0]]))
    return tuple(
        OrderStatusCount(
            status=status,
            count=n,
            percentage_of_total=Decimal(n) / Decimal(total) * 100 if total else Decimal("0"),
        )
        for status, n in ranked
    )


def compute_order_metrics(orders: Sequence[Order]) -> OrderMetrics:
    total = len(orders)
    if total == 0:
        return OrderMetrics()

    completed = sum(1 for o in orders if o.is_completed)
    hours = [
        ((o.delivered_at or o.shipped_at) - o.created_at) // timedelta(hours=1)
        for o in orders
        if o.delivered_at or o.shipped_at
    ]
    avg_hours = round(sum(hours) / len(hours)) if hours else 0

    return OrderMetrics(
        total_orders=total,
        average_fulfillment_time=avg_hours,
        completion_rate=(Decimal(completed) / Decimal(total) * 100).quantize(Decimal("0.1")),
    )


def bucket_orders_by_period(
    orders: Sequence[Order],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
) -> tuple[OrdersOverTimePoint, ...]:
    buckets = calendar_buckets(date_range, granularity)
    starts = [b.start for b in buckets]
    placed = [0] * len(buckets)
    done = [0] * len(buckets)
    revenue = [Decimal("0")] * len(buckets)

    for o in orders:
        idx = bucket_index(buckets, starts, date_range, o.created_at)
        if idx is None:
            continue
        placed[idx] += 1
        revenue[idx] += o.total
        if o.is_completed:
            done[idx] += 1

    return tuple(
        OrdersOverTimePoint(
            label=b.label, order_count=placed[i], completed_count=done[i], revenue=revenue[i],
        )
        for i, b in enumerate(buckets)
    )
