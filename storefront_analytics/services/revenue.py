"""Revenue aggregation: totals, time series and category breakdown.

Only completed orders (confirmed, processing, shipped, delivered) contribute.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from storefront_analytics.services.buckets import Granularity, bucket_index, calendar_buckets
from storefront_analytics.services.date_range import DateRange
from storefront_analytics.services.records import UNCATEGORIZED, Order

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class RevenueMetrics:
    total_revenue: Decimal = Decimal("0")
    order_count: int = 0
    average_order_value: Decimal = Decimal("0")


@dataclass(frozen=True)
class RevenueDataPoint:
    label: str
    revenue: Decimal
    order_count: int


@dataclass(frozen=True)
class RevenueByCategory:
    category: str
    revenue: Decimal
    percentage_of_total: Decimal


def completed_orders(orders: Sequence[Order]) -> list[Order]:
    return [o for o in orders if o.is_completed]


def compute_revenue_metrics(orders: Sequence[Order]) -> RevenueMetrics:
    done = completed_orders(orders)
    total = sum((o.total for o in done), Decimal("0"))
    count = len(done)
    avg = (total / count).quantize(CENTS) if count else Decimal("0")
    return RevenueMetrics(total_revenue=total, order_count=count, average_order_value=avg)


def bucket_revenue_by_period(
    orders: Sequence[Order],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
) -> tuple[RevenueDataPoint, ...]:
    """Completed revenue and order count per calendar bucket, zero-filled."""
    buckets = calendar_buckets(date_range, granularity)
    starts = [b.start for b in buckets]
    revenue = [Decimal("0")] * len(buckets)
    counts = [0] * len(buckets)

    skipped = 0
    for o in completed_orders(orders):
        idx = bucket_index(buckets, starts, date_range, o.created_at)
        if idx is None:
            skipped += 1
            continue
        revenue[idx] += o.total
        counts[idx] += 1

    if skipped:
        logger.debug(f"Skipped {skipped} completed orders outside {len(buckets)} {granularity} buckets")

    return tuple(
        RevenueDataPoint(label=b.label, revenue=revenue[i], order_count=counts[i])
        for i, b in enumerate(buckets)
    )


def revenue_by_category(orders: Sequence[Order]) -> tuple[RevenueByCategory, ...]:
    """Item revenue per category with share of the grand total."""
    categories: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    fallbacks = 0

    for o in completed_orders(orders):
        for item in o.items:
            category = item.resolved_category
            if category == UNCATEGORIZED:
                fallbacks += 1
            categories[category] += item.revenue

    if fallbacks:
        logger.warning(f"{fallbacks} order items had no resolvable category")

    grand_total = sum(categories.values(), Decimal("0"))
    ranked = sorted(categories.items(), key=lambda x: (-x[1], x[0]))
    return tuple(
        RevenueByCategory(
            category=cat,
            revenue=rev,
            percentage_of_total=(rev / grand_total * 100) if grand_total else Decimal("0"),
        )
        for cat, rev in ranked
    )
