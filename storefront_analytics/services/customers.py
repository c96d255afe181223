"""Customer acquisition over time and cohort-level customer metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from storefront_analytics.services.buckets import Granularity, bucket_index, calendar_buckets
from storefront_analytics.services.date_range import DateRange
from storefront_analytics.services.records import Customer
from storefront_analytics.services.revenue import CENTS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CustomerAcquisitionPoint:
    label: str
    new_customers: int
    cumulative_total: int


@dataclass(frozen=True)
class CustomerMetrics:
    total_customers: int = 0
    new_customers: int = 0
    repeat_customer_rate: Decimal = Decimal("0")
    average_lifetime_value: Decimal = Decimal("0")


def bucket_acquisition(
    customers: Sequence[Customer],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
) -> tuple[CustomerAcquisitionPoint, ...]:
    """New registrations per bucket with a running total in chronological order."""
    buckets = calendar_buckets(date_range, granularity)
    starts = [b.start for b in buckets]
    counts = [0] * len(buckets)

    for c in customers:
        idx = bucket_index(buckets, starts, date_range, c.created_at)
        if idx is not None:
            counts[idx] += 1

    points = []
    cumulative = 0
    for b, n in zip(buckets, counts):
        cumulative += n
        points.append(CustomerAcquisitionPoint(label=b.label, new_customers=n, cumulative_total=cumulative))
    logger.debug(f"Acquisition: {cumulative} of {len(customers)} customers fell in range")
    return tuple(points)


def compute_customer_metrics(customers: Sequence[Customer]) -> CustomerMetrics:
    """Metrics for customers registered in one window; all of them are new to it."""
    total = len(customers)
    if total == 0:
        return CustomerMetrics()
    repeat = sum(1 for c in customers if c.total_orders > 1)
    spent = sum((c.total_spent for c in customers), Decimal("0"))
    return CustomerMetrics(
        total_customers=total,
        new_customers=total,
        repeat_customer_rate=Decimal(repeat) / Decimal(total) * 100,
        average_lifetime_value=(spent / total).quantize(CENTS),
    )
