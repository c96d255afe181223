"""Customer segmentation.

A single rule set produces every tag that applies to a customer, ordered by
priority. The primary segment (the badge shown in the admin) is the first
tag; the full tag set serves marketing-list filters. Priority order:

    VIP > New > Inactive > At-Risk > Active

so a high-value customer who registered yesterday is VIP, and a customer
registered long ago who never ordered is Inactive. Every customer carries at
least one tag.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from storefront_analytics.services.records import Customer, as_utc


class CustomerSegment(str, Enum):
    # Declaration order is priority order.
    VIP = "VIP"
    NEW = "New"
    INACTIVE = "Inactive"
    AT_RISK = "At-Risk"
    ACTIVE = "Active"


_PRIORITY = {s: i for i, s in enumerate(CustomerSegment)}

SEGMENT_DESCRIPTIONS = {
    CustomerSegment.VIP: "High-value customer (spend or order count above the VIP threshold)",
    CustomerSegment.NEW: "Recently registered",
    CustomerSegment.AT_RISK: "No orders within the at-risk window",
    CustomerSegment.ACTIVE: "Regular customer with recent orders",
    CustomerSegment.INACTIVE: "No orders yet",
}


@dataclass(frozen=True)
class SegmentConfig:
    vip_min_spent: Decimal = Decimal("500")
    vip_min_orders: int = 5
    new_days_threshold: int = 30
    at_risk_days_threshold: int = 90


@dataclass(frozen=True)
class SegmentDistribution:
    segment: CustomerSegment
    count: int
    percentage: Decimal


@dataclass(frozen=True)
class SegmentStats:
    """Primary-segment counts keyed by segment, every segment present."""
    counts: Mapping[CustomerSegment, int]
    total: int

    def __getitem__(self, segment: CustomerSegment) -> int:
        return self.counts.get(CustomerSegment(segment), 0)


def days_since(ts: datetime, now: datetime) -> int:
    """Whole days elapsed, floored."""
    return (now - as_utc(ts)) // timedelta(days=1)


class CustomerSegmentClassifier:
    """Config-driven customer classifier.

    ``now`` may be pinned for reproducible results; otherwise the current UTC
    time is taken on each call.
    """

    def __init__(self, config: Optional[SegmentConfig] = None, now: Optional[datetime] = None):
        self.config = config or SegmentConfig()
        self._now = as_utc(now) if now else None

    def _clock(self) -> datetime:
        return self._now or datetime.now(timezone.utc)

    # ── Predicates ──────────────────────────────────────

    def is_vip(self, c: Customer) -> bool:
        return (
            c.total_spent >= self.config.vip_min_spent
            or c.total_orders >= self.config.vip_min_orders
        )

    def is_new(self, c: Customer, now: datetime) -> bool:
        return days_since(c.created_at, now) <= self.config.new_days_threshold

    def is_at_risk(self, c: Customer, now: datetime) -> bool:
        if c.total_orders == 0 or c.last_order_date is None:
            return False
        return days_since(c.last_order_date, now) >= self.config.at_risk_days_threshold

    # ── Classification ──────────────────────────────────

    def segments(self, c: Customer) -> tuple[CustomerSegment, ...]:
        """Every segment that applies, highest priority first."""
        now = self._clock()
        tags = set()
        if self.is_vip(c):
            tags.add(CustomerSegment.VIP)
        if self.is_new(c, now):
            tags.add(CustomerSegment.NEW)
        if self.is_at_risk(c, now):
            tags.add(CustomerSegment.AT_RISK)
        if c.total_orders > 0 and not tags:
            tags.add(CustomerSegment.ACTIVE)
        if c.total_orders == 0 and CustomerSegment.NEW not in tags:
            tags.add(CustomerSegment.INACTIVE)
        return tuple(sorted(tags, key=_PRIORITY.__getitem__))

    def primary_segment(self, c: Customer) -> CustomerSegment:
        return self.segments(c)[0]

    # ── Collections ─────────────────────────────────────

    def filter_by_segment(
        self, customers: Sequence[Customer], segment: CustomerSegment,
    ) -> list[Customer]:
        segment = CustomerSegment(segment)
        return [c for c in customers if self.primary_segment(c) == segment]

    def segment_stats(self, customers: Sequence[Customer]) -> SegmentStats:
        counts = Counter(self.primary_segment(c) for c in customers)
        return SegmentStats(
            counts=MappingProxyType({s: counts.get(s, 0) for s in CustomerSegment}),
            total=len(customers),
        )

    def segment_distribution(self, customers: Sequence[Customer]) -> tuple[SegmentDistribution, ...]:
        stats = self.segment_stats(customers)
        present = [(s, n) for s, n in stats.counts.items() if n]
        present.sort(key=lambda x: (-x[1], _PRIORITY[x[0]]))
        return tuple(
            SegmentDistribution(
                segment=s,
                count=n,
                percentage=Decimal(n) / Decimal(stats.total) * 100,
            )
            for s, n in present
        )


def describe(segment: CustomerSegment) -> dict:
    segment = CustomerSegment(segment)
    return {"label": segment.value, "description": SEGMENT_DESCRIPTIONS[segment]}
