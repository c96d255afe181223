"""Assembles per-family analytics responses from a snapshot.

The service is the fetch boundary: it resolves the reporting window, caps and
splits the snapshot into current/previous windows, then hands plain record
sequences to the pure aggregators.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union

from storefront_analytics.config import Settings, get_settings
from storefront_analytics.services.buckets import Granularity
from storefront_analytics.services.customers import (
    CustomerAcquisitionPoint, CustomerMetrics, bucket_acquisition, compute_customer_metrics,
)
from storefront_analytics.services.date_range import (
    AnalyticsError, DatePreset, DateRange, previous_period, resolve_date_range,
)
from storefront_analytics.services.growth import growth_rate
from storefront_analytics.services.orders import (
    OrderMetrics, OrderStatusCount, OrdersOverTimePoint,
    bucket_orders_by_period, compute_order_metrics, status_distribution,
)
from storefront_analytics.services.products import ProductAnalytics, product_analytics
from storefront_analytics.services.records import Customer, Order
from storefront_analytics.services.revenue import (
    RevenueByCategory, RevenueDataPoint, RevenueMetrics,
    bucket_revenue_by_period, compute_revenue_metrics, revenue_by_category,
)
from storefront_analytics.services.segments import (
    CustomerSegment, CustomerSegmentClassifier, SegmentDistribution, SegmentStats,
)

logger = logging.getLogger(__name__)


class SnapshotTooLargeError(AnalyticsError):
    """The snapshot exceeds the configured row caps."""


# ── Request / snapshot ──────────────────────────────

@dataclass(frozen=True)
class AnalyticsRequest:
    period: DatePreset = DatePreset.LAST_30_DAYS
    custom_start: Optional[Union[datetime, str]] = None
    custom_end: Optional[Union[datetime, str]] = None
    granularity: Granularity = Granularity.DAILY
    compare_with_previous: bool = False
    limit: int = 10


@dataclass(frozen=True)
class Snapshot:
    orders: tuple[Order, ...] = ()
    customers: tuple[Customer, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        return cls(
            orders=tuple(Order.from_dict(o) for o in data.get("orders") or []),
            customers=tuple(Customer.from_dict(c) for c in data.get("customers") or []),
        )


# ── Per-family results ──────────────────────────────

@dataclass(frozen=True)
class RevenueAnalytics:
    current: RevenueMetrics
    previous: RevenueMetrics
    growth_rate: Decimal
    revenue_over_time: tuple[RevenueDataPoint, ...]
    revenue_by_category: tuple[RevenueByCategory, ...]


@dataclass(frozen=True)
class CustomerAnalytics:
    current: CustomerMetrics
    previous: CustomerMetrics
    growth_rate: Decimal
    acquisition_over_time: tuple[CustomerAcquisitionPoint, ...]
    segment_distribution: tuple[SegmentDistribution, ...]


@dataclass(frozen=True)
class OrderAnalytics:
    current: OrderMetrics
    previous: OrderMetrics
    growth_rate: Decimal
    orders_over_time: tuple[OrdersOverTimePoint, ...]
    status_distribution: tuple[OrderStatusCount, ...]


@dataclass(frozen=True)
class DashboardAnalytics:
    revenue: RevenueAnalytics
    products: ProductAnalytics
    customers: CustomerAnalytics
    orders: OrderAnalytics


@dataclass(frozen=True)
class CustomerTags:
    id: str
    primary_segment: CustomerSegment
    segments: tuple[CustomerSegment, ...]


@dataclass(frozen=True)
class SegmentReport:
    stats: SegmentStats
    distribution: tuple[SegmentDistribution, ...]
    customers: tuple[CustomerTags, ...]


@dataclass(frozen=True)
class ResponseMetadata:
    date_range: DateRange
    comparison_period: Optional[DateRange] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class AnalyticsResponse:
    data: Any
    metadata: ResponseMetadata
    success: bool = True


# ── Family builders ─────────────────────────────────

def revenue_analytics(
    current_orders: Sequence[Order],
    previous_orders: Sequence[Order],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
) -> RevenueAnalytics:
    current = compute_revenue_metrics(current_orders)
    previous = compute_revenue_metrics(previous_orders)
    return RevenueAnalytics(
        current=current,
        previous=previous,
        growth_rate=growth_rate(current.total_revenue, previous.total_revenue),
        revenue_over_time=bucket_revenue_by_period(current_orders, date_range, granularity),
        revenue_by_category=revenue_by_category(current_orders),
    )


def customer_analytics(
    current_customers: Sequence[Customer],
    previous_customers: Sequence[Customer],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
    classifier: Optional[CustomerSegmentClassifier] = None,
) -> CustomerAnalytics:
    classifier = classifier or CustomerSegmentClassifier()
    current = compute_customer_metrics(current_customers)
    previous = compute_customer_metrics(previous_customers)
    return CustomerAnalytics(
        current=current,
        previous=previous,
        growth_rate=growth_rate(current.total_customers, previous.total_customers),
        acquisition_over_time=bucket_acquisition(current_customers, date_range, granularity),
        segment_distribution=classifier.segment_distribution(current_customers),
    )


def order_analytics(
    current_orders: Sequence[Order],
    previous_orders: Sequence[Order],
    date_range: DateRange,
    granularity: Granularity = Granularity.DAILY,
) -> OrderAnalytics:
    current = compute_order_metrics(current_orders)
    previous = compute_order_metrics(previous_orders)
    return OrderAnalytics(
        current=current,
        previous=previous,
        growth_rate=growth_rate(current.total_orders, previous.total_orders),
        orders_over_time=bucket_orders_by_period(current_orders, date_range, granularity),
        status_distribution=status_distribution(current_orders),
    )


# ── Service ─────────────────────────────────────────

@dataclass(frozen=True)
class _Windows:
    current: DateRange
    previous: Optional[DateRange]
    orders: tuple[Order, ...]
    previous_orders: tuple[Order, ...]
    customers: tuple[Customer, ...]
    previous_customers: tuple[Customer, ...]


class AnalyticsService:
    """Runs analytics requests against an in-memory snapshot."""

    def __init__(self, settings: Optional[Settings] = None, now: Optional[datetime] = None):
        self.settings = settings or get_settings()
        self.now = now
        self.classifier = CustomerSegmentClassifier(self.settings.segment_config(), now=now)

    def _check_snapshot(self, snapshot: Snapshot) -> None:
        if len(snapshot.orders) > self.settings.max_snapshot_orders:
            logger.warning(f"Rejected snapshot with {len(snapshot.orders)} orders")
            raise SnapshotTooLargeError(
                f"Snapshot has {len(snapshot.orders)} orders; limit is {self.settings.max_snapshot_orders}"
            )
        if len(snapshot.customers) > self.settings.max_snapshot_customers:
            logger.warning(f"Rejected snapshot with {len(snapshot.customers)} customers")
            raise SnapshotTooLargeError(
                f"Snapshot has {len(snapshot.customers)} customers; "
                f"limit is {self.settings.max_snapshot_customers}"
            )

    def _windows(self, snapshot: Snapshot, request: AnalyticsRequest) -> _Windows:
        self._check_snapshot(snapshot)
        current = resolve_date_range(request.period, request.custom_start, request.custom_end, now=self.now)
        previous = previous_period(current) if request.compare_with_previous else None

        def within(records, window, attr):
            if window is None:
                return ()
            return tuple(r for r in records if window.contains(getattr(r, attr)))

        return _Windows(
            current=current,
            previous=previous,
            orders=within(snapshot.orders, current, "created_at"),
            previous_orders=within(snapshot.orders, previous, "created_at"),
            customers=within(snapshot.customers, current, "created_at"),
            previous_customers=within(snapshot.customers, previous, "created_at"),
        )

    def _respond(self, data: Any, w: _Windows) -> AnalyticsResponse:
        return AnalyticsResponse(
            data=data,
            metadata=ResponseMetadata(date_range=w.current, comparison_period=w.previous),
        )

    def revenue(self, snapshot: Snapshot, request: AnalyticsRequest) -> AnalyticsResponse:
        w = self._windows(snapshot, request)
        data = revenue_analytics(w.orders, w.previous_orders, w.current, request.granularity)
        logger.info(f"Revenue analytics over {len(w.orders)} orders ({request.period})")
        return self._respond(data, w)

    def products(self, snapshot: Snapshot, request: AnalyticsRequest) -> AnalyticsResponse:
        w = self._windows(snapshot, request)
        data = product_analytics(w.orders, request.limit)
        logger.info(f"Product analytics over {len(w.orders)} orders, {data.total_products} products")
        return self._respond(data, w)

    def customers(self, snapshot: Snapshot, request: AnalyticsRequest) -> AnalyticsResponse:
        w = self._windows(snapshot, request)
        data = customer_analytics(
            w.customers, w.previous_customers, w.current, request.granularity, self.classifier,
        )
        logger.info(f"Customer analytics over {len(w.customers)} customers ({request.period})")
        return self._respond(data, w)

    def orders(self, snapshot: Snapshot, request: AnalyticsRequest) -> AnalyticsResponse:
        w = self._windows(snapshot, request)
        data = order_analytics(w.orders, w.previous_orders, w.current, request.granularity)
        logger.info(f"Order analytics over {len(w.orders)} orders ({request.period})")
        return self._respond(data, w)

    async def dashboard(self, snapshot: Snapshot, request: AnalyticsRequest) -> AnalyticsResponse:
        """All four families, computed concurrently over the same windows."""
        w = self._windows(snapshot, request)
        revenue, products, customers, orders = await asyncio.gather(
            asyncio.to_thread(revenue_analytics, w.orders, w.previous_orders, w.current, request.granularity),
            asyncio.to_thread(product_analytics, w.orders, request.limit),
            asyncio.to_thread(
                customer_analytics, w.customers, w.previous_customers, w.current,
                request.granularity, self.classifier,
            ),
            asyncio.to_thread(order_analytics, w.orders, w.previous_orders, w.current, request.granularity),
        )
        data = DashboardAnalytics(revenue=revenue, products=products, customers=customers, orders=orders)
        logger.info(
            f"Dashboard over {len(w.orders)} orders and {len(w.customers)} customers ({request.period})"
        )
        return self._respond(data, w)

    def segments(self, customers: Sequence[Customer]) -> SegmentReport:
        """Segment stats plus each customer's primary segment and full tag set."""
        tagged = []
        for c in customers:
            tags = self.classifier.segments(c)
            tagged.append(CustomerTags(id=c.id, primary_segment=tags[0], segments=tags))
        report = SegmentReport(
            stats=self.classifier.segment_stats(customers),
            distribution=self.classifier.segment_distribution(customers),
            customers=tuple(tagged),
        )
        logger.info(f"Segmented {len(customers)} customers")
        return report


# ── Export ──────────────────────────────────────────

def to_jsonable(value: Any) -> Any:
    """Convert result objects into JSON-serializable structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {to_jsonable(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def response_to_dict(response: AnalyticsResponse) -> dict:
    meta = response.metadata
    return {
        "success": response.success,
        "data": to_jsonable(response.data),
        "metadata": {
            "date_range": to_jsonable(meta.date_range),
            "comparison_period": to_jsonable(meta.comparison_period) if meta.comparison_period else None,
            "generated_at": meta.generated_at.isoformat(),
        },
    }
