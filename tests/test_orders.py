"""Tests for order status distribution and order metrics."""

from datetime import timedelta
from decimal import Decimal

from storefront_analytics.services.buckets import Granularity
from storefront_analytics.services.orders import (
    OrderMetrics, bucket_orders_by_period, compute_order_metrics, status_distribution,
)
from storefront_analytics.services.records import OrderStatus

from conftest import make_order, ts


class TestStatusDistribution:
    def test_counts_all_statuses(self, sample_orders):
        dist = status_distribution(sample_orders)
        assert sum(s.count for s in dist) == len(sample_orders)
        statuses = {s.status for s in dist}
        assert OrderStatus.CANCELLED in statuses
        assert OrderStatus.REFUNDED in statuses
        assert OrderStatus.PENDING in statuses

    def test_sorted_by_count(self):
        orders = [
            make_order("1", "PENDING", "1", "2026-03-01"),
            make_order("2", "DELIVERED", "1", "2026-03-01"),
            make_order("3", "DELIVERED", "1", "2026-03-01"),
            make_order("4", "CANCELLED", "1", "2026-03-01"),
            make_order("5", "DELIVERED", "1", "2026-03-01"),
        ]
        dist = status_distribution(orders)
        assert dist[0].status == OrderStatus.DELIVERED
        assert dist[0].count == 3
        assert dist[0].percentage_of_total == Decimal("60")
        # Ties follow status declaration order
        assert [s.status for s in dist[1:]] == [OrderStatus.PENDING, OrderStatus.CANCELLED]

    def test_percentages_sum_to_100(self, sample_orders):
        dist = status_distribution(sample_orders)
        assert abs(sum(s.percentage_of_total for s in dist) - 100) <= Decimal("0.01")

    def test_empty(self):
        assert status_distribution([]) == ()


class TestOrderMetrics:
    def test_completion_rate(self, sample_orders):
        m = compute_order_metrics(sample_orders)
        assert m.total_orders == 7
        # 4 of 7 completed
        assert m.completion_rate == Decimal("57.1")

    def test_fulfillment_time(self):
        created = ts("2026-03-01", 8)
        orders = [
            make_order("A", "DELIVERED", "1", created, delivered_at=created + timedelta(hours=48),
                       shipped_at=created + timedelta(hours=10)),
            make_order("B", "SHIPPED", "1", created, shipped_at=created + timedelta(hours=24)),
            make_order("C", "PENDING", "1", created),
        ]
        m = compute_order_metrics(orders)
        assert m.average_fulfillment_time == 36

    def test_empty(self):
        assert compute_order_metrics([]) == OrderMetrics()


class TestOrdersOverTime:
    def test_all_orders_counted(self, sample_orders, march_range):
        series = bucket_orders_by_period(sample_orders, march_range, Granularity.WEEKLY)
        assert sum(p.order_count for p in series) == 7
        assert sum(p.completed_count for p in series) == 4
        assert series[1].label == "2026-03-02"
        # ORD-001, ORD-002 (completed) and ORD-003 (cancelled)
        assert series[1].order_count == 3
        assert series[1].completed_count == 2

    def test_revenue_counts_every_status(self, sample_orders, march_range):
        series = bucket_orders_by_period(sample_orders, march_range, Granularity.DAILY)
        by_label = {p.label: p for p in series}
        # ORD-003 is cancelled but still placed on 03-03
        assert by_label["2026-03-03"].revenue == Decimal("500.00")
        assert by_label["2026-03-02"].revenue == Decimal("100.00")
        assert sum(p.revenue for p in series) == Decimal("732.00")
