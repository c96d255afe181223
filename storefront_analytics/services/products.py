"""Product performance rankings."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Sequence

from storefront_analytics.services.records import UNKNOWN_PRODUCT, Order
from storefront_analytics.services.revenue import CENTS, completed_orders

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductPerformance:
    product_id: str
    product_name: str
    revenue: Decimal
    units_sold: int
    average_price: Decimal


@dataclass(frozen=True)
class ProductAnalytics:
    top_products_by_revenue: tuple[ProductPerformance, ...]
    top_products_by_units: tuple[ProductPerformance, ...]
    total_products: int
    total_revenue: Decimal
    total_units_sold: int


def product_performance(orders: Sequence[Order]) -> list[ProductPerformance]:
    """Per-product totals over every completed order, in no particular order."""
    products: dict[str, dict] = defaultdict(lambda: {
        "name": "", "revenue": Decimal("0"), "units": 0,
    })

    for o in completed_orders(orders):
        for item in o.items:
            p = products[item.resolved_product_id]
            # First resolvable name wins; later items only fill a gap.
            if not p["name"] or p["name"] == UNKNOWN_PRODUCT:
                p["name"] = item.resolved_name
            p["revenue"] += item.revenue
            p["units"] += item.quantity

    return [
        ProductPerformance(
            product_id=pid,
            product_name=data["name"],
            revenue=data["revenue"],
            units_sold=data["units"],
            average_price=(data["revenue"] / data["units"]).quantize(CENTS) if data["units"] else Decimal("0"),
        )
        for pid, data in products.items()
    ]


def _top(
    performance: Sequence[ProductPerformance],
    limit: int,
    metric: Callable[[ProductPerformance], Decimal | int],
) -> tuple[ProductPerformance, ...]:
    if limit < 0:
        raise ValueError(f"limit must be non-negative: {limit}")
    # Equal metrics fall back to ascending product id.
    ranked = sorted(performance, key=lambda p: (-metric(p), p.product_id))
    return tuple(ranked[:limit])


def top_products_by_revenue(orders: Sequence[Order], limit: int = 10) -> tuple[ProductPerformance, ...]:
    return _top(product_performance(orders), limit, lambda p: p.revenue)


def top_products_by_units(orders: Sequence[Order], limit: int = 10) -> tuple[ProductPerformance, ...]:
    return _top(product_performance(orders), limit, lambda p: p.units_sold)


def product_analytics(orders: Sequence[Order], limit: int = 10) -> ProductAnalytics:
    performance = product_performance(orders)
    logger.debug(f"Ranked {len(performance)} products from {len(orders)} orders")
    return ProductAnalytics(
        top_products_by_revenue=_top(performance, limit, lambda p: p.revenue),
        top_products_by_units=_top(performance, limit, lambda p: p.units_sold),
        total_products=len(performance),
        total_revenue=sum((p.revenue for p in performance), Decimal("0")),
        total_units_sold=sum(p.units_sold for p in performance),
    )
