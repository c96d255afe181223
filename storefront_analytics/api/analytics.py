"""Analytics API endpoints.

The snapshot of orders and customers is posted in the request body; query
parameters select the reporting window and shape of the result.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from storefront_analytics.config import get_settings
from storefront_analytics.schemas import CustomersIn, SnapshotIn
from storefront_analytics.services.buckets import Granularity
from storefront_analytics.services.date_range import DatePreset
from storefront_analytics.services.records import Customer
from storefront_analytics.services.report import (
    AnalyticsRequest, AnalyticsService, SnapshotTooLargeError, response_to_dict, to_jsonable,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_service() -> AnalyticsService:
    return AnalyticsService(get_settings())


def _run(method: str, body: SnapshotIn, request: AnalyticsRequest) -> dict:
    svc = get_service()
    try:
        snapshot = body.to_snapshot()
        response = getattr(svc, method)(snapshot, request)
    except SnapshotTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return response_to_dict(response)


def _request(
    period: Optional[DatePreset],
    custom_start_date: Optional[datetime],
    custom_end_date: Optional[datetime],
    granularity: Optional[Granularity],
    compare_with_previous: bool,
    limit: Optional[int],
) -> AnalyticsRequest:
    settings = get_settings()
    return AnalyticsRequest(
        period=period or DatePreset(settings.default_period),
        custom_start=custom_start_date,
        custom_end=custom_end_date,
        granularity=granularity or Granularity(settings.default_granularity),
        compare_with_previous=compare_with_previous,
        limit=limit or settings.default_top_limit,
    )


@router.post("/revenue")
async def revenue(
    body: SnapshotIn,
    period: Optional[DatePreset] = Query(None, description="Reporting window preset"),
    custom_start_date: Optional[datetime] = None,
    custom_end_date: Optional[datetime] = None,
    granularity: Optional[Granularity] = Query(None, description="Bucket size"),
    compare_with_previous: bool = False,
):
    """Revenue totals, revenue over time and revenue by category."""
    req = _request(period, custom_start_date, custom_end_date, granularity, compare_with_previous, None)
    return _run("revenue", body, req)


@router.post("/products")
async def products(
    body: SnapshotIn,
    period: Optional[DatePreset] = None,
    custom_start_date: Optional[datetime] = None,
    custom_end_date: Optional[datetime] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """Top products by revenue and by units sold."""
    req = _request(period, custom_start_date, custom_end_date, None, False, limit)
    return _run("products", body, req)


@router.post("/customers")
async def customers(
    body: SnapshotIn,
    period: Optional[DatePreset] = None,
    custom_start_date: Optional[datetime] = None,
    custom_end_date: Optional[datetime] = None,
    granularity: Optional[Granularity] = None,
    compare_with_previous: bool = False,
):
    """Customer acquisition trend, cohort metrics and segment mix."""
    req = _request(period, custom_start_date, custom_end_date, granularity, compare_with_previous, None)
    return _run("customers", body, req)


@router.post("/orders")
async def orders(
    body: SnapshotIn,
    period: Optional[DatePreset] = None,
    custom_start_date: Optional[datetime] = None,
    custom_end_date: Optional[datetime] = None,
    granularity: Optional[Granularity] = None,
    compare_with_previous: bool = False,
):
    """Order volume, completion rate and status distribution."""
    req = _request(period, custom_start_date, custom_end_date, granularity, compare_with_previous, None)
    return _run("orders", body, req)


@router.post("/dashboard")
async def dashboard(
    body: SnapshotIn,
    period: Optional[DatePreset] = None,
    custom_start_date: Optional[datetime] = None,
    custom_end_date: Optional[datetime] = None,
    granularity: Optional[Granularity] = None,
    compare_with_previous: bool = True,
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """All metric families for one window."""
    req = _request(period, custom_start_date, custom_end_date, granularity, compare_with_previous, limit)
    try:
        response = await get_service().dashboard(body.to_snapshot(), req)
    except SnapshotTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return response_to_dict(response)


@router.post("/segments")
async def segments(body: CustomersIn):
    """Segment counts plus each customer's primary segment and tags."""
    svc = get_service()
    try:
        records = [Customer.from_dict(c.model_dump()) for c in body.customers]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "data": to_jsonable(svc.segments(records))}
