"""Storefront-Analytics FastAPI application entry point."""

import logging

from fastapi import FastAPI

from storefront_analytics.api import analytics
from storefront_analytics.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.debug else settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Revenue, product performance, customer acquisition, order status "
                "and customer segmentation analytics",
)

app.include_router(analytics.router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": settings.app_name, "version": "1.0.0"}
