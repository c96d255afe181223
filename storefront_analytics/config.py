"""Configuration."""

from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings

from storefront_analytics.services.segments import SegmentConfig


class Settings(BaseSettings):
    app_name: str = "Storefront-Analytics"
    debug: bool = False
    log_level: str = "INFO"

    # Request defaults
    default_period: str = "30d"
    default_granularity: str = "daily"
    default_top_limit: int = 10

    # Snapshot caps applied before any aggregation runs
    max_snapshot_orders: int = 50_000
    max_snapshot_customers: int = 50_000

    # Segmentation thresholds
    vip_min_spent: Decimal = Decimal("500")
    vip_min_orders: int = 5
    new_days_threshold: int = 30
    at_risk_days_threshold: int = 90

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    def segment_config(self) -> SegmentConfig:
        return SegmentConfig(
            vip_min_spent=self.vip_min_spent,
            vip_min_orders=self.vip_min_orders,
            new_days_threshold=self.new_days_threshold,
            at_risk_days_threshold=self.at_risk_days_threshold,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
