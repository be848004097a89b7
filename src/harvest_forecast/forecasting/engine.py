"""Forecasting engine facade: wires settings, tables and randomness into the pipelines."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime
from typing import Iterable

from pydantic import ValidationError

from config.settings import ForecastSettings
from config.settings import settings as default_settings
from harvest_forecast.forecasting.crop_forecaster import RandomSource, generate_forecast
from harvest_forecast.forecasting.customer_segments import analyze_customer_segments
from harvest_forecast.forecasting.market_insights import get_market_insights
from harvest_forecast.forecasting.models import (
    CustomerSegment,
    DemandForecast,
    DemandReport,
    ForecastResult,
    MarketInsights,
)
from harvest_forecast.forecasting.profiles import DEFAULT_TABLES, ForecastTables
from harvest_forecast.forecasting.records import Customer, ForecastingData, MarketData, Order
from harvest_forecast.forecasting.variety_forecaster import (
    fallback_forecasts,
    generate_demand_forecast_with_status,
)

logger = logging.getLogger(__name__)


class DemandForecastingEngine:
    """Entry point used by the analytics and market-insight handlers.

    Holds only read-only configuration and an optional random source; every
    call builds fresh result objects.  Without an injected ``rng`` each call
    draws from a new ``random.Random(settings.random_seed)``, so a seeded
    engine repeats identical calls exactly and an unseeded one does not.
    """

    def __init__(
        self,
        tables: ForecastTables = DEFAULT_TABLES,
        settings: ForecastSettings | None = None,
        rng: RandomSource | None = None,
    ) -> None:
        self.tables = tables
        self.settings = settings or default_settings
        self.rng = rng

    def generate_forecast(
        self,
        crop_type: str,
        days_ahead: int | None = None,
        market_data: MarketData | dict | None = None,
        *,
        start: date | None = None,
    ) -> ForecastResult:
        if days_ahead is None:
            days_ahead = self.settings.default_days_ahead
        return generate_forecast(
            crop_type,
            days_ahead,
            market_data,
            start=start,
            rng=self._random_source(),
            tables=self.tables,
            smoothing_window=self.settings.moving_average_window,
        )

    def generate_demand_forecast(
        self,
        data: ForecastingData | dict,
        forecast_days: int | None = None,
        *,
        as_of: date | None = None,
    ) -> list[DemandForecast]:
        forecasts, _ = self._demand_forecast(data, forecast_days, as_of)
        return forecasts

    def generate_demand_report(
        self,
        data: ForecastingData | dict,
        forecast_days: int | None = None,
        *,
        as_of: date | None = None,
    ) -> DemandReport:
        """Forecasts plus customer segments for the same input bundle."""
        if not isinstance(data, ForecastingData):
            try:
                data = ForecastingData.model_validate(data)
            except ValidationError:
                logger.exception("Invalid demand report input, returning fallback forecasts")
                return DemandReport(forecasts=fallback_forecasts(), segments=[], used_fallback=True)

        forecasts, used_fallback = self._demand_forecast(data, forecast_days, as_of)
        segments: list[CustomerSegment] = []
        if not used_fallback:
            segments = self.analyze_customer_segments(data.customers, data.orders)
        return DemandReport(forecasts=forecasts, segments=segments, used_fallback=used_fallback)

    def analyze_customer_segments(
        self,
        customers: Iterable[Customer],
        orders: Iterable[Order],
    ) -> list[CustomerSegment]:
        return analyze_customer_segments(customers, orders)

    def get_market_insights(self, crop: str, *, now: datetime | None = None) -> MarketInsights:
        return get_market_insights(crop, now=now)

    def _random_source(self) -> RandomSource:
        if self.rng is not None:
            return self.rng
        return random.Random(self.settings.random_seed)

    def _demand_forecast(self, data, forecast_days, as_of):
        if forecast_days is None:
            forecast_days = self.settings.default_days_ahead
        return generate_demand_forecast_with_status(
            data,
            forecast_days,
            as_of=as_of,
            tables=self.tables,
            alpha=self.settings.smoothing_alpha,
            trend_window=self.settings.trend_window,
            min_history=self.settings.min_history_points,
        )
