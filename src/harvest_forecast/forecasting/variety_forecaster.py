"""Per-variety demand forecasts from historical order lines.

Orders are folded into weekly quantity series per variety, each series with
enough history is smoothed, regressed and adjusted for season and market
outlook, and the resulting forecasts are ranked by predicted demand.

Weeks in which a variety had no orders are omitted rather than zero-filled,
so series indices count active weeks, not calendar weeks.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from harvest_forecast.forecasting.models import DemandForecast
from harvest_forecast.forecasting.numerics import (
    cv_confidence,
    exponential_smoothing,
    ols_slope,
    round_half_up,
    trend_label,
)
from harvest_forecast.forecasting.profiles import DEFAULT_TABLES, ForecastTables, MarketTrend
from harvest_forecast.forecasting.records import ForecastingData, Order

logger = logging.getLogger(__name__)

SATURATION_THRESHOLD = 0.8


# ---------------------------------------------------------------------------
# Historical demand extraction
# ---------------------------------------------------------------------------

def week_key(day: date) -> str:
    """ISO year-week key, e.g. '2024-W07'; sorts chronologically as text."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def extract_variety_demand(orders: Iterable[Order]) -> dict[str, list[float]]:
    """Weekly quantity series per variety, ordered by week."""
    weekly: dict[str, dict[str, float]] = {}

    for order in orders:
        key = week_key(order.order_date)
        for item in order.order_items:
            by_week = weekly.setdefault(item.product_name, {})
            by_week[key] = by_week.get(key, 0.0) + item.quantity

    return {
        variety: [by_week[k] for k in sorted(by_week)]
        for variety, by_week in weekly.items()
    }


# ---------------------------------------------------------------------------
# Forecasting
# ---------------------------------------------------------------------------

def generate_recommendations(
    predicted_demand: float,
    trend: float,
    confidence: float,
    market_trend: MarketTrend | None = None,
) -> list[str]:
    """Rule-based production advice, in rule order."""
    recommendations: list[str] = []

    if confidence < 0.6:
        recommendations.append("Low confidence - collect more historical data")

    if trend > 0.2:
        recommendations.append("Strong upward trend - consider increasing production")
    elif trend < -0.2:
        recommendations.append("Declining demand - review market position")

    if market_trend is not None and market_trend.market_saturation > SATURATION_THRESHOLD:
        recommendations.append("Market approaching saturation - focus on differentiation")

    if predicted_demand > 100:
        recommendations.append("High demand expected - ensure adequate production capacity")
    elif predicted_demand < 20:
        recommendations.append("Low demand predicted - consider promotional activities")

    return recommendations


def forecast_variety_demand(
    variety: str,
    series: list[float],
    horizon_days: int,
    *,
    as_of: date | None = None,
    tables: ForecastTables = DEFAULT_TABLES,
    alpha: float = 0.3,
    trend_window: int = 4,
) -> DemandForecast:
    """Project demand for one variety ``horizon_days`` ahead.

    Callers are expected to pass at least three points; shorter series still
    produce a result but with the default 0.5 confidence.
    """
    as_of = as_of or date.today()

    smoothed = exponential_smoothing(series, alpha)
    slope = ols_slope(smoothed[-trend_window:])

    seasonal_factor = tables.seasonal.factor(variety, as_of.month - 1)
    market_trend = tables.market_trends.get(variety)
    growth = tables.market_trends.growth_factor(variety)

    base = smoothed[-1]
    predicted = max(0.0, base * seasonal_factor * growth + slope * (horizon_days / 7))
    confidence = cv_confidence(series)

    return DemandForecast(
        variety=variety,
        predicted_demand=round_half_up(predicted),
        confidence=confidence,
        trend=trend_label(slope),
        seasonal_factor=seasonal_factor,
        recommendations=generate_recommendations(predicted, slope, confidence, market_trend),
    )


def fallback_forecasts() -> list[DemandForecast]:
    """Fixed degraded response used when the pipeline cannot run."""
    return [
        DemandForecast(
            variety="Arugula",
            predicted_demand=45,
            confidence=0.7,
            trend="stable",
            seasonal_factor=1.0,
            recommendations=["Maintain current production levels"],
        ),
        DemandForecast(
            variety="Basil",
            predicted_demand=38,
            confidence=0.8,
            trend="increasing",
            seasonal_factor=1.2,
            recommendations=["Consider increasing production capacity"],
        ),
    ]


def _forecast_all(
    data: ForecastingData,
    forecast_days: int,
    *,
    as_of: date | None,
    tables: ForecastTables,
    alpha: float,
    trend_window: int,
    min_history: int,
) -> list[DemandForecast]:
    forecasts: list[DemandForecast] = []
    for variety, series in extract_variety_demand(data.orders).items():
        if len(series) < min_history:
            logger.debug(
                "Skipping %s: %d weekly points, need %d", variety, len(series), min_history,
            )
            continue
        forecasts.append(forecast_variety_demand(
            variety,
            series,
            forecast_days,
            as_of=as_of,
            tables=tables,
            alpha=alpha,
            trend_window=trend_window,
        ))

    forecasts.sort(key=lambda f: f.predicted_demand, reverse=True)
    return forecasts


def generate_demand_forecast_with_status(
    data: ForecastingData | dict,
    forecast_days: int = 30,
    *,
    as_of: date | None = None,
    tables: ForecastTables = DEFAULT_TABLES,
    alpha: float = 0.3,
    trend_window: int = 4,
    min_history: int = 3,
) -> tuple[list[DemandForecast], bool]:
    """Ranked demand forecasts for every variety with enough history.

    Never raises: any failure (including malformed input) is logged and the
    fixed ``fallback_forecasts()`` list is returned instead.

    Args:
        data: ForecastingData or a mapping with customers/orders/batches.
        forecast_days: Forecast horizon in days.
        as_of: Date whose month selects the seasonal factor (default today).
        tables: Lookup tables.
        alpha: Exponential smoothing factor.
        trend_window: Number of trailing smoothed points used for the slope.
        min_history: Minimum weekly points a variety needs to be forecast.

    Returns:
        (forecasts sorted by predicted demand, highest first; True when the
        fallback list was substituted).
    """
    try:
        if not isinstance(data, ForecastingData):
            data = ForecastingData.model_validate(data)
        forecasts = _forecast_all(
            data,
            forecast_days,
            as_of=as_of,
            tables=tables,
            alpha=alpha,
            trend_window=trend_window,
            min_history=min_history,
        )
    except Exception:
        logger.exception("Demand forecast failed, returning fallback forecasts")
        return fallback_forecasts(), True

    logger.info(
        "Generated %d variety forecasts from %d orders", len(forecasts), len(data.orders),
    )
    return forecasts, False


def generate_demand_forecast(
    data: ForecastingData | dict,
    forecast_days: int = 30,
    **kwargs,
) -> list[DemandForecast]:
    """Ranked demand forecasts; see ``generate_demand_forecast_with_status``."""
    forecasts, _ = generate_demand_forecast_with_status(data, forecast_days, **kwargs)
    return forecasts
