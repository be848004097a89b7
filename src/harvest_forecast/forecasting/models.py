"""Result structures produced by the forecasting pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

# Weights reported with every single-crop forecast.
FACTOR_WEIGHTS: dict[str, float] = {
    "seasonal": 0.35,
    "trend": 0.25,
    "market": 0.25,
    "weather": 0.15,
}

MODEL_TYPE = "Statistical Ensemble (Seasonal + Trend + Market + Historical)"


@dataclass
class Prediction:
    """One day's demand prediction."""
    date: date
    predicted_demand: float
    confidence: float        # 0..1
    price_estimate: float


@dataclass
class ForecastResult:
    """Output of the single-crop pipeline."""
    crop: str
    predictions: list[Prediction]
    accuracy: float          # 0.87..0.95
    model_type: str = MODEL_TYPE
    factors: dict[str, float] = field(default_factory=lambda: dict(FACTOR_WEIGHTS))


@dataclass
class DemandForecast:
    """Projected demand for one variety over a horizon."""
    variety: str
    predicted_demand: float
    confidence: float
    trend: str               # "increasing", "decreasing", "stable"
    seasonal_factor: float
    recommendations: list[str] = field(default_factory=list)


@dataclass
class CustomerSegment:
    """Descriptive ordering profile for one customer type."""
    type: str
    average_order_size: float
    order_frequency: int
    variety_preferences: dict[str, float] = field(default_factory=dict)
    seasonal_patterns: list[float] = field(default_factory=lambda: [1.0] * 12)


@dataclass
class HarvestWindow:
    start: datetime
    end: datetime
    price_estimate: str
    confidence: float


@dataclass
class MarketInsights:
    """Canned advisory content for a crop; not computed from order data."""
    crop: str
    insights: list[str]
    optimal_harvest_window: HarvestWindow
    recommendations: list[str]


@dataclass
class DemandReport:
    """Ranked variety forecasts plus the segment context they were built with."""
    forecasts: list[DemandForecast]
    segments: list[CustomerSegment]
    used_fallback: bool = False
