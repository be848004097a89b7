"""Static market advisory for a crop.

Fixed copy and a fixed harvest window one to two weeks out.  None of this is
derived from order history or the forecasting numerics.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from harvest_forecast.forecasting.models import HarvestWindow, MarketInsights

INSIGHTS = (
    "Demand expected to increase 15% due to seasonal trends",
    "Weather patterns favor organic growth conditions",
    "Market competition decreasing in this segment",
)

RECOMMENDATIONS = (
    "Increase production by 20% for next cycle",
    "Consider premium organic certification",
    "Target restaurant clients during peak season",
)

PRICE_BAND = "$12.50-$15.00/oz"
WINDOW_CONFIDENCE = 0.89


def get_market_insights(crop: str, *, now: datetime | None = None) -> MarketInsights:
    now = now or datetime.now()
    return MarketInsights(
        crop=crop,
        insights=list(INSIGHTS),
        optimal_harvest_window=HarvestWindow(
            start=now + timedelta(days=7),
            end=now + timedelta(days=14),
            price_estimate=PRICE_BAND,
            confidence=WINDOW_CONFIDENCE,
        ),
        recommendations=list(RECOMMENDATIONS),
    )
