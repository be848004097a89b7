"""Static forecasting configuration: seasonal profiles, market trends, prices.

Every table is immutable once built.  ``DEFAULT_TABLES`` carries the built-in
values; tenants or regions with their own numbers build a variant through
``ForecastTables.with_overrides`` instead of mutating shared state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

MONTHS = 12

DEFAULT_SEASONALITY: tuple[float, ...] = (1.0,) * MONTHS
DEFAULT_BASE_PRICE = 12.00
DEFAULT_HISTORY: tuple[float, ...] = (50, 55, 60, 65, 70, 75, 80)


def _freeze_profile(values) -> tuple[float, ...]:
    profile = tuple(float(v) for v in values)
    if len(profile) != MONTHS:
        raise ValueError(f"seasonal profile needs {MONTHS} values, got {len(profile)}")
    if any(v <= 0 for v in profile):
        raise ValueError("seasonal multipliers must be positive")
    return profile


# ---------------------------------------------------------------------------
# Seasonal profiles
# ---------------------------------------------------------------------------

class SeasonalProfile:
    """Per-crop monthly demand multipliers (index 0 = January)."""

    def __init__(
        self,
        factors: Mapping[str, list[float] | tuple[float, ...]],
        default: tuple[float, ...] = DEFAULT_SEASONALITY,
    ) -> None:
        self._factors = MappingProxyType(
            {crop: _freeze_profile(values) for crop, values in factors.items()}
        )
        self._default = _freeze_profile(default)

    def __contains__(self, crop: str) -> bool:
        return crop in self._factors

    @property
    def crops(self) -> list[str]:
        return list(self._factors)

    def profile(self, crop: str) -> tuple[float, ...]:
        """Twelve multipliers for crop, or the default profile."""
        return self._factors.get(crop, self._default)

    def factor(self, crop: str, month: int) -> float:
        """Multiplier for a zero-based month; out-of-range months are clamped."""
        month = max(0, min(MONTHS - 1, month))
        return self.profile(crop)[month]

    def merged(self, overrides: Mapping[str, list[float]]) -> SeasonalProfile:
        combined = dict(self._factors)
        combined.update(overrides)
        return SeasonalProfile(combined, self._default)


# ---------------------------------------------------------------------------
# Market trends
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MarketTrend:
    """Static market outlook for a variety."""
    variety: str
    growth_rate: float               # annualised fraction, e.g. 0.15
    seasonality: tuple[float, ...]
    market_saturation: float         # 0..1

    def __post_init__(self) -> None:
        object.__setattr__(self, "seasonality", _freeze_profile(self.seasonality))
        if not 0.0 <= self.market_saturation <= 1.0:
            raise ValueError(
                f"market_saturation must be within [0, 1], got {self.market_saturation}"
            )


class MarketTrendRegistry:
    """Lookup of market trends by variety name."""

    def __init__(self, trends: list[MarketTrend]) -> None:
        self._trends = MappingProxyType({t.variety: t for t in trends})

    def __contains__(self, variety: str) -> bool:
        return variety in self._trends

    def __len__(self) -> int:
        return len(self._trends)

    def get(self, variety: str) -> MarketTrend | None:
        return self._trends.get(variety)

    def growth_factor(self, variety: str) -> float:
        """Monthly growth multiplier, 1 + growth_rate / 12, or 1.0 when unknown."""
        trend = self._trends.get(variety)
        if trend is None:
            return 1.0
        return 1 + trend.growth_rate / 12

    def merged(self, trends: list[MarketTrend]) -> MarketTrendRegistry:
        combined = dict(self._trends)
        combined.update({t.variety: t for t in trends})
        return MarketTrendRegistry(list(combined.values()))


# ---------------------------------------------------------------------------
# Bundle
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ForecastTables:
    """All static lookup data the engine needs, as one injectable object."""
    seasonal: SeasonalProfile
    market_trends: MarketTrendRegistry
    base_prices: Mapping[str, float] = field(default_factory=dict)
    historical_demand: Mapping[str, tuple[float, ...]] = field(default_factory=dict)
    default_price: float = DEFAULT_BASE_PRICE
    default_history: tuple[float, ...] = DEFAULT_HISTORY

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_prices", MappingProxyType(dict(self.base_prices)))
        object.__setattr__(
            self,
            "historical_demand",
            MappingProxyType({k: tuple(v) for k, v in self.historical_demand.items()}),
        )

    def base_price(self, crop: str) -> float:
        return self.base_prices.get(crop, self.default_price)

    def historical_series(self, crop: str) -> tuple[float, ...]:
        return self.historical_demand.get(crop, self.default_history)

    def with_overrides(
        self,
        *,
        seasonal: Mapping[str, list[float]] | None = None,
        market_trends: list[MarketTrend] | None = None,
        base_prices: Mapping[str, float] | None = None,
        historical_demand: Mapping[str, list[float]] | None = None,
    ) -> ForecastTables:
        """Return a copy with the given entries added or replaced."""
        prices = dict(self.base_prices)
        prices.update(base_prices or {})
        history = dict(self.historical_demand)
        history.update(historical_demand or {})
        return replace(
            self,
            seasonal=self.seasonal.merged(seasonal) if seasonal else self.seasonal,
            market_trends=(
                self.market_trends.merged(market_trends) if market_trends else self.market_trends
            ),
            base_prices=prices,
            historical_demand=history,
        )


DEFAULT_TABLES = ForecastTables(
    seasonal=SeasonalProfile({
        "Arugula":    [0.8, 0.9, 1.2, 1.3, 1.4, 1.2, 1.0, 0.9, 1.1, 1.2, 1.0, 0.8],
        "Basil":      [0.7, 0.8, 1.0, 1.3, 1.5, 1.6, 1.4, 1.3, 1.2, 1.0, 0.8, 0.7],
        "Kale":       [1.2, 1.3, 1.1, 0.9, 0.8, 0.7, 0.8, 0.9, 1.1, 1.3, 1.4, 1.3],
        "Pea Shoots": [1.0, 1.1, 1.2, 1.1, 1.0, 0.9, 0.8, 0.9, 1.0, 1.1, 1.2, 1.1],
        "Cilantro":   [0.9, 1.0, 1.1, 1.2, 1.3, 1.2, 1.1, 1.0, 1.1, 1.2, 1.1, 1.0],
        "Broccoli":   [1.1, 1.2, 1.3, 1.1, 0.9, 0.8, 0.7, 0.8, 1.0, 1.1, 1.2, 1.1],
        "Mustard":    [1.2, 1.1, 1.0, 0.9, 0.8, 0.7, 0.8, 0.9, 1.0, 1.1, 1.2, 1.3],
    }),
    market_trends=MarketTrendRegistry([
        MarketTrend(
            variety="Arugula",
            growth_rate=0.15,
            seasonality=(0.8, 0.9, 1.2, 1.3, 1.4, 1.2, 1.0, 0.9, 1.1, 1.2, 1.0, 0.8),
            market_saturation=0.6,
        ),
        MarketTrend(
            variety="Basil",
            growth_rate=0.22,
            seasonality=(0.7, 0.8, 1.0, 1.3, 1.5, 1.6, 1.4, 1.3, 1.2, 1.0, 0.8, 0.7),
            market_saturation=0.4,
        ),
        MarketTrend(
            variety="Kale",
            growth_rate=0.18,
            seasonality=(1.2, 1.3, 1.1, 0.9, 0.8, 0.7, 0.8, 0.9, 1.1, 1.3, 1.4, 1.3),
            market_saturation=0.7,
        ),
    ]),
    base_prices={
        "Arugula": 12.50,
        "Basil": 15.00,
        "Kale": 10.50,
        "Broccoli": 11.00,
        "Cilantro": 13.00,
        "Mustard": 11.50,
    },
    historical_demand={
        "Arugula": (45, 52, 48, 55, 60, 58, 62),
        "Basil": (38, 42, 45, 48, 52, 55, 58),
        "Kale": (65, 70, 68, 72, 75, 78, 80),
        "Broccoli": (85, 88, 90, 92, 95, 98, 100),
    },
)
