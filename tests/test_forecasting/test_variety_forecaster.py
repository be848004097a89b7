"""Tests for the per-variety demand pipeline."""

from datetime import date, timedelta

import pytest

from harvest_forecast.forecasting.profiles import DEFAULT_TABLES, MarketTrend
from harvest_forecast.forecasting.records import ForecastingData, Order, OrderItem
from harvest_forecast.forecasting.variety_forecaster import (
    extract_variety_demand,
    fallback_forecasts,
    forecast_variety_demand,
    generate_demand_forecast,
    generate_demand_forecast_with_status,
    generate_recommendations,
    week_key,
)

MARCH = date(2024, 3, 15)


# ---------------------------------------------------------------------------
# Helper data builders
# ---------------------------------------------------------------------------

def _weekly_orders(variety, quantities, start=date(2024, 1, 1)):
    """One order per week (Mondays) carrying a single line for variety."""
    return [
        Order(
            id=f"{variety}-{i}",
            customer_id="c1",
            order_date=start + timedelta(weeks=i),
            total_amount=q * 2.0,
            order_items=[OrderItem(product_name=variety, quantity=q)],
        )
        for i, q in enumerate(quantities)
    ]


# ---------------------------------------------------------------------------
# week_key / extract_variety_demand
# ---------------------------------------------------------------------------


class TestWeekKey:
    def test_zero_padded(self):
        assert week_key(date(2024, 1, 3)) == "2024-W01"

    def test_iso_year_boundary(self):
        assert week_key(date(2024, 12, 30)) == "2025-W01"
        assert week_key(date(2021, 1, 1)) == "2020-W53"

    def test_lexicographic_order_is_chronological(self):
        days = [date(2020, 12, 28), date(2021, 1, 4), date(2021, 3, 1), date(2021, 11, 1)]
        keys = [week_key(d) for d in days]
        assert keys == sorted(keys)


class TestExtractVarietyDemand:
    def test_weekly_sums(self):
        orders = [
            Order(order_date=date(2024, 1, 1), order_items=[OrderItem(product_name="Kale", quantity=5)]),
            Order(order_date=date(2024, 1, 3), order_items=[OrderItem(product_name="Kale", quantity=7)]),
            Order(order_date=date(2024, 1, 9), order_items=[OrderItem(product_name="Kale", quantity=4)]),
        ]
        assert extract_variety_demand(orders) == {"Kale": [12, 4]}

    def test_sparse_weeks_are_omitted(self):
        orders = _weekly_orders("Basil", [10, 20]) + [
            Order(order_date=date(2024, 3, 4), order_items=[OrderItem(product_name="Basil", quantity=30)]),
        ]
        assert extract_variety_demand(orders) == {"Basil": [10, 20, 30]}

    def test_orders_sorted_regardless_of_input_order(self):
        orders = list(reversed(_weekly_orders("Kale", [1, 2, 3])))
        assert extract_variety_demand(orders)["Kale"] == [1, 2, 3]

    def test_orders_without_items(self):
        assert extract_variety_demand([Order(order_date=date(2024, 1, 1))]) == {}

    def test_totals_preserved(self):
        orders = _weekly_orders("Kale", [3, 5, 8, 13]) + _weekly_orders("Basil", [2, 2])
        orders.append(Order(
            order_date=date(2024, 1, 2),
            order_items=[
                OrderItem(product_name="Kale", quantity=1.5),
                OrderItem(product_name="Basil", quantity=4),
            ],
        ))
        series = extract_variety_demand(orders)
        for variety in ("Kale", "Basil"):
            expected = sum(
                item.quantity
                for o in orders
                for item in o.order_items
                if item.product_name == variety
            )
            assert sum(series[variety]) == pytest.approx(expected)


# ---------------------------------------------------------------------------
# forecast_variety_demand
# ---------------------------------------------------------------------------


class TestForecastVarietyDemand:
    def test_arugula_history(self):
        f = forecast_variety_demand("Arugula", [45, 52, 48, 55, 60, 58, 62], 3, as_of=MARCH)
        assert f.variety == "Arugula"
        assert f.trend == "increasing"
        assert f.seasonal_factor == 1.2
        assert f.predicted_demand == 70
        assert f.confidence == pytest.approx(0.9236, abs=1e-3)
        assert f.recommendations == ["Strong upward trend - consider increasing production"]

    def test_constant_history_is_stable(self):
        f = forecast_variety_demand("Sorrel", [50, 50, 50, 50, 50], 30, as_of=MARCH)
        assert f.trend == "stable"
        assert f.predicted_demand == 50
        assert f.confidence == 0.95
        assert f.seasonal_factor == 1.0
        assert f.recommendations == []

    def test_declining_history(self):
        f = forecast_variety_demand("Sorrel", [100, 80, 60, 40, 20], 7, as_of=MARCH)
        assert f.trend == "decreasing"
        assert f.predicted_demand == 43
        assert f.recommendations == ["Declining demand - review market position"]

    def test_demand_never_negative(self):
        f = forecast_variety_demand("Sorrel", [100, 80, 60, 40, 20], 365, as_of=MARCH)
        assert f.predicted_demand == 0
        assert "Low demand predicted - consider promotional activities" in f.recommendations

    def test_volatile_history_low_confidence(self):
        f = forecast_variety_demand("Sorrel", [1, 1, 1, 100, 100, 100], 7, as_of=MARCH)
        assert f.confidence < 0.6
        assert f.recommendations[0] == "Low confidence - collect more historical data"

    def test_high_demand(self):
        f = forecast_variety_demand("Sorrel", [200, 200, 200], 7, as_of=MARCH)
        assert f.recommendations == ["High demand expected - ensure adequate production capacity"]

    def test_saturated_market(self):
        tables = DEFAULT_TABLES.with_overrides(
            market_trends=[MarketTrend("Sorrel", 0.06, (1.0,) * 12, 0.9)],
        )
        f = forecast_variety_demand("Sorrel", [50, 50, 50], 7, as_of=MARCH, tables=tables)
        assert f.predicted_demand == 50  # 50 * 1.005
        assert f.recommendations == ["Market approaching saturation - focus on differentiation"]

    def test_season_follows_as_of_month(self):
        winter = forecast_variety_demand("Kale", [50, 50, 50], 7, as_of=date(2024, 11, 1))
        summer = forecast_variety_demand("Kale", [50, 50, 50], 7, as_of=date(2024, 6, 1))
        assert winter.seasonal_factor == 1.4
        assert summer.seasonal_factor == 0.7
        assert winter.predicted_demand > summer.predicted_demand


class TestGenerateRecommendations:
    def test_order_of_rules(self):
        saturated = MarketTrend("X", 0.1, (1.0,) * 12, 0.85)
        recs = generate_recommendations(150, 0.5, 0.4, saturated)
        assert recs == [
            "Low confidence - collect more historical data",
            "Strong upward trend - consider increasing production",
            "Market approaching saturation - focus on differentiation",
            "High demand expected - ensure adequate production capacity",
        ]

    def test_quiet_case(self):
        assert generate_recommendations(50, 0.0, 0.9) == []


# ---------------------------------------------------------------------------
# generate_demand_forecast
# ---------------------------------------------------------------------------


class TestGenerateDemandForecast:
    def test_short_series_excluded(self):
        orders = _weekly_orders("Kale", [10, 12]) + _weekly_orders("Basil", [20, 22, 24])
        result = generate_demand_forecast(ForecastingData(orders=orders), 7, as_of=MARCH)
        assert [f.variety for f in result] == ["Basil"]

    def test_sorted_descending(self):
        orders = (
            _weekly_orders("Kale", [10, 10, 10])
            + _weekly_orders("Basil", [90, 95, 100])
            + _weekly_orders("Sorrel", [40, 40, 40])
        )
        result = generate_demand_forecast(ForecastingData(orders=orders), 7, as_of=MARCH)
        demands = [f.predicted_demand for f in result]
        assert demands == sorted(demands, reverse=True)
        assert result[0].variety == "Basil"

    def test_empty_input(self):
        assert generate_demand_forecast(ForecastingData(), 30) == []

    def test_accepts_mapping(self):
        data = {
            "customers": [{"id": "c1", "customerType": "restaurant"}],
            "orders": [
                {
                    "customerId": "c1",
                    "orderDate": f"2024-01-{day:02d}T09:30:00Z",
                    "totalAmount": 50,
                    "orderItems": [{"productName": "Basil", "quantity": 10}],
                }
                for day in (1, 8, 15, 22)
            ],
            "batches": [],
        }
        result = generate_demand_forecast(data, 14, as_of=MARCH)
        assert len(result) == 1
        assert result[0].variety == "Basil"

    def test_malformed_input_returns_fallback(self):
        data = {"orders": [{"orderDate": "not-a-date", "orderItems": []}]}
        forecasts, used_fallback = generate_demand_forecast_with_status(data, 30)
        assert used_fallback is True
        assert [f.variety for f in forecasts] == ["Arugula", "Basil"]

    def test_malformed_input_is_logged(self, caplog):
        with caplog.at_level("ERROR"):
            generate_demand_forecast({"orders": "nope"}, 30)
        assert "fallback" in caplog.text

    def test_min_history_configurable(self):
        orders = _weekly_orders("Kale", [10, 12, 14])
        result = generate_demand_forecast(ForecastingData(orders=orders), 7, as_of=MARCH, min_history=4)
        assert result == []


class TestFallbackForecasts:
    def test_contents(self):
        fb = fallback_forecasts()
        assert fb[0].predicted_demand == 45
        assert fb[0].trend == "stable"
        assert fb[1].seasonal_factor == 1.2
        assert fb[1].recommendations == ["Consider increasing production capacity"]

    def test_fresh_copies(self):
        fallback_forecasts()[0].recommendations.append("x")
        assert fallback_forecasts()[0].recommendations == ["Maintain current production levels"]
