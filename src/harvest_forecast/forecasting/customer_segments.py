"""Customer segment profiles grouped by customer type.

Descriptive context returned alongside forecasts; nothing here feeds back into
the numeric forecast.
"""

from __future__ import annotations

from typing import Iterable

from harvest_forecast.forecasting.models import CustomerSegment
from harvest_forecast.forecasting.records import Customer, Order


def _monthly_index(counts: list[int]) -> list[float]:
    """Per-month order count relative to the mean month (1.0 = average)."""
    total = sum(counts)
    if total == 0:
        return [1.0] * 12
    avg = total / 12
    return [round(c / avg, 4) for c in counts]


def analyze_customer_segments(
    customers: Iterable[Customer],
    orders: Iterable[Order],
) -> list[CustomerSegment]:
    """Aggregate order size, frequency and variety mix per customer type.

    Segments come back in the order their customer type is first seen.
    Orders whose customer is not in ``customers`` are ignored.
    """
    orders_by_customer: dict = {}
    for order in orders:
        orders_by_customer.setdefault(order.customer_id, []).append(order)

    totals: dict[str, dict] = {}
    for customer in customers:
        bucket = totals.setdefault(customer.customer_type, {
            "orders": 0,
            "value": 0.0,
            "preferences": {},
            "months": [0] * 12,
        })
        for order in orders_by_customer.get(customer.id, []):
            bucket["orders"] += 1
            bucket["value"] += order.total_amount
            bucket["months"][order.order_date.month - 1] += 1
            for item in order.order_items:
                prefs = bucket["preferences"]
                prefs[item.product_name] = prefs.get(item.product_name, 0.0) + item.quantity

    segments: list[CustomerSegment] = []
    for customer_type, bucket in totals.items():
        n = bucket["orders"]
        segments.append(CustomerSegment(
            type=customer_type,
            average_order_size=round(bucket["value"] / n, 4) if n else 0.0,
            order_frequency=n,
            variety_preferences=bucket["preferences"],
            seasonal_patterns=_monthly_index(bucket["months"]),
        ))
    return segments
