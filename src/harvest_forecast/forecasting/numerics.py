"""Shared numerics for both forecasting pipelines.

Small pure functions: mean/variance, exponential smoothing, OLS slope,
moving averages, CV-based confidence and trend labelling.  No I/O and no
randomness.
"""

from __future__ import annotations

import math


def clamp(value: float, low: float, high: float) -> float:
    """Restrict value to the closed interval [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def mean(values: list[float]) -> float:
    """Arithmetic mean; 0.0 for an empty list."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_variance(values: list[float]) -> float:
    """Population variance (divides by n); 0.0 for an empty list."""
    if not values:
        return 0.0
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def exponential_smoothing(values: list[float], alpha: float = 0.3) -> list[float]:
    """Simple exponential smoothing.

    s[0] = x[0]; s[i] = alpha * x[i] + (1 - alpha) * s[i-1].
    A constant series is a fixed point.
    """
    if not values:
        return []
    smoothed = [float(values[0])]
    for x in values[1:]:
        smoothed.append(alpha * x + (1 - alpha) * smoothed[-1])
    return smoothed


def ols_slope(values: list[float]) -> float:
    """Least-squares slope of values against their index 0..n-1.

    Returns 0.0 for fewer than two points.
    """
    n = len(values)
    if n < 2:
        return 0.0

    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for i, y in enumerate(values):
        sum_x += i
        sum_y += y
        sum_xy += i * y
        sum_xx += i * i

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def trailing_moving_average(values: list[float], window: int) -> list[float]:
    """Moving average over full windows only (len(values) - window + 1 points)."""
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    result: list[float] = []
    for i in range(window - 1, len(values)):
        w = values[i - window + 1: i + 1]
        result.append(sum(w) / window)
    return result


def centered_window(index: int, window: int, length: int) -> tuple[int, int]:
    """Return the [start, end) bounds of a centered window clipped to length."""
    start = max(0, index - window // 2)
    end = min(length, index + math.ceil(window / 2))
    return start, end


def cv_confidence(
    values: list[float],
    low: float = 0.1,
    high: float = 0.95,
) -> float:
    """Confidence from the coefficient of variation of a 3-point moving average.

    confidence = clamp(1 - std / mean, low, high).  Series shorter than three
    points get 0.5; a non-positive mean gets the floor.
    """
    if len(values) < 3:
        return 0.5

    smoothed = trailing_moving_average(values, 3)
    m = mean(smoothed)
    if m <= 0:
        return low

    cv = math.sqrt(population_variance(smoothed)) / m
    return clamp(1 - cv, low, high)


def trend_label(slope: float, threshold: float = 0.1) -> str:
    """Classify a slope as 'increasing', 'decreasing' or 'stable'."""
    if slope > threshold:
        return "increasing"
    if slope < -threshold:
        return "decreasing"
    return "stable"
