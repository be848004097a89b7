"""Plain-text renderings of forecast results."""

from __future__ import annotations

from harvest_forecast.forecasting.models import CustomerSegment, DemandForecast, ForecastResult


def format_forecast_report(result: ForecastResult | None) -> str:
    """Render a single-crop forecast as a human-readable summary.

    Args:
        result: ForecastResult or None.

    Returns:
        Multi-line text report.
    """
    if result is None or not result.predictions:
        return "No forecast data available for report."

    demands = [p.predicted_demand for p in result.predictions]
    sections: list[str] = []
    sections.append(f"=== Demand Forecast: {result.crop} ===")
    sections.append("")
    sections.append(f"  Model:     {result.model_type}")
    sections.append(f"  Accuracy:  {result.accuracy * 100:.1f}%")
    sections.append(f"  Days:      {len(result.predictions)}")
    sections.append(
        f"  Demand:    min={min(demands):.1f}, max={max(demands):.1f}, "
        f"total={sum(demands):.1f}"
    )
    sections.append(
        "  Factors:   "
        + ", ".join(f"{k}={v:.2f}" for k, v in result.factors.items())
    )
    sections.append("")
    sections.append("  Daily Predictions:")
    for p in result.predictions:
        sections.append(
            f"    {p.date.isoformat()}: demand={p.predicted_demand:.1f}, "
            f"price={p.price_estimate:.2f}, confidence={p.confidence:.2f}"
        )
    sections.append("")
    return "\n".join(sections)


def format_demand_report(
    forecasts: list[DemandForecast],
    segments: list[CustomerSegment] | None = None,
) -> str:
    """Render ranked variety forecasts and optional customer segments."""
    if not forecasts and not segments:
        return "No demand data available for report."

    sections: list[str] = []
    sections.append("=== Variety Demand Forecast ===")
    sections.append("")

    if forecasts:
        sections.append("--- Forecasts ---")
        for rank, f in enumerate(forecasts, 1):
            sections.append(
                f"  {rank}. {f.variety}: demand={f.predicted_demand:.0f}, "
                f"confidence={f.confidence:.2f}, trend={f.trend}, "
                f"seasonal={f.seasonal_factor:.2f}"
            )
            for rec in f.recommendations:
                sections.append(f"       - {rec}")
        sections.append("")

    if segments:
        sections.append("--- Customer Segments ---")
        for s in segments:
            top = sorted(s.variety_preferences.items(), key=lambda kv: kv[1], reverse=True)[:3]
            top_str = ", ".join(f"{name}={qty:.0f}" for name, qty in top) or "none"
            sections.append(
                f"  {s.type}: orders={s.order_frequency}, "
                f"avg_order={s.average_order_size:.2f}, top={top_str}"
            )
        sections.append("")

    return "\n".join(sections)
