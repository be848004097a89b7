"""Forecast engine settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class ForecastSettings(BaseSettings):
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "FORECAST_",
        "extra": "ignore",
    }

    # Variety pipeline
    smoothing_alpha: float = 0.3
    trend_window: int = 4  # trailing smoothed points fed to the OLS slope
    min_history_points: int = 3

    # Single-crop pipeline
    moving_average_window: int = 3
    default_days_ahead: int = 30

    # Noise source; None seeds from the system clock
    random_seed: int | None = None

    # Logging
    log_level: str = "INFO"


settings = ForecastSettings()
