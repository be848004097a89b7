"""Input records supplied by the host application.

Collaborators hand over plain mappings (often straight from JSON, so keys may
arrive camelCased); these models validate and normalise them before any
arithmetic happens.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _to_id(value: Any) -> Any:
    """Identifiers arrive as ints or strings depending on the source; compare as text."""
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _to_date(value: Any) -> Any:
    """Coerce datetimes and ISO strings into a plain date."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, str):
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        return dt.datetime.fromisoformat(s).date()
    return value


# ---------------------------------------------------------------------------
# Market conditions
# ---------------------------------------------------------------------------


class MarketData(_Record):
    """Partial market snapshot; only weather and the two condition flags are used."""

    date: Optional[dt.datetime] = None
    crop: Optional[str] = None
    demand: Optional[float] = None
    price: Optional[float] = None
    seasonality: Optional[float] = None
    weather_index: Optional[float] = None
    demand_trend: Optional[str] = None          # increasing/decreasing
    competitor_activity: Optional[str] = None   # low/high


# ---------------------------------------------------------------------------
# Orders and customers
# ---------------------------------------------------------------------------


class OrderItem(_Record):
    product_name: str
    quantity: float


class Order(_Record):
    id: Union[int, str, None] = None
    customer_id: Optional[str] = None
    order_date: dt.date
    total_amount: float = 0.0
    order_items: list[OrderItem] = Field(default_factory=list)

    @field_validator("customer_id", mode="before")
    @classmethod
    def _normalise_customer_id(cls, value):
        return _to_id(value)

    @field_validator("order_date", mode="before")
    @classmethod
    def _normalise_date(cls, value):
        return _to_date(value)

    @field_validator("order_items", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value


class Customer(_Record):
    id: str
    customer_type: str

    @field_validator("id", mode="before")
    @classmethod
    def _normalise_id(cls, value):
        return _to_id(value)


class ForecastingData(_Record):
    """Everything the multi-variety pipeline consumes in one bundle."""

    customers: list[Customer] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    batches: list[dict] = Field(default_factory=list)  # passed through, unused
