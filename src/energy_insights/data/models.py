# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Core Pydantic v2 data models for the energy insights service.

This module defines the complete data contract shared by the normalizer,
analytics, forecasting, insight, source, API and CLI layers.  Every model
is a frozen value object: each pipeline stage builds fresh instances and
never mutates what it received.  Field names are snake_case in Python and
camelCase on the wire.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

_VALUE_CONFIG = {
    "frozen": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TrendDirection(str, Enum):
    """Direction of the fitted consumption trend."""

    increasing = "Increasing"
    decreasing = "Decreasing"
    stable = "Stable"
    unknown = "Unknown"


class InsightSeverity(str, Enum):
    """How urgently an insight deserves attention."""

    info = "info"
    warning = "warning"
    critical = "critical"

    @property
    def color(self) -> str:
        """Terminal color associated with this severity."""
        if self is InsightSeverity.critical:
            return "red"
        if self is InsightSeverity.warning:
            return "yellow"
        return "cyan"


class InsightType(str, Enum):
    """Category tag for each insight generator."""

    no_data = "NoData"
    total_consumption = "TotalConsumption"
    average_consumption = "AverageConsumption"
    peak_consumption = "PeakConsumption"
    lowest_consumption = "LowestConsumption"
    no_anomalies = "NoAnomalies"
    anomaly_detected = "AnomalyDetected"
    significant_anomaly = "SignificantAnomaly"
    weather_impact = "WeatherImpact"
    weather_pattern = "WeatherPattern"
    consumption_trend = "ConsumptionTrend"
    weekly_comparison = "WeeklyComparison"
    forecast_prediction = "ForecastPrediction"


# A single insight metadata entry: text, number or calendar day.
MetadataValue = Union[str, int, float, dt.date]


# ---------------------------------------------------------------------------
# Readings
# ---------------------------------------------------------------------------

class RawMeterAggregate(BaseModel):
    """One day of aggregated register values as returned by the metering API.

    The meter reports a cumulative register in Wh, so the day's net
    consumption is the spread between the highest and lowest sample.
    """

    model_config = _VALUE_CONFIG

    sensor_id: str = Field(default="", description="Upstream sensor identifier")
    year: int = Field(..., ge=1)
    month: int = Field(..., ge=1, le=12)
    day: int = Field(..., ge=1, le=31)
    count: int = Field(default=0, ge=0, description="Samples aggregated into this day")
    sum: float = Field(default=0.0)
    min: float = Field(default=0.0)
    max: float = Field(default=0.0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def date(self) -> dt.date:
        """Calendar day this aggregate covers."""
        return dt.date(self.year, self.month, self.day)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def consumption_kwh(self) -> float:
        """Net consumption for the day in kWh."""
        return (self.max - self.min) / 1000


class DailyReading(BaseModel):
    """Net energy consumption for a single calendar day."""

    model_config = _VALUE_CONFIG

    date: dt.date
    consumption_kwh: float = Field(..., ge=0, description="Consumption in kWh")


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class AnalyticsResult(BaseModel):
    """Per-day analytics record with moving average and anomaly flag."""

    model_config = _VALUE_CONFIG

    date: dt.date
    consumption_kwh: float
    moving_average: Optional[float] = Field(
        default=None,
        description="Trailing window mean; unset until the window is full",
    )
    is_anomaly: bool = False
    deviation_from_average: Optional[float] = None
    anomaly_reason: Optional[str] = None


class AnalyticsSummary(BaseModel):
    """Aggregate analytics over a date range."""

    model_config = _VALUE_CONFIG

    from_date: dt.date
    to_date: dt.date
    total_energy_used: float = 0.0
    average_daily_use: float = 0.0
    number_of_anomalies: int = Field(default=0, ge=0)
    daily_results: list[AnalyticsResult] = Field(default_factory=list)

    @property
    def anomalies(self) -> list[AnalyticsResult]:
        """Daily results flagged as anomalous, in series order."""
        return [r for r in self.daily_results if r.is_anomaly]


# ---------------------------------------------------------------------------
# Forecasting
# ---------------------------------------------------------------------------

class ForecastResult(BaseModel):
    """Predicted consumption for one future day with a confidence band."""

    model_config = _VALUE_CONFIG

    date: dt.date
    predicted_kwh: float = Field(..., ge=0)
    confidence_lower: float = Field(..., ge=0)
    confidence_upper: float = Field(..., ge=0)
    method: str = "Linear Trend + Moving Average"

    @model_validator(mode="after")
    def _check_bounds(self) -> ForecastResult:
        if not self.confidence_lower <= self.predicted_kwh <= self.confidence_upper:
            raise ValueError(
                "confidence bounds must satisfy lower <= predicted <= upper"
            )
        return self


class ForecastSummary(BaseModel):
    """Forecast entries together with the historical trend they came from."""

    model_config = _VALUE_CONFIG

    forecasts: list[ForecastResult] = Field(default_factory=list)
    average_historical_consumption: float = 0.0
    trend_direction: TrendDirection = TrendDirection.unknown
    trend_strength: float = Field(
        default=0.0, ge=0, description="Absolute slope as a percentage of the mean"
    )


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

class WeatherObservation(BaseModel):
    """Daily weather summary used for consumption correlation."""

    model_config = _VALUE_CONFIG

    date: dt.date
    temperature: float = Field(..., description="Mean temperature in Celsius")
    feels_like: float
    temp_min: float
    temp_max: float
    humidity: int = Field(..., ge=0, le=100)
    condition: str = Field(default="", description="Condition group, e.g. 'Rain'")
    description: str = ""


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

class InsightResult(BaseModel):
    """A single human-readable finding."""

    model_config = _VALUE_CONFIG

    type: InsightType
    message: str
    severity: InsightSeverity = InsightSeverity.info
    related_date: Optional[dt.date] = None
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)


class InsightsSummary(BaseModel):
    """All insights for a period plus a one-line overall assessment."""

    model_config = _VALUE_CONFIG

    insights: list[InsightResult] = Field(default_factory=list)
    overall_assessment: str
    generated_at: dt.datetime = Field(
        default_factory=lambda: dt.datetime.now(dt.timezone.utc)
    )
