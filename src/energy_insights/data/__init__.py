# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Data models, normalization and simulated data generation."""

from energy_insights.data.models import (
    AnalyticsResult,
    AnalyticsSummary,
    DailyReading,
    ForecastResult,
    ForecastSummary,
    InsightResult,
    InsightSeverity,
    InsightsSummary,
    InsightType,
    RawMeterAggregate,
    TrendDirection,
    WeatherObservation,
)
from energy_insights.data.normalizer import normalize_readings

__all__ = [
    "AnalyticsResult",
    "AnalyticsSummary",
    "DailyReading",
    "ForecastResult",
    "ForecastSummary",
    "InsightResult",
    "InsightSeverity",
    "InsightType",
    "InsightsSummary",
    "RawMeterAggregate",
    "TrendDirection",
    "WeatherObservation",
    "normalize_readings",
]
