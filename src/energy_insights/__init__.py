# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Energy Insights - consumption analytics, forecasting and insights."""

__version__ = "0.1.0"

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
    TrendDirection,
    WeatherObservation,
)
from energy_insights.config import AppConfig, load_config
from energy_insights.errors import (
    ComputationError,
    EnergyInsightsError,
    UpstreamError,
    ValidationError,
)
from energy_insights.insights.engine import InsightEngine
from energy_insights.service import EnergyInsightsService, build_service

__all__ = [
    "AnalyticsResult",
    "AnalyticsSummary",
    "AppConfig",
    "ComputationError",
    "DailyReading",
    "EnergyInsightsError",
    "EnergyInsightsService",
    "ForecastResult",
    "ForecastSummary",
    "InsightEngine",
    "InsightResult",
    "InsightSeverity",
    "InsightType",
    "InsightsSummary",
    "TrendDirection",
    "UpstreamError",
    "ValidationError",
    "WeatherObservation",
    "build_service",
    "load_config",
]
