# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Numerical analyzers for daily energy consumption series."""

from energy_insights.analysis.anomalies import (
    compute_moving_average,
    detect_anomalies,
    summarize,
)
from energy_insights.analysis.forecasting import (
    calculate_trend,
    forecast_readings,
    linear_regression,
    summarize_forecast,
)

__all__ = [
    "calculate_trend",
    "compute_moving_average",
    "detect_anomalies",
    "forecast_readings",
    "linear_regression",
    "summarize",
    "summarize_forecast",
]
