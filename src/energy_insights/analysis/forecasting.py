# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Trend and short-term consumption forecasting.

Projects future daily consumption by blending a least-squares linear
trend fitted over the most recent two weeks with the mean of that same
window:

- ``predicted = max(0, 0.6 * trend + 0.4 * moving_average)``
- the confidence band is ``predicted +/- 2 * std`` of the recent window,
  with the lower bound clamped at zero.

Trend direction and strength are computed over the whole history that
was supplied, not only the recent window.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Sequence

from energy_insights.analysis.stats import mean, population_std
from energy_insights.data.models import (
    DailyReading,
    ForecastResult,
    ForecastSummary,
    TrendDirection,
)
from energy_insights.data.normalizer import sort_readings

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 14
TREND_WEIGHT = 0.6
AVERAGE_WEIGHT = 0.4
CONFIDENCE_STD_MULTIPLIER = 2.0
STABLE_SLOPE_RATIO = 0.01
FORECAST_METHOD = "Linear Trend (60%) + Moving Average (40%)"


def linear_regression(data: Sequence[DailyReading]) -> tuple[float, float]:
    """Ordinary least squares of consumption against index ``0..n-1``.

    Days are assumed to be equally spaced; calendar gaps are ignored.
    Returns ``(slope, intercept)``.  With fewer than two points the slope
    is zero and the intercept is the single value (or zero).
    """
    n = len(data)
    if n < 2:
        return 0.0, (data[0].consumption_kwh if data else 0.0)

    sum_x = sum_y = sum_xy = sum_xx = 0.0
    for x, reading in enumerate(data):
        y = reading.consumption_kwh
        sum_x += x
        sum_y += y
        sum_xy += x * y
        sum_xx += x * x

    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def forecast_readings(
    historical_data: Sequence[DailyReading],
    days_to_forecast: int,
) -> list[ForecastResult]:
    """Project *days_to_forecast* days beyond the last historical reading."""
    ordered = sort_readings(historical_data)
    if not ordered:
        return []

    recent = ordered[-RECENT_WINDOW_DAYS:]
    recent_values = [r.consumption_kwh for r in recent]
    moving_avg = mean(recent_values)
    slope, intercept = linear_regression(recent)
    margin = CONFIDENCE_STD_MULTIPLIER * population_std(recent_values)

    last_date = ordered[-1].date
    forecasts: list[ForecastResult] = []
    for i in range(1, days_to_forecast + 1):
        x = len(recent) + i
        trend_value = slope * x + intercept
        predicted = max(0.0, TREND_WEIGHT * trend_value + AVERAGE_WEIGHT * moving_avg)
        forecasts.append(
            ForecastResult(
                date=last_date + dt.timedelta(days=i),
                predicted_kwh=predicted,
                confidence_lower=max(0.0, predicted - margin),
                confidence_upper=predicted + margin,
                method=FORECAST_METHOD,
            )
        )

    return forecasts


def calculate_trend(data: Sequence[DailyReading]) -> tuple[TrendDirection, float]:
    """Classify the consumption trend and measure its strength.

    Strength is ``|slope| / mean * 100``.  The trend is *Stable* when the
    slope moves less than 1% of the mean per day.  A zero mean yields
    ``(Stable, 0.0)`` because the slope of an all-zero series is zero.
    """
    if len(data) < 2:
        return TrendDirection.unknown, 0.0

    ordered = sort_readings(data)
    slope, _ = linear_regression(ordered)
    avg = mean([r.consumption_kwh for r in ordered])

    strength = abs(slope) / avg * 100 if avg != 0 else 0.0

    if abs(slope) < avg * STABLE_SLOPE_RATIO or (avg == 0 and slope == 0):
        direction = TrendDirection.stable
    elif slope > 0:
        direction = TrendDirection.increasing
    else:
        direction = TrendDirection.decreasing

    return direction, strength


def summarize_forecast(
    historical_data: Sequence[DailyReading],
    days_to_forecast: int,
) -> ForecastSummary:
    """Build a :class:`ForecastSummary` from historical readings."""
    if not historical_data:
        logger.warning("No historical data available for forecasting")
        return ForecastSummary()

    forecasts = forecast_readings(historical_data, days_to_forecast)
    direction, strength = calculate_trend(historical_data)

    logger.info(
        "Forecast generated: trend %s with strength %.2f",
        direction.value,
        strength,
    )

    return ForecastSummary(
        forecasts=forecasts,
        average_historical_consumption=mean(
            [r.consumption_kwh for r in historical_data]
        ),
        trend_direction=direction,
        trend_strength=strength,
    )
