# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Insight engine.

Combines the analytics summary, the forecast summary and daily weather
into an ordered list of :class:`~energy_insights.data.models.InsightResult`
objects plus a single overall assessment sentence.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Mapping, Sequence

from energy_insights.analysis.stats import mean, percent_change
from energy_insights.data.models import (
    AnalyticsSummary,
    DailyReading,
    ForecastSummary,
    InsightResult,
    InsightSeverity,
    InsightsSummary,
    InsightType,
    TrendDirection,
    WeatherObservation,
)
from energy_insights.data.normalizer import sort_readings
from energy_insights.insights import templates as t

logger = logging.getLogger(__name__)

# Days with a mean temperature above this are treated as cooling days.
HOT_DAY_CELSIUS = 28.0
WARNING_ANOMALY_COUNT = 3
WARNING_TREND_STRENGTH = 5.0
RISING_TREND_STRENGTH = 10.0
WEEKLY_COMPARISON_MIN_DAYS = 14
WARNING_WEEKLY_CHANGE_PCT = 15.0
FORECAST_SIMILAR_BAND_PCT = 5.0
WARNING_FORECAST_CHANGE_PCT = 10.0
MONITOR_WARNING_COUNT = 2


class InsightEngine:
    """Generate ranked insights from analytics, forecast and weather data.

    Usage::

        engine = InsightEngine()
        summary = engine.generate(readings, analytics, forecast, weather)
    """

    def generate(
        self,
        readings: Sequence[DailyReading],
        analytics: AnalyticsSummary,
        forecast: ForecastSummary,
        weather: Mapping[dt.date, WeatherObservation],
    ) -> InsightsSummary:
        """Run every insight generator and compute the overall assessment.

        Generators run in a fixed order: consumption, anomalies, weather
        correlation (only when weather is available), trend and forecast.
        An empty reading series short-circuits to a single ``NoData``
        warning.
        """
        if not readings:
            logger.warning("No energy data available; skipping insight generation")
            return InsightsSummary(
                insights=[
                    InsightResult(
                        type=t.NO_DATA.type,
                        message=t.NO_DATA.render(),
                        severity=InsightSeverity.warning,
                    )
                ],
                overall_assessment=t.ASSESSMENT_NO_DATA,
            )

        insights: list[InsightResult] = []
        insights.extend(self.consumption_insights(readings, analytics))
        insights.extend(self.anomaly_insights(analytics))
        if weather:
            insights.extend(self.weather_insights(readings, weather))
        insights.extend(self.trend_insights(readings, forecast))
        insights.extend(self.forecast_insights(forecast, analytics))

        assessment = self.overall_assessment(analytics, forecast, insights)
        logger.info("Generated %d insights", len(insights))

        return InsightsSummary(insights=insights, overall_assessment=assessment)

    # ------------------------------------------------------------------
    # Generators
    # ------------------------------------------------------------------

    def consumption_insights(
        self,
        readings: Sequence[DailyReading],
        analytics: AnalyticsSummary,
    ) -> list[InsightResult]:
        """Total, average, peak and lowest consumption statements."""
        # max()/min() return the first extreme element, so ties keep input order.
        peak = max(readings, key=lambda r: r.consumption_kwh)
        lowest = min(readings, key=lambda r: r.consumption_kwh)
        avg = analytics.average_daily_use

        return [
            InsightResult(
                type=t.TOTAL_CONSUMPTION.type,
                message=t.TOTAL_CONSUMPTION.render(
                    total_kwh=analytics.total_energy_used, days=len(readings)
                ),
                metadata={"totalKwh": analytics.total_energy_used, "days": len(readings)},
            ),
            InsightResult(
                type=t.AVERAGE_CONSUMPTION.type,
                message=t.AVERAGE_CONSUMPTION.render(avg_kwh=avg),
                metadata={"avgKwh": avg},
            ),
            InsightResult(
                type=t.PEAK_CONSUMPTION.type,
                message=t.PEAK_CONSUMPTION.render(
                    date=peak.date,
                    peak_kwh=peak.consumption_kwh,
                    above_pct=percent_change(peak.consumption_kwh, avg),
                ),
                related_date=peak.date,
                metadata={"peakKwh": peak.consumption_kwh, "date": peak.date},
            ),
            InsightResult(
                type=t.LOWEST_CONSUMPTION.type,
                message=t.LOWEST_CONSUMPTION.render(
                    date=lowest.date, lowest_kwh=lowest.consumption_kwh
                ),
                related_date=lowest.date,
                metadata={"lowestKwh": lowest.consumption_kwh, "date": lowest.date},
            ),
        ]

    def anomaly_insights(self, analytics: AnalyticsSummary) -> list[InsightResult]:
        """Summarise anomaly count and detail the largest deviation."""
        count = analytics.number_of_anomalies
        if count == 0:
            return [
                InsightResult(type=t.NO_ANOMALIES.type, message=t.NO_ANOMALIES.render())
            ]

        insights = [
            InsightResult(
                type=t.ANOMALY_DETECTED.type,
                message=t.ANOMALY_DETECTED.render(count=count),
                severity=(
                    InsightSeverity.warning
                    if count > WARNING_ANOMALY_COUNT
                    else InsightSeverity.info
                ),
                metadata={"anomalyCount": count},
            )
        ]

        flagged = analytics.anomalies
        if flagged:
            worst = max(flagged, key=lambda r: abs(r.deviation_from_average or 0.0))
            insights.append(
                InsightResult(
                    type=t.SIGNIFICANT_ANOMALY.type,
                    message=t.SIGNIFICANT_ANOMALY.render(
                        date=worst.date, reason=worst.anomaly_reason or ""
                    ),
                    severity=InsightSeverity.warning,
                    related_date=worst.date,
                    metadata={
                        "deviation": worst.deviation_from_average or 0.0,
                        "consumption": worst.consumption_kwh,
                    },
                )
            )

        return insights

    def weather_insights(
        self,
        readings: Sequence[DailyReading],
        weather: Mapping[dt.date, WeatherObservation],
    ) -> list[InsightResult]:
        """Correlate consumption with hot and rainy days."""
        insights: list[InsightResult] = []
        paired = [(r, weather[r.date]) for r in readings if r.date in weather]
        if not paired:
            return insights

        overall_avg = mean([r.consumption_kwh for r in readings])

        hot_days = [
            (r, w)
            for r, w in paired
            if w.temperature > HOT_DAY_CELSIUS and r.consumption_kwh > overall_avg
        ]
        if hot_days:
            avg_temp = mean([w.temperature for _, w in hot_days])
            increase = percent_change(
                mean([r.consumption_kwh for r, _ in hot_days]), overall_avg
            )
            insights.append(
                InsightResult(
                    type=t.WEATHER_IMPACT.type,
                    message=t.WEATHER_IMPACT.render(
                        increase_pct=increase, avg_temp=avg_temp
                    ),
                    metadata={
                        "avgTempHotDays": avg_temp,
                        "increasePercent": increase,
                        "daysCount": len(hot_days),
                    },
                )
            )

        rainy_days = [(r, w) for r, w in paired if "rain" in w.condition.lower()]
        if rainy_days:
            change = percent_change(
                mean([r.consumption_kwh for r, _ in rainy_days]), overall_avg
            )
            insights.append(
                InsightResult(
                    type=t.WEATHER_PATTERN.type,
                    message=t.WEATHER_PATTERN.render(
                        rainy_days=len(rainy_days),
                        change_pct=abs(change),
                        direction="higher" if change > 0 else "lower",
                    ),
                    metadata={"rainyDays": len(rainy_days), "changePercent": change},
                )
            )

        return insights

    def trend_insights(
        self,
        readings: Sequence[DailyReading],
        forecast: ForecastSummary,
    ) -> list[InsightResult]:
        """Describe the fitted trend and compare the last two weeks."""
        direction = forecast.trend_direction
        strength = forecast.trend_strength

        match direction:
            case TrendDirection.increasing:
                message = t.TREND_INCREASING.render(strength=strength)
            case TrendDirection.decreasing:
                message = t.TREND_DECREASING.render(strength=strength)
            case TrendDirection.stable:
                message = t.TREND_STABLE.render()
            case TrendDirection.unknown:
                message = t.TREND_UNKNOWN.render()

        severity = (
            InsightSeverity.warning
            if direction is TrendDirection.increasing and strength > WARNING_TREND_STRENGTH
            else InsightSeverity.info
        )
        insights = [
            InsightResult(
                type=InsightType.consumption_trend,
                message=message,
                severity=severity,
                metadata={"trend": direction.value, "strength": strength},
            )
        ]

        if len(readings) >= WEEKLY_COMPARISON_MIN_DAYS:
            ordered = sort_readings(readings)
            last_week = sum(r.consumption_kwh for r in ordered[-7:])
            previous_week = sum(r.consumption_kwh for r in ordered[-14:-7])
            change = percent_change(last_week, previous_week)
            template = t.WEEKLY_INCREASE if change > 0 else t.WEEKLY_DECREASE
            insights.append(
                InsightResult(
                    type=template.type,
                    message=template.render(change_pct=abs(change)),
                    severity=(
                        InsightSeverity.warning
                        if abs(change) > WARNING_WEEKLY_CHANGE_PCT
                        else InsightSeverity.info
                    ),
                    metadata={
                        "lastWeekKwh": last_week,
                        "previousWeekKwh": previous_week,
                        "changePercent": change,
                    },
                )
            )

        return insights

    def forecast_insights(
        self,
        forecast: ForecastSummary,
        analytics: AnalyticsSummary,
    ) -> list[InsightResult]:
        """Compare the mean forecast with the period's average daily use."""
        if not forecast.forecasts:
            return []

        days = len(forecast.forecasts)
        avg_forecast = mean([f.predicted_kwh for f in forecast.forecasts])
        change = percent_change(avg_forecast, analytics.average_daily_use)

        if change > FORECAST_SIMILAR_BAND_PCT:
            message = t.FORECAST_HIGHER.render(days=days, change_pct=change)
        elif change < -FORECAST_SIMILAR_BAND_PCT:
            message = t.FORECAST_LOWER.render(days=days, change_pct=abs(change))
        else:
            message = t.FORECAST_SIMILAR.render(days=days)

        return [
            InsightResult(
                type=InsightType.forecast_prediction,
                message=message,
                severity=(
                    InsightSeverity.warning
                    if change > WARNING_FORECAST_CHANGE_PCT
                    else InsightSeverity.info
                ),
                metadata={"avgForecastKwh": avg_forecast, "changePercent": change},
            )
        ]

    # ------------------------------------------------------------------
    # Assessment
    # ------------------------------------------------------------------

    def overall_assessment(
        self,
        analytics: AnalyticsSummary,
        forecast: ForecastSummary,
        insights: Sequence[InsightResult],
    ) -> str:
        """Pick the single most important assessment sentence.

        Priority: critical insights, then more than two warnings, then a
        strongly rising trend, then a falling trend, else normal operation.
        """
        critical = sum(1 for i in insights if i.severity is InsightSeverity.critical)
        warnings = sum(1 for i in insights if i.severity is InsightSeverity.warning)

        if critical > 0:
            return t.ASSESSMENT_CRITICAL.format(count=critical)
        if warnings > MONITOR_WARNING_COUNT:
            return t.ASSESSMENT_MONITOR.format(count=warnings)
        if (
            forecast.trend_direction is TrendDirection.increasing
            and forecast.trend_strength > RISING_TREND_STRENGTH
        ):
            return t.ASSESSMENT_RISING.format(avg_kwh=analytics.average_daily_use)
        if forecast.trend_direction is TrendDirection.decreasing:
            return t.ASSESSMENT_IMPROVING.format(avg_kwh=analytics.average_daily_use)
        return t.ASSESSMENT_NORMAL.format(
            avg_kwh=analytics.average_daily_use,
            anomalies=analytics.number_of_anomalies,
            days=len(analytics.daily_results),
        )
