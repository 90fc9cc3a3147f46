# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Insight message templates.

Each template pairs an :class:`InsightType` with a message template
string using ``{placeholder}`` fields.  Overall-assessment sentences are
plain format strings at the bottom of the module.
"""

from __future__ import annotations

from dataclasses import dataclass

from energy_insights.data.models import InsightType


@dataclass(frozen=True)
class InsightTemplate:
    """Immutable template for a single insight message."""

    type: InsightType
    message_template: str

    def render(self, **fields: object) -> str:
        return self.message_template.format(**fields)


NO_DATA = InsightTemplate(
    type=InsightType.no_data,
    message_template="No energy data available for the selected period.",
)

TOTAL_CONSUMPTION = InsightTemplate(
    type=InsightType.total_consumption,
    message_template=(
        "Total energy consumption for the period: {total_kwh:.2f} kWh "
        "over {days} days."
    ),
)

AVERAGE_CONSUMPTION = InsightTemplate(
    type=InsightType.average_consumption,
    message_template="Average daily energy consumption: {avg_kwh:.2f} kWh.",
)

PEAK_CONSUMPTION = InsightTemplate(
    type=InsightType.peak_consumption,
    message_template=(
        "Peak consumption occurred on {date:%Y-%m-%d} with {peak_kwh:.2f} kWh, "
        "which is {above_pct:.1f}% above average."
    ),
)

LOWEST_CONSUMPTION = InsightTemplate(
    type=InsightType.lowest_consumption,
    message_template=(
        "Lowest consumption occurred on {date:%Y-%m-%d} with {lowest_kwh:.2f} kWh."
    ),
)

NO_ANOMALIES = InsightTemplate(
    type=InsightType.no_anomalies,
    message_template=(
        "No unusual consumption patterns detected. "
        "Energy usage has been consistent."
    ),
)

ANOMALY_DETECTED = InsightTemplate(
    type=InsightType.anomaly_detected,
    message_template="{count} day(s) with unusual consumption patterns detected.",
)

SIGNIFICANT_ANOMALY = InsightTemplate(
    type=InsightType.significant_anomaly,
    message_template="Most significant anomaly on {date:%Y-%m-%d}: {reason}",
)

WEATHER_IMPACT = InsightTemplate(
    type=InsightType.weather_impact,
    message_template=(
        "Energy consumption increased by {increase_pct:.1f}% on hot days "
        "(avg {avg_temp:.1f}°C) compared to overall average, likely due "
        "to increased cooling demand."
    ),
)

WEATHER_PATTERN = InsightTemplate(
    type=InsightType.weather_pattern,
    message_template=(
        "On rainy days ({rainy_days} days), energy consumption was "
        "{change_pct:.1f}% {direction} than average."
    ),
)

TREND_INCREASING = InsightTemplate(
    type=InsightType.consumption_trend,
    message_template=(
        "Energy consumption is trending upward with a {strength:.1f}% increase "
        "rate. Consider investigating causes for rising consumption."
    ),
)

TREND_DECREASING = InsightTemplate(
    type=InsightType.consumption_trend,
    message_template=(
        "Energy consumption is trending downward with a {strength:.1f}% decrease "
        "rate. This could indicate improved efficiency or reduced usage."
    ),
)

TREND_STABLE = InsightTemplate(
    type=InsightType.consumption_trend,
    message_template="Energy consumption has remained stable over the analyzed period.",
)

TREND_UNKNOWN = InsightTemplate(
    type=InsightType.consumption_trend,
    message_template="Unable to determine consumption trend.",
)

WEEKLY_INCREASE = InsightTemplate(
    type=InsightType.weekly_comparison,
    message_template=(
        "Last week's consumption increased by {change_pct:.1f}% compared to "
        "the previous week."
    ),
)

WEEKLY_DECREASE = InsightTemplate(
    type=InsightType.weekly_comparison,
    message_template=(
        "Last week's consumption decreased by {change_pct:.1f}% compared to "
        "the previous week."
    ),
)

FORECAST_HIGHER = InsightTemplate(
    type=InsightType.forecast_prediction,
    message_template=(
        "Next {days} days forecast: Expected consumption {change_pct:.1f}% higher "
        "than recent average. Plan for increased energy demand."
    ),
)

FORECAST_LOWER = InsightTemplate(
    type=InsightType.forecast_prediction,
    message_template=(
        "Next {days} days forecast: Expected consumption {change_pct:.1f}% lower "
        "than recent average."
    ),
)

FORECAST_SIMILAR = InsightTemplate(
    type=InsightType.forecast_prediction,
    message_template=(
        "Next {days} days forecast: Expected consumption similar to recent average."
    ),
)


# ---------------------------------------------------------------------------
# Overall assessment sentences
# ---------------------------------------------------------------------------

ASSESSMENT_NO_DATA = "Insufficient data for analysis."

ASSESSMENT_CRITICAL = (
    "⚠️ Critical attention required: {count} critical issue(s) detected. "
    "Energy consumption shows significant anomalies that need immediate "
    "investigation."
)

ASSESSMENT_MONITOR = (
    "⚠️ Monitor closely: {count} warning(s) detected. Energy consumption "
    "patterns show notable variations from expected behavior."
)

ASSESSMENT_RISING = (
    "\U0001f4c8 Rising consumption trend detected. Average daily use is "
    "{avg_kwh:.2f} kWh with an increasing trajectory. Consider energy "
    "optimization strategies."
)

ASSESSMENT_IMPROVING = (
    "\U0001f4c9 Positive trend: Energy consumption is decreasing. Average daily "
    "use is {avg_kwh:.2f} kWh with improving efficiency."
)

ASSESSMENT_NORMAL = (
    "✅ Normal operation: Energy consumption is stable at {avg_kwh:.2f} kWh "
    "per day on average. {anomalies} anomaly(ies) detected over {days} days."
)
