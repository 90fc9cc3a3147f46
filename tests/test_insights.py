# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for the insight engine and assessment rules."""

from __future__ import annotations

import datetime as dt

import pytest

from energy_insights.analysis.anomalies import summarize
from energy_insights.analysis.forecasting import summarize_forecast
from energy_insights.data.models import (
    AnalyticsResult,
    AnalyticsSummary,
    ForecastResult,
    ForecastSummary,
    InsightResult,
    InsightSeverity,
    InsightType,
    TrendDirection,
)
from energy_insights.insights import templates as t
from energy_insights.insights.engine import InsightEngine


def _analytics(readings) -> AnalyticsSummary:
    return summarize(readings, readings[0].date, readings[-1].date)


def _forecast(values: list[float], start: dt.date = dt.date(2024, 2, 1)) -> ForecastSummary:
    return ForecastSummary(
        forecasts=[
            ForecastResult(
                date=start + dt.timedelta(days=i),
                predicted_kwh=v,
                confidence_lower=v,
                confidence_upper=v,
            )
            for i, v in enumerate(values)
        ],
        trend_direction=TrendDirection.stable,
    )


def _by_type(insights, insight_type: InsightType) -> list[InsightResult]:
    return [i for i in insights if i.type is insight_type]


@pytest.fixture()
def engine() -> InsightEngine:
    return InsightEngine()


class TestNoData:
    def test_single_no_data_warning(self, engine):
        day = dt.date(2024, 1, 1)
        summary = engine.generate(
            [], AnalyticsSummary(from_date=day, to_date=day), ForecastSummary(), {}
        )
        assert len(summary.insights) == 1
        assert summary.insights[0].type is InsightType.no_data
        assert summary.insights[0].severity is InsightSeverity.warning
        assert summary.overall_assessment == "Insufficient data for analysis."


class TestConsumptionInsights:
    def test_statements(self, engine, make_readings):
        readings = make_readings([10.0, 30.0, 5.0, 15.0])
        insights = engine.consumption_insights(readings, _analytics(readings))

        assert [i.type for i in insights] == [
            InsightType.total_consumption,
            InsightType.average_consumption,
            InsightType.peak_consumption,
            InsightType.lowest_consumption,
        ]
        assert insights[0].message == (
            "Total energy consumption for the period: 60.00 kWh over 4 days."
        )
        assert insights[0].metadata == {"totalKwh": 60.0, "days": 4}
        assert insights[2].related_date == dt.date(2024, 1, 2)
        assert "100.0% above average" in insights[2].message
        assert insights[3].related_date == dt.date(2024, 1, 3)
        assert insights[3].metadata["lowestKwh"] == 5.0

    def test_ties_pick_first_day(self, engine, make_readings):
        readings = make_readings([8.0, 8.0, 8.0])
        insights = engine.consumption_insights(readings, _analytics(readings))
        assert insights[2].related_date == dt.date(2024, 1, 1)
        assert insights[3].related_date == dt.date(2024, 1, 1)

    def test_all_zero_avoids_division(self, engine, make_readings):
        readings = make_readings([0.0] * 5)
        insights = engine.consumption_insights(readings, _analytics(readings))
        assert "0.0% above average" in insights[2].message


class TestAnomalyInsights:
    def test_no_anomalies(self, engine, make_readings):
        insights = engine.anomaly_insights(_analytics(make_readings([5.0] * 10)))
        assert [i.type for i in insights] == [InsightType.no_anomalies]

    def test_single_anomaly_detail(self, engine, make_readings):
        readings = make_readings([10] * 7 + [30])
        insights = engine.anomaly_insights(_analytics(readings))

        detected, significant = insights
        assert detected.type is InsightType.anomaly_detected
        assert detected.severity is InsightSeverity.info
        assert detected.metadata == {"anomalyCount": 1}
        assert significant.type is InsightType.significant_anomaly
        assert significant.severity is InsightSeverity.warning
        assert significant.related_date == dt.date(2024, 1, 8)
        assert significant.message.startswith(
            "Most significant anomaly on 2024-01-08: High consumption"
        )

    def test_equal_deviations_name_earlier_day(self, engine):
        jan_9, jan_12 = dt.date(2024, 1, 9), dt.date(2024, 1, 12)
        analytics = AnalyticsSummary(
            from_date=dt.date(2024, 1, 1),
            to_date=jan_12,
            number_of_anomalies=2,
            daily_results=[
                AnalyticsResult(
                    date=jan_9, consumption_kwh=2.0, moving_average=10.0,
                    is_anomaly=True, deviation_from_average=-8.0,
                    anomaly_reason="Low consumption",
                ),
                AnalyticsResult(
                    date=jan_12, consumption_kwh=18.0, moving_average=10.0,
                    is_anomaly=True, deviation_from_average=8.0,
                    anomaly_reason="High consumption",
                ),
            ],
        )
        significant = _by_type(engine.anomaly_insights(analytics), InsightType.significant_anomaly)
        assert len(significant) == 1
        assert significant[0].related_date == jan_9
        assert significant[0].metadata["deviation"] == -8.0

    def test_many_anomalies_warn(self, engine):
        day = dt.date(2024, 1, 1)
        analytics = AnalyticsSummary(from_date=day, to_date=day, number_of_anomalies=4)
        insights = engine.anomaly_insights(analytics)
        assert insights[0].severity is InsightSeverity.warning
        assert len(insights) == 1


class TestWeatherInsights:
    def test_hot_days_raise_consumption(self, engine, make_readings, make_weather):
        readings = make_readings([10.0, 10.0, 10.0, 20.0])
        weather = {r.date: make_weather(r.date, temperature=20.0) for r in readings}
        weather[readings[3].date] = make_weather(readings[3].date, temperature=32.0)

        insights = engine.weather_insights(readings, weather)
        impact = _by_type(insights, InsightType.weather_impact)

        assert len(impact) == 1
        assert impact[0].metadata["increasePercent"] == pytest.approx(60.0)
        assert impact[0].metadata["avgTempHotDays"] == pytest.approx(32.0)
        assert impact[0].metadata["daysCount"] == 1
        assert "60.0%" in impact[0].message
        assert "32.0°C" in impact[0].message

    def test_hot_day_below_average_ignored(self, engine, make_readings, make_weather):
        readings = make_readings([10.0, 2.0])
        weather = {readings[1].date: make_weather(readings[1].date, temperature=35.0)}
        assert _by_type(engine.weather_insights(readings, weather), InsightType.weather_impact) == []

    def test_rainy_days(self, engine, make_readings, make_weather):
        readings = make_readings([10.0, 10.0, 4.0])
        weather = {readings[2].date: make_weather(readings[2].date, condition="Light Rain")}
        pattern = _by_type(engine.weather_insights(readings, weather), InsightType.weather_pattern)
        assert len(pattern) == 1
        assert pattern[0].metadata["rainyDays"] == 1
        assert pattern[0].metadata["changePercent"] == pytest.approx(-50.0)
        assert "50.0% lower than average" in pattern[0].message

    def test_no_weather_skipped_by_generate(self, engine, make_readings):
        readings = make_readings([10.0] * 10)
        summary = engine.generate(readings, _analytics(readings), ForecastSummary(), {})
        types = {i.type for i in summary.insights}
        assert InsightType.weather_impact not in types
        assert InsightType.weather_pattern not in types


class TestTrendInsights:
    def test_increasing_strong_trend_warns(self, engine, make_readings):
        forecast = ForecastSummary(
            trend_direction=TrendDirection.increasing, trend_strength=12.0
        )
        insights = engine.trend_insights(make_readings([1.0] * 3), forecast)
        assert insights[0].type is InsightType.consumption_trend
        assert insights[0].severity is InsightSeverity.warning
        assert "12.0% increase rate" in insights[0].message
        assert insights[0].metadata == {"trend": "Increasing", "strength": 12.0}

    def test_unknown_trend(self, engine, make_readings):
        insights = engine.trend_insights(make_readings([1.0]), ForecastSummary())
        assert insights[0].message == "Unable to determine consumption trend."
        assert insights[0].type is InsightType.consumption_trend

    def test_weekly_comparison(self, engine, make_readings):
        readings = make_readings([10.0] * 7 + [20.0] * 7)
        insights = engine.trend_insights(readings, ForecastSummary())
        weekly = _by_type(insights, InsightType.weekly_comparison)
        assert len(weekly) == 1
        assert weekly[0].metadata["changePercent"] == pytest.approx(100.0)
        assert weekly[0].severity is InsightSeverity.warning
        assert "increased by 100.0%" in weekly[0].message

    def test_weekly_comparison_needs_two_weeks(self, engine, make_readings):
        insights = engine.trend_insights(make_readings([10.0] * 13), ForecastSummary())
        assert _by_type(insights, InsightType.weekly_comparison) == []

    def test_weekly_comparison_zero_baseline(self, engine, make_readings):
        readings = make_readings([0.0] * 7 + [5.0] * 7)
        weekly = _by_type(
            engine.trend_insights(readings, ForecastSummary()), InsightType.weekly_comparison
        )
        assert weekly[0].metadata["changePercent"] == 0.0


class TestForecastInsights:
    def test_higher(self, engine, make_readings):
        analytics = _analytics(make_readings([10.0] * 5))
        insight = engine.forecast_insights(_forecast([12.0, 12.0, 12.0]), analytics)[0]
        assert insight.type is InsightType.forecast_prediction
        assert insight.severity is InsightSeverity.warning
        assert insight.message.startswith("Next 3 days forecast: Expected consumption 20.0% higher")

    def test_lower(self, engine, make_readings):
        analytics = _analytics(make_readings([10.0] * 5))
        insight = engine.forecast_insights(_forecast([8.0]), analytics)[0]
        assert insight.severity is InsightSeverity.info
        assert "20.0% lower" in insight.message
        assert insight.type is InsightType.forecast_prediction

    def test_similar(self, engine, make_readings):
        analytics = _analytics(make_readings([10.0] * 5))
        insight = engine.forecast_insights(_forecast([10.3, 10.3]), analytics)[0]
        assert "similar to recent average" in insight.message

    def test_no_forecast(self, engine, make_readings):
        analytics = _analytics(make_readings([10.0] * 5))
        assert engine.forecast_insights(ForecastSummary(), analytics) == []


class TestOverallAssessment:
    def _insight(self, severity: InsightSeverity) -> InsightResult:
        return InsightResult(type=InsightType.anomaly_detected, message="x", severity=severity)

    def _analytics(self) -> AnalyticsSummary:
        day = dt.date(2024, 1, 1)
        return AnalyticsSummary(from_date=day, to_date=day, average_daily_use=12.0)

    def test_critical_first(self, engine):
        insights = [self._insight(InsightSeverity.critical)] + [
            self._insight(InsightSeverity.warning)
        ] * 3
        text = engine.overall_assessment(self._analytics(), ForecastSummary(), insights)
        assert text == t.ASSESSMENT_CRITICAL.format(count=1)

    def test_monitor_over_two_warnings(self, engine):
        forecast = ForecastSummary(trend_direction=TrendDirection.increasing, trend_strength=50)
        insights = [self._insight(InsightSeverity.warning)] * 3
        text = engine.overall_assessment(self._analytics(), forecast, insights)
        assert text == t.ASSESSMENT_MONITOR.format(count=3)

    def test_rising_trend(self, engine):
        forecast = ForecastSummary(trend_direction=TrendDirection.increasing, trend_strength=11)
        insights = [self._insight(InsightSeverity.warning)] * 2
        text = engine.overall_assessment(self._analytics(), forecast, insights)
        assert "Rising consumption trend" in text
        assert "12.00 kWh" in text

    def test_mild_rise_is_normal(self, engine):
        forecast = ForecastSummary(trend_direction=TrendDirection.increasing, trend_strength=10)
        text = engine.overall_assessment(self._analytics(), forecast, [])
        assert "Normal operation" in text

    def test_improving(self, engine):
        forecast = ForecastSummary(trend_direction=TrendDirection.decreasing, trend_strength=1)
        text = engine.overall_assessment(self._analytics(), forecast, [])
        assert "Positive trend" in text

    def test_normal(self, engine, make_readings):
        readings = make_readings([10] * 7 + [30])
        analytics = _analytics(readings)
        text = engine.overall_assessment(analytics, ForecastSummary(), [])
        assert text == t.ASSESSMENT_NORMAL.format(avg_kwh=12.5, anomalies=1, days=8)


class TestGenerate:
    def test_generator_order(self, engine, make_readings, make_weather):
        readings = make_readings([10.0] * 7 + [20.0] * 7)
        weather = {r.date: make_weather(r.date) for r in readings}
        forecast = summarize_forecast(readings, 3)

        summary = engine.generate(readings, _analytics(readings), forecast, weather)
        types = [i.type for i in summary.insights]

        assert types[:4] == [
            InsightType.total_consumption,
            InsightType.average_consumption,
            InsightType.peak_consumption,
            InsightType.lowest_consumption,
        ]
        assert types.index(InsightType.consumption_trend) > 3
        assert types[-1] is InsightType.forecast_prediction
        assert summary.overall_assessment
