# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Analytics service: fetch inputs, then run the computation pipeline.

The service is the seam between the upstream sources and the pure
analytics functions.  It validates nothing about the numbers themselves;
request parameters are checked with :func:`parse_date`,
:func:`validate_range` and :func:`validate_horizon` before the service
methods are called.  Upstream failures propagate unchanged and no method
ever returns a partially computed result.
"""

from __future__ import annotations

import datetime as dt
import logging

from energy_insights.analysis.anomalies import summarize
from energy_insights.analysis.forecasting import summarize_forecast
from energy_insights.config import AnalysisSettings, AppConfig
from energy_insights.data.models import (
    AnalyticsResult,
    AnalyticsSummary,
    DailyReading,
    ForecastSummary,
    InsightResult,
    InsightsSummary,
    WeatherObservation,
)
from energy_insights.errors import ValidationError
from energy_insights.insights.engine import InsightEngine
from energy_insights.sources.auth import TokenProvider
from energy_insights.sources.base import MeterDataSource, WeatherDataSource

logger = logging.getLogger(__name__)

MIN_FORECAST_DAYS = 1
MAX_FORECAST_DAYS = 30


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

def parse_date(value: str | dt.date | None, name: str = "date") -> dt.date:
    """Parse ``YYYY-MM-DD`` (or an ISO timestamp) into a :class:`date`."""
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")

    text = str(value).strip()
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return dt.datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(
            f"Invalid {name} '{text}'. Use yyyy-MM-dd"
        ) from None


def validate_range(date_from: dt.date, date_to: dt.date) -> None:
    if date_from > date_to:
        raise ValidationError(
            f"fromDate ({date_from}) must not be after toDate ({date_to})"
        )


def validate_horizon(days: int) -> None:
    if not MIN_FORECAST_DAYS <= days <= MAX_FORECAST_DAYS:
        raise ValidationError(
            f"Days parameter must be between {MIN_FORECAST_DAYS} and {MAX_FORECAST_DAYS}"
        )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class EnergyInsightsService:
    """Run analytics, forecasts and insights against pluggable sources.

    Parameters
    ----------
    meter:
        Source of daily consumption readings.
    weather:
        Source of daily weather observations.
    settings:
        Window size, anomaly threshold and forecast horizons.
    token_provider:
        Token provider of a live metering source, exposed for the auth
        endpoints.  ``None`` for simulated sources.
    """

    def __init__(
        self,
        meter: MeterDataSource,
        weather: WeatherDataSource,
        settings: AnalysisSettings | None = None,
        token_provider: TokenProvider | None = None,
        engine: InsightEngine | None = None,
    ) -> None:
        self.meter = meter
        self.weather = weather
        self.settings = settings or AnalysisSettings()
        self.token_provider = token_provider
        self.engine = engine or InsightEngine()

    # -- raw data ---------------------------------------------------------

    def energy_data(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        return self.meter.fetch_daily_readings(date_from, date_to)

    def total_consumption(self, date_from: dt.date, date_to: dt.date) -> float:
        return sum(r.consumption_kwh for r in self.energy_data(date_from, date_to))

    def average_consumption(self, date_from: dt.date, date_to: dt.date) -> float:
        readings = self.energy_data(date_from, date_to)
        if not readings:
            return 0.0
        return sum(r.consumption_kwh for r in readings) / len(readings)

    def weather_data(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        return self.weather.fetch_weather_list(date_from, date_to)

    def weather_for_date(self, day: dt.date) -> WeatherObservation | None:
        observations = self.weather.fetch_weather_list(day, day)
        return observations[0] if observations else None

    # -- analytics --------------------------------------------------------

    def _summarize(
        self,
        readings: list[DailyReading],
        date_from: dt.date,
        date_to: dt.date,
    ) -> AnalyticsSummary:
        return summarize(
            readings,
            date_from,
            date_to,
            window_size=self.settings.window_size,
            threshold=self.settings.anomaly_threshold,
        )

    def analyze(self, date_from: dt.date, date_to: dt.date) -> AnalyticsSummary:
        """Moving averages and anomaly flags for the inclusive range."""
        logger.info("Analyzing energy data from %s to %s", date_from, date_to)
        readings = self.energy_data(date_from, date_to)
        return self._summarize(readings, date_from, date_to)

    def anomalies(self, date_from: dt.date, date_to: dt.date) -> list[AnalyticsResult]:
        return self.analyze(date_from, date_to).anomalies

    # -- forecasting ------------------------------------------------------

    def forecast(self, date_from: dt.date, days_to_forecast: int = 3) -> ForecastSummary:
        """Forecast from the history immediately preceding *date_from*."""
        validate_horizon(days_to_forecast)
        logger.info(
            "Generating %d-day forecast starting from %s", days_to_forecast, date_from
        )
        history_start = date_from - dt.timedelta(days=self.settings.history_days)
        history = self.energy_data(history_start, date_from - dt.timedelta(days=1))
        return summarize_forecast(history, days_to_forecast)

    # -- insights ---------------------------------------------------------

    def generate_insights(self, date_from: dt.date, date_to: dt.date) -> InsightsSummary:
        """Insights for the range, using a short forecast past *date_to*."""
        logger.info("Generating insights from %s to %s", date_from, date_to)
        readings = self.energy_data(date_from, date_to)

        if not readings:
            return self.engine.generate(
                readings,
                AnalyticsSummary(from_date=date_from, to_date=date_to),
                ForecastSummary(),
                {},
            )

        weather = self.weather.fetch_weather(date_from, date_to)
        analytics = self._summarize(readings, date_from, date_to)
        forecast = self.forecast(
            date_to + dt.timedelta(days=1), self.settings.insight_forecast_days
        )
        return self.engine.generate(readings, analytics, forecast, weather)

    def insights_by_type(
        self, date_from: dt.date, date_to: dt.date, insight_type: str
    ) -> list[InsightResult]:
        wanted = insight_type.lower()
        summary = self.generate_insights(date_from, date_to)
        return [i for i in summary.insights if i.type.value.lower() == wanted]

    def insights_by_severity(
        self, date_from: dt.date, date_to: dt.date, severity: str
    ) -> list[InsightResult]:
        wanted = severity.lower()
        summary = self.generate_insights(date_from, date_to)
        return [i for i in summary.insights if i.severity.value == wanted]


def build_service(config: AppConfig) -> EnergyInsightsService:
    """Wire live or simulated sources according to *config*."""
    from energy_insights.data.simulator import MeterSimulator
    from energy_insights.sources.weather import OpenWeatherMapSource

    weather = OpenWeatherMapSource(config.weather)

    if config.source == "live":
        from energy_insights.sources.metering import MeteringClient

        if config.metering is None:
            raise ValueError("'metering' settings are required when source is 'live'")
        token_provider = TokenProvider(config.metering)
        meter: MeterDataSource = MeteringClient(config.metering, token_provider)
        return EnergyInsightsService(
            meter, weather, config.analysis, token_provider=token_provider
        )

    logger.info("Using simulated metering data (seed=%s)", config.seed)
    return EnergyInsightsService(MeterSimulator(seed=config.seed), weather, config.analysis)
