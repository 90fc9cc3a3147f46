# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Shared test fixtures for the energy insights test suite."""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Sequence

import pytest

from energy_insights.config import AnalysisSettings
from energy_insights.data.models import DailyReading, RawMeterAggregate, WeatherObservation
from energy_insights.data.simulator import MeterSimulator, WeatherSimulator
from energy_insights.errors import UpstreamError
from energy_insights.service import EnergyInsightsService
from energy_insights.sources.base import index_by_date

START = dt.date(2024, 1, 1)


def build_readings(values: Sequence[float], start: dt.date = START) -> list[DailyReading]:
    return [
        DailyReading(date=start + dt.timedelta(days=i), consumption_kwh=v)
        for i, v in enumerate(values)
    ]


class StubMeter:
    """In-memory metering source that records every requested range."""

    def __init__(self, readings: list[DailyReading] | None = None) -> None:
        self.readings = readings or []
        self.calls: list[tuple[dt.date, dt.date]] = []

    def fetch_raw(self, date_from: dt.date, date_to: dt.date) -> list[RawMeterAggregate]:
        return []

    def fetch_daily_readings(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        self.calls.append((date_from, date_to))
        return [r for r in self.readings if date_from <= r.date <= date_to]


class FailingMeter(StubMeter):
    def fetch_daily_readings(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        raise UpstreamError("Failed to fetch energy data: 503 - unavailable", status_code=503)


class StubWeather:
    """In-memory weather source."""

    def __init__(self, observations: list[WeatherObservation] | None = None) -> None:
        self.observations = observations or []
        self.calls: list[tuple[dt.date, dt.date]] = []

    def fetch_weather_list(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        self.calls.append((date_from, date_to))
        return [o for o in self.observations if date_from <= o.date <= date_to]

    def fetch_weather(
        self, date_from: dt.date, date_to: dt.date
    ) -> dict[dt.date, WeatherObservation]:
        return index_by_date(self.fetch_weather_list(date_from, date_to))


@pytest.fixture()
def make_readings() -> Callable[..., list[DailyReading]]:
    """Factory building consecutive daily readings starting 2024-01-01."""
    return build_readings


@pytest.fixture()
def make_weather() -> Callable[..., WeatherObservation]:
    """Factory for a single weather observation with sensible defaults."""

    def _make(
        day: dt.date,
        temperature: float = 22.0,
        condition: str = "Clear",
        humidity: int = 50,
    ) -> WeatherObservation:
        return WeatherObservation(
            date=day,
            temperature=temperature,
            feels_like=temperature + 1,
            temp_min=temperature - 5,
            temp_max=temperature + 5,
            humidity=humidity,
            condition=condition,
            description=condition.lower(),
        )

    return _make


@pytest.fixture()
def sixty_days() -> list[DailyReading]:
    """November and December 2024 from the seeded meter simulator."""
    return MeterSimulator(seed=42).fetch_daily_readings(
        dt.date(2024, 11, 1), dt.date(2024, 12, 30)
    )


@pytest.fixture()
def stub_meter(sixty_days: list[DailyReading]) -> StubMeter:
    return StubMeter(sixty_days)


@pytest.fixture()
def stub_weather() -> StubWeather:
    return StubWeather(
        WeatherSimulator(seed=7).generate(dt.date(2024, 11, 1), dt.date(2024, 12, 30))
    )


@pytest.fixture()
def service(stub_meter: StubMeter, stub_weather: StubWeather) -> EnergyInsightsService:
    """Service over 60 simulated days with default analysis settings."""
    return EnergyInsightsService(stub_meter, stub_weather, AnalysisSettings())


@pytest.fixture()
def failing_service(stub_weather: StubWeather) -> EnergyInsightsService:
    return EnergyInsightsService(FailingMeter(), stub_weather)
