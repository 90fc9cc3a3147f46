# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Simulated metering and weather data.

Used when no real upstream is configured (``source: sim``), as the
weather fallback when OpenWeatherMap is unavailable, and by the test
suite.  All randomness flows through explicit :class:`numpy.random.Generator`
instances so that identical seeds always produce identical data.
"""

from __future__ import annotations

import datetime as dt
import logging

import numpy as np

from energy_insights.data.models import DailyReading, RawMeterAggregate, WeatherObservation
from energy_insights.data.normalizer import normalize_readings
from energy_insights.sources.base import index_by_date

logger = logging.getLogger(__name__)

# Johannesburg summer (December) daily temperature envelope.
BASE_TEMP_MIN_C = 15.0
BASE_TEMP_MAX_C = 28.0
TEMP_VARIATION_C = 4.0

WEATHER_CONDITIONS = ("Clear", "Partly Cloudy", "Cloudy", "Rain", "Thunderstorm")
WEATHER_WEIGHTS = (0.40, 0.30, 0.15, 0.10, 0.05)

# Register value on 2000-01-01; keeps simulated cumulative readings realistic.
_REGISTER_EPOCH = dt.date(2000, 1, 1)


def _date_range(date_from: dt.date, date_to: dt.date) -> list[dt.date]:
    days = (date_to - date_from).days
    return [date_from + dt.timedelta(days=i) for i in range(days + 1)]


class WeatherSimulator:
    """Generate plausible daily weather for a date range.

    Without an explicit *rng*, each day's values depend only on the seed
    and the calendar date, so repeated and overlapping requests agree.

    Parameters
    ----------
    seed:
        Optional RNG seed.  When omitted, a random base seed is drawn once
        per simulator instance.
    rng:
        Explicit generator to draw every day from; lets callers share or
        replay a single random stream.
    """

    def __init__(
        self,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.seed = seed if seed is not None else int(np.random.SeedSequence().entropy)
        self.rng = rng

    def _day_rng(self, day: dt.date) -> np.random.Generator:
        if self.rng is not None:
            return self.rng
        return np.random.default_rng([self.seed, day.toordinal()])

    def generate(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        """Return one observation per day in the inclusive range."""
        weights = np.asarray(WEATHER_WEIGHTS) / sum(WEATHER_WEIGHTS)
        observations: list[WeatherObservation] = []

        for day in _date_range(date_from, date_to):
            rng = self._day_rng(day)
            variation = float(rng.uniform(-TEMP_VARIATION_C, TEMP_VARIATION_C))
            temp_min = BASE_TEMP_MIN_C + variation
            temp_max = BASE_TEMP_MAX_C + variation
            avg_temp = (temp_min + temp_max) / 2
            condition = str(rng.choice(WEATHER_CONDITIONS, p=weights))

            observations.append(
                WeatherObservation(
                    date=day,
                    temperature=round(avg_temp, 2),
                    feels_like=round(avg_temp + float(rng.uniform(0.0, 2.0)), 2),
                    temp_min=round(temp_min, 2),
                    temp_max=round(temp_max, 2),
                    humidity=int(rng.integers(30, 70)),
                    condition=condition,
                    description=condition.lower(),
                )
            )

        return observations

    # WeatherDataSource protocol -------------------------------------------

    def fetch_weather_list(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        logger.info("Generating simulated weather data from %s to %s", date_from, date_to)
        return self.generate(date_from, date_to)

    def fetch_weather(
        self, date_from: dt.date, date_to: dt.date
    ) -> dict[dt.date, WeatherObservation]:
        return index_by_date(self.fetch_weather_list(date_from, date_to))


class MeterSimulator:
    """Generate daily cumulative-register aggregates for an offline meter.

    Each day's values depend only on the seed and the calendar date, so
    overlapping date ranges always agree with each other.

    Parameters
    ----------
    seed:
        RNG seed.  Defaults to ``0`` so the simulated meter is stable
        across calls.
    base_daily_kwh:
        Typical weekday consumption.
    weekend_factor:
        Multiplier applied on Saturdays and Sundays.
    spike_probability:
        Chance that a day carries a consumption spike.
    """

    def __init__(
        self,
        seed: int | None = None,
        base_daily_kwh: float = 25.0,
        weekend_factor: float = 1.15,
        noise_fraction: float = 0.08,
        spike_probability: float = 0.05,
        sensor_id: str = "sim-energy-register",
    ) -> None:
        self.seed = 0 if seed is None else seed
        self.base_daily_kwh = base_daily_kwh
        self.weekend_factor = weekend_factor
        self.noise_fraction = noise_fraction
        self.spike_probability = spike_probability
        self.sensor_id = sensor_id

    def _daily_kwh(self, day: dt.date) -> float:
        rng = np.random.default_rng([self.seed, day.toordinal()])
        kwh = self.base_daily_kwh
        if day.weekday() >= 5:
            kwh *= self.weekend_factor
        kwh *= 1.0 + float(rng.normal(0.0, self.noise_fraction))
        if rng.random() < self.spike_probability:
            kwh *= float(rng.uniform(1.6, 2.2))
        return max(kwh, 0.0)

    def fetch_raw(self, date_from: dt.date, date_to: dt.date) -> list[RawMeterAggregate]:
        """Return one aggregate per day; empty when *date_from* > *date_to*."""
        aggregates: list[RawMeterAggregate] = []
        for day in _date_range(date_from, date_to):
            kwh = self._daily_kwh(day)
            register_start = (day - _REGISTER_EPOCH).days * self.base_daily_kwh * 1000
            register_end = register_start + kwh * 1000
            aggregates.append(
                RawMeterAggregate(
                    sensor_id=self.sensor_id,
                    year=day.year,
                    month=day.month,
                    day=day.day,
                    count=96,
                    sum=round((register_start + register_end) / 2 * 96, 1),
                    min=round(register_start, 1),
                    max=round(register_end, 1),
                )
            )
        return aggregates

    def fetch_daily_readings(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        readings = normalize_readings(self.fetch_raw(date_from, date_to))
        logger.info("Simulated %d daily readings from %s to %s", len(readings), date_from, date_to)
        return readings
