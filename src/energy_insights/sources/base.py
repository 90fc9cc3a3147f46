# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Data source protocols consumed by the analytics service.

Every metering source yields chronologically sorted
:class:`DailyReading` instances and every weather source yields
:class:`WeatherObservation` instances keyed by calendar day.  Live
HTTP clients and offline simulators both satisfy these protocols.
"""

from __future__ import annotations

import datetime as dt
from typing import Protocol, runtime_checkable

from energy_insights.data.models import DailyReading, RawMeterAggregate, WeatherObservation


@runtime_checkable
class MeterDataSource(Protocol):
    """Protocol that all metering sources must satisfy."""

    def fetch_raw(self, date_from: dt.date, date_to: dt.date) -> list[RawMeterAggregate]:
        """Return upstream daily aggregates for the inclusive range."""
        ...

    def fetch_daily_readings(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        """Return normalized daily readings sorted by date.

        Raises :class:`~energy_insights.errors.UpstreamError` on failure.
        """
        ...


@runtime_checkable
class WeatherDataSource(Protocol):
    """Protocol that all weather sources must satisfy."""

    def fetch_weather_list(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        """Return daily observations for the inclusive range."""
        ...

    def fetch_weather(
        self, date_from: dt.date, date_to: dt.date
    ) -> dict[dt.date, WeatherObservation]:
        """Return daily observations keyed by date (later entries win)."""
        ...


def index_by_date(
    observations: list[WeatherObservation],
) -> dict[dt.date, WeatherObservation]:
    """Key observations by date; a later observation replaces an earlier one."""
    return {obs.date: obs for obs in observations}
