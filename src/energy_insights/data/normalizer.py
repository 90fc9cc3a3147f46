# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Convert raw meter aggregates into a chronological daily series."""

from __future__ import annotations

from collections.abc import Iterable

from energy_insights.data.models import DailyReading, RawMeterAggregate


def normalize_readings(aggregates: Iterable[RawMeterAggregate]) -> list[DailyReading]:
    """Build :class:`DailyReading` objects sorted ascending by date.

    Consumption is ``(max - min) / 1000``.  Duplicate dates are kept and
    retain their input order, since the sort is stable.
    """
    readings = [
        DailyReading(date=agg.date, consumption_kwh=agg.consumption_kwh)
        for agg in aggregates
    ]
    readings.sort(key=lambda r: r.date)
    return readings


def sort_readings(readings: Iterable[DailyReading]) -> list[DailyReading]:
    """Return a new chronologically sorted list of readings."""
    return sorted(readings, key=lambda r: r.date)
