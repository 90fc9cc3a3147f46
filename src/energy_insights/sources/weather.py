# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""OpenWeatherMap weather source with simulated fallback.

The free OpenWeatherMap tier only offers a 5-day / 3-hour forecast, so
historical ranges are usually answered from :class:`WeatherSimulator`.
Fallback happens when no API key is configured, when the request fails,
or when no forecast day falls inside the requested range.  Callers never
see weather failures.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from typing import Any

import httpx

from energy_insights.config import WeatherSettings
from energy_insights.data.models import WeatherObservation
from energy_insights.data.simulator import WeatherSimulator
from energy_insights.sources.base import index_by_date

logger = logging.getLogger(__name__)

_PLACEHOLDER_KEYS = {"", "YOUR_OPENWEATHERMAP_API_KEY"}


def aggregate_forecast(
    payload: dict[str, Any],
    date_from: dt.date,
    date_to: dt.date,
) -> list[WeatherObservation]:
    """Collapse 3-hourly forecast items into one observation per UTC day.

    Temperature, feels-like and humidity are averaged, the minimum and
    maximum are taken across items, and the condition comes from the
    day's first item.  Days outside the inclusive range are dropped.
    """
    by_day: dict[dt.date, list[dict[str, Any]]] = defaultdict(list)
    for item in payload.get("list") or []:
        day = dt.datetime.fromtimestamp(int(item["dt"]), tz=dt.timezone.utc).date()
        by_day[day].append(item)

    observations: list[WeatherObservation] = []
    for day in sorted(by_day):
        if not date_from <= day <= date_to:
            continue
        items = by_day[day]
        mains = [i.get("main", {}) for i in items]
        first_weather = (items[0].get("weather") or [{}])[0]
        observations.append(
            WeatherObservation(
                date=day,
                temperature=sum(m.get("temp", 0.0) for m in mains) / len(mains),
                feels_like=sum(m.get("feels_like", 0.0) for m in mains) / len(mains),
                temp_min=min(m.get("temp_min", 0.0) for m in mains),
                temp_max=max(m.get("temp_max", 0.0) for m in mains),
                humidity=int(sum(m.get("humidity", 0) for m in mains) / len(mains)),
                condition=first_weather.get("main", ""),
                description=first_weather.get("description", ""),
            )
        )
    return observations


class OpenWeatherMapSource:
    """Daily weather from OpenWeatherMap, simulated when unavailable."""

    def __init__(
        self,
        settings: WeatherSettings,
        client: httpx.Client | None = None,
        simulator: WeatherSimulator | None = None,
    ) -> None:
        self.settings = settings
        self._client = client or httpx.Client(timeout=settings.timeout_seconds)
        self.simulator = simulator or WeatherSimulator(seed=settings.simulation_seed)

    def _simulate(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        logger.info("Generating simulated weather data for %s", self.settings.city)
        return self.simulator.generate(date_from, date_to)

    def _fetch_forecast(self, api_key: str) -> dict[str, Any]:
        s = self.settings
        response = self._client.get(
            s.api_url,
            params={
                "lat": s.latitude,
                "lon": s.longitude,
                "appid": api_key,
                "units": "metric",
            },
        )
        response.raise_for_status()
        return response.json()

    def fetch_weather_list(self, date_from: dt.date, date_to: dt.date) -> list[WeatherObservation]:
        """Return daily observations for the inclusive range."""
        logger.info("Fetching weather data from %s to %s", date_from, date_to)

        api_key = self.settings.resolved_api_key()
        if api_key in _PLACEHOLDER_KEYS:
            logger.info("OpenWeatherMap API key not configured; using simulated weather")
            return self._simulate(date_from, date_to)

        observations: list[WeatherObservation] = []
        try:
            observations = aggregate_forecast(
                self._fetch_forecast(api_key), date_from, date_to
            )
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Failed to fetch weather data (%s); using simulated weather", exc)

        if not observations:
            observations = self._simulate(date_from, date_to)

        logger.info("Returning %d weather records", len(observations))
        return observations

    def fetch_weather(
        self, date_from: dt.date, date_to: dt.date
    ) -> dict[dt.date, WeatherObservation]:
        return index_by_date(self.fetch_weather_list(date_from, date_to))

    def close(self) -> None:
        self._client.close()
