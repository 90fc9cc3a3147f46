# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Metering platform REST client.

Posts a daily-aggregate query for a single device/sensor pair and turns
the response into :class:`DailyReading` objects.  Any transport,
authentication, status or payload failure surfaces as
:class:`~energy_insights.errors.UpstreamError`; nothing is retried here.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter

from energy_insights.config import MeteringSettings
from energy_insights.data.models import DailyReading, RawMeterAggregate
from energy_insights.data.normalizer import normalize_readings
from energy_insights.errors import UpstreamError
from energy_insights.sources.auth import TokenProvider

logger = logging.getLogger(__name__)

_AGGREGATES = TypeAdapter(list[RawMeterAggregate])


class MeteringClient:
    """Fetch daily energy aggregates from the metering platform."""

    def __init__(
        self,
        settings: MeteringSettings,
        token_provider: TokenProvider,
        client: httpx.Client | None = None,
    ) -> None:
        self.settings = settings
        self.token_provider = token_provider
        self._client = client or httpx.Client(timeout=settings.timeout_seconds)

    def _build_request(self, date_from: dt.date, date_to: dt.date) -> dict[str, Any]:
        return {
            "useCsv": False,
            "deviceId": self.settings.device_id,
            "from": date_from.isoformat(),
            "to": date_to.isoformat(),
            "sensors": [self.settings.sensor_id],
        }

    def fetch_raw(self, date_from: dt.date, date_to: dt.date) -> list[RawMeterAggregate]:
        """Return the raw aggregates reported for the inclusive range."""
        logger.info("Fetching energy data from %s to %s", date_from, date_to)
        token = self.token_provider.get_access_token()

        try:
            response = self._client.post(
                self.settings.api_url,
                json=self._build_request(date_from, date_to),
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Energy data request failed: {exc}") from exc

        if response.is_error:
            logger.error(
                "Failed to fetch energy data: %s - %s", response.status_code, response.text
            )
            raise UpstreamError(
                f"Failed to fetch energy data: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
            if payload is None:
                logger.warning("No energy data returned from API")
                return []
            aggregates = _AGGREGATES.validate_python(payload)
        except ValueError as exc:
            raise UpstreamError(f"Malformed energy data payload: {exc}") from exc

        logger.info("Fetched %d energy data records", len(aggregates))
        return aggregates

    def fetch_daily_readings(self, date_from: dt.date, date_to: dt.date) -> list[DailyReading]:
        """Return normalized daily readings sorted by date."""
        try:
            return normalize_readings(self.fetch_raw(date_from, date_to))
        except ValueError as exc:
            raise UpstreamError(f"Invalid energy data record: {exc}") from exc

    def close(self) -> None:
        self._client.close()
