# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Exception hierarchy for the energy insights service."""

from __future__ import annotations


class EnergyInsightsError(Exception):
    """Base class for all errors raised by this package."""


class ValidationError(EnergyInsightsError, ValueError):
    """A request parameter is missing, malformed or out of range."""


class UpstreamError(EnergyInsightsError):
    """The metering or weather service failed or returned a bad payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ComputationError(EnergyInsightsError):
    """A numeric computation reached an undefined state."""
