# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""API response envelope and auxiliary Pydantic models."""

from __future__ import annotations

import datetime as dt
from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every API payload, successful or not."""

    success: bool = Field(..., description="Whether the request succeeded.")
    data: T | None = Field(default=None, description="Response payload.")
    message: str = Field(default="", description="Human-readable summary.")
    errors: list[str] = Field(default_factory=list, description="Error details.")


class TokenInfo(BaseModel):
    """Non-secret description of the current metering access token."""

    model_config = {"populate_by_name": True, "alias_generator": to_camel}

    token_type: str = Field(..., description="Token type, normally 'Bearer'.")
    scope: str = Field(default="", description="Granted scope.")
    expires_at: dt.datetime | None = Field(
        default=None, description="Absolute expiry time (UTC)."
    )


class HealthResponse(BaseModel):
    """Response body returned by the ``GET /health`` endpoint."""

    status: str = Field(..., description="Service health status (e.g. 'Healthy').")
    timestamp: dt.datetime = Field(..., description="Server time (UTC).")
    service: str = Field(..., description="Service name.")
    version: str = Field(..., description="Application version string.")
    source: str = Field(..., description="Metering source in use: 'live' or 'sim'.")
