# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Service configuration model and YAML loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Credential handling
# ---------------------------------------------------------------------------

class CredentialRef(BaseModel):
    """Reference to a secret held in an env var, a file, or inline."""

    env_var: str | None = Field(default=None, description="Environment variable name")
    file_path: str | None = Field(default=None, description="Path to a secrets file")
    value: str | None = Field(default=None, description="Inline value (dev only)")

    def resolve(self) -> str:
        """Resolve the credential to a plain string."""
        if self.env_var:
            val = os.environ.get(self.env_var)
            if val:
                return val
        if self.file_path:
            path = Path(self.file_path).expanduser()
            if path.exists():
                return path.read_text().strip()
        if self.value:
            return self.value
        raise ValueError(
            "Could not resolve credential: none of env_var, file_path, or value produced a result"
        )


def _resolve_optional(ref: CredentialRef | None) -> str:
    if ref is None:
        return ""
    try:
        return ref.resolve()
    except ValueError:
        return ""


# ---------------------------------------------------------------------------
# Upstream services
# ---------------------------------------------------------------------------

class MeteringSettings(BaseModel):
    """Connection details for the metering platform and its token endpoint."""

    auth_url: str = Field(..., description="OAuth token endpoint")
    api_url: str = Field(..., description="Daily aggregate query endpoint")
    client_id: str = Field(default="ro.client")
    client_secret: CredentialRef | None = Field(default=None)
    grant_type: str = Field(default="password")
    scope: str = Field(default="api1")
    username: str = Field(default="")
    password: CredentialRef | None = Field(default=None)
    device_id: str = Field(..., description="Meter device identifier")
    sensor_id: str = Field(..., description="Energy register sensor identifier")
    timeout_seconds: float = Field(default=30.0, gt=0)
    token_refresh_margin_seconds: int = Field(
        default=300, ge=0,
        description="Treat a token as expired this many seconds before it does",
    )

    def resolved_client_secret(self) -> str:
        return _resolve_optional(self.client_secret)

    def resolved_password(self) -> str:
        return _resolve_optional(self.password)


class WeatherSettings(BaseModel):
    """OpenWeatherMap settings and simulation fallback parameters."""

    api_key: CredentialRef | None = Field(default=None)
    api_url: str = Field(default="https://api.openweathermap.org/data/2.5/forecast")
    city: str = Field(default="Johannesburg")
    country_code: str = Field(default="ZA")
    latitude: float = Field(default=-26.2041, ge=-90, le=90)
    longitude: float = Field(default=28.0473, ge=-180, le=180)
    timeout_seconds: float = Field(default=15.0, gt=0)
    simulation_seed: int | None = Field(
        default=None, ge=0, description="Seed for synthesized weather; random when unset"
    )

    def resolved_api_key(self) -> str:
        return _resolve_optional(self.api_key)


# ---------------------------------------------------------------------------
# Service behaviour
# ---------------------------------------------------------------------------

class ServerSettings(BaseModel):
    """HTTP server binding and CORS policy."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8080",
        ]
    )


class AnalysisSettings(BaseModel):
    """Tunable parameters of the analytics pipeline."""

    window_size: int = Field(default=7, ge=1)
    anomaly_threshold: float = Field(default=1.5, gt=0)
    insight_forecast_days: int = Field(default=3, ge=1, le=30)
    history_days: int = Field(
        default=30, ge=1, description="Days of history used for forecasting"
    )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Top-level service configuration loaded from YAML."""

    source: Literal["live", "sim"] = Field(default="sim")
    seed: int | None = Field(default=None, ge=0, description="Seed for simulated metering data")
    metering: MeteringSettings | None = Field(default=None)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    analysis: AnalysisSettings = Field(default_factory=AnalysisSettings)

    @model_validator(mode="after")
    def _require_metering_for_live(self) -> AppConfig:
        if self.source == "live" and self.metering is None:
            raise ValueError("'metering' settings are required when source is 'live'")
        return self


def load_config(path: str | Path) -> AppConfig:
    """Load an :class:`AppConfig` from a YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw)
