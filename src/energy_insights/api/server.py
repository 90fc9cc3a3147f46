# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""FastAPI application factory for the energy insights REST API."""

from __future__ import annotations

import datetime as dt
import logging

from energy_insights.api import API_VERSION, check_dependency

check_dependency("fastapi", "pip install -e '.[api]'")

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from energy_insights.api.models import ApiResponse, HealthResponse  # noqa: E402
from energy_insights.api.routes import router  # noqa: E402
from energy_insights.config import AppConfig  # noqa: E402
from energy_insights.errors import UpstreamError, ValidationError  # noqa: E402
from energy_insights.service import EnergyInsightsService, build_service  # noqa: E402

logger = logging.getLogger(__name__)

SERVICE_NAME = "Energy Insights API"


def _error_response(status_code: int, message: str, errors: list[str] | None = None) -> JSONResponse:
    body = ApiResponse(success=False, message=message, errors=errors or [message])
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        ]
        return _error_response(400, "Invalid request parameters", details)

    @app.exception_handler(UpstreamError)
    async def _upstream_error(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.error("Upstream failure on %s: %s", request.url.path, exc)
        return _error_response(502, f"Upstream service error: {exc}")

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return _error_response(500, f"Internal server error: {exc}")


def create_app(
    service: EnergyInsightsService | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    service:
        Pre-built service to serve.  Built from *config* when omitted.
    config:
        Application configuration; defaults to simulated sources.

    Returns
    -------
    FastAPI
        A fully configured application instance with CORS middleware,
        error envelopes and all API routes included.
    """
    config = config or AppConfig()
    if service is None:
        service = build_service(config)

    app = FastAPI(
        title=SERVICE_NAME,
        description=(
            "Energy consumption analytics, anomaly detection, short-term "
            "forecasting and human-readable insights."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.service = service
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _install_exception_handlers(app)
    app.include_router(router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health() -> HealthResponse:
        """Return service health status."""
        return HealthResponse(
            status="Healthy",
            timestamp=dt.datetime.now(dt.timezone.utc),
            service=SERVICE_NAME,
            version=API_VERSION,
            source=config.source,
        )

    @app.get("/", tags=["health"])
    def root() -> dict[str, object]:
        return {
            "service": SERVICE_NAME,
            "version": API_VERSION,
            "docs": "/docs",
            "endpoints": [route.path for route in router.routes],
        }

    return app
