# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""FastAPI routers for energy, analytics, forecast, insights and weather."""

from __future__ import annotations

import datetime as dt

from energy_insights.api import check_dependency

check_dependency("fastapi", "pip install -e '.[api]'")

from fastapi import APIRouter, Depends, Query, Request  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from energy_insights.api.models import ApiResponse, TokenInfo  # noqa: E402
from energy_insights.data.models import (  # noqa: E402
    AnalyticsResult,
    AnalyticsSummary,
    DailyReading,
    ForecastResult,
    ForecastSummary,
    InsightResult,
    InsightsSummary,
    WeatherObservation,
)
from energy_insights.service import (  # noqa: E402
    EnergyInsightsService,
    parse_date,
    validate_range,
)

router = APIRouter(prefix="/api")


# ---------------------------------------------------------------------------
# Dependency injection
# ---------------------------------------------------------------------------

def get_service(request: Request) -> EnergyInsightsService:
    """Return the service attached to the application.

    Used as a FastAPI dependency so tests can override it through
    ``app.dependency_overrides``.
    """
    return request.app.state.service


def _date_range(from_date: str | None, to_date: str | None) -> tuple[dt.date, dt.date]:
    start = parse_date(from_date, "fromDate")
    end = parse_date(to_date, "toDate")
    validate_range(start, end)
    return start, end


def _forecast_start(from_date: str | None) -> dt.date:
    if not from_date:
        return dt.datetime.now(dt.timezone.utc).date() + dt.timedelta(days=1)
    return parse_date(from_date, "fromDate")


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def _no_auth_response() -> JSONResponse:
    body = ApiResponse[TokenInfo](
        success=False,
        message="Authentication is not used with simulated metering data",
    )
    return JSONResponse(status_code=404, content=body.model_dump(mode="json"))


@router.post("/auth/token", response_model=ApiResponse[TokenInfo], tags=["auth"])
def get_token(service: EnergyInsightsService = Depends(get_service)):
    """Authenticate with the metering platform and describe the new token."""
    if service.token_provider is None:
        return _no_auth_response()
    token = service.token_provider.authenticate()
    info = TokenInfo(
        token_type=token.token_type, scope=token.scope, expires_at=token.expires_at
    )
    return ApiResponse(success=True, data=info, message="Authentication successful")


@router.get("/auth/validate", response_model=ApiResponse[bool], tags=["auth"])
def validate_token(service: EnergyInsightsService = Depends(get_service)):
    """Check whether a metering access token can currently be obtained."""
    if service.token_provider is None:
        return _no_auth_response()
    valid = service.token_provider.validate_token()
    return ApiResponse(
        success=True,
        data=valid,
        message="Token is valid" if valid else "Token is invalid",
    )


# ---------------------------------------------------------------------------
# Energy
# ---------------------------------------------------------------------------

@router.get("/energy/data", response_model=ApiResponse[list[DailyReading]], tags=["energy"])
def energy_data(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[DailyReading]]:
    """Daily consumption readings for a date range."""
    start, end = _date_range(from_date, to_date)
    readings = service.energy_data(start, end)
    return ApiResponse(success=True, data=readings, message=f"Retrieved {len(readings)} records")


@router.get("/energy/total", response_model=ApiResponse[float], tags=["energy"])
def energy_total(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[float]:
    """Total consumption in kWh for a date range."""
    start, end = _date_range(from_date, to_date)
    total = service.total_consumption(start, end)
    return ApiResponse(success=True, data=total, message=f"Total consumption: {total:.2f} kWh")


@router.get("/energy/average", response_model=ApiResponse[float], tags=["energy"])
def energy_average(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[float]:
    """Average daily consumption in kWh for a date range."""
    start, end = _date_range(from_date, to_date)
    average = service.average_consumption(start, end)
    return ApiResponse(
        success=True, data=average, message=f"Average daily consumption: {average:.2f} kWh"
    )


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

@router.get(
    "/analytics/summary", response_model=ApiResponse[AnalyticsSummary], tags=["analytics"]
)
def analytics_summary(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[AnalyticsSummary]:
    """Moving averages and anomaly detection over a date range."""
    start, end = _date_range(from_date, to_date)
    summary = service.analyze(start, end)
    return ApiResponse(
        success=True,
        data=summary,
        message=(
            f"Analytics generated for {len(summary.daily_results)} days with "
            f"{summary.number_of_anomalies} anomalies detected"
        ),
    )


@router.get(
    "/analytics/anomalies",
    response_model=ApiResponse[list[AnalyticsResult]],
    tags=["analytics"],
)
def analytics_anomalies(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[AnalyticsResult]]:
    """Only the days flagged as anomalous."""
    start, end = _date_range(from_date, to_date)
    anomalies = service.anomalies(start, end)
    return ApiResponse(success=True, data=anomalies, message=f"Found {len(anomalies)} anomalies")


# ---------------------------------------------------------------------------
# Forecast
# ---------------------------------------------------------------------------

@router.get("/forecast", response_model=ApiResponse[ForecastSummary], tags=["forecast"])
def forecast(
    from_date: str | None = Query(default=None, alias="fromDate"),
    days: int = Query(default=3),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[ForecastSummary]:
    """Forecast summary for the *days* following *fromDate* (default: tomorrow)."""
    summary = service.forecast(_forecast_start(from_date), days)
    return ApiResponse(
        success=True,
        data=summary,
        message=f"Forecast generated for {len(summary.forecasts)} days",
    )


@router.get(
    "/forecast/predictions",
    response_model=ApiResponse[list[ForecastResult]],
    tags=["forecast"],
)
def forecast_predictions(
    from_date: str | None = Query(default=None, alias="fromDate"),
    days: int = Query(default=3),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[ForecastResult]]:
    """Forecast entries only, without the trend summary."""
    summary = service.forecast(_forecast_start(from_date), days)
    return ApiResponse(
        success=True,
        data=summary.forecasts,
        message=f"Predictions for {len(summary.forecasts)} days",
    )


# ---------------------------------------------------------------------------
# Insights
# ---------------------------------------------------------------------------

@router.get("/insights", response_model=ApiResponse[InsightsSummary], tags=["insights"])
def insights(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[InsightsSummary]:
    """All insights for a date range with the overall assessment."""
    start, end = _date_range(from_date, to_date)
    summary = service.generate_insights(start, end)
    return ApiResponse(
        success=True, data=summary, message=f"Generated {len(summary.insights)} insights"
    )


@router.get(
    "/insights/type/{insight_type}",
    response_model=ApiResponse[list[InsightResult]],
    tags=["insights"],
)
def insights_by_type(
    insight_type: str,
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[InsightResult]]:
    """Insights whose type matches *insight_type* (case-insensitive)."""
    start, end = _date_range(from_date, to_date)
    found = service.insights_by_type(start, end, insight_type)
    return ApiResponse(
        success=True,
        data=found,
        message=f"Found {len(found)} insights of type '{insight_type}'",
    )


@router.get(
    "/insights/severity/{severity}",
    response_model=ApiResponse[list[InsightResult]],
    tags=["insights"],
)
def insights_by_severity(
    severity: str,
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[InsightResult]]:
    """Insights with the given severity (info, warning, critical)."""
    start, end = _date_range(from_date, to_date)
    found = service.insights_by_severity(start, end, severity)
    return ApiResponse(
        success=True,
        data=found,
        message=f"Found {len(found)} insights with severity '{severity}'",
    )


# ---------------------------------------------------------------------------
# Weather
# ---------------------------------------------------------------------------

@router.get(
    "/weather/data", response_model=ApiResponse[list[WeatherObservation]], tags=["weather"]
)
def weather_data(
    from_date: str | None = Query(default=None, alias="fromDate"),
    to_date: str | None = Query(default=None, alias="toDate"),
    service: EnergyInsightsService = Depends(get_service),
) -> ApiResponse[list[WeatherObservation]]:
    """Daily weather observations (possibly simulated) for a date range."""
    start, end = _date_range(from_date, to_date)
    observations = service.weather_data(start, end)
    return ApiResponse(
        success=True,
        data=observations,
        message=f"Retrieved {len(observations)} weather records",
    )


@router.get(
    "/weather/date/{day}", response_model=ApiResponse[WeatherObservation], tags=["weather"]
)
def weather_for_date(
    day: str,
    service: EnergyInsightsService = Depends(get_service),
):
    """Weather for a single day; 404 when none is available."""
    observation = service.weather_for_date(parse_date(day, "date"))
    if observation is None:
        body = ApiResponse[WeatherObservation](
            success=False, message="No weather data found for the specified date"
        )
        return JSONResponse(status_code=404, content=body.model_dump(mode="json"))
    return ApiResponse(success=True, data=observation, message="Weather data retrieved")
