# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Moving-average and anomaly analysis.

Each day receives a trailing moving average once enough history exists.
A day is anomalous when its distance from that local average exceeds a
multiple of the standard deviation of the *whole* period, so volatility
is measured globally while the baseline is measured locally.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Sequence

from energy_insights.analysis.stats import mean, population_std
from energy_insights.data.models import AnalyticsResult, AnalyticsSummary, DailyReading
from energy_insights.data.normalizer import sort_readings

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 7
DEFAULT_THRESHOLD = 1.5


def compute_moving_average(
    readings: Sequence[DailyReading],
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[AnalyticsResult]:
    """Return one :class:`AnalyticsResult` per reading, in date order.

    The moving average at index ``i`` is the mean of the inclusive window
    ``[i - window_size + 1, i]`` and is left unset for the first
    ``window_size - 1`` days.
    """
    if window_size < 1:
        raise ValueError(f"window_size must be >= 1, got {window_size}")

    ordered = sort_readings(readings)
    values = [r.consumption_kwh for r in ordered]
    results: list[AnalyticsResult] = []

    for i, reading in enumerate(ordered):
        moving_average: float | None = None
        if i >= window_size - 1:
            moving_average = mean(values[i - window_size + 1 : i + 1])
        results.append(
            AnalyticsResult(
                date=reading.date,
                consumption_kwh=reading.consumption_kwh,
                moving_average=moving_average,
            )
        )

    return results


def _anomaly_reason(deviation: float, moving_average: float, window_size: int) -> str:
    if deviation > 0:
        return (
            f"High consumption: {deviation:.2f} kWh above {window_size}-day "
            f"average ({moving_average:.2f} kWh)"
        )
    return (
        f"Low consumption: {abs(deviation):.2f} kWh below {window_size}-day "
        f"average ({moving_average:.2f} kWh)"
    )


def detect_anomalies(
    readings: Sequence[DailyReading],
    threshold: float = DEFAULT_THRESHOLD,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> list[AnalyticsResult]:
    """Compute moving averages and flag anomalous days.

    A day with a moving average is flagged when
    ``|consumption - moving_average| > threshold * std`` where *std* is
    the population standard deviation of every consumption value in
    *readings*.  When all values are equal *std* is zero and any non-zero
    deviation is flagged.
    """
    results = compute_moving_average(readings, window_size=window_size)
    if not results:
        return results

    values = [r.consumption_kwh for r in readings]
    std_dev = population_std(values)
    limit = threshold * std_dev

    logger.info(
        "Mean consumption: %.2f kWh, std dev: %.2f kWh", mean(values), std_dev
    )

    annotated: list[AnalyticsResult] = []
    for result in results:
        if result.moving_average is None:
            annotated.append(result)
            continue

        deviation = result.consumption_kwh - result.moving_average
        update: dict[str, object] = {"deviation_from_average": deviation}
        if abs(deviation) > limit:
            update["is_anomaly"] = True
            update["anomaly_reason"] = _anomaly_reason(
                deviation, result.moving_average, window_size
            )
            logger.debug(
                "Anomaly detected on %s: %s",
                result.date.isoformat(),
                update["anomaly_reason"],
            )
        annotated.append(result.model_copy(update=update))

    return annotated


def summarize(
    readings: Sequence[DailyReading],
    from_date: dt.date,
    to_date: dt.date,
    window_size: int = DEFAULT_WINDOW_SIZE,
    threshold: float = DEFAULT_THRESHOLD,
) -> AnalyticsSummary:
    """Build the :class:`AnalyticsSummary` for a period.

    Totals are taken over the raw readings.  An empty input yields an
    all-zero summary with no daily results.
    """
    if not readings:
        logger.warning("No energy data available for analysis")
        return AnalyticsSummary(from_date=from_date, to_date=to_date)

    results = detect_anomalies(readings, threshold=threshold, window_size=window_size)
    values = [r.consumption_kwh for r in readings]

    summary = AnalyticsSummary(
        from_date=from_date,
        to_date=to_date,
        total_energy_used=sum(values),
        average_daily_use=mean(values),
        number_of_anomalies=sum(1 for r in results if r.is_anomaly),
        daily_results=results,
    )

    logger.info(
        "Analysis complete: %d anomalies detected out of %d days",
        summary.number_of_anomalies,
        len(results),
    )
    return summary
