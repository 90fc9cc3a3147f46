# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Small descriptive-statistics helpers shared by the analyzers."""

from __future__ import annotations

import math
from collections.abc import Sequence

from energy_insights.errors import ComputationError


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; ``0.0`` for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (divides by *n*, not *n - 1*).

    Raises :class:`ComputationError` when the series holds non-finite
    values and the variance is undefined.
    """
    if not values:
        return 0.0
    mu = mean(values)
    variance = sum((v - mu) ** 2 for v in values) / len(values)
    if not math.isfinite(variance):
        raise ComputationError(f"variance is undefined for this series (mean={mu})")
    return math.sqrt(variance)


def percent_change(value: float, baseline: float) -> float:
    """``(value / baseline - 1) * 100``, or ``0.0`` when *baseline* is zero."""
    if baseline == 0:
        return 0.0
    return (value / baseline - 1) * 100
