# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Terminal rendering for analytics, forecasts, insights and weather."""

from energy_insights.reporting.terminal import TerminalRenderer

__all__ = ["TerminalRenderer"]
