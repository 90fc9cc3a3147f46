# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Tests for terminal charts and the Rich report renderer."""

from __future__ import annotations

import datetime as dt

from rich.console import Console

from energy_insights.analysis.anomalies import summarize
from energy_insights.reporting.ascii_charts import flagged_sparkline, horizontal_bar
from energy_insights.reporting.terminal import TerminalRenderer


class TestAsciiCharts:
    def test_flagged_sparkline_marks_flags(self):
        spark = flagged_sparkline([1.0, 5.0, 9.0], [False, False, True])
        assert spark == "[cyan] [/][cyan]▄[/][bold red]█[/]"

    def test_flat_series_uses_lowest_block(self):
        assert flagged_sparkline([4.0, 4.0], [False, False]) == "[cyan] [/][cyan] [/]"

    def test_empty_sparkline(self):
        assert flagged_sparkline([], []) == ""

    def test_horizontal_bar(self):
        assert horizontal_bar(5, 10, width=4) == "[green]██░░[/]"
        assert horizontal_bar(20, 10, width=2, color="red") == "[red]██[/]"

    def test_bar_without_max(self):
        assert horizontal_bar(3, 0) == "[dim]no data[/]"


class TestTerminalRenderer:
    def _render(self, action) -> str:
        console = Console(record=True, width=120, no_color=True)
        action(TerminalRenderer(console))
        return console.export_text()

    def test_analytics_lists_anomalies(self, make_readings):
        readings = make_readings([10] * 7 + [30])
        summary = summarize(readings, readings[0].date, readings[-1].date)
        out = self._render(lambda r: r.render_analytics(summary))
        assert "ENERGY ANALYTICS" in out
        assert "2024-01-08" in out
        assert "1 of 8 days" in out

    def test_analytics_empty_period(self):
        day = dt.date(2024, 1, 1)
        summary = summarize([], day, day)
        out = self._render(lambda r: r.render_analytics(summary))
        assert "No consumption data" in out

    def test_weather_rows(self, make_weather):
        obs = [make_weather(dt.date(2024, 12, 1), condition="Rain")]
        out = self._render(lambda r: r.render_weather(obs))
        assert "WEATHER" in out
        assert "Rain" in out
