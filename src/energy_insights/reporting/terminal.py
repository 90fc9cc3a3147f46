# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Rich terminal report renderer.

Composes Rich tables, panels and sparklines into the user-facing
terminal output of the ``energy-insights`` CLI.
"""

from __future__ import annotations

import datetime as dt

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from energy_insights import __version__
from energy_insights.data.models import (
    AnalyticsSummary,
    ForecastSummary,
    InsightsSummary,
    TrendDirection,
    WeatherObservation,
)
from energy_insights.reporting.ascii_charts import flagged_sparkline, horizontal_bar

_TREND_COLORS = {
    TrendDirection.increasing: "red",
    TrendDirection.decreasing: "green",
    TrendDirection.stable: "cyan",
    TrendDirection.unknown: "dim",
}


class TerminalRenderer:
    """Renders service results to the terminal using Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def render_analytics(self, summary: AnalyticsSummary) -> None:
        """Render the daily series with moving averages and anomaly flags."""
        self._render_header("ENERGY ANALYTICS", summary.from_date, summary.to_date)

        results = summary.daily_results
        if not results:
            self.console.print("  [dim]No consumption data for this period.[/dim]")
            return

        spark = flagged_sparkline(
            [r.consumption_kwh for r in results], [r.is_anomaly for r in results]
        )
        self.console.print()
        self.console.print(f"  [bold]Total[/bold]   {summary.total_energy_used:,.2f} kWh")
        self.console.print(f"  [bold]Average[/bold] {summary.average_daily_use:,.2f} kWh/day")
        self.console.print(f"  [bold]Series[/bold]  {spark}")

        peak = max(r.consumption_kwh for r in results)
        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Date", style="bold")
        table.add_column("kWh", justify="right")
        table.add_column("", min_width=20)
        table.add_column("Moving Avg", justify="right")
        table.add_column("Deviation", justify="right")
        table.add_column("Note")

        for r in results:
            color = "red" if r.is_anomaly else "green"
            table.add_row(
                r.date.isoformat(),
                f"{r.consumption_kwh:,.2f}",
                horizontal_bar(r.consumption_kwh, peak, color=color),
                "-" if r.moving_average is None else f"{r.moving_average:,.2f}",
                "-" if r.deviation_from_average is None else f"{r.deviation_from_average:+,.2f}",
                f"[red]{r.anomaly_reason}[/red]" if r.is_anomaly else "",
            )

        self.console.print()
        self.console.print(table)
        self.console.print(
            f"\n  [bold]Anomalies:[/bold] "
            f"[{'red' if summary.number_of_anomalies else 'green'}]"
            f"{summary.number_of_anomalies}[/] of {len(results)} days"
        )
        self._render_footer()

    def render_forecast(self, summary: ForecastSummary) -> None:
        """Render forecast entries with their confidence bands."""
        self.console.print()
        color = _TREND_COLORS[summary.trend_direction]
        header = Text()
        header.append("FORECAST", style="bold cyan")
        header.append(" | ", style="dim")
        header.append(f"Trend: {summary.trend_direction.value}", style=color)
        header.append(f" ({summary.trend_strength:.1f}%)", style="dim")
        header.append(" | ", style="dim")
        header.append(
            f"Historical avg {summary.average_historical_consumption:,.2f} kWh/day"
        )
        self.console.print(Panel(header, title="Consumption Forecast"))

        if not summary.forecasts:
            self.console.print("  [dim]Not enough history to forecast.[/dim]")
            return

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Date", style="bold")
        table.add_column("Predicted kWh", justify="right")
        table.add_column("Lower", justify="right")
        table.add_column("Upper", justify="right")
        table.add_column("Method", style="dim")
        for f in summary.forecasts:
            table.add_row(
                f.date.isoformat(),
                f"[bold]{f.predicted_kwh:,.2f}[/bold]",
                f"{f.confidence_lower:,.2f}",
                f"{f.confidence_upper:,.2f}",
                f.method,
            )
        self.console.print(table)
        self._render_footer()

    def render_insights(self, summary: InsightsSummary) -> None:
        """Render insights ordered as generated, then the overall assessment."""
        self.console.print()
        self.console.print(Rule("[bold]INSIGHTS[/bold]"))

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("#", justify="right", style="bold", width=3)
        table.add_column("Severity", justify="center", width=9)
        table.add_column("Type", style="dim")
        table.add_column("Insight", min_width=30)

        for i, insight in enumerate(summary.insights, start=1):
            color = insight.severity.color
            table.add_row(
                str(i),
                f"[{color}]{insight.severity.value}[/{color}]",
                insight.type.value,
                insight.message,
            )
        self.console.print(table)

        self.console.print()
        self.console.print(
            Panel(
                summary.overall_assessment,
                title="[bold]OVERALL ASSESSMENT[/bold]",
                border_style="cyan",
                padding=(1, 2),
            )
        )
        self._render_footer(summary.generated_at)

    def render_weather(self, observations: list[WeatherObservation]) -> None:
        """Render one row per day of weather."""
        self.console.print()
        self.console.print(Rule("[bold]WEATHER[/bold]"))
        if not observations:
            self.console.print("  [dim]No weather data for this period.[/dim]")
            return

        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("Date", style="bold")
        table.add_column("Temp °C", justify="right")
        table.add_column("Min/Max", justify="right")
        table.add_column("Humidity", justify="right")
        table.add_column("Condition")
        for w in observations:
            table.add_row(
                w.date.isoformat(),
                f"{w.temperature:.1f}",
                f"{w.temp_min:.1f} / {w.temp_max:.1f}",
                f"{w.humidity}%",
                f"{w.condition} [dim]{w.description}[/dim]",
            )
        self.console.print(table)

    # ------------------------------------------------------------------
    # Private rendering methods
    # ------------------------------------------------------------------

    def _render_header(self, title: str, date_from: dt.date, date_to: dt.date) -> None:
        header_text = Text()
        header_text.append(title, style="bold cyan")
        header_text.append(" | ", style="dim")
        header_text.append(f"{date_from.isoformat()} to {date_to.isoformat()}", style="bold")
        header_text.append(f" ({(date_to - date_from).days + 1} days)", style="dim")

        self.console.print()
        self.console.print(Panel(header_text, title="Energy Insights"))

    def _render_footer(self, generated_at: dt.datetime | None = None) -> None:
        generated_at = generated_at or dt.datetime.now(dt.timezone.utc)
        self.console.print()
        self.console.print(Rule(style="dim"))
        self.console.print(
            f"  [dim]Generated: {generated_at.strftime('%Y-%m-%d %H:%M UTC')} | "
            f"energy-insights v{__version__}[/dim]"
        )
        self.console.print()
