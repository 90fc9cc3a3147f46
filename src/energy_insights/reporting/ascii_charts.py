# Copyright (c) 2025 Keshav
# Licensed under the GNU Affero General Public License v3.0
# See LICENSE file for details.
"""Terminal-friendly visualizations using Unicode characters.

These functions return Rich-markup strings that render as sparklines
and bars in the terminal via the Rich library.
"""

from __future__ import annotations

_BLOCKS = " ▁▂▃▄▅▆▇█"


def flagged_sparkline(values: list[float], flags: list[bool]) -> str:
    """Sparkline of daily values with flagged points highlighted in red.

    Each value maps to one of 9 block heights scaled between the series
    minimum and maximum; a flat series renders at the lowest height.
    """
    if not values:
        return ""

    min_v = min(values)
    max_v = max(values)
    range_v = max_v - min_v or 1

    parts = []
    for v, flagged in zip(values, flags):
        block = _BLOCKS[int((v - min_v) / range_v * 8)]
        parts.append(f"[bold red]{block}[/]" if flagged else f"[cyan]{block}[/]")
    return "".join(parts)


def horizontal_bar(value: float, max_value: float, width: int = 20, color: str = "green") -> str:
    """Bar proportional to ``value / max_value``; ``[dim]no data[/]`` when max is 0."""
    if max_value <= 0:
        return "[dim]no data[/]"
    ratio = max(0.0, min(value / max_value, 1.0))
    filled = int(ratio * width)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{color}]{bar}[/]"
