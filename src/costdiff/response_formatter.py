"""Rich terminal table rendering for comparison, top and trend results."""

import sys
from typing import List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import (
    ComparisonResult,
    DayItem,
    OutputOptions,
    Period,
    TopResult,
    TrendResult,
)


SERVICE_NAME_MAX_WIDTH = 35
TOP_SERVICE_NAME_MAX_WIDTH = 40
BAR_CHART_MAX_WIDTH = 40
ABOVE_AVERAGE_THRESHOLD = 1.2
BELOW_AVERAGE_THRESHOLD = 0.8

# Width used when the output is not a terminal
DEFAULT_CONSOLE_WIDTH = 120

NO_DATA_MESSAGE = "No cost data found for the specified period."


def format_currency(amount: float) -> str:
    """Format a float as a dollar amount, e.g. $12.50 or -$3.00."""
    if amount < 0:
        return f"-${-amount:.2f}"
    return f"${amount:.2f}"


def format_percent(percent: float) -> str:
    """Format a percentage with sign and one decimal."""
    if percent >= 0:
        return f"+{percent:.1f}%"
    return f"{percent:.1f}%"


def format_change(change: float) -> str:
    """Format a cost change with sign."""
    if change >= 0:
        return f"+${change:.2f}"
    return f"-${-change:.2f}"


def format_diff_full(diff: float, percent: float, is_new: bool = False, is_removed: bool = False) -> str:
    """Format a change with its percentage, or a new/removed marker."""
    if is_new:
        return f"+${diff:.2f} (new)"
    if is_removed:
        return f"-${-diff:.2f} (removed)"
    return f"{format_change(diff)} ({format_percent(percent)})"


def change_style(change: float) -> str:
    """Increases are red, decreases green."""
    if change > 0:
        return "red"
    if change < 0:
        return "green"
    return ""


def colorize_change(change: float, formatted: str) -> Text:
    return Text(formatted, style=change_style(change))


def truncate(value: str, max_len: int) -> str:
    """Shorten a string to max_len characters, ending with '...' when cut."""
    if len(value) <= max_len:
        return value
    if max_len <= 3:
        return value[:max_len]
    return value[:max_len - 3] + "..."


class TableRenderer:
    """Renders results as tables using Rich."""

    def __init__(self, options: Optional[OutputOptions] = None, file: Optional[TextIO] = None):
        """
        Initialize table renderer.

        Args:
            options: Output options (quiet mode, color)
            file: Stream to write to, stdout by default
        """
        self.options = options or OutputOptions()
        self.file = file or sys.stdout
        self.console = self._create_console()

    def _create_console(self) -> Console:
        is_terminal = hasattr(self.file, "isatty") and self.file.isatty()
        return Console(
            file=self.file,
            no_color=not self.options.color,
            highlight=False,
            width=None if is_terminal else DEFAULT_CONSOLE_WIDTH,
        )

    def _new_table(self, headers: List[str], justify: List[str]) -> Table:
        table = Table(box=box.SIMPLE_HEAD, show_edge=False, header_style="bold")
        for header, alignment in zip(headers, justify):
            table.add_column(header, justify=alignment, no_wrap=True)
        return table

    def _print_title(self, title: str) -> None:
        self.console.print()
        self.console.print(Text(title, style="bold"))
        self.console.print()

    def render_comparison(self, result: ComparisonResult, name_header: str = "Service") -> None:
        """Render a comparison between two periods."""
        from_label = result.from_period.label()
        to_label = result.to_period.label()

        if not self.options.quiet:
            self._print_title(f"AWS Cost Diff: {from_label} → {to_label}")

            total_line = Text(
                f"Total: {format_currency(result.from_total)} → {format_currency(result.to_total)} ("
            )
            total_line.append(
                format_diff_full(result.total_diff, result.total_percent),
                style=change_style(result.total_diff),
            )
            total_line.append(")")
            self.console.print(total_line)
            self.console.print()

        if not result.items:
            self.console.print(Text(NO_DATA_MESSAGE, style="dim"))
            return

        table = self._new_table(
            [name_header, from_label, to_label, "Change"],
            ["left", "right", "right", "right"],
        )
        for item in result.items:
            change = format_diff_full(item.diff, item.diff_percent, item.is_new, item.is_removed)
            table.add_row(
                truncate(item.name, SERVICE_NAME_MAX_WIDTH),
                format_currency(item.from_cost),
                format_currency(item.to_cost),
                colorize_change(item.diff, change),
            )

        self.console.print(table)

    def render_top(self, result: TopResult, name_header: str = "Service") -> None:
        """Render the top cost drivers for a period."""
        if not self.options.quiet:
            self._print_title(f"AWS Top Costs: {result.period.label()}")
            self.console.print(f"Total: {format_currency(result.total)}")
            self.console.print()

        if not result.items:
            self.console.print(Text(NO_DATA_MESSAGE, style="dim"))
            return

        table = self._new_table(
            ["#", name_header, "Cost", "% of Total"],
            ["right", "left", "right", "right"],
        )
        for rank, item in enumerate(result.items, 1):
            table.add_row(
                str(rank),
                truncate(item.name, TOP_SERVICE_NAME_MAX_WIDTH),
                format_currency(item.cost),
                f"{item.percent:.1f}%",
            )

        self.console.print(table)

    def render_trend(self, result: TrendResult) -> None:
        """Render a daily trend with a bar chart."""
        if not self.options.quiet:
            window = Period(start=result.start_date, end=result.end_date)
            self._print_title(f"AWS Daily Costs: {window.label()}")
            self.console.print(
                f"Total: {format_currency(result.total)}  |  "
                f"Daily Average: {format_currency(result.average)}"
            )
            self.console.print()

        if not result.days:
            self.console.print(Text(NO_DATA_MESSAGE, style="dim"))
            return

        table = self._new_table(
            ["Date", "Day", "Cost", "Change"],
            ["left", "left", "right", "right"],
        )
        for index, day in enumerate(result.days):
            if index == 0:
                change = Text("-", style="dim")
            else:
                change = colorize_change(
                    day.change, format_diff_full(day.change, day.change_percent)
                )
            table.add_row(
                f"{day.date:%b} {day.date.day}",
                f"{day.date:%a}",
                format_currency(day.cost),
                change,
            )

        self.console.print(table)

        if not self.options.quiet:
            self.console.print()
            for line in bar_chart_lines(result.days, result.average):
                self.console.print(line)


def bar_chart_lines(days: List[DayItem], average: float) -> List[Text]:
    """
    Build one ASCII bar per day, scaled to the most expensive day.

    Bars above 1.2x the average are red, below 0.8x green, otherwise cyan.
    """
    if not days:
        return []

    max_cost = max(day.cost for day in days)
    if max_cost <= 0:
        return []

    lines = []
    for day in days:
        width = int((day.cost / max_cost) * BAR_CHART_MAX_WIDTH)
        if width < 1 and day.cost > 0:
            width = 1

        if day.cost > average * ABOVE_AVERAGE_THRESHOLD:
            style = "red"
        elif day.cost < average * BELOW_AVERAGE_THRESHOLD:
            style = "green"
        else:
            style = "cyan"

        line = Text(f"{day.date:%b} {day.date.day:>2} ", style="dim")
        line.append("█" * max(width, 0), style=style)
        line.append(f" {format_currency(day.cost)}", style="dim")
        lines.append(line)

    return lines
