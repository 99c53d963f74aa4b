"""CSV and JSON export of comparison, top and trend results."""

import csv
import json
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, TextIO, Union

from .models import (
    ComparisonResult,
    OutputFormat,
    OutputOptions,
    TopResult,
    TrendResult,
    ISO_DATE_FORMAT,
)
from .response_formatter import TableRenderer


Result = Union[ComparisonResult, TopResult, TrendResult]


def _amount(value: float) -> str:
    return f"{value:.2f}"


def _flag(value: bool) -> str:
    return "true" if value else "false"


class DataExporter(ABC):
    """Abstract base class for data exporters."""

    @abstractmethod
    def export_comparison(self, result: ComparisonResult, stream: TextIO) -> None:
        """Write a comparison result."""
        pass

    @abstractmethod
    def export_top(self, result: TopResult, stream: TextIO) -> None:
        """Write a top costs result."""
        pass

    @abstractmethod
    def export_trend(self, result: TrendResult, stream: TextIO) -> None:
        """Write a daily trend result."""
        pass


class CSVExporter(DataExporter):
    """CSV data exporter."""

    COMPARISON_HEADER = [
        "name",
        "from_period",
        "to_period",
        "from_cost",
        "to_cost",
        "diff",
        "diff_percent",
        "is_new",
        "is_removed",
    ]
    TOP_HEADER = ["rank", "name", "period", "cost", "percent"]
    TREND_HEADER = ["date", "day_of_week", "cost", "change", "change_percent"]

    def export_comparison(self, result: ComparisonResult, stream: TextIO) -> None:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(self.COMPARISON_HEADER)

        from_label = result.from_period.label()
        to_label = result.to_period.label()
        for item in result.items:
            writer.writerow([
                item.name,
                from_label,
                to_label,
                _amount(item.from_cost),
                _amount(item.to_cost),
                _amount(item.diff),
                _amount(item.diff_percent),
                _flag(item.is_new),
                _flag(item.is_removed),
            ])

    def export_top(self, result: TopResult, stream: TextIO) -> None:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(self.TOP_HEADER)

        label = result.period.label()
        for rank, item in enumerate(result.items, 1):
            writer.writerow([rank, item.name, label, _amount(item.cost), _amount(item.percent)])

    def export_trend(self, result: TrendResult, stream: TextIO) -> None:
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(self.TREND_HEADER)

        for day in result.days:
            writer.writerow([
                day.date.strftime(ISO_DATE_FORMAT),
                day.date.strftime("%A"),
                _amount(day.cost),
                _amount(day.change),
                _amount(day.change_percent),
            ])


class JSONExporter(DataExporter):
    """JSON data exporter."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def _write(self, data: Dict[str, Any], stream: TextIO) -> None:
        json.dump(data, stream, indent=self.indent)
        stream.write("\n")

    def export_comparison(self, result: ComparisonResult, stream: TextIO) -> None:
        self._write(result.to_dict(), stream)

    def export_top(self, result: TopResult, stream: TextIO) -> None:
        self._write(result.to_dict(), stream)

    def export_trend(self, result: TrendResult, stream: TextIO) -> None:
        self._write(result.to_dict(), stream)


class ExportManager:
    """Dispatches a result to the renderer for an output format."""

    def __init__(self, options: Optional[OutputOptions] = None):
        self.options = options or OutputOptions()
        self.exporters: Dict[OutputFormat, DataExporter] = {
            OutputFormat.CSV: CSVExporter(),
            OutputFormat.JSON: JSONExporter(),
        }

    def render(
        self,
        result: Result,
        output_format: OutputFormat,
        stream: Optional[TextIO] = None,
        name_header: str = "Service",
    ) -> None:
        """
        Write a result in the requested format.

        Args:
            result: Comparison, top or trend result
            output_format: Render target
            stream: Stream to write to, stdout by default
            name_header: Column header for group names in tables
        """
        stream = stream or sys.stdout

        if output_format == OutputFormat.TABLE:
            renderer = TableRenderer(self.options, stream)
            if isinstance(result, ComparisonResult):
                renderer.render_comparison(result, name_header)
            elif isinstance(result, TopResult):
                renderer.render_top(result, name_header)
            else:
                renderer.render_trend(result)
            return

        exporter = self.exporters[output_format]
        if isinstance(result, ComparisonResult):
            exporter.export_comparison(result, stream)
        elif isinstance(result, TopResult):
            exporter.export_top(result, stream)
        else:
            exporter.export_trend(result, stream)
