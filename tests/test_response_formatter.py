"""Tests for table rendering."""

import pytest
from io import StringIO
from datetime import date

from costdiff.models import DayItem, OutputOptions, Period
from costdiff.comparison import compare
from costdiff.top_costs import build_top
from costdiff.trend_analysis import build_trend
from costdiff.models import DailyCost
from costdiff.response_formatter import (
    TableRenderer,
    NO_DATA_MESSAGE,
    bar_chart_lines,
    change_style,
    format_change,
    format_currency,
    format_diff_full,
    format_percent,
    truncate,
)


NOV_2024 = Period(date(2024, 11, 1), date(2024, 12, 1))
DEC_2024 = Period(date(2024, 12, 1), date(2025, 1, 1))


class TestFormatting:
    """Test cases for value formatting helpers."""

    def test_format_currency(self):
        assert format_currency(12.5) == "$12.50"
        assert format_currency(0) == "$0.00"
        assert format_currency(-3) == "-$3.00"

    def test_format_percent(self):
        assert format_percent(6.666666) == "+6.7%"
        assert format_percent(0) == "+0.0%"
        assert format_percent(-33.333) == "-33.3%"

    def test_format_change(self):
        assert format_change(20) == "+$20.00"
        assert format_change(-40) == "-$40.00"

    def test_format_diff_full(self):
        assert format_diff_full(20, 20) == "+$20.00 (+20.0%)"
        assert format_diff_full(-10, -20) == "-$10.00 (-20.0%)"
        assert format_diff_full(25, 100, is_new=True) == "+$25.00 (new)"
        assert format_diff_full(-30, -100, is_removed=True) == "-$30.00 (removed)"

    def test_change_style(self):
        assert change_style(1) == "red"
        assert change_style(-1) == "green"
        assert change_style(0) == ""

    def test_truncate(self):
        assert truncate("EC2", 35) == "EC2"
        assert truncate("Amazon Elastic Compute Cloud - Compute", 20) == "Amazon Elastic Co..."
        assert len(truncate("x" * 50, 35)) == 35
        assert truncate("abcdef", 3) == "abc"


class TestTableRenderer:
    """Test cases for TableRenderer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.output = StringIO()
        self.renderer = TableRenderer(OutputOptions(color=False), self.output)

    def test_render_comparison(self):
        result = compare({"EC2": 100.0, "S3": 50.0}, {"EC2": 120.0, "S3": 40.0}, NOV_2024, DEC_2024)

        self.renderer.render_comparison(result)
        text = self.output.getvalue()

        assert "AWS Cost Diff: Nov 2024 → Dec 2024" in text
        assert "Total: $150.00 → $160.00 (+$10.00 (+6.7%))" in text
        assert "Service" in text
        assert "+$20.00 (+20.0%)" in text
        assert "-$10.00 (-20.0%)" in text
        assert text.index("EC2") < text.index("S3")

    def test_render_comparison_new_and_removed(self):
        result = compare({"RDS": 30.0}, {"Lambda": 25.0}, NOV_2024, DEC_2024)

        self.renderer.render_comparison(result, "Region")
        text = self.output.getvalue()

        assert "Region" in text
        assert "+$25.00 (new)" in text
        assert "-$30.00 (removed)" in text

    def test_render_comparison_truncates_names(self):
        long_name = "Amazon Elastic Container Service for Kubernetes"
        result = compare({long_name: 1.0}, {long_name: 2.0}, NOV_2024, DEC_2024)

        self.renderer.render_comparison(result)

        assert long_name not in self.output.getvalue()
        assert truncate(long_name, 35) in self.output.getvalue()

    def test_render_comparison_empty(self):
        self.renderer.render_comparison(compare({}, {}, NOV_2024, DEC_2024))
        assert NO_DATA_MESSAGE in self.output.getvalue()

    def test_quiet_comparison_has_table_only(self):
        renderer = TableRenderer(OutputOptions(quiet=True, color=False), self.output)
        result = compare({"EC2": 100.0}, {"EC2": 120.0}, NOV_2024, DEC_2024)

        renderer.render_comparison(result)
        text = self.output.getvalue()

        assert "AWS Cost Diff" not in text
        assert "Total:" not in text
        assert "EC2" in text

    def test_render_top(self):
        result = build_top({"EC2": 75.0, "S3": 25.0}, DEC_2024)

        self.renderer.render_top(result)
        text = self.output.getvalue()

        assert "AWS Top Costs: Dec 2024" in text
        assert "Total: $100.00" in text
        assert "% of Total" in text
        assert "75.0%" in text
        assert "$25.00" in text

    def test_render_top_empty(self):
        self.renderer.render_top(build_top({}, DEC_2024))
        assert NO_DATA_MESSAGE in self.output.getvalue()

    def test_render_trend(self):
        costs = [
            DailyCost(date(2024, 12, 11), 100.0),
            DailyCost(date(2024, 12, 12), 120.0),
            DailyCost(date(2024, 12, 13), 80.0),
        ]
        result = build_trend(costs, date(2024, 12, 11), date(2024, 12, 14))

        self.renderer.render_trend(result)
        text = self.output.getvalue()

        assert "AWS Daily Costs: Dec 11 - Dec 13, 2024" in text
        assert "Total: $300.00  |  Daily Average: $100.00" in text
        assert "Dec 12" in text
        assert "Thu" in text
        assert "+$20.00 (+20.0%)" in text
        assert "-$40.00 (-33.3%)" in text
        assert "█" in text

    def test_quiet_trend_has_no_chart(self):
        renderer = TableRenderer(OutputOptions(quiet=True, color=False), self.output)
        result = build_trend([DailyCost(date(2024, 12, 11), 10.0)], date(2024, 12, 11), date(2024, 12, 12))

        renderer.render_trend(result)

        assert "█" not in self.output.getvalue()
        assert "AWS Daily Costs" not in self.output.getvalue()


class TestBarChart:
    """Test cases for the daily bar chart."""

    def test_scaled_to_max(self):
        days = [DayItem(date(2024, 12, 11), 50.0), DayItem(date(2024, 12, 12), 100.0)]

        lines = bar_chart_lines(days, 75.0)

        assert lines[0].plain.count("█") == 20
        assert lines[1].plain.count("█") == 40
        assert lines[1].plain.startswith("Dec 12 ")
        assert lines[1].plain.endswith(" $100.00")

    def test_minimum_one_block_for_positive_cost(self):
        days = [DayItem(date(2024, 12, 11), 0.01), DayItem(date(2024, 12, 12), 1000.0)]

        lines = bar_chart_lines(days, 500.0)

        assert lines[0].plain.count("█") == 1

    def test_colors_relative_to_average(self):
        days = [
            DayItem(date(2024, 12, 11), 50.0),
            DayItem(date(2024, 12, 12), 100.0),
            DayItem(date(2024, 12, 13), 150.0),
        ]

        lines = bar_chart_lines(days, 100.0)
        styles = [[str(span.style) for span in line.spans] for line in lines]

        assert "green" in styles[0]
        assert "cyan" in styles[1]
        assert "red" in styles[2]

    def test_all_zero(self):
        assert bar_chart_lines([DayItem(date(2024, 12, 11), 0.0)], 0.0) == []

    def test_empty(self):
        assert bar_chart_lines([], 0.0) == []
