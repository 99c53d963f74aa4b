"""Tests for top cost driver aggregation."""

import pytest
from datetime import date

from costdiff.models import Period
from costdiff.top_costs import build_top, filter_top_by_threshold, limit_top


DEC_2024 = Period(date(2024, 12, 1), date(2025, 1, 1))


class TestBuildTop:
    """Test cases for build_top."""

    def test_ranks_by_cost(self):
        result = build_top({"S3": 25.0, "EC2": 50.0, "Lambda": 25.0}, DEC_2024)

        assert result.total == pytest.approx(100.0)
        assert [item.name for item in result.items] == ["EC2", "Lambda", "S3"]
        assert result.items[0].percent == pytest.approx(50.0)
        assert result.items[1].percent == pytest.approx(25.0)

    def test_percentages_sum_to_hundred(self):
        result = build_top({"a": 1.0, "b": 2.0, "c": 3.0}, DEC_2024)
        assert sum(item.percent for item in result.items) == pytest.approx(100.0)

    def test_zero_total(self):
        """A zero total yields zero percentages instead of dividing by zero."""
        result = build_top({"a": 0.0, "b": 0.0}, DEC_2024)

        assert result.total == 0.0
        assert all(item.percent == 0.0 for item in result.items)

    def test_empty(self):
        result = build_top({}, DEC_2024)

        assert result.items == []
        assert result.total == 0.0
        assert result.period == DEC_2024

    def test_to_dict(self):
        data = build_top({"EC2": 80.0, "S3": 20.0}, DEC_2024).to_dict()

        assert data["period"]["label"] == "Dec 2024"
        assert data["total"] == pytest.approx(100.0)
        assert data["items"][0] == {"name": "EC2", "cost": 80.0, "percent": pytest.approx(80.0)}


class TestTopFilters:
    """Test cases for narrowing a top result."""

    def setup_method(self):
        """Set up test fixtures."""
        self.result = build_top({"EC2": 500.0, "S3": 120.0, "Lambda": 3.0, "SQS": 0.5}, DEC_2024)

    def test_limit_keeps_total(self):
        limited = limit_top(self.result, 2)

        assert [item.name for item in limited.items] == ["EC2", "S3"]
        assert limited.total == self.result.total
        assert limited.period == self.result.period

    def test_limit_larger_than_items(self):
        assert len(limit_top(self.result, 100).items) == 4

    def test_threshold(self):
        filtered = filter_top_by_threshold(self.result, 100.0)

        assert [item.name for item in filtered.items] == ["EC2", "S3"]
        assert filtered.total == pytest.approx(623.5)

    def test_zero_threshold_keeps_all(self):
        assert len(filter_top_by_threshold(self.result, 0.0).items) == 4
