"""Core data models and type definitions for costdiff."""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import List, Optional, Dict, Any
from enum import Enum


ISO_DATE_FORMAT = "%Y-%m-%d"


class GroupType(Enum):
    """Cost Explorer group definition types."""
    DIMENSION = "DIMENSION"
    TAG = "TAG"


class OutputFormat(Enum):
    """Supported render targets."""
    TABLE = "table"
    JSON = "json"
    CSV = "csv"


class SortKey(Enum):
    """Orderings available for comparison items."""
    DIFF = "diff"
    DIFF_PERCENT = "diff-pct"
    COST = "cost"
    NAME = "name"


@dataclass(frozen=True)
class Period:
    """Half-open date interval [start, end)."""
    start: date
    end: date

    def is_full_month(self) -> bool:
        if self.start.day != 1 or self.end.day != 1:
            return False
        return self.end == _first_of_next_month(self.start)

    def is_single_day(self) -> bool:
        return self.end - self.start == timedelta(days=1)

    def label(self) -> str:
        """
        Human-readable label for the period.

        Returns:
            "Dec 2024" for a calendar month, "Dec 15, 2024" for a single day,
            otherwise "Dec 1 - Dec 14, 2024" (the end shown is inclusive).
        """
        if self.is_full_month():
            return f"{self.start:%b} {self.start.year}"

        if self.is_single_day():
            return _format_day(self.start)

        last_day = self.end - timedelta(days=1)
        return f"{self.start:%b} {self.start.day} - {_format_day(last_day)}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "start": self.start.strftime(ISO_DATE_FORMAT),
            "end": self.end.strftime(ISO_DATE_FORMAT),
            "label": self.label(),
        }


def _format_day(day: date) -> str:
    return f"{day:%b} {day.day}, {day.year}"


def _first_of_next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


@dataclass(frozen=True)
class GroupBy:
    """Grouping definition passed to Cost Explorer."""
    type: GroupType
    key: str

    def to_request(self) -> List[Dict[str, str]]:
        return [{"Type": self.type.value, "Key": self.key}]


GROUP_BY_SERVICE = GroupBy(GroupType.DIMENSION, "SERVICE")
GROUP_BY_USAGE_TYPE = GroupBy(GroupType.DIMENSION, "USAGE_TYPE")
GROUP_BY_REGION = GroupBy(GroupType.DIMENSION, "REGION")
GROUP_BY_ACCOUNT = GroupBy(GroupType.DIMENSION, "LINKED_ACCOUNT")


@dataclass(frozen=True)
class DailyCost:
    """Cost for a single day as returned by the billing API."""
    date: date
    cost: float


@dataclass(frozen=True)
class ComparisonItem:
    """Cost of one group in both periods."""
    name: str
    from_cost: float
    to_cost: float
    diff: float
    diff_percent: float
    is_new: bool = False
    is_removed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "from_cost": self.from_cost,
            "to_cost": self.to_cost,
            "diff": self.diff,
            "diff_percent": self.diff_percent,
        }
        # Flags are only emitted when set
        if self.is_new:
            data["is_new"] = True
        if self.is_removed:
            data["is_removed"] = True
        return data


@dataclass(frozen=True)
class ComparisonResult:
    """Complete comparison between two periods."""
    from_period: Period
    to_period: Period
    from_total: float
    to_total: float
    total_diff: float
    total_percent: float
    items: List[ComparisonItem] = field(default_factory=list)

    def with_items(self, items: List[ComparisonItem]) -> "ComparisonResult":
        """Copy of this result with a different item set and the same totals."""
        return replace(self, items=list(items))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_period": self.from_period.to_dict(),
            "to_period": self.to_period.to_dict(),
            "from_total": self.from_total,
            "to_total": self.to_total,
            "total_diff": self.total_diff,
            "total_diff_percent": self.total_percent,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class TopItem:
    """A single ranked cost driver."""
    name: str
    cost: float
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "cost": self.cost, "percent": self.percent}


@dataclass(frozen=True)
class TopResult:
    """Cost drivers for one period."""
    period: Period
    total: float
    items: List[TopItem] = field(default_factory=list)

    def with_items(self, items: List[TopItem]) -> "TopResult":
        return replace(self, items=list(items))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period.to_dict(),
            "total": self.total,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class DayItem:
    """One day of a cost trend."""
    date: date
    cost: float
    change: float = 0.0
    change_percent: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.strftime(ISO_DATE_FORMAT),
            "cost": self.cost,
            "change": self.change,
            "change_percent": self.change_percent,
        }


@dataclass(frozen=True)
class TrendResult:
    """Daily cost trend over a window."""
    start_date: date
    end_date: date
    total: float
    average: float
    days: List[DayItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.strftime(ISO_DATE_FORMAT),
            "end_date": self.end_date.strftime(ISO_DATE_FORMAT),
            "total": self.total,
            "average": self.average,
            "days": [day.to_dict() for day in self.days],
        }


@dataclass
class OutputOptions:
    """Rendering options handed to formatters."""
    quiet: bool = False
    verbose: bool = False
    color: bool = True


@dataclass
class Config:
    """Application configuration."""
    default_profile: Optional[str] = None
    region: Optional[str] = None
    metric: str = "net-amortized"
    group_by: str = "service"
    output_format: str = "table"
    top_n: int = 10
    sort_by: str = "diff"
    threshold: float = 0.0
    min_cost: float = 0.0
    watch_days: int = 7
