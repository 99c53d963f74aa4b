"""Daily cost trend analysis."""

from datetime import date
from typing import List, Sequence

from .models import DailyCost, DayItem, TrendResult


def build_trend(daily_costs: Sequence[DailyCost], start: date, end: date) -> TrendResult:
    """
    Compute day-over-day changes for a chronological cost series.

    The series is used in the order given; callers pass it sorted by date,
    as Cost Explorer returns it. The first day has no prior day so its
    change is zero.

    Args:
        daily_costs: Per-day costs in ascending date order
        start: First day of the window
        end: Exclusive end of the window

    Returns:
        TrendResult with total, daily average and per-day changes
    """
    days: List[DayItem] = []
    total = 0.0
    previous = None

    for daily in daily_costs:
        total += daily.cost

        if previous is None:
            change = 0.0
            change_percent = 0.0
        else:
            change = daily.cost - previous
            change_percent = (change / previous) * 100 if previous > 0 else 0.0

        days.append(
            DayItem(
                date=daily.date,
                cost=daily.cost,
                change=change,
                change_percent=change_percent,
            )
        )
        previous = daily.cost

    average = total / len(days) if days else 0.0

    return TrendResult(
        start_date=start,
        end_date=end,
        total=total,
        average=average,
        days=days,
    )
