"""Top cost drivers for a single period."""

from typing import Mapping

from .models import Period, TopItem, TopResult
from .comparison import top_n


def build_top(costs: Mapping[str, float], period: Period) -> TopResult:
    """
    Rank groups by cost and compute each group's share of the total.

    Args:
        costs: Cost per group name for the period
        period: The period the costs cover

    Returns:
        TopResult with items sorted by cost descending
    """
    ranked = sorted(costs.items(), key=lambda entry: (-entry[1], entry[0]))
    total = sum(cost for _, cost in sorted(costs.items()))

    items = [
        TopItem(
            name=name,
            cost=cost,
            percent=(cost / total) * 100 if total > 0 else 0.0,
        )
        for name, cost in ranked
    ]

    return TopResult(period=period, total=total, items=items)


def filter_top_by_threshold(result: TopResult, threshold: float) -> TopResult:
    """Keep items costing at least threshold. The total is left untouched."""
    if threshold <= 0:
        return result.with_items(result.items)
    return result.with_items([item for item in result.items if item.cost >= threshold])


def limit_top(result: TopResult, n: int) -> TopResult:
    return result.with_items(top_n(result.items, n))
