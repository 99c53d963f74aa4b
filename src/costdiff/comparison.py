"""Period-over-period cost comparison, ordering and filtering."""

from typing import Callable, Dict, List, Mapping

from .models import ComparisonItem, ComparisonResult, Period, SortKey


def build_item(name: str, from_cost: float, to_cost: float) -> ComparisonItem:
    """
    Build a comparison item for one group.

    New items (no cost before) count as +100% and removed items (no cost
    after) as -100%. Items with no positive from cost otherwise get 0%.
    """
    diff = to_cost - from_cost
    is_new = False
    is_removed = False

    if from_cost == 0 and to_cost > 0:
        is_new = True
        diff_percent = 100.0
    elif from_cost > 0 and to_cost == 0:
        is_removed = True
        diff_percent = -100.0
    elif from_cost > 0:
        diff_percent = (diff / from_cost) * 100
    else:
        diff_percent = 0.0

    return ComparisonItem(
        name=name,
        from_cost=from_cost,
        to_cost=to_cost,
        diff=diff,
        diff_percent=diff_percent,
        is_new=is_new,
        is_removed=is_removed,
    )


def compare_items(
    from_costs: Mapping[str, float], to_costs: Mapping[str, float]
) -> List[ComparisonItem]:
    """Compare two cost maps and return items sorted by absolute diff."""
    all_names = set(from_costs) | set(to_costs)

    items = [
        build_item(name, from_costs.get(name, 0.0), to_costs.get(name, 0.0))
        for name in all_names
    ]
    return sort_by_abs_diff(items)


def compare(
    from_costs: Mapping[str, float],
    to_costs: Mapping[str, float],
    from_period: Period,
    to_period: Period,
) -> ComparisonResult:
    """
    Calculate the difference between two cost periods.

    Args:
        from_costs: Cost per group name for the earlier period
        to_costs: Cost per group name for the later period
        from_period: The earlier period
        to_period: The later period

    Returns:
        ComparisonResult with totals over every group and items sorted by
        absolute diff, largest first
    """
    items = compare_items(from_costs, to_costs)

    # Sum in name order so totals do not depend on mapping iteration order
    ordered = sorted(items, key=lambda item: item.name)
    from_total = sum(item.from_cost for item in ordered)
    to_total = sum(item.to_cost for item in ordered)

    total_diff = to_total - from_total
    total_percent = (total_diff / from_total) * 100 if from_total > 0 else 0.0

    return ComparisonResult(
        from_period=from_period,
        to_period=to_period,
        from_total=from_total,
        to_total=to_total,
        total_diff=total_diff,
        total_percent=total_percent,
        items=items,
    )


def sort_by_abs_diff(items: List[ComparisonItem]) -> List[ComparisonItem]:
    return sorted(items, key=lambda item: (-abs(item.diff), item.name))


def sort_by_abs_diff_percent(items: List[ComparisonItem]) -> List[ComparisonItem]:
    return sorted(items, key=lambda item: (-abs(item.diff_percent), item.name))


def sort_by_to_cost(items: List[ComparisonItem]) -> List[ComparisonItem]:
    return sorted(items, key=lambda item: (-item.to_cost, item.name))


def sort_by_name(items: List[ComparisonItem]) -> List[ComparisonItem]:
    return sorted(items, key=lambda item: item.name)


SORTERS: Dict[SortKey, Callable[[List[ComparisonItem]], List[ComparisonItem]]] = {
    SortKey.DIFF: sort_by_abs_diff,
    SortKey.DIFF_PERCENT: sort_by_abs_diff_percent,
    SortKey.COST: sort_by_to_cost,
    SortKey.NAME: sort_by_name,
}


def sort_items(items: List[ComparisonItem], sort_key: SortKey) -> List[ComparisonItem]:
    """Order items with the sorter registered for sort_key."""
    return SORTERS[sort_key](items)


def filter_by_abs_diff_threshold(
    items: List[ComparisonItem], threshold: float
) -> List[ComparisonItem]:
    """Keep items whose absolute diff is at least threshold; threshold <= 0 keeps all."""
    if threshold <= 0:
        return list(items)
    return [item for item in items if abs(item.diff) >= threshold]


def filter_by_min_cost(items: List[ComparisonItem], min_cost: float) -> List[ComparisonItem]:
    """Keep items where either period's cost is at least min_cost."""
    return [
        item for item in items
        if item.from_cost >= min_cost or item.to_cost >= min_cost
    ]


def top_n(items: List, n: int) -> List:
    """First n items of an already sorted sequence."""
    if n >= len(items):
        return list(items)
    return list(items[:max(n, 0)])


# Result-level helpers. Totals always describe the full, unfiltered data set.

def sort_result(result: ComparisonResult, sort_key: SortKey) -> ComparisonResult:
    return result.with_items(sort_items(result.items, sort_key))


def filter_result_by_threshold(result: ComparisonResult, threshold: float) -> ComparisonResult:
    return result.with_items(filter_by_abs_diff_threshold(result.items, threshold))


def filter_result_by_min_cost(result: ComparisonResult, min_cost: float) -> ComparisonResult:
    return result.with_items(filter_by_min_cost(result.items, min_cost))


def limit_result(result: ComparisonResult, n: int) -> ComparisonResult:
    return result.with_items(top_n(result.items, n))
