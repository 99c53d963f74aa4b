"""End-to-end report pipeline: validate options, fetch costs, build results."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .models import (
    ComparisonResult,
    Config,
    GroupBy,
    GroupType,
    OutputFormat,
    SortKey,
    TopResult,
    TrendResult,
)
from .aws_client import CostExplorerClient
from .periods import resolve_comparison_periods, resolve_top_period, trend_window
from .validation import (
    parse_group_by,
    parse_output_format,
    parse_sort_key,
    resolve_metric,
    validate_non_negative,
)
from .comparison import (
    compare,
    filter_result_by_min_cost,
    filter_result_by_threshold,
    limit_result,
    sort_result,
)
from .top_costs import build_top, filter_top_by_threshold, limit_top
from .trend_analysis import build_trend


GROUP_HEADERS = {
    "SERVICE": "Service",
    "USAGE_TYPE": "Usage Type",
    "REGION": "Region",
    "LINKED_ACCOUNT": "Account",
}


def group_header(group_by: GroupBy) -> str:
    """Column header for group names."""
    if group_by.type == GroupType.TAG:
        return f"Tag: {group_by.key}"
    return GROUP_HEADERS.get(group_by.key, group_by.key.title())


@dataclass
class ReportContext:
    """Options for a single report run, after merging CLI flags and config."""

    from_period: Optional[str] = None
    to_period: Optional[str] = None
    group: str = "service"
    tag_key: Optional[str] = None
    metric: str = "net-amortized"
    top_n: int = 10
    output_format: str = "table"
    sort_by: str = "diff"
    threshold: float = 0.0
    min_cost: float = 0.0
    service_filter: Optional[str] = None
    profile: Optional[str] = None
    region: Optional[str] = None
    days: int = 7
    now: Optional[datetime] = None

    @classmethod
    def from_config(cls, config: Config, **overrides) -> "ReportContext":
        """Build a context from configuration, with non-None overrides applied."""
        context = cls(
            group=config.group_by,
            metric=config.metric,
            top_n=config.top_n,
            output_format=config.output_format,
            sort_by=config.sort_by,
            threshold=config.threshold,
            min_cost=config.min_cost,
            profile=config.default_profile,
            region=config.region,
            days=config.watch_days,
        )
        for name, value in overrides.items():
            if value is not None:
                setattr(context, name, value)
        return context


@dataclass
class ValidatedOptions:
    """Options resolved to their API and enum forms."""

    group_by: GroupBy
    metric: str
    output_format: OutputFormat
    sort_key: SortKey


ClientFactory = Callable[[Optional[str], Optional[str]], CostExplorerClient]


class ReportPipeline:
    """Builds comparison, top and trend reports from Cost Explorer data."""

    def __init__(self, client_factory: Optional[ClientFactory] = None):
        """
        Initialize report pipeline.

        Args:
            client_factory: Callable taking (profile, region) and returning a
                client; defaults to CostExplorerClient
        """
        self.logger = logging.getLogger(__name__)
        self.client_factory = client_factory or (
            lambda profile, region: CostExplorerClient(profile=profile, region=region)
        )

    def validate(self, context: ReportContext) -> ValidatedOptions:
        """Validate every user-supplied option before any API call is made."""
        group_by = parse_group_by(context.group, context.tag_key)
        metric = resolve_metric(context.metric)
        output_format = parse_output_format(context.output_format)
        sort_key = parse_sort_key(context.sort_by)

        validate_non_negative(context.top_n, "top")
        validate_non_negative(context.threshold, "threshold")
        validate_non_negative(context.min_cost, "min-cost")

        self.logger.debug(f"Using metric: {metric}")
        self.logger.debug(f"Grouping by: {group_by.type.value} {group_by.key}")
        return ValidatedOptions(group_by, metric, output_format, sort_key)

    def build_comparison(self, context: ReportContext) -> ComparisonResult:
        """Fetch both periods, compare, then sort, filter and limit."""
        from_period, to_period = resolve_comparison_periods(
            context.from_period, context.to_period, context.now
        )
        options = self.validate(context)

        self.logger.debug(f"From period: {from_period.start} to {from_period.end}")
        self.logger.debug(f"To period: {to_period.start} to {to_period.end}")

        client = self.client_factory(context.profile, context.region)
        from_costs = client.get_costs(
            from_period.start, from_period.end, options.group_by, options.metric,
            context.service_filter,
        )
        to_costs = client.get_costs(
            to_period.start, to_period.end, options.group_by, options.metric,
            context.service_filter,
        )

        result = compare(from_costs, to_costs, from_period, to_period)
        result = sort_result(result, options.sort_key)

        if context.threshold > 0:
            result = filter_result_by_threshold(result, context.threshold)
        if context.min_cost > 0:
            result = filter_result_by_min_cost(result, context.min_cost)

        self.logger.debug(f"Compared {len(result.items)} groups")
        return limit_result(result, context.top_n)

    def build_top(self, context: ReportContext) -> TopResult:
        """Fetch one period and rank its cost drivers."""
        period = resolve_top_period(context.from_period, context.now)
        options = self.validate(context)

        self.logger.debug(f"Period: {period.start} to {period.end}")

        client = self.client_factory(context.profile, context.region)
        costs = client.get_costs(
            period.start, period.end, options.group_by, options.metric,
            context.service_filter,
        )

        result = build_top(costs, period)
        if context.threshold > 0:
            result = filter_top_by_threshold(result, context.threshold)

        return limit_top(result, context.top_n)

    def build_trend(self, context: ReportContext) -> TrendResult:
        """Fetch daily costs for the last N days and compute day-over-day changes."""
        window = trend_window(context.days, context.now)
        metric = resolve_metric(context.metric)
        parse_output_format(context.output_format)

        self.logger.debug(f"Watch period: {window.start} to {window.end}")

        client = self.client_factory(context.profile, context.region)
        daily_costs = client.get_daily_costs(window.start, window.end, metric)

        return build_trend(daily_costs, window.start, window.end)
