"""Validation of grouping, metric, sort and output options."""

from typing import Dict, Optional

from .models import (
    GroupBy,
    GroupType,
    OutputFormat,
    SortKey,
    GROUP_BY_SERVICE,
    GROUP_BY_USAGE_TYPE,
    GROUP_BY_REGION,
    GROUP_BY_ACCOUNT,
)
from .exceptions import (
    InvalidGroupKeyError,
    InvalidMetricError,
    InvalidOutputFormatError,
    ParameterValidationError,
)


# User-facing metric names mapped to Cost Explorer metric names
METRICS: Dict[str, str] = {
    "net-amortized": "NetAmortizedCost",
    "amortized": "AmortizedCost",
    "unblended": "UnblendedCost",
    "blended": "BlendedCost",
    "net-unblended": "NetUnblendedCost",
    "normalized": "NormalizedUsageAmount",
    "usage-quantity": "UsageQuantity",
}

GROUPS: Dict[str, GroupBy] = {
    "service": GROUP_BY_SERVICE,
    "usage-type": GROUP_BY_USAGE_TYPE,
    "region": GROUP_BY_REGION,
    "account": GROUP_BY_ACCOUNT,
}

TAG_GROUP = "tag"
TAG_PREFIX = "tag:"


def parse_group_by(group: str, tag_key: Optional[str] = None) -> GroupBy:
    """
    Resolve a grouping selector to a Cost Explorer group definition.

    Args:
        group: service, usage-type, region, account, tag or tag:<key>
        tag_key: Tag key, required when group is plain "tag"

    Returns:
        GroupBy for the selector

    Raises:
        InvalidGroupKeyError: For unknown selectors or a tag group without a key
    """
    if group in GROUPS:
        return GROUPS[group]

    if group == TAG_GROUP or group.startswith(TAG_PREFIX):
        key = group[len(TAG_PREFIX):] if group.startswith(TAG_PREFIX) else ""
        key = key or (tag_key or "")
        if not key.strip():
            raise InvalidGroupKeyError("--tag is required when grouping by tag", group)
        return GroupBy(GroupType.TAG, key.strip())

    raise InvalidGroupKeyError(
        f"invalid group: {group} (must be service|usage-type|tag|region|account)", group
    )


def resolve_metric(metric: str) -> str:
    """
    Convert a user-facing metric name to the Cost Explorer metric name.

    Matching is exact and case-sensitive.

    Raises:
        InvalidMetricError: If the metric is not recognized
    """
    if metric in METRICS:
        return METRICS[metric]
    raise InvalidMetricError(metric, list(METRICS))


def parse_output_format(value: str) -> OutputFormat:
    """Resolve a render target name, raising InvalidOutputFormatError if unknown."""
    try:
        return OutputFormat(value)
    except ValueError:
        raise InvalidOutputFormatError(value)


def parse_sort_key(value: str) -> SortKey:
    """Resolve a sort option name."""
    try:
        return SortKey(value)
    except ValueError:
        raise ParameterValidationError(
            f"invalid sort: {value} (must be diff|diff-pct|cost|name)", field="sort"
        )


def validate_non_negative(value: float, field: str) -> None:
    if value < 0:
        raise ParameterValidationError(f"--{field} must not be negative", field=field)
