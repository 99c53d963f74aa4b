"""AWS Cost Explorer client for costdiff."""

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
    ProfileNotFound,
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
)

from .models import DailyCost, GroupBy, ISO_DATE_FORMAT
from .exceptions import (
    AWSCredentialsError,
    handle_aws_client_error,
    handle_network_error,
)


# Cost Explorer is a global service but the client still needs a region
DEFAULT_REGION = "us-east-1"

# Overall budget for a single API call, split between connect and read
DEFAULT_API_TIMEOUT = 120

UNKNOWN_GROUP = "Unknown"
OTHER_GROUP = "Other"


class CostExplorerClient:
    """Client for AWS Cost Explorer API operations."""

    def __init__(
        self,
        profile: Optional[str] = None,
        region: Optional[str] = None,
        timeout: int = DEFAULT_API_TIMEOUT,
    ):
        """
        Initialize the Cost Explorer client.

        Args:
            profile: Named AWS profile, or None for the default credential chain
            region: AWS region for the client (defaults to us-east-1)
            timeout: Seconds allowed for connecting plus reading a response
        """
        self.logger = logging.getLogger(__name__)
        self.profile = profile
        self.region = region or DEFAULT_REGION

        try:
            self.session = (
                boto3.Session(profile_name=profile) if profile else boto3.Session()
            )
        except ProfileNotFound:
            raise AWSCredentialsError(f"AWS profile '{profile}' not found", profile=profile)

        self.client = self._create_client(self.region, timeout)

    def _create_client(self, region: str, timeout: int):
        """Create the boto3 ce client with retry and timeout configuration."""
        config = Config(
            retries={"max_attempts": 3, "mode": "adaptive"},
            connect_timeout=timeout // 2,
            read_timeout=timeout - timeout // 2,
        )
        return self.session.client("ce", region_name=region, config=config)

    def get_costs(
        self,
        start: date,
        end: date,
        group_by: GroupBy,
        metric: str,
        service_filter: Optional[str] = None,
    ) -> Dict[str, float]:
        """
        Fetch costs for [start, end) summed per group.

        Args:
            start: First day of the period
            end: Exclusive end of the period
            group_by: Dimension or tag to group by
            metric: Cost Explorer metric name (e.g. NetAmortizedCost)
            service_filter: Optional SERVICE dimension value to restrict to

        Returns:
            Mapping of group name to accumulated cost
        """
        request = self._build_request(start, end, "MONTHLY", metric)
        request["GroupBy"] = group_by.to_request()
        if service_filter:
            request["Filter"] = {
                "Dimensions": {"Key": "SERVICE", "Values": [service_filter]}
            }

        response = self._call(request, "retrieving cost data")

        costs: Dict[str, float] = {}
        for result_item in response.get("ResultsByTime", []):
            for group in result_item.get("Groups", []):
                name = _group_name(group.get("Keys", []))
                amount = _parse_amount(group.get("Metrics", {}).get(metric))
                costs[name] = costs.get(name, 0.0) + amount

        self.logger.debug(f"Fetched {len(costs)} groups for {start} to {end}")
        return costs

    def get_daily_costs(self, start: date, end: date, metric: str) -> List[DailyCost]:
        """
        Fetch one cost per day for [start, end), in the order the API returns them.

        Args:
            start: First day of the window
            end: Exclusive end of the window
            metric: Cost Explorer metric name

        Returns:
            List of DailyCost in ascending date order
        """
        request = self._build_request(start, end, "DAILY", metric)
        response = self._call(request, "retrieving daily cost data")

        daily_costs = []
        for result_item in response.get("ResultsByTime", []):
            start_text = result_item.get("TimePeriod", {}).get("Start", "")
            try:
                day = datetime.strptime(start_text, ISO_DATE_FORMAT).date()
            except ValueError:
                self.logger.warning(f"Skipping result with unparsable date: {start_text!r}")
                continue

            groups = result_item.get("Groups", [])
            if groups:
                cost = sum(
                    _parse_amount(group.get("Metrics", {}).get(metric)) for group in groups
                )
            else:
                cost = _parse_amount(result_item.get("Total", {}).get(metric))

            daily_costs.append(DailyCost(date=day, cost=cost))

        return daily_costs

    def get_total_cost(self, start: date, end: date, metric: str) -> float:
        """Fetch the ungrouped total cost for [start, end)."""
        request = self._build_request(start, end, "MONTHLY", metric)
        response = self._call(request, "retrieving total cost")

        return sum(
            _parse_amount(result_item.get("Total", {}).get(metric))
            for result_item in response.get("ResultsByTime", [])
        )

    def _build_request(
        self, start: date, end: date, granularity: str, metric: str
    ) -> Dict[str, Any]:
        return {
            "TimePeriod": {
                "Start": start.strftime(ISO_DATE_FORMAT),
                "End": end.strftime(ISO_DATE_FORMAT),
            },
            "Granularity": granularity,
            "Metrics": [metric],
        }

    def _call(self, request: Dict[str, Any], operation: str) -> Dict[str, Any]:
        """Call GetCostAndUsage, translating botocore failures."""
        self.logger.debug(f"GetCostAndUsage request: {request}")

        try:
            return self.client.get_cost_and_usage(**request)
        except (NoCredentialsError, PartialCredentialsError):
            raise AWSCredentialsError(profile=self.profile)
        except ClientError as e:
            raise handle_aws_client_error(e, operation)
        except (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError) as e:
            raise handle_network_error(e, operation)


def _group_name(keys: List[str]) -> str:
    if not keys:
        return UNKNOWN_GROUP
    return keys[0] or OTHER_GROUP


def _parse_amount(metric_value: Optional[Dict[str, Any]]) -> float:
    """Parse a MetricValue amount, treating missing or malformed values as zero."""
    if not metric_value or metric_value.get("Amount") is None:
        return 0.0
    try:
        return float(metric_value["Amount"])
    except (TypeError, ValueError):
        return 0.0
