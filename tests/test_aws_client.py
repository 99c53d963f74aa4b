"""Tests for the Cost Explorer client."""

import pytest
from unittest.mock import Mock, patch
from datetime import date
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    ProfileNotFound,
    ReadTimeoutError,
)

from costdiff.aws_client import CostExplorerClient
from costdiff.models import DailyCost, GroupBy, GroupType, GROUP_BY_SERVICE
from costdiff.exceptions import (
    AWSAPIError,
    AWSCredentialsError,
    AWSPermissionsError,
    CostExplorerNotEnabledError,
    NetworkError,
)


METRIC = "NetAmortizedCost"


def group(name, amount):
    return {"Keys": [name], "Metrics": {METRIC: {"Amount": str(amount), "Unit": "USD"}}}


class TestCostExplorerClient:
    """Test cases for CostExplorerClient."""

    def setup_method(self):
        """Set up test fixtures."""
        self.session_patcher = patch("boto3.Session")
        self.mock_session_class = self.session_patcher.start()
        self.mock_session = Mock()
        self.mock_ce = Mock()
        self.mock_session.client.return_value = self.mock_ce
        self.mock_session_class.return_value = self.mock_session

    def teardown_method(self):
        self.session_patcher.stop()

    def test_default_session_and_region(self):
        client = CostExplorerClient()

        self.mock_session_class.assert_called_once_with()
        args, kwargs = self.mock_session.client.call_args
        assert args == ("ce",)
        assert kwargs["region_name"] == "us-east-1"
        assert client.region == "us-east-1"

    def test_named_profile(self):
        CostExplorerClient(profile="prod", region="eu-west-1")

        self.mock_session_class.assert_called_once_with(profile_name="prod")
        assert self.mock_session.client.call_args[1]["region_name"] == "eu-west-1"

    def test_profile_not_found(self):
        self.mock_session_class.side_effect = ProfileNotFound(profile="missing")

        with pytest.raises(AWSCredentialsError) as exc_info:
            CostExplorerClient(profile="missing")
        assert "missing" in exc_info.value.message

    def test_get_costs_request(self):
        self.mock_ce.get_cost_and_usage.return_value = {"ResultsByTime": []}
        client = CostExplorerClient()

        client.get_costs(date(2024, 12, 1), date(2025, 1, 1), GROUP_BY_SERVICE, METRIC)

        self.mock_ce.get_cost_and_usage.assert_called_once_with(
            TimePeriod={"Start": "2024-12-01", "End": "2025-01-01"},
            Granularity="MONTHLY",
            Metrics=[METRIC],
            GroupBy=[{"Type": "DIMENSION", "Key": "SERVICE"}],
        )

    def test_get_costs_with_service_filter(self):
        self.mock_ce.get_cost_and_usage.return_value = {"ResultsByTime": []}
        client = CostExplorerClient()

        client.get_costs(
            date(2024, 12, 1), date(2025, 1, 1), GroupBy(GroupType.DIMENSION, "REGION"),
            METRIC, service_filter="Amazon Simple Storage Service",
        )

        kwargs = self.mock_ce.get_cost_and_usage.call_args[1]
        assert kwargs["Filter"] == {
            "Dimensions": {"Key": "SERVICE", "Values": ["Amazon Simple Storage Service"]}
        }

    def test_get_costs_accumulates_across_time_buckets(self):
        """Costs for the same group in several months are summed."""
        self.mock_ce.get_cost_and_usage.return_value = {
            "ResultsByTime": [
                {"Groups": [group("EC2", 100.5), group("S3", 10)]},
                {"Groups": [group("EC2", 50.25)]},
            ]
        }
        client = CostExplorerClient()

        costs = client.get_costs(date(2024, 10, 1), date(2024, 12, 1), GROUP_BY_SERVICE, METRIC)

        assert costs == {"EC2": pytest.approx(150.75), "S3": pytest.approx(10.0)}

    def test_get_costs_group_names(self):
        """Missing keys become Unknown and empty keys become Other."""
        self.mock_ce.get_cost_and_usage.return_value = {
            "ResultsByTime": [
                {
                    "Groups": [
                        {"Keys": [], "Metrics": {METRIC: {"Amount": "1"}}},
                        {"Keys": [""], "Metrics": {METRIC: {"Amount": "2"}}},
                    ]
                }
            ]
        }
        client = CostExplorerClient()

        costs = client.get_costs(date(2024, 12, 1), date(2025, 1, 1), GROUP_BY_SERVICE, METRIC)

        assert costs == {"Unknown": 1.0, "Other": 2.0}

    def test_get_costs_malformed_amount(self):
        self.mock_ce.get_cost_and_usage.return_value = {
            "ResultsByTime": [
                {
                    "Groups": [
                        {"Keys": ["EC2"], "Metrics": {METRIC: {"Amount": "n/a"}}},
                        {"Keys": ["S3"], "Metrics": {}},
                    ]
                }
            ]
        }
        client = CostExplorerClient()

        costs = client.get_costs(date(2024, 12, 1), date(2025, 1, 1), GROUP_BY_SERVICE, METRIC)

        assert costs == {"EC2": 0.0, "S3": 0.0}

    def test_get_daily_costs(self):
        self.mock_ce.get_cost_and_usage.return_value = {
            "ResultsByTime": [
                {"TimePeriod": {"Start": "2024-12-11"}, "Total": {METRIC: {"Amount": "10.5"}}, "Groups": []},
                {"TimePeriod": {"Start": "2024-12-12"}, "Total": {METRIC: {"Amount": "12"}}, "Groups": []},
                {"TimePeriod": {"Start": "garbage"}, "Total": {METRIC: {"Amount": "99"}}},
            ]
        }
        client = CostExplorerClient()

        daily = client.get_daily_costs(date(2024, 12, 11), date(2024, 12, 13), METRIC)

        assert daily == [
            DailyCost(date(2024, 12, 11), 10.5),
            DailyCost(date(2024, 12, 12), 12.0),
        ]
        assert self.mock_ce.get_cost_and_usage.call_args[1]["Granularity"] == "DAILY"
        assert "GroupBy" not in self.mock_ce.get_cost_and_usage.call_args[1]

    def test_get_total_cost(self):
        self.mock_ce.get_cost_and_usage.return_value = {
            "ResultsByTime": [
                {"Total": {METRIC: {"Amount": "100"}}},
                {"Total": {METRIC: {"Amount": "25.5"}}},
            ]
        }
        client = CostExplorerClient()

        assert client.get_total_cost(date(2024, 11, 1), date(2025, 1, 1), METRIC) == pytest.approx(125.5)

    def test_no_credentials(self):
        self.mock_ce.get_cost_and_usage.side_effect = NoCredentialsError()
        client = CostExplorerClient(profile="dev")

        with pytest.raises(AWSCredentialsError) as exc_info:
            client.get_costs(date(2024, 12, 1), date(2025, 1, 1), GROUP_BY_SERVICE, METRIC)
        assert exc_info.value.profile == "dev"

    @pytest.mark.parametrize(
        "code,message,expected",
        [
            ("AccessDeniedException", "no ce access", AWSPermissionsError),
            ("OptInRequired", "", CostExplorerNotEnabledError),
            ("ThrottlingException", "Rate exceeded", AWSAPIError),
        ],
    )
    def test_client_errors(self, code, message, expected):
        self.mock_ce.get_cost_and_usage.side_effect = ClientError(
            {"Error": {"Code": code, "Message": message}}, "GetCostAndUsage"
        )
        client = CostExplorerClient()

        with pytest.raises(expected):
            client.get_costs(date(2024, 12, 1), date(2025, 1, 1), GROUP_BY_SERVICE, METRIC)

    @pytest.mark.parametrize(
        "error",
        [
            EndpointConnectionError(endpoint_url="https://ce.us-east-1.amazonaws.com"),
            ReadTimeoutError(endpoint_url="https://ce.us-east-1.amazonaws.com"),
        ],
    )
    def test_network_errors(self, error):
        self.mock_ce.get_cost_and_usage.side_effect = error
        client = CostExplorerClient()

        with pytest.raises(NetworkError):
            client.get_daily_costs(date(2024, 12, 11), date(2024, 12, 18), METRIC)
