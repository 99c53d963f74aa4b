"""Custom exceptions and error handling for costdiff."""

from typing import Optional, List


class CostDiffError(Exception):
    """Base exception for costdiff errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize base exception.

        Args:
            message: Error message
            error_code: Optional error code for programmatic handling
            suggestions: Optional list of suggestions to fix the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.suggestions = suggestions or []


class InvalidDateFormatError(CostDiffError):
    """Exception raised when a period string is neither YYYY-MM nor YYYY-MM-DD."""

    def __init__(self, value: str, option: Optional[str] = None):
        self.value = value
        self.option = option

        prefix = f"invalid {option} date" if option else "invalid date"
        message = f"{prefix} '{value}': date must be YYYY-MM or YYYY-MM-DD format"
        suggestions = [
            "Use YYYY-MM for a full month (e.g. 2024-10)",
            "Use YYYY-MM-DD for a single day (e.g. 2024-10-15)",
        ]
        super().__init__(message, "INVALID_DATE_FORMAT", suggestions)


class InvalidRangeError(CostDiffError):
    """Exception raised when the from period does not precede the to period."""

    def __init__(self, from_start: str, to_start: str):
        self.from_start = from_start
        self.to_start = to_start

        message = f"--from date ({from_start}) must be before --to date ({to_start})"
        suggestions = [
            "Swap the --from and --to values",
            "Omit --from to compare against the previous month",
        ]
        super().__init__(message, "INVALID_RANGE", suggestions)


class InvalidGroupKeyError(CostDiffError):
    """Exception raised when the grouping selector is not recognized."""

    def __init__(self, message: str, group: Optional[str] = None):
        self.group = group

        suggestions = [
            "Valid groups: service, usage-type, region, account, tag",
            "Use --tag <key> (or -g tag:<key>) when grouping by tag",
        ]
        super().__init__(message, "INVALID_GROUP_KEY", suggestions)


class InvalidMetricError(CostDiffError):
    """Exception raised when the cost metric is not recognized."""

    def __init__(self, metric: str, valid_metrics: Optional[List[str]] = None):
        self.metric = metric
        self.valid_metrics = valid_metrics or []

        message = f"invalid metric: {metric}"
        suggestions = []
        if self.valid_metrics:
            suggestions.append(f"Valid options: {', '.join(self.valid_metrics)}")
        super().__init__(message, "INVALID_METRIC", suggestions)


class InvalidOutputFormatError(CostDiffError):
    """Exception raised when the render target is not recognized."""

    def __init__(self, output_format: str):
        self.output_format = output_format

        message = f"invalid output format: {output_format} (must be table|json|csv)"
        super().__init__(message, "INVALID_OUTPUT_FORMAT", ["Use --format table, json or csv"])


class ParameterValidationError(CostDiffError):
    """Exception raised when parameter validation fails."""

    def __init__(
        self, message: str = "Parameter validation failed", field: Optional[str] = None
    ):
        self.field = field

        suggestions = ["Run 'costdiff --help' to see valid option values"]
        if field:
            suggestions.append(f"Issue with field: {field}")

        super().__init__(message, "VALIDATION_ERROR", suggestions)


class ConfigurationError(CostDiffError):
    """Exception raised when configuration is invalid."""

    def __init__(
        self, message: str = "Configuration error", config_file: Optional[str] = None
    ):
        self.config_file = config_file

        suggestions = [
            "Check your configuration file syntax",
            "Verify all values are valid costdiff options",
        ]

        if config_file:
            suggestions.append(f"Configuration file: {config_file}")

        super().__init__(message, "CONFIGURATION_ERROR", suggestions)


class AWSCredentialsError(CostDiffError):
    """Exception raised when AWS credentials are invalid or missing."""

    def __init__(
        self,
        message: str = "AWS credentials not found",
        profile: Optional[str] = None,
    ):
        suggestions = [
            "Set AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY environment variables",
            "Configure the AWS credentials file (~/.aws/credentials)",
            "Use an IAM role when running on EC2/ECS/Lambda",
            "Use --profile to specify a named profile",
        ]

        if profile:
            message = f"AWS credentials for profile '{profile}' not found or invalid"
            suggestions.append(
                f"Run 'aws configure --profile {profile}' to set up the profile"
            )

        super().__init__(message, "AuthError", suggestions)
        self.profile = profile


class AWSPermissionsError(CostDiffError):
    """Exception raised when AWS permissions are insufficient."""

    def __init__(
        self,
        message: str = "Access denied",
        required_permissions: Optional[List[str]] = None,
    ):
        self.required_permissions = required_permissions or [
            "ce:GetCostAndUsage",
        ]

        suggestions = [
            "Ensure your IAM user/role has the following permissions:",
        ] + [f"  - {permission}" for permission in self.required_permissions]

        super().__init__(message, "AuthError", suggestions)


class CostExplorerNotEnabledError(CostDiffError):
    """Exception raised when Cost Explorer has not been enabled for the account."""

    def __init__(self, message: str = "AWS Cost Explorer is not enabled for this account"):
        suggestions = [
            "Go to AWS Console > Billing > Cost Explorer",
            "Click 'Enable Cost Explorer'",
            "Wait up to 24 hours for data to be available",
        ]
        super().__init__(message, "NotEnabled", suggestions)


class AWSAPIError(CostDiffError):
    """Exception raised when AWS API calls fail."""

    def __init__(
        self,
        message: str,
        aws_error_code: Optional[str] = None,
        aws_error_message: Optional[str] = None,
    ):
        self.aws_error_code = aws_error_code
        self.aws_error_message = aws_error_message

        if aws_error_code in THROTTLING_CODES:
            error_code = "RateLimited"
            suggestions = ["Please wait a moment and try again"]
        elif aws_error_code in INVALID_PARAMETER_CODES:
            error_code = "InvalidParameter"
            suggestions = ["Check your date range and grouping options"]
        else:
            error_code = "Other"
            suggestions = [
                "Check your AWS credentials and permissions",
                "Try a shorter date range to test connectivity",
            ]

        super().__init__(message, error_code, suggestions)


class NetworkError(CostDiffError):
    """Exception raised when the API cannot be reached in time."""

    def __init__(self, message: str = "AWS API request timed out"):
        suggestions = [
            "Check your network connection and try again",
            "Check if you're behind a corporate firewall or proxy",
        ]

        super().__init__(message, "Timeout", suggestions)


ACCESS_DENIED_CODES = ["AccessDenied", "AccessDeniedException", "UnauthorizedOperation"]
CREDENTIALS_CODES = [
    "InvalidClientTokenId",
    "UnrecognizedClientException",
    "ExpiredToken",
    "ExpiredTokenException",
]
NOT_ENABLED_CODES = ["OptInRequired"]
INVALID_PARAMETER_CODES = ["InvalidParameterValue", "ValidationException"]
THROTTLING_CODES = ["ThrottlingException", "Throttling", "RequestLimitExceeded"]


def format_error_message(error: CostDiffError, include_suggestions: bool = True) -> str:
    """
    Format an error message for display to the user.

    Args:
        error: The error to format
        include_suggestions: Whether to include suggestions in the output

    Returns:
        Formatted error message string
    """
    message = f"Error: {error.message}"

    if include_suggestions and error.suggestions:
        message += "\n"
        for suggestion in error.suggestions:
            message += f"\n  {suggestion}"

    return message


def handle_aws_client_error(client_error, operation: str = "AWS operation") -> CostDiffError:
    """
    Convert a botocore ClientError to the matching CostDiffError.

    Args:
        client_error: The botocore ClientError
        operation: Description of the operation that failed

    Returns:
        Appropriate CostDiffError subclass
    """
    error_code = client_error.response.get("Error", {}).get("Code", "")
    error_message = client_error.response.get("Error", {}).get("Message", "")

    if error_code in ACCESS_DENIED_CODES:
        return AWSPermissionsError(f"Access denied during {operation}: {error_message}")
    elif error_code in CREDENTIALS_CODES:
        return AWSCredentialsError(f"Invalid AWS credentials: {error_message}")
    elif error_code in NOT_ENABLED_CODES or "has not been enabled" in error_message:
        return CostExplorerNotEnabledError()
    elif error_code in THROTTLING_CODES:
        return AWSAPIError(
            "AWS API rate limit exceeded",
            aws_error_code=error_code,
            aws_error_message=error_message,
        )
    elif error_code in INVALID_PARAMETER_CODES:
        return AWSAPIError(
            f"invalid parameter: {error_message}",
            aws_error_code=error_code,
            aws_error_message=error_message,
        )
    else:
        return AWSAPIError(
            f"AWS API error during {operation} ({error_code}): {error_message}",
            aws_error_code=error_code,
            aws_error_message=error_message,
        )


def handle_network_error(network_error, operation: str = "network operation") -> NetworkError:
    """Convert network-related exceptions to NetworkError."""
    return NetworkError(f"AWS API request timed out during {operation}: {network_error}")
