"""Exceptions raised across the planner."""


class PlannerError(Exception):
    """Base exception for planner errors."""


class ParameterError(PlannerError):
    """Raised when request parameters are missing or invalid."""


class ConfigurationError(PlannerError):
    """Raised when required configuration (such as the NS API key) is missing."""


class UpstreamError(PlannerError):
    """Raised when an upstream API call fails."""


class UpstreamTimeout(UpstreamError):
    """Raised when an upstream API call does not answer in time."""


class UpstreamHTTPError(UpstreamError):
    """Raised when an upstream API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MalformedUpstreamData(UpstreamError):
    """Raised when an upstream API answers with something that is not the expected JSON."""
