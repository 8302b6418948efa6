"""
Watchdog Exceptions
"""

from typing import Optional


class WatchdogError(Exception):
    """Base class for all watchdog errors."""


class ConfigurationError(WatchdogError):
    """Credentials or configuration could not be resolved."""


class FeedError(WatchdogError):
    """The status feed could not be fetched or parsed."""


class APIError(WatchdogError):
    """The IONOS Cloud API returned an unexpected response."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class HealthCheckError(WatchdogError):
    """A Kubernetes list call failed and the health check was aborted."""
