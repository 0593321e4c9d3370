"""Exception types raised by gojobs components"""

from typing import Optional


class GoJobsError(Exception):
    """Base class for all gojobs errors"""


class ConfigurationError(GoJobsError):
    """Required configuration (API URL, API key, ...) is missing or invalid"""


class UpstreamError(GoJobsError):
    """
    The external jobs API could not be reached or answered with a non-2xx status

    Attributes:
        status_code: HTTP status returned by the API, None for transport failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(GoJobsError):
    """The external jobs API returned a body that is not valid JSON"""


class AuthorizationError(GoJobsError):
    """A shared secret on an administrative operation was missing or wrong"""
