"""Exception types raised by the economy client."""

from typing import Any, Optional


class EconomyError(Exception):
    """Base class for every error this package raises."""


class InvalidParameter(EconomyError, ValueError):
    """A request field is outside its accepted domain.

    Raised synchronously, before any network traffic, and never routed
    through a callback or Future.
    """

    def __init__(self, field: str, value: Any, expected: str):
        self.field = field
        self.value = value
        self.expected = expected
        super().__init__(
            f"Invalid value for '{field}': {value!r} (expected {expected})"
        )


class UpstreamError(EconomyError):
    """The request failed on the wire or the service answered with an error.

    Covers connection failures, non-2xx statuses, bodies that are not JSON
    or lack a `response` object, and `response.success == 0` replies.
    """

    def __init__(self, message: str, url: str = "",
                 status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)
