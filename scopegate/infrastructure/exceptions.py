"""Infrastructure exceptions for calls to the console identity provider.

Console errors extend ScopeGateException so presentation can map them
to HTTP responses consistently.
"""

from scopegate.domain.exceptions import ScopeGateException


class ConsoleApiException(ScopeGateException):
    """The console answered with an unexpected status."""

    def __init__(self, message: str, status_code: int, error: str | None = None) -> None:
        super().__init__(
            message,
            "CONSOLE_API_ERROR",
            {"status_code": status_code, "error": error},
        )
        self.status_code = status_code


class ConsoleUnavailableException(ScopeGateException):
    """The console could not be reached (connect error, timeout, 5xx)."""

    def __init__(self, reason: str) -> None:
        super().__init__(
            "Console is unavailable",
            "CONSOLE_UNAVAILABLE",
            {"reason": reason},
        )
