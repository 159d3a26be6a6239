"""Custom exception hierarchy for searchops.

These exceptions allow callers to discriminate failure categories (no response
at all, every host down, an error response, an unreadable response) and handle
them appropriately while preserving the original context.
"""

from __future__ import annotations

from typing import Any, List, Optional


class SearchOpsError(Exception):
    """Base class for all searchops exceptions."""


class ConfigError(SearchOpsError):
    """Raised when configuration loading or validation fails."""


class TransportFailure(SearchOpsError):
    """No response was obtained from a host (connection refused, DNS, timeout...)."""

    def __init__(self, host: str, cause: BaseException) -> None:
        super().__init__(f"{host}: {type(cause).__name__}: {cause}")
        self.host = host
        self.cause = cause


class HostsExhausted(SearchOpsError):
    """Every candidate host was tried and none produced a response."""

    def __init__(self, attempts: Optional[List[TransportFailure]] = None) -> None:
        self.attempts: List[TransportFailure] = list(attempts or [])
        if self.attempts:
            tried = ", ".join(a.host for a in self.attempts)
            msg = f"Exhausted hosts after {len(self.attempts)} attempt(s): {tried}"
        else:
            msg = "Exhausted hosts: no healthy host available"
        super().__init__(msg)


class ApplicationError(SearchOpsError):
    """A response was received but its status reports an error (>= 400)."""

    def __init__(self, host: str, status: int, body: Any = None) -> None:
        super().__init__(f"{host} answered HTTP {status}")
        self.host = host
        self.status = status
        self.body = body


class ProtocolError(SearchOpsError):
    """A response body was malformed or did not have the expected shape."""
