"""Requester exception system.

Every failure raised by the request executor derives from ``RequesterError``
and carries a list of structured hints for the caller.

Example:
    try:
        await request_handler("projects/1", options)
    except RequestFailedError as e:
        print(e.message, e.cause.description, e.cause.response.headers)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from glrequester.shared.hints import AUTH_REJECTED, QUERY_TIMEOUT, RATE_LIMIT_HIT, Hint

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)


class RequesterError(Exception):
    """Base exception class for all requester errors."""

    # Subclasses can override this class attribute
    default_hints: ClassVar[list[Hint]] = []

    def __init__(self, message: str = "", *, hints: list[Hint] | None = None) -> None:
        super().__init__(message)
        self.message = message
        # If hints not provided, use defaults defined by subclass
        self.hints: list[Hint] = hints if hints is not None else list(self.default_hints)

    def __str__(self) -> str:
        return self.message


class TransportTimeoutError(RequesterError):
    """The network call itself timed out. Never retried."""

    default_hints: ClassVar[list[Hint]] = [QUERY_TIMEOUT]

    def __init__(self, message: str = "Query timeout was reached", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


@dataclass
class RequestFailureCause:
    """What went wrong with a failed response.

    Attributes:
        description: The server's error description, when one could be extracted.
        response: The raw response, kept for introspection (e.g. re-reading headers).
    """

    description: str | None
    response: httpx.Response


class RequestFailedError(RequesterError):
    """The server answered with a non-ok status outside the retryable set."""

    def __init__(
        self,
        message: str,
        cause: RequestFailureCause,
        *,
        hints: list[Hint] | None = None,
    ) -> None:
        self.cause = cause
        self.status_code = cause.response.status_code
        if hints is None and self.status_code in (401, 403):
            hints = [AUTH_REJECTED]
        super().__init__(message, hints=hints)

    def __str__(self) -> str:
        parts = [self.message, f"Status: {self.status_code}"]
        if self.cause.description:
            parts.append(f"Description: {self.cause.description}")
        return " | ".join(parts)


class RetryExhaustedError(RequesterError):
    """Every attempt ended with a retryable status."""

    def __init__(
        self,
        message: str = "Could not successfully complete this request",
        last_status: int | None = None,
        *,
        hints: list[Hint] | None = None,
    ) -> None:
        self.last_status = last_status
        if hints is None and last_status == 429:
            logger.debug("Attaching RATE_LIMIT hint to exhausted request")
            hints = [RATE_LIMIT_HIT]
        super().__init__(message, hints=hints)
