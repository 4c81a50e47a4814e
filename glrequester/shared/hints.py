from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Hint:
    """Structured hint attached to requester errors.

    Attributes:
        title: Short title describing the hint.
        message: Main explanatory message.
        tips: Optional list of short actionable tips.
        code: Optional machine-readable code (e.g., "RATE_LIMIT").
    """

    title: str
    message: str
    tips: list[str] | None = None
    code: str | None = None


RATE_LIMIT_HIT = Hint(
    title="Rate limit reached",
    message="The server kept answering 429 Too Many Requests.",
    tips=[
        "Issue fewer concurrent requests",
        "Raise GLREQUESTER_MAX_ATTEMPTS or GLREQUESTER_RETRY_BASE_DELAY",
    ],
    code="RATE_LIMIT",
)

AUTH_REJECTED = Hint(
    title="Authentication rejected",
    message="The server refused the supplied token.",
    tips=[
        "Check that the token has not expired or been revoked",
        "Check the token scopes cover this endpoint",
    ],
    code="AUTH_REJECTED",
)

QUERY_TIMEOUT = Hint(
    title="Query timed out",
    message="The request did not complete within the transport timeout.",
    tips=["Raise GLREQUESTER_QUERY_TIMEOUT or pass a larger timeout"],
    code="QUERY_TIMEOUT",
)
