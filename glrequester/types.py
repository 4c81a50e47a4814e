from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

AuthHeaderValue = str | Callable[[], str]


class RetryPolicy(BaseModel):
    """Retry behaviour of the request executor.

    Delays grow exponentially with no jitter: ``base_delay * backoff_factor ** i``
    seconds after the ``i``-th failed attempt (100ms, 200ms, 400ms, ... with the
    defaults).
    """

    model_config = ConfigDict(frozen=True)

    retry_status_codes: frozenset[int] = frozenset({429, 502})
    max_attempts: int = Field(default=10, ge=1)
    base_delay: float = Field(default=0.1, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the zero-based ``attempt`` before retrying."""
        return self.base_delay * (self.backoff_factor**attempt)


class ResourceOptions(BaseModel):
    """Defaults shared by every request issued on behalf of one API resource."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    auth_headers: dict[str, AuthHeaderValue] = Field(default_factory=dict)
    reject_unauthorized: bool | None = None
    query_timeout: float | None = None

    @classmethod
    def from_token(
        cls,
        url: str,
        *,
        token: AuthHeaderValue | None = None,
        oauth_token: AuthHeaderValue | None = None,
        job_token: AuthHeaderValue | None = None,
        **kwargs: Any,
    ) -> ResourceOptions:
        """Build resource options with the auth header matching the token kind."""
        auth_headers: dict[str, AuthHeaderValue] = {}
        if oauth_token is not None:
            auth_headers["authorization"] = _bearer(oauth_token)
        elif job_token is not None:
            auth_headers["job-token"] = job_token
        elif token is not None:
            auth_headers["private-token"] = token
        return cls(url=url, auth_headers=auth_headers, **kwargs)


def _bearer(token: AuthHeaderValue) -> AuthHeaderValue:
    if callable(token):
        return lambda: f"Bearer {token()}"
    return f"Bearer {token}"


class RequestOptions(BaseModel):
    """Final configuration of a single request, as handed to the executor."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    verify: bool | None = None
    as_stream: bool = False
    prefix_url: str | None = None
    search_params: str | None = None
    timeout: float | None = None


class ResolvedResponse(BaseModel):
    """Outcome of a successful call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    body: Any = None
    headers: Mapping[str, str] = Field(default_factory=dict)
    status: int
