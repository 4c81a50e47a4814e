"""glrequester.

HTTP transport layer for generated REST API clients.
"""

from __future__ import annotations

from .requester import Requester, create_requester_fn, requester_fn
from .shared import (
    RequestFailedError,
    RequestFailureCause,
    RequesterError,
    RetryExhaustedError,
    TransportTimeoutError,
    base_options_handler,
    default_options_handler,
    request_handler,
    request_handler_sync,
)
from .types import RequestOptions, ResolvedResponse, ResourceOptions, RetryPolicy

__all__ = [
    "RequestFailedError",
    "RequestFailureCause",
    "RequestOptions",
    "Requester",
    "RequesterError",
    "ResolvedResponse",
    "ResourceOptions",
    "RetryExhaustedError",
    "RetryPolicy",
    "TransportTimeoutError",
    "base_options_handler",
    "create_requester_fn",
    "default_options_handler",
    "request_handler",
    "request_handler_sync",
    "requester_fn",
]

from .version import __version__  # noqa: E402
