"""Shared request machinery: option resolution, execution and errors."""

from __future__ import annotations

from .exceptions import (
    RequestFailedError,
    RequestFailureCause,
    RequesterError,
    RetryExhaustedError,
    TransportTimeoutError,
)
from .options import base_options_handler, default_options_handler, format_query
from .requests import request_handler, request_handler_sync

__all__ = [
    "RequestFailedError",
    "RequestFailureCause",
    "RequesterError",
    "RetryExhaustedError",
    "TransportTimeoutError",
    "base_options_handler",
    "default_options_handler",
    "format_query",
    "request_handler",
    "request_handler_sync",
]
