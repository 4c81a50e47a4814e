"""
Option resolution for requests.

Turns resource-level defaults plus per-request overrides into the final
``RequestOptions`` consumed by the request executor.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode, urlsplit

import httpx

from glrequester.settings import settings
from glrequester.types import RequestOptions, ResourceOptions

logger = logging.getLogger(__name__)


def _flatten_query(prefix: str, value: Any) -> list[tuple[str, str]]:
    if value is None:
        return []
    if isinstance(value, bool):
        return [(prefix, "true" if value else "false")]
    if isinstance(value, Mapping):
        pairs: list[tuple[str, str]] = []
        for key, sub in value.items():
            pairs.extend(_flatten_query(f"{prefix}[{key}]", sub))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for item in value:
            pairs.extend(_flatten_query(f"{prefix}[]", item))
        return pairs
    return [(prefix, str(value))]


def format_query(params: Mapping[str, Any] | str | None) -> str:
    """Format query parameters as a query string.

    Lists use the ``key[]=value`` form and nested mappings ``key[sub]=value``.
    ``None`` values are dropped and strings are returned unchanged.
    """
    if not params:
        return ""
    if isinstance(params, str):
        return params

    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        pairs.extend(_flatten_query(str(key), value))
    return urlencode(pairs)


def base_options_handler(
    resource_options: ResourceOptions,
    request_options: Mapping[str, Any] | None = None,
) -> RequestOptions:
    """
    Build request options from resource defaults and per-request overrides.

    Args:
        resource_options: Defaults shared by every request of the resource
        request_options: Per-request values. Recognised keys are ``method``,
            ``headers``, ``body``, ``search_params``, ``sudo``, ``as_stream``
            and ``timeout``.

    Returns:
        RequestOptions: A new options object; neither input is modified.
    """
    request_options = request_options or {}

    # Header names are case-insensitive; later sources replace earlier ones
    headers = httpx.Headers(resource_options.headers)
    headers.update(request_options.get("headers") or {})

    sudo = request_options.get("sudo")
    if sudo:
        headers["sudo"] = str(sudo)

    body = request_options.get("body")
    if isinstance(body, (Mapping, list)):
        body = json.dumps(body)
        headers["content-type"] = "application/json"

    # Only the first auth header is used
    if resource_options.auth_headers:
        name, value = next(iter(resource_options.auth_headers.items()))
        headers[name] = value() if callable(value) else value

    timeout = request_options.get("timeout")
    if timeout is None:
        timeout = resource_options.query_timeout

    return RequestOptions(
        method=str(request_options.get("method") or "GET").upper(),
        headers=dict(headers),
        body=body,
        as_stream=bool(request_options.get("as_stream", False)),
        prefix_url=resource_options.url,
        search_params=format_query(request_options.get("search_params")) or None,
        timeout=timeout,
    )


def default_options_handler(
    resource_options: ResourceOptions,
    request_options: Mapping[str, Any] | None = None,
    *,
    supports_custom_agents: bool | None = None,
) -> RequestOptions:
    """
    Resolve the final options of a request, including TLS verification.

    Certificate verification is disabled for the call only when the resource
    URL is ``https``, the resource sets ``reject_unauthorized=False`` and the
    host supports custom transport agents. When it does not, the setting is
    ignored without error since the host owns certificate handling.

    Args:
        resource_options: Defaults shared by every request of the resource
        request_options: Per-request overrides, see ``base_options_handler``
        supports_custom_agents: Host capability; defaults to
            ``settings.supports_custom_agents``

    Returns:
        RequestOptions: The resolved options
    """
    options = base_options_handler(resource_options, request_options)

    if supports_custom_agents is None:
        supports_custom_agents = settings.supports_custom_agents

    if (
        urlsplit(resource_options.url).scheme == "https"
        and resource_options.reject_unauthorized is False
    ):
        if supports_custom_agents:
            options = options.model_copy(update={"verify": False})
        else:
            logger.debug("Ignoring reject_unauthorized=False: host does not support custom agents")

    return options
