"""
HTTP request executor.

Builds the target URL, performs the call with bounded retries on transient
statuses and decodes the body according to its content type.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any, NoReturn
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from glrequester.settings import settings
from glrequester.shared.exceptions import (
    RequestFailedError,
    RequestFailureCause,
    RetryExhaustedError,
    TransportTimeoutError,
)
from glrequester.types import RequestOptions, ResolvedResponse, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

# Set up logger
logger = logging.getLogger("glrequester.http")


def build_url(endpoint: str, prefix_url: str | None = None, search_params: str | None = None) -> str:
    """Resolve ``endpoint`` against ``prefix_url`` and set the query string.

    The prefix is treated as a directory: ``http://h/projects`` + ``1/x`` gives
    ``http://h/projects/1/x``. ``search_params`` replaces any query already
    present in the resolved URL.
    """
    url = endpoint
    if prefix_url:
        base = prefix_url if prefix_url.endswith("/") else f"{prefix_url}/"
        url = urljoin(base, endpoint)

    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=search_params or ""))


def get_conditional_mode(endpoint: str) -> str | None:
    """Return the request mode for ``endpoint``; ``None`` is the default cors mode."""
    if "repository/archive" in endpoint:
        return "same-origin"
    return None


def process_body(response: httpx.Response) -> Any:
    """Decode a read response body based on its content type."""
    # Drop parameters such as charset
    content_type = response.headers.get("content-type", "").split(";")[0].strip()

    if content_type == "application/json":
        body = response.json() if response.content else None
        # Falsy scalars (null, false, 0, "") collapse to an empty object
        if body in (None, False, 0, ""):
            return {}
        return body

    if content_type.startswith("text/"):
        return response.text

    return response.content


def parse_response(response: httpx.Response) -> ResolvedResponse:
    """Build the result of a successful, fully read response."""
    body = None if response.status_code == 204 else process_body(response)
    return ResolvedResponse(body=body, headers=dict(response.headers), status=response.status_code)


def throw_failed_request_error(response: httpx.Response) -> NoReturn:
    """
    Raise a ``RequestFailedError`` describing a failed, fully read response.

    Raises:
        RequestFailedError: Always.
        json.JSONDecodeError: If the response claims JSON but is not.
    """
    content = response.text
    content_type = response.headers.get("content-type")

    if content_type and "application/json" in content_type:
        output = json.loads(content)
        detail = None
        if isinstance(output, dict):
            detail = output.get("error") or output.get("message")
        description = None if detail is None else json.dumps(detail, indent=2)
    else:
        description = content

    logger.debug("Request failed with status %d: %s", response.status_code, description)
    raise RequestFailedError(
        response.reason_phrase,
        RequestFailureCause(description=description, response=response),
    )


def _request_kwargs(endpoint: str, options: RequestOptions) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "method": options.method,
        "url": build_url(endpoint, options.prefix_url, options.search_params),
        "headers": options.headers,
    }

    mode = get_conditional_mode(endpoint)
    if mode:
        kwargs["extensions"] = {"mode": mode}

    if options.timeout is not None:
        kwargs["timeout"] = options.timeout

    if isinstance(options.body, (str, bytes)):
        kwargs["content"] = options.body
    elif options.body is not None:
        kwargs["json"] = options.body

    return kwargs


def _client_config(options: RequestOptions) -> dict[str, Any]:
    return {
        "timeout": options.timeout if options.timeout is not None else settings.query_timeout,
        "verify": options.verify is not False,
    }


def _create_default_async_client(options: RequestOptions) -> httpx.AsyncClient:
    """Create an httpx AsyncClient configured for a single call."""
    return httpx.AsyncClient(**_client_config(options))


def _create_default_sync_client(options: RequestOptions) -> httpx.Client:
    """Create an httpx Client configured for a single call."""
    return httpx.Client(**_client_config(options))


def _warn_unapplied_verify(options: RequestOptions) -> None:
    if options.verify is False:
        logger.debug("verify=False ignored: TLS settings belong to the supplied client")


async def _handle_retry(attempt: int, policy: RetryPolicy, url: str, status: int) -> None:
    """Helper function to handle retry logic and logging."""
    retry_time = policy.delay_for(attempt)
    logger.debug(
        "Received status %d from %s, retrying in %.2f seconds (attempt %d/%d)",
        status,
        url,
        retry_time,
        attempt + 1,
        policy.max_attempts,
    )
    await asyncio.sleep(retry_time)


async def _aiter_stream(
    response: httpx.Response, client: httpx.AsyncClient | None
) -> AsyncIterator[bytes]:
    try:
        async for chunk in response.aiter_bytes():
            yield chunk
    finally:
        await response.aclose()
        if client is not None:
            await client.aclose()


def _iter_stream(response: httpx.Response, client: httpx.Client | None) -> Iterator[bytes]:
    try:
        yield from response.iter_bytes()
    finally:
        response.close()
        if client is not None:
            client.close()


async def request_handler(
    endpoint: str,
    options: RequestOptions | None = None,
    *,
    retry_policy: RetryPolicy | None = None,
    client: httpx.AsyncClient | None = None,
) -> ResolvedResponse:
    """
    Perform a request and return its decoded response.

    Args:
        endpoint: Path resolved against ``options.prefix_url``, or an absolute URL
        options: Resolved request options
        retry_policy: Retry behaviour; defaults to ``settings.retry_policy()``
        client: Optional custom httpx.AsyncClient, never closed by this function

    Returns:
        ResolvedResponse: Decoded body, headers and status. With
        ``options.as_stream`` the body is an unconsumed async byte iterator.

    Raises:
        TransportTimeoutError: If the transport times out. Not retried.
        RequestFailedError: If the server answers with a non-retryable error status.
        RetryExhaustedError: If every attempt ended with a retryable status.
    """
    options = options or RequestOptions()
    policy = retry_policy or settings.retry_policy()
    should_close_client = False
    streaming = False

    if client is None:
        client = _create_default_async_client(options)
        should_close_client = True
    else:
        _warn_unapplied_verify(options)

    last_status: int | None = None

    try:
        request = client.build_request(**_request_kwargs(endpoint, options))
        url = str(request.url)

        for attempt in range(policy.max_attempts):
            try:
                response = await client.send(request, stream=options.as_stream)
            except httpx.TimeoutException:
                raise TransportTimeoutError() from None

            if not response.is_error:
                if options.as_stream:
                    streaming = True
                    return ResolvedResponse(
                        body=_aiter_stream(response, client if should_close_client else None),
                        headers=dict(response.headers),
                        status=response.status_code,
                    )
                return parse_response(response)

            if response.status_code not in policy.retry_status_codes:
                if options.as_stream:
                    try:
                        await response.aread()
                    except httpx.TimeoutException:
                        await response.aclose()
                        raise TransportTimeoutError() from None
                throw_failed_request_error(response)

            if options.as_stream:
                await response.aclose()

            last_status = response.status_code
            if attempt + 1 < policy.max_attempts:
                await _handle_retry(attempt, policy, url, response.status_code)

        raise RetryExhaustedError(last_status=last_status)
    finally:
        if should_close_client and not streaming:
            await client.aclose()


def request_handler_sync(
    endpoint: str,
    options: RequestOptions | None = None,
    *,
    retry_policy: RetryPolicy | None = None,
    client: httpx.Client | None = None,
) -> ResolvedResponse:
    """
    Perform a request synchronously and return its decoded response.

    Args:
        endpoint: Path resolved against ``options.prefix_url``, or an absolute URL
        options: Resolved request options
        retry_policy: Retry behaviour; defaults to ``settings.retry_policy()``
        client: Optional custom httpx.Client, never closed by this function

    Returns:
        ResolvedResponse: Decoded body, headers and status. With
        ``options.as_stream`` the body is an unconsumed byte iterator.

    Raises:
        TransportTimeoutError: If the transport times out. Not retried.
        RequestFailedError: If the server answers with a non-retryable error status.
        RetryExhaustedError: If every attempt ended with a retryable status.
    """
    options = options or RequestOptions()
    policy = retry_policy or settings.retry_policy()
    should_close_client = False
    streaming = False

    if client is None:
        client = _create_default_sync_client(options)
        should_close_client = True
    else:
        _warn_unapplied_verify(options)

    last_status: int | None = None

    try:
        request = client.build_request(**_request_kwargs(endpoint, options))
        url = str(request.url)

        for attempt in range(policy.max_attempts):
            try:
                response = client.send(request, stream=options.as_stream)
            except httpx.TimeoutException:
                raise TransportTimeoutError() from None

            if not response.is_error:
                if options.as_stream:
                    streaming = True
                    return ResolvedResponse(
                        body=_iter_stream(response, client if should_close_client else None),
                        headers=dict(response.headers),
                        status=response.status_code,
                    )
                return parse_response(response)

            if response.status_code not in policy.retry_status_codes:
                if options.as_stream:
                    try:
                        response.read()
                    except httpx.TimeoutException:
                        response.close()
                        raise TransportTimeoutError() from None
                throw_failed_request_error(response)

            if options.as_stream:
                response.close()

            last_status = response.status_code
            if attempt + 1 < policy.max_attempts:
                retry_time = policy.delay_for(attempt)
                logger.debug(
                    "Received status %d from %s, retrying in %.2f seconds (attempt %d/%d)",
                    response.status_code,
                    url,
                    retry_time,
                    attempt + 1,
                    policy.max_attempts,
                )
                time.sleep(retry_time)

        raise RetryExhaustedError(last_status=last_status)
    finally:
        if should_close_client and not streaming:
            client.close()
