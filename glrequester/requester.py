"""Per-resource requesters binding option resolution to request execution."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from glrequester.shared.options import default_options_handler
from glrequester.shared.requests import request_handler

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from glrequester.types import RequestOptions, ResolvedResponse, ResourceOptions

    OptionsHandler = Callable[[ResourceOptions, Mapping[str, Any]], RequestOptions]
    RequestHandler = Callable[[str, RequestOptions], Awaitable[ResolvedResponse]]


class Requester:
    """Issues requests for one resource.

    Every verb resolves its options through the options handler with the
    method set to the verb, then hands them to the request handler.
    """

    def __init__(
        self,
        resource_options: ResourceOptions,
        options_handler: OptionsHandler,
        request_handler: RequestHandler,
    ) -> None:
        self.resource_options = resource_options
        self._options_handler = options_handler
        self._request_handler = request_handler

    async def _send(self, method: str, endpoint: str, request_options: dict[str, Any]) -> ResolvedResponse:
        options = self._options_handler(self.resource_options, {**request_options, "method": method})
        return await self._request_handler(endpoint, options)

    async def get(self, endpoint: str, **request_options: Any) -> ResolvedResponse:
        return await self._send("GET", endpoint, request_options)

    async def post(self, endpoint: str, **request_options: Any) -> ResolvedResponse:
        return await self._send("POST", endpoint, request_options)

    async def put(self, endpoint: str, **request_options: Any) -> ResolvedResponse:
        return await self._send("PUT", endpoint, request_options)

    async def patch(self, endpoint: str, **request_options: Any) -> ResolvedResponse:
        return await self._send("PATCH", endpoint, request_options)

    async def delete(self, endpoint: str, **request_options: Any) -> ResolvedResponse:
        return await self._send("DELETE", endpoint, request_options)


def create_requester_fn(
    options_handler: OptionsHandler, request_handler: RequestHandler
) -> Callable[[ResourceOptions], Requester]:
    """Bind an options handler and a request handler into a requester factory.

    Example:
        requester = create_requester_fn(default_options_handler, request_handler)(
            ResourceOptions.from_token("https://gitlab.example.com/api/v4", token="...")
        )
        project = await requester.get("projects/1")
    """

    def requester_fn(resource_options: ResourceOptions) -> Requester:
        return Requester(resource_options, options_handler, request_handler)

    return requester_fn


requester_fn = create_requester_fn(default_options_handler, request_handler)
