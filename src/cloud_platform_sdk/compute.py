"""Compute service clients (servers and images).

These are thin: each method builds an ``ApiRequest``, runs it through the
authenticated executor and maps the JSON body onto a model. The ``wait_*``
helpers hand accessor closures to the status poller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .errors import ResourceNotFoundError
from .http import identifier_from_location
from .models import ApiRequest, Image, Page, Server
from .pagination import aiter_items, iter_items, next_link
from .status import ImageStatus, ServerStatus
from .telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from .core.http_executor import AsyncAuthenticatedExecutor, SyncAuthenticatedExecutor
    from .core.poller import AsyncStatusPoller, StatusPoller

MICROVERSION_HEADER = "X-OpenStack-Nova-API-Version"


class _ComputeRequests:
    """Request building shared by the sync and async compute services."""

    def __init__(self, endpoint: str, microversion: str) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.microversion = microversion

    def build(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> ApiRequest:
        url = path if path.startswith(("http://", "https://")) else f"{self.endpoint}/{path}"
        return ApiRequest(
            method=method,
            url=url,
            headers={MICROVERSION_HEADER: self.microversion},
            params=params,
            json=json,
        )

    @staticmethod
    def snapshot_body(name: str, metadata: dict[str, str] | None) -> dict[str, Any]:
        body: dict[str, Any] = {"name": name}
        if metadata:
            body["metadata"] = metadata
        return {"createImage": body}

    @staticmethod
    def server_page(body: Any) -> Page[Server]:
        body = body or {}
        return Page(
            items=[Server.model_validate(s) for s in body.get("servers", [])],
            next_url=next_link(body.get("servers_links")),
        )


class ComputeService:
    """Synchronous compute service client."""

    def __init__(
        self,
        executor: SyncAuthenticatedExecutor,
        poller: StatusPoller,
        endpoint: str,
        *,
        microversion: str = "2.1",
    ) -> None:
        self._executor = executor
        self._poller = poller
        self._requests = _ComputeRequests(endpoint, microversion)
        self._logger = get_logger()

    def get_server(self, server_id: str) -> Server:
        """Get a server by id."""
        body = self._executor.execute_json(self._requests.build("GET", f"servers/{server_id}"))
        return Server.model_validate(body["server"])

    def delete_server(self, server_id: str) -> None:
        """Delete a server; deleting a missing server is not an error."""
        try:
            self._executor.execute(self._requests.build("DELETE", f"servers/{server_id}"))
        except ResourceNotFoundError:
            self._logger.debug("Server already absent", server_id=server_id)

    def list_servers(self, **params: Any) -> Page[Server]:
        """Get the first page of servers."""
        body = self._executor.execute_json(
            self._requests.build("GET", "servers/detail", params=params or None)
        )
        return _ComputeRequests.server_page(body)

    def iter_servers(self, **params: Any) -> Iterator[Server]:
        """Iterate over all servers, following ``next`` links."""
        return iter_items(self.list_servers(**params), self._next_server_page)

    def _next_server_page(self, url: str) -> Page[Server]:
        body = self._executor.execute_json(self._requests.build("GET", url))
        return _ComputeRequests.server_page(body)

    def get_image(self, image_id: str) -> Image:
        """Get an image by id."""
        body = self._executor.execute_json(self._requests.build("GET", f"images/{image_id}"))
        return Image.model_validate(body["image"])

    def delete_image(self, image_id: str) -> None:
        """Delete an image; deleting a missing image is not an error."""
        try:
            self._executor.execute(self._requests.build("DELETE", f"images/{image_id}"))
        except ResourceNotFoundError:
            self._logger.debug("Image already absent", image_id=image_id)

    def create_snapshot(
        self,
        server_id: str,
        name: str,
        *,
        metadata: dict[str, str] | None = None,
    ) -> Image:
        """Snapshot a server; the new image id comes from ``Location``."""
        response = self._executor.execute(
            self._requests.build(
                "POST",
                f"servers/{server_id}/action",
                json=_ComputeRequests.snapshot_body(name, metadata),
            )
        )
        return self.get_image(identifier_from_location(response))

    def wait_for_server_status(
        self,
        server_id: str,
        status: ServerStatus,
        **wait: Any,
    ) -> Server:
        """Wait for a server to reach ``status``.

        Keyword arguments (``refresh_delay``, ``timeout``, ``cancel_event``,
        ``progress``) are forwarded to the poller.
        """
        return self._poller.wait_for_state(
            server_id,
            lambda: self.get_server(server_id),
            status,
            status_of=lambda server: server.status,
            **wait,
        )

    def wait_until_server_active(self, server_id: str, **wait: Any) -> Server:
        """Wait for a server to become active."""
        return self.wait_for_server_status(server_id, ServerStatus.ACTIVE, **wait)

    def wait_until_server_deleted(self, server_id: str, **wait: Any) -> None:
        """Wait for a server to be deleted."""
        self._poller.wait_for_deleted(
            server_id,
            lambda: self.get_server(server_id),
            status_of=lambda server: server.status,
            **wait,
        )

    def wait_until_image_active(self, image_id: str, **wait: Any) -> Image:
        """Wait for an image to become active."""
        return self._poller.wait_for_state(
            image_id,
            lambda: self.get_image(image_id),
            ImageStatus.ACTIVE,
            status_of=lambda image: image.status,
            **wait,
        )

    def wait_until_image_deleted(self, image_id: str, **wait: Any) -> None:
        """Wait for an image to be deleted."""
        self._poller.wait_for_deleted(
            image_id,
            lambda: self.get_image(image_id),
            status_of=lambda image: image.status,
            **wait,
        )


class AsyncComputeService:
    """Asynchronous compute service client."""

    def __init__(
        self,
        executor: AsyncAuthenticatedExecutor,
        poller: AsyncStatusPoller,
        endpoint: str,
        *,
        microversion: str = "2.1",
    ) -> None:
        self._executor = executor
        self._poller = poller
        self._requests = _ComputeRequests(endpoint, microversion)
        self._logger = get_logger()

    async def get_server(self, server_id: str) -> Server:
        """Get a server by id."""
        body = await self._executor.execute_json(
            self._requests.build("GET", f"servers/{server_id}")
        )
        return Server.model_validate(body["server"])

    async def delete_server(self, server_id: str) -> None:
        """Delete a server; deleting a missing server is not an error."""
        try:
            await self._executor.execute(self._requests.build("DELETE", f"servers/{server_id}"))
        except ResourceNotFoundError:
            self._logger.debug("Server already absent", server_id=server_id)

    async def list_servers(self, **params: Any) -> Page[Server]:
        """Get the first page of servers."""
        body = await self._executor.execute_json(
            self._requests.build("GET", "servers/detail", params=params or None)
        )
        return _ComputeRequests.server_page(body)

    async def iter_servers(self, **params: Any) -> AsyncIterator[Server]:
        """Iterate over all servers, following ``next`` links."""
        first = await self.list_servers(**params)
        async for server in aiter_items(first, self._next_server_page):
            yield server

    async def _next_server_page(self, url: str) -> Page[Server]:
        body = await self._executor.execute_json(self._requests.build("GET", url))
        return _ComputeRequests.server_page(body)

    async def get_image(self, image_id: str) -> Image:
        """Get an image by id."""
        body = await self._executor.execute_json(
            self._requests.build("GET", f"images/{image_id}")
        )
        return Image.model_validate(body["image"])

    async def delete_image(self, image_id: str) -> None:
        """Delete an image; deleting a missing image is not an error."""
        try:
            await self._executor.execute(self._requests.build("DELETE", f"images/{image_id}"))
        except ResourceNotFoundError:
            self._logger.debug("Image already absent", image_id=image_id)

    async def create_snapshot(
        self,
        server_id: str,
        name: str,
        *,
        metadata: dict[str, str] | None = None,
    ) -> Image:
        """Snapshot a server; the new image id comes from ``Location``."""
        response = await self._executor.execute(
            self._requests.build(
                "POST",
                f"servers/{server_id}/action",
                json=_ComputeRequests.snapshot_body(name, metadata),
            )
        )
        return await self.get_image(identifier_from_location(response))

    async def wait_for_server_status(
        self,
        server_id: str,
        status: ServerStatus,
        **wait: Any,
    ) -> Server:
        """Wait for a server to reach ``status``."""
        return await self._poller.wait_for_state(
            server_id,
            lambda: self.get_server(server_id),
            status,
            status_of=lambda server: server.status,
            **wait,
        )

    async def wait_until_server_active(self, server_id: str, **wait: Any) -> Server:
        """Wait for a server to become active."""
        return await self.wait_for_server_status(server_id, ServerStatus.ACTIVE, **wait)

    async def wait_until_server_deleted(self, server_id: str, **wait: Any) -> None:
        """Wait for a server to be deleted."""
        await self._poller.wait_for_deleted(
            server_id,
            lambda: self.get_server(server_id),
            status_of=lambda server: server.status,
            **wait,
        )

    async def wait_until_image_active(self, image_id: str, **wait: Any) -> Image:
        """Wait for an image to become active."""
        return await self._poller.wait_for_state(
            image_id,
            lambda: self.get_image(image_id),
            ImageStatus.ACTIVE,
            status_of=lambda image: image.status,
            **wait,
        )

    async def wait_until_image_deleted(self, image_id: str, **wait: Any) -> None:
        """Wait for an image to be deleted."""
        await self._poller.wait_for_deleted(
            image_id,
            lambda: self.get_image(image_id),
            status_of=lambda image: image.status,
            **wait,
        )
