"""Authenticated HTTP executors for Cloud Platform SDK.

Every service call goes through an executor: it attaches the cached token,
sends the request and, when the service answers 401, discards that token,
reauthenticates once and replays the request exactly once.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import httpx

from ..errors import AuthenticationFailedError
from ..telemetry import get_logger, trace_operation
from .errors import ErrorFactory

if TYPE_CHECKING:
    from ..identity import AsyncIdentityProvider, IdentityProvider
    from ..models import ApiRequest, AuthToken
    from .token_cache import AsyncTokenCache, TokenCache


class HTTPExecutorProtocol(Protocol):
    """Protocol for HTTP executors."""

    def execute(self, request: ApiRequest) -> httpx.Response:
        """Execute HTTP request."""
        ...


def is_success(status_code: int) -> bool:
    """Check if status code is 2xx."""
    return 200 <= status_code < 300


def check_response(response: httpx.Response) -> httpx.Response:
    """Return ``response`` if it is 2xx, raise the matching SDK error otherwise.

    Raises:
        ResourceNotFoundError: On 404.
        RequestFailedError: On any other non-2xx status.
    """
    if is_success(response.status_code):
        return response
    raise ErrorFactory.from_http_response(response)


def decode_json(response: httpx.Response) -> Any:
    """Decode a JSON body, treating an empty body as ``None``."""
    if not response.content:
        return None
    return response.json()


class SyncAuthenticatedExecutor:
    """Synchronous executor with a single token-refresh retry."""

    def __init__(
        self,
        client: httpx.Client,
        identity: IdentityProvider,
        cache: TokenCache,
    ) -> None:
        """Initialize sync executor.

        Args:
            client: HTTP client used as transport.
            identity: Provider that issues new tokens.
            cache: Token cache, possibly shared with other executors.
        """
        self._client = client
        self._identity = identity
        self._cache = cache
        self._logger = get_logger()

    @property
    def token_cache(self) -> TokenCache:
        """Get token cache."""
        return self._cache

    def execute(self, request: ApiRequest) -> httpx.Response:
        """Execute an authenticated request.

        Args:
            request: Request descriptor.

        Returns:
            The 2xx HTTP response.

        Raises:
            TransportError: On network failure.
            AuthenticationFailedError: If the refreshed token is rejected too.
            ResourceNotFoundError: On 404.
            RequestFailedError: On any other non-2xx status.
        """
        token = self._cache.get_or_acquire(self._identity.authenticate)
        response = self._send(request, token, attempt=0)

        if response.status_code == 401:
            self._logger.info(
                "Token rejected, reauthenticating",
                method=request.method,
                url=request.url,
            )
            self._cache.invalidate(token)
            token = self._cache.get_or_acquire(self._identity.authenticate, stale=token)
            response = self._send(request, token, attempt=1)

            if response.status_code == 401:
                self._cache.invalidate(token)
                self._logger.warning(
                    "Refreshed token rejected",
                    method=request.method,
                    url=request.url,
                )
                raise AuthenticationFailedError(body=response.text)

        return check_response(response)

    def execute_json(self, request: ApiRequest) -> Any:
        """Execute an authenticated request and decode its JSON body."""
        return decode_json(self.execute(request))

    def _send(
        self,
        request: ApiRequest,
        token: AuthToken,
        attempt: int,
    ) -> httpx.Response:
        """Send one attempt of ``request`` under ``token``.

        Raises:
            TransportError: On network failure.
        """
        authenticated = request.with_headers(token.authorization_header())
        with trace_operation(
            "http_request",
            attributes={
                "http.method": request.method,
                "http.url": request.url,
                "attempt": attempt,
            },
        ) as span:
            try:
                response = self._client.request(
                    authenticated.method,
                    authenticated.url,
                    **authenticated.request_kwargs(),
                )
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e
            span.set_attribute("http.status_code", response.status_code)
            return response


class AsyncAuthenticatedExecutor:
    """Asynchronous executor with a single token-refresh retry."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        identity: AsyncIdentityProvider,
        cache: AsyncTokenCache,
    ) -> None:
        """Initialize async executor.

        Args:
            client: Async HTTP client used as transport.
            identity: Provider that issues new tokens.
            cache: Token cache, possibly shared with other executors.
        """
        self._client = client
        self._identity = identity
        self._cache = cache
        self._logger = get_logger()

    @property
    def token_cache(self) -> AsyncTokenCache:
        """Get token cache."""
        return self._cache

    async def execute(self, request: ApiRequest) -> httpx.Response:
        """Execute an authenticated request.

        Args:
            request: Request descriptor.

        Returns:
            The 2xx HTTP response.

        Raises:
            TransportError: On network failure.
            AuthenticationFailedError: If the refreshed token is rejected too.
            ResourceNotFoundError: On 404.
            RequestFailedError: On any other non-2xx status.
        """
        token = await self._cache.get_or_acquire(self._identity.authenticate)
        response = await self._send(request, token, attempt=0)

        if response.status_code == 401:
            self._logger.info(
                "Token rejected, reauthenticating",
                method=request.method,
                url=request.url,
            )
            await self._cache.invalidate(token)
            token = await self._cache.get_or_acquire(
                self._identity.authenticate, stale=token
            )
            response = await self._send(request, token, attempt=1)

            if response.status_code == 401:
                await self._cache.invalidate(token)
                self._logger.warning(
                    "Refreshed token rejected",
                    method=request.method,
                    url=request.url,
                )
                raise AuthenticationFailedError(body=response.text)

        return check_response(response)

    async def execute_json(self, request: ApiRequest) -> Any:
        """Execute an authenticated request and decode its JSON body."""
        return decode_json(await self.execute(request))

    async def _send(
        self,
        request: ApiRequest,
        token: AuthToken,
        attempt: int,
    ) -> httpx.Response:
        """Send one attempt of ``request`` under ``token``."""
        authenticated = request.with_headers(token.authorization_header())
        with trace_operation(
            "http_request",
            attributes={
                "http.method": request.method,
                "http.url": request.url,
                "attempt": attempt,
            },
        ) as span:
            try:
                response = await self._client.request(
                    authenticated.method,
                    authenticated.url,
                    **authenticated.request_kwargs(),
                )
            except httpx.HTTPError as e:
                raise ErrorFactory.from_exception(e) from e
            span.set_attribute("http.status_code", response.status_code)
            return response
