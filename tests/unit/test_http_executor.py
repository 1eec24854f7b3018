"""Unit tests for the synchronous authenticated executor.

Covers the single 401 -> reauthenticate -> replay path and error mapping.
"""

from __future__ import annotations

import threading

import httpx
import pytest

from cloud_platform_sdk.core.http_executor import SyncAuthenticatedExecutor
from cloud_platform_sdk.core.token_cache import TokenCache
from cloud_platform_sdk.errors import (
    AuthenticationFailedError,
    ErrorCode,
    RequestFailedError,
    ResourceNotFoundError,
    TransportError,
)
from cloud_platform_sdk.models import ApiRequest, AuthToken

URL = "https://compute.example.com/v2.1/tenant-1/flavors/flavor-id"


@pytest.fixture
def cache() -> TokenCache:
    return TokenCache()


@pytest.fixture
def executor(http_client, identity, cache) -> SyncAuthenticatedExecutor:
    return SyncAuthenticatedExecutor(http_client, identity, cache)


def get_request() -> ApiRequest:
    return ApiRequest(method="GET", url=URL)


class TestSuccessfulRequests:
    """Requests that succeed on the first attempt."""

    def test_first_attempt_success_sends_once(self, executor, responses, identity) -> None:
        """A 2xx first attempt sends once and authenticates once."""
        responses.add(200, json={"flavor": {"id": "flavor-id"}})

        response = executor.execute(get_request())

        assert response.status_code == 200
        assert len(responses.requests) == 1
        assert identity.calls == 1

    def test_token_attached_as_header(self, executor, responses) -> None:
        """The cached token is sent in X-Auth-Token."""
        responses.add(204)

        executor.execute(get_request())

        assert responses.tokens_sent == ["token-1"]

    def test_cached_token_reused(self, executor, responses, identity, cache) -> None:
        """An already cached token never triggers authentication."""
        cache.set(AuthToken(id="cached"))
        responses.add(200, json={}).add(200, json={})

        executor.execute(get_request())
        executor.execute(get_request())

        assert identity.calls == 0
        assert responses.tokens_sent == ["cached", "cached"]

    def test_request_headers_params_and_body_forwarded(self, executor, responses) -> None:
        """Descriptor headers, params and JSON body reach the transport."""
        responses.add(202)
        request = ApiRequest(
            method="POST",
            url=URL,
            headers={"X-OpenStack-Nova-API-Version": "2.1"},
            params={"limit": 10},
            json={"createImage": {"name": "snap"}},
        )

        executor.execute(request)

        sent = responses.requests[0]
        assert sent.method == "POST"
        assert sent.headers["X-OpenStack-Nova-API-Version"] == "2.1"
        assert sent.url.params["limit"] == "10"
        assert b"createImage" in sent.content

    def test_descriptor_not_mutated(self, executor, responses) -> None:
        """The caller's request descriptor keeps its original headers."""
        responses.add(200, json={})
        request = get_request()

        executor.execute(request)

        assert request.headers == {}

    def test_execute_json_decodes_body(self, executor, responses) -> None:
        responses.add(200, json={"flavor": {"id": "flavor-id"}})

        assert executor.execute_json(get_request()) == {"flavor": {"id": "flavor-id"}}

    def test_execute_json_empty_body(self, executor, responses) -> None:
        responses.add(204)

        assert executor.execute_json(get_request()) is None


class TestTokenRefresh:
    """The single token-refresh retry."""

    def test_401_then_success_retries_once(self, executor, responses, identity) -> None:
        """401 then 2xx: two sends, two authentications, second response returned."""
        responses.add(401, text="Your token has expired")
        responses.add(200, json={"flavor": {"id": "flavor-id"}})

        response = executor.execute(get_request())

        assert response.json() == {"flavor": {"id": "flavor-id"}}
        assert identity.calls == 2
        assert responses.tokens_sent == ["token-1", "token-2"]

    def test_retry_uses_new_token_which_is_cached(self, executor, responses, cache) -> None:
        responses.add(401).add(200, json={})

        executor.execute(get_request())

        assert cache.get() is not None
        assert cache.get().id == "token-2"

    def test_two_401s_raise_authentication_failed(self, executor, responses, identity) -> None:
        """Two consecutive 401s raise and never attempt a third send."""
        responses.add(401, text="Your token has expired")
        responses.add(401, text="Your token has expired")

        with pytest.raises(AuthenticationFailedError) as exc_info:
            executor.execute(get_request())

        assert len(responses.requests) == 2
        assert identity.calls == 2
        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Your token has expired"
        assert exc_info.value.code == ErrorCode.AUTHENTICATION_FAILED

    def test_401_then_server_error_surfaces_request_failed(self, executor, responses) -> None:
        responses.add(401).add(503, text="unavailable")

        with pytest.raises(RequestFailedError) as exc_info:
            executor.execute(get_request())

        assert exc_info.value.status_code == 503
        assert len(responses.requests) == 2

    def test_identity_failure_propagates(self, http_client, responses, cache) -> None:
        """Errors from the identity provider are not swallowed."""

        class FailingIdentity:
            def authenticate(self) -> AuthToken:
                raise AuthenticationFailedError("bad credentials")

        executor = SyncAuthenticatedExecutor(http_client, FailingIdentity(), cache)

        with pytest.raises(AuthenticationFailedError, match="bad credentials"):
            executor.execute(get_request())
        assert responses.requests == []


class TestFailures:
    """Non-401 failures propagate unchanged."""

    @pytest.mark.parametrize("status", [400, 403, 409, 413, 500, 503])
    def test_non_2xx_raises_request_failed(self, executor, responses, identity, status) -> None:
        responses.add(status, text="boom")

        with pytest.raises(RequestFailedError) as exc_info:
            executor.execute(get_request())

        assert exc_info.value.status_code == status
        assert exc_info.value.body == "boom"
        assert len(responses.requests) == 1
        assert identity.calls == 1

    def test_404_raises_not_found(self, executor, responses) -> None:
        responses.add(404, json={"itemNotFound": {"message": "Image not found.", "code": 404}})

        with pytest.raises(ResourceNotFoundError) as exc_info:
            executor.execute(get_request())

        assert exc_info.value.message == "Image not found."
        assert exc_info.value.details["fault"] == "itemNotFound"

    def test_connect_error_raises_transport_error(self, executor, responses) -> None:
        responses.fail(httpx.ConnectError("connection refused"))

        with pytest.raises(TransportError) as exc_info:
            executor.execute(get_request())

        assert exc_info.value.code == ErrorCode.CONNECTION_ERROR
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout_raises_transport_error(self, executor, responses) -> None:
        responses.fail(httpx.ReadTimeout("read timed out"))

        with pytest.raises(TransportError) as exc_info:
            executor.execute(get_request())

        assert exc_info.value.code == ErrorCode.TRANSPORT_TIMEOUT

    def test_transport_error_not_retried(self, executor, responses, identity) -> None:
        responses.fail(httpx.ConnectError("down")).add(200, json={})

        with pytest.raises(TransportError):
            executor.execute(get_request())

        assert len(responses.requests) == 1
        assert identity.calls == 1


class TestConcurrentRefresh:
    """Concurrent callers share one reacquisition."""

    def test_concurrent_401s_single_flight(self, identity) -> None:
        """Many threads seeing the same rejected token reauthenticate once."""
        cache = TokenCache()
        cache.set(AuthToken(id="expired"))
        lock = threading.Lock()

        def handler(request: httpx.Request) -> httpx.Response:
            if request.headers["X-Auth-Token"] == "expired":
                return httpx.Response(401)
            return httpx.Response(200, json={})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        executor = SyncAuthenticatedExecutor(client, identity, cache)
        barrier = threading.Barrier(8)
        errors: list[Exception] = []

        def worker() -> None:
            barrier.wait()
            try:
                executor.execute(get_request())
            except Exception as e:
                with lock:
                    errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        client.close()

        assert errors == []
        assert identity.calls == 1
        assert cache.get().id == "token-1"
