"""Status pollers: wait until a resource reaches a target status.

Pollers are transport-agnostic. Resource clients hand them an accessor
closure that fetches the resource; the poller only looks at the status it
reports. Cancellation and the deadline are observed at loop entry and
around each sleep, never during an in-flight accessor call.
"""

from __future__ import annotations

import asyncio
import threading
import time
from typing import TYPE_CHECKING, Any, TypeVar

from ..config import WaitConfig
from ..errors import (
    OperationCancelledError,
    OperationFailedError,
    ResourceNotFoundError,
    WaitTimeoutError,
)
from ..telemetry import get_logger, trace_operation

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..status import ResourceStatus

R = TypeVar("R")


class Deadline:
    """Monotonic deadline for one wait."""

    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        self._start = time.monotonic()

    @property
    def elapsed(self) -> float:
        """Seconds since the wait started."""
        return time.monotonic() - self._start

    @property
    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self.timeout - self.elapsed)

    @property
    def expired(self) -> bool:
        """Whether the deadline has passed."""
        return self.elapsed >= self.timeout


def _identity(value: Any) -> Any:
    return value


def is_error_status(status: Any) -> bool:
    """Whether ``status`` is the designated error status of its kind."""
    return bool(getattr(status, "is_error", False))


def is_deleted_status(status: Any) -> bool:
    """Whether ``status`` is the designated deleted status of its kind."""
    return bool(getattr(status, "is_deleted", False))


class _PollerBase:
    """Shared configuration and bookkeeping for sync and async pollers."""

    def __init__(self, config: WaitConfig | None = None) -> None:
        self.config = config or WaitConfig()
        self._logger = get_logger()

    def _timing(
        self,
        refresh_delay: float | None,
        timeout: float | None,
    ) -> tuple[float, Deadline]:
        delay = self.config.refresh_delay if refresh_delay is None else refresh_delay
        if delay < 0:
            msg = "refresh_delay cannot be negative"
            raise ValueError(msg)
        limit = self.config.timeout if timeout is None else timeout
        if limit <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        return delay, Deadline(limit)

    def _check_signals(
        self,
        resource_id: str,
        deadline: Deadline,
        cancelled: bool,
    ) -> None:
        """Raise if the caller cancelled or the deadline passed."""
        if cancelled:
            self._logger.info("Wait cancelled", resource_id=resource_id)
            raise OperationCancelledError(resource_id)
        if deadline.expired:
            self._logger.warning(
                "Wait timed out",
                resource_id=resource_id,
                elapsed=deadline.elapsed,
                timeout=deadline.timeout,
            )
            raise WaitTimeoutError(
                resource_id,
                deadline.elapsed,
                timeout=deadline.timeout,
            )

    def _reached(
        self,
        resource_id: str,
        status: Any,
        target: Any,
    ) -> bool:
        """Decide whether ``status`` ends a ``wait_for_state`` poll.

        Raises:
            OperationFailedError: If ``status`` is the error status.
        """
        if is_error_status(status):
            self._logger.warning(
                "Resource entered error status",
                resource_id=resource_id,
                status=str(status),
            )
            raise OperationFailedError(resource_id, status=str(status))
        complete = status == target
        self._logger.debug(
            "Polled resource",
            resource_id=resource_id,
            status=str(status),
            complete=complete,
        )
        return complete

    def _gone(self, resource_id: str, status: Any) -> bool:
        """Decide whether ``status`` ends a ``wait_for_deleted`` poll."""
        if is_error_status(status):
            self._logger.warning(
                "Resource entered error status",
                resource_id=resource_id,
                status=str(status),
            )
            raise OperationFailedError(resource_id, status=str(status))
        return is_deleted_status(status)


class StatusPoller(_PollerBase):
    """Synchronous status poller; sleeps on a ``threading.Event``."""

    def wait_for_state(
        self,
        resource_id: str,
        accessor: Callable[[], R],
        target: ResourceStatus,
        *,
        refresh_delay: float | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        progress: Callable[[bool], None] | None = None,
        status_of: Callable[[R], Any] | None = None,
    ) -> R:
        """Poll ``accessor`` until it reports ``target``.

        Args:
            resource_id: Identifier used in errors and logs.
            accessor: Fetches the current resource (or its status).
            target: Status that ends the wait successfully.
            refresh_delay: Seconds between polls (default from config).
            timeout: Seconds before giving up (default from config).
            cancel_event: Set by the caller to cancel the wait.
            progress: Receives False per intermediate poll, True on success.
            status_of: Extracts the status from the accessor result.

        Returns:
            The accessor result that reported ``target``.

        Raises:
            OperationFailedError: If the resource enters its error status.
            WaitTimeoutError: If the deadline passes first.
            OperationCancelledError: If ``cancel_event`` is set.
        """
        delay, deadline = self._timing(refresh_delay, timeout)
        status_of = status_of or _identity

        with trace_operation(
            "wait_for_state",
            attributes={"resource.id": resource_id, "resource.target": str(target)},
        ):
            while True:
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                result = accessor()
                complete = self._reached(resource_id, status_of(result), target)
                if progress is not None:
                    progress(complete)
                if complete:
                    return result
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                self._sleep(min(delay, deadline.remaining), cancel_event)

    def wait_for_deleted(
        self,
        resource_id: str,
        accessor: Callable[[], R],
        *,
        refresh_delay: float | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
        progress: Callable[[bool], None] | None = None,
        status_of: Callable[[R], Any] | None = None,
    ) -> None:
        """Poll ``accessor`` until the resource is deleted or gone.

        A ``ResourceNotFoundError`` from the accessor counts as deleted;
        any other accessor error propagates.
        """
        delay, deadline = self._timing(refresh_delay, timeout)
        status_of = status_of or _identity

        with trace_operation(
            "wait_for_deleted",
            attributes={"resource.id": resource_id},
        ):
            while True:
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                try:
                    result = accessor()
                except ResourceNotFoundError:
                    complete = True
                else:
                    complete = self._gone(resource_id, status_of(result))
                if progress is not None:
                    progress(complete)
                if complete:
                    self._logger.debug("Resource deleted", resource_id=resource_id)
                    return
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                self._sleep(min(delay, deadline.remaining), cancel_event)

    def _sleep(self, delay: float, cancel_event: threading.Event | None) -> None:
        """Sleep for ``delay`` seconds, waking early on cancellation."""
        if cancel_event is not None:
            cancel_event.wait(delay)
        else:
            time.sleep(delay)


class AsyncStatusPoller(_PollerBase):
    """Asynchronous status poller.

    Task cancellation (``asyncio.CancelledError``) passes through
    unwrapped; ``cancel_event`` raises ``OperationCancelledError``.
    """

    async def wait_for_state(
        self,
        resource_id: str,
        accessor: Callable[[], Awaitable[R]],
        target: ResourceStatus,
        *,
        refresh_delay: float | None = None,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
        progress: Callable[[bool], None] | None = None,
        status_of: Callable[[R], Any] | None = None,
    ) -> R:
        """Poll ``accessor`` until it reports ``target``.

        See ``StatusPoller.wait_for_state``; ``accessor`` is awaited.
        """
        delay, deadline = self._timing(refresh_delay, timeout)
        status_of = status_of or _identity

        with trace_operation(
            "wait_for_state",
            attributes={"resource.id": resource_id, "resource.target": str(target)},
        ):
            while True:
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                result = await accessor()
                complete = self._reached(resource_id, status_of(result), target)
                if progress is not None:
                    progress(complete)
                if complete:
                    return result
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                await self._sleep(min(delay, deadline.remaining), cancel_event)

    async def wait_for_deleted(
        self,
        resource_id: str,
        accessor: Callable[[], Awaitable[R]],
        *,
        refresh_delay: float | None = None,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
        progress: Callable[[bool], None] | None = None,
        status_of: Callable[[R], Any] | None = None,
    ) -> None:
        """Poll ``accessor`` until the resource is deleted or gone."""
        delay, deadline = self._timing(refresh_delay, timeout)
        status_of = status_of or _identity

        with trace_operation(
            "wait_for_deleted",
            attributes={"resource.id": resource_id},
        ):
            while True:
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                try:
                    result = await accessor()
                except ResourceNotFoundError:
                    complete = True
                else:
                    complete = self._gone(resource_id, status_of(result))
                if progress is not None:
                    progress(complete)
                if complete:
                    self._logger.debug("Resource deleted", resource_id=resource_id)
                    return
                self._check_signals(resource_id, deadline, _is_set(cancel_event))
                await self._sleep(min(delay, deadline.remaining), cancel_event)

    async def _sleep(self, delay: float, cancel_event: asyncio.Event | None) -> None:
        """Sleep for ``delay`` seconds, waking early on cancellation."""
        if cancel_event is None:
            await asyncio.sleep(delay)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass


def _is_set(event: threading.Event | asyncio.Event | None) -> bool:
    return event is not None and event.is_set()
