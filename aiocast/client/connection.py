"""Connection lifecycle for a single cast invocation."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

from aiocast.errors import CastConnectionError, CastError, CastTimeoutError, report_failure
from aiocast.models.request import Device
from aiocast.models.status import StatusEvent
from aiocast.transport.base import CastConnection, CastTransport, EventSource

logger = logging.getLogger(__name__)

DEFAULT_CALL_TIMEOUT = 30.0
DEFAULT_DRAIN_TIMEOUT = 5.0

_T = TypeVar("_T")


def _discard(awaitable: Awaitable[Any]) -> None:
    """Close a coroutine that will never be awaited."""
    if inspect.iscoroutine(awaitable):
        awaitable.close()


def _consume_result(task: asyncio.Future[Any]) -> None:
    """Retrieve the outcome of an abandoned call so it is never reported as unhandled."""
    if not task.cancelled():
        task.exception()


class ConnectionManager(EventSource):
    """
    Own one transport connection from connect to close.

    Device calls go through :meth:`call`, which refuses to touch a failed or
    closed connection, applies the per-call timeout and aborts as soon as the
    device reports a fatal error or closes the session. Side-channel work is
    started with :meth:`spawn` and drained by :meth:`close`, which closes the
    transport exactly once no matter how many times, or from where, it is
    called.

    Status, error and close events of the connection and of any attached
    player are re-published through this manager's own listener registries.
    """

    _loop: asyncio.AbstractEventLoop
    """Event loop for this invocation."""
    _connection: CastConnection | None = None
    """Transport connection, set once :meth:`open` succeeds."""
    _failure: CastConnectionError | None = None
    """First fatal error reported by the transport."""
    _interrupted: asyncio.Future[None]
    """Resolved when the transport fails or the device closes the session."""
    _tasks: set[asyncio.Task[None]]
    """Side-channel tasks that have not finished yet."""
    _close_task: asyncio.Task[None] | None = None
    """The one task that performs the close."""
    _closed: bool = False
    """True once the transport connection has been closed."""
    _unsubscribes: list[Callable[[], None]]
    """Functions removing this manager's listeners from the transport."""

    def __init__(
        self,
        transport: CastTransport,
        device: Device,
        *,
        call_timeout: float | None = DEFAULT_CALL_TIMEOUT,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ) -> None:
        """
        Create a connection manager for one invocation.

        Args:
            transport: Transport used to open the connection.
            device: Receiver to connect to.
            call_timeout: Seconds a single device call may take, None to rely
                on the transport's own timeouts.
            drain_timeout: Seconds :meth:`close` waits for side-channel tasks
                before cancelling them.
        """
        super().__init__()
        self._transport = transport
        self._device = device
        self._call_timeout = call_timeout
        self._drain_timeout = drain_timeout
        self._loop = asyncio.get_running_loop()
        self._interrupted = self._loop.create_future()
        self._tasks = set()
        self._unsubscribes = []

    @property
    def device(self) -> Device:
        """Return the device this manager connects to."""
        return self._device

    @property
    def connection(self) -> CastConnection:
        """Return the open transport connection."""
        if self._connection is None:
            raise CastConnectionError(f"Not connected to {self._device}")
        return self._connection

    @property
    def closed(self) -> bool:
        """Return True once the connection has been closed."""
        return self._closed

    @property
    def failure(self) -> CastConnectionError | None:
        """Return the fatal transport error, if one was reported."""
        return self._failure

    @property
    def pending(self) -> int:
        """Return the number of side-channel tasks still running."""
        return len(self._tasks)

    async def open(self) -> None:
        """Connect to the device and subscribe to its events."""
        if self._connection is not None:
            logger.debug("Already connected to %s", self._device)
            return
        if self._closed or self._close_task is not None:
            raise CastConnectionError(f"Connection to {self._device} is already closed")

        logger.info("Connecting to receiver at %s", self._device)
        try:
            if self._call_timeout is None:
                connection = await self._transport.connect(self._device)
            else:
                connection = await asyncio.wait_for(
                    self._transport.connect(self._device), timeout=self._call_timeout
                )
        except TimeoutError as err:
            raise CastTimeoutError(
                f"Timed out after {self._call_timeout}s connecting to {self._device}"
            ) from err
        except CastError:
            raise
        except Exception as err:
            raise CastConnectionError(f"Not able to connect to {self._device}: {err}") from err

        self._connection = connection
        self._subscribe(connection)
        logger.debug("Connected to %s", self._device)

    def attach_player(self, player: EventSource) -> None:
        """Route status, close and error events of ``player`` through this manager."""
        self._subscribe(player)

    async def call(self, awaitable: Awaitable[_T], description: str) -> _T:
        """
        Run one device call on this connection.

        Args:
            awaitable: The pending transport call.
            description: Short name of the call for logs and errors.

        Returns:
            The result of the call.

        Raises:
            CastConnectionError: If the connection failed or is closed, or
                the device closed the session while the call was pending.
            CastTimeoutError: If the call exceeded the per-call timeout.
        """
        if self._failure is not None:
            _discard(awaitable)
            raise self._failure
        if self._closed:
            _discard(awaitable)
            raise CastConnectionError(
                f"Connection to {self._device} is closed, not sending {description}"
            )

        logger.debug("Calling %s on %s", description, self._device)
        task = asyncio.ensure_future(awaitable)
        try:
            done, _ = await asyncio.wait(
                {task, self._interrupted},
                timeout=self._call_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            return task.result()

        task.cancel()
        task.add_done_callback(_consume_result)
        if self._failure is not None:
            raise self._failure
        if self._interrupted.done():
            raise CastConnectionError(f"Session closed by {self._device} during {description}")
        raise CastTimeoutError(f"Timed out after {self._call_timeout}s waiting for {description}")

    def spawn(
        self, coro: Coroutine[Any, Any, None], name: str
    ) -> asyncio.Task[None] | None:
        """
        Start fire-and-forget work on this connection.

        The task is tracked until it finishes so :meth:`close` can wait for
        it. Its failures are logged and never propagate. Work spawned after
        close is dropped.

        Returns:
            The task, or None if the connection is already closed.
        """
        if self._closed:
            coro.close()
            logger.debug("Connection to %s closed, dropping %s", self._device, name)
            return None
        task = self._loop.create_task(self._run_tracked(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def close(self) -> None:
        """Drain side-channel work and close the connection once."""
        if self._close_task is None:
            self._close_task = self._loop.create_task(self._close())
        await asyncio.shield(self._close_task)

    async def _close(self) -> None:
        deadline = self._loop.time() + self._drain_timeout
        while self._tasks:
            remaining = deadline - self._loop.time()
            if remaining <= 0:
                break
            logger.debug("Waiting for %d in-flight call(s) before closing", len(self._tasks))
            await asyncio.wait(set(self._tasks), timeout=remaining)

        stragglers = set(self._tasks)
        if stragglers:
            logger.debug("Cancelling %d call(s) still running at close", len(stragglers))
            for task in stragglers:
                task.cancel()
            await asyncio.gather(*stragglers, return_exceptions=True)

        self._closed = True
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
        if not self._interrupted.done():
            self._interrupted.set_result(None)

        if self._connection is not None:
            try:
                await self._connection.close()
            except Exception as err:  # noqa: BLE001
                logger.warning("Error while closing connection to %s: %s", self._device, err)
        logger.debug("Connection to %s closed", self._device)
        self._notify_close()

    async def _run_tracked(self, coro: Coroutine[Any, Any, None], name: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            logger.debug("%s cancelled at close", name)
        except CastConnectionError as err:
            if self._closed or self._failure is not None:
                logger.debug("%s ignored, connection gone: %s", name, err)
            else:
                report_failure(err, name)
        except Exception as err:  # noqa: BLE001
            report_failure(err, name)

    def _subscribe(self, source: EventSource) -> None:
        self._unsubscribes.extend(
            (
                source.add_status_listener(self._handle_status),
                source.add_close_listener(self._handle_close),
                source.add_error_listener(self._handle_error),
            )
        )

    def _handle_status(self, status: StatusEvent) -> None:
        if self._closed:
            return
        self._notify_status(status)

    def _handle_close(self) -> None:
        if self._closed or self._close_task is not None:
            return
        logger.debug("Session closed by %s", self._device)
        if not self._interrupted.done():
            self._interrupted.set_result(None)
        self._schedule_close()

    def _handle_error(self, error: Exception) -> None:
        if self._failure is not None or self._closed:
            logger.debug("Ignoring further transport error from %s: %s", self._device, error)
            return
        logger.debug("Transport error from %s: %r", self._device, error)
        failure = CastConnectionError(str(error) or f"Transport error from {self._device}")
        failure.__cause__ = error
        self._failure = failure
        report_failure(failure, f"Client error reported by {self._device}")
        if not self._interrupted.done():
            self._interrupted.set_result(None)
        self._notify_error(failure)
        self._schedule_close()

    def _schedule_close(self) -> None:
        if self._close_task is None:
            self._close_task = self._loop.create_task(self._close())
