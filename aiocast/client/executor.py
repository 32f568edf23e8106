"""
Action executor.

One invocation walks an explicit state machine::

    IDLE -> CONNECTING -> SESSION_RESOLVING -> STATUS_ONLY -----------> REPORTING -> CLOSED
                                            -> LAUNCHING -> ACTING --^
                                            -> JOINING ---^

Each state has one handler coroutine that performs the state's device calls
and returns the next state. A failure in any handler is classified, recorded
once and turns into REPORTING, so every run reports exactly one result and
always ends in CLOSED with the connection closed.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace

from aiocast.errors import classify, report_failure
from aiocast.metadata import enrich_media
from aiocast.models.media import MediaItem, MediaQueue
from aiocast.models.request import Device, PlaybackOptions
from aiocast.models.status import ActionResult, CastFailure, StatusEvent
from aiocast.models.types import ActionState
from aiocast.transport.base import (
    DEFAULT_MEDIA_RECEIVER_APP_ID,
    CastPlayer,
    CastTransport,
    StatusCallback,
)
from aiocast.volume import apply_volume

from .connection import DEFAULT_CALL_TIMEOUT, DEFAULT_DRAIN_TIMEOUT, ConnectionManager
from .session import SessionResolver, SessionView

logger = logging.getLogger(__name__)

# Callback invoked with the result of an action as soon as it is known,
# before the connection is closed.
ResultCallback = Callable[[ActionResult], None]

MediaPayload = MediaItem | MediaQueue


class ActionExecutor:
    """
    Perform one cast action per call to :meth:`execute`.

    Every call opens its own connection; nothing is shared between calls.
    """

    def __init__(
        self,
        transport: CastTransport,
        *,
        app_id: str = DEFAULT_MEDIA_RECEIVER_APP_ID,
        call_timeout: float | None = DEFAULT_CALL_TIMEOUT,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ) -> None:
        """
        Create an executor.

        Args:
            transport: Transport used to reach devices.
            app_id: Receiver application launched for media and used to join
                running sessions. Defaults to the Default Media Receiver.
            call_timeout: Seconds a single device call may take.
            drain_timeout: Seconds to wait for volume, pause and stop calls
                when closing.
        """
        self._transport = transport
        self._app_id = app_id
        self._call_timeout = call_timeout
        self._drain_timeout = drain_timeout

    async def execute(
        self,
        device: Device,
        payload: MediaPayload | None = None,
        options: PlaybackOptions | None = None,
        *,
        on_result: ResultCallback | None = None,
        on_status: StatusCallback | None = None,
    ) -> ActionResult:
        """
        Run one action against ``device``.

        Args:
            device: The receiver.
            payload: A single item, a queue, or None for status and control only.
            options: Playback options and volume directive.
            on_result: Called with the result before the connection closes.
            on_status: Called with every status the device pushes meanwhile.

        Returns:
            The result; failures are reported in ``ActionResult.error``, never
            raised.
        """
        run = ActionRun(
            ConnectionManager(
                self._transport,
                device,
                call_timeout=self._call_timeout,
                drain_timeout=self._drain_timeout,
            ),
            SessionResolver(self._app_id),
            payload,
            options or PlaybackOptions(),
            on_result=on_result,
            on_status=on_status,
        )
        return await run.run()


class ActionRun:
    """A single pass through the action state machine."""

    state: ActionState
    """Current state."""
    transitions: list[ActionState]
    """Every state entered, in order."""

    _player: CastPlayer | None = None
    """Player of the launched or joined application."""
    _view: SessionView | None = None
    """Outcome of session resolution, if it ran."""
    _status: StatusEvent | None = None
    """Status produced by the primary call."""
    _error: CastFailure | None = None
    """The one failure reported for this run."""
    _result: ActionResult | None = None
    _context: str = "Exception occurred on cast"
    """Description of the step in progress, used when it fails."""
    _directives_started: bool = False

    def __init__(
        self,
        manager: ConnectionManager,
        resolver: SessionResolver,
        payload: MediaPayload | None,
        options: PlaybackOptions,
        *,
        on_result: ResultCallback | None = None,
        on_status: StatusCallback | None = None,
    ) -> None:
        """Prepare a run; nothing is sent until :meth:`run` is awaited."""
        self._manager = manager
        self._resolver = resolver
        self._payload = payload
        self._options = options
        self._on_result = on_result
        if on_status is not None:
            manager.add_status_listener(on_status)
        self.state = ActionState.IDLE
        self.transitions = [ActionState.IDLE]
        self._handlers: dict[ActionState, Callable[[], Awaitable[ActionState]]] = {
            ActionState.IDLE: self._handle_idle,
            ActionState.CONNECTING: self._handle_connecting,
            ActionState.SESSION_RESOLVING: self._handle_session_resolving,
            ActionState.STATUS_ONLY: self._handle_status_only,
            ActionState.LAUNCHING: self._handle_launching,
            ActionState.JOINING: self._handle_joining,
            ActionState.ACTING: self._handle_acting,
            ActionState.REPORTING: self._handle_reporting,
        }

    @property
    def result(self) -> ActionResult | None:
        """Return the reported result, None until REPORTING ran."""
        return self._result

    async def run(self) -> ActionResult:
        """Drive the state machine to CLOSED and return the result."""
        try:
            while self.state is not ActionState.CLOSED:
                try:
                    next_state = await self._handlers[self.state]()
                except Exception as err:  # noqa: BLE001
                    next_state = self._fail(err)
                self._transition(next_state)
        finally:
            await self._manager.close()

        if self._result is None:
            # Only reachable if reporting itself failed.
            self._result = ActionResult(options=self._options, status=self._status, error=self._error)
        failure = self._manager.failure
        if self._result.error is None and failure is not None:
            # The transport failed after the result was delivered, while closing.
            self._result.error = classify(
                failure, f"Client error reported by {self._manager.device}"
            )
        return self._result

    def _transition(self, next_state: ActionState) -> None:
        logger.debug("%s: %s -> %s", self._manager.device, self.state.value, next_state.value)
        self.state = next_state
        self.transitions.append(next_state)

    def _fail(self, err: Exception) -> ActionState:
        if self._error is None and err is self._manager.failure:
            # Already logged by the connection manager when the transport failed.
            self._error = classify(err, self._context)
        elif self._error is None:
            self._error = report_failure(err, self._context)
        else:
            logger.debug("Further failure after %s: %r", self._error.kind.value, err)
        if self.state is ActionState.REPORTING:
            return ActionState.CLOSED
        return ActionState.REPORTING

    async def _handle_idle(self) -> ActionState:
        return ActionState.CONNECTING

    async def _handle_connecting(self) -> ActionState:
        self._context = f"Not able to connect to {self._manager.device}"
        await self._manager.open()
        return ActionState.SESSION_RESOLVING

    async def _handle_session_resolving(self) -> ActionState:
        if self._payload is not None and not self._options.status:
            return ActionState.LAUNCHING
        self._context = "Error resolving session"
        self._view = await self._resolver.resolve(self._manager)
        if self._view.is_idle:
            return ActionState.STATUS_ONLY
        return ActionState.JOINING

    async def _handle_status_only(self) -> ActionState:
        self._start_directives()
        self._status = StatusEvent(applications=[])
        return ActionState.REPORTING

    async def _handle_launching(self) -> ActionState:
        app_id = self._resolver.app_id
        self._context = f"Not able to launch receiver application {app_id}"
        connection = self._manager.connection
        player = await self._manager.call(connection.launch(app_id), "launch")
        logger.info("Launched receiver application %s on %s", app_id, self._manager.device)
        self._manager.attach_player(player)
        self._player = player
        return ActionState.ACTING

    async def _handle_joining(self) -> ActionState:
        assert self._view is not None
        self._player = self._view.player
        return ActionState.ACTING

    async def _handle_acting(self) -> ActionState:
        self._start_directives()
        payload = None if self._options.status else self._payload
        match payload:
            case MediaItem():
                self._status = await self._load_single(payload)
            case MediaQueue():
                self._status = await self._load_queue(payload)
            case _:
                self._context = "Not able to get status"
                self._status = await self._manager.call(
                    self._manager.connection.get_status(), "get status"
                )
        return ActionState.REPORTING

    async def _handle_reporting(self) -> ActionState:
        self._result = ActionResult(options=self._options, status=self._status, error=self._error)
        if self._on_result is not None:
            try:
                self._on_result(self._result)
            except Exception:
                logger.exception("Error in result callback %s", self._on_result)
        return ActionState.CLOSED

    async def _load_single(self, item: MediaItem) -> StatusEvent:
        assert self._player is not None
        media = enrich_media(item.with_defaults())
        self._context = "Not able to load media"
        logger.debug("Loading player with media %s", media.to_dict())
        status = await self._manager.call(self._player.load(media, autoplay=True), "load")
        return await self._seek_after_load(status)

    async def _load_queue(self, queue: MediaQueue) -> StatusEvent:
        assert self._player is not None
        items = [
            replace(
                entry,
                media=enrich_media(
                    entry.media.with_defaults(),
                    image_url=entry.media.image_url or queue.image_url,
                ),
            )
            for entry in queue.items
        ]
        queue = replace(queue, items=items)
        self._context = "Not able to load media"
        logger.info("Loading player with queue of %d items", len(items))
        status = await self._manager.call(self._player.queue_load(queue), "queue load")
        logger.info("Loaded queue of %d items", len(items))
        return await self._seek_after_load(status)

    async def _seek_after_load(self, status: StatusEvent) -> StatusEvent:
        assert self._player is not None
        if self._options.seek is None:
            return status
        self._context = f"Not able to seek to position {self._options.seek}"
        logger.debug("Seek to position %s", self._options.seek)
        return await self._manager.call(self._player.seek(self._options.seek), "seek")

    def _start_directives(self) -> None:
        """Issue volume, pause and stop directives alongside the primary call."""
        if self._directives_started:
            return
        self._directives_started = True
        # TODO: pause/stop race a load issued at the same time; sequence them
        # after the load once the receiver behaviour has been confirmed.
        volume = self._options.volume
        if not volume.is_empty:
            self._manager.spawn(apply_volume(self._manager, volume), "Not able to set the volume")
        if self._options.pause:
            self._manager.spawn(self._control_playback("pause"), "Not able to pause")
        if self._options.stop:
            self._manager.spawn(self._control_playback("stop"), "Not able to stop")

    async def _control_playback(self, command: str) -> None:
        view = await self._resolver.resolve(self._manager, attach=False)
        if view.player is None:
            logger.warning("Nothing is playing on %s, not sending %s", self._manager.device, command)
            return
        player = view.player
        await self._resolver.prepare_control(self._manager, player)
        logger.debug("Sending %s signal to player", command)
        send = player.pause if command == "pause" else player.stop
        await self._manager.call(send(), command)
