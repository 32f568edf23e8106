"""
Transport backed by pychromecast.

pychromecast runs its socket client in a thread of its own and invokes
listeners and request callbacks from there. Everything that crosses into
aiocast is handed to the event loop with ``call_soon_threadsafe``; blocking
library calls run in the default executor.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import Any, TypeVar

import pychromecast
from pychromecast.error import PyChromecastError, RequestTimeout

from aiocast.errors import CastConnectionError, CastError, CastTimeoutError, LoadError
from aiocast.models.media import MediaItem, MediaQueue
from aiocast.models.request import Device
from aiocast.models.status import MediaStatus, Session, StatusEvent, VolumeLevel

from .base import CastConnection, CastPlayer, CastTransport

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
# Backdrop shown by an idle receiver; it is not a session anyone can join.
IDLE_APP_ID = "E8C28D3C"

# Response types the media namespace sends instead of a status.
FAILED_RESPONSE_TYPES = frozenset(
    {"LOAD_FAILED", "LOAD_CANCELLED", "INVALID_PLAYER_STATE", "INVALID_REQUEST", "ERROR"}
)
_FATAL_CONNECTION_STATES = frozenset({"FAILED", "LOST", "FAILED_RESOLVE"})

_T = TypeVar("_T")

# Sends one request; receives pychromecast's (msg_sent, response) callback.
_Sender = Callable[[Callable[[bool, dict[str, Any] | None], None]], None]


def response_error(msg_sent: bool, response: dict[str, Any] | None) -> CastError | None:
    """
    Map a request callback to the error it represents.

    Args:
        msg_sent: Whether pychromecast managed to send the request.
        response: The receiver's reply, if any.

    Returns:
        None for a successful reply, otherwise the error to raise.
    """
    if not msg_sent:
        return CastConnectionError("Request could not be sent to the receiver")
    if not response:
        return None
    kind = response.get("type")
    if kind not in FAILED_RESPONSE_TYPES:
        return None
    details = [str(value) for value in (response.get("reason"), response.get("detailedErrorCode"))]
    details = [value for value in details if value and value != "None"]
    message = kind if not details else f"{kind} ({', '.join(details)})"
    if kind in {"LOAD_FAILED", "LOAD_CANCELLED"}:
        return LoadError(message)
    return CastError(message)


def session_from_status(status: Any) -> Session | None:
    """Return the running session described by a pychromecast CastStatus."""
    if status is None or status.app_id in (None, IDLE_APP_ID) or not status.session_id:
        return None
    return Session(
        session_id=status.session_id,
        transport_id=status.transport_id,
        app_id=status.app_id,
        display_name=status.display_name,
        status_text=status.status_text,
    )


def volume_from_status(status: Any) -> VolumeLevel | None:
    """Return the volume described by a pychromecast CastStatus."""
    if status is None:
        return None
    return VolumeLevel(
        level=status.volume_level,
        muted=status.volume_muted,
        control_type=getattr(status, "volume_control_type", None),
    )


def media_from_status(status: Any) -> MediaStatus | None:
    """Return the media status described by a pychromecast MediaStatus."""
    if status is None or status.media_session_id is None:
        return None
    return MediaStatus.from_dict(
        {
            "mediaSessionId": status.media_session_id,
            "playerState": status.player_state,
            "currentTime": status.current_time,
            "idleReason": status.idle_reason,
            "contentId": status.content_id,
        }
    )


def media_from_response(response: dict[str, Any] | None) -> MediaStatus | None:
    """Return the first media status of a MEDIA_STATUS reply."""
    entries = (response or {}).get("status") or []
    if not entries:
        return None
    return MediaStatus.from_dict(entries[0])


class _Bridge:
    """Shared helpers to run pychromecast calls from the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    async def _run(self, func: Callable[..., _T], *args: Any, **kwargs: Any) -> _T:
        try:
            return await self._loop.run_in_executor(None, partial(func, *args, **kwargs))
        except RequestTimeout as err:
            raise CastTimeoutError(str(err)) from err
        except PyChromecastError as err:
            raise CastError(str(err) or type(err).__name__) from err

    async def _request(self, send: _Sender) -> dict[str, Any] | None:
        """Send a request and wait for its callback."""
        future: asyncio.Future[dict[str, Any] | None] = self._loop.create_future()

        def _resolve(msg_sent: bool, response: dict[str, Any] | None) -> None:
            if future.done():
                return
            error = response_error(msg_sent, response)
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(response)

        def _callback(msg_sent: bool, response: dict[str, Any] | None) -> None:
            self._loop.call_soon_threadsafe(_resolve, msg_sent, response)

        try:
            await self._run(send, _callback)
            return await future
        finally:
            # Replies to an abandoned request are dropped by _resolve.
            future.cancel()


class ChromecastPlayer(_Bridge, CastPlayer):
    """Media controller of the connected receiver."""

    def __init__(self, connection: ChromecastConnection) -> None:
        """Wrap the media controller of ``connection``."""
        _Bridge.__init__(self, connection.loop)
        CastPlayer.__init__(self)
        self._connection = connection
        self._controller = connection.cast.media_controller
        self._controller.register_status_listener(self)

    @property
    def media_session_id(self) -> int | None:
        """Return the current media session id, None if nothing is loaded."""
        return self._controller.status.media_session_id

    async def get_status(self) -> StatusEvent:
        """Request a fresh media status from the player."""
        response = await self._request(
            lambda callback: self._controller.update_status(callback_function=callback)
        )
        return self._connection.snapshot(media_from_response(response))

    async def load(self, media: MediaItem, *, autoplay: bool = True) -> StatusEvent:
        """Load a single item."""
        metadata = media.metadata.to_dict() if media.metadata is not None else None
        stream_type = media.stream_type.value if media.stream_type is not None else None
        response = await self._request(
            lambda callback: self._controller.play_media(
                media.content_id,
                media.content_type,
                autoplay=autoplay,
                stream_type=stream_type,
                metadata=metadata,
                callback_function=callback,
            )
        )
        return self._connection.snapshot(media_from_response(response))

    async def queue_load(self, queue: MediaQueue) -> StatusEvent:
        """Load an ordered queue of items."""
        body = queue.to_dict()
        body.pop("imageUrl", None)
        for item in body["items"]:
            item["media"].pop("imageUrl", None)
        message = {"type": "QUEUE_LOAD", **body}
        response = await self._request(
            lambda callback: self._controller.send_message(
                message, inc_session_id=False, callback_function=callback
            )
        )
        return self._connection.snapshot(media_from_response(response))

    async def seek(self, position: float) -> StatusEvent:
        """Seek the current item to ``position`` seconds."""
        await self._run(self._controller.seek, position)
        return self._connection.snapshot(media_from_status(self._controller.status))

    async def pause(self) -> StatusEvent:
        """Pause playback."""
        await self._run(self._controller.pause)
        return self._connection.snapshot(media_from_status(self._controller.status))

    async def stop(self) -> StatusEvent:
        """Stop playback."""
        await self._run(self._controller.stop)
        return self._connection.snapshot(media_from_status(self._controller.status))

    # pychromecast media status listener interface, called from its thread.

    def new_media_status(self, status: Any) -> None:
        """Forward a media status push."""
        event = self._connection.snapshot(media_from_status(status))
        self._loop.call_soon_threadsafe(self._notify_status, event)

    def load_media_failed(self, queue_item_id: int, error_code: int) -> None:
        """Log a failed load; the load request itself reports the failure."""
        logger.debug("Load of queue item %s failed with code %s", queue_item_id, error_code)

    def session_closed(self) -> None:
        """Publish the end of the joined session."""
        self._notify_close()


class ChromecastConnection(_Bridge, CastConnection):
    """Connection to one receiver through a pychromecast ``Chromecast``."""

    _player: ChromecastPlayer | None = None
    """Player handed out by :meth:`join` or :meth:`launch`."""
    _had_session: bool = False

    def __init__(self, cast: Any, loop: asyncio.AbstractEventLoop) -> None:
        """Wrap a connected ``pychromecast.Chromecast``."""
        _Bridge.__init__(self, loop)
        CastConnection.__init__(self)
        self.cast = cast
        self.loop = loop
        self._had_session = session_from_status(cast.status) is not None
        cast.register_status_listener(self)
        cast.register_connection_listener(self)

    def snapshot(self, media: MediaStatus | None = None) -> StatusEvent:
        """Return the current device status, with ``media`` if given."""
        status = self.cast.status
        session = session_from_status(status)
        return StatusEvent(
            applications=[session] if session is not None else [],
            volume=volume_from_status(status),
            media=media,
        )

    async def get_sessions(self) -> list[Session]:
        """List running receiver applications."""
        session = session_from_status(self.cast.status)
        return [session] if session is not None else []

    async def join(self, session: Session, app_id: str) -> CastPlayer:
        """Join the running session through the media namespace."""
        if session.app_id != app_id:
            logger.debug("Joining %s through the namespace of %s", session.app_id, app_id)
        player = self._get_player()
        await player.get_status()
        return player

    async def launch(self, app_id: str) -> CastPlayer:
        """Launch ``app_id`` and return its player."""
        await self._run(self.cast.start_app, app_id)
        return self._get_player()

    async def get_status(self) -> StatusEvent:
        """Return the receiver status."""
        media = None
        if self._player is not None:
            media = media_from_status(self.cast.media_controller.status)
        return self.snapshot(media)

    async def get_volume(self) -> VolumeLevel:
        """Return the current volume."""
        volume = volume_from_status(self.cast.status)
        if volume is None:
            raise CastError("Receiver did not report its volume")
        return volume

    async def set_volume(self, volume: VolumeLevel) -> VolumeLevel:
        """Apply a volume instruction and return the resulting volume."""
        if volume.muted is not None:
            await self._run(self.cast.set_volume_muted, volume.muted)
        if volume.level is not None:
            await self._run(self.cast.set_volume, volume.level)
        return volume_from_status(self.cast.status) or volume

    async def close(self) -> None:
        """Disconnect from the receiver."""
        await self._run(self.cast.disconnect)

    def _get_player(self) -> ChromecastPlayer:
        if self._player is None:
            self._player = ChromecastPlayer(self)
        return self._player

    # pychromecast listener interfaces, called from its thread.

    def new_cast_status(self, status: Any) -> None:
        """Forward a receiver status push and detect session ends."""
        self.loop.call_soon_threadsafe(self._handle_cast_status, status)

    def new_connection_status(self, status: Any) -> None:
        """Turn a failed or lost connection into a transport error."""
        if status.status in _FATAL_CONNECTION_STATES:
            error = CastConnectionError(
                f"Connection to {status.address} {status.status.lower()}"
            )
            self.loop.call_soon_threadsafe(self._notify_error, error)

    def _handle_cast_status(self, status: Any) -> None:
        has_session = session_from_status(status) is not None
        if self._had_session and not has_session and self._player is not None:
            self._player.session_closed()
        self._had_session = has_session
        self._notify_status(self.snapshot())


class ChromecastTransport(CastTransport):
    """Open connections to receivers by address."""

    def __init__(
        self, *, timeout: float = DEFAULT_CONNECT_TIMEOUT, tries: int | None = None
    ) -> None:
        """
        Create a transport.

        Args:
            timeout: Seconds to wait for the receiver to become ready.
            tries: Connection attempts, None to let pychromecast retry forever.
        """
        self._timeout = timeout
        self._tries = tries

    async def connect(self, device: Device) -> CastConnection:
        """Open a connection to ``device`` and wait until it is ready."""
        loop = asyncio.get_running_loop()
        try:
            cast = await loop.run_in_executor(
                None,
                partial(
                    pychromecast.get_chromecast_from_host,
                    (device.host, device.port, None, None, None),
                    tries=self._tries,
                    timeout=self._timeout,
                ),
            )
        except PyChromecastError as err:
            raise CastConnectionError(f"Not able to connect to {device}: {err}") from err
        try:
            await loop.run_in_executor(None, partial(cast.wait, timeout=self._timeout))
        except PyChromecastError as err:
            await loop.run_in_executor(None, cast.disconnect)
            if isinstance(err, RequestTimeout):
                raise CastTimeoutError(f"Receiver at {device} did not become ready") from err
            raise CastConnectionError(f"Not able to connect to {device}: {err}") from err
        logger.debug("Receiver at %s is ready: %s", device, cast.status)
        return ChromecastConnection(cast, loop)
