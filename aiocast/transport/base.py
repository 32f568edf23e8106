"""
Interface to the device control library.

aiocast never frames Cast messages itself. A transport opens a connection to
one receiver and exposes the handful of receiver and media namespace calls the
orchestrator needs. Implementations push device events through the listener
registries defined here.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from aiocast.models.media import MediaItem, MediaQueue
from aiocast.models.request import Device
from aiocast.models.status import Session, StatusEvent, VolumeLevel

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_RECEIVER_APP_ID = "CC1AD845"

# Callback invoked with every status pushed by the device.
StatusCallback = Callable[[StatusEvent], None]

# Callback invoked when the session or connection is closed by the device.
CloseCallback = Callable[[], None]

# Callback invoked with a fatal transport fault.
ErrorCallback = Callable[[Exception], None]


class EventSource:
    """Listener registries shared by connections and players."""

    _status_callbacks: list[StatusCallback]
    """Callbacks invoked on status pushes."""
    _close_callbacks: list[CloseCallback]
    """Callbacks invoked on session close."""
    _error_callbacks: list[ErrorCallback]
    """Callbacks invoked on transport errors."""

    def __init__(self) -> None:
        """Initialize empty listener registries."""
        self._status_callbacks = []
        self._close_callbacks = []
        self._error_callbacks = []

    def add_status_listener(self, callback: StatusCallback) -> Callable[[], None]:
        """Add a listener for status pushes.

        Returns:
            A function that removes this listener when called.
        """
        self._status_callbacks.append(callback)
        return lambda: (
            self._status_callbacks.remove(callback)
            if callback in self._status_callbacks
            else None
        )

    def add_close_listener(self, callback: CloseCallback) -> Callable[[], None]:
        """Add a listener for session close events.

        Returns:
            A function that removes this listener when called.
        """
        self._close_callbacks.append(callback)
        return lambda: (
            self._close_callbacks.remove(callback) if callback in self._close_callbacks else None
        )

    def add_error_listener(self, callback: ErrorCallback) -> Callable[[], None]:
        """Add a listener for transport errors.

        Returns:
            A function that removes this listener when called.
        """
        self._error_callbacks.append(callback)
        return lambda: (
            self._error_callbacks.remove(callback) if callback in self._error_callbacks else None
        )

    def _notify_status(self, status: StatusEvent) -> None:
        for callback in list(self._status_callbacks):
            try:
                callback(status)
            except Exception:
                logger.exception("Error in status callback %s", callback)

    def _notify_close(self) -> None:
        for callback in list(self._close_callbacks):
            try:
                callback()
            except Exception:
                logger.exception("Error in close callback %s", callback)

    def _notify_error(self, error: Exception) -> None:
        for callback in list(self._error_callbacks):
            try:
                callback(error)
            except Exception:
                logger.exception("Error in error callback %s", callback)


class CastPlayer(EventSource, ABC):
    """Media namespace of a launched or joined receiver application."""

    @property
    @abstractmethod
    def media_session_id(self) -> int | None:
        """Return the current media session id, None if nothing is loaded."""

    @abstractmethod
    async def get_status(self) -> StatusEvent:
        """Request a fresh media status from the player."""

    @abstractmethod
    async def load(self, media: MediaItem, *, autoplay: bool = True) -> StatusEvent:
        """Load a single item."""

    @abstractmethod
    async def queue_load(self, queue: MediaQueue) -> StatusEvent:
        """Load an ordered queue of items."""

    @abstractmethod
    async def seek(self, position: float) -> StatusEvent:
        """Seek the current item to ``position`` seconds."""

    @abstractmethod
    async def pause(self) -> StatusEvent:
        """Pause playback."""

    @abstractmethod
    async def stop(self) -> StatusEvent:
        """Stop playback."""


class CastConnection(EventSource, ABC):
    """An open connection to one receiver."""

    @abstractmethod
    async def get_sessions(self) -> list[Session]:
        """List running receiver applications, most recently launched first."""

    @abstractmethod
    async def join(self, session: Session, app_id: str) -> CastPlayer:
        """Join a running session through the namespace of ``app_id``."""

    @abstractmethod
    async def launch(self, app_id: str) -> CastPlayer:
        """Launch ``app_id`` and return its player."""

    @abstractmethod
    async def get_status(self) -> StatusEvent:
        """Return the receiver status."""

    @abstractmethod
    async def get_volume(self) -> VolumeLevel:
        """Return the current volume."""

    @abstractmethod
    async def set_volume(self, volume: VolumeLevel) -> VolumeLevel:
        """Apply a volume instruction and return the resulting volume."""

    @abstractmethod
    async def close(self) -> None:
        """Close the connection."""


class CastTransport(ABC):
    """Factory of connections to receivers."""

    @abstractmethod
    async def connect(self, device: Device) -> CastConnection:
        """Open a connection to ``device``."""
