"""Models for the Cast media control protocol."""

from __future__ import annotations

__all__ = [
    "ActionResult",
    "ActionState",
    "CastFailure",
    "CastRequest",
    "Device",
    "ErrorKind",
    "MediaImage",
    "MediaItem",
    "MediaMetadata",
    "MediaQueue",
    "MediaStatus",
    "PlaybackOptions",
    "PlayerState",
    "QueueItem",
    "RepeatMode",
    "Session",
    "StatusEvent",
    "StreamType",
    "VolumeDirective",
    "VolumeLevel",
    "media",
    "request",
    "status",
    "types",
]

from . import media, request, status, types
from .media import MediaImage, MediaItem, MediaMetadata, MediaQueue, QueueItem
from .request import CastRequest, Device, PlaybackOptions, VolumeDirective
from .status import ActionResult, CastFailure, MediaStatus, Session, StatusEvent, VolumeLevel
from .types import ActionState, ErrorKind, PlayerState, RepeatMode, StreamType
