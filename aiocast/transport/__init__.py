"""Device control transports."""

from .base import (
    DEFAULT_MEDIA_RECEIVER_APP_ID,
    CastConnection,
    CastPlayer,
    CastTransport,
    CloseCallback,
    ErrorCallback,
    EventSource,
    StatusCallback,
)

__all__ = [
    "DEFAULT_MEDIA_RECEIVER_APP_ID",
    "CastConnection",
    "CastPlayer",
    "CastTransport",
    "CloseCallback",
    "ErrorCallback",
    "EventSource",
    "StatusCallback",
]
