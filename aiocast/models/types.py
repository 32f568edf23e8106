"""Models for enum types used by aiocast."""

from enum import Enum


class StreamType(Enum):
    """Enum for Cast media stream types."""

    BUFFERED = "BUFFERED"
    """Stored content with a known duration."""
    LIVE = "LIVE"
    """Live stream without a fixed duration."""
    NONE = "NONE"


class RepeatMode(Enum):
    """Enum for queue repeat modes."""

    REPEAT_OFF = "REPEAT_OFF"
    REPEAT_ALL = "REPEAT_ALL"
    REPEAT_SINGLE = "REPEAT_SINGLE"
    REPEAT_ALL_AND_SHUFFLE = "REPEAT_ALL_AND_SHUFFLE"


class PlayerState(Enum):
    """Enum for media player states reported by the receiver."""

    IDLE = "IDLE"
    PLAYING = "PLAYING"
    PAUSED = "PAUSED"
    BUFFERING = "BUFFERING"
    LOADING = "LOADING"
    UNKNOWN = "UNKNOWN"


class ErrorKind(Enum):
    """Machine-readable failure categories."""

    CONNECTION = "connection"
    """Transport-level failure, fatal to the invocation."""
    SESSION = "session"
    """Listing or joining a session failed."""
    LOAD = "load"
    """The device rejected a control action without a known reason."""
    LOAD_FAILED = "load_failed"
    """The load request failed; the player is idle."""
    INVALID_PLAYER_STATE = "invalid_player_state"
    """The player is not in a state that can fulfill the request."""
    LOAD_CANCELLED = "load_cancelled"
    """A second load request cancelled this one."""
    INVALID_REQUEST = "invalid_request"
    """The receiver did not understand the request."""
    VOLUME = "volume"
    """A volume side-channel call failed."""
    TTS = "tts"
    """Speech synthesis failed."""
    UNKNOWN = "unknown"
    """Failure with a message that matches no known phrase."""
    UNSPECIFIED = "unspecified"
    """Failure without any message."""


class ActionState(Enum):
    """States of a single cast action."""

    IDLE = "idle"
    CONNECTING = "connecting"
    SESSION_RESOLVING = "session_resolving"
    STATUS_ONLY = "status_only"
    LAUNCHING = "launching"
    JOINING = "joining"
    ACTING = "acting"
    REPORTING = "reporting"
    CLOSED = "closed"
