"""
Status and result models.

Receiver and media status snapshots are parsed from device pushes and never
mutated locally. ``ActionResult`` is what an action hands back to its caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin
from mashumaro.types import Alias

from .request import PlaybackOptions
from .types import ErrorKind, PlayerState


@dataclass
class Session(DataClassORJSONMixin):
    """A running receiver application instance."""

    session_id: Annotated[str, Alias("sessionId")]
    transport_id: Annotated[str | None, Alias("transportId")] = None
    app_id: Annotated[str | None, Alias("appId")] = None
    """Receiver application id, e.g. ``CC1AD845`` for the Default Media Receiver."""
    display_name: Annotated[str | None, Alias("displayName")] = None
    status_text: Annotated[str | None, Alias("statusText")] = None

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class VolumeLevel(DataClassORJSONMixin):
    """Concrete volume instruction or reading, level in [0, 1]."""

    level: float | None = None
    muted: bool | None = None
    control_type: Annotated[str | None, Alias("controlType")] = None
    step_interval: Annotated[float | None, Alias("stepInterval")] = None

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.level is not None and not 0 <= self.level <= 1:
            raise ValueError(f"Volume level must be in range 0-1, got {self.level}")

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class MediaStatus(DataClassORJSONMixin):
    """Media namespace status of the joined or launched player."""

    media_session_id: Annotated[int | None, Alias("mediaSessionId")] = None
    player_state: Annotated[PlayerState | None, Alias("playerState")] = None
    current_time: Annotated[float | None, Alias("currentTime")] = None
    idle_reason: Annotated[str | None, Alias("idleReason")] = None
    content_id: Annotated[str | None, Alias("contentId")] = None
    """Locator of the loaded media, lifted from the nested ``media`` object."""

    @classmethod
    def __pre_deserialize__(cls, d: dict[str, Any]) -> dict[str, Any]:
        """Flatten the nested media object and tolerate unknown player states."""
        d = dict(d)
        media = d.pop("media", None)
        if isinstance(media, dict) and "contentId" not in d:
            d["contentId"] = media.get("contentId")
        state = d.get("playerState")
        if state is not None and state not in {member.value for member in PlayerState}:
            d["playerState"] = PlayerState.UNKNOWN.value
        return d

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class StatusEvent(DataClassORJSONMixin):
    """Snapshot of the device as last reported."""

    applications: list[Session] = field(default_factory=list)
    """Running receiver applications, empty when the device is idle."""
    volume: VolumeLevel | None = None
    media: MediaStatus | None = None
    """Player status, present after a load, seek or player status refresh."""

    @property
    def is_idle(self) -> bool:
        """Return True if no receiver application is running."""
        return not self.applications

    @property
    def player_state(self) -> PlayerState | None:
        """Return the reported player state, if any."""
        return self.media.player_state if self.media else None

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class CastFailure(DataClassORJSONMixin):
    """A classified, renderable failure."""

    kind: ErrorKind
    message: str
    context: str | None = None
    """What was being attempted when the failure happened."""

    class Config(BaseConfig):
        """Config for parsing json messages."""

        omit_none = True


@dataclass
class ActionResult(DataClassORJSONMixin):
    """Outcome of one cast action, echoing the options that produced it."""

    options: PlaybackOptions
    status: StatusEvent | None = None
    """Last status observed by the action."""
    error: CastFailure | None = None
    speech_url: Annotated[str | None, Alias("speechUrl")] = None
    """Synthesized audio URL on speech paths."""
    speech_status: Annotated[StatusEvent | None, Alias("speechStatus")] = None
    """Status of the speech overlay load."""
    speech_error: Annotated[CastFailure | None, Alias("speechError")] = None
    """Failure of the speech overlay; never affects ``ok``."""

    @property
    def ok(self) -> bool:
        """Return True if the primary action succeeded."""
        return self.error is None

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True
