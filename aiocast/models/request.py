"""
Inbound request models.

A ``CastRequest`` is the already-normalized directive for one invocation: the
device to talk to, at most one media payload and the playback options.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin
from mashumaro.types import Alias

from .media import MediaItem, MediaQueue

DEFAULT_PORT = 8009
DEFAULT_DELAY_MS = 250
DEFAULT_LANGUAGE = "en"

# Symbolic volume values and the level each one stands for. Levels feed the
# same threshold rule as numeric input.
SYMBOLIC_VOLUME_LEVELS: dict[str, float] = {
    "max": 1.0,
    "full": 1.0,
    "loud": 1.0,
    "min": 0.0,
    "mute": 0.0,
    "muted": 0.0,
}


def _check_level(name: str, value: float | str | None) -> None:
    if value is None:
        return
    if isinstance(value, str):
        if value.lower() not in SYMBOLIC_VOLUME_LEVELS:
            raise ValueError(f"Unknown symbolic {name} '{value}'")
    elif not 0 <= value <= 1:
        raise ValueError(f"{name} must be in range 0-1, got {value}")


@dataclass(frozen=True)
class Device(DataClassORJSONMixin):
    """Network address of the receiver."""

    host: str
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        """Validate field values."""
        if not self.host:
            raise ValueError("host must not be empty")
        if not 0 < self.port < 65536:
            raise ValueError(f"port must be in range 1-65535, got {self.port}")

    def __str__(self) -> str:
        """Return ``host:port``."""
        return f"{self.host}:{self.port}"


@dataclass
class VolumeDirective(DataClassORJSONMixin):
    """Requested volume change.

    Bounds are only enforced when neither ``level`` nor ``muted`` is given.
    """

    level: float | str | None = None
    """Target level in [0, 1] or a symbolic value such as ``max`` or ``mute``."""
    muted: bool | None = None
    lower_limit: Annotated[float | None, Alias("lowerVolumeLimit")] = None
    upper_limit: Annotated[float | None, Alias("upperVolumeLimit")] = None

    def __post_init__(self) -> None:
        """Validate field values."""
        _check_level("level", self.level)
        _check_level("lower_limit", self.lower_limit)
        _check_level("upper_limit", self.upper_limit)
        if (
            self.lower_limit is not None
            and self.upper_limit is not None
            and self.lower_limit > self.upper_limit
        ):
            raise ValueError(
                f"lower_limit {self.lower_limit} is above upper_limit {self.upper_limit}"
            )

    @property
    def has_bounds(self) -> bool:
        """Return True if a lower or upper limit is set."""
        return self.lower_limit is not None or self.upper_limit is not None

    @property
    def is_empty(self) -> bool:
        """Return True if the directive asks for no volume change at all."""
        return self.level is None and self.muted is None and not self.has_bounds

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class PlaybackOptions(DataClassORJSONMixin):
    """Options applied alongside the primary action."""

    seek: float | None = None
    """Position in seconds to seek to after a successful load."""
    pause: bool = False
    stop: bool = False
    delay: int = DEFAULT_DELAY_MS
    """Milliseconds between the primary result and the speech overlay."""
    message: str | None = None
    """Text to speak after the primary action."""
    language: str = DEFAULT_LANGUAGE
    status: bool = False
    """Only report status, even if a media payload is present."""
    volume: VolumeDirective = field(default_factory=VolumeDirective)

    def __post_init__(self) -> None:
        """Validate field values."""
        if self.seek is not None and self.seek < 0:
            raise ValueError(f"seek must not be negative, got {self.seek}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")
        if not self.language:
            self.language = DEFAULT_LANGUAGE

    class Config(BaseConfig):
        """Config for parsing json messages."""

        omit_none = True


@dataclass
class CastRequest(DataClassORJSONMixin):
    """One invocation against one device."""

    device: Device
    media: MediaItem | None = None
    queue: MediaQueue | None = None
    options: PlaybackOptions = field(default_factory=PlaybackOptions)

    def __post_init__(self) -> None:
        """Enforce that at most one media payload is given."""
        if self.media is not None and self.queue is not None:
            raise ValueError("Only one of media and queue can be given")

    @property
    def payload(self) -> MediaItem | MediaQueue | None:
        """Return the media payload, if any."""
        return self.media if self.media is not None else self.queue

    class Config(BaseConfig):
        """Config for parsing json messages."""

        omit_none = True
