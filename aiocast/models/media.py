"""
Media descriptors for the Cast media namespace.

This module contains the media objects sent to a receiver in LOAD and
QUEUE_LOAD requests. Field names follow the receiver's camelCase wire format
through mashumaro aliases, so ``to_dict()`` yields a message body the
receiver accepts as-is.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Annotated

from mashumaro.config import BaseConfig
from mashumaro.mixins.orjson import DataClassORJSONMixin
from mashumaro.types import Alias

from .types import RepeatMode, StreamType

DEFAULT_CONTENT_TYPE = "audio/basic"
GENERIC_METADATA_TYPE = 0


@dataclass
class MediaImage(DataClassORJSONMixin):
    """Artwork reference shown by the receiver."""

    url: str


@dataclass
class MediaMetadata(DataClassORJSONMixin):
    """Generic media metadata (metadataType 0)."""

    title: str | None = None
    """Display title."""
    images: list[MediaImage] = field(default_factory=list)
    """Artwork, first entry is shown."""
    metadata_type: Annotated[int, Alias("metadataType")] = GENERIC_METADATA_TYPE
    # Older receivers read the legacy "type" key instead of metadataType.
    type: int = GENERIC_METADATA_TYPE

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class MediaItem(DataClassORJSONMixin):
    """A single playable item."""

    content_id: Annotated[str, Alias("contentId")]
    """Locator of the content, usually a URL."""
    content_type: Annotated[str | None, Alias("contentType")] = None
    """MIME type; blank values are replaced with ``audio/basic`` on load."""
    stream_type: Annotated[StreamType | None, Alias("streamType")] = None
    """Stream type; missing values are replaced with BUFFERED on load."""
    duration: float | None = None
    """Duration in seconds, if known."""
    image_url: Annotated[str | None, Alias("imageUrl")] = None
    """Artwork for this item, used when enriching metadata."""
    metadata: MediaMetadata | None = None
    """Display metadata, see :func:`aiocast.metadata.enrich_media`."""

    def __post_init__(self) -> None:
        """Validate field values."""
        if not self.content_id:
            raise ValueError("content_id must not be empty")
        if self.duration is not None and self.duration < 0:
            raise ValueError(f"duration must not be negative, got {self.duration}")

    def with_defaults(self) -> MediaItem:
        """Return a copy with blank content and stream types defaulted."""
        return replace(
            self,
            content_type=self.content_type or DEFAULT_CONTENT_TYPE,
            stream_type=self.stream_type or StreamType.BUFFERED,
        )

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class QueueItem(DataClassORJSONMixin):
    """Queue entry wrapping a media item with per-item playback hints."""

    media: MediaItem
    autoplay: bool = True
    preload_time: Annotated[float | None, Alias("preloadTime")] = None
    """Seconds before the previous item ends at which this one is preloaded."""
    start_time: Annotated[float | None, Alias("startTime")] = None
    """Seconds into the item at which playback starts."""
    active_track_ids: Annotated[list[int], Alias("activeTrackIds")] = field(default_factory=list)
    playback_duration: Annotated[float | None, Alias("playbackDuration")] = None

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True


@dataclass
class MediaQueue(DataClassORJSONMixin):
    """Ordered list of items loaded as one playback unit."""

    items: list[QueueItem]
    image_url: Annotated[str | None, Alias("imageUrl")] = None
    """Artwork applied to every item that has none of its own."""
    start_index: Annotated[int, Alias("startIndex")] = 1
    repeat_mode: Annotated[RepeatMode, Alias("repeatMode")] = RepeatMode.REPEAT_OFF

    def __post_init__(self) -> None:
        """Validate field values."""
        if not self.items:
            raise ValueError("items cannot be empty")
        if self.start_index < 0:
            raise ValueError(f"start_index must not be negative, got {self.start_index}")

    @classmethod
    def from_urls(
        cls,
        urls: list[str],
        *,
        content_type: str | None = None,
        stream_type: StreamType = StreamType.BUFFERED,
        image_url: str | None = None,
        repeat_mode: RepeatMode = RepeatMode.REPEAT_OFF,
    ) -> MediaQueue:
        """
        Build a queue from plain locators.

        Every item autoplays, preloads with ``len(urls)`` seconds of lead time
        and receives a 1-based start time matching its position.

        Args:
            urls: Content locators in playback order.
            content_type: MIME type for every item; defaults to ``audio/basic``.
            stream_type: Stream type for every item.
            image_url: Shared artwork for the queue.
            repeat_mode: Queue repeat mode, off by default.
        """
        size = len(urls)
        items = [
            QueueItem(
                media=MediaItem(
                    content_id=url,
                    content_type=content_type or DEFAULT_CONTENT_TYPE,
                    stream_type=stream_type,
                ),
                autoplay=True,
                preload_time=size,
                start_time=index + 1,
                active_track_ids=[],
                playback_duration=2,
            )
            for index, url in enumerate(urls)
        ]
        return cls(items=items, image_url=image_url, repeat_mode=repeat_mode)

    class Config(BaseConfig):
        """Config for parsing json messages."""

        serialize_by_alias = True
        omit_none = True
