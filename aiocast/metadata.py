"""Display metadata for media items."""

from __future__ import annotations

import logging
from dataclasses import replace
from urllib.parse import urlsplit

from aiocast.models.media import MediaImage, MediaItem, MediaMetadata

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_URL = "https://www.gstatic.com/cast/images/cast-logo.png"
TITLE_SEPARATOR = " - "


def derive_title(content_id: str) -> str:
    """
    Derive a display title from a content locator.

    The two path segments ahead of the file name are kept, so
    ``a/b/c/song.mp3`` becomes ``b - c``. Locators with two or fewer segments
    keep all of them, and anything that cannot be split is returned unchanged.
    Only the path of a URL is used, never its scheme or host.
    """
    if "/" not in content_id:
        return content_id
    try:
        path = urlsplit(content_id).path
        segments = [segment for segment in path.split("/") if segment]
        if len(segments) > 2:
            segments = segments[-3:-1]
        return TITLE_SEPARATOR.join(segments) or content_id
    except (AttributeError, TypeError, ValueError):
        return content_id


def enrich_media(
    item: MediaItem,
    image_url: str | None = None,
    title: str | None = None,
) -> MediaItem:
    """
    Return a copy of ``item`` carrying generic display metadata.

    Args:
        item: The item to enrich; it is not modified.
        image_url: Artwork to show. Falls back to the item's own image, then
            to ``DEFAULT_IMAGE_URL``.
        title: Title to show. Derived from the content locator if omitted.
    """
    if not title:
        if item.metadata is not None and item.metadata.title:
            title = item.metadata.title
        else:
            title = derive_title(item.content_id)
    if not image_url:
        image_url = item.image_url or DEFAULT_IMAGE_URL
    logger.debug("Metadata for %s: title=%r image=%s", item.content_id, title, image_url)
    return replace(
        item,
        metadata=MediaMetadata(title=title, images=[MediaImage(url=image_url)]),
    )
