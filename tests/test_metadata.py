from __future__ import annotations

from aiocast.metadata import DEFAULT_IMAGE_URL, derive_title, enrich_media
from aiocast.models.media import DEFAULT_CONTENT_TYPE, MediaItem, MediaMetadata
from aiocast.models.types import StreamType


def test_title_from_path() -> None:
    assert derive_title("a/b/c/song.mp3") == "b - c"
    assert derive_title("http://nas.local/music/Artist/Album/01.mp3") == "Artist - Album"


def test_title_short_locators() -> None:
    assert derive_title("song.mp3") == "song.mp3"
    assert derive_title("album/song.mp3") == "album - song.mp3"


def test_enrich_derives_title_and_default_image() -> None:
    item = MediaItem(content_id="a/b/c/song.mp3")
    enriched = enrich_media(item)
    assert enriched.metadata is not None
    assert enriched.metadata.title == "b - c"
    assert [image.url for image in enriched.metadata.images] == [DEFAULT_IMAGE_URL]
    assert enriched.metadata.metadata_type == 0
    assert item.metadata is None


def test_enrich_keeps_supplied_title_and_image() -> None:
    item = MediaItem(
        content_id="a/b/c/song.mp3",
        image_url="http://img.local/own.png",
        metadata=MediaMetadata(title="Morning News"),
    )
    enriched = enrich_media(item)
    assert enriched.metadata is not None
    assert enriched.metadata.title == "Morning News"
    assert enriched.metadata.images[0].url == "http://img.local/own.png"

    explicit = enrich_media(item, image_url="http://img.local/other.png", title="Other")
    assert explicit.metadata is not None
    assert explicit.metadata.title == "Other"
    assert explicit.metadata.images[0].url == "http://img.local/other.png"


def test_content_defaults() -> None:
    item = MediaItem(content_id="http://x/a.mp3").with_defaults()
    assert item.content_type == DEFAULT_CONTENT_TYPE == "audio/basic"
    assert item.stream_type is StreamType.BUFFERED

    live = MediaItem(
        content_id="http://x/radio", content_type="audio/aac", stream_type=StreamType.LIVE
    ).with_defaults()
    assert live.content_type == "audio/aac"
    assert live.stream_type is StreamType.LIVE


def test_wire_format() -> None:
    item = enrich_media(MediaItem(content_id="a/b/c/song.mp3").with_defaults())
    data = item.to_dict()
    assert data["contentId"] == "a/b/c/song.mp3"
    assert data["contentType"] == "audio/basic"
    assert data["streamType"] == "BUFFERED"
    assert data["metadata"] == {
        "title": "b - c",
        "images": [{"url": DEFAULT_IMAGE_URL}],
        "metadataType": 0,
        "type": 0,
    }


def test_title_ignores_url_scheme_and_host() -> None:
    assert derive_title("http://x/a.mp3") == "a.mp3"
    assert derive_title("https://translate.google.com/translate_tts?q=hi") == "translate_tts"
    assert derive_title("http://nas.local/a/b.mp3") == "a - b.mp3"
    assert derive_title("http://nas.local") == "http://nas.local"
    assert derive_title("a/b/c/song.mp3") == "b - c"
