from __future__ import annotations

import orjson
import pytest

from aiocast.models.media import MediaItem, MediaQueue
from aiocast.models.request import CastRequest, Device, PlaybackOptions
from aiocast.models.status import ActionResult, MediaStatus, StatusEvent
from aiocast.models.types import PlayerState, RepeatMode, StreamType


def test_queue_numbering() -> None:
    urls = [f"http://nas.local/music/track{index}.mp3" for index in range(4)]
    queue = MediaQueue.from_urls(urls)
    assert [item.start_time for item in queue.items] == [1, 2, 3, 4]
    assert {item.preload_time for item in queue.items} == {4}
    assert all(item.autoplay for item in queue.items)
    assert all(item.playback_duration == 2 for item in queue.items)
    assert queue.start_index == 1
    assert queue.repeat_mode is RepeatMode.REPEAT_OFF
    assert queue.items[0].media.content_type == "audio/basic"
    assert queue.items[0].media.stream_type is StreamType.BUFFERED


def test_queue_overrides() -> None:
    queue = MediaQueue.from_urls(
        ["http://x/a.mp3"],
        content_type="audio/mpeg",
        repeat_mode=RepeatMode.REPEAT_ALL,
        image_url="http://x/cover.png",
    )
    data = queue.to_dict()
    assert data["repeatMode"] == "REPEAT_ALL"
    assert data["startIndex"] == 1
    assert data["imageUrl"] == "http://x/cover.png"
    item = data["items"][0]
    assert item["preloadTime"] == 1
    assert item["startTime"] == 1
    assert item["activeTrackIds"] == []
    assert item["media"]["contentType"] == "audio/mpeg"


def test_queue_rejects_empty_items() -> None:
    with pytest.raises(ValueError):
        MediaQueue(items=[])


def test_media_item_validation() -> None:
    with pytest.raises(ValueError):
        MediaItem(content_id="")
    with pytest.raises(ValueError):
        MediaItem(content_id="http://x/a.mp3", duration=-1)


def test_device() -> None:
    assert str(Device(host="10.0.0.2")) == "10.0.0.2:8009"
    with pytest.raises(ValueError):
        Device(host="")
    with pytest.raises(ValueError):
        Device(host="10.0.0.2", port=0)


def test_request_from_json() -> None:
    request = CastRequest.from_json(
        orjson.dumps(
            {
                "device": {"host": "10.0.0.2", "port": 8010},
                "media": {"contentId": "http://x/a.mp3", "streamType": "LIVE"},
                "options": {
                    "seek": 12.5,
                    "message": "Hello",
                    "language": "de",
                    "volume": {"level": "max", "upperVolumeLimit": 0.8},
                },
            }
        )
    )
    assert request.device == Device(host="10.0.0.2", port=8010)
    assert isinstance(request.payload, MediaItem)
    assert request.payload.stream_type is StreamType.LIVE
    assert request.options.seek == 12.5
    assert request.options.delay == 250
    assert request.options.volume.level == "max"
    assert request.options.volume.upper_limit == 0.8


def test_request_rejects_two_payloads() -> None:
    media = MediaItem(content_id="http://x/a.mp3")
    with pytest.raises(ValueError):
        CastRequest(
            device=Device(host="10.0.0.2"),
            media=media,
            queue=MediaQueue.from_urls(["http://x/b.mp3"]),
        )


def test_options_validation() -> None:
    with pytest.raises(ValueError):
        PlaybackOptions(seek=-1)
    with pytest.raises(ValueError):
        PlaybackOptions(delay=-5)
    assert PlaybackOptions(language="").language == "en"


def test_media_status_parsing() -> None:
    status = MediaStatus.from_dict(
        {
            "mediaSessionId": 7,
            "playerState": "PLAYING",
            "currentTime": 3.5,
            "media": {"contentId": "http://x/a.mp3", "streamType": "BUFFERED"},
        }
    )
    assert status.media_session_id == 7
    assert status.player_state is PlayerState.PLAYING
    assert status.content_id == "http://x/a.mp3"

    odd = MediaStatus.from_dict({"mediaSessionId": 1, "playerState": "SEEKING"})
    assert odd.player_state is PlayerState.UNKNOWN


def test_idle_status() -> None:
    event = StatusEvent(applications=[])
    assert event.is_idle
    assert event.player_state is None
    assert event.to_dict() == {"applications": []}


def test_result_serialization() -> None:
    result = ActionResult(
        options=PlaybackOptions(message="Hi"),
        status=StatusEvent(),
        speech_url="http://tts.local/a.mp3",
    )
    assert result.ok
    data = orjson.loads(result.to_json())
    assert data["speechUrl"] == "http://tts.local/a.mp3"
    assert "error" not in data
    assert data["options"]["message"] == "Hi"
