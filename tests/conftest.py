from __future__ import annotations

import asyncio

import pytest

from aiocast.errors import TtsError
from aiocast.models.media import MediaItem, MediaQueue
from aiocast.models.request import Device
from aiocast.models.status import MediaStatus, Session, StatusEvent, VolumeLevel
from aiocast.models.types import PlayerState
from aiocast.transport.base import CastConnection, CastPlayer, CastTransport
from aiocast.tts import SpeechSynthesizer


class FakePlayer(CastPlayer):
    def __init__(self, connection: FakeConnection) -> None:
        super().__init__()
        self.connection = connection
        self.calls: list[str] = []
        self.loaded: list[MediaItem | MediaQueue] = []
        self.load_error: Exception | None = None
        self.load_gate: asyncio.Event | None = None
        self.fail_load_with_transport_error: Exception | None = None
        self._media_session_id: int | None = None

    @property
    def media_session_id(self) -> int | None:
        return self._media_session_id

    def _status(self, state: PlayerState, content_id: str | None = None) -> StatusEvent:
        return StatusEvent(
            applications=list(self.connection.sessions),
            volume=self.connection.volume,
            media=MediaStatus(
                media_session_id=self._media_session_id,
                player_state=state,
                content_id=content_id,
            ),
        )

    async def get_status(self) -> StatusEvent:
        self.calls.append("get_status")
        self._media_session_id = self._media_session_id or 1
        return self._status(PlayerState.PLAYING)

    async def _load(self, payload: MediaItem | MediaQueue, content_id: str) -> StatusEvent:
        if self.fail_load_with_transport_error is not None:
            self.connection.emit_error(self.fail_load_with_transport_error)
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_error is not None:
            raise self.load_error
        self.loaded.append(payload)
        self._media_session_id = (self._media_session_id or 0) + 1
        status = self._status(PlayerState.BUFFERING, content_id)
        self._notify_status(status)
        return status

    async def load(self, media: MediaItem, *, autoplay: bool = True) -> StatusEvent:
        self.calls.append("load")
        return await self._load(media, media.content_id)

    async def queue_load(self, queue: MediaQueue) -> StatusEvent:
        self.calls.append("queue_load")
        return await self._load(queue, queue.items[0].media.content_id)

    async def seek(self, position: float) -> StatusEvent:
        self.calls.append(f"seek:{position}")
        status = self._status(PlayerState.PLAYING)
        assert status.media is not None
        status.media.current_time = position
        return status

    async def pause(self) -> StatusEvent:
        self.calls.append("pause")
        return self._status(PlayerState.PAUSED)

    async def stop(self) -> StatusEvent:
        self.calls.append("stop")
        return self._status(PlayerState.IDLE)


class FakeConnection(CastConnection):
    def __init__(self) -> None:
        super().__init__()
        self.sessions: list[Session] = []
        self.volume = VolumeLevel(level=0.4, muted=False)
        self.volume_calls: list[VolumeLevel] = []
        self.volume_gate: asyncio.Event | None = None
        self.volume_error: Exception | None = None
        self.sessions_error: Exception | None = None
        self.launched: list[str] = []
        self.joined: list[str] = []
        self.close_count = 0
        self.player = FakePlayer(self)

    def emit_error(self, error: Exception) -> None:
        self._notify_error(error)

    def emit_close(self) -> None:
        self._notify_close()

    async def get_sessions(self) -> list[Session]:
        if self.sessions_error is not None:
            raise self.sessions_error
        return list(self.sessions)

    async def join(self, session: Session, app_id: str) -> CastPlayer:
        self.joined.append(session.session_id)
        return self.player

    async def launch(self, app_id: str) -> CastPlayer:
        self.launched.append(app_id)
        self.sessions = [Session(session_id="launched-1", app_id=app_id)]
        return self.player

    async def get_status(self) -> StatusEvent:
        return StatusEvent(applications=list(self.sessions), volume=self.volume)

    async def get_volume(self) -> VolumeLevel:
        return self.volume

    async def set_volume(self, volume: VolumeLevel) -> VolumeLevel:
        self.volume_calls.append(volume)
        if self.volume_gate is not None:
            await self.volume_gate.wait()
        if self.volume_error is not None:
            raise self.volume_error
        self.volume = VolumeLevel(
            level=volume.level if volume.level is not None else self.volume.level,
            muted=volume.muted if volume.muted is not None else self.volume.muted,
        )
        return self.volume

    async def close(self) -> None:
        self.close_count += 1


class FakeTransport(CastTransport):
    def __init__(self) -> None:
        self.connection = FakeConnection()
        self.connect_error: Exception | None = None
        self.connects: list[Device] = []

    async def connect(self, device: Device) -> CastConnection:
        self.connects.append(device)
        if self.connect_error is not None:
            raise self.connect_error
        return self.connection


class FakeSynthesizer(SpeechSynthesizer):
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, float]] = []
        self.error: Exception | None = None
        self.closed = False

    async def synthesize(self, text: str, language: str = "en") -> str:
        self.calls.append((text, language, asyncio.get_running_loop().time()))
        if self.error is not None:
            raise self.error
        return f"http://tts.local/speech.mp3?lang={language}"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def device() -> Device:
    return Device(host="192.168.1.20")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connection(transport: FakeTransport) -> FakeConnection:
    return transport.connection


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def failing_synthesizer() -> FakeSynthesizer:
    synthesizer = FakeSynthesizer()
    synthesizer.error = TtsError("Speech service answered 503 Service Unavailable")
    return synthesizer
