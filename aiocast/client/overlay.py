"""Spoken messages cast after a primary action."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from aiocast.errors import CastError, TtsError
from aiocast.models.media import MediaItem
from aiocast.models.request import Device, PlaybackOptions
from aiocast.models.status import ActionResult
from aiocast.models.types import StreamType
from aiocast.transport.base import StatusCallback
from aiocast.tts import SpeechSynthesizer

from .executor import ActionExecutor

logger = logging.getLogger(__name__)

SPEECH_CONTENT_TYPE = "audio/mp3"

_T = TypeVar("_T")

# Callback run once the delay has passed, with the text and language to speak.
ReadyCallback = Callable[[str, str], Awaitable[_T]]


@dataclass(slots=True)
class SpeechCast:
    """A synthesized message and the result of casting it."""

    url: str
    result: ActionResult


class SpeechOverlayScheduler:
    """Delay, synthesize and cast a spoken message."""

    def __init__(self, executor: ActionExecutor, synthesizer: SpeechSynthesizer) -> None:
        """Cast speech through ``executor`` using URLs from ``synthesizer``."""
        self._executor = executor
        self._synthesizer = synthesizer

    async def schedule(
        self,
        delay_ms: int,
        text: str,
        language: str,
        on_ready: ReadyCallback[_T],
        *,
        delivered_at: float | None = None,
    ) -> _T:
        """
        Run ``on_ready`` once ``delay_ms`` have passed since ``delivered_at``.

        Args:
            delay_ms: Delay in milliseconds.
            text: Message to speak.
            language: Language of the message.
            on_ready: Coroutine function called with ``text`` and ``language``.
            delivered_at: Event loop time at which the primary result was
                delivered. Defaults to now.

        Returns:
            Whatever ``on_ready`` returns.
        """
        loop = asyncio.get_running_loop()
        start = loop.time() if delivered_at is None else delivered_at
        remaining = start + delay_ms / 1000 - loop.time()
        if remaining > 0:
            logger.debug("Speaking message in %.0f ms", remaining * 1000)
            await asyncio.sleep(remaining)
        return await on_ready(text, language)

    async def speak(
        self,
        device: Device,
        text: str,
        language: str,
        options: PlaybackOptions | None = None,
        *,
        on_status: StatusCallback | None = None,
    ) -> SpeechCast:
        """
        Synthesize ``text`` and load it on ``device`` as a single item.

        Only the volume directive of ``options`` is applied again. Status pushes of
        the load go to ``on_status``.

        Raises:
            TtsError: If synthesis fails.
        """
        try:
            url = await self._synthesizer.synthesize(text, language)
        except CastError:
            raise
        except Exception as err:
            raise TtsError(f"Not able to get media file via tts: {err}") from err

        media = MediaItem(
            content_id=url,
            content_type=SPEECH_CONTENT_TYPE,
            stream_type=StreamType.BUFFERED,
        )
        speech_options = PlaybackOptions(
            language=language,
            volume=options.volume if options is not None else PlaybackOptions().volume,
        )
        logger.info("Play message on %s", device)
        result = await self._executor.execute(
            device, media, speech_options, on_status=on_status
        )
        return SpeechCast(url=url, result=result)
