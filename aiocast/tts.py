"""Text to speech URL synthesis."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from urllib.parse import urlencode

from aiohttp import ClientError, ClientSession, ClientTimeout

from aiocast.errors import TtsError
from aiocast.models.request import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)

GOOGLE_TRANSLATE_HOST = "https://translate.google.com"
MAX_SPEECH_LENGTH = 200
DEFAULT_CHECK_TIMEOUT = 10.0


class SpeechSynthesizer(ABC):
    """Turns text into a URL the receiver can play."""

    @abstractmethod
    async def synthesize(self, text: str, language: str = DEFAULT_LANGUAGE) -> str:
        """
        Return a playable audio URL speaking ``text``.

        Raises:
            TtsError: If no URL can be produced.
        """

    async def close(self) -> None:
        """Release resources held by the synthesizer."""


class GoogleTranslateSynthesizer(SpeechSynthesizer):
    """
    Speech from the Google Translate TTS endpoint.

    The endpoint speaks at most ``MAX_SPEECH_LENGTH`` characters per request.
    With ``verify`` enabled the URL is requested once before it is handed to
    the receiver, so an unreachable service or a rejected language surfaces
    as a :class:`~aiocast.errors.TtsError` instead of a silent receiver.
    """

    _session: ClientSession | None
    """aiohttp session used to verify URLs."""
    _owns_session: bool
    """Whether this synthesizer owns and should close the session."""

    def __init__(
        self,
        *,
        session: ClientSession | None = None,
        host: str = GOOGLE_TRANSLATE_HOST,
        slow: bool = False,
        verify: bool = True,
        timeout: float = DEFAULT_CHECK_TIMEOUT,
    ) -> None:
        """
        Create a synthesizer.

        Args:
            session: Optional aiohttp ClientSession. If None and ``verify`` is
                set, a session is created on first use and closed by
                :meth:`close`.
            host: Base URL of the translate service.
            slow: Request slowed-down speech.
            verify: Request the URL before returning it.
            timeout: Seconds the verification request may take.
        """
        self._session = session
        self._owns_session = session is None
        self._host = host.rstrip("/")
        self._slow = slow
        self._verify = verify
        self._timeout = timeout

    def build_url(self, text: str, language: str = DEFAULT_LANGUAGE) -> str:
        """
        Return the TTS URL for ``text`` without contacting the service.

        Raises:
            TtsError: If ``text`` is empty or too long.
        """
        text = text.strip()
        if not text:
            raise TtsError("Text to speak must not be empty")
        if len(text) > MAX_SPEECH_LENGTH:
            raise TtsError(
                f"Text length ({len(text)}) should be less than {MAX_SPEECH_LENGTH} characters"
            )
        query = urlencode(
            {
                "ie": "UTF-8",
                "q": text,
                "tl": language or DEFAULT_LANGUAGE,
                "total": 1,
                "idx": 0,
                "textlen": len(text),
                "client": "tw-ob",
                "prev": "input",
                "ttsspeed": 0.24 if self._slow else 1,
            }
        )
        return f"{self._host}/translate_tts?{query}"

    async def synthesize(self, text: str, language: str = DEFAULT_LANGUAGE) -> str:
        """Return the TTS URL for ``text``, verified if configured."""
        url = self.build_url(text, language)
        if self._verify:
            await self._check(url)
        logger.debug("Returned tts media url '%s'", url)
        return url

    async def close(self) -> None:
        """Close the aiohttp session if this synthesizer created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def _check(self, url: str) -> None:
        if self._session is None:
            self._session = ClientSession()
        try:
            async with self._session.get(
                url, timeout=ClientTimeout(total=self._timeout)
            ) as response:
                if response.status >= 400:
                    raise TtsError(
                        f"Speech service answered {response.status} {response.reason}"
                    )
                content_type = response.headers.get("Content-Type", "")
                if content_type and not content_type.startswith("audio/"):
                    raise TtsError(f"Speech service returned {content_type} instead of audio")
        except ClientError as err:
            raise TtsError(f"Not able to reach speech service: {err}") from err
        except TimeoutError as err:
            raise TtsError(f"Timed out after {self._timeout}s contacting speech service") from err
