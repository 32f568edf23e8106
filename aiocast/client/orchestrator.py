"""Entry point tying the executor and the speech overlay together."""

from __future__ import annotations

import asyncio
import logging

from aiocast.errors import report_failure
from aiocast.models.request import CastRequest
from aiocast.models.status import ActionResult
from aiocast.transport.base import DEFAULT_MEDIA_RECEIVER_APP_ID, CastTransport, StatusCallback
from aiocast.tts import GoogleTranslateSynthesizer, SpeechSynthesizer

from .connection import DEFAULT_CALL_TIMEOUT, DEFAULT_DRAIN_TIMEOUT
from .executor import ActionExecutor, ResultCallback
from .overlay import SpeechCast, SpeechOverlayScheduler

logger = logging.getLogger(__name__)


class CastOrchestrator:
    """
    Run cast requests against single devices.

    A request with a media payload runs the primary action and, if a message
    was given, speaks it ``options.delay`` milliseconds after the primary
    result was delivered. A message without media is spoken right away, and
    a request without either only reports status.

    The orchestrator never raises from :meth:`cast`; failures are reported in
    the returned :class:`~aiocast.models.status.ActionResult`.
    """

    _owns_synthesizer: bool
    """Whether this orchestrator created and should close the synthesizer."""

    def __init__(
        self,
        transport: CastTransport,
        synthesizer: SpeechSynthesizer | None = None,
        *,
        app_id: str = DEFAULT_MEDIA_RECEIVER_APP_ID,
        call_timeout: float | None = DEFAULT_CALL_TIMEOUT,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ) -> None:
        """
        Create an orchestrator.

        Args:
            transport: Transport used to reach devices.
            synthesizer: Speech synthesizer for messages. Defaults to a
                :class:`~aiocast.tts.GoogleTranslateSynthesizer` owned by this
                orchestrator.
            app_id: Receiver application used for media.
            call_timeout: Seconds a single device call may take.
            drain_timeout: Seconds to wait for volume, pause and stop calls
                when closing a connection.
        """
        self._executor = ActionExecutor(
            transport,
            app_id=app_id,
            call_timeout=call_timeout,
            drain_timeout=drain_timeout,
        )
        self._owns_synthesizer = synthesizer is None
        self._synthesizer = synthesizer or GoogleTranslateSynthesizer()
        self._overlay = SpeechOverlayScheduler(self._executor, self._synthesizer)

    @property
    def executor(self) -> ActionExecutor:
        """Return the executor used for every action."""
        return self._executor

    async def cast(
        self,
        request: CastRequest,
        *,
        on_result: ResultCallback | None = None,
        on_status: StatusCallback | None = None,
    ) -> ActionResult:
        """
        Run ``request``.

        Args:
            request: What to do and where.
            on_result: Called with the primary result as soon as it is known,
                before any speech overlay runs.
            on_status: Called with every status pushed by the device.

        Returns:
            The primary result, with the speech fields filled in on speech paths.
        """
        try:
            if request.payload is None and request.options.message and not request.options.status:
                return await self._cast_speech(request, on_result, on_status)
            return await self._cast_primary(request, on_result, on_status)
        except Exception as err:  # noqa: BLE001
            failure = report_failure(err, "Exception occurred on cast media to output")
            return ActionResult(options=request.options, error=failure)

    async def close(self) -> None:
        """Release the synthesizer if this orchestrator created it."""
        if self._owns_synthesizer:
            await self._synthesizer.close()

    async def _cast_primary(
        self,
        request: CastRequest,
        on_result: ResultCallback | None,
        on_status: StatusCallback | None,
    ) -> ActionResult:
        loop = asyncio.get_running_loop()
        delivered_at: float | None = None

        def _deliver(result: ActionResult) -> None:
            nonlocal delivered_at
            delivered_at = loop.time()
            if on_result is not None:
                on_result(result)

        options = request.options
        logger.debug("Initialize playing on %s", request.device)
        result = await self._executor.execute(
            request.device,
            request.payload,
            options,
            on_result=_deliver,
            on_status=on_status,
        )
        if not options.message or options.status:
            return result
        if not result.ok:
            logger.warning("Primary action failed, not speaking message on %s", request.device)
            return result

        try:
            speech: SpeechCast = await self._overlay.schedule(
                options.delay,
                options.message,
                options.language,
                lambda text, language: self._overlay.speak(
                    request.device, text, language, options, on_status=on_status
                ),
                delivered_at=delivered_at,
            )
        except Exception as err:  # noqa: BLE001
            result.speech_error = report_failure(err, "Not able to get media file via tts")
            return result

        result.speech_url = speech.url
        result.speech_status = speech.result.status
        result.speech_error = speech.result.error
        return result

    async def _cast_speech(
        self,
        request: CastRequest,
        on_result: ResultCallback | None,
        on_status: StatusCallback | None,
    ) -> ActionResult:
        options = request.options
        assert options.message is not None
        logger.debug(
            "Initialize getting tts message '%s' of language '%s'", options.message, options.language
        )
        try:
            speech = await self._overlay.speak(
                request.device,
                options.message,
                options.language,
                options,
                on_status=on_status,
            )
        except Exception as err:  # noqa: BLE001
            result = ActionResult(
                options=options,
                error=report_failure(err, "Not able to get media file via tts"),
            )
        else:
            result = ActionResult(
                options=options,
                status=speech.result.status,
                error=speech.result.error,
                speech_url=speech.url,
                speech_status=speech.result.status,
                speech_error=speech.result.error,
            )
        if on_result is not None:
            try:
                on_result(result)
            except Exception:
                logger.exception("Error in result callback %s", on_result)
        return result
