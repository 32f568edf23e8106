"""Exceptions raised by aiocast and classification of device failures."""

from __future__ import annotations

import logging

from aiocast.models.status import CastFailure
from aiocast.models.types import ErrorKind

logger = logging.getLogger(__name__)


class CastError(Exception):
    """Base class for all aiocast errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN


class CastConnectionError(CastError):
    """The transport failed or was closed; fatal to the invocation."""

    kind = ErrorKind.CONNECTION


class CastTimeoutError(CastConnectionError):
    """A device call did not finish within the configured timeout."""


class SessionError(CastError):
    """Listing or joining a receiver session failed."""

    kind = ErrorKind.SESSION


class LoadError(CastError):
    """The receiver rejected a media or control request."""

    kind = ErrorKind.LOAD


class VolumeError(CastError):
    """A volume call failed or a volume value could not be understood."""

    kind = ErrorKind.VOLUME


class TtsError(CastError):
    """Speech synthesis failed."""

    kind = ErrorKind.TTS


# Receiver error vocabulary, checked in order against the lower-cased message.
# https://developers.google.com/cast/docs/reference/messages
_PHRASES: tuple[tuple[str, ErrorKind, str], ...] = (
    (
        "invalid player state",
        ErrorKind.INVALID_PLAYER_STATE,
        "The request can not be fulfilled because the player is not in a valid state.",
    ),
    ("load failed", ErrorKind.LOAD_FAILED, "Not able to load the media."),
    (
        "load cancelled",
        ErrorKind.LOAD_CANCELLED,
        "The request was cancelled (a second load request was received).",
    ),
    (
        "invalid request",
        ErrorKind.INVALID_REQUEST,
        "The request is invalid (example: an unknown request type).",
    ),
)


def classify(error: BaseException | str | None, context: str = "Cast failed") -> CastFailure:
    """
    Map a raw failure to a kind and a human-readable message.

    Receiver phrases win over the kind carried by an aiocast exception, so a
    ``LoadError("LOAD_FAILED")`` is reported as ``LOAD_FAILED``. Never raises.

    Args:
        error: The exception or raw error text, or None.
        context: What was being attempted, prefixed to the message.

    Returns:
        The classified failure.
    """
    try:
        raw = "" if error is None else str(error).strip()
    except Exception:  # noqa: BLE001
        raw = type(error).__name__
    if not raw:
        return CastFailure(
            kind=ErrorKind.UNSPECIFIED,
            message=f"{context}! (No error message given!)",
            context=context,
        )

    # Receivers report reasons like LOAD_FAILED, so underscores count as spaces.
    text = raw.lower().replace("_", " ")
    for phrase, kind, explanation in _PHRASES:
        if phrase in text:
            return CastFailure(kind=kind, message=f"{context}: {raw} {explanation}", context=context)

    kind = error.kind if isinstance(error, CastError) else ErrorKind.UNKNOWN
    return CastFailure(kind=kind, message=f"{context}: {raw}", context=context)


def report_failure(error: BaseException | str | None, context: str) -> CastFailure:
    """Classify ``error`` and log it."""
    failure = classify(error, context)
    logger.error(failure.message)
    logger.debug("%s: %r", failure.kind.value, error)
    return failure
