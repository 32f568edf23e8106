from __future__ import annotations

from aiocast.errors import (
    CastConnectionError,
    CastTimeoutError,
    LoadError,
    TtsError,
    classify,
)
from aiocast.models.types import ErrorKind


def test_receiver_phrases() -> None:
    failure = classify(LoadError("LOAD_FAILED"), "Not able to load media")
    assert failure.kind is ErrorKind.LOAD_FAILED
    assert failure.message == "Not able to load media: LOAD_FAILED Not able to load the media."
    assert failure.context == "Not able to load media"

    assert classify("Invalid Player State").kind is ErrorKind.INVALID_PLAYER_STATE
    assert classify("load cancelled by receiver").kind is ErrorKind.LOAD_CANCELLED
    assert classify(RuntimeError("INVALID_REQUEST (INVALID_COMMAND)")).kind is (
        ErrorKind.INVALID_REQUEST
    )


def test_kind_from_exception() -> None:
    assert classify(CastConnectionError("socket closed")).kind is ErrorKind.CONNECTION
    assert classify(CastTimeoutError("Timed out")).kind is ErrorKind.CONNECTION
    assert classify(TtsError("service down")).kind is ErrorKind.TTS
    failure = classify(ValueError("bad input"), "Cast failed")
    assert failure.kind is ErrorKind.UNKNOWN
    assert failure.message == "Cast failed: bad input"


def test_empty_message() -> None:
    for error in (None, "", RuntimeError()):
        failure = classify(error, "Not able to seek")
        assert failure.kind is ErrorKind.UNSPECIFIED
        assert failure.message == "Not able to seek! (No error message given!)"


def test_unprintable_error() -> None:
    class Broken(Exception):
        def __str__(self) -> str:
            raise RuntimeError("no")

    failure = classify(Broken(), "Cast failed")
    assert failure.kind is ErrorKind.UNKNOWN
    assert failure.message == "Cast failed: Broken"
