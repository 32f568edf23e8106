from __future__ import annotations

import pytest

from aiocast.client.connection import ConnectionManager
from aiocast.errors import VolumeError
from aiocast.models.request import Device, VolumeDirective
from aiocast.models.status import VolumeLevel
from aiocast.volume import apply_volume, normalize_volume, resolve_level

from .conftest import FakeTransport


def test_threshold_rule() -> None:
    assert normalize_volume(0) == VolumeLevel(muted=True)
    assert normalize_volume(0.009) == VolumeLevel(muted=True)
    assert normalize_volume(0.01) == VolumeLevel(level=0.01)
    assert normalize_volume(0.5) == VolumeLevel(level=0.5)
    assert normalize_volume(0.99) == VolumeLevel(level=0.99)
    assert normalize_volume(0.991) == VolumeLevel(level=1)
    assert normalize_volume(1) == VolumeLevel(level=1)


def test_symbolic_levels() -> None:
    for value in ("max", "FULL", "loud"):
        assert normalize_volume(value) == VolumeLevel(level=1)
    for value in ("min", "mute", " Muted "):
        assert normalize_volume(value) == VolumeLevel(muted=True)


def test_explicit_instruction_passes_through() -> None:
    instruction = VolumeLevel(level=0.005, muted=False)
    assert normalize_volume(instruction) is instruction


def test_invalid_values() -> None:
    with pytest.raises(VolumeError):
        resolve_level("quiet")
    with pytest.raises(VolumeError):
        resolve_level(True)  # type: ignore[arg-type]


def test_directive_validation() -> None:
    with pytest.raises(ValueError):
        VolumeDirective(level=1.5)
    with pytest.raises(ValueError):
        VolumeDirective(level="loudest")
    with pytest.raises(ValueError):
        VolumeDirective(lower_limit=0.8, upper_limit=0.2)
    assert VolumeDirective().is_empty
    assert not VolumeDirective(upper_limit=0.5).is_empty


async def _open(transport: FakeTransport) -> ConnectionManager:
    manager = ConnectionManager(transport, Device(host="10.0.0.5"))
    await manager.open()
    return manager


@pytest.mark.asyncio
async def test_upper_limit_lowers_volume(transport: FakeTransport) -> None:
    transport.connection.volume = VolumeLevel(level=0.8, muted=False)
    manager = await _open(transport)
    await apply_volume(manager, VolumeDirective(lower_limit=0.2, upper_limit=0.5))
    await manager.close()
    assert transport.connection.volume_calls == [VolumeLevel(level=0.5)]


@pytest.mark.asyncio
async def test_lower_limit_raises_volume(transport: FakeTransport) -> None:
    transport.connection.volume = VolumeLevel(level=0.1, muted=False)
    manager = await _open(transport)
    await apply_volume(manager, VolumeDirective(lower_limit=0.3))
    await manager.close()
    assert transport.connection.volume_calls == [VolumeLevel(level=0.3)]


@pytest.mark.asyncio
async def test_volume_within_limits_is_untouched(transport: FakeTransport) -> None:
    manager = await _open(transport)
    await apply_volume(manager, VolumeDirective(lower_limit=0.2, upper_limit=0.6))
    await manager.close()
    assert transport.connection.volume_calls == []


@pytest.mark.asyncio
async def test_explicit_level_ignores_limits(transport: FakeTransport) -> None:
    manager = await _open(transport)
    await apply_volume(manager, VolumeDirective(level=0.9, upper_limit=0.5))
    await manager.close()
    assert transport.connection.volume_calls == [VolumeLevel(level=0.9)]


@pytest.mark.asyncio
async def test_mute_and_level(transport: FakeTransport) -> None:
    manager = await _open(transport)
    await apply_volume(manager, VolumeDirective(level="max", muted=False))
    await manager.close()
    assert transport.connection.volume_calls == [
        VolumeLevel(muted=False),
        VolumeLevel(level=1),
    ]


@pytest.mark.asyncio
async def test_failed_volume_call_raises_volume_error(transport: FakeTransport) -> None:
    transport.connection.volume_error = RuntimeError("receiver busy")
    manager = await _open(transport)
    with pytest.raises(VolumeError, match="receiver busy"):
        await apply_volume(manager, VolumeDirective(level=0.3))
    await manager.close()
