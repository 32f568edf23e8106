"""Volume normalization and the volume side channel."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiocast.errors import CastConnectionError, VolumeError
from aiocast.models.request import SYMBOLIC_VOLUME_LEVELS, VolumeDirective
from aiocast.models.status import VolumeLevel

if TYPE_CHECKING:
    from aiocast.client.connection import ConnectionManager

logger = logging.getLogger(__name__)

MUTE_THRESHOLD = 0.01
FULL_THRESHOLD = 0.99


def resolve_level(value: float | str) -> float:
    """
    Return the numeric level for a numeric or symbolic volume value.

    Raises:
        VolumeError: If ``value`` is an unknown symbol or not a number.
    """
    if isinstance(value, str):
        try:
            return SYMBOLIC_VOLUME_LEVELS[value.strip().lower()]
        except KeyError:
            raise VolumeError(f"Unknown volume value '{value}'") from None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise VolumeError(f"Volume must be a number, got {value!r}")
    return float(value)


def normalize_volume(value: VolumeLevel | float | str) -> VolumeLevel:
    """
    Map a volume value to the instruction sent to the device.

    An explicit :class:`VolumeLevel` passes through unchanged. Levels below
    0.01 mute, levels above 0.99 become full volume, anything else is sent as
    is. Symbolic values such as ``max`` or ``mute`` go through the same rule.
    """
    if isinstance(value, VolumeLevel):
        return value
    level = resolve_level(value)
    if level < MUTE_THRESHOLD:
        return VolumeLevel(muted=True)
    if level > FULL_THRESHOLD:
        return VolumeLevel(level=1)
    return VolumeLevel(level=level)


async def set_volume(manager: ConnectionManager, value: VolumeLevel | float | str) -> VolumeLevel:
    """Normalize ``value`` and apply it to the device."""
    instruction = normalize_volume(value)
    logger.debug("Try to set volume %s", instruction)
    try:
        result = await manager.call(manager.connection.set_volume(instruction), "set volume")
    except CastConnectionError:
        raise
    except Exception as err:
        raise VolumeError(f"Not able to set the volume: {err}") from err
    if result.level is not None:
        logger.info("Volume changed to %d", round(result.level * 100))
    if result.muted is not None:
        logger.info("Volume %s", "muted" if result.muted else "unmuted")
    return result


async def apply_volume(manager: ConnectionManager, directive: VolumeDirective) -> None:
    """
    Apply a volume directive.

    An explicit mute state and an explicit level are applied directly. Bounds
    are only looked at when neither is given: the current level is read and,
    if it lies outside ``[lower_limit, upper_limit]``, the violated bound is
    applied through the normal threshold rule.

    Raises:
        VolumeError: If reading or setting the volume fails.
    """
    if directive.muted is not None:
        await set_volume(manager, VolumeLevel(muted=directive.muted))
    if directive.level is not None:
        await set_volume(manager, directive.level)
    if directive.muted is not None or directive.level is not None or not directive.has_bounds:
        return

    try:
        current = await manager.call(manager.connection.get_volume(), "get volume")
    except CastConnectionError:
        raise
    except Exception as err:
        raise VolumeError(f"Not able to get the volume: {err}") from err
    logger.debug("Volume reported by device: %s", current)
    if current.level is None:
        logger.warning("Device did not report a volume level, not enforcing limits")
        return

    if directive.upper_limit is not None and current.level > directive.upper_limit:
        logger.info(
            "Volume %d above upper limit %d",
            round(current.level * 100),
            round(directive.upper_limit * 100),
        )
        await set_volume(manager, directive.upper_limit)
    elif directive.lower_limit is not None and current.level < directive.lower_limit:
        logger.info(
            "Volume %d below lower limit %d",
            round(current.level * 100),
            round(directive.lower_limit * 100),
        )
        await set_volume(manager, directive.lower_limit)
