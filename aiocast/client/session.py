"""Find and join the receiver session an action operates on."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from aiocast.errors import CastConnectionError, SessionError
from aiocast.models.status import Session
from aiocast.transport.base import DEFAULT_MEDIA_RECEIVER_APP_ID, CastPlayer

from .connection import ConnectionManager

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionView:
    """Outcome of session resolution."""

    applications: list[Session] = field(default_factory=list)
    """Sessions reported by the device."""
    session: Session | None = None
    """The session that was joined."""
    player: CastPlayer | None = None
    """Player of the joined session."""

    @property
    def is_idle(self) -> bool:
        """Return True if the device runs no receiver application."""
        return self.session is None

    @classmethod
    def idle(cls) -> SessionView:
        """Return the view of a device without sessions."""
        return cls()


class SessionResolver:
    """Join the most recently launched session, or report the device as idle."""

    def __init__(self, app_id: str = DEFAULT_MEDIA_RECEIVER_APP_ID) -> None:
        """Resolve sessions through the namespace of receiver application ``app_id``."""
        self._app_id = app_id

    @property
    def app_id(self) -> str:
        """Return the receiver application id used to join sessions."""
        return self._app_id

    async def resolve(self, manager: ConnectionManager, *, attach: bool = True) -> SessionView:
        """
        List the device's sessions and join the first one.

        An empty list is not an error: the idle view is returned. With
        ``attach`` the joined player's events are routed through ``manager``.

        Raises:
            SessionError: If listing or joining fails.
            CastConnectionError: If the connection fails meanwhile.
        """
        try:
            sessions = await manager.call(manager.connection.get_sessions(), "get sessions")
        except CastConnectionError:
            raise
        except Exception as err:
            raise SessionError(f"Not able to get sessions: {err}") from err

        logger.debug("Sessions on %s: %s", manager.device, sessions)
        if not sessions:
            logger.debug("Nothing is playing on %s", manager.device)
            return SessionView.idle()

        # Only one app runs at a time, the first session is the current one.
        session = sessions[0]
        try:
            player = await manager.call(
                manager.connection.join(session, self._app_id), "join session"
            )
        except CastConnectionError:
            raise
        except Exception as err:
            raise SessionError(
                f"Not able to join session {session.session_id}: {err}"
            ) from err

        logger.debug("Joined session %s (%s)", session.session_id, session.display_name)
        if attach:
            manager.attach_player(player)
        return SessionView(applications=list(sessions), session=session, player=player)

    async def prepare_control(self, manager: ConnectionManager, player: CastPlayer) -> None:
        """Refresh the player's status if it has no current media session."""
        if player.media_session_id is not None:
            return
        logger.debug("No current media session, requesting player status first")
        await manager.call(player.get_status(), "get player status")
