"""Public interface for the aiocast client package."""

from .connection import DEFAULT_CALL_TIMEOUT, DEFAULT_DRAIN_TIMEOUT, ConnectionManager
from .executor import ActionExecutor, ActionRun, ResultCallback
from .orchestrator import CastOrchestrator
from .overlay import SpeechCast, SpeechOverlayScheduler
from .session import SessionResolver, SessionView

__all__ = [
    "DEFAULT_CALL_TIMEOUT",
    "DEFAULT_DRAIN_TIMEOUT",
    "ActionExecutor",
    "ActionRun",
    "CastOrchestrator",
    "ConnectionManager",
    "ResultCallback",
    "SessionResolver",
    "SessionView",
    "SpeechCast",
    "SpeechOverlayScheduler",
]
