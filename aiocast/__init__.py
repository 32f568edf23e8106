"""Async orchestration of Cast receiver sessions."""

from .client import CastOrchestrator
from .errors import CastError, classify
from .models import ActionResult, CastRequest

__all__ = ["ActionResult", "CastError", "CastOrchestrator", "CastRequest", "classify"]
