"""Session state machine and the result/event types it shares with actions."""

from .base import LIVE_STATES, ActionResult, SessionBus
from .session import MultieditSession

__all__ = ["ActionResult", "SessionBus", "LIVE_STATES", "MultieditSession"]
