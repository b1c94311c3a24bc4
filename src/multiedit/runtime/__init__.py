"""Runtime services: telemetry and settings."""

from .config import MultieditSettings

__all__ = ["MultieditSettings"]
