"""Match-and-synchronize multi-region editing engine."""

__all__ = [
    "actions",
    "buffer",
    "engine",
    "modes",
    "runtime",
]

__version__ = "0.1.0"
