"""Metadata describing the actions a key-dispatch layer can bind."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping

from multiedit.modes.base import ActionResult

ActionHandler = Callable[..., ActionResult]


@dataclass(frozen=True, slots=True)
class ActionRef:
    """Named handler ``(session, **kwargs) -> ActionResult``."""

    id: str
    handler: ActionHandler
    telemetry_name: str | None = None
    description: str = ""
    metadata: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ActionRef id cannot be empty")
        if not callable(self.handler):
            raise TypeError("handler must be callable")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))
        if self.telemetry_name is None:
            object.__setattr__(self, "telemetry_name", self.id)

    def __call__(self, *args: object, **kwargs: object) -> ActionResult:
        return self.handler(*args, **kwargs)


__all__ = ["ActionRef", "ActionHandler"]
