"""Scope resolution: the buffer range discovery is confined to."""

from __future__ import annotations

from typing import Optional

from multiedit.buffer import Buffer
from multiedit.runtime.config import WHOLE_DOCUMENT, MultieditSettings

from .errors import InvalidScopeError
from .models import Scope

VISIBLE = "visible"


class ScopeResolver:
    def __init__(self, settings: MultieditSettings) -> None:
        self.settings = settings

    def resolve(
        self,
        buffer: Buffer,
        scope_spec: Optional[str] = None,
        *,
        point: Optional[int] = None,
        use_default: bool = True,
    ) -> Scope:
        """Resolve ``scope_spec`` (or the configured default) around ``point``.

        ``None``/``"buffer"`` is the whole document, ``"visible"`` the host
        viewport, anything else a unit name the host knows how to bound.
        """

        spec = scope_spec
        if spec is None and use_default:
            spec = self.settings.default_scope
        if spec is None or spec in WHOLE_DOCUMENT:
            return self.whole(buffer)
        if spec == VISIBLE:
            start, end = buffer.visible_range()
            return Scope(start=start, end=end, kind=VISIBLE)

        position = buffer.point if point is None else point
        try:
            bounds = buffer.unit_range(spec, position)
        except KeyError as exc:
            raise InvalidScopeError(spec) from exc
        if bounds is None:
            raise InvalidScopeError(spec, position)
        return Scope(start=bounds[0], end=bounds[1], kind=spec)

    @staticmethod
    def whole(buffer: Buffer) -> Scope:
        return Scope(start=0, end=len(buffer.text), kind="buffer")

    @staticmethod
    def from_range(start: int, end: int, *, kind: str = "range") -> Scope:
        if start > end:
            start, end = end, start
        return Scope(start=start, end=end, kind=kind)
