"""Matching and session policies."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Mapping, Optional

ENV_PREFIX = "MULTIEDIT_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

# Scope specs that mean "the whole document".
WHOLE_DOCUMENT = ("buffer", "document", "")


@dataclass(frozen=True, slots=True)
class MultieditSettings:
    """Policy knobs consulted by pattern derivation, discovery and sessions.

    ``default_scope`` is ``None`` for the whole document, ``"visible"`` for
    the viewport, or a unit name the host can resolve (``"paragraph"``...).
    """

    match_whitespace: bool = True
    match_punctuation: bool = True
    ignore_indent_and_trailing: bool = True
    use_symbols: bool = False
    smart_match_boundaries: bool = True
    store_in_search_history: bool = True
    default_scope: Optional[str] = None
    follow_matches: bool = True
    marker: str = "|"
    case_sensitive: bool = True
    symbol_chars: str = "_"

    def __post_init__(self) -> None:
        if len(self.marker) != 1:
            raise ValueError("marker must be a single character")
        if any(ch.isspace() or ch.isalnum() for ch in self.symbol_chars):
            raise ValueError("symbol_chars may only hold punctuation characters")

    def updated(self, **changes: object) -> "MultieditSettings":
        return replace(self, **changes)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "MultieditSettings":
        """Build settings from ``MULTIEDIT_<FIELD>`` variables.

        Unset variables keep their defaults. ``MULTIEDIT_DEFAULT_SCOPE`` set to
        ``buffer`` (or left empty) selects the whole document.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for spec in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{spec.name.upper()}")
            if raw is None:
                continue
            if isinstance(spec.default, bool):
                values[spec.name] = _parse_bool(spec.name, raw)
            elif spec.name == "default_scope":
                cleaned = raw.strip().lower()
                values[spec.name] = None if cleaned in WHOLE_DOCUMENT else cleaned
            else:
                values[spec.name] = raw
        return cls(**values)  # type: ignore[arg-type]


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{ENV_PREFIX}{name.upper()} expects a boolean, got {raw!r}")


__all__ = ["MultieditSettings", "WHOLE_DOCUMENT"]
