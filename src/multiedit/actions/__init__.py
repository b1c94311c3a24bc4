"""Named session verbs for a key-dispatch layer."""

from .command import ExCommand, parse_command_line, submit_command_line
from .core import (
    abort,
    append,
    change,
    delete_occurrences,
    exit_insert,
    force_normal,
    insert,
    match_all,
    match_all_no_recall,
    match_and_next,
    match_and_prev,
    match_symbol_and_next,
    match_symbol_and_prev,
    next_occurrence,
    open_above,
    open_below,
    paste_replace,
    prev_occurrence,
    restore,
    session_action,
    substitute,
    toggle,
    toggle_or_restrict,
)
from .models import ActionRef
from .registry import DEFAULT_ACTIONS, ActionRegistry, RegistryStats, default_registry

__all__ = [
    "ActionRef",
    "ActionRegistry",
    "RegistryStats",
    "DEFAULT_ACTIONS",
    "default_registry",
    "ExCommand",
    "parse_command_line",
    "submit_command_line",
    "session_action",
    "match_all",
    "match_all_no_recall",
    "match_and_next",
    "match_and_prev",
    "match_symbol_and_next",
    "match_symbol_and_prev",
    "restore",
    "toggle",
    "toggle_or_restrict",
    "next_occurrence",
    "prev_occurrence",
    "insert",
    "append",
    "open_below",
    "open_above",
    "change",
    "substitute",
    "exit_insert",
    "paste_replace",
    "delete_occurrences",
    "abort",
    "force_normal",
]
