"""Action registry: the named command surface a key-dispatch layer binds to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator

from multiedit.modes.base import ActionResult
from multiedit.modes.session import MultieditSession
from multiedit.runtime.telemetry import span

from . import command as command_actions
from . import core as core_actions
from .models import ActionRef


@dataclass(slots=True)
class RegistryStats:
    action_count: int
    revision: int


class ActionRegistry:
    """Owns action references and runs them against a session."""

    def __init__(
        self, actions: Iterable[ActionRef] = (), *, logger_name: str | None = None
    ) -> None:
        self._actions: Dict[str, ActionRef] = {}
        self._logger_name = logger_name
        self._revision = 0
        for action in actions:
            self.register_action(action)

    def revision(self) -> int:
        return self._revision

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __iter__(self) -> Iterator[ActionRef]:
        return iter(self._actions.values())

    def get_action(self, action_id: str) -> ActionRef:
        try:
            return self._actions[action_id]
        except KeyError as exc:
            raise KeyError(f"Action '{action_id}' is not registered") from exc

    def register_action(self, action: ActionRef, *, replace: bool = False) -> ActionRef:
        with span(
            "actions::register",
            logger_name=self._logger_name,
            component="actions",
            metadata={"action_id": action.id},
        ):
            if not replace and action.id in self._actions:
                raise ValueError(f"Action '{action.id}' already registered")
            self._actions[action.id] = action
            self._revision += 1
            return action

    def dispatch(
        self, session: MultieditSession, action_id: str, **kwargs: object
    ) -> ActionResult:
        action = self.get_action(action_id)
        with span(
            f"actions::{action.telemetry_name}",
            logger_name=self._logger_name,
            component="actions",
            metadata={"buffer": session.buffer.name},
        ) as handle:
            result = action(session, **kwargs)
            handle.add_metadata("status", result.status)
            return result

    def stats(self) -> RegistryStats:
        return RegistryStats(action_count=len(self._actions), revision=self._revision)


DEFAULT_ACTIONS: tuple[ActionRef, ...] = (
    ActionRef(
        id="multiedit.match_all",
        handler=core_actions.match_all,
        description="Select every occurrence in scope",
    ),
    ActionRef(
        id="multiedit.match_all_no_recall",
        handler=core_actions.match_all_no_recall,
        description="Select every occurrence without recording the session",
    ),
    ActionRef(
        id="multiedit.match_and_next",
        handler=core_actions.match_and_next,
        description="Start on the word at point or add the next match",
    ),
    ActionRef(
        id="multiedit.match_and_prev",
        handler=core_actions.match_and_prev,
        description="Start on the word at point or add the previous match",
    ),
    ActionRef(
        id="multiedit.match_symbol_and_next",
        handler=core_actions.match_symbol_and_next,
        description="Start on the symbol at point or add the next match",
    ),
    ActionRef(
        id="multiedit.match_symbol_and_prev",
        handler=core_actions.match_symbol_and_prev,
        description="Start on the symbol at point or add the previous match",
    ),
    ActionRef(
        id="multiedit.toggle",
        handler=core_actions.toggle,
        description="Toggle the occurrence at point",
    ),
    ActionRef(
        id="multiedit.toggle_or_restrict",
        handler=core_actions.toggle_or_restrict,
        description="Restrict to the selection, or toggle at point",
    ),
    ActionRef(
        id="multiedit.next",
        handler=core_actions.next_occurrence,
        description="Move to the next occurrence",
    ),
    ActionRef(
        id="multiedit.prev",
        handler=core_actions.prev_occurrence,
        description="Move to the previous occurrence",
    ),
    ActionRef(
        id="multiedit.insert",
        handler=core_actions.insert,
        description="Insert before every occurrence",
    ),
    ActionRef(
        id="multiedit.append",
        handler=core_actions.append,
        description="Append after every occurrence",
    ),
    ActionRef(
        id="multiedit.open_below",
        handler=core_actions.open_below,
        description="Open a line below every occurrence",
    ),
    ActionRef(
        id="multiedit.open_above",
        handler=core_actions.open_above,
        description="Open a line above every occurrence",
    ),
    ActionRef(
        id="multiedit.change",
        handler=core_actions.change,
        description="Replace the text of every occurrence",
    ),
    ActionRef(
        id="multiedit.substitute",
        handler=core_actions.substitute,
        description="Substitute characters at the cursor in every occurrence",
    ),
    ActionRef(
        id="multiedit.exit_insert",
        handler=core_actions.exit_insert,
        description="Leave insertion, keeping the occurrences selected",
    ),
    ActionRef(
        id="multiedit.abort",
        handler=core_actions.abort,
        description="End the session",
    ),
    ActionRef(
        id="multiedit.force_normal",
        handler=core_actions.force_normal,
        description="End any live session",
    ),
    ActionRef(
        id="multiedit.restore",
        handler=core_actions.restore,
        description="Reselect the last session's occurrences",
    ),
    ActionRef(
        id="multiedit.paste_replace",
        handler=core_actions.paste_replace,
        description="Replace every occurrence with a register",
    ),
    ActionRef(
        id="multiedit.delete_occurrences",
        handler=core_actions.delete_occurrences,
        description="Delete the text of every occurrence",
    ),
    ActionRef(
        id="multiedit.ex",
        handler=command_actions.submit_command_line,
        description="Start from an :iedit command line",
    ),
)


def default_registry(*, logger_name: str | None = None) -> ActionRegistry:
    return ActionRegistry(DEFAULT_ACTIONS, logger_name=logger_name)


__all__ = ["ActionRegistry", "RegistryStats", "DEFAULT_ACTIONS", "default_registry"]
