"""Autocomplete state store.

The state is a frozen snapshot; each update builds a new snapshot through
`set_named` and notifies subscribers (the rendering layer). Readers never
see a partially updated state.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .logging_setup import get_logger
from .models import Command, GeneratorState, ParserResult, ShellState

__all__ = ["AutocompleteState", "AutocompleteStore", "Listener"]


@dataclass(frozen=True)
class AutocompleteState:
    """Everything the scheduler reads and writes."""

    parser_result: ParserResult = field(default_factory=ParserResult)
    command: Command | None = None
    shell_state: ShellState = field(default_factory=ShellState)
    generator_states: tuple[GeneratorState, ...] = ()


Listener = Callable[[AutocompleteState, str], None]


class AutocompleteStore:
    """Holds the current `AutocompleteState`."""

    def __init__(self, state: AutocompleteState | None = None) -> None:
        self._state = state or AutocompleteState()
        self._listeners: list[Listener] = []
        self.log = get_logger("store")

    def get(self) -> AutocompleteState:
        """Return the current snapshot."""
        return self._state

    def set_named(self, name: str, updater: Callable[[AutocompleteState], dict[str, Any]]) -> AutocompleteState:
        """Apply an update and notify subscribers.

        Args:
            name: update label, passed to listeners and logs
            updater: receives the current state, returns the fields to replace
        """
        changes = updater(self._state)
        if not changes:
            return self._state
        if "generator_states" in changes:
            changes["generator_states"] = tuple(changes["generator_states"])
        self._state = dataclasses.replace(self._state, **changes)
        self.log.debug("%s: %s", name, ", ".join(changes))
        for listener in list(self._listeners):
            try:
                listener(self._state, name)
            except Exception:  # pylint: disable=broad-exception-caught
                self.log.exception("Store listener failed on %s", name)
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` after every update. Returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
