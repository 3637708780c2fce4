"""Generator scheduling for the argument being typed.

For every keystroke the parser hands over a new `ParserResult`; each
generator slot of the current argument then either:

- keeps its previous state (no trigger), serving the cached result,
- starts a run right away (``idle -> loading``),
- or, for debounced arguments, keeps serving the previous result and runs
  after a delay, using the context captured now.

Runs are never cancelled. When one finishes, its result is merged only if
the state that started it is still in the store (compared by identity);
otherwise the user moved on and the result is dropped.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from .caches import CacheRegistry, default_registry
from .config import Configuration
from .constants import DEFAULT_DEBOUNCE_MS
from .executor import GeneratorExecutor
from .logging_setup import get_logger
from .models import Arg, Command, GeneratorContext, GeneratorState, ParserResult, ShellState, Suggestion
from .store import AutocompleteState, AutocompleteStore
from .triggers import needs_refresh, parse_trigger

__all__ = ["GeneratorScheduler", "flatten_results", "get_generator_context"]


def get_generator_context(state: AutocompleteState, parser_result: ParserResult, command: Command | None = None) -> GeneratorContext:
    """Build the context generators run with.

    Tokens and annotations start at the parser command index, so generators
    of a sub-command (e.g. after ``sudo``) only see their own command.
    """
    shell = state.shell_state
    command = command or state.command
    tokens = command.tokens if command else ()
    index = parser_result.command_index
    current_arg = parser_result.current_arg
    return GeneratorContext(
        current_working_directory=shell.cwd,
        current_process=shell.process_user_is_in,
        environment_variables=shell.environment_variables,
        ssh_prefix="",
        annotations=tuple(parser_result.annotations[index:]),
        token_array=tuple(token.text for token in tokens[index:]),
        is_dangerous=bool(current_arg and current_arg.is_dangerous),
        search_term=parser_result.search_term,
    )


def flatten_results(states: Iterable[GeneratorState]) -> list[Suggestion]:
    """Concatenate the results of every slot, in slot order."""
    return [suggestion for state in states for suggestion in state.result]


class GeneratorScheduler:
    """Decides which generators run and merges their results into the store."""

    def __init__(
        self,
        store: AutocompleteStore,
        executor: GeneratorExecutor | None = None,
        registry: CacheRegistry | None = None,
        settings: Configuration | None = None,
    ) -> None:
        self.store = store
        self.registry = registry or default_registry
        self.executor = executor or GeneratorExecutor(settings=settings, registry=self.registry)
        self.settings = settings if settings is not None else self.executor.settings
        self.log = get_logger("generators")
        self._background: set[asyncio.Task[Any]] = set()

    # Public API

    def trigger_generators(self, parser_result: ParserResult, command: Command | None = None) -> list[GeneratorState]:
        """Compute the generator states for `parser_result`.

        Must be called from the event loop. The store is not modified: the
        caller commits the returned list (see `update_parser_result`).
        """
        state = self.store.get()
        previous_arg = state.parser_result.current_arg
        previous_term = state.parser_result.search_term
        current_arg = parser_result.current_arg
        argument_changed = current_arg is not previous_arg
        generators = current_arg.generators if current_arg else ()
        context = get_generator_context(state, parser_result, command)
        debounced = bool(current_arg and current_arg.debounce)

        new_states: list[GeneratorState] = []
        for index, generator in enumerate(generators):
            previous_state = state.generator_states[index] if index < len(state.generator_states) else None
            if not needs_refresh(
                previous_term,
                parser_result.search_term,
                parse_trigger(generator.trigger),
                debounced=debounced,
                argument_changed=argument_changed,
                has_previous_state=previous_state is not None,
            ):
                assert previous_state is not None
                new_states.append(previous_state)
                continue

            result = previous_state.result if previous_state and not argument_changed else ()
            generator_state = GeneratorState(generator=generator, context=context, result=result, loading=True)
            if debounced:
                assert current_arg is not None
                self._spawn(self._debounced_trigger(generator_state, self._debounce_delay(current_arg)))
                new_states.append(generator_state)
            else:
                new_states.append(self._trigger_generator(generator_state))
        return new_states

    def update_parser_result(self, parser_result: ParserResult, command: Command | None = None) -> list[GeneratorState]:
        """Trigger generators for `parser_result` and commit everything to the store."""
        states = self.trigger_generators(parser_result, command)
        changes: dict[str, Any] = {"parser_result": parser_result, "generator_states": states}
        if command is not None:
            changes["command"] = command
        self.store.set_named("update_parser_result", lambda _state: changes)
        return states

    def update_shell_state(self, shell_state: ShellState) -> None:
        """Record a new shell snapshot; used by the next evaluation."""
        self.store.set_named("update_shell_state", lambda _state: {"shell_state": shell_state})

    def reset_session(self) -> None:
        """Forget every cached value (completion specs and script outputs included)."""
        self.log.info("Resetting %d caches", len(self.registry))
        self.registry.reset_all()

    async def wait_idle(self) -> None:
        """Wait until no run or debounce delay is outstanding."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
            await asyncio.sleep(0)

    # Internals

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    def _debounce_delay(self, arg: Arg) -> int:
        debounce = arg.debounce
        if not isinstance(debounce, bool) and debounce > 0:
            return debounce
        return self.settings.get_int("debounce_delay", DEFAULT_DEBOUNCE_MS)

    def _start_request(self, generator_state: GeneratorState) -> asyncio.Task[list[Suggestion]]:
        self.log.debug("Triggering %s generator", generator_state.generator.kind)
        return self._spawn(self.executor.run(generator_state.generator, generator_state.context))

    def _trigger_generator(self, generator_state: GeneratorState) -> GeneratorState:
        request = self._start_request(generator_state)
        return self._watch_result(dataclasses.replace(generator_state, loading=True, request=request))

    async def _debounced_trigger(self, generator_state: GeneratorState, delay_ms: int) -> None:
        await asyncio.sleep(delay_ms / 1000)
        # the run only starts if the slot still holds this very state
        self._update_generator(
            generator_state,
            lambda: {"loading": True, "request": self._start_request(generator_state)},
        )

    def _watch_result(self, generator_state: GeneratorState) -> GeneratorState:
        """Merge the result of a pending request once it resolves."""
        request = generator_state.request
        if generator_state.loading and request is not None:
            request.add_done_callback(lambda task: self._on_result(generator_state, task))
        return generator_state

    def _on_result(self, generator_state: GeneratorState, task: asyncio.Task[list[Suggestion]]) -> None:
        suggestions: list[Suggestion] = []
        if task.cancelled():
            self.log.debug("%s generator run was cancelled", generator_state.generator.kind)
        elif task.exception() is not None:
            self.log.error("%s generator run failed: %s", generator_state.generator.kind, task.exception())
        else:
            suggestions = task.result()
        generator = generator_state.generator
        self._update_generator(
            generator_state,
            lambda: {
                "loading": False,
                "result": tuple(dataclasses.replace(suggestion, generator=generator) for suggestion in suggestions),
            },
        )

    def _update_generator(self, generator_state: GeneratorState, get_update: Callable[[], dict[str, Any]]) -> None:
        """Replace `generator_state` in the store, unless it was superseded."""

        def updater(state: AutocompleteState) -> dict[str, Any]:
            states = list(state.generator_states)
            index = next((i for i, current in enumerate(states) if current is generator_state), -1)
            if index == -1:
                self.log.info("stale update for %s generator, dropped", generator_state.generator.kind)
                return {}
            # still loading after the update (debounced run started): watch the new request too
            states[index] = self._watch_result(dataclasses.replace(generator_state, **get_update()))
            self.log.debug("updating %s generator in slot %d", generator_state.generator.kind, index)
            return {"generator_states": states}

        self.store.set_named("update_generator", updater)
