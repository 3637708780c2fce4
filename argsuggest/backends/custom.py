"""Custom generators: user supplied functions, sync or async."""

from __future__ import annotations

import inspect
from collections.abc import Sequence

from ..models import ExecuteCommand, Generator, GeneratorContext, Suggestion, to_suggestions
from ..process import run_command

__all__ = ["get_custom_suggestions", "make_execute_command"]


def make_execute_command(context: GeneratorContext, timeout_ms: int) -> ExecuteCommand:
    """Return the `execute_command` helper handed to custom functions.

    Commands run in the context working directory and return their stdout.
    """

    async def execute_command(command: str | Sequence[str]) -> str:
        result = await run_command(
            command,
            timeout_ms,
            cwd=context.current_working_directory or None,
            env=context.environment_variables or None,
        )
        return result.stdout

    return execute_command


async def get_custom_suggestions(generator: Generator, context: GeneratorContext, timeout_ms: int) -> list[Suggestion]:
    """Call the generator function with the tokens, a command runner and the context."""
    if generator.custom is None:
        return []
    result = generator.custom(list(context.token_array), make_execute_command(context, timeout_ms), context)
    if inspect.isawaitable(result):
        result = await result
    return to_suggestions(result or [])
