"""Script generators: run a command, turn its output into suggestions."""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import Any

from ..caches import Cache, CacheData
from ..logging_setup import get_logger
from ..models import Generator, GeneratorContext, Suggestion, SuggestionType, to_suggestions
from ..process import run_command

__all__ = ["get_script_command", "get_script_suggestions", "parse_script_output"]

log = get_logger("backends.script")


def get_script_command(generator: Generator, tokens: Sequence[str]) -> str | Sequence[str]:
    """Return the command to run, calling the script function if needed."""
    script = generator.script
    if callable(script):
        return script(tokens)
    assert script is not None, "script generator without a script"
    return script


def parse_script_output(generator: Generator, output: str, tokens: Sequence[str]) -> list[Suggestion]:
    """Convert the command output, using `post_process` when defined."""
    if generator.post_process:
        return to_suggestions(generator.post_process(output, tokens))
    separator = generator.split_on or "\n"
    return to_suggestions((part for part in output.split(separator) if part.strip()), SuggestionType.ARG)


def _cache_key(command: str | Sequence[str], generator: Generator, context: GeneratorContext) -> str:
    key = command if isinstance(command, str) else " ".join(command)
    if generator.cache and generator.cache.cache_by_directory:
        key = f"{context.current_working_directory}\0{key}"
    return key


async def get_script_suggestions(
    generator: Generator,
    context: GeneratorContext,
    timeout_ms: int,
    cache: Cache[Any] | None = None,
) -> list[Suggestion]:
    """Run the generator script and parse its output.

    Args:
        generator: script generator
        context: generator context, gives the working directory and environment
        timeout_ms: milliseconds before the script is abandoned
        cache: memoization storage, used when the generator has a `cache` setting

    Raises:
        ScriptTimeout: the script did not finish in time
        ScriptError: the script exited with a non-zero status
    """
    tokens = context.token_array
    command = get_script_command(generator, tokens)
    if not command:
        return []

    entry: CacheData[str] | None = None
    if cache is not None and generator.cache is not None:
        key = _cache_key(command, generator, context)
        now = time.time()
        entry = cache.get(key)
        if entry and entry.is_valid(now):
            log.debug("%s (CACHE HIT)", key)
            output = await entry.wait_update()
            if output is not None:
                return parse_script_output(generator, output, tokens)
        entry = CacheData(retension_time=generator.cache.ttl_ms / 1000)
        entry.set_pending(ref_time=now)
        cache[key] = entry

    log.debug("running %s", command)
    try:
        result = await run_command(
            command,
            timeout_ms,
            cwd=context.current_working_directory or None,
            env=context.environment_variables or None,
        )
    except BaseException:
        if entry is not None:
            entry.discard()
        raise
    if entry is not None:
        entry.set_value(result.stdout)
    return parse_script_output(generator, result.stdout, tokens)
