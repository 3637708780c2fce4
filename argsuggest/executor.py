"""Generator executor: run one generator, whatever its kind.

Every failure ends up as an empty suggestion list so one broken generator
never blocks the others.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .backends import Backends
from .caches import CacheRegistry, default_registry
from .constants import DEFAULT_SCRIPT_TIMEOUT_MS
from .logging_setup import get_logger
from .models import ArgsuggestError, Generator, GeneratorContext, Suggestion, is_template_suggestion
from .settings import make_settings

if TYPE_CHECKING:
    from .config import Configuration

__all__ = ["GeneratorExecutor"]


class GeneratorExecutor:
    """Dispatches generators to the template, script or custom back-end."""

    def __init__(
        self,
        backends: Backends | None = None,
        settings: Configuration | None = None,
        registry: CacheRegistry | None = None,
    ) -> None:
        self.backends = backends or Backends()
        self.settings = settings if settings is not None else make_settings()
        self.log = get_logger("executor")
        self.script_cache = (registry or default_registry).named("script_output")

    @property
    def script_timeout(self) -> int:
        """Script timeout in milliseconds, read on every run."""
        return self.settings.get_int("script_timeout", DEFAULT_SCRIPT_TIMEOUT_MS)

    async def run(self, generator: Generator, context: GeneratorContext) -> list[Suggestion]:
        """Return the suggestions of `generator` for `context`, [] on failure."""
        kind = generator.kind
        try:
            if kind == "template":
                return await self.backends.template(generator, context)
            if kind == "script":
                return await self.backends.script(generator, context, self.script_timeout, self.script_cache)
            return await self._run_custom(generator, context)
        except ArgsuggestError as e:
            self.log.warning("%s generator failed: %s", kind, e)
        except Exception:  # pylint: disable=broad-exception-caught
            self.log.exception("%s generator raised", kind)
        return []

    async def _run_custom(self, generator: Generator, context: GeneratorContext) -> list[Suggestion]:
        suggestions = await self.backends.custom(generator, context, self.script_timeout)
        # filepaths / folders are custom generators producing template suggestions;
        # the first suggestion tells whether the whole list is of that shape
        if generator.filter_template_suggestions and suggestions and is_template_suggestion(suggestions[0]):
            return generator.filter_template_suggestions(suggestions)
        return suggestions
