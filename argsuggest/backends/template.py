"""Filesystem templates: "filepaths" and "folders".

The directory listed is the one the search term points into, resolved
against the shell working directory.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

import aiofiles.os

from ..logging_setup import get_logger
from ..models import Generator, GeneratorContext, Suggestion, SuggestionType, TemplateContext, TemplateName

__all__ = ["get_template_suggestions", "list_directory_suggestions", "resolve_directory"]

log = get_logger("backends.template")


def resolve_directory(context: GeneratorContext) -> str:
    """Return the directory the search term is completing into."""
    head = context.search_term[: context.search_term.rfind("/") + 1]
    if head.startswith("~"):
        head = os.path.expanduser(head)
    base = context.current_working_directory or os.getcwd()
    return os.path.join(base, head) if head else base


async def list_directory_suggestions(context: GeneratorContext, templates: Iterable[TemplateName]) -> list[Suggestion]:
    """List the entries of the directory being completed.

    Args:
        context: generator context (working directory and search term)
        templates: "filepaths" lists everything, "folders" directories only
    """
    wanted = set(templates)
    directory = resolve_directory(context)
    try:
        entries = sorted(await aiofiles.os.listdir(directory))
    except OSError as e:
        log.debug("Can't list %s: %s", directory, e)
        return []

    suggestions = []
    for entry in entries:
        is_dir = await aiofiles.os.path.isdir(os.path.join(directory, entry))
        if is_dir:
            template: TemplateName = "folders" if "folders" in wanted else "filepaths"
            suggestions.append(
                Suggestion(
                    name=f"{entry}/",
                    type=SuggestionType.FOLDER,
                    context=TemplateContext(template),
                )
            )
        elif "filepaths" in wanted:
            suggestions.append(
                Suggestion(
                    name=entry,
                    type=SuggestionType.FILE,
                    context=TemplateContext("filepaths"),
                )
            )
    return suggestions


async def get_template_suggestions(generator: Generator, context: GeneratorContext) -> list[Suggestion]:
    """Expand the generator template against `context`."""
    templates: tuple[TemplateName, ...] = (generator.template,) if isinstance(generator.template, str) else tuple(generator.template or ())
    suggestions = await list_directory_suggestions(context, templates)
    if generator.filter_template_suggestions:
        return generator.filter_template_suggestions(suggestions)
    return suggestions
