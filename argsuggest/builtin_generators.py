"""Built-in `filepaths` and `folders` generators.

They are custom generators producing template suggestions, so the executor
runs their `filter_template_suggestions` on the result like it would for a
filesystem template.
"""

from __future__ import annotations

import dataclasses
import os
import re
from collections.abc import Iterable, Sequence
from typing import Literal

from .backends.template import list_directory_suggestions
from .models import ExecuteCommand, Generator, GeneratorContext, Suggestion, SuggestionType, TemplateFilter
from .triggers import Substring

__all__ = ["filepaths", "folders", "query_after_last_slash"]

ShowFolders = Literal["always", "never", "only"]


def query_after_last_slash(term: str) -> str:
    """Return the part of `term` being completed inside its directory."""
    return term[term.rfind("/") + 1 :]


def _make_filter(
    extensions: Sequence[str],
    equals: Sequence[str],
    matches: re.Pattern[str] | None,
    show_folders: ShowFolders,
) -> TemplateFilter:
    wanted_extensions = tuple(ext if ext.startswith(".") else f".{ext}" for ext in extensions)

    def keep(suggestion: Suggestion) -> bool:
        name = suggestion.names[0]
        if suggestion.type == SuggestionType.FOLDER:
            return show_folders != "never"
        if show_folders == "only":
            return False
        if not (wanted_extensions or equals or matches):
            return True
        if wanted_extensions and name.endswith(wanted_extensions):
            return True
        if name in equals:
            return True
        return bool(matches and matches.search(name))

    def filter_suggestions(suggestions: list[Suggestion]) -> list[Suggestion]:
        return [suggestion for suggestion in suggestions if keep(suggestion)]

    return filter_suggestions


def filepaths(
    extensions: Iterable[str] = (),
    equals: Iterable[str] = (),
    matches: str | re.Pattern[str] | None = None,
    show_folders: ShowFolders = "always",
    root_directory: str = "",
) -> Generator:
    """Return a generator listing files of the directory being typed.

    Args:
        extensions: keep files with one of these extensions
        equals: keep files with exactly one of these names
        matches: keep files whose name matches this regex
        show_folders: "always", "never" or "only"
        root_directory: list relative to this directory instead of the shell cwd
    """
    template = "folders" if show_folders == "only" else "filepaths"

    async def list_entries(_tokens: list[str], _execute: ExecuteCommand, context: GeneratorContext) -> list[Suggestion]:
        if root_directory:
            context = dataclasses.replace(
                context,
                current_working_directory=os.path.join(context.current_working_directory, os.path.expanduser(root_directory)),
            )
        return await list_directory_suggestions(context, (template,))

    pattern = re.compile(matches) if isinstance(matches, str) else matches
    return Generator(
        custom=list_entries,
        trigger=Substring("/"),
        get_query_term=query_after_last_slash,
        filter_template_suggestions=_make_filter(tuple(extensions), tuple(equals), pattern, show_folders),
    )


def folders(root_directory: str = "") -> Generator:
    """Return a generator listing directories only."""
    return filepaths(show_folders="only", root_directory=root_directory)
