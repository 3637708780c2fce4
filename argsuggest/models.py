"""Data model shared by the scheduler, the executor and the back-ends.

Descriptors (`Generator`, `Arg`) come from completion specs and are never
mutated. `GeneratorContext` and `GeneratorState` are frozen: they get
replaced, so identity comparison tells a live state from a stale one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from .triggers import TriggerPolicy

__all__ = [
    "Annotation",
    "Arg",
    "ArgsuggestError",
    "Command",
    "Generator",
    "GeneratorCache",
    "GeneratorContext",
    "GeneratorState",
    "ParserResult",
    "ScriptError",
    "ScriptTimeout",
    "SettingsError",
    "ShellState",
    "Suggestion",
    "SuggestionType",
    "TemplateContext",
    "Token",
    "is_template_suggestion",
    "to_suggestions",
]

TemplateName = Literal["filepaths", "folders"]

ExecuteCommand = Callable[[str], Awaitable[str]]
ScriptFunction = Callable[[Sequence[str]], "str | Sequence[str]"]
PostProcess = Callable[[str, Sequence[str]], "Sequence[Suggestion | str]"]
CustomFunction = Callable[..., "Sequence[Suggestion | str] | Awaitable[Sequence[Suggestion | str]]"]
TemplateFilter = Callable[[list["Suggestion"]], list["Suggestion"]]


class ArgsuggestError(Exception):
    """Base class for argsuggest errors."""


class ScriptError(ArgsuggestError):
    """A script generator exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str = "") -> None:
        super().__init__(f"{command!r} exited with status {returncode}")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ScriptTimeout(ArgsuggestError):
    """A script generator did not finish in time."""

    def __init__(self, command: str, timeout_ms: int) -> None:
        super().__init__(f"{command!r} timed out after {timeout_ms}ms")
        self.command = command
        self.timeout_ms = timeout_ms


class SettingsError(ArgsuggestError):
    """The settings file could not be read."""


class SuggestionType(StrEnum):
    """Kind of entity a suggestion completes."""

    SUBCOMMAND = "subcommand"
    OPTION = "option"
    ARG = "arg"
    FILE = "file"
    FOLDER = "folder"
    SPECIAL = "special"
    MIXIN = "mixin"
    SHORTCUT = "shortcut"


@dataclass(frozen=True)
class TemplateContext:
    """Marks a suggestion as produced by a filesystem template."""

    template_type: TemplateName


@dataclass
class Suggestion:  # pylint: disable=too-many-instance-attributes
    """A single completion candidate."""

    name: str | list[str]
    display_name: str = ""
    insert_value: str = ""
    description: str = ""
    icon: str = ""
    type: SuggestionType | None = None
    priority: int = 50
    hidden: bool = False
    is_dangerous: bool = False
    context: TemplateContext | None = None
    generator: Generator | None = field(default=None, compare=False, repr=False)  # set by the scheduler

    @property
    def names(self) -> list[str]:
        """Return every name as a list."""
        return list(self.name) if isinstance(self.name, list) else [self.name]


def is_template_suggestion(suggestion: Suggestion) -> bool:
    """Tell whether `suggestion` carries template metadata."""
    return suggestion.context is not None and bool(suggestion.context.template_type)


def to_suggestions(items: Iterable[Suggestion | str], default_type: SuggestionType | None = None) -> list[Suggestion]:
    """Turn back-end output into suggestions, wrapping plain strings."""
    return [item if isinstance(item, Suggestion) else Suggestion(name=item, type=default_type) for item in items]


@dataclass(frozen=True)
class GeneratorCache:
    """Memoization settings for script generators."""

    ttl_ms: int = 0  # 0 keeps entries until the caches are reset
    cache_by_directory: bool = False


@dataclass(frozen=True, eq=False)
class Generator:  # pylint: disable=too-many-instance-attributes
    """Declarative description of one suggestion source.

    Exactly one of `template`, `script` or `custom` is expected; when several
    are set, the first one in that order wins.
    """

    template: TemplateName | tuple[TemplateName, ...] | None = None
    script: str | Sequence[str] | ScriptFunction | None = None
    custom: CustomFunction | None = None
    trigger: TriggerPolicy | str | Callable[[str, str], bool] | Mapping[str, Any] | None = None
    post_process: PostProcess | None = None
    split_on: str | None = None
    filter_template_suggestions: TemplateFilter | None = None
    get_query_term: str | Callable[[str], str] | None = None
    cache: GeneratorCache | None = None

    @property
    def kind(self) -> str:
        """Return "template", "script" or "custom"."""
        if self.template:
            return "template"
        if self.script:
            return "script"
        return "custom"


@dataclass(frozen=True, eq=False)
class Arg:
    """Argument descriptor exposed by the parser."""

    name: str = ""
    generators: tuple[Generator, ...] = ()
    debounce: bool | int = False
    is_dangerous: bool = False
    description: str = ""


@dataclass(frozen=True)
class Annotation:
    """Parser annotation attached to a token."""

    text: str
    type: str
    spec: str = ""


@dataclass(frozen=True)
class Token:
    """A token of the command being typed."""

    text: str


@dataclass(frozen=True)
class Command:
    """The tokenized command line."""

    tokens: tuple[Token, ...] = ()


@dataclass(frozen=True)
class ParserResult:
    """What the argument parser knows about the current cursor position."""

    current_arg: Arg | None = None
    search_term: str = ""
    annotations: tuple[Annotation, ...] = ()
    command_index: int = 0


@dataclass(frozen=True)
class ShellState:
    """Snapshot of the shell provided by the host."""

    cwd: str = ""
    process_user_is_in: str = ""
    environment_variables: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratorContext:  # pylint: disable=too-many-instance-attributes
    """Everything a generator may look at when it runs."""

    current_working_directory: str = ""
    current_process: str = ""
    environment_variables: Mapping[str, str] = field(default_factory=dict)
    ssh_prefix: str = ""
    annotations: tuple[Annotation, ...] = ()
    token_array: tuple[str, ...] = ()
    is_dangerous: bool = False
    search_term: str = ""


@dataclass(frozen=True, eq=True)
class GeneratorState:
    """State of one generator slot of the current argument."""

    generator: Generator
    context: GeneratorContext
    result: tuple[Suggestion, ...] = ()
    loading: bool = False
    request: asyncio.Task[list[Suggestion]] | None = field(default=None, compare=False, repr=False)
