"""Generator back-ends.

The executor only knows the `Backends` bundle; hosts may replace any of the
three callables (e.g. to run scripts over SSH).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .custom import get_custom_suggestions
from .script import get_script_suggestions
from .template import get_template_suggestions

__all__ = ["Backends", "get_custom_suggestions", "get_script_suggestions", "get_template_suggestions"]


@dataclass(frozen=True)
class Backends:
    """The three ways of running a generator.

    Attributes:
        template: ``(generator, context) -> suggestions``
        script: ``(generator, context, timeout_ms, cache) -> suggestions``
        custom: ``(generator, context, timeout_ms) -> suggestions``
    """

    template: Callable[..., Awaitable[list[Any]]] = get_template_suggestions
    script: Callable[..., Awaitable[list[Any]]] = get_script_suggestions
    custom: Callable[..., Awaitable[list[Any]]] = get_custom_suggestions
