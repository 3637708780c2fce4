"""Trigger policies: when should a generator run again?

A policy looks at the previous and the current search term and answers
whether the generator output may have changed. Completion specs express
policies loosely (a string, a function or a small mapping); `parse_trigger`
turns those into one of the variants below.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .logging_setup import get_logger

__all__ = [
    "Change",
    "Match",
    "Predicate",
    "Substring",
    "Threshold",
    "TriggerPolicy",
    "needs_refresh",
    "parse_trigger",
    "should_trigger",
]

log = get_logger("triggers")


@dataclass(frozen=True)
class Substring:
    """Trigger when the last position of `value` moves (e.g. a new "/" typed)."""

    value: str


@dataclass(frozen=True)
class Predicate:
    """Trigger when `fn(previous, current)` is true."""

    fn: Callable[[str, str], bool]


@dataclass(frozen=True)
class Threshold:
    """Trigger once, when the term grows past `length` characters."""

    length: int


@dataclass(frozen=True)
class Match:
    """Trigger when the term enters, leaves or switches between `strings`."""

    strings: tuple[str, ...]


@dataclass(frozen=True)
class Change:
    """Trigger on any change of the term."""


TriggerPolicy = Substring | Predicate | Threshold | Match | Change


def parse_trigger(raw: TriggerPolicy | str | Callable[[str, str], bool] | Mapping[str, Any] | None) -> TriggerPolicy | None:
    """Convert a loosely shaped trigger into a policy variant.

    Args:
        raw: a variant, a substring, a predicate, or a mapping such as
            ``{"on": "threshold", "length": 3}`` or ``{"on": "match", "string": ["add", "rm"]}``

    Returns:
        The policy, or None when no trigger was given
    """
    if raw is None or isinstance(raw, Substring | Predicate | Threshold | Match | Change):
        return raw
    if isinstance(raw, str):
        return Substring(raw)
    if callable(raw):
        return Predicate(raw)
    on = raw.get("on")
    if on == "threshold":
        return Threshold(int(raw.get("length", 0)))
    if on == "match":
        strings = raw.get("string", ())
        if isinstance(strings, str):
            return Match((strings,))
        return Match(tuple(strings))
    return Change()


def _index_of(strings: Sequence[str], term: str) -> int:
    try:
        return strings.index(term)
    except ValueError:
        return -1


def should_trigger(previous: str, current: str, policy: TriggerPolicy | None, debounced: bool = False) -> bool:
    """Decide whether a search term change calls for a new run.

    Args:
        previous: search term of the last evaluation
        current: search term being evaluated
        policy: trigger policy of the generator
        debounced: whether the owning argument is debounced

    Returns:
        True if the generator must be invoked again
    """
    if policy is None:
        # every keystroke is a candidate for debounced arguments
        return debounced
    if isinstance(policy, Substring):
        return previous.rfind(policy.value) != current.rfind(policy.value)
    if isinstance(policy, Predicate):
        try:
            return bool(policy.fn(previous, current))
        except Exception:  # noqa: BLE001  # pylint: disable=broad-exception-caught
            log.exception("Trigger function failed, refreshing anyway")
            return True
    if isinstance(policy, Threshold):
        return len(current) > policy.length and not len(previous) > policy.length
    if isinstance(policy, Match):
        return _index_of(policy.strings, previous) != _index_of(policy.strings, current)
    return previous != current


def needs_refresh(  # noqa: PLR0913
    previous: str,
    current: str,
    policy: TriggerPolicy | None,
    *,
    debounced: bool = False,
    argument_changed: bool = False,
    has_previous_state: bool = True,
) -> bool:
    """Full decision for one generator slot.

    A new argument or a slot without prior state always runs; otherwise the
    trigger policy decides.
    """
    if argument_changed or not has_previous_state:
        return True
    return should_trigger(previous, current, policy, debounced)
