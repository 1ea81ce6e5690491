"""Pattern classification and structural comparison.

A raw pattern (literal, kind, class, dict, list, tuple, callable, Guard,
Alternation) is classified once by compile_pattern() into a tree of frozen
node dataclasses. Each node knows how to evaluate a value, so matching is a
plain recursive walk with no re-classification at each level.

The PatternNode union type is pattern-matchable via match/case.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from patmatch._errors import PatternError
from patmatch._types import KINDS, is_array, is_object_like, kind_of, same_value

if TYPE_CHECKING:
    from patmatch._domain import Domain

MAX_DEPTH = 32

_MISSING = object()


# ═══════════════════════════════════════════════════════════════════════════════
# Pattern wrappers (caller-facing)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Guard:
    """A predicate explicitly tagged as a pattern.

    The tag is the wrapper itself: a Guard is never mistaken for a class
    reference, wherever it appears inside a pattern.

    ``narrows`` is the domain every accepted value lies in (None: unknown).
    ``covers`` is the domain the guard is known to accept in full
    (None: nothing). The narrowing model reads these in place of the
    opaque predicate.
    """

    predicate: Callable[[Any], Any]
    narrows: Domain | None = None
    covers: Domain | None = None

    def __call__(self, value: Any, /) -> bool:
        return bool(self.predicate(value))


@dataclass(frozen=True, slots=True)
class Alternation:
    """Any of several patterns (logical OR)."""

    patterns: tuple[Any, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Compiled nodes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LiteralNode:
    """Matches a single value under same-value equality."""

    value: Any

    def evaluate(self, value: Any) -> bool:
        return same_value(value, self.value)


@dataclass(frozen=True, slots=True)
class KindNode:
    """Matches any value of one primitive kind."""

    kind: type

    def evaluate(self, value: Any) -> bool:
        return kind_of(value) is self.kind


@dataclass(frozen=True, slots=True)
class PredicateNode:
    """An untagged callable. Its result decides the whole subtree."""

    predicate: Callable[[Any], Any]

    def evaluate(self, value: Any) -> bool:
        return bool(self.predicate(value))


@dataclass(frozen=True, slots=True)
class GuardNode:
    """A tagged guard. Its result decides the whole subtree."""

    guard: Guard

    def evaluate(self, value: Any) -> bool:
        return self.guard(value)


@dataclass(frozen=True, slots=True)
class ClassNode:
    """Matches instances of a class."""

    cls: type

    def evaluate(self, value: Any) -> bool:
        return isinstance(value, self.cls)


@dataclass(frozen=True, slots=True)
class ObjectNode:
    """Matches object-like values field by field.

    Open on extra fields. With no fields at all the pattern is closed: it
    only matches values with no own keys.
    """

    fields: tuple[tuple[Any, PatternNode], ...]

    def evaluate(self, value: Any) -> bool:
        if not is_object_like(value):
            return False
        if not self.fields:
            return own_key_count(value) == 0
        for key, node in self.fields:
            field = get_field(value, key)
            if field is _MISSING or not node.evaluate(field):
                return False
        return True


@dataclass(frozen=True, slots=True)
class ListNode:
    """Matches arrays of any length whose every element matches.

    The empty array matches (vacuous truth).
    """

    item: PatternNode

    def evaluate(self, value: Any) -> bool:
        return is_array(value) and all(self.item.evaluate(v) for v in value)


@dataclass(frozen=True, slots=True)
class TupleNode:
    """Matches arrays of exactly this length, position by position."""

    items: tuple[PatternNode, ...]

    def evaluate(self, value: Any) -> bool:
        if not is_array(value) or len(value) != len(self.items):
            return False
        return all(node.evaluate(v) for node, v in zip(self.items, value))


@dataclass(frozen=True, slots=True)
class AlternationNode:
    """Matches when any option matches. Empty alternation matches nothing."""

    options: tuple[PatternNode, ...]

    def evaluate(self, value: Any) -> bool:
        return any(node.evaluate(value) for node in self.options)


type PatternNode = (
    LiteralNode
    | KindNode
    | PredicateNode
    | GuardNode
    | ClassNode
    | ObjectNode
    | ListNode
    | TupleNode
    | AlternationNode
)

_NODE_TYPES = (
    LiteralNode,
    KindNode,
    PredicateNode,
    GuardNode,
    ClassNode,
    ObjectNode,
    ListNode,
    TupleNode,
    AlternationNode,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Classification
# ═══════════════════════════════════════════════════════════════════════════════


def compile_pattern(pattern: Any) -> PatternNode:
    """Classify a raw pattern into a node tree.

    Already-compiled nodes are returned unchanged.

    Raises:
        PatternError: If the pattern nests deeper than MAX_DEPTH (this also
            catches self-referential dict and list patterns).
    """
    return _compile(pattern, 1)


def _compile(pattern: Any, depth: int) -> PatternNode:
    if depth > MAX_DEPTH:
        msg = f"pattern depth exceeds maximum allowed depth {MAX_DEPTH}"
        raise PatternError(msg)

    if isinstance(pattern, _NODE_TYPES):
        return pattern

    match pattern:
        case Guard():
            return GuardNode(pattern)
        case Alternation(patterns=options):
            return AlternationNode(tuple(_compile(p, depth + 1) for p in options))
        case type() if pattern in KINDS:
            return KindNode(pattern)
        case type():
            return ClassNode(pattern)
        case dict():
            return ObjectNode(
                tuple((k, _compile(v, depth + 1)) for k, v in pattern.items())
            )
        case list() if len(pattern) == 1:
            return ListNode(_compile(pattern[0], depth + 1))
        case list() | tuple():
            return TupleNode(tuple(_compile(p, depth + 1) for p in pattern))
        case _ if callable(pattern):
            return PredicateNode(pattern)
        case _:
            return LiteralNode(pattern)


def matches(value: Any, pattern: Any) -> bool:
    """Decide whether ``value`` conforms to ``pattern``."""
    return compile_pattern(pattern).evaluate(value)


def pattern_depth(node: PatternNode) -> int:
    """Calculate the nesting depth of a compiled pattern."""
    match node:
        case ObjectNode(fields=fields):
            return 1 + max((pattern_depth(n) for _, n in fields), default=0)
        case ListNode(item=item):
            return 1 + pattern_depth(item)
        case TupleNode(items=items) | AlternationNode(options=items):
            return 1 + max((pattern_depth(n) for n in items), default=0)
        case _:
            return 1


# ═══════════════════════════════════════════════════════════════════════════════
# Field access
# ═══════════════════════════════════════════════════════════════════════════════


def get_field(value: Any, key: Any) -> Any:
    """Look up a field by key (mappings) or attribute (other objects).

    Returns the module's missing marker when the field is absent. A lookup
    that raises (a failing property, a broken mapping) also counts as absent.
    """
    try:
        if isinstance(value, Mapping):
            return value.get(key, _MISSING)
        if isinstance(key, str):
            return getattr(value, key, _MISSING)
    except Exception:
        return _MISSING
    return _MISSING


def has_field(value: Any, key: Any) -> bool:
    return get_field(value, key) is not _MISSING


def own_key_count(value: Any) -> int:
    if isinstance(value, Mapping):
        return len(value)
    if dataclasses.is_dataclass(value):
        return len(dataclasses.fields(value))
    return len(getattr(value, "__dict__", ()))
