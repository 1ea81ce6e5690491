"""Guard factories: tag predicates as patterns and derive new patterns.

A Guard wraps its predicate instead of marking the function object, so a
guard is recognized wherever it is embedded (top level, inside an object
pattern, inside a list pattern) and is never confused with a class.

Example::

    is_user = when(lambda v: isinstance(v, dict) and "name" in v, shape=User)
    match(value).with_({"author": is_user}, render_author)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from patmatch._domain import domain_of
from patmatch._narrowing import bounds
from patmatch._pattern import Alternation, Guard, compile_pattern

if TYPE_CHECKING:
    from patmatch._types import Predicate


def when(predicate: Predicate, shape: Any = None) -> Guard:
    """Tag a predicate as a pattern.

    ``shape`` is the type the predicate asserts (a Domain or any annotation
    domain_of() accepts). It stands in for the predicate in exhaustiveness
    checks, both as what the guard may accept and as what it handles.
    Without it the guard is opaque: it may accept anything and handles
    nothing for certain.
    """
    if shape is None:
        return Guard(predicate)
    domain = domain_of(shape)
    return Guard(predicate, narrows=domain, covers=domain)


def list_of(pattern: Any) -> Guard:
    """An array (possibly empty) whose every element matches ``pattern``.

    ``pattern`` may be any pattern, including a bare predicate.
    """
    node = compile_pattern([pattern])
    upper, lower = bounds(node)
    return Guard(node.evaluate, narrows=upper, covers=lower)


def is_(kind_or_class: type) -> Guard:
    """A reusable guard for "value is of this kind / instance of this class".

    The result is callable, so it also works as a standalone predicate::

        is_(int)(5)      # True
        is_(int)(True)   # False: bool is its own kind
    """
    if not isinstance(kind_or_class, type):
        msg = f"is_() expects a class, got {type(kind_or_class).__name__}"
        raise TypeError(msg)
    node = compile_pattern(kind_or_class)
    upper, lower = bounds(node)
    return Guard(node.evaluate, narrows=upper, covers=lower)


def any_of(*patterns: Any) -> Alternation:
    """Match when any of ``patterns`` matches. Usable at any nesting level."""
    return Alternation(patterns)
