"""Test utilities for patmatch.

Helpers for checking that a pattern's runtime behavior and its narrowing
bounds agree. They exist to reduce boilerplate when writing guards with an
asserted shape, or when testing patmatch itself:

    >>> from patmatch import ANYTHING
    >>> from patmatch.testing import disagreements
    >>> disagreements(ANYTHING, {"ok": True}, [{"ok": True}, {"ok": 1}, None])
    []
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from patmatch._domain import domain_of
from patmatch._narrowing import exclude, extract
from patmatch._pattern import compile_pattern

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class Disagreement:
    """A value on which the comparator and the narrowing model disagree."""

    value: Any
    matched: bool
    in_extract: bool
    in_exclude: bool


def disagreements(
    domain: Any, pattern: Any, values: Iterable[Any], *, exact: bool = True
) -> list[Disagreement]:
    """Return the sample values the narrowing model gets wrong.

    Values outside ``domain`` are skipped. Soundness is always checked:
    a matching value must lie in extract(), and a non-matching value must
    lie in exclude(). With ``exact`` (the default) extract() must also hold
    nothing but matching values. Pass ``exact=False`` for patterns built
    from opaque guards.

    exclude() is not checked for exactness: subtraction keeps any shape it
    cannot split, so a matching value may still lie in the result.
    """
    d = domain_of(domain)
    node = compile_pattern(pattern)
    extracted = extract(d, node)
    excluded = exclude(d, node)

    found: list[Disagreement] = []
    for value in values:
        if value not in d:
            continue
        matched = node.evaluate(value)
        in_extract = value in extracted
        in_exclude = value in excluded
        ok = (in_extract or not matched) and (in_exclude or matched)
        if exact and in_extract != matched:
            ok = False
        if not ok:
            found.append(Disagreement(value, matched, in_extract, in_exclude))
    return found
