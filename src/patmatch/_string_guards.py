"""String guards: tagged guards over str values.

Every factory returns a Guard that narrows to ``str``, so the narrowing
model knows a string guard never accepts other kinds, and whose predicate
returns False for anything that is not a str.

Example::

    match(request).with_({"path": prefix("/api/")}, route_api)

Regex uses ``google-re2`` for guaranteed linear-time matching. RE2 does not
support backreferences or lookahead/lookbehind because they require
backtracking; patterns using them are rejected when the guard is built.
"""

from __future__ import annotations

import operator
from collections.abc import Callable
from typing import Any

import re2

from patmatch._domain import NEVER, Domain, KindShape, LiteralShape
from patmatch._errors import PatternError
from patmatch._pattern import Guard

_STRINGS = Domain((KindShape(str),))

type _TextTest = Callable[[str, str], bool]


def exact(value: str, *, ignore_case: bool = False) -> Guard:
    """Whole-string equality, optionally case-insensitive."""
    # Only the case-sensitive form handles precisely its own literal.
    covers = NEVER if ignore_case else Domain((LiteralShape(value),))
    return _text_guard(operator.eq, value, ignore_case, covers)


def prefix(value: str, *, ignore_case: bool = False) -> Guard:
    return _text_guard(str.startswith, value, ignore_case, _covers_all(value))


def suffix(value: str, *, ignore_case: bool = False) -> Guard:
    return _text_guard(str.endswith, value, ignore_case, _covers_all(value))


def contains(value: str, *, ignore_case: bool = False) -> Guard:
    return _text_guard(operator.contains, value, ignore_case, _covers_all(value))


def regex(pattern: str) -> Guard:
    """Search (not fullmatch) for ``pattern`` anywhere in the string.

    Anchor it with ``^``/``$`` for whole-string matches.

    Raises:
        PatternError: If the pattern is not valid RE2 syntax.
    """
    try:
        compiled = re2.compile(pattern)
    except re2.error as e:
        msg = f'invalid regex pattern "{pattern}": {e}'
        raise PatternError(msg) from e

    def search(value: Any, /) -> bool:
        return isinstance(value, str) and compiled.search(value) is not None

    return Guard(search, narrows=_STRINGS)


def _text_guard(test: _TextTest, needle: str, ignore_case: bool, covers: Domain) -> Guard:
    # The needle is folded once here, the input on every call.
    folded = needle.casefold() if ignore_case else needle

    def predicate(value: Any, /) -> bool:
        if not isinstance(value, str):
            return False
        return test(value.casefold() if ignore_case else value, folded)

    return Guard(predicate, narrows=_STRINGS, covers=covers)


def _covers_all(needle: str) -> Domain:
    # The empty needle accepts every string.
    return _STRINGS if needle == "" else NEVER
