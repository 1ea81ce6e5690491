"""Match: runs one fixed input through a chain of pattern arms.

Evaluation semantics:
- Every with_() re-tests the original input against its own pattern(s)
- A matching arm overwrites the output, so the last match wins
- run / otherwise / get / exhaustive close the chain; it cannot be reused
- A chain declared over a domain tracks the shapes no arm handles yet, and
  exhaustive() refuses to close while any remain

Under disjoint arms at most one arm ever matches, so last-match-wins and
first-match-wins agree; overlapping arms fall back to last-match-wins.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from patmatch._domain import domain_of
from patmatch._errors import MatchClosedError, NonExhaustiveError
from patmatch._narrowing import exclude
from patmatch._pattern import Alternation, compile_pattern
from patmatch._types import UNSET

if TYPE_CHECKING:
    from collections.abc import Callable

    from patmatch._domain import Domain

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE = "non-exhaustive match"


class State(Enum):
    OPEN = "open"
    CLOSED = "closed"


class Match[T]:
    """A match chain over one input.

    Created by match(); do not share an instance between callers.
    """

    __slots__ = ("_closed_by", "_output", "_remaining", "_state", "_value")

    def __init__(self, value: T, domain: Any = None) -> None:
        self._value = value
        self._output: Any = UNSET
        self._remaining: Domain | None = (
            domain_of(domain) if domain is not None else None
        )
        self._state = State.OPEN
        self._closed_by: str | None = None

    # ── Chain ──────────────────────────────────────────────────────────────

    def with_(self, *args: Any) -> Match[T]:
        """Add an arm: ``with_(pattern, ..., callback)``.

        Several patterns before the callback form an alternation. If the
        input matches, ``callback(input)`` runs and its result replaces any
        earlier output.

        Raises:
            TypeError: If no pattern or no callback is given.
            MatchClosedError: If the chain is already closed.
        """
        self._ensure_open("with_")
        if len(args) < 2:
            msg = "with_() requires at least one pattern and a callback"
            raise TypeError(msg)
        *patterns, callback = args
        pattern = patterns[0] if len(patterns) == 1 else Alternation(tuple(patterns))
        node = compile_pattern(pattern)

        if self._remaining is not None:
            self._remaining = exclude(self._remaining, node)

        if node.evaluate(self._value):
            if self._output is not UNSET:
                logger.debug("arm %r matched again; overriding earlier output", pattern)
            else:
                logger.debug("arm %r matched", pattern)
            self._output = callback(self._value)
        return self

    # ── Terminals ──────────────────────────────────────────────────────────

    def run(self) -> Any:
        """Return the output, or UNSET when no arm matched."""
        self._close("run")
        return self._output

    def otherwise[F](self, fallback: Callable[[T], F]) -> Any:
        """Return the output, or ``fallback(input)`` when no arm matched."""
        self._close("otherwise")
        if self._output is UNSET:
            return fallback(self._value)
        return self._output

    def get(self, default: Any = None) -> Any:
        """Return the output, or ``default`` when no arm matched."""
        self._close("get")
        if self._output is UNSET:
            return default
        return self._output

    def exhaustive(self, message: str = DEFAULT_MESSAGE) -> Any:
        """Return the output, insisting that the chain handled the input.

        Raises:
            NonExhaustiveError: If no arm matched, or if the chain was
                declared over a domain and some of its shapes have no arm.
        """
        self._close("exhaustive")
        if self._remaining is not None and not self._remaining.is_never:
            logger.debug("unhandled shapes remain: %s", self._remaining)
            raise NonExhaustiveError(message, self._value, self._remaining)
        if self._output is UNSET:
            logger.debug("no arm matched %r", self._value)
            raise NonExhaustiveError(message, self._value, self._remaining)
        return self._output

    # ── Introspection ──────────────────────────────────────────────────────

    @property
    def value(self) -> T:
        return self._value

    @property
    def matched(self) -> bool:
        """True once some arm has matched."""
        return self._output is not UNSET

    @property
    def remaining(self) -> Domain | None:
        """Shapes not yet handled, or None when no domain was declared."""
        return self._remaining

    @property
    def state(self) -> State:
        return self._state

    def _ensure_open(self, operation: str) -> None:
        if self._state is State.CLOSED:
            raise MatchClosedError(operation, self._closed_by or "")

    def _close(self, operation: str) -> None:
        self._ensure_open(operation)
        self._state = State.CLOSED
        self._closed_by = operation


def match[T](value: T, domain: Any = None) -> Match[T]:
    """Start a match chain over ``value``.

    ``domain`` optionally declares every shape ``value`` may take, as a
    Domain or a type annotation (``Literal[...]``, unions, TypedDicts,
    dataclasses, ...). Use ``type(None)`` to declare the None-only domain.
    """
    return Match(value, domain)
