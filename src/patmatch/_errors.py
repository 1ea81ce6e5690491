"""Error types for patmatch.

Every engine error derives from MatchError so callers can catch the whole
family with one clause. Exceptions raised inside caller callbacks and
predicates are never wrapped; they propagate as-is.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from patmatch._domain import Domain


class MatchError(Exception):
    """Base class for errors raised by patmatch."""


class NonExhaustiveError(MatchError):
    """No arm of a match chain handled the input.

    Raised by Match.exhaustive(). When the chain was declared over a domain,
    ``remaining`` holds the shapes no arm covers.
    """

    def __init__(
        self, message: str, value: Any, remaining: Domain | None = None
    ) -> None:
        self.message = message
        self.value = value
        self.remaining = remaining
        super().__init__(message)


class MatchClosedError(MatchError):
    """A match chain was used after its terminal call."""

    def __init__(self, operation: str, closed_by: str) -> None:
        self.operation = operation
        self.closed_by = closed_by
        super().__init__(
            f"cannot call {operation}(): match already closed by {closed_by}()"
        )


class PatternError(MatchError):
    """A pattern could not be compiled."""


class DomainError(MatchError):
    """A domain could not be derived from a type annotation."""
