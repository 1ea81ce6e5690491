"""Core protocols, kinds and value semantics for patmatch.

The primitive kinds stand in for the ``typeof`` classification of a value:
- bool is classified before int, so True is never of kind int
- NoneType is its own kind with a single inhabitant
- everything else (mappings, sequences, instances) has no kind
"""

from __future__ import annotations

import math
from typing import Any, Final, Protocol, runtime_checkable

NoneType = type(None)

# Order matters: kind_of() returns the first kind the value is an instance of.
KINDS: Final = (bool, int, float, complex, str, bytes, NoneType)

# Kinds with finitely many inhabitants are expanded into literals by the
# narrowing model.
FINITE_KINDS: Final = {bool: (True, False), NoneType: (None,)}


@runtime_checkable
class Predicate(Protocol):
    """A one-argument boolean test used as a guard."""

    def __call__(self, value: Any, /) -> bool: ...


class _Unset:
    """Marker for "no arm produced an output".

    Distinct from every legitimate output, None included.
    """

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset()


def kind_of(value: Any) -> type | None:
    """Return the primitive kind of a value, or None for objects."""
    for kind in KINDS:
        if isinstance(value, kind):
            return kind
    return None


def kind_of_class(cls: type) -> type | None:
    """Return the kind shared by every instance of ``cls``, if there is one.

    ``int`` itself has no single kind because bool is a subclass of it.
    """
    for kind in KINDS:
        if issubclass(cls, kind):
            if kind is int and issubclass(bool, cls):
                return None
            return kind
    return None


def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def is_object_like(value: Any) -> bool:
    """True for values a nested-object pattern can look into."""
    return kind_of(value) is None and not is_array(value)


def same_value(a: Any, b: Any) -> bool:
    """Same-value equality.

    Kinds must agree (1 is not 1.0, True is not 1). Floats treat nan as
    equal to itself and distinguish 0.0 from -0.0. Never raises.
    """
    if a is b:
        return True
    kind = kind_of(a)
    if kind is not kind_of(b):
        return False
    if kind is float:
        if math.isnan(a) and math.isnan(b):
            return True
        return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
    try:
        return bool(a == b)
    except Exception:
        # A raising or ambiguous __eq__ (e.g. array-likes) counts as not equal.
        return False
