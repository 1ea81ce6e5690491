"""Domain narrowing: what a pattern extracts from, and leaves of, a domain.

Every compiled pattern has two domain bounds:

| Pattern              | upper (may match)        | lower (surely matches)   |
|----------------------|--------------------------|--------------------------|
| literal / kind       | that literal / kind      | same                     |
| class                | instances of the class   | same                     |
| object / list/tuple  | structural shape         | same                     |
| predicate            | anything                 | nothing                  |
| tagged guard         | ``guard.narrows``        | ``guard.covers``         |
| alternation          | union of uppers          | union of lowers          |

extract() intersects with the upper bound and exclude() subtracts the lower
bound. For patterns whose bounds coincide the two results partition the
domain exactly; otherwise exclusion errs on the side of keeping shapes.
"""

from __future__ import annotations

from typing import Any

from patmatch._domain import (
    ANYTHING,
    NEVER,
    Domain,
    InstanceShape,
    KindShape,
    ListShape,
    LiteralShape,
    RecordShape,
    TupleShape,
    domain_of,
    union,
)
from patmatch._pattern import (
    AlternationNode,
    ClassNode,
    GuardNode,
    KindNode,
    ListNode,
    LiteralNode,
    ObjectNode,
    PatternNode,
    PredicateNode,
    TupleNode,
    compile_pattern,
)


def bounds(pattern: Any) -> tuple[Domain, Domain]:
    """Return the (upper, lower) domain bounds of a pattern."""
    return _bounds(compile_pattern(pattern))


def extract(domain: Any, pattern: Any) -> Domain:
    """The part of ``domain`` consistent with ``pattern``.

    ``domain`` may be a Domain or any annotation accepted by domain_of().
    """
    upper, _ = bounds(pattern)
    return domain_of(domain) & upper


def exclude(domain: Any, pattern: Any) -> Domain:
    """The part of ``domain`` left once ``pattern`` has been handled."""
    _, lower = bounds(pattern)
    return domain_of(domain) - lower


def remaining(domain: Any, *patterns: Any) -> Domain:
    """Fold exclude() over a sequence of arm patterns."""
    current = domain_of(domain)
    for pattern in patterns:
        current = exclude(current, pattern)
    return current


def is_exhaustive(domain: Any, *patterns: Any) -> bool:
    """True when the arm patterns together handle every shape of ``domain``."""
    return remaining(domain, *patterns).is_never


def _bounds(node: PatternNode) -> tuple[Domain, Domain]:
    match node:
        case LiteralNode(value=v):
            return _exact(Domain((LiteralShape(v),)))
        case KindNode(kind=k):
            return _exact(Domain((KindShape(k),)))
        case ClassNode(cls=c):
            return _exact(Domain((InstanceShape(c),)))
        case PredicateNode():
            return ANYTHING, NEVER
        case GuardNode(guard=g):
            upper = g.narrows if g.narrows is not None else ANYTHING
            lower = g.covers if g.covers is not None else NEVER
            return upper, lower
        case ObjectNode(fields=()):
            return _exact(Domain((RecordShape(closed=True),)))
        case ObjectNode(fields=fields):
            pairs = [(key, _bounds(n)) for key, n in fields]
            return (
                _record(tuple((k, b[0]) for k, b in pairs)),
                _record(tuple((k, b[1]) for k, b in pairs)),
            )
        case ListNode(item=item):
            upper, lower = _bounds(item)
            return Domain((ListShape(upper),)), Domain((ListShape(lower),))
        case TupleNode(items=items):
            pairs = [_bounds(n) for n in items]
            return (
                _tuple(tuple(b[0] for b in pairs)),
                _tuple(tuple(b[1] for b in pairs)),
            )
        case AlternationNode(options=options):
            pairs = [_bounds(n) for n in options]
            return union(*(b[0] for b in pairs)), union(*(b[1] for b in pairs))
    return ANYTHING, NEVER  # pragma: no cover


def _exact(domain: Domain) -> tuple[Domain, Domain]:
    return domain, domain


def _record(fields: tuple[tuple[Any, Domain], ...]) -> Domain:
    # A required field with no possible value makes the whole record empty.
    if any(d.is_never for _, d in fields):
        return NEVER
    return Domain((RecordShape(fields),))


def _tuple(items: tuple[Domain, ...]) -> Domain:
    if any(d.is_never for d in items):
        return NEVER
    return Domain((TupleShape(items),))
