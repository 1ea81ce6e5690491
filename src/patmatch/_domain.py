"""Shapes and domains: the set algebra behind exhaustiveness checking.

A Domain is a finite union of shape variants describing every value that may
still reach a point in a match chain. The algebra never looks at a concrete
input; it only answers questions about sets of shapes:

- intersect (``a & b``): values in both domains
- subtract (``a - b``): values in ``a`` not in ``b``
- membership (``value in d``): mirrors the structural comparator exactly

Subtraction is sound rather than complete. A variant is only removed (or
refined) when the removal is exact; anything the representation cannot
express is kept. Under-excluding can only make a chain look less exhaustive
than it is, never more.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from dataclasses import dataclass
from types import UnionType
from typing import (
    Annotated,
    Any,
    Literal,
    NewType,
    TypeAliasType,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
)

from patmatch._errors import DomainError
from patmatch._pattern import MAX_DEPTH, get_field, has_field, own_key_count
from patmatch._types import (
    FINITE_KINDS,
    KINDS,
    is_array,
    is_object_like,
    kind_of,
    kind_of_class,
    same_value,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Shapes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AnyShape:
    """Every value."""

    def describe(self) -> str:
        return "Any"


@dataclass(frozen=True, slots=True, eq=False)
class LiteralShape:
    """Exactly one value, compared with same-value equality."""

    value: Any

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LiteralShape):
            return NotImplemented
        return same_value(self.value, other.value)

    def __hash__(self) -> int:
        # Coarse but consistent with __eq__: equal literals share a kind.
        return hash(kind_of(self.value))

    def describe(self) -> str:
        return repr(self.value)


@dataclass(frozen=True, slots=True)
class KindShape:
    """Any value of a primitive kind with infinitely many inhabitants."""

    kind: type

    def describe(self) -> str:
        return self.kind.__name__


@dataclass(frozen=True, slots=True)
class InstanceShape:
    """Any instance of a class."""

    cls: type

    def describe(self) -> str:
        return self.cls.__qualname__


@dataclass(frozen=True, slots=True)
class RecordShape:
    """An object-like value with at least the named fields.

    ``cls`` restricts the record to instances of a class. ``closed`` records
    have no own keys at all (and therefore no fields).
    """

    fields: tuple[tuple[Any, Domain], ...] = ()
    cls: type | None = None
    closed: bool = False

    def field(self, name: Any) -> Domain | None:
        for key, domain in self.fields:
            if key == name:
                return domain
        return None

    def with_field(self, name: Any, domain: Domain) -> RecordShape:
        fields = tuple((k, domain if k == name else d) for k, d in self.fields)
        return dataclasses.replace(self, fields=fields)

    def describe(self) -> str:
        prefix = self.cls.__qualname__ if self.cls is not None else ""
        if self.closed:
            return prefix + "{}"
        parts = [f"{_describe_key(k)}: {d.describe()}" for k, d in self.fields]
        parts.append("...")
        return prefix + "{" + ", ".join(parts) + "}"


@dataclass(frozen=True, slots=True)
class ListShape:
    """An array of any length (including zero) whose items lie in ``item``."""

    item: Domain

    def describe(self) -> str:
        return f"list[{self.item.describe()}]"


@dataclass(frozen=True, slots=True)
class TupleShape:
    """An array of exactly ``len(items)`` positions."""

    items: tuple[Domain, ...]

    def describe(self) -> str:
        inner = ", ".join(d.describe() for d in self.items)
        if len(self.items) == 1:
            inner += ","
        return f"({inner})"


type Shape = (
    AnyShape
    | LiteralShape
    | KindShape
    | InstanceShape
    | RecordShape
    | ListShape
    | TupleShape
)


def _describe_key(key: Any) -> str:
    return key if isinstance(key, str) else repr(key)


# ═══════════════════════════════════════════════════════════════════════════════
# Domain
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Domain:
    """An immutable union of shape variants.

    Variants are normalized on construction: finite kinds (bool, NoneType)
    are expanded into literals, duplicates are dropped, literals already
    covered by a broader variant are absorbed, and a union containing
    AnyShape collapses to AnyShape.
    """

    variants: tuple[Shape, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "variants", _normalize(self.variants))

    @property
    def is_never(self) -> bool:
        """True when no value inhabits the domain."""
        return not self.variants

    def __contains__(self, value: Any) -> bool:
        return any(_contains(shape, value) for shape in self.variants)

    def __or__(self, other: Domain) -> Domain:
        return Domain(self.variants + other.variants)

    def __and__(self, other: Domain) -> Domain:
        return intersect(self, other)

    def __sub__(self, other: Domain) -> Domain:
        return subtract(self, other)

    def issubset(self, other: Domain) -> bool:
        return subtract(self, other).is_never

    def describe(self) -> str:
        if not self.variants:
            return "Never"
        return " | ".join(shape.describe() for shape in self.variants)

    def __str__(self) -> str:
        return self.describe()


def union(*domains: Domain) -> Domain:
    """Union of any number of domains."""
    return Domain(tuple(s for d in domains for s in d.variants))


def shapes(*variants: Shape) -> Domain:
    """Build a domain from shape variants."""
    return Domain(variants)


def _normalize(variants: tuple[Shape, ...]) -> tuple[Shape, ...]:
    flat: list[Shape] = []
    for shape in variants:
        if isinstance(shape, KindShape) and shape.kind in FINITE_KINDS:
            expanded: tuple[Shape, ...] = tuple(
                LiteralShape(v) for v in FINITE_KINDS[shape.kind]
            )
        else:
            expanded = (shape,)
        for s in expanded:
            if isinstance(s, AnyShape):
                return (s,)
            if s not in flat:
                flat.append(s)
    return tuple(
        s
        for s in flat
        if not isinstance(s, LiteralShape)
        or not any(
            not isinstance(o, LiteralShape) and _contains(o, s.value) for o in flat
        )
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Membership (value level, mirrors the comparator)
# ═══════════════════════════════════════════════════════════════════════════════


def _contains(shape: Shape, value: Any) -> bool:
    match shape:
        case AnyShape():
            return True
        case LiteralShape(value=expected):
            return same_value(value, expected)
        case KindShape(kind=kind):
            return kind_of(value) is kind
        case InstanceShape(cls=cls):
            return isinstance(value, cls)
        case RecordShape(fields=fields, cls=cls, closed=closed):
            if not is_object_like(value):
                return False
            if cls is not None and not isinstance(value, cls):
                return False
            if closed:
                return own_key_count(value) == 0
            return all(
                has_field(value, key) and get_field(value, key) in domain
                for key, domain in fields
            )
        case ListShape(item=item):
            return is_array(value) and all(v in item for v in value)
        case TupleShape(items=items):
            if not is_array(value) or len(value) != len(items):
                return False
            return all(v in d for v, d in zip(value, items))
    return False  # pragma: no cover


NEVER = Domain()
ANYTHING = Domain((AnyShape(),))


# ═══════════════════════════════════════════════════════════════════════════════
# Intersection
# ═══════════════════════════════════════════════════════════════════════════════


def intersect(a: Domain, b: Domain) -> Domain:
    """Values lying in both ``a`` and ``b``."""
    return Domain(
        tuple(s for x in a.variants for y in b.variants for s in _intersect(x, y))
    )


def _intersect(x: Shape, y: Shape) -> tuple[Shape, ...]:
    match x, y:
        case AnyShape(), _:
            return (y,)
        case _, AnyShape():
            return (x,)
        case LiteralShape(value=v), _:
            return (x,) if _contains(y, v) else ()
        case _, LiteralShape(value=v):
            return (y,) if _contains(x, v) else ()
        case KindShape(kind=k1), KindShape(kind=k2):
            return (x,) if k1 is k2 else ()
        case (KindShape(kind=k), InstanceShape(cls=c)) | (
            InstanceShape(cls=c),
            KindShape(kind=k),
        ):
            if issubclass(k, c):
                return (KindShape(k),)
            if kind_of_class(c) is k:
                return (InstanceShape(c),)
            return ()
        case InstanceShape(cls=c1), InstanceShape(cls=c2):
            if issubclass(c1, c2):
                return (x,)
            if issubclass(c2, c1):
                return (y,)
            return ()
        case (KindShape(), _) | (_, KindShape()):
            return ()
        case (InstanceShape(cls=c), RecordShape() as record) | (
            RecordShape() as record,
            InstanceShape(cls=c),
        ):
            if not _may_be_object_like(c):
                return ()
            ok, cls = _narrower_class(record.cls, c)
            return (dataclasses.replace(record, cls=cls),) if ok else ()
        case (InstanceShape(cls=c), ListShape() | TupleShape() as seq) | (
            ListShape() | TupleShape() as seq,
            InstanceShape(cls=c),
        ):
            return (seq,) if issubclass(list, c) or issubclass(tuple, c) else ()
        case RecordShape(), RecordShape():
            return _intersect_records(x, y)
        case ListShape(item=a), ListShape(item=b):
            # The empty array inhabits both, so the result is never dropped.
            return (ListShape(a & b),)
        case (ListShape(item=a), TupleShape(items=items)) | (
            TupleShape(items=items),
            ListShape(item=a),
        ):
            return _intersect_positions(items, (a,) * len(items))
        case TupleShape(items=a), TupleShape(items=b) if len(a) == len(b):
            return _intersect_positions(a, b)
    return ()


def _intersect_records(r1: RecordShape, r2: RecordShape) -> tuple[Shape, ...]:
    ok, cls = _narrower_class(r1.cls, r2.cls)
    if not ok:
        return ()
    if r1.closed or r2.closed:
        if r1.fields or r2.fields:
            return ()
        return (RecordShape(cls=cls, closed=True),)
    fields = dict(r1.fields)
    for name, domain in r2.fields:
        if name in fields:
            merged = fields[name] & domain
            if merged.is_never:
                return ()
            fields[name] = merged
        else:
            fields[name] = domain
    return (RecordShape(tuple(fields.items()), cls=cls),)


def _intersect_positions(
    a: tuple[Domain, ...], b: tuple[Domain, ...]
) -> tuple[Shape, ...]:
    items = tuple(x & y for x, y in zip(a, b))
    if any(d.is_never for d in items):
        return ()
    return (TupleShape(items),)


def _narrower_class(a: type | None, b: type | None) -> tuple[bool, type | None]:
    if a is None:
        return True, b
    if b is None or issubclass(a, b):
        return True, a
    if issubclass(b, a):
        return True, b
    return False, None


def _may_be_object_like(cls: type) -> bool:
    return not issubclass(cls, (*KINDS, list, tuple))


# ═══════════════════════════════════════════════════════════════════════════════
# Subtraction
# ═══════════════════════════════════════════════════════════════════════════════


def subtract(a: Domain, b: Domain) -> Domain:
    """Values in ``a`` not in ``b`` (sound over-approximation)."""
    current = a.variants
    for y in b.variants:
        current = tuple(s for x in current for s in _subtract(x, y))
    return Domain(current)


def _subtract(x: Shape, y: Shape) -> tuple[Shape, ...]:
    if _is_subset(x, y):
        return ()
    match x, y:
        case RecordShape(), RecordShape():
            return _subtract_record(x, y)
        case TupleShape(items=a), TupleShape(items=b) if len(a) == len(b):
            return _subtract_positions(x, b)
        case TupleShape(items=a), ListShape(item=b):
            return _subtract_positions(x, (b,) * len(a))
    return (x,)


def _subtract_record(r: RecordShape, p: RecordShape) -> tuple[Shape, ...]:
    """Remove ``p`` from ``r`` field by field.

    The variant goes away only when every field ``p`` constrains is fully
    covered. A single partially covered field is refined in place (exact
    product difference); anything else leaves ``r`` untouched.
    """
    if p.closed:
        return (r,)
    if p.cls is not None and (r.cls is None or not issubclass(r.cls, p.cls)):
        return (r,)
    residue: tuple[Any, Domain] | None = None
    for name, covered in p.fields:
        current = r.field(name)
        if current is None:
            return (r,)
        rest = current - covered
        if rest.is_never:
            continue
        if (current & covered).is_never or residue is not None:
            return (r,)
        residue = (name, rest)
    if residue is None:
        return ()
    return (r.with_field(*residue),)


def _subtract_positions(t: TupleShape, covered: tuple[Domain, ...]) -> tuple[Shape, ...]:
    residue: tuple[int, Domain] | None = None
    for i, (current, cover) in enumerate(zip(t.items, covered)):
        rest = current - cover
        if rest.is_never:
            continue
        if (current & cover).is_never or residue is not None:
            return (t,)
        residue = (i, rest)
    if residue is None:
        return ()
    index, rest = residue
    items = tuple(rest if i == index else d for i, d in enumerate(t.items))
    return (TupleShape(items),)


def _is_subset(x: Shape, y: Shape) -> bool:
    match x, y:
        case _, AnyShape():
            return True
        case AnyShape(), InstanceShape(cls=c):
            return c is object
        case LiteralShape(value=v), _:
            return _contains(y, v)
        case KindShape(kind=k1), KindShape(kind=k2):
            return k1 is k2
        case KindShape(kind=k), InstanceShape(cls=c):
            return issubclass(k, c)
        case InstanceShape(cls=c), InstanceShape(cls=d):
            return issubclass(c, d)
        case InstanceShape(cls=c), KindShape(kind=k):
            return kind_of_class(c) is k
        case RecordShape(cls=cls), InstanceShape(cls=c):
            return c is object or (cls is not None and issubclass(cls, c))
        case RecordShape(), RecordShape():
            return _record_subset(x, y)
        case ListShape() | TupleShape(), InstanceShape(cls=c):
            return issubclass(list, c) and issubclass(tuple, c)
        case ListShape(item=a), ListShape(item=b):
            return a.issubset(b)
        case TupleShape(items=a), TupleShape(items=b):
            return len(a) == len(b) and all(i.issubset(j) for i, j in zip(a, b))
        case TupleShape(items=a), ListShape(item=b):
            return all(i.issubset(b) for i in a)
    return False


def _record_subset(x: RecordShape, y: RecordShape) -> bool:
    if y.closed and not x.closed:
        return False
    if y.cls is not None and (x.cls is None or not issubclass(x.cls, y.cls)):
        return False
    for name, covered in y.fields:
        current = x.field(name)
        if current is None or not current.issubset(covered):
            return False
    return True


# ═══════════════════════════════════════════════════════════════════════════════
# Type hints → domains
# ═══════════════════════════════════════════════════════════════════════════════


def domain_of(annotation: Any) -> Domain:
    """Derive a domain from a Python type annotation.

    Raises:
        DomainError: If the annotation is unsupported, unresolvable, or
            nests deeper than MAX_DEPTH (e.g. a recursive alias).
    """
    return _domain_of(annotation, 1)


def _domain_of(tp: Any, depth: int) -> Domain:
    if depth > MAX_DEPTH:
        msg = f"type {tp!r} nests deeper than maximum allowed depth {MAX_DEPTH}"
        raise DomainError(msg)

    if isinstance(tp, Domain):
        return tp
    if isinstance(
        tp,
        AnyShape | LiteralShape | KindShape | InstanceShape | RecordShape
        | ListShape | TupleShape,
    ):
        return Domain((tp,))
    if tp is Any or tp is object:
        return ANYTHING
    if tp is None:
        return Domain((LiteralShape(None),))
    if isinstance(tp, TypeAliasType):
        return _domain_of(tp.__value__, depth + 1)
    if isinstance(tp, NewType):
        return _domain_of(tp.__supertype__, depth + 1)
    if isinstance(tp, TypeVar):
        return _domain_of(tp.__bound__ or Any, depth + 1)

    origin = get_origin(tp)
    args = get_args(tp)
    if origin is Literal:
        return Domain(tuple(LiteralShape(a) for a in args))
    if origin is Union or origin is UnionType:
        return union(*(_domain_of(a, depth + 1) for a in args))
    if origin is Annotated:
        return _domain_of(args[0], depth + 1)
    if origin in (list, Sequence, MutableSequence):
        item = _domain_of(args[0], depth + 1) if args else ANYTHING
        return Domain((ListShape(item),))
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return Domain((ListShape(_domain_of(args[0], depth + 1)),))
        if args == ((),):
            return Domain((TupleShape(()),))
        return Domain((TupleShape(tuple(_domain_of(a, depth + 1) for a in args)),))
    if origin in (dict, Mapping, MutableMapping):
        return Domain((RecordShape(),))

    if isinstance(tp, type):
        return _domain_of_class(tp, depth)

    msg = f"cannot derive a domain from {tp!r}"
    raise DomainError(msg)


def _domain_of_class(cls: type, depth: int) -> Domain:
    if cls in KINDS:
        return Domain((KindShape(cls),))
    if issubclass(cls, enum.Enum) and not issubclass(cls, enum.Flag):
        return Domain(tuple(LiteralShape(member) for member in cls))
    if cls in (list, tuple):
        return Domain((ListShape(ANYTHING),))
    if cls is dict:
        return Domain((RecordShape(),))
    if is_typeddict(cls):
        hints = _type_hints(cls)
        fields = tuple(
            (name, _domain_of(hints[name], depth + 1))
            for name in hints
            if name in cls.__required_keys__
        )
        return Domain((RecordShape(fields),))
    if dataclasses.is_dataclass(cls):
        hints = _type_hints(cls)
        fields = tuple(
            (f.name, _domain_of(hints.get(f.name, Any), depth + 1))
            for f in dataclasses.fields(cls)
        )
        return Domain((RecordShape(fields, cls=cls),))
    return Domain((InstanceShape(cls),))


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls)
    except (NameError, TypeError) as e:
        msg = f"cannot resolve type hints of {cls.__qualname__}: {e}"
        raise DomainError(msg) from e
