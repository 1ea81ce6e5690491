"""Tests for domain narrowing: extract, exclude and exhaustiveness."""

from __future__ import annotations

from typing import Any, Literal

import pytest

from patmatch import (
    ANYTHING,
    NEVER,
    Domain,
    InstanceShape,
    KindShape,
    ListShape,
    LiteralShape,
    RecordShape,
    TupleShape,
    any_of,
    bounds,
    domain_of,
    exclude,
    extract,
    is_exhaustive,
    list_of,
    remaining,
    when,
)
from patmatch.testing import Disagreement, disagreements

INT = Domain((KindShape(int),))
STR = Domain((KindShape(str),))


def lit(*values: Any) -> Domain:
    return Domain(tuple(LiteralShape(v) for v in values))


SAMPLES: list[Any] = [
    None,
    True,
    False,
    0,
    1,
    -1,
    2.5,
    "",
    "ok",
    "error",
    b"ok",
    [],
    [1, 2],
    ["a", "b"],
    [1, "a"],
    (1, "a"),
    {},
    {"status": "ok"},
    {"status": "error", "message": "boom"},
    {"status": 1},
    {"kind": "circle", "radius": 1.5},
]


class TestBounds:
    def test_literal(self) -> None:
        assert bounds("ok") == (lit("ok"), lit("ok"))

    def test_kind(self) -> None:
        assert bounds(int) == (INT, INT)

    def test_class(self) -> None:
        assert bounds(dict) == (Domain((InstanceShape(dict),)),) * 2

    def test_predicate(self) -> None:
        assert bounds(lambda v: True) == (ANYTHING, NEVER)

    def test_object(self) -> None:
        upper, lower = bounds({"status": "ok"})
        assert upper == lower == Domain((RecordShape((("status", lit("ok")),)),))

    def test_object_with_predicate_field(self) -> None:
        upper, lower = bounds({"n": lambda v: v > 0})
        assert upper == Domain((RecordShape((("n", ANYTHING),)),))
        assert lower == NEVER

    def test_closed_object(self) -> None:
        assert bounds({}) == (Domain((RecordShape(closed=True),)),) * 2

    def test_list(self) -> None:
        assert bounds([str]) == (Domain((ListShape(STR),)),) * 2

    def test_tuple(self) -> None:
        assert bounds((int, str)) == (Domain((TupleShape((INT, STR)),)),) * 2

    def test_alternation(self) -> None:
        upper, lower = bounds(any_of("a", lambda v: True))
        assert upper == ANYTHING
        assert lower == lit("a")


class TestExtract:
    def test_literal_from_literals(self) -> None:
        assert extract(Literal["a", "b"], "a") == lit("a")

    def test_unrelated_literal(self) -> None:
        assert extract(Literal["a", "b"], "c").is_never

    def test_kind_from_union(self) -> None:
        assert extract(int | str, str) == STR

    def test_record_from_union(self, status_domain: Domain) -> None:
        d = extract(status_domain, {"status": "error"})
        assert len(d.variants) == 1
        assert d.variants[0].field("status") == lit("error")

    def test_predicate_keeps_everything(self) -> None:
        assert extract(int | str, lambda v: True) == INT | STR

    def test_asserted_guard(self) -> None:
        is_text = when(lambda v: isinstance(v, str), shape=str)
        assert extract(int | str, is_text) == STR


class TestExclude:
    def test_literal(self) -> None:
        assert exclude(Literal["a", "b"], "a") == lit("b")

    def test_kind(self) -> None:
        assert exclude(int | str, int) == STR

    def test_record(self, status_domain: Domain) -> None:
        d = exclude(status_domain, {"status": "ok"})
        assert len(d.variants) == 1
        assert d.variants[0].field("status") == lit("error")

    def test_predicate_removes_nothing(self) -> None:
        assert exclude(Literal["a", "b"], lambda v: v == "a") == lit("a", "b")

    def test_asserted_guard(self) -> None:
        is_text = when(lambda v: isinstance(v, str), shape=str)
        assert exclude(int | str, is_text) == INT

    def test_list_of_predicate_removes_empty_arrays_only(self) -> None:
        d = exclude(Domain((ListShape(NEVER),)), list_of(lambda v: False))
        assert d.is_never

    def test_partition_of_finite_domain(self) -> None:
        domain = domain_of(Literal["a", "b", "c"])
        for pattern in ("a", any_of("a", "c"), str):
            extracted, excluded = extract(domain, pattern), exclude(domain, pattern)
            assert domain.issubset(extracted | excluded)
            assert (extracted & excluded).is_never


class TestRemaining:
    def test_fold(self) -> None:
        assert remaining(Literal["a", "b", "c"], "a", "c") == lit("b")

    def test_exhaustive(self, status_domain: Domain) -> None:
        assert is_exhaustive(status_domain, {"status": "ok"}, {"status": "error"})
        assert not is_exhaustive(status_domain, {"status": "ok"})

    def test_bool(self) -> None:
        assert is_exhaustive(bool, True, False)
        assert not is_exhaustive(bool, True)

    def test_optional(self) -> None:
        assert is_exhaustive(str | None, str, None)
        assert remaining(str | None, str) == lit(None)

    def test_alternation_arm(self) -> None:
        assert is_exhaustive(Literal[1, 2, 3], any_of(1, 2), 3)

    def test_catch_all_object(self, status_domain: Domain) -> None:
        assert is_exhaustive(status_domain, {"status": str})

    def test_tuple_cases(self) -> None:
        pair = tuple[bool, bool]
        assert is_exhaustive(pair, (True, bool), (False, True), (False, False))
        assert remaining(pair, (True, bool), (False, True)) == Domain(
            (TupleShape((lit(False), lit(False))),)
        )


class TestAgreement:
    """The comparator and the narrowing model agree on every sample."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "ok",
            1,
            None,
            True,
            int,
            str,
            bool,
            dict,
            {},
            {"status": "ok"},
            {"status": str},
            {"status": any_of("ok", "error")},
            [int],
            [str],
            (int, str),
            (),
            any_of(int, str),
            any_of({"kind": "circle"}, [int]),
        ],
        ids=repr,
    )
    def test_exact_patterns_extract_exactly(self, pattern: Any) -> None:
        assert disagreements(ANYTHING, pattern, SAMPLES) == []

    @pytest.mark.parametrize(
        "pattern",
        [
            lambda v: bool(v),
            when(lambda v: isinstance(v, str), shape=str),
            {"status": lambda v: v == "ok"},
            list_of(lambda v: isinstance(v, int)),
            any_of(1, lambda v: v == "ok"),
        ],
    )
    def test_opaque_patterns_are_sound(self, pattern: Any) -> None:
        assert disagreements(ANYTHING, pattern, SAMPLES, exact=False) == []

    def test_declared_domain(self, status_domain: Domain) -> None:
        for pattern in ({"status": "ok"}, {"status": "error"}, {"message": str}):
            assert disagreements(status_domain, pattern, SAMPLES) == []

    def test_lying_guard_is_reported(self) -> None:
        liar = when(lambda v: v == "a", shape=str)
        assert disagreements(str, liar, ["a", "b", 1]) == [
            Disagreement("b", matched=False, in_extract=True, in_exclude=False)
        ]
