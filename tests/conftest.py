"""Shared fixtures for patmatch tests.

Conformance fixtures live in tests/fixtures/*.yaml. Each YAML document is one
match chain: a domain config, a list of arm pattern configs, whether the arms
are exhaustive over the domain, and cases mapping an input value to the index
of the arm expected to produce the output (null when no arm matches).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import yaml

from patmatch import Domain, parse_domain_config, parse_pattern_config

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"


@dataclass
class ChainFixture:
    """One match chain loaded from a conformance fixture."""

    source: str
    name: str
    domain: Domain
    arms: list[Any]
    exhaustive: bool
    cases: list[dict[str, Any]]


# ─── Fixture loading ────────────────────────────────────────────────────────


def load_chain_fixtures() -> list[ChainFixture]:
    """Load every chain fixture (files may contain multiple documents)."""
    fixtures: list[ChainFixture] = []
    for yaml_file in sorted(FIXTURE_DIR.glob("*.yaml")):
        with yaml_file.open() as f:
            for doc in yaml.safe_load_all(f):
                if doc is None:
                    continue
                fixtures.append(
                    ChainFixture(
                        source=yaml_file.name,
                        name=doc["name"],
                        domain=parse_domain_config(doc["domain"]),
                        arms=[parse_pattern_config(a) for a in doc["arms"]],
                        exhaustive=doc["exhaustive"],
                        cases=doc["cases"],
                    )
                )
    return fixtures


# ─── Shared fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def status_domain() -> Domain:
    """The ok/error response union used across builder and narrowing tests."""
    return parse_domain_config(
        {
            "type": "union",
            "members": [
                {
                    "type": "record",
                    "fields": {
                        "status": {"type": "literal", "value": "ok"},
                        "data": {"type": "list", "item": {"type": "kind", "kind": "str"}},
                    },
                },
                {
                    "type": "record",
                    "fields": {
                        "status": {"type": "literal", "value": "error"},
                        "message": {"type": "kind", "kind": "str"},
                    },
                },
            ],
        }
    )
