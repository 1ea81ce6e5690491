"""Declarative configs for patterns and domains.

Patterns and domains can be written as plain dicts (the JSON/YAML shape),
each node carrying a ``type`` discriminant:

    dict → parse_pattern_config() → pattern  → match(...).with_(pattern, ...)
    dict → parse_domain_config()  → Domain   → match(..., domain=domain)

| Pattern type        | Fields                     | Runtime pattern        |
|---------------------|----------------------------|------------------------|
| literal             | value                      | the value itself       |
| kind                | kind                       | int, str, ...          |
| object              | fields (mapping)           | dict                   |
| empty               |                            | {}                     |
| list                | item                       | [item]                 |
| tuple               | items                      | (item, ...)            |
| any_of              | patterns                   | Alternation            |
| exact/prefix/suffix/contains | value, ignore_case | string Guard          |
| regex               | value                      | string Guard           |

Domain configs use the same node shapes with ``any``, ``literal``,
``kind``, ``record`` (fields, closed), ``list``, ``tuple`` and ``union``
(members).
"""

from __future__ import annotations

from typing import Any

from patmatch._domain import (
    ANYTHING,
    Domain,
    KindShape,
    ListShape,
    LiteralShape,
    RecordShape,
    TupleShape,
    union,
)
from patmatch._errors import MatchError
from patmatch._guards import any_of
from patmatch._string_guards import contains, exact, prefix, regex, suffix
from patmatch._types import NoneType

# Kind names as written in configs
KIND_NAMES: dict[str, type] = {
    "bool": bool,
    "int": int,
    "float": float,
    "complex": complex,
    "str": str,
    "bytes": bytes,
    "none": NoneType,
}

_STRING_GUARDS = {
    "exact": exact,
    "prefix": prefix,
    "suffix": suffix,
    "contains": contains,
}


class ConfigParseError(MatchError):
    """Error parsing a config dict into a pattern or domain."""


# ═══════════════════════════════════════════════════════════════════════════════
# Patterns
# ═══════════════════════════════════════════════════════════════════════════════


def parse_pattern_config(data: dict[str, Any]) -> Any:
    """Parse a pattern config dict into a runtime pattern.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    node_type = _node_type(data, "pattern")

    if node_type == "literal":
        return _require_scalar(data, "literal pattern")
    if node_type == "kind":
        return _parse_kind(data)
    if node_type == "object":
        fields = _require_dict(data, "fields", "object pattern")
        if not fields:
            msg = "object pattern requires at least one field (use 'empty' for {})"
            raise ConfigParseError(msg)
        return {k: parse_pattern_config(v) for k, v in fields.items()}
    if node_type == "empty":
        return {}
    if node_type == "list":
        return [parse_pattern_config(_require(data, "item", "list pattern"))]
    if node_type == "tuple":
        items = _require_list(data, "items", "tuple pattern")
        return tuple(parse_pattern_config(p) for p in items)
    if node_type == "any_of":
        options = _require_list(data, "patterns", "any_of pattern")
        return any_of(*(parse_pattern_config(p) for p in options))
    if node_type in _STRING_GUARDS:
        value = _require_str(data, "value", f"{node_type} pattern")
        ignore_case = data.get("ignore_case", False)
        if not isinstance(ignore_case, bool):
            msg = f"'ignore_case' must be a bool, got {type(ignore_case).__name__}"
            raise ConfigParseError(msg)
        return _STRING_GUARDS[node_type](value, ignore_case=ignore_case)
    if node_type == "regex":
        return regex(_require_str(data, "value", "regex pattern"))

    msg = f"unknown pattern type: {node_type!r}"
    raise ConfigParseError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Domains
# ═══════════════════════════════════════════════════════════════════════════════


def parse_domain_config(data: dict[str, Any]) -> Domain:
    """Parse a domain config dict into a Domain.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    node_type = _node_type(data, "domain")

    if node_type == "any":
        return ANYTHING
    if node_type == "literal":
        return Domain((LiteralShape(_require_scalar(data, "literal domain")),))
    if node_type == "kind":
        return Domain((KindShape(_parse_kind(data)),))
    if node_type == "record":
        fields = data.get("fields", {})
        if not isinstance(fields, dict):
            msg = f"'fields' must be a dict, got {type(fields).__name__}"
            raise ConfigParseError(msg)
        closed = data.get("closed", False)
        if not isinstance(closed, bool):
            msg = f"'closed' must be a bool, got {type(closed).__name__}"
            raise ConfigParseError(msg)
        if closed and fields:
            msg = "closed record cannot declare fields"
            raise ConfigParseError(msg)
        return Domain(
            (
                RecordShape(
                    tuple((k, parse_domain_config(v)) for k, v in fields.items()),
                    closed=closed,
                ),
            )
        )
    if node_type == "list":
        item = data.get("item")
        return Domain(
            (ListShape(parse_domain_config(item) if item is not None else ANYTHING),)
        )
    if node_type == "tuple":
        items = _require_list(data, "items", "tuple domain")
        return Domain((TupleShape(tuple(parse_domain_config(d) for d in items)),))
    if node_type == "union":
        members = _require_list(data, "members", "union domain")
        return union(*(parse_domain_config(m) for m in members))

    msg = f"unknown domain type: {node_type!r}"
    raise ConfigParseError(msg)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _node_type(data: Any, what: str) -> str:
    if not isinstance(data, dict):
        msg = f"{what} must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    node_type = data.get("type")
    if node_type is None:
        msg = f"{what} missing required field 'type'"
        raise ConfigParseError(msg)
    if not isinstance(node_type, str):
        msg = f"{what} 'type' must be a string, got {type(node_type).__name__}"
        raise ConfigParseError(msg)
    return node_type


def _parse_kind(data: dict[str, Any]) -> type:
    name = _require_str(data, "kind", "kind")
    kind = KIND_NAMES.get(name)
    if kind is None:
        expected = sorted(KIND_NAMES)
        msg = f"kind must be one of {expected}, got {name!r}"
        raise ConfigParseError(msg)
    return kind


def _require(data: dict[str, Any], key: str, what: str) -> Any:
    if key not in data:
        msg = f"{what} missing required field {key!r}"
        raise ConfigParseError(msg)
    return data[key]


def _require_scalar(data: dict[str, Any], what: str) -> Any:
    value = _require(data, "value", what)
    if isinstance(value, (dict, list, tuple)):
        msg = f"{what} 'value' must be a scalar, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return value


def _require_str(data: dict[str, Any], key: str, what: str) -> str:
    value = _require(data, key, what)
    if not isinstance(value, str):
        msg = f"{what} {key!r} must be a string, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return value


def _require_list(data: dict[str, Any], key: str, what: str) -> list[Any]:
    value = _require(data, key, what)
    if not isinstance(value, list):
        msg = f"{what} {key!r} must be a list, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return value


def _require_dict(data: dict[str, Any], key: str, what: str) -> dict[str, Any]:
    value = _require(data, key, what)
    if not isinstance(value, dict):
        msg = f"{what} {key!r} must be a dict, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return value
