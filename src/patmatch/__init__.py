"""patmatch: structural pattern matching with checked exhaustiveness.

All public types are exported from this module for flat imports:

    from patmatch import match, when, list_of, is_, any_of, UNSET

    label = (
        match(response, domain=Response)
        .with_({"status": "ok", "data": list_of(str)}, render_rows)
        .with_({"status": "error"}, render_error)
        .exhaustive("unhandled response")
    )
"""

import logging

__version__ = "0.1.0"

# Match chain
from patmatch._builder import DEFAULT_MESSAGE, Match, State, match

# Config (see patmatch._config)
from patmatch._config import (
    KIND_NAMES,
    ConfigParseError,
    parse_domain_config,
    parse_pattern_config,
)

# Domains (see patmatch._domain)
from patmatch._domain import (
    ANYTHING,
    NEVER,
    AnyShape,
    Domain,
    InstanceShape,
    KindShape,
    ListShape,
    LiteralShape,
    RecordShape,
    Shape,
    TupleShape,
    domain_of,
    intersect,
    shapes,
    subtract,
    union,
)
from patmatch._errors import (
    DomainError,
    MatchClosedError,
    MatchError,
    NonExhaustiveError,
    PatternError,
)

# Guards
from patmatch._guards import any_of, is_, list_of, when

# Narrowing
from patmatch._narrowing import bounds, exclude, extract, is_exhaustive, remaining

# Patterns
from patmatch._pattern import (
    MAX_DEPTH,
    Alternation,
    AlternationNode,
    ClassNode,
    Guard,
    GuardNode,
    KindNode,
    ListNode,
    LiteralNode,
    ObjectNode,
    PatternNode,
    PredicateNode,
    TupleNode,
    compile_pattern,
    matches,
    pattern_depth,
)

# String guards
from patmatch._string_guards import (
    contains,
    exact,
    prefix,
    regex,
    suffix,
)
from patmatch._types import KINDS, UNSET, Predicate, kind_of, same_value

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Match chain
    "match",
    "Match",
    "State",
    "DEFAULT_MESSAGE",
    "UNSET",
    # Patterns
    "matches",
    "compile_pattern",
    "pattern_depth",
    "MAX_DEPTH",
    "PatternNode",
    "LiteralNode",
    "KindNode",
    "PredicateNode",
    "GuardNode",
    "ClassNode",
    "ObjectNode",
    "ListNode",
    "TupleNode",
    "AlternationNode",
    "Predicate",
    "KINDS",
    "kind_of",
    "same_value",
    # Guards
    "Guard",
    "Alternation",
    "when",
    "list_of",
    "is_",
    "any_of",
    # String guards
    "exact",
    "prefix",
    "suffix",
    "contains",
    "regex",
    # Domains
    "Domain",
    "Shape",
    "AnyShape",
    "LiteralShape",
    "KindShape",
    "InstanceShape",
    "RecordShape",
    "ListShape",
    "TupleShape",
    "ANYTHING",
    "NEVER",
    "domain_of",
    "shapes",
    "union",
    "intersect",
    "subtract",
    # Narrowing
    "bounds",
    "extract",
    "exclude",
    "remaining",
    "is_exhaustive",
    # Config
    "parse_pattern_config",
    "parse_domain_config",
    "ConfigParseError",
    "KIND_NAMES",
    # Errors
    "MatchError",
    "NonExhaustiveError",
    "MatchClosedError",
    "PatternError",
    "DomainError",
]
