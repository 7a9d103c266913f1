"""Domain modules for rule evaluation.

This package centralizes the business logic of seedwarden:
- comparison: threshold expressions such as ">=1440"
- rules: rule predicates, rule sets and their log rendering
- decisions: which limits to push for a torrent

Architecture:
    domain/ contains pure logic without I/O. Talking to the server stays in
    the client and the reconciler.
"""

from seedwarden.client.sync.domain.comparison import (
    FLOAT,
    SIGNED_INTEGER,
    UNSIGNED_INTEGER,
    Comparison,
    ComparisonError,
    ComparisonOperator,
    InvalidNumberError,
    MalformedComparisonError,
    NumberType,
    UnknownOperatorError,
    parse_comparison,
)
from seedwarden.client.sync.domain.decisions import (
    GLOBAL_RESET,
    LimitAction,
    decide,
    needs_update,
)
from seedwarden.client.sync.domain.rules import Rule, RuleLimits, RuleSet, render_rule

__all__ = [
    # comparison
    "Comparison",
    "ComparisonError",
    "ComparisonOperator",
    "FLOAT",
    "InvalidNumberError",
    "MalformedComparisonError",
    "NumberType",
    "SIGNED_INTEGER",
    "UNSIGNED_INTEGER",
    "UnknownOperatorError",
    "parse_comparison",
    # rules
    "Rule",
    "RuleLimits",
    "RuleSet",
    "render_rule",
    # decisions
    "GLOBAL_RESET",
    "LimitAction",
    "decide",
    "needs_update",
]
