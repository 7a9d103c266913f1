"""Torrent synchronization and rule enforcement.

Architecture:
    QBittorrentClient.fetch_diff → TorrentStore → RuleSet → decide → apply_limits

Components:
- **TorrentStore**: Torrents known locally, updated from full or incremental diffs
- **domain**: Comparisons, rules and limit decisions (pure logic)
- **Reconciler** (sync.reconciler): Runs one sync-then-evaluate cycle
- **Supervisor** (sync.supervisor): Runs cycles on an interval, logs in again on session loss

The reconciler and supervisor depend on the HTTP client and are imported
from their modules directly.
"""

from seedwarden.client.sync.domain import (
    GLOBAL_RESET,
    Comparison,
    ComparisonError,
    ComparisonOperator,
    InvalidNumberError,
    LimitAction,
    MalformedComparisonError,
    Rule,
    RuleLimits,
    RuleSet,
    UnknownOperatorError,
    decide,
    parse_comparison,
    render_rule,
)
from seedwarden.client.sync.store import (
    DiffPayload,
    InvalidFieldError,
    MissingFieldError,
    PartialTorrent,
    TagList,
    Torrent,
    TorrentStore,
    materialize,
)

__all__ = [
    # Domain
    "Comparison",
    "ComparisonError",
    "ComparisonOperator",
    "GLOBAL_RESET",
    "InvalidNumberError",
    "LimitAction",
    "MalformedComparisonError",
    "Rule",
    "RuleLimits",
    "RuleSet",
    "UnknownOperatorError",
    "decide",
    "parse_comparison",
    "render_rule",
    # Store
    "DiffPayload",
    "InvalidFieldError",
    "MissingFieldError",
    "PartialTorrent",
    "TagList",
    "Torrent",
    "TorrentStore",
    "materialize",
]
