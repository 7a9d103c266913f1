"""Share-limit rules.

A rule is a set of optional predicates (category, seeding time, tags) and
the limits to enforce on torrents it matches. Rules are kept in priority
order in a RuleSet; the first rule whose predicates all hold wins.

Rule limits left as None mean "use the server's global default", which is
different from an explicit unlimited limit.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from seedwarden.core.types import LimitKind, ShareLimit

if TYPE_CHECKING:
    from seedwarden.client.sync.domain.comparison import Comparison
    from seedwarden.client.sync.store import TagList, Torrent


@dataclass(frozen=True)
class RuleLimits:
    """Limits enforced by a rule. None defers to the server global default."""

    ratio: ShareLimit | None = None
    minutes: ShareLimit | None = None


@dataclass(frozen=True)
class Rule:
    """A share-limit rule.

    Attributes:
        category: Exact category the torrent must have.
        seeding_time: Comparison against the torrent's seeding time in minutes.
        tags: Exact ordered tag sequence the torrent must have.
        limits: Limits to apply when this rule is the first match.
    """

    category: str | None = None
    seeding_time: Comparison[int] | None = None
    tags: TagList | None = None
    limits: RuleLimits = RuleLimits()

    def matches(self, torrent: Torrent) -> bool:
        """Check every present predicate against torrent."""
        if self.category is not None and self.category != torrent.category:
            return False
        if self.seeding_time is not None and not self.seeding_time.compare(
            torrent.seeding_minutes
        ):
            return False
        if self.tags is not None and tuple(self.tags) != tuple(torrent.tags):
            return False
        return True

    def __str__(self) -> str:
        return render_rule(self)


def _render_limit(limit: ShareLimit | None) -> str:
    if limit is None:
        return LimitKind.GLOBAL.value
    return str(limit)


def render_rule(rule: Rule) -> str:
    """Describe a rule for log output.

    Example: "category = movies, seeding time >= 60 minutes => 2.0 ratio and
    global minutes".
    """
    conditions: list[str] = []
    if rule.category is not None:
        conditions.append(f"category = {rule.category}")
    if rule.seeding_time is not None:
        conditions.append(
            f"seeding time {rule.seeding_time.operator} {rule.seeding_time.value} minutes"
        )
    if rule.tags is not None:
        conditions.append(f"tags = [{', '.join(rule.tags)}]")
    if not conditions:
        conditions.append("any torrent")
    ratio = _render_limit(rule.limits.ratio)
    minutes = _render_limit(rule.limits.minutes)
    return f"{', '.join(conditions)} => {ratio} ratio and {minutes} minutes"


class RuleSet:
    """Ordered, immutable collection of rules. Order is priority."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __getitem__(self, index: int) -> Rule:
        return self._rules[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleSet):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"RuleSet({list(self._rules)!r})"

    def find_match(self, torrent: Torrent) -> Rule | None:
        """Return the first rule matching torrent, or None."""
        for rule in self._rules:
            if rule.matches(torrent):
                return rule
        return None
