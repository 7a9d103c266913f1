"""Limit decisions.

Given a torrent and the rule it matched (if any), decide which limits must
be pushed to the server:

| Matched rule | Torrent state                       | Action                 |
|--------------|-------------------------------------|------------------------|
| yes          | explicit rule limit differs         | apply the rule limits  |
| yes          | explicit rule limits already set    | none                   |
| no           | ratio or seeding time limited       | reset both to global   |
| no           | unlimited or global                 | none                   |

A rule limit left as None never triggers an update on its own: the current
global default cannot be observed locally.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from seedwarden.core.types import ShareLimit

if TYPE_CHECKING:
    from seedwarden.client.sync.domain.rules import Rule
    from seedwarden.client.sync.store import Torrent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LimitAction:
    """Limits to push for one torrent. None means use the global default."""

    ratio: ShareLimit | None = None
    minutes: ShareLimit | None = None

    @property
    def is_global_reset(self) -> bool:
        return self.ratio is None and self.minutes is None


# Action sent for limited torrents that no rule matches
GLOBAL_RESET = LimitAction()


def needs_update(rule: Rule, torrent: Torrent) -> bool:
    """Check whether torrent deviates from an explicit limit of rule."""
    limits = rule.limits
    if limits.ratio is not None and limits.ratio != torrent.max_ratio:
        logger.debug(f"Torrent {torrent.name} has incorrect ratio")
        return True
    if limits.minutes is not None and limits.minutes != torrent.max_seeding_time:
        logger.debug(f"Torrent {torrent.name} has incorrect max seeding time")
        return True
    return False


def decide(torrent: Torrent, rule: Rule | None) -> LimitAction | None:
    """Decide the limits to push for torrent.

    Args:
        torrent: The torrent being evaluated.
        rule: The first matching rule, or None if no rule matched.

    Returns:
        The action to apply, or None if the torrent is already correct.
    """
    if rule is not None:
        if needs_update(rule, torrent):
            # Both fields are sent so ratio and minutes change together
            return LimitAction(ratio=rule.limits.ratio, minutes=rule.limits.minutes)
        return None
    if torrent.is_limited:
        return GLOBAL_RESET
    return None
