"""Reconciliation driver.

This module provides:
- LimitsTransport: What the reconciler needs from the server client
- CycleReport: Outcome of one evaluation pass
- Reconciler: Runs sync-then-evaluate cycles

Flow of one cycle:
    fetch_diff(rid) → TorrentStore.apply → rid updated
        → for each torrent: RuleSet.find_match → decide → apply_limits

A failure while syncing propagates before any torrent is evaluated. A
failure applying limits to one torrent is recorded and the loop goes on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from seedwarden.client.api import APIError
from seedwarden.client.sync.domain.decisions import LimitAction, decide
from seedwarden.client.sync.store import DiffPayload, TorrentStore
from seedwarden.core.types import LimitKind, ShareLimit

if TYPE_CHECKING:
    from seedwarden.client.sync.domain.rules import RuleSet
    from seedwarden.client.sync.store import Torrent

logger = logging.getLogger(__name__)


class LimitsTransport(Protocol):
    """Server operations used by the reconciler."""

    def fetch_diff(self, rid: int) -> DiffPayload:
        """Return torrent changes since rid."""
        ...

    def apply_limits(
        self,
        torrent_hash: str,
        ratio: ShareLimit | None,
        minutes: ShareLimit | None,
    ) -> None:
        """Set the share limits of one torrent."""
        ...


@dataclass
class CycleReport:
    """Outcome of one evaluation pass.

    Attributes:
        applied: Hashes whose limits were updated.
        failed: Hashes whose update failed, with the error.
    """

    applied: list[str] = field(default_factory=list)
    failed: dict[str, APIError] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed


def _describe_target(limit: ShareLimit | None) -> str:
    if limit is None:
        return LimitKind.GLOBAL.value
    return str(limit)


class Reconciler:
    """Keeps the server's share limits in line with the rules.

    Owns the torrent store and the sync cursor. Cycles must not overlap:
    run them one after another from a single thread.
    """

    def __init__(
        self,
        client: LimitsTransport,
        rules: RuleSet,
        store: TorrentStore | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            client: Server client.
            rules: Rules in priority order.
            store: Initial torrent store (empty by default).
        """
        self._client = client
        self._rules = rules
        self._store = store if store is not None else TorrentStore()
        self._rid = 0

    @property
    def rid(self) -> int:
        """Cursor of the last applied diff."""
        return self._rid

    @property
    def store(self) -> TorrentStore:
        return self._store

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def sync(self) -> None:
        """Fetch the next diff and apply it to the store.

        Raises:
            APIError: If the diff could not be fetched; store and cursor are
                left unchanged.
        """
        diff = self._client.fetch_diff(self._rid)
        self._store.apply(diff)
        self._rid = diff.rid
        logger.debug(f"Data synced (rid={self._rid}, {len(self._store)} torrents)")

    def plan(self) -> list[tuple[str, LimitAction]]:
        """Decide the action for every torrent without contacting the server."""
        actions: list[tuple[str, LimitAction]] = []
        for torrent_hash, torrent in self._store.items():
            action = decide(torrent, self._rules.find_match(torrent))
            if action is not None:
                actions.append((torrent_hash, action))
        return actions

    def evaluate(self) -> CycleReport:
        """Apply the planned actions to the server.

        Returns:
            Report of applied and failed updates.
        """
        report = CycleReport()
        for torrent_hash, action in self.plan():
            torrent = self._store.get(torrent_hash)
            if torrent is not None:
                self._log_action(torrent, action)
            try:
                self._client.apply_limits(torrent_hash, action.ratio, action.minutes)
            except APIError as e:
                logger.warning(f"Couldn't update {torrent_hash}: {e}")
                report.failed[torrent_hash] = e
                continue
            logger.debug(f"Successfully updated {torrent_hash}")
            report.applied.append(torrent_hash)
        return report

    def run_cycle(self) -> CycleReport:
        """Sync then evaluate.

        Raises:
            APIError: If syncing failed. Nothing is evaluated in that case.
        """
        self.sync()
        return self.evaluate()

    def _log_action(self, torrent: Torrent, action: LimitAction) -> None:
        if action.is_global_reset:
            logger.info(
                f"Torrent {torrent.name} is limited despite not being matched: "
                "setting to global limits"
            )
            return
        logger.info(
            f"Applying matched rule to {torrent.name}; "
            f"ratio: {torrent.max_ratio} => {_describe_target(action.ratio)}; "
            f"total minutes: {torrent.max_seeding_time} "
            f"=> {_describe_target(action.minutes)}"
        )
