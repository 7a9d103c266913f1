"""Periodic cycle runner with re-authentication.

This module provides:
- FatalError: Raised when the supervisor cannot continue
- Supervisor: Runs reconciliation cycles on a fixed interval

Error policy per tick:
- AuthenticationError: log in again; if that fails, stop (FatalError)
- any other APIError: log it and wait for the next tick
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from seedwarden.client.api import APIError, AuthenticationError, LoginError

if TYPE_CHECKING:
    from seedwarden.client.api import QBittorrentClient
    from seedwarden.client.sync.reconciler import CycleReport, Reconciler

logger = logging.getLogger(__name__)

# Default delay between cycles
DEFAULT_INTERVAL = 60.0  # seconds


class FatalError(Exception):
    """The supervisor cannot recover and must stop."""


class Supervisor:
    """Runs reconciliation cycles one after another."""

    def __init__(
        self,
        reconciler: Reconciler,
        client: QBittorrentClient,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the supervisor.

        Args:
            reconciler: Reconciler owning the store and cursor.
            client: Client used to log in again after losing the session.
            interval: Seconds between the starts of two cycles.
            clock: Monotonic clock (for tests).
            sleep: Sleep function (for tests).
        """
        self._reconciler = reconciler
        self._client = client
        self._interval = interval
        self._clock = clock
        self._sleep = sleep

    @property
    def interval(self) -> float:
        return self._interval

    def tick(self) -> CycleReport | None:
        """Run one cycle.

        Returns:
            The cycle report, or None if the cycle failed while syncing.

        Raises:
            FatalError: If the session was lost and logging in again failed.
        """
        try:
            return self._reconciler.run_cycle()
        except AuthenticationError:
            logger.warning("No permission to access server")
            self._reauthenticate()
        except APIError as e:
            logger.error(f"Sync failed: {e}")
        return None

    def _reauthenticate(self) -> None:
        try:
            self._client.login()
        except LoginError as e:
            logger.error(f"Login failed: {e}")
            raise FatalError(str(e)) from e
        logger.info("Reauthenticated")

    def run_forever(self) -> None:
        """Tick now and then every interval seconds, until FatalError.

        A cycle that takes longer than the interval is followed immediately
        by the next one.
        """
        logger.info(f"Checking torrents every {self._interval:g}s")
        while True:
            started = self._clock()
            self.tick()
            elapsed = self._clock() - started
            self._sleep(max(0.0, self._interval - elapsed))
