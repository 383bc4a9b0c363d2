"""
In-memory stats repository

Reference implementation of StatsRepository with compare-and-swap saves.
Stats are copied on the way in and out so callers can never mutate the
stored aggregate without going through save_user_stats.
"""

import asyncio
import logging
from typing import Optional

from puzzle_settlement.models.progression import UserProgressionStats

logger = logging.getLogger(__name__)


class InMemoryStatsRepository:
    """Process-local store keyed by player ID"""

    def __init__(self, latency: float = 0.0):
        self._stats: dict[str, UserProgressionStats] = {}
        self._lock = asyncio.Lock()
        # Optional artificial delay, used to widen race windows in tests
        self.latency = latency
        self.save_count = 0

    async def _pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    async def load_user_stats(self, player_id: str) -> UserProgressionStats:
        """Stored stats for a player, or fresh level-1 stats for a new one"""
        await self._pause()
        async with self._lock:
            stored = self._stats.get(player_id)
            if stored is None:
                logger.debug(f"No stats for player {player_id}, starting fresh")
                return UserProgressionStats(player_id=player_id)
            return stored.model_copy(deep=True)

    async def save_user_stats(
        self,
        player_id: str,
        stats: UserProgressionStats,
        expected_version: int,
    ) -> bool:
        """Atomically replace stats if the stored version matches"""
        await self._pause()
        async with self._lock:
            current = self._stats.get(player_id)
            current_version = current.version if current else 0
            if current_version != expected_version:
                logger.debug(
                    f"Version conflict for player {player_id}: "
                    f"expected {expected_version}, stored {current_version}"
                )
                return False

            self._stats[player_id] = stats.model_copy(
                update={"version": expected_version + 1},
                deep=True,
            )
            self.save_count += 1
            return True

    def peek(self, player_id: str) -> Optional[UserProgressionStats]:
        """Stored stats without copying (tests and diagnostics only)"""
        return self._stats.get(player_id)
