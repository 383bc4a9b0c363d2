"""Stats repository interface consumed by the settlement service"""
from typing import Protocol, runtime_checkable

from puzzle_settlement.models.progression import UserProgressionStats


@runtime_checkable
class StatsRepository(Protocol):
    """
    External persistence for UserProgressionStats.

    save_user_stats must replace the stored stats atomically, and only when
    the stored version still equals `expected_version`:
    - returns True on success (the stored version becomes expected_version + 1)
    - returns False on a version mismatch (someone else saved first)
    - raises on any storage failure
    """

    async def load_user_stats(self, player_id: str) -> UserProgressionStats:
        ...

    async def save_user_stats(
        self,
        player_id: str,
        stats: UserProgressionStats,
        expected_version: int,
    ) -> bool:
        ...
