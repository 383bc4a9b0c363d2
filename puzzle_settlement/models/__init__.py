"""Pydantic models for game results, player progression and achievements"""

from puzzle_settlement.models.game import Difficulty, GameResult
from puzzle_settlement.models.achievement import (
    AchievementCategory,
    AchievementDefinition,
    AchievementSummary,
)
from puzzle_settlement.models.progression import (
    RecentGame,
    SettlementReceipt,
    UserProgressionStats,
)

__all__ = [
    "Difficulty",
    "GameResult",
    "AchievementCategory",
    "AchievementDefinition",
    "AchievementSummary",
    "RecentGame",
    "SettlementReceipt",
    "UserProgressionStats",
]
