"""
Gamification rules for puzzle settlement

This module implements the pure rule engines:
- Base reward calculation
- XP and leveling curve
- Achievement catalog and evaluation

None of these hold state; the settlement service owns persistence.
"""

from puzzle_settlement.gamification.reward_system import RewardCalculator, BaseReward, calculate_game_rewards
from puzzle_settlement.gamification.xp_system import LevelingEngine, ExperienceResult, LevelProgress, calculate_level_from_xp
from puzzle_settlement.gamification.achievement_system import AchievementEngine, AchievementContext, AchievementEvaluation
from puzzle_settlement.gamification.achievement_catalog import AchievementCatalog, default_catalog

__all__ = [
    "RewardCalculator",
    "BaseReward",
    "calculate_game_rewards",
    "LevelingEngine",
    "ExperienceResult",
    "LevelProgress",
    "calculate_level_from_xp",
    "AchievementEngine",
    "AchievementContext",
    "AchievementEvaluation",
    "AchievementCatalog",
    "default_catalog",
]
