"""
Game Reward System

Computes the base coin/experience reward for a finished puzzle.

Reward Rules:
- Base reward per difficulty (easy 10/5, medium 20/15, hard 35/30, expert 50/50)
- Fast completion (time <= difficulty threshold): x1.5
- Perfect moves (moves <= perfect moves): x1.5
- Excellent moves (moves <= perfect moves * 1.2): x1.2
- Difficulty multiplier on the composed result (easy 1.0 ... expert 2.0)
- Rounded half-up once, at the very end
"""

from dataclasses import dataclass
from typing import Optional
from fractions import Fraction
import logging
import math

from puzzle_settlement.gamification.reward_config import (
    DEFAULT_REWARD_SETTINGS,
    RewardAmount,
    RewardSettings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BaseReward:
    coins: int
    experience: int


@dataclass(frozen=True)
class RewardMultipliers:
    """Individual factors behind a base reward (for debugging and receipts)"""
    difficulty: str
    base: RewardAmount
    difficulty_multiplier: float
    time_multiplier: float
    move_multiplier: float
    move_tier: Optional[str]

    @property
    def combined(self) -> Fraction:
        # Exact arithmetic so rounding at the end never sees float drift
        return (
            Fraction(str(self.time_multiplier))
            * Fraction(str(self.move_multiplier))
            * Fraction(str(self.difficulty_multiplier))
        )


def round_half_up(value) -> int:
    """Round to the nearest integer with halves going up (round() rounds half to even)"""
    return math.floor(Fraction(value) + Fraction(1, 2))


class RewardCalculator:
    """Pure, stateless base-reward calculator"""

    def __init__(self, settings: RewardSettings = DEFAULT_REWARD_SETTINGS):
        self.settings = settings

    def _row_key(self, difficulty: str) -> str:
        if difficulty in self.settings.base_rewards:
            return difficulty
        return self.settings.fallback_difficulty

    def describe_multipliers(
        self,
        difficulty: str,
        completion_time_seconds: int,
        moves: int,
        perfect_moves: Optional[int] = None,
    ) -> RewardMultipliers:
        """
        Resolve every multiplier that applies to a game

        Never raises: unknown difficulties use the fallback row and missing
        table entries use neutral (1.0) multipliers.
        """
        s = self.settings
        key = self._row_key(str(getattr(difficulty, "value", difficulty)))

        threshold = s.time_thresholds.get(key, s.time_thresholds[s.fallback_difficulty])
        time_multiplier = 1.0
        if completion_time_seconds is not None and completion_time_seconds <= threshold:
            time_multiplier = s.fast_completion_multiplier

        move_multiplier = 1.0
        move_tier = None
        # perfect_moves of 0 means the layout has no baseline
        if perfect_moves and moves is not None:
            if moves <= perfect_moves:
                move_multiplier = s.perfect_moves_multiplier
                move_tier = "perfect"
            elif moves <= perfect_moves * Fraction(str(s.excellent_moves_ratio)):
                move_multiplier = s.excellent_moves_multiplier
                move_tier = "excellent"

        return RewardMultipliers(
            difficulty=key,
            base=s.base_rewards[key],
            difficulty_multiplier=s.difficulty_multipliers.get(key, 1.0),
            time_multiplier=time_multiplier,
            move_multiplier=move_multiplier,
            move_tier=move_tier,
        )

    def compute_base_reward(
        self,
        difficulty: str,
        completion_time_seconds: int,
        moves: int,
        perfect_moves: Optional[int] = None,
    ) -> BaseReward:
        """
        Calculate the base reward for a completed game

        Args:
            difficulty: Difficulty key (unknown keys fall back to easy)
            completion_time_seconds: Time taken to finish the puzzle
            moves: Moves used
            perfect_moves: Theoretical minimum moves for the layout (optional)

        Returns:
            BaseReward(coins, experience), each >= the difficulty's base row
        """
        m = self.describe_multipliers(difficulty, completion_time_seconds, moves, perfect_moves)
        factor = m.combined

        reward = BaseReward(
            coins=round_half_up(m.base.coins * factor),
            experience=round_half_up(m.base.experience * factor),
        )

        logger.debug(
            f"[REWARD] {m.difficulty}: base={m.base.coins}c/{m.base.experience}xp "
            f"time=x{m.time_multiplier} moves=x{m.move_multiplier} ({m.move_tier or 'none'}) "
            f"difficulty=x{m.difficulty_multiplier} -> {reward.coins}c/{reward.experience}xp"
        )
        return reward


def calculate_game_rewards(
    difficulty: str,
    completion_time_seconds: int,
    moves: int,
    perfect_moves: Optional[int] = None,
) -> BaseReward:
    """Base reward using the default tables"""
    return RewardCalculator().compute_base_reward(
        difficulty, completion_time_seconds, moves, perfect_moves
    )
