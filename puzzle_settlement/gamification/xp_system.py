"""
XP and Leveling System

Pure functions over the player leveling curve.

Leveling Curve (defaults):
- required(L) = 50 * (L - 1)^2 + 150 * (L - 1)
- Level 1: 0 XP, Level 2: 200 XP, Level 3: 500 XP, Level 10: 5400 XP
- Capped at MAX_LEVEL (50)

Experience is cumulative: a player's `experience` is total XP ever earned,
not XP inside the current level.
"""

from dataclasses import dataclass
import logging

from puzzle_settlement.gamification.reward_config import (
    DEFAULT_LEVELING_SETTINGS,
    LevelingSettings,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExperienceResult:
    new_level: int
    new_experience: int
    leveled_up: bool
    levels_gained: int
    experience_gained: int


@dataclass(frozen=True)
class LevelProgress:
    level: int
    current_level_exp: int
    next_level_exp: int
    exp_in_current_level: int
    exp_needed_for_next_level: int
    exp_to_next: int
    percentage: float


class LevelingEngine:
    """Stateless leveling curve calculations"""

    def __init__(self, settings: LevelingSettings = DEFAULT_LEVELING_SETTINGS):
        self.settings = settings

    @property
    def max_level(self) -> int:
        return self.settings.max_level

    def required_experience_for_level(self, level: int) -> int:
        """
        Total XP needed to reach a level

        Closed form, O(1). Level 1 (and anything below) requires 0.
        """
        if level <= 1:
            return 0
        steps = level - 1
        return self.settings.quadratic * steps * steps + self.settings.linear * steps

    def level_from_experience(self, total_experience: int) -> int:
        """
        Largest level whose requirement is <= total_experience

        Negative or non-integer input clamps to level 1.
        """
        if not isinstance(total_experience, int) or total_experience <= 0:
            return 1

        level = 1
        while level < self.max_level and self.required_experience_for_level(level + 1) <= total_experience:
            level += 1
        return level

    def add_experience(self, current_level: int, current_experience: int, delta: int) -> ExperienceResult:
        """
        Add XP and recompute the level

        Negative deltas are ignored; the level never goes down even if the
        stored level was ahead of the stored experience.
        """
        gained = max(0, delta)
        new_experience = max(0, current_experience) + gained
        new_level = max(current_level, self.level_from_experience(new_experience))
        levels_gained = new_level - current_level

        if levels_gained > 0:
            logger.debug(f"[XP] Level {current_level} -> {new_level} (+{gained} XP, total {new_experience})")

        return ExperienceResult(
            new_level=new_level,
            new_experience=new_experience,
            leveled_up=levels_gained > 0,
            levels_gained=levels_gained,
            experience_gained=gained,
        )

    def level_progress(self, level: int, current_experience: int) -> LevelProgress:
        """
        Progress inside the current level

        Percentage is clamped to [0, 100]; experience can transiently exceed
        the next threshold before the level is recomputed.
        """
        level = max(1, level)
        current_level_exp = self.required_experience_for_level(level)

        if level >= self.max_level:
            return LevelProgress(
                level=level,
                current_level_exp=current_level_exp,
                next_level_exp=current_level_exp,
                exp_in_current_level=max(0, current_experience - current_level_exp),
                exp_needed_for_next_level=0,
                exp_to_next=0,
                percentage=100.0,
            )

        next_level_exp = self.required_experience_for_level(level + 1)
        exp_in_current_level = current_experience - current_level_exp
        exp_needed = next_level_exp - current_level_exp
        percentage = min(100.0, max(0.0, exp_in_current_level * 100 / exp_needed))

        return LevelProgress(
            level=level,
            current_level_exp=current_level_exp,
            next_level_exp=next_level_exp,
            exp_in_current_level=exp_in_current_level,
            exp_needed_for_next_level=exp_needed,
            exp_to_next=max(0, next_level_exp - current_experience),
            percentage=percentage,
        )


def calculate_level_from_xp(total_xp: int) -> dict:
    """
    Level summary for a total XP value using the default curve

    Returns:
        {
            'current_level': int,
            'xp_in_current_level': int,
            'xp_to_next_level': int,
            'total_xp_for_next_level': int,
            'progress_percentage': float
        }
    """
    engine = LevelingEngine()
    level = engine.level_from_experience(total_xp)
    progress = engine.level_progress(level, max(0, total_xp) if isinstance(total_xp, int) else 0)
    return {
        "current_level": level,
        "xp_in_current_level": progress.exp_in_current_level,
        "xp_to_next_level": progress.exp_to_next,
        "total_xp_for_next_level": progress.next_level_exp,
        "progress_percentage": progress.percentage,
    }
