"""
Reward and leveling tables

Immutable settings objects injected into the reward calculator, leveling
engine and settlement service. Alternate tables are built with
`model_copy(update=...)` in tests instead of patching globals.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from puzzle_settlement import config


class RewardAmount(BaseModel):
    """A coins/experience pair"""
    model_config = ConfigDict(frozen=True)

    coins: int = Field(ge=0)
    experience: int = Field(ge=0)


class RewardSettings(BaseModel):
    """
    Base-reward tables.

    Rules:
    - Unknown difficulties use the `fallback_difficulty` row
    - Time bonus applies when completion time <= threshold (inclusive)
    - Move tiers: perfect (moves <= perfect) beats excellent
      (moves <= perfect * excellent_ratio); only one applies
    - All multipliers are >= 1.0 and compose multiplicatively
    """
    model_config = ConfigDict(frozen=True)

    fallback_difficulty: str = "easy"

    base_rewards: dict[str, RewardAmount] = Field(default_factory=lambda: {
        "easy": RewardAmount(coins=10, experience=5),
        "medium": RewardAmount(coins=20, experience=15),
        "hard": RewardAmount(coins=35, experience=30),
        "expert": RewardAmount(coins=50, experience=50),
    })

    time_thresholds: dict[str, int] = Field(default_factory=lambda: {
        "easy": 120,     # 2 minutes
        "medium": 180,   # 3 minutes
        "hard": 300,     # 5 minutes
        "expert": 600,   # 10 minutes
    })

    difficulty_multipliers: dict[str, float] = Field(default_factory=lambda: {
        "easy": 1.0,
        "medium": 1.2,
        "hard": 1.5,
        "expert": 2.0,
    })

    fast_completion_multiplier: float = Field(default=1.5, ge=1.0)
    perfect_moves_multiplier: float = Field(default=1.5, ge=1.0)
    excellent_moves_multiplier: float = Field(default=1.2, ge=1.0)
    excellent_moves_ratio: float = Field(default=1.2, ge=1.0)

    # Bonuses folded in by the settlement service on top of the base reward
    achievement_rewards: dict[str, RewardAmount] = Field(default_factory=lambda: {
        "progress": RewardAmount(coins=25, experience=20),
        "performance": RewardAmount(coins=50, experience=40),
        "special": RewardAmount(coins=30, experience=25),
        "milestone": RewardAmount(coins=100, experience=80),
    })
    new_record_reward: RewardAmount = RewardAmount(coins=20, experience=15)

    @model_validator(mode="after")
    def check_tables(self) -> "RewardSettings":
        if self.fallback_difficulty not in self.base_rewards:
            raise ValueError(f"fallback difficulty '{self.fallback_difficulty}' has no base reward")
        if self.fallback_difficulty not in self.time_thresholds:
            raise ValueError(f"fallback difficulty '{self.fallback_difficulty}' has no time threshold")
        if any(m < 1.0 for m in self.difficulty_multipliers.values()):
            raise ValueError("difficulty multipliers must be >= 1.0")
        return self


class LevelingSettings(BaseModel):
    """
    Quadratic leveling curve:

        required(L) = quadratic * (L - 1)^2 + linear * (L - 1)

    Level 1 requires 0 XP. With the defaults level 2 needs 200 XP, level 10
    needs 5400 XP and level 50 needs 127400 XP.
    """
    model_config = ConfigDict(frozen=True)

    quadratic: int = Field(default=50, ge=0)
    linear: int = Field(default=150, ge=0)
    max_level: int = Field(default_factory=lambda: config.MAX_LEVEL, ge=2)

    @model_validator(mode="after")
    def check_curve(self) -> "LevelingSettings":
        if self.quadratic + self.linear <= 0:
            raise ValueError("leveling curve must be strictly increasing")
        return self


DEFAULT_REWARD_SETTINGS = RewardSettings()
DEFAULT_LEVELING_SETTINGS = LevelingSettings()
