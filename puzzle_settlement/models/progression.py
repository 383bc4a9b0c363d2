"""Player progression models"""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from puzzle_settlement.models.achievement import AchievementSummary


class RecentGame(BaseModel):
    """Compact record of a settled game kept for streak-style achievements"""
    model_config = ConfigDict(frozen=True)

    difficulty: str
    moves: int
    total_pieces: int
    completion_time_seconds: int


class SettlementReceipt(BaseModel):
    """
    The single result of settling one game.

    coins_awarded / experience_awarded include achievement and new-record
    bonuses; base_coins / base_experience are the game reward alone.
    """
    model_config = ConfigDict(frozen=True)

    game_id: str
    coins_awarded: int
    experience_awarded: int
    base_coins: int
    base_experience: int
    leveled_up: bool
    levels_gained: int
    new_level: int
    new_achievements: list[AchievementSummary] = Field(default_factory=list)
    is_new_record: bool
    settled_at: datetime


class UserProgressionStats(BaseModel):
    """Persisted progression aggregate for one player"""
    player_id: str
    games_completed: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    coins: int = Field(default=0, ge=0)
    best_times: dict[str, int] = Field(default_factory=dict)
    difficulty_counts: dict[str, int] = Field(default_factory=dict)
    unlocked_achievement_ids: list[str] = Field(default_factory=list)
    processed_games: dict[str, SettlementReceipt] = Field(default_factory=dict)
    recent_games: list[RecentGame] = Field(default_factory=list)
    records_broken: int = Field(default=0, ge=0)
    play_streak_days: int = Field(default=0, ge=0)
    last_played_on: Optional[date] = None
    version: int = Field(default=0, ge=0)

    def has_processed(self, game_id: str) -> bool:
        return game_id in self.processed_games

    def has_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.unlocked_achievement_ids
