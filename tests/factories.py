"""Model factories shared by unit and integration tests"""
from datetime import datetime
from zoneinfo import ZoneInfo

from puzzle_settlement.models.game import GameResult
from puzzle_settlement.models.progression import UserProgressionStats
from puzzle_settlement.storage.memory_store import InMemoryStatsRepository

UTC = ZoneInfo("UTC")

# Wednesday afternoon: no time-of-day or weekend achievements fire
WEDNESDAY_AFTERNOON = datetime(2024, 1, 17, 14, 0, tzinfo=UTC)


class FixedClock:
    """Settable server clock"""

    def __init__(self, moment: datetime = WEDNESDAY_AFTERNOON):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment


def make_game(**overrides) -> GameResult:
    """Medium game with no bonuses: base reward 24 coins / 18 XP"""
    data = {
        "game_id": "game-001",
        "difficulty": "medium",
        "completion_time_seconds": 400,
        "moves": 50,
        "perfect_moves": None,
        "total_pieces": 20,
    }
    data.update(overrides)
    return GameResult(**data)


def make_stats(player_id: str = "player-123", **overrides) -> UserProgressionStats:
    return UserProgressionStats(player_id=player_id, **overrides)


async def seed_stats(repository: InMemoryStatsRepository, stats: UserProgressionStats) -> None:
    """Store stats as if a previous settlement had written them"""
    saved = await repository.save_user_stats(stats.player_id, stats, expected_version=0)
    assert saved
