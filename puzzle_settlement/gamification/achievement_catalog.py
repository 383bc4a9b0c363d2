"""
Achievement Catalog

Single data-driven table of every achievement the engine knows, plus the
official allow-list of IDs that may be shown to players.

Adding an achievement takes two steps: a definition here AND an entry in
OFFICIAL_ACHIEVEMENT_IDS. Definitions missing from the allow-list are still
evaluated but never surfaced in a settlement receipt.

Categories:
- progress: exact game-count crossings (fires once, at the crossing)
- milestone: large game counts and level thresholds
- performance: speed, move efficiency, personal bests
- special: wall-clock based (server time only)
"""

from typing import Callable, Iterable, Optional
import logging

from puzzle_settlement.models.achievement import AchievementCategory, AchievementDefinition

logger = logging.getLogger(__name__)

# Efficiency streak: moves per piece ratio and streak length
EFFICIENT_MOVES_PER_PIECE = 1.5
EFFICIENT_STREAK_LENGTH = 3


# ============================================
# Predicate builders
# ============================================

def games_completed_exactly(count: int) -> Callable:
    def predicate(ctx) -> bool:
        return ctx.after.games_completed == count
    return predicate


def difficulty_completed_exactly(difficulty: str, count: int) -> Callable:
    def predicate(ctx) -> bool:
        return ctx.game.difficulty == difficulty and ctx.after.difficulty_counts.get(difficulty, 0) == count
    return predicate


def level_at_least(level: int) -> Callable:
    def predicate(ctx) -> bool:
        return ctx.after.level >= level
    return predicate


def finished_within(difficulty: str, seconds: int) -> Callable:
    def predicate(ctx) -> bool:
        return ctx.game.difficulty == difficulty and ctx.game.completion_time_seconds <= seconds
    return predicate


def hour_between(first_hour: int, last_hour: int) -> Callable:
    """Inclusive hour range on the server clock"""
    def predicate(ctx) -> bool:
        return first_hour <= ctx.now.hour <= last_hour
    return predicate


def _perfect_moves(ctx) -> bool:
    return bool(ctx.game.perfect_moves) and ctx.game.moves == ctx.game.perfect_moves


def _super_efficient(ctx) -> bool:
    return bool(ctx.game.perfect_moves) and ctx.game.moves <= ctx.game.perfect_moves * 0.3


def _efficient_streak(ctx) -> bool:
    recent = ctx.after.recent_games[-EFFICIENT_STREAK_LENGTH:]
    if len(recent) < EFFICIENT_STREAK_LENGTH:
        return False
    return all(g.moves <= g.total_pieces * EFFICIENT_MOVES_PER_PIECE for g in recent)


def _beat_previous_best(ctx) -> bool:
    # Compared against the best time from before this settlement
    previous_best = ctx.before.best_times.get(ctx.game.difficulty)
    return previous_best is not None and ctx.game.completion_time_seconds < previous_best


def _weekend(ctx) -> bool:
    return ctx.now.weekday() >= 5


def _seven_day_streak(ctx) -> bool:
    return ctx.after.play_streak_days >= 7


def _define(id: str, name: str, description: str, icon: str,
            category: AchievementCategory, predicate: Callable) -> AchievementDefinition:
    return AchievementDefinition(
        id=id,
        name=name,
        description=description,
        icon=icon,
        category=category,
        predicate=predicate,
    )


P = AchievementCategory.PROGRESS
M = AchievementCategory.MILESTONE
F = AchievementCategory.PERFORMANCE
S = AchievementCategory.SPECIAL

ACHIEVEMENT_DEFINITIONS: tuple[AchievementDefinition, ...] = (
    # Progress
    _define("first_game", "First Steps", "Complete your first puzzle", "🎯", P, games_completed_exactly(1)),
    _define("games_10", "Puzzle Novice", "Complete 10 puzzles", "🏅", P, games_completed_exactly(10)),
    _define("games_50", "Puzzle Enthusiast", "Complete 50 puzzles", "🏆", P, games_completed_exactly(50)),
    _define("easy_master", "Easy Mode Expert", "Complete 20 easy puzzles", "😊", P,
            difficulty_completed_exactly("easy", 20)),
    _define("hard_challenger", "Hard Challenger", "Complete 10 hard puzzles", "😤", P,
            difficulty_completed_exactly("hard", 10)),

    # Milestones
    _define("games_100", "Puzzle Master", "Complete 100 puzzles", "👑", M, games_completed_exactly(100)),
    _define("games_500", "Puzzle Grandmaster", "Complete 500 puzzles", "🎖️", M, games_completed_exactly(500)),
    _define("expert_elite", "Expert Elite", "Complete 5 expert puzzles", "🔥", M,
            difficulty_completed_exactly("expert", 5)),
    _define("level_10", "Rising Star", "Reach level 10", "🔟", M, level_at_least(10)),
    _define("level_25", "Seasoned Solver", "Reach level 25", "🌟", M, level_at_least(25)),
    _define("max_level", "Living Legend", "Reach level 50", "💫", M, level_at_least(50)),

    # Performance
    _define("speed_demon", "Speed Demon", "Finish a medium puzzle within 3 minutes", "⚡", F,
            finished_within("medium", 180)),
    _define("lightning_fast", "Lightning Fast", "Finish an easy puzzle within 1 minute", "⚡", F,
            finished_within("easy", 60)),
    _define("perfectionist", "Perfectionist", "Finish a puzzle in the minimum number of moves", "💎", F,
            _perfect_moves),
    _define("efficient_solver", "Efficient Solver",
            "Three games in a row using at most 1.5 moves per piece", "🧠", F, _efficient_streak),
    _define("time_master", "Time Master", "Beat your personal best time", "⏱️", F, _beat_previous_best),
    _define("super_efficient", "Super Efficient", "Use at most 30% of the standard move count", "🚀", F,
            _super_efficient),
    _define("expert_speedster", "Expert Speedster", "Finish an expert puzzle within 10 minutes", "🏎️", F,
            finished_within("expert", 600)),

    # Special (server clock)
    _define("night_owl", "Night Owl", "Finish a puzzle between 2 and 6 AM", "🦉", S, hour_between(2, 6)),
    _define("early_bird", "Early Bird", "Finish a puzzle between 5 and 7 AM", "🐦", S, hour_between(5, 7)),
    _define("weekend_warrior", "Weekend Warrior", "Finish a puzzle on the weekend", "🏖️", S, _weekend),
    _define("consecutive_days", "Persistent", "Play 7 days in a row", "📅", S, _seven_day_streak),
)

# Only these may appear in a settlement receipt
OFFICIAL_ACHIEVEMENT_IDS: frozenset[str] = frozenset({
    # Progress
    "first_game",
    "games_10",
    "games_50",
    "games_100",
    "games_500",

    # Difficulty mastery
    "easy_master",
    "hard_challenger",
    "expert_elite",

    # Speed
    "speed_demon",
    "lightning_fast",
    "time_master",

    # Technique
    "perfectionist",
    "efficient_solver",
    "no_mistakes",

    # Time of day
    "night_owl",
    "early_bird",
    "weekend_warrior",

    # Level
    "level_10",
    "level_25",
    "max_level",
})


class AchievementCatalog:
    """Immutable set of achievement definitions plus the official allow-list"""

    def __init__(
        self,
        definitions: Iterable[AchievementDefinition] = ACHIEVEMENT_DEFINITIONS,
        official_ids: Iterable[str] = OFFICIAL_ACHIEVEMENT_IDS,
    ):
        self._definitions = tuple(definitions)
        self._by_id = {d.id: d for d in self._definitions}
        if len(self._by_id) != len(self._definitions):
            raise ValueError("Duplicate achievement id in catalog")
        self._official_ids = frozenset(official_ids)
        self._log_integrity()

    @property
    def definitions(self) -> tuple[AchievementDefinition, ...]:
        return self._definitions

    @property
    def official_ids(self) -> frozenset[str]:
        return self._official_ids

    def get(self, achievement_id: str) -> Optional[AchievementDefinition]:
        return self._by_id.get(achievement_id)

    def is_official(self, achievement_id: str) -> bool:
        return achievement_id in self._official_ids

    def official_definitions(self) -> list[AchievementDefinition]:
        return [d for d in self._definitions if d.id in self._official_ids]

    def _log_integrity(self) -> None:
        undefined = sorted(self._official_ids - self._by_id.keys())
        if undefined:
            logger.warning(f"[ACHIEVEMENTS] Official achievements without a definition: {undefined}")

        unofficial = sorted(self._by_id.keys() - self._official_ids)
        if unofficial:
            logger.info(f"[ACHIEVEMENTS] Evaluated but never surfaced: {unofficial}")


_default_catalog: Optional[AchievementCatalog] = None


def default_catalog() -> AchievementCatalog:
    """Catalog built once per process from the tables above"""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = AchievementCatalog()
    return _default_catalog
