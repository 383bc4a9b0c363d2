"""
Achievement System

Evaluates the achievement catalog for one settlement.

Rules:
- Predicates see the post-reward stats (`after`), so count and level
  achievements observe the game being settled
- The unlocked set is the pre-settlement one; already unlocked IDs are
  skipped and never re-emitted
- Results are filtered through the official allow-list
- A predicate that raises is logged and treated as "not unlocked"; the rest
  of the catalog is still evaluated
- Wall-clock achievements use the server timestamp, never client time
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from zoneinfo import ZoneInfo
import logging

from puzzle_settlement import config
from puzzle_settlement.exceptions import PredicateError
from puzzle_settlement.gamification.achievement_catalog import AchievementCatalog, default_catalog
from puzzle_settlement.models.achievement import AchievementDefinition
from puzzle_settlement.models.game import GameResult
from puzzle_settlement.models.progression import UserProgressionStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementContext:
    """Everything a predicate may look at"""
    game: GameResult
    before: UserProgressionStats
    after: UserProgressionStats
    now: datetime


@dataclass
class AchievementEvaluation:
    """
    Full outcome of one evaluation pass

    qualified: every not-yet-unlocked definition whose predicate fired
    surfaced: the official subset (what the player sees)
    suppressed: fired but not on the allow-list
    errors: predicates that raised
    """
    qualified: list[AchievementDefinition] = field(default_factory=list)
    surfaced: list[AchievementDefinition] = field(default_factory=list)
    suppressed: list[AchievementDefinition] = field(default_factory=list)
    errors: list[PredicateError] = field(default_factory=list)


class AchievementEngine:
    """Stateless evaluator over an achievement catalog"""

    def __init__(
        self,
        catalog: Optional[AchievementCatalog] = None,
        timezone: Optional[str] = None,
    ):
        self.catalog = catalog or default_catalog()
        self.timezone = ZoneInfo(timezone or config.ACHIEVEMENT_TIMEZONE)

    def _local_time(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            # Naive timestamps are treated as UTC
            now = now.replace(tzinfo=ZoneInfo("UTC"))
        return now.astimezone(self.timezone)

    def evaluate_all(
        self,
        game: GameResult,
        before: UserProgressionStats,
        after: UserProgressionStats,
        unlocked_ids: Iterable[str],
        now: datetime,
    ) -> AchievementEvaluation:
        """
        Evaluate every catalog entry not already unlocked

        Args:
            game: The game being settled (with server completed_at)
            before: Stats snapshot before this settlement
            after: Stats after the base reward was applied
            unlocked_ids: Achievement IDs unlocked before this settlement
            now: Server settlement timestamp

        Returns:
            AchievementEvaluation with qualified/surfaced/suppressed/errors
        """
        already_unlocked = set(unlocked_ids)
        ctx = AchievementContext(game=game, before=before, after=after, now=self._local_time(now))
        result = AchievementEvaluation()

        for definition in self.catalog.definitions:
            if definition.id in already_unlocked:
                continue

            try:
                fired = bool(definition.predicate(ctx))
            except Exception as e:
                result.errors.append(PredicateError(
                    message=f"Achievement predicate '{definition.id}' failed: {e}",
                    achievement_id=definition.id,
                    player_id=after.player_id,
                    operation="evaluate_achievements",
                    cause=e,
                ))
                continue

            if not fired:
                continue

            result.qualified.append(definition)
            if self.catalog.is_official(definition.id):
                result.surfaced.append(definition)
            else:
                result.suppressed.append(definition)

        if result.suppressed:
            logger.info(
                f"[ACHIEVEMENTS] Player {after.player_id}: suppressed unofficial "
                f"{[d.id for d in result.suppressed]}"
            )
        if result.surfaced:
            logger.info(
                f"[ACHIEVEMENTS] Player {after.player_id} unlocked "
                f"{[d.id for d in result.surfaced]} (game {game.game_id})"
            )

        return result

    def evaluate(
        self,
        game: GameResult,
        before: UserProgressionStats,
        after: UserProgressionStats,
        unlocked_ids: Iterable[str],
        now: datetime,
    ) -> list[AchievementDefinition]:
        """Newly unlocked official achievements, in catalog order"""
        return self.evaluate_all(game, before, after, unlocked_ids, now).surfaced
