"""
SettlementService - Game Completion Settlement

Turns a finished puzzle into persisted coins, XP, level and achievements,
exactly once per game_id.

Steps (all under the player's lock, retried as a unit on write conflicts):
1. Load stats; if game_id was already settled return the stored receipt
2. Snapshot stats before settlement
3. Base reward
4. Fold base XP into the level curve
5. Best times, counters, coins, recent games, play streak -> stats after
6. Achievements against the after-stats and the pre-settlement unlocked set
7. Merge unlocked IDs, add achievement and new-record bonuses
8. Record game_id and receipt in the bounded processed log
9. Save with the expected version (compare-and-swap)
10. Return the receipt
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union

from puzzle_settlement import config
from puzzle_settlement.exceptions import (
    ConcurrencyConflict,
    InputError,
    wrap_persistence_exception,
)
from puzzle_settlement.gamification.achievement_system import AchievementEngine
from puzzle_settlement.gamification.reward_config import DEFAULT_REWARD_SETTINGS, RewardSettings
from puzzle_settlement.gamification.reward_system import RewardCalculator
from puzzle_settlement.gamification.xp_system import LevelingEngine
from puzzle_settlement.models.game import GameResult
from puzzle_settlement.models.progression import RecentGame, SettlementReceipt, UserProgressionStats
from puzzle_settlement.resilience.retry import retry_with_backoff
from puzzle_settlement.storage.repository import StatsRepository
from puzzle_settlement.utils.datetime_helpers import local_date, now_utc

logger = logging.getLogger(__name__)


class SettlementService:
    """
    Service for settling completed games.

    Responsibilities:
    - Idempotent settlement keyed by game_id
    - Per-player serialization of the read-modify-write cycle
    - Orchestrating reward, leveling and achievement engines
    - The only writer of UserProgressionStats
    """

    def __init__(
        self,
        repository: StatsRepository,
        reward_calculator: Optional[RewardCalculator] = None,
        leveling_engine: Optional[LevelingEngine] = None,
        achievement_engine: Optional[AchievementEngine] = None,
        reward_settings: Optional[RewardSettings] = None,
        clock: Callable[[], datetime] = now_utc,
        processed_games_capacity: Optional[int] = None,
        recent_games_capacity: Optional[int] = None,
        max_conflict_retries: Optional[int] = None,
        timezone: Optional[str] = None,
    ):
        """
        Initialize SettlementService.

        Args:
            repository: Stats persistence (load / compare-and-swap save)
            reward_calculator: Base reward engine (default tables if omitted)
            leveling_engine: Leveling curve (default curve if omitted)
            achievement_engine: Achievement evaluator (default catalog if omitted)
            reward_settings: Tables for achievement and new-record bonuses
            clock: Server clock; the only source of settlement timestamps
            processed_games_capacity: Size of the per-player idempotency log
            recent_games_capacity: Size of the per-player recent game history
            max_conflict_retries: Write-conflict retries before surfacing
            timezone: Zone used for play-streak calendar days
        """
        self.repository = repository
        self.reward_settings = reward_settings or (
            reward_calculator.settings if reward_calculator else DEFAULT_REWARD_SETTINGS
        )
        self.rewards = reward_calculator or RewardCalculator(self.reward_settings)
        self.leveling = leveling_engine or LevelingEngine()
        self.timezone = timezone or config.ACHIEVEMENT_TIMEZONE
        self.achievements = achievement_engine or AchievementEngine(timezone=self.timezone)
        self.clock = clock
        self.processed_games_capacity = processed_games_capacity or config.PROCESSED_GAMES_CAPACITY
        self.recent_games_capacity = recent_games_capacity or config.RECENT_GAMES_CAPACITY
        self.max_conflict_retries = (
            config.MAX_CONFLICT_RETRIES if max_conflict_retries is None else max_conflict_retries
        )

        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_holders: Dict[str, int] = {}
        self._inflight: set = set()
        logger.debug("SettlementService initialized")

    # ============================================
    # Public API
    # ============================================

    async def settle(
        self,
        player_id: str,
        game: Union[GameResult, Dict[str, Any]],
    ) -> SettlementReceipt:
        """
        Settle a completed game.

        Safe to call repeatedly with the same game_id: the first call applies
        the reward, every later call returns the same receipt untouched.

        Args:
            player_id: Player whose stats are updated
            game: GameResult or raw client payload

        Returns:
            SettlementReceipt

        Raises:
            InputError: payload cannot be represented (e.g. missing game_id)
            PersistenceError: stats could not be loaded or saved; nothing applied
            ConcurrencyConflict: write conflicts persisted past the retry budget
        """
        if not player_id or not str(player_id).strip():
            raise InputError("player_id is required", field="player_id", value=player_id, operation="settle")
        if not isinstance(game, GameResult):
            game = GameResult.from_payload(game)

        # Once started, a settlement runs to completion even if the caller is
        # cancelled; a resubmission then finds it in the processed log.
        task = asyncio.ensure_future(self._settle_serialized(player_id, game))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return await asyncio.shield(task)

    async def get_progress(self, player_id: str) -> Dict[str, Any]:
        """
        Read-only progression summary for UI callers.

        Returns:
            {
                'player_id': str,
                'level': int,
                'experience': int,
                'coins': int,
                'games_completed': int,
                'progress_percentage': float,
                'exp_to_next_level': int,
                'best_times': dict,
                'achievements': list  # official achievements only
            }
        """
        stats = await self._load(player_id)
        progress = self.leveling.level_progress(stats.level, stats.experience)
        catalog = self.achievements.catalog

        achievements = []
        for achievement_id in stats.unlocked_achievement_ids:
            definition = catalog.get(achievement_id)
            if definition and catalog.is_official(achievement_id):
                achievements.append(definition.summary())

        return {
            "player_id": player_id,
            "level": stats.level,
            "experience": stats.experience,
            "coins": stats.coins,
            "games_completed": stats.games_completed,
            "progress_percentage": progress.percentage,
            "exp_to_next_level": progress.exp_to_next,
            "best_times": dict(stats.best_times),
            "achievements": achievements,
        }

    # ============================================
    # Locking
    # ============================================

    @asynccontextmanager
    async def _player_lock(self, player_id: str):
        """Per-player mutex; the registry entry is dropped once nobody holds or waits on it"""
        lock = self._locks.get(player_id)
        if lock is None:
            lock = self._locks[player_id] = asyncio.Lock()
        self._lock_holders[player_id] = self._lock_holders.get(player_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_holders[player_id] -= 1
            if self._lock_holders[player_id] == 0:
                del self._lock_holders[player_id]
                del self._locks[player_id]

    async def _settle_serialized(self, player_id: str, game: GameResult) -> SettlementReceipt:
        settled_at = self.clock()
        async with self._player_lock(player_id):
            return await retry_with_backoff(
                self._settle_once,
                player_id,
                game,
                settled_at,
                max_retries=self.max_conflict_retries,
            )

    # ============================================
    # Settlement
    # ============================================

    async def _settle_once(
        self,
        player_id: str,
        game: GameResult,
        settled_at: datetime,
    ) -> SettlementReceipt:
        stats = await self._load(player_id)

        existing = stats.processed_games.get(game.game_id)
        if existing is not None:
            logger.info(f"[SETTLEMENT] Replay of game {game.game_id} for player {player_id}, returning stored receipt")
            return existing

        if game.completed_at is not None and game.completed_at != settled_at:
            logger.debug(
                f"[SETTLEMENT] Ignoring client completed_at {game.completed_at.isoformat()} "
                f"for game {game.game_id}"
            )
        game = game.model_copy(update={"completed_at": settled_at})

        before = stats.model_copy(deep=True)
        final, receipt = self.apply_settlement(before, game, settled_at)

        await self._save(player_id, final, expected_version=before.version)

        logger.info(
            f"[SETTLEMENT] Player {player_id} settled game {game.game_id}: "
            f"+{receipt.coins_awarded} coins, +{receipt.experience_awarded} XP, "
            f"level {before.level} -> {receipt.new_level}, "
            f"achievements {[a.id for a in receipt.new_achievements]}"
        )
        return receipt

    def apply_settlement(
        self,
        before: UserProgressionStats,
        game: GameResult,
        settled_at: datetime,
    ) -> tuple[UserProgressionStats, SettlementReceipt]:
        """
        Compute the settled stats and receipt without touching storage.

        `before` is not modified.
        """
        difficulty = game.difficulty
        time_taken = game.completion_time_seconds

        # Base reward and level
        base = self.rewards.compute_base_reward(difficulty, time_taken, game.moves, game.perfect_moves)
        xp = self.leveling.add_experience(before.level, before.experience, base.experience)

        # Records and counters
        previous_best = before.best_times.get(difficulty)
        is_new_record = previous_best is None or time_taken < previous_best
        best_times = dict(before.best_times)
        if is_new_record:
            best_times[difficulty] = time_taken

        difficulty_counts = dict(before.difficulty_counts)
        difficulty_counts[difficulty] = difficulty_counts.get(difficulty, 0) + 1

        recent_games = list(before.recent_games) + [RecentGame(
            difficulty=difficulty,
            moves=game.moves,
            total_pieces=game.total_pieces,
            completion_time_seconds=time_taken,
        )]
        recent_games = recent_games[-self.recent_games_capacity:]

        played_on = local_date(settled_at, self.timezone)
        streak = self._next_streak(before, played_on)

        after = before.model_copy(
            update={
                "games_completed": before.games_completed + 1,
                "level": xp.new_level,
                "experience": xp.new_experience,
                "coins": before.coins + base.coins,
                "best_times": best_times,
                "difficulty_counts": difficulty_counts,
                "recent_games": recent_games,
                "records_broken": before.records_broken + (1 if previous_best is not None and is_new_record else 0),
                "play_streak_days": streak,
                "last_played_on": played_on,
            },
            deep=True,
        )

        # Achievements
        evaluation = self.achievements.evaluate_all(
            game, before, after, before.unlocked_achievement_ids, settled_at
        )
        unlocked = evaluation.surfaced

        bonus_coins = 0
        bonus_experience = 0
        for definition in unlocked:
            reward = self.reward_settings.achievement_rewards.get(definition.category.value)
            if reward:
                bonus_coins += reward.coins
                bonus_experience += reward.experience
        if is_new_record:
            bonus_coins += self.reward_settings.new_record_reward.coins
            bonus_experience += self.reward_settings.new_record_reward.experience

        final_xp = self.leveling.add_experience(after.level, after.experience, bonus_experience)
        coins_awarded = base.coins + bonus_coins
        levels_gained = final_xp.new_level - before.level

        receipt = SettlementReceipt(
            game_id=game.game_id,
            coins_awarded=coins_awarded,
            experience_awarded=final_xp.new_experience - before.experience,
            base_coins=base.coins,
            base_experience=base.experience,
            leveled_up=levels_gained > 0,
            levels_gained=levels_gained,
            new_level=final_xp.new_level,
            new_achievements=[d.summary() for d in unlocked],
            is_new_record=is_new_record,
            settled_at=settled_at,
        )

        processed_games = dict(before.processed_games)
        processed_games[game.game_id] = receipt
        while len(processed_games) > self.processed_games_capacity:
            oldest = next(iter(processed_games))
            del processed_games[oldest]

        final = after.model_copy(
            update={
                "coins": before.coins + coins_awarded,
                "experience": final_xp.new_experience,
                "level": final_xp.new_level,
                "unlocked_achievement_ids": before.unlocked_achievement_ids + [d.id for d in unlocked],
                "processed_games": processed_games,
            }
        )
        return final, receipt

    @staticmethod
    def _next_streak(before: UserProgressionStats, played_on) -> int:
        last = before.last_played_on
        if last is None:
            return 1
        if played_on == last:
            return max(1, before.play_streak_days)
        if played_on == last + timedelta(days=1):
            return before.play_streak_days + 1
        if played_on < last:
            # Clock moved backwards; keep the streak as it was
            return max(1, before.play_streak_days)
        return 1

    # ============================================
    # Persistence
    # ============================================

    async def _load(self, player_id: str) -> UserProgressionStats:
        try:
            return await self.repository.load_user_stats(player_id)
        except Exception as e:
            raise wrap_persistence_exception(e, operation="load_user_stats", player_id=player_id)

    async def _save(self, player_id: str, stats: UserProgressionStats, expected_version: int) -> None:
        try:
            saved = await self.repository.save_user_stats(player_id, stats, expected_version)
        except Exception as e:
            raise wrap_persistence_exception(
                e,
                operation="save_user_stats",
                player_id=player_id,
                context={"expected_version": expected_version},
            )

        if not saved:
            raise ConcurrencyConflict(
                message=f"Stats for player {player_id} changed during settlement",
                expected_version=expected_version,
                player_id=player_id,
                operation="save_user_stats",
            )
