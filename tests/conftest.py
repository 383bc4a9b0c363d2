"""Global test fixtures and utilities for settlement engine tests"""
import pytest

from puzzle_settlement.gamification.achievement_system import AchievementEngine
from puzzle_settlement.services.settlement_service import SettlementService
from puzzle_settlement.storage.memory_store import InMemoryStatsRepository
from tests.factories import FixedClock


# ============================================================================
# Clock & Storage Fixtures
# ============================================================================

@pytest.fixture
def clock():
    """Fixed server clock (Wednesday 14:00 UTC)"""
    return FixedClock()


@pytest.fixture
def repository():
    """Empty in-memory stats repository"""
    return InMemoryStatsRepository()


@pytest.fixture
def settlement_service(repository, clock):
    """SettlementService wired to the in-memory repository and fixed clock"""
    return SettlementService(repository, clock=clock, timezone="UTC")


@pytest.fixture
def achievement_engine():
    """Achievement engine on the default catalog, judged in UTC"""
    return AchievementEngine(timezone="UTC")


@pytest.fixture
def test_player_id():
    """Standard test player ID"""
    return "player-123"


@pytest.fixture
def fast_conflict_retries(monkeypatch):
    """Shrink conflict backoff so retry tests run quickly"""
    from puzzle_settlement import config
    monkeypatch.setattr(config, "CONFLICT_BASE_DELAY", 0.001)
    monkeypatch.setattr(config, "CONFLICT_MAX_DELAY", 0.01)
