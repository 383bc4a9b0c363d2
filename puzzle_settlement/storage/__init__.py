"""Persistence collaborators for player progression stats"""

from puzzle_settlement.storage.repository import StatsRepository
from puzzle_settlement.storage.memory_store import InMemoryStatsRepository

__all__ = [
    "StatsRepository",
    "InMemoryStatsRepository",
]
