"""
Service layer for puzzle settlement

Services own persistence and orchestration; the rule engines in
puzzle_settlement.gamification stay pure.
"""

from puzzle_settlement.services.settlement_service import SettlementService

__all__ = [
    "SettlementService",
]
