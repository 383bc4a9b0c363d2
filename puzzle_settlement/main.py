"""Command-line entry point: settle a file of game results for one player"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from puzzle_settlement.config import LOG_LEVEL, validate_config
from puzzle_settlement.exceptions import SettlementEngineError
from puzzle_settlement.services.settlement_service import SettlementService
from puzzle_settlement.storage.memory_store import InMemoryStatsRepository

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="puzzle-settle",
        description="Settle a JSON list of puzzle game results and print the receipts",
    )
    parser.add_argument("results", type=Path, help="JSON file containing a list of game results")
    parser.add_argument("--player", default="local-player", help="Player ID to settle for")
    return parser


async def run(results_path: Path, player_id: str) -> int:
    """Settle every result in the file; returns the process exit code"""
    payloads = json.loads(results_path.read_text(encoding="utf-8"))
    if not isinstance(payloads, list):
        logger.error(f"{results_path} must contain a JSON list of game results")
        return 2

    service = SettlementService(InMemoryStatsRepository())
    failures = 0

    for payload in payloads:
        try:
            receipt = await service.settle(player_id, payload)
        except SettlementEngineError as e:
            failures += 1
            print(json.dumps(e.to_dict()))
            continue
        print(receipt.model_dump_json())

    progress = await service.get_progress(player_id)
    logger.info(
        f"Player {player_id}: level {progress['level']}, {progress['experience']} XP, "
        f"{progress['coins']} coins, {len(progress['achievements'])} achievements"
    )
    return 1 if failures else 0


def main(argv=None) -> int:
    """Main application entry point"""
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    )

    args = build_parser().parse_args(argv)

    logger.info("Validating configuration...")
    validate_config()

    return asyncio.run(run(args.results, args.player))


if __name__ == "__main__":
    sys.exit(main())
