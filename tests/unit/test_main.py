"""Unit tests for the puzzle-settle command line entry point"""
import json

from puzzle_settlement.main import main


def write_results(tmp_path, payload):
    path = tmp_path / "results.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_settles_every_result(tmp_path, capsys):
    path = write_results(tmp_path, [
        {"game_id": "g1", "difficulty": "easy", "completion_time_seconds": 45,
         "moves": 9, "perfect_moves": 9, "total_pieces": 9},
        {"game_id": "g2", "difficulty": "medium", "completion_time_seconds": 400,
         "moves": 50, "total_pieces": 20},
        # Resubmission prints the same receipt again
        {"game_id": "g1", "difficulty": "easy", "completion_time_seconds": 45,
         "moves": 9, "perfect_moves": 9, "total_pieces": 9},
    ])

    assert main([str(path), "--player", "cli-player"]) == 0

    receipts = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [r["game_id"] for r in receipts] == ["g1", "g2", "g1"]
    assert receipts[0]["base_coins"] == 23
    assert receipts[2] == receipts[0]


def test_invalid_result_reports_error(tmp_path, capsys):
    path = write_results(tmp_path, [
        {"difficulty": "easy", "completion_time_seconds": 45, "moves": 9, "total_pieces": 9},
    ])

    assert main([str(path)]) == 1

    error = json.loads(capsys.readouterr().out.strip())
    assert error["error"] == "InputError"
    assert error["retryable"] is False


def test_rejects_non_list_file(tmp_path):
    path = write_results(tmp_path, {"game_id": "g1"})
    assert main([str(path)]) == 2
