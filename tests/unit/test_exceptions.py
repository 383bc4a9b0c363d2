"""Unit tests for the settlement exception hierarchy"""
import logging
from datetime import datetime

from puzzle_settlement.exceptions import (
    ConcurrencyConflict,
    ConfigurationError,
    InputError,
    PersistenceError,
    PredicateError,
    SettlementEngineError,
    wrap_persistence_exception,
)


class TestSettlementEngineError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = SettlementEngineError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)
        assert error.retryable is False

    def test_exception_with_context(self):
        error = SettlementEngineError(
            message="Settlement failed",
            player_id="player-1",
            operation="settle",
            context={"game_id": "g-123"},
            user_message="Could not settle your game",
        )
        assert error.player_id == "player-1"
        assert error.operation == "settle"
        assert error.context["game_id"] == "g-123"
        assert error.user_message == "Could not settle your game"

    def test_to_dict(self):
        error = SettlementEngineError("Test error", request_id="req-1")
        data = error.to_dict()
        assert data["error"] == "SettlementEngineError"
        assert data["message"] == "Test error"
        assert data["request_id"] == "req-1"
        assert data["retryable"] is False
        assert "timestamp" in data

    def test_auto_logging(self, caplog):
        with caplog.at_level(logging.ERROR, logger="puzzle_settlement.exceptions"):
            SettlementEngineError("Something broke", player_id="player-1")
        assert "Something broke" in caplog.text


class TestInputError:

    def test_field_in_user_message(self):
        error = InputError("game_id is required", field="game_id", value=None)
        assert error.field == "game_id"
        assert error.value is None
        assert error.user_message == "Invalid game_id: game_id is required"
        assert error.context == {"field": "game_id", "value": None}

    def test_without_field(self):
        error = InputError("Bad payload")
        assert error.user_message == "Bad payload"


class TestPersistenceErrors:

    def test_persistence_error_is_retryable(self):
        error = PersistenceError("Storage down", player_id="player-1")
        assert error.retryable is True
        assert "try again" in error.user_message

    def test_conflict_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="puzzle_settlement.exceptions"):
            error = ConcurrencyConflict(expected_version=4, player_id="player-1")
        assert error.retryable is True
        assert error.expected_version == 4
        assert error.context == {"expected_version": 4}
        assert any(r.levelno == logging.WARNING for r in caplog.records)


class TestOtherErrors:

    def test_predicate_error(self):
        cause = ZeroDivisionError("division by zero")
        error = PredicateError("Predicate failed", achievement_id="night_owl", cause=cause)
        assert error.achievement_id == "night_owl"
        assert error.cause is cause
        assert error.log_level == logging.WARNING

    def test_configuration_error(self):
        error = ConfigurationError("Bad timezone", config_key="ACHIEVEMENT_TIMEZONE")
        assert error.config_key == "ACHIEVEMENT_TIMEZONE"
        assert "contact support" in error.user_message


class TestWrapPersistenceException:

    def test_passes_through_engine_errors(self):
        original = ConcurrencyConflict()
        assert wrap_persistence_exception(original, operation="save_user_stats") is original

    def test_wraps_os_error(self):
        wrapped = wrap_persistence_exception(OSError("disk full"), operation="save_user_stats", player_id="p1")
        assert isinstance(wrapped, PersistenceError)
        assert "Storage unavailable during save_user_stats" in wrapped.message
        assert wrapped.player_id == "p1"

    def test_wraps_timeout(self):
        wrapped = wrap_persistence_exception(TimeoutError(), operation="load_user_stats")
        assert isinstance(wrapped, PersistenceError)
        assert "Storage unavailable" in wrapped.message

    def test_wraps_generic_error(self):
        cause = RuntimeError("boom")
        wrapped = wrap_persistence_exception(
            cause, operation="load_user_stats", context={"expected_version": 2}
        )
        assert isinstance(wrapped, PersistenceError)
        assert wrapped.message == "load_user_stats failed: boom"
        assert wrapped.cause is cause
        assert wrapped.context == {"expected_version": 2}
