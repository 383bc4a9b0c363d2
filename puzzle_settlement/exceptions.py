"""
Standardized exception hierarchy for the settlement engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class SettlementEngineError(Exception):
    """
    Base exception for all settlement engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise SettlementEngineError(
            message="Failed to persist settlement",
            player_id="player-1",
            operation="settle",
            context={"game_id": "g-123"}
        )
    """

    log_level = logging.ERROR
    retryable = False

    def __init__(
        self,
        message: str,
        player_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.player_id = player_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "player_id": self.player_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.log(
                self.log_level,
                f"{self.__class__.__name__}: {self.message}",
                extra=log_data,
                exc_info=self.cause,
            )
        else:
            logger.log(self.log_level, f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Input Errors (Caller Contract)
# ==========================================

class InputError(SettlementEngineError):
    """
    Raised when a game result cannot be represented at all

    Examples:
    - Missing or blank game_id
    - Negative completion time or move count
    - Puzzle with no pieces

    Unknown difficulties are NOT input errors; they fall back to the easy table.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class PersistenceError(SettlementEngineError):
    """
    Loading or saving player stats failed

    The settlement is reported as failed and nothing is applied. Callers
    retry with the same game_id.
    """

    retryable = True

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault(
            "user_message",
            "We couldn't save your game result. Please try again.",
        )
        super().__init__(message=message, **kwargs)


class ConcurrencyConflict(SettlementEngineError):
    """Optimistic write collided with another settlement for the same player"""

    log_level = logging.WARNING
    retryable = True

    def __init__(
        self,
        message: str = "Player stats were modified concurrently",
        expected_version: Optional[int] = None,
        **kwargs
    ):
        self.expected_version = expected_version
        super().__init__(
            message=message,
            user_message="Your game is still being processed. Please try again.",
            context={"expected_version": expected_version},
            **kwargs
        )


# ==========================================
# Achievement Errors
# ==========================================

class PredicateError(SettlementEngineError):
    """An achievement predicate raised; the achievement is treated as locked"""

    log_level = logging.WARNING

    def __init__(
        self,
        message: str,
        achievement_id: Optional[str] = None,
        **kwargs
    ):
        self.achievement_id = achievement_id
        super().__init__(
            message=message,
            context={"achievement_id": achievement_id},
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(SettlementEngineError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_persistence_exception(
    error: Exception,
    operation: str,
    player_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> SettlementEngineError:
    """
    Wrap storage-layer exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        player_id: Player ID if applicable
        context: Additional context

    Returns:
        Appropriate SettlementEngineError subclass

    Example:
        try:
            stats = await repository.load_user_stats(player_id)
        except Exception as e:
            raise wrap_persistence_exception(e, operation="load_user_stats", player_id=player_id)
    """
    if isinstance(error, SettlementEngineError):
        return error

    if isinstance(error, (TimeoutError, OSError)):
        return PersistenceError(
            message=f"Storage unavailable during {operation}: {error}",
            player_id=player_id,
            operation=operation,
            context=context,
            cause=error
        )

    return PersistenceError(
        message=f"{operation} failed: {error}",
        player_id=player_id,
        operation=operation,
        context=context,
        cause=error
    )
