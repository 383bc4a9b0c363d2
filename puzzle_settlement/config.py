"""Configuration management"""
import os
from dotenv import load_dotenv

from puzzle_settlement.exceptions import ConfigurationError

load_dotenv()

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Idempotency window: how many settled game IDs (and receipts) are kept per player
PROCESSED_GAMES_CAPACITY: int = int(os.getenv("PROCESSED_GAMES_CAPACITY", "200"))

# Recent game history used by efficiency-streak achievements
RECENT_GAMES_CAPACITY: int = int(os.getenv("RECENT_GAMES_CAPACITY", "10"))

# Optimistic write conflicts
MAX_CONFLICT_RETRIES: int = int(os.getenv("MAX_CONFLICT_RETRIES", "3"))
CONFLICT_BASE_DELAY: float = float(os.getenv("CONFLICT_BASE_DELAY", "0.05"))  # seconds
CONFLICT_MAX_DELAY: float = float(os.getenv("CONFLICT_MAX_DELAY", "1.0"))  # seconds

# Wall-clock achievements (night owl, weekend warrior, ...) are judged in this zone
ACHIEVEMENT_TIMEZONE: str = os.getenv("ACHIEVEMENT_TIMEZONE", "UTC")

# Leveling
MAX_LEVEL: int = int(os.getenv("MAX_LEVEL", "50"))


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown log level: {LOG_LEVEL}", config_key="LOG_LEVEL")
    if PROCESSED_GAMES_CAPACITY < 1:
        raise ConfigurationError(
            "PROCESSED_GAMES_CAPACITY must be at least 1",
            config_key="PROCESSED_GAMES_CAPACITY",
        )
    if RECENT_GAMES_CAPACITY < 3:
        raise ConfigurationError(
            "RECENT_GAMES_CAPACITY must be at least 3",
            config_key="RECENT_GAMES_CAPACITY",
        )
    if MAX_CONFLICT_RETRIES < 0:
        raise ConfigurationError(
            "MAX_CONFLICT_RETRIES cannot be negative",
            config_key="MAX_CONFLICT_RETRIES",
        )
    if MAX_LEVEL < 2:
        raise ConfigurationError("MAX_LEVEL must be at least 2", config_key="MAX_LEVEL")

    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
    try:
        ZoneInfo(ACHIEVEMENT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Unknown timezone: {ACHIEVEMENT_TIMEZONE}",
            config_key="ACHIEVEMENT_TIMEZONE",
            cause=e,
        )
