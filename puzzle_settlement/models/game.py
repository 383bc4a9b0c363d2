"""Game result models"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from puzzle_settlement.exceptions import InputError


class Difficulty(str, Enum):
    """Puzzle difficulty levels"""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"


class GameResult(BaseModel):
    """
    A finished puzzle game as reported by the client.

    `completed_at` is never trusted: the settlement service replaces it with
    its own clock before anything reads it.
    """
    model_config = ConfigDict(frozen=True)

    game_id: str
    difficulty: str = Difficulty.EASY.value
    completion_time_seconds: int = Field(ge=0)
    moves: int = Field(ge=0)
    perfect_moves: Optional[int] = Field(default=None, ge=0)
    total_pieces: int = Field(ge=1)
    completed_at: Optional[datetime] = None

    @field_validator("game_id", mode="before")
    @classmethod
    def validate_game_id(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            raise ValueError("game_id is required")
        return str(v).strip()

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v: Any) -> str:
        # Unknown values are kept; reward tables fall back to the easy row
        if isinstance(v, Difficulty):
            return v.value
        if v is None:
            return Difficulty.EASY.value
        return str(v).strip().lower()

    @property
    def known_difficulty(self) -> Optional[Difficulty]:
        try:
            return Difficulty(self.difficulty)
        except ValueError:
            return None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "GameResult":
        """
        Build a GameResult from an untrusted client payload.

        Raises:
            InputError: if the payload cannot be represented (missing game_id,
                negative time or moves, no pieces)
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or None
            raise InputError(
                message=first.get("msg", "Invalid game result"),
                field=field,
                value=first.get("input"),
                operation="parse_game_result",
                cause=e,
            )
