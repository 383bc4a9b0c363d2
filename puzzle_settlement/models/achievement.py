"""Achievement models for gamification"""
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict


class AchievementCategory(str, Enum):
    """Achievement categories"""
    PROGRESS = "progress"
    PERFORMANCE = "performance"
    SPECIAL = "special"
    MILESTONE = "milestone"


class AchievementSummary(BaseModel):
    """Serializable view of an achievement, as shown in the settlement popup"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory


class AchievementDefinition(BaseModel):
    """Static catalog entry: metadata plus the unlock predicate"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    icon: str
    category: AchievementCategory
    predicate: Callable[[Any], bool]

    def summary(self) -> AchievementSummary:
        return AchievementSummary(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            category=self.category,
        )
