"""
speakcoach — Data Models
Typed records returned to the UI. Nothing here is persisted.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MotivationLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DifficultyAdjustment(str, Enum):
    INCREASE = "increase"
    MAINTAIN = "maintain"
    DECREASE = "decrease"


class TutorFeedback(BaseModel):
    """Personalised feedback for one practice attempt."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    encouragement: str
    specific_feedback: str
    improvement_tips: list[str]
    next_challenge: str
    motivation_level: MotivationLevel
    difficulty_adjustment: DifficultyAdjustment
