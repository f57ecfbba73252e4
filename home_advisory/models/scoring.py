"""Priority scoring models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from home_advisory.models.system import SystemTimelineEntry


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class ClimateRisk(str, Enum):
    HURRICANE_ZONE = "hurricane_zone"
    FREEZE_ZONE = "freeze_zone"
    TEMPERATE = "temperate"


class PriorityScoreResult(BaseModel):
    """Score for a single system before ranking."""

    score: float
    urgency_multiplier: float
    explanation: str


class ScoredSystem(BaseModel):
    """A system with its priority score. Recomputed on every pass, never persisted."""

    system: SystemTimelineEntry
    score: float
    urgency_multiplier: float
    failure_probability: float
    replacement_cost_midpoint: float
    explanation: str


class PrimarySystemSelection(BaseModel):
    """Ranked systems and the one advisory copy should foreground."""

    primary: Optional[ScoredSystem] = None
    scored: List[ScoredSystem] = []
