"""Chat mode models — confidence buckets, modes, selector input and context."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from home_advisory.models.system import SystemModeInput


class SystemConfidence(str, Enum):
    """How well-documented a home's critical systems are."""
    EARLY = "Early"
    MODERATE = "Moderate"
    HIGH = "High"


class ChatMode(str, Enum):
    """How directive the assistant may be. Exactly one is active at a time."""
    ELEVATED_ATTENTION = "elevated_attention"              # deviation detected, confidence-gated
    BASELINE_ESTABLISHMENT = "baseline_establishment"      # blocks all advisory language
    PLANNING_WINDOW_ADVISORY = "planning_window_advisory"  # time-based, no deviation
    INTERPRETIVE = "interpretive"                          # one-shot, user "why/how" only
    SILENT_STEWARD = "silent_steward"                      # default, waits for the user


class ChatModeThresholds(BaseModel):
    """Thresholds used by the mode selector and system state derivation."""

    baseline_complete_coverage: float = Field(ge=0.0, le=1.0, default=0.5)
    baseline_incomplete_confidence: float = Field(ge=0.0, le=1.0, default=0.4)
    elevated_min_confidence: float = Field(ge=0.0, le=1.0, default=0.4)
    elevated_min_coverage: float = Field(ge=0.0, le=1.0, default=0.25)
    planning_months: float = 36             # < 3 years
    elevated_months: float = 12             # < 1 year AND anomaly present


class ChatModeInput(BaseModel):
    """Everything the selector is allowed to look at."""

    system_confidence: SystemConfidence
    critical_systems_coverage: float = Field(ge=0.0, le=1.0)
    systems: List[SystemModeInput] = []
    interpretive_requested: bool = False    # explicit user why/how intent


class ChatModeContext(BaseModel):
    """Selected mode plus the facts the message-composition layer needs."""

    mode: ChatMode
    system_confidence: SystemConfidence
    permits_found: bool = False
    critical_systems_coverage: float = 0.0
    user_confirmed_systems: bool = False
    systems_with_low_confidence: List[str] = []
    previous_mode: Optional[ChatMode] = None
    is_baseline_complete: bool = False


class OpeningMessage(BaseModel):
    """System-initiated opening copy, shown at most once per session."""

    primary: str
    secondary: Optional[str] = None
    clarifier: Optional[str] = None


class ModeBehavior(BaseModel):
    """What the assistant is allowed to do while a mode is active."""

    show_upload_affordance: bool
    allow_cost_discussion: bool
    allow_timeline_specifics: bool
    allow_action_language: bool
    can_auto_initiate: bool
    max_consecutive_messages: int


class ElevatedTone(str, Enum):
    QUESTIONING = "questioning"
    ADVISORY = "advisory"


class ElevatedModeBehavior(BaseModel):
    """Elevated attention is directive only once the baseline is complete."""

    can_recommend: bool
    can_give_timelines: bool
    can_mention_costs: bool
    tone: ElevatedTone
