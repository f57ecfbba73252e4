"""Home advisory engine data models."""

from home_advisory.models.chat_mode import (
    ChatMode,
    ChatModeContext,
    ChatModeInput,
    ChatModeThresholds,
    ElevatedModeBehavior,
    ElevatedTone,
    ModeBehavior,
    OpeningMessage,
    SystemConfidence,
)
from home_advisory.models.governance import (
    CadenceRules,
    ChatGovernanceState,
    GovernanceRules,
    PlanningWindowAcknowledgment,
    TriggerHistoryEntry,
)
from home_advisory.models.scoring import (
    ClimateRisk,
    PrimarySystemSelection,
    PriorityScoreResult,
    ScoredSystem,
    Season,
)
from home_advisory.models.system import (
    ConfidenceScores,
    SystemModeInput,
    SystemRecord,
    SystemState,
    SystemTimelineEntry,
)

__all__ = [
    "CadenceRules",
    "ChatGovernanceState",
    "ChatMode",
    "ChatModeContext",
    "ChatModeInput",
    "ChatModeThresholds",
    "ClimateRisk",
    "ConfidenceScores",
    "ElevatedModeBehavior",
    "ElevatedTone",
    "GovernanceRules",
    "ModeBehavior",
    "OpeningMessage",
    "PlanningWindowAcknowledgment",
    "PrimarySystemSelection",
    "PriorityScoreResult",
    "ScoredSystem",
    "Season",
    "SystemConfidence",
    "SystemModeInput",
    "SystemRecord",
    "SystemState",
    "SystemTimelineEntry",
    "TriggerHistoryEntry",
]
