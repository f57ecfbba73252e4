"""Governance models — session state, cadence history and acknowledgments."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from home_advisory.models.chat_mode import ChatMode


class GovernanceRules(BaseModel):
    """Hard message-frequency limits for a chat session."""

    max_auto_initiations_per_session: int = 1
    max_consecutive_agent_messages: int = 3
    max_interpretive_messages: int = 1


class CadenceRules(BaseModel):
    """Limits for advisor auto-opens across sessions."""

    min_seconds_between_same_trigger: int = 24 * 60 * 60
    max_auto_opens_per_session: int = 2


class ChatGovernanceState(BaseModel):
    """
    Session-lifetime counters. Immutable: every transition in
    home_advisory.governance.session returns a new value.
    """

    model_config = ConfigDict(frozen=True)

    auto_initiations_this_session: int = 0
    consecutive_agent_messages: int = 0
    interpretive_messages_count: int = 0
    previous_mode: Optional[ChatMode] = None
    last_auto_message_timestamp: Optional[datetime] = None


class TriggerHistoryEntry(BaseModel):
    """One auto-open, persisted as {"key": ..., "timestamp": <epoch ms>}."""

    key: str
    timestamp: int


class PlanningWindowAcknowledgment(BaseModel):
    """The user has seen a system's planning window. One entry per system."""

    system_key: str
    acknowledged_at: datetime
    window_entered_at: datetime
