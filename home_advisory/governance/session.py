"""
Chat Governance — decides whether the assistant is *allowed* to speak now.

The mode selector decides what the assistant would say; this module caps how
often it may say it.

HARD LIMITS (GovernanceRules defaults):
- 1 auto-initiation per session
- 3 consecutive agent messages without a user reply
- 1 interpretive message before auto-return to the previous mode

Behavioral Contract:
- Every transition is pure and returns a new ChatGovernanceState
- Guards are read-only predicates evaluated before any action
- Out-of-place transitions (e.g. exiting interpretive mode when not in it)
  are tolerated as no-ops, never raised
- Events must be applied in order: a user message is always recorded before
  the next agent message is evaluated
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from home_advisory.models.chat_mode import ChatMode
from home_advisory.models.governance import ChatGovernanceState, GovernanceRules

logger = logging.getLogger("home_advisory.governance")

DEFAULT_RULES = GovernanceRules()


def create_initial_governance_state() -> ChatGovernanceState:
    return ChatGovernanceState()


# --- Guards ---

def can_auto_initiate(
    state: ChatGovernanceState, rules: GovernanceRules = DEFAULT_RULES
) -> bool:
    """Exactly one autonomous conversation start per session, ever."""
    return state.auto_initiations_this_session < rules.max_auto_initiations_per_session


def can_send_agent_message(
    state: ChatGovernanceState, rules: GovernanceRules = DEFAULT_RULES
) -> bool:
    """No more than three assistant turns in a row without a user reply."""
    return state.consecutive_agent_messages < rules.max_consecutive_agent_messages


def should_exit_interpretive(
    state: ChatGovernanceState, rules: GovernanceRules = DEFAULT_RULES
) -> bool:
    """Hard ceiling: interpretive mode emits one message, then snaps back."""
    return state.interpretive_messages_count >= rules.max_interpretive_messages


# --- Transitions ---

def record_auto_initiation(
    state: ChatGovernanceState, current_time: Optional[datetime] = None
) -> ChatGovernanceState:
    if current_time is None:
        current_time = datetime.now(timezone.utc)
    return state.model_copy(update={
        "auto_initiations_this_session": state.auto_initiations_this_session + 1,
        "last_auto_message_timestamp": current_time,
    })


def record_agent_message(state: ChatGovernanceState) -> ChatGovernanceState:
    return state.model_copy(update={
        "consecutive_agent_messages": state.consecutive_agent_messages + 1,
        "interpretive_messages_count": state.interpretive_messages_count + 1,
    })


def record_user_message(state: ChatGovernanceState) -> ChatGovernanceState:
    """A user turn always breaks an agent streak."""
    return state.model_copy(update={"consecutive_agent_messages": 0})


def enter_interpretive_mode(
    state: ChatGovernanceState, previous_mode: ChatMode
) -> ChatGovernanceState:
    return state.model_copy(update={
        "previous_mode": ChatMode(previous_mode),
        "interpretive_messages_count": 0,
    })


def exit_interpretive_mode(state: ChatGovernanceState) -> ChatGovernanceState:
    return state.model_copy(update={
        "previous_mode": None,
        "interpretive_messages_count": 0,
    })
