"""Tests for Chat Governance."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from home_advisory.governance.session import (
    can_auto_initiate,
    can_send_agent_message,
    create_initial_governance_state,
    enter_interpretive_mode,
    exit_interpretive_mode,
    record_agent_message,
    record_auto_initiation,
    record_user_message,
    should_exit_interpretive,
)
from home_advisory.models.chat_mode import ChatMode
from home_advisory.models.governance import GovernanceRules


class TestInitialState:
    def test_zeroed(self):
        state = create_initial_governance_state()
        assert state.auto_initiations_this_session == 0
        assert state.consecutive_agent_messages == 0
        assert state.interpretive_messages_count == 0
        assert state.previous_mode is None
        assert state.last_auto_message_timestamp is None

    def test_fresh_state_permits_everything(self):
        state = create_initial_governance_state()
        assert can_auto_initiate(state)
        assert can_send_agent_message(state)
        assert not should_exit_interpretive(state)

    def test_state_is_immutable(self):
        state = create_initial_governance_state()
        with pytest.raises(ValidationError):
            state.consecutive_agent_messages = 5


class TestAutoInitiation:
    def test_one_per_session(self):
        state = create_initial_governance_state()
        state = record_auto_initiation(state)
        assert not can_auto_initiate(state)

    def test_records_timestamp(self):
        now = datetime(2026, 7, 15, 9, 30, tzinfo=timezone.utc)
        state = record_auto_initiation(create_initial_governance_state(), current_time=now)
        assert state.last_auto_message_timestamp == now
        assert state.auto_initiations_this_session == 1

    def test_user_messages_do_not_reset(self):
        state = record_auto_initiation(create_initial_governance_state())
        state = record_user_message(state)
        assert not can_auto_initiate(state)

    def test_custom_limit(self):
        rules = GovernanceRules(max_auto_initiations_per_session=2)
        state = record_auto_initiation(create_initial_governance_state())
        assert can_auto_initiate(state, rules)
        assert not can_auto_initiate(record_auto_initiation(state), rules)


class TestConsecutiveMessages:
    def setup_method(self):
        self.state = create_initial_governance_state()

    def test_three_then_blocked(self):
        state = self.state
        for _ in range(3):
            assert can_send_agent_message(state)
            state = record_agent_message(state)
        assert state.consecutive_agent_messages == 3
        assert not can_send_agent_message(state)

    def test_user_message_resets_streak(self):
        state = self.state
        for _ in range(3):
            state = record_agent_message(state)
        state = record_user_message(state)
        assert state.consecutive_agent_messages == 0
        assert can_send_agent_message(state)

    def test_transitions_do_not_mutate_input(self):
        after = record_agent_message(self.state)
        assert self.state.consecutive_agent_messages == 0
        assert after.consecutive_agent_messages == 1
        assert after is not self.state


class TestInterpretiveLimits:
    def test_enter_resets_count_and_remembers_mode(self):
        state = record_agent_message(create_initial_governance_state())
        state = enter_interpretive_mode(state, ChatMode.ELEVATED_ATTENTION)
        assert state.previous_mode == ChatMode.ELEVATED_ATTENTION
        assert state.interpretive_messages_count == 0
        assert not should_exit_interpretive(state)

    def test_exit_after_one_message(self):
        state = enter_interpretive_mode(create_initial_governance_state(), ChatMode.SILENT_STEWARD)
        state = record_agent_message(state)
        assert should_exit_interpretive(state)

    def test_exit_clears(self):
        state = enter_interpretive_mode(create_initial_governance_state(), "planning_window_advisory")
        assert state.previous_mode == ChatMode.PLANNING_WINDOW_ADVISORY
        state = exit_interpretive_mode(record_agent_message(state))
        assert state.previous_mode is None
        assert state.interpretive_messages_count == 0

    def test_exit_when_not_interpretive_is_noop(self):
        state = create_initial_governance_state()
        assert exit_interpretive_mode(state) == state

    def test_exit_keeps_message_streak(self):
        state = enter_interpretive_mode(create_initial_governance_state(), ChatMode.SILENT_STEWARD)
        state = exit_interpretive_mode(record_agent_message(state))
        assert state.consecutive_agent_messages == 1
