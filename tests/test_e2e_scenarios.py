"""
End-to-end scenarios across scoring, confidence, mode selection and governance.

A: an aging HVAC in summer outranks a younger roof
B: a home with no dated critical systems stays in baseline establishment,
   even when a system reports a deviation
C: a session auto-initiates once and only once
"""

from datetime import datetime, timezone

import pytest

from home_advisory.chat_mode.selector import build_chat_mode_context
from home_advisory.chat_mode.system_state import derive_system_state
from home_advisory.confidence.derivation import (
    compute_critical_systems_coverage,
    derive_system_confidence,
)
from home_advisory.governance.cadence import TriggerCadence
from home_advisory.governance.session import (
    can_auto_initiate,
    create_initial_governance_state,
    record_agent_message,
    record_auto_initiation,
    record_user_message,
)
from home_advisory.models.chat_mode import ChatMode, SystemConfidence
from home_advisory.models.scoring import ClimateRisk
from home_advisory.models.system import SystemModeInput, SystemTimelineEntry
from home_advisory.scoring.priority import select_primary_system
from home_advisory.storage.kv import InMemoryKeyValueStore

SUMMER = datetime(2026, 7, 15, tzinfo=timezone.utc)


class TestScenarioAgingHvacInSummer:
    def setup_method(self):
        self.systems = [
            SystemTimelineEntry(system_id="hvac", likely_replacement_year=2027),
            SystemTimelineEntry(system_id="roof", likely_replacement_year=2034),
        ]
        self.selection = select_primary_system(self.systems, current_time=SUMMER)

    def test_hvac_is_primary(self):
        assert self.selection.primary.system.system_id == "hvac"

    def test_summer_multiplier_applied(self):
        assert self.selection.primary.urgency_multiplier == 1.25

    def test_scores(self):
        hvac, roof = self.selection.scored
        assert hvac.score == pytest.approx(6738.6, abs=0.1)
        assert roof.score == pytest.approx(1563.1, abs=0.1)
        assert hvac.score > roof.score

    def test_explains_replacement_window(self):
        """One year out the HVAC is past the 0.5 probability line; season is not cited."""
        assert self.selection.primary.failure_probability == pytest.approx(0.599, abs=0.001)
        assert self.selection.primary.explanation == "Your HVAC is in its typical replacement window."


class TestScenarioExplanationBands:
    def test_hvac_approaching_in_summer_cites_season(self):
        systems = [SystemTimelineEntry(system_id="hvac", likely_replacement_year=2029)]
        primary = select_primary_system(systems, current_time=SUMMER).primary

        assert primary.failure_probability == pytest.approx(0.2975, abs=0.001)
        assert primary.explanation == (
            "Your HVAC is approaching replacement age, and summer is a high-demand season."
        )

    def test_roof_approaching_in_hurricane_zone_cites_weather(self):
        systems = [SystemTimelineEntry(system_id="roof", likely_replacement_year=2028)]
        primary = select_primary_system(
            systems, climate_risk=ClimateRisk.HURRICANE_ZONE, current_time=SUMMER
        ).primary

        assert primary.failure_probability == pytest.approx(0.4246, abs=0.001)
        assert primary.urgency_multiplier == 1.35
        assert primary.explanation == (
            "Your roof is approaching replacement age, and weather conditions increase urgency."
        )

    def test_roof_approaching_in_temperate_zone_cites_no_reason(self):
        systems = [SystemTimelineEntry(system_id="roof", likely_replacement_year=2028)]
        primary = select_primary_system(
            systems, climate_risk=ClimateRisk.TEMPERATE, current_time=SUMMER
        ).primary
        assert primary.explanation == "Your roof is approaching typical replacement age."


class TestScenarioUndocumentedHome:
    def setup_method(self):
        self.records = [
            {"system_key": "hvac", "data_sources": ["permit"]},
            {"system_key": "roof"},
            {"system_key": "water_heater", "data_sources": ["user"]},
        ]

    def test_confidence_is_early_with_no_coverage(self):
        assert compute_critical_systems_coverage(self.records) == 0.0
        assert derive_system_confidence(self.records) == SystemConfidence.EARLY

    @pytest.mark.parametrize("confidence", [0.2, 0.5, 0.95])
    def test_deviation_cannot_elevate(self, confidence):
        systems = [SystemModeInput(key="hvac", confidence=confidence, deviation_detected=True)]
        context = build_chat_mode_context(self.records, systems)
        assert context.mode == ChatMode.BASELINE_ESTABLISHMENT
        assert not context.is_baseline_complete

    def test_derived_state_with_anomalies(self):
        systems = [derive_system_state("hvac", 0.5, confidence=0.9, anomaly_flags=["short_cycling"])]
        context = build_chat_mode_context(self.records, systems, interpretive_requested=True)
        assert context.mode == ChatMode.BASELINE_ESTABLISHMENT
        assert context.previous_mode is None


class TestScenarioSingleAutoInitiation:
    def test_once_per_session(self):
        state = create_initial_governance_state()
        assert state.auto_initiations_this_session == 0
        assert can_auto_initiate(state)

        state = record_auto_initiation(state, current_time=SUMMER)
        assert not can_auto_initiate(state)

        # Nothing else in the session restores it
        state = record_agent_message(state)
        state = record_user_message(state)
        state = record_agent_message(state)
        assert not can_auto_initiate(state)

    def test_new_session_may_initiate_but_trigger_still_cools_down(self):
        device = InMemoryKeyValueStore()
        first = TriggerCadence(device, session_store=InMemoryKeyValueStore())
        first.record_auto_open("hvac_planning", SUMMER)

        second_state = create_initial_governance_state()
        second = TriggerCadence(device, session_store=InMemoryKeyValueStore())
        assert can_auto_initiate(second_state)
        assert not second.can_auto_open("hvac_planning", SUMMER)
