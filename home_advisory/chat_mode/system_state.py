"""
System state derivation — puts each system in exactly one state.

Elevated requires a deviation, not just age. A system whose confidence is
below the baseline threshold cannot be elevated: its deviation signal is
dropped as too sparse to trust.
"""

from typing import List, Optional

from home_advisory.models.chat_mode import ChatModeThresholds
from home_advisory.models.system import SystemModeInput, SystemState

DEFAULT_CONFIDENCE = 0.5

STATE_LABELS = {
    SystemState.STABLE: "Stable",
    SystemState.PLANNING_WINDOW: "Planning Window",
    SystemState.ELEVATED: "Elevated",
    SystemState.BASELINE_INCOMPLETE: "Establishing baseline",
}


def derive_system_state(
    key: str,
    years_remaining: Optional[float] = None,
    confidence: Optional[float] = None,
    deviation_detected: bool = False,
    anomaly_flags: Optional[List[str]] = None,
    thresholds: Optional[ChatModeThresholds] = None,
) -> SystemModeInput:
    """
    Priority:
      1. baseline_incomplete: confidence too low
      2. elevated: deviation, or under the elevated horizon with anomalies
      3. planning_window: under the planning horizon (time only)
      4. stable
    """
    thresholds = thresholds or ChatModeThresholds()
    months = years_remaining * 12 if years_remaining is not None else None
    confidence = DEFAULT_CONFIDENCE if confidence is None else confidence
    anomaly_flags = list(anomaly_flags or [])

    base = dict(key=key, confidence=confidence, months_remaining=months)

    if confidence < thresholds.baseline_incomplete_confidence:
        return SystemModeInput(
            **base,
            state=SystemState.BASELINE_INCOMPLETE,
            deviation_detected=False,
            anomaly_flags=[],
        )

    if deviation_detected or (
        months is not None and months < thresholds.elevated_months and anomaly_flags
    ):
        return SystemModeInput(
            **base,
            state=SystemState.ELEVATED,
            deviation_detected=True,
            anomaly_flags=anomaly_flags,
        )

    if months is not None and months < thresholds.planning_months:
        return SystemModeInput(
            **base,
            state=SystemState.PLANNING_WINDOW,
            anomaly_flags=anomaly_flags,
        )

    return SystemModeInput(**base, state=SystemState.STABLE, anomaly_flags=anomaly_flags)


def get_state_label(state: SystemState) -> str:
    return STATE_LABELS[state]


def has_deviation(system: SystemModeInput, thresholds: ChatModeThresholds) -> bool:
    """A detected deviation, or anomalies inside the elevated horizon."""
    if system.deviation_detected:
        return True
    return (
        system.months_remaining is not None
        and system.months_remaining < thresholds.elevated_months
        and len(system.anomaly_flags) > 0
    )


def is_in_planning_window(system: SystemModeInput, thresholds: ChatModeThresholds) -> bool:
    if system.state == SystemState.PLANNING_WINDOW:
        return True
    return (
        system.months_remaining is not None
        and system.months_remaining < thresholds.planning_months
    )


def is_baseline_incomplete(system: SystemModeInput, thresholds: ChatModeThresholds) -> bool:
    return (
        system.state == SystemState.BASELINE_INCOMPLETE
        or system.confidence < thresholds.baseline_incomplete_confidence
    )
