"""
Chat Mode Selector — deterministic choice of how directive the assistant may be.

DOCTRINE: the assistant does not advise until it can explain why it believes
something. While in baseline_establishment all advisory language is blocked.

Precedence (earlier wins), held in MODE_PRECEDENCE:

  | # | Mode                      | Applies when                                       |
  |---|---------------------------|----------------------------------------------------|
  | 1 | elevated_attention        | deviation on a system AND elevated gate holds      |
  | 2 | baseline_establishment    | baseline incomplete (bucket, coverage, or system)  |
  | 3 | planning_window_advisory  | a system is aging into its replacement window      |
  | 4 | interpretive              | explicit user why/how intent                       |
  | 5 | silent_steward            | always (default)                                   |

The elevated gate keeps sparse data from raising alarms: the deviating
system's confidence must reach elevated_min_confidence, the home bucket must
not be Early, and critical coverage must reach elevated_min_coverage.
"""

import logging
from typing import Callable, Iterable, NamedTuple, Optional, Sequence, Tuple

from home_advisory.chat_mode.system_state import (
    has_deviation,
    is_baseline_incomplete,
    is_in_planning_window,
)
from home_advisory.confidence.derivation import (
    RecordLike,
    compute_critical_systems_coverage,
    derive_system_confidence,
    find_low_confidence_systems,
    has_permit_records,
    has_user_confirmed_systems,
)
from home_advisory.governance.session import (
    DEFAULT_RULES,
    enter_interpretive_mode,
    exit_interpretive_mode,
    should_exit_interpretive,
)
from home_advisory.models.chat_mode import (
    ChatMode,
    ChatModeContext,
    ChatModeInput,
    ChatModeThresholds,
    SystemConfidence,
)
from home_advisory.models.governance import ChatGovernanceState, GovernanceRules
from home_advisory.models.system import SystemModeInput

logger = logging.getLogger("home_advisory.chat_mode")

INTERPRETIVE_INTENTS = (
    "why",
    "how",
    "what does",
    "what is",
    "explain",
    "tell me about",
    "understand",
    "meaning",
)


class ModeRule(NamedTuple):
    mode: ChatMode
    applies: Callable[[ChatModeInput, ChatModeThresholds], bool]
    description: str


def is_baseline_complete(
    inputs: ChatModeInput, thresholds: Optional[ChatModeThresholds] = None
) -> bool:
    """Baseline is complete once confidence is past Early and coverage is sufficient."""
    thresholds = thresholds or ChatModeThresholds()
    return (
        inputs.system_confidence != SystemConfidence.EARLY
        and inputs.critical_systems_coverage >= thresholds.baseline_complete_coverage
    )


def _elevated_attention_applies(inputs: ChatModeInput, t: ChatModeThresholds) -> bool:
    if inputs.system_confidence == SystemConfidence.EARLY:
        return False
    if inputs.critical_systems_coverage < t.elevated_min_coverage:
        return False
    return any(
        has_deviation(s, t) and s.confidence >= t.elevated_min_confidence
        for s in inputs.systems
    )


def _baseline_establishment_applies(inputs: ChatModeInput, t: ChatModeThresholds) -> bool:
    if not is_baseline_complete(inputs, t):
        return True
    return any(is_baseline_incomplete(s, t) for s in inputs.systems)


def _planning_window_applies(inputs: ChatModeInput, t: ChatModeThresholds) -> bool:
    return any(is_in_planning_window(s, t) for s in inputs.systems)


def _interpretive_applies(inputs: ChatModeInput, t: ChatModeThresholds) -> bool:
    # Never entered by background computation
    return inputs.interpretive_requested


def _silent_steward_applies(inputs: ChatModeInput, t: ChatModeThresholds) -> bool:
    return True


MODE_PRECEDENCE: Tuple[ModeRule, ...] = (
    ModeRule(
        ChatMode.ELEVATED_ATTENTION,
        _elevated_attention_applies,
        "Deviation detected on a system with adequate confidence",
    ),
    ModeRule(
        ChatMode.BASELINE_ESTABLISHMENT,
        _baseline_establishment_applies,
        "Baseline incomplete; blocks all advisory modes below",
    ),
    ModeRule(
        ChatMode.PLANNING_WINDOW_ADVISORY,
        _planning_window_applies,
        "A system is aging into its replacement window",
    ),
    ModeRule(
        ChatMode.INTERPRETIVE,
        _interpretive_applies,
        "User asked why/how; one message, then return",
    ),
    ModeRule(
        ChatMode.SILENT_STEWARD,
        _silent_steward_applies,
        "All systems stable; wait for the user",
    ),
)


def check_precedence_table(rules: Sequence[ModeRule]) -> None:
    """Every ChatMode must appear exactly once, ending with an unconditional default."""
    modes = [r.mode for r in rules]
    missing = set(ChatMode) - set(modes)
    duplicated = {m for m in modes if modes.count(m) > 1}
    if missing or duplicated:
        raise ValueError(
            f"Mode precedence table is not exhaustive: "
            f"missing={sorted(m.value for m in missing)}, "
            f"duplicated={sorted(m.value for m in duplicated)}"
        )
    if rules[-1].applies is not _silent_steward_applies:
        raise ValueError("Mode precedence table must end with the silent_steward default")


check_precedence_table(MODE_PRECEDENCE)


def determine_chat_mode(
    inputs: ChatModeInput,
    thresholds: Optional[ChatModeThresholds] = None,
    rules: Sequence[ModeRule] = MODE_PRECEDENCE,
) -> ChatMode:
    """Evaluate the precedence table top to bottom; the first match wins."""
    thresholds = thresholds or ChatModeThresholds()
    for rule in rules:
        if rule.applies(inputs, thresholds):
            logger.debug("Chat mode %s: %s", rule.mode.value, rule.description)
            return rule.mode
    return ChatMode.SILENT_STEWARD


def should_enter_interpretive(user_message: str) -> bool:
    """True if the user is asking why, how, or what something means."""
    normalized = user_message.lower()
    return any(intent in normalized for intent in INTERPRETIVE_INTENTS)


CHAT_MODE_LABELS = {
    ChatMode.BASELINE_ESTABLISHMENT: "• Establishing baseline",
    ChatMode.INTERPRETIVE: "• Explaining",
    ChatMode.ELEVATED_ATTENTION: "• Elevated attention",
    ChatMode.SILENT_STEWARD: None,            # silence is authority
    ChatMode.PLANNING_WINDOW_ADVISORY: None,
}


def get_chat_mode_label(mode: ChatMode) -> Optional[str]:
    """State indicator text; None for modes that show no indicator."""
    return CHAT_MODE_LABELS[ChatMode(mode)]


# --- Interpretive excursion ---

def outranks_interpretive(
    mode: ChatMode, precedence: Sequence[ModeRule] = MODE_PRECEDENCE
) -> bool:
    """True if mode sits above interpretive in the precedence table."""
    order = [r.mode for r in precedence]
    return order.index(ChatMode(mode)) < order.index(ChatMode.INTERPRETIVE)


def enter_interpretive(
    current_mode: ChatMode,
    state: ChatGovernanceState,
    precedence: Sequence[ModeRule] = MODE_PRECEDENCE,
) -> Tuple[ChatMode, ChatGovernanceState]:
    """
    Switch to interpretive mode, remembering the mode active before it.

    A user question does not interrupt a mode ranked above interpretive;
    the call is a no-op there, matching what determine_chat_mode selects.
    """
    current_mode = ChatMode(current_mode)
    if current_mode == ChatMode.INTERPRETIVE:
        # Already explaining; keep the original mode to return to
        return ChatMode.INTERPRETIVE, state
    if outranks_interpretive(current_mode, precedence):
        logger.debug("Interpretive request ignored: %s takes precedence", current_mode.value)
        return current_mode, state
    return ChatMode.INTERPRETIVE, enter_interpretive_mode(state, current_mode)


def resolve_interpretive_return(
    current_mode: ChatMode,
    state: ChatGovernanceState,
    rules: GovernanceRules = DEFAULT_RULES,
) -> Tuple[ChatMode, ChatGovernanceState]:
    """
    After an agent message: leave interpretive mode once its single message
    has been sent, returning to previous_mode (silent_steward if none).
    """
    if current_mode != ChatMode.INTERPRETIVE or not should_exit_interpretive(state, rules):
        return current_mode, state

    return_mode = state.previous_mode or ChatMode.SILENT_STEWARD
    logger.debug("Leaving interpretive mode, returning to %s", return_mode.value)
    return return_mode, exit_interpretive_mode(state)


# --- Context ---

def build_chat_mode_context(
    records: Iterable[RecordLike],
    systems: Iterable[SystemModeInput] = (),
    previous_mode: Optional[ChatMode] = None,
    interpretive_requested: bool = False,
    thresholds: Optional[ChatModeThresholds] = None,
) -> ChatModeContext:
    """
    Derive confidence and coverage from the raw records, select the mode,
    and package what the message-composition layer needs.

    previous_mode is carried only while the selected mode is interpretive, and
    only when interpretive could have interrupted it; otherwise the mode the
    records select in the background is carried instead.
    """
    records = list(records)
    thresholds = thresholds or ChatModeThresholds()

    inputs = ChatModeInput(
        system_confidence=derive_system_confidence(records),
        critical_systems_coverage=compute_critical_systems_coverage(records),
        systems=list(systems),
    )
    background_mode = determine_chat_mode(inputs, thresholds)

    mode = background_mode
    if interpretive_requested:
        mode = determine_chat_mode(
            inputs.model_copy(update={"interpretive_requested": True}), thresholds
        )

    carried_previous = None
    if mode == ChatMode.INTERPRETIVE:
        carried_previous = background_mode
        if (
            previous_mode is not None
            and ChatMode(previous_mode) != ChatMode.INTERPRETIVE
            and not outranks_interpretive(previous_mode)
        ):
            carried_previous = ChatMode(previous_mode)

    return ChatModeContext(
        mode=mode,
        system_confidence=inputs.system_confidence,
        permits_found=has_permit_records(records),
        critical_systems_coverage=inputs.critical_systems_coverage,
        user_confirmed_systems=has_user_confirmed_systems(records),
        systems_with_low_confidence=find_low_confidence_systems(records),
        previous_mode=carried_previous,
        is_baseline_complete=is_baseline_complete(inputs, thresholds),
    )
