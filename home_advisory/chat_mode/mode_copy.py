"""
Mode-specific copy and behavior flags for the message-composition layer.

Baseline establishment never uses task language ("please upload",
"required", "you need to"). Allowed verbs across modes: watching,
monitoring, noting, preparing, confirming.
"""

from typing import Dict, List, Optional

from home_advisory.models.chat_mode import (
    ChatMode,
    ElevatedModeBehavior,
    ElevatedTone,
    ModeBehavior,
    OpeningMessage,
)

OPENING_MESSAGES: Dict[ChatMode, Optional[OpeningMessage]] = {
    ChatMode.SILENT_STEWARD: None,  # never speaks first
    ChatMode.BASELINE_ESTABLISHMENT: OpeningMessage(
        primary="I'm still forming the baseline I'll use to monitor this home.",
        secondary=(
            "I can share what I'm able to observe so far, "
            "or we can establish a clearer baseline together."
        ),
        clarifier="Photos of equipment labels are usually enough.",
    ),
    ChatMode.INTERPRETIVE: None,  # depends on the question asked
    ChatMode.PLANNING_WINDOW_ADVISORY: OpeningMessage(
        primary="Based on what you're seeing above, one of your systems is entering a planning window.",
        secondary="Nothing needs to be done yet. This is about being ready.",
    ),
    ChatMode.ELEVATED_ATTENTION: OpeningMessage(
        primary="I'm seeing something that warrants attention.",
        secondary="Let me explain what I'm observing.",
    ),
}

SUGGESTED_PROMPTS: Dict[ChatMode, List[str]] = {
    ChatMode.SILENT_STEWARD: [
        "What are you monitoring?",
        "Walk me through my home's status",
        "Any patterns you're seeing?",
    ],
    ChatMode.BASELINE_ESTABLISHMENT: [
        "Help establish a clearer baseline",
        "What information would improve accuracy?",
        "What can you tell from what you see now?",
    ],
    ChatMode.INTERPRETIVE: [
        "Tell me more",
        "What does that mean for me?",
        "How confident are you?",
    ],
    ChatMode.PLANNING_WINDOW_ADVISORY: [
        "Walk me through my options",
        "What happens if I wait?",
        "Help me understand the timeline",
    ],
    ChatMode.ELEVATED_ATTENTION: [
        "What are you seeing?",
        "How concerned should I be?",
        "What do you recommend?",
    ],
}

EMPTY_STATE_MESSAGES: Dict[ChatMode, str] = {
    ChatMode.SILENT_STEWARD: "All systems stable. What would you like to understand about your home?",
    ChatMode.BASELINE_ESTABLISHMENT: (
        "I'm monitoring with limited system history. "
        "I can share what I'm able to observe so far."
    ),
    ChatMode.INTERPRETIVE: "What would you like me to explain?",
    ChatMode.PLANNING_WINDOW_ADVISORY: "I can help you think through your options.",
    ChatMode.ELEVATED_ATTENTION: "I'm seeing something worth discussing. Ask me about it.",
}

MODE_BEHAVIORS: Dict[ChatMode, ModeBehavior] = {
    ChatMode.SILENT_STEWARD: ModeBehavior(
        show_upload_affordance=False,
        allow_cost_discussion=False,
        allow_timeline_specifics=False,
        allow_action_language=False,
        can_auto_initiate=False,
        max_consecutive_messages=3,
    ),
    ChatMode.BASELINE_ESTABLISHMENT: ModeBehavior(
        show_upload_affordance=True,
        allow_cost_discussion=False,
        allow_timeline_specifics=False,
        allow_action_language=False,
        can_auto_initiate=True,
        max_consecutive_messages=3,
    ),
    ChatMode.INTERPRETIVE: ModeBehavior(
        show_upload_affordance=False,
        allow_cost_discussion=False,
        allow_timeline_specifics=False,  # ranges only
        allow_action_language=False,
        can_auto_initiate=False,
        max_consecutive_messages=1,
    ),
    ChatMode.PLANNING_WINDOW_ADVISORY: ModeBehavior(
        show_upload_affordance=False,
        allow_cost_discussion=True,
        allow_timeline_specifics=True,
        allow_action_language=True,  # soft, preparation-focused
        can_auto_initiate=True,      # once per window entry
        max_consecutive_messages=3,
    ),
    ChatMode.ELEVATED_ATTENTION: ModeBehavior(
        show_upload_affordance=False,
        allow_cost_discussion=True,
        allow_timeline_specifics=True,
        allow_action_language=True,
        can_auto_initiate=True,
        max_consecutive_messages=3,
    ),
}


def get_opening_message(mode: ChatMode) -> Optional[OpeningMessage]:
    return OPENING_MESSAGES[ChatMode(mode)]


def format_opening_message(message: OpeningMessage) -> str:
    parts = [message.primary]
    if message.secondary:
        parts.append(message.secondary)
    if message.clarifier:
        parts.append(message.clarifier)
    return "\n\n".join(parts)


def get_prompts_for_mode(mode: ChatMode) -> List[str]:
    return list(SUGGESTED_PROMPTS[ChatMode(mode)])


def get_empty_state_for_mode(mode: ChatMode) -> str:
    return EMPTY_STATE_MESSAGES[ChatMode(mode)]


def get_mode_behavior(mode: ChatMode) -> ModeBehavior:
    return MODE_BEHAVIORS[ChatMode(mode)]


def get_elevated_behavior(baseline_complete: bool) -> ElevatedModeBehavior:
    """
    Incomplete baseline: elevated mode asks questions, gives no recommendations.
    Complete baseline: elevated mode is directive.
    """
    if not baseline_complete:
        return ElevatedModeBehavior(
            can_recommend=False,
            can_give_timelines=False,
            can_mention_costs=False,
            tone=ElevatedTone.QUESTIONING,
        )
    return ElevatedModeBehavior(
        can_recommend=True,
        can_give_timelines=True,
        can_mention_costs=True,
        tone=ElevatedTone.ADVISORY,
    )
