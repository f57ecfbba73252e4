"""
Home Advisory API — FastAPI endpoints.

Exposes the decision engine to the dashboard UI:
- Priority scoring (primary focus system)
- Confidence derivation
- Chat mode context and mode copy
- Per-session chat governance
- Trigger cadence
- Planning window acknowledgments
"""

import logging
import os
import threading
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from home_advisory.chat_mode.mode_copy import (
    get_elevated_behavior,
    get_empty_state_for_mode,
    get_mode_behavior,
    get_opening_message,
    get_prompts_for_mode,
)
from home_advisory.chat_mode.selector import (
    build_chat_mode_context,
    enter_interpretive,
    get_chat_mode_label,
    resolve_interpretive_return,
    should_enter_interpretive,
)
from home_advisory.confidence.derivation import (
    compute_critical_systems_coverage,
    derive_system_confidence,
    find_low_confidence_systems,
    has_permit_records,
    has_user_confirmed_systems,
)
from home_advisory.governance.acknowledgments import PlanningAcknowledgments
from home_advisory.governance.cadence import TriggerCadence
from home_advisory.governance.opening import BaselineOpeningFlag
from home_advisory.governance.session import (
    can_auto_initiate,
    can_send_agent_message,
    create_initial_governance_state,
    exit_interpretive_mode,
    record_agent_message,
    record_auto_initiation,
    record_user_message,
    should_exit_interpretive,
)
from home_advisory.logging_config import setup_logging
from home_advisory.models.chat_mode import ChatMode, ChatModeThresholds
from home_advisory.models.governance import (
    CadenceRules,
    ChatGovernanceState,
    GovernanceRules,
)
from home_advisory.models.scoring import ClimateRisk
from home_advisory.models.system import SystemModeInput, SystemTimelineEntry
from home_advisory.scoring.priority import select_primary_system
from home_advisory.storage.kv import InMemoryKeyValueStore, KeyValueStore

logger = logging.getLogger("home_advisory.api")


# --- Request/Response Models ---

class PrioritySelectRequest(BaseModel):
    systems: List[SystemTimelineEntry] = []
    climate_risk: Optional[ClimateRisk] = None


class ConfidenceRequest(BaseModel):
    systems: List[Any] = []                 # loose: malformed records are tolerated


class ChatModeContextRequest(BaseModel):
    records: List[Any] = []
    systems: List[SystemModeInput] = []
    previous_mode: Optional[ChatMode] = None
    user_message: Optional[str] = None
    session_id: Optional[str] = None        # limits the baseline opening to once per session


class SessionEvent(str, Enum):
    USER_MESSAGE = "user_message"
    AGENT_MESSAGE = "agent_message"
    AUTO_INITIATION = "auto_initiation"
    ENTER_INTERPRETIVE = "enter_interpretive"
    EXIT_INTERPRETIVE = "exit_interpretive"


class SetModeRequest(BaseModel):
    mode: ChatMode


class ChatSession:
    """Governance state and session-scoped storage for one chat session."""

    def __init__(self, session_id: str):
        self.id = session_id
        self.state: ChatGovernanceState = create_initial_governance_state()
        self.mode: ChatMode = ChatMode.SILENT_STEWARD
        self.store = InMemoryKeyValueStore()


# --- Application Factory ---

def create_app(
    store: Optional[KeyValueStore] = None,
    governance_rules: Optional[GovernanceRules] = None,
    cadence_rules: Optional[CadenceRules] = None,
    thresholds: Optional[ChatModeThresholds] = None,
    log_dir: Optional[str] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(log_dir or os.environ.get("HOME_ADVISORY_LOG_DIR"))

    app = FastAPI(
        title="Home Advisory API",
        description="Home Advisory Decision Engine",
        version="0.1.0",
    )

    device_store = store if store is not None else InMemoryKeyValueStore()
    rules = governance_rules or GovernanceRules()
    cadence_config = cadence_rules or CadenceRules()
    mode_thresholds = thresholds or ChatModeThresholds()
    acknowledgments = PlanningAcknowledgments(device_store)

    sessions: Dict[str, ChatSession] = {}
    sessions_lock = threading.Lock()

    app.state.store = device_store
    app.state.acknowledgments = acknowledgments
    app.state.sessions = sessions
    app.state.sessions_lock = sessions_lock

    def _get_session(session_id: str) -> ChatSession:
        session = sessions.get(session_id)
        if not session:
            raise HTTPException(404, "Session not found")
        return session

    def _session_view(session: ChatSession) -> dict:
        return {
            "id": session.id,
            "mode": session.mode.value,
            "state": session.state.model_dump(mode="json"),
            "guards": {
                "can_auto_initiate": can_auto_initiate(session.state, rules),
                "can_send_agent_message": can_send_agent_message(session.state, rules),
                "should_exit_interpretive": should_exit_interpretive(session.state, rules),
            },
        }

    def _cadence_for(session: ChatSession) -> TriggerCadence:
        return TriggerCadence(device_store, session_store=session.store, rules=cadence_config)

    # === PRIORITY SCORING ===

    @app.post("/priority/select")
    def select_priority(req: PrioritySelectRequest):
        """Rank systems and return the primary focus."""
        selection = select_primary_system(req.systems, climate_risk=req.climate_risk)
        return selection.model_dump(mode="json")

    # === CONFIDENCE ===

    @app.post("/confidence/derive")
    def derive_confidence(req: ConfidenceRequest):
        """Confidence bucket, coverage and per-system flags for a home."""
        return {
            "system_confidence": derive_system_confidence(req.systems).value,
            "critical_systems_coverage": compute_critical_systems_coverage(req.systems),
            "user_confirmed_systems": has_user_confirmed_systems(req.systems),
            "permits_found": has_permit_records(req.systems),
            "systems_with_low_confidence": find_low_confidence_systems(req.systems),
        }

    # === CHAT MODE ===

    @app.post("/chat-mode/context")
    def chat_mode_context(req: ChatModeContextRequest):
        """Select the chat mode and return the copy and behavior it allows."""
        interpretive = bool(req.user_message) and should_enter_interpretive(req.user_message)
        context = build_chat_mode_context(
            records=req.records,
            systems=req.systems,
            previous_mode=req.previous_mode,
            interpretive_requested=interpretive,
            thresholds=mode_thresholds,
        )
        opening = get_opening_message(context.mode)
        if req.session_id is not None:
            with sessions_lock:
                session = _get_session(req.session_id)
                if context.mode == ChatMode.BASELINE_ESTABLISHMENT:
                    if not BaselineOpeningFlag(session.store).claim():
                        opening = None
        response = {
            "context": context.model_dump(mode="json"),
            "label": get_chat_mode_label(context.mode),
            "behavior": get_mode_behavior(context.mode).model_dump(),
            "opening_message": opening.model_dump() if opening else None,
            "suggested_prompts": get_prompts_for_mode(context.mode),
            "empty_state": get_empty_state_for_mode(context.mode),
            "elevated_behavior": None,
        }
        if context.mode == ChatMode.ELEVATED_ATTENTION:
            response["elevated_behavior"] = get_elevated_behavior(
                context.is_baseline_complete
            ).model_dump(mode="json")
        return response

    # === SESSIONS ===

    @app.post("/sessions")
    def create_session():
        """Start a chat session with fresh governance state."""
        session = ChatSession(f"sess_{uuid4().hex[:12]}")
        with sessions_lock:
            sessions[session.id] = session
        logger.debug("Created chat session %s", session.id)
        return _session_view(session)

    @app.get("/sessions/{session_id}")
    def get_session(session_id: str):
        return _session_view(_get_session(session_id))

    @app.put("/sessions/{session_id}/mode")
    def set_session_mode(session_id: str, req: SetModeRequest):
        """Record the mode selected for this session."""
        with sessions_lock:
            session = _get_session(session_id)
            session.mode = req.mode
        return _session_view(session)

    @app.post("/sessions/{session_id}/events/{event}")
    def apply_session_event(session_id: str, event: SessionEvent):
        """Apply one governance transition, in arrival order."""
        with sessions_lock:
            session = _get_session(session_id)
            state = session.state

            if event == SessionEvent.USER_MESSAGE:
                state = record_user_message(state)
            elif event == SessionEvent.AGENT_MESSAGE:
                state = record_agent_message(state)
                session.mode, state = resolve_interpretive_return(session.mode, state, rules)
            elif event == SessionEvent.AUTO_INITIATION:
                state = record_auto_initiation(state)
            elif event == SessionEvent.ENTER_INTERPRETIVE:
                session.mode, state = enter_interpretive(session.mode, state)
            elif event == SessionEvent.EXIT_INTERPRETIVE:
                if session.mode == ChatMode.INTERPRETIVE:
                    session.mode = state.previous_mode or ChatMode.SILENT_STEWARD
                state = exit_interpretive_mode(state)

            session.state = state
        return _session_view(session)

    # === CADENCE ===

    @app.get("/sessions/{session_id}/cadence/{trigger_key}")
    def check_cadence(session_id: str, trigger_key: str):
        """Whether this trigger may auto-open the advisor now."""
        with sessions_lock:
            cadence = _cadence_for(_get_session(session_id))
            return {
                "trigger_key": trigger_key,
                "can_auto_open": cadence.can_auto_open(trigger_key),
                "session_auto_opens": cadence.get_session_auto_opens(),
            }

    @app.post("/sessions/{session_id}/cadence/{trigger_key}")
    def record_cadence(session_id: str, trigger_key: str):
        """Record an auto-open for this trigger."""
        with sessions_lock:
            cadence = _cadence_for(_get_session(session_id))
            cadence.record_auto_open(trigger_key)
            return {
                "trigger_key": trigger_key,
                "can_auto_open": cadence.can_auto_open(trigger_key),
                "session_auto_opens": cadence.get_session_auto_opens(),
            }

    # === PLANNING ACKNOWLEDGMENTS ===

    @app.get("/acknowledgments")
    def list_acknowledgments():
        return [a.model_dump(mode="json") for a in acknowledgments.get_acknowledgments()]

    @app.get("/acknowledgments/{system_key}")
    def get_acknowledgment(system_key: str):
        ack = acknowledgments.get(system_key)
        if not ack:
            raise HTTPException(404, "Acknowledgment not found")
        return ack.model_dump(mode="json")

    @app.put("/acknowledgments/{system_key}")
    def acknowledge_planning_window(system_key: str):
        """Mark a system's planning window as acknowledged."""
        return acknowledgments.acknowledge(system_key).model_dump(mode="json")

    @app.delete("/acknowledgments/{system_key}")
    def clear_acknowledgment(system_key: str):
        acknowledgments.clear(system_key)
        return {"status": "cleared", "system_key": system_key}

    @app.delete("/acknowledgments")
    def clear_all_acknowledgments():
        acknowledgments.clear_all()
        return {"status": "cleared"}

    return app


# Default application instance
app = create_app()
