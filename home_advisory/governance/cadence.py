"""
Trigger Cadence — how often the advisor may open itself.

CADENCE RULES (CadenceRules defaults):
- The same trigger may not auto-open again within 24 hours
- At most 2 auto-opens per session

Persisted layout:
- trigger history (device-scoped): JSON array of {"key", "timestamp"}, epoch ms
- session auto-open counter (session-scoped): decimal string

Behavioral Contract:
- Entries older than the cooldown are discarded on every read
- Reads and writes are best-effort; faults go through handle_storage_fault
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter

from home_advisory.governance.fallback import STORAGE_FAULTS, handle_storage_fault
from home_advisory.models.governance import CadenceRules, TriggerHistoryEntry
from home_advisory.storage.kv import KeyValueStore, StorageError

logger = logging.getLogger("home_advisory.governance")

TRIGGER_HISTORY_KEY = "habitta_trigger_history"
SESSION_AUTO_OPENS_KEY = "habitta_session_auto_opens"

_history_adapter = TypeAdapter(List[TriggerHistoryEntry])


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class TriggerCadence:
    """
    Cooldown and session cap for advisor auto-opens.

    store holds the trigger history; session_store holds the per-session
    counter (defaults to store).
    """

    def __init__(
        self,
        store: KeyValueStore,
        session_store: Optional[KeyValueStore] = None,
        rules: Optional[CadenceRules] = None,
    ):
        self.store = store
        self.session_store = session_store if session_store is not None else store
        self.rules = rules or CadenceRules()

    def load_trigger_history(
        self, current_time: Optional[datetime] = None
    ) -> List[TriggerHistoryEntry]:
        """Trigger history with expired entries filtered out."""
        if current_time is None:
            current_time = datetime.now(timezone.utc)

        try:
            raw = self.store.get(TRIGGER_HISTORY_KEY)
            if not raw:
                return []
            history = _history_adapter.validate_json(raw)
        except STORAGE_FAULTS as e:
            return handle_storage_fault(e, "load trigger history", [])

        now_ms = _epoch_ms(current_time)
        window_ms = self.rules.min_seconds_between_same_trigger * 1000
        return [entry for entry in history if now_ms - entry.timestamp < window_ms]

    def save_trigger_to_history(
        self, trigger_key: str, current_time: Optional[datetime] = None
    ) -> None:
        if current_time is None:
            current_time = datetime.now(timezone.utc)

        history = self.load_trigger_history(current_time)
        history.append(TriggerHistoryEntry(key=trigger_key, timestamp=_epoch_ms(current_time)))
        try:
            self.store.set(
                TRIGGER_HISTORY_KEY,
                json.dumps([entry.model_dump() for entry in history]),
            )
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, "save trigger history", None)

    def get_session_auto_opens(self) -> int:
        try:
            raw = self.session_store.get(SESSION_AUTO_OPENS_KEY)
        except STORAGE_FAULTS as e:
            return handle_storage_fault(e, "read session auto-opens", 0)
        if not raw:
            return 0
        try:
            count = int(raw)
        except ValueError:
            count = -1
        if count < 0:
            return handle_storage_fault(
                StorageError(f"corrupt session counter {raw!r}"), "read session auto-opens", 0
            )
        return count

    def increment_session_auto_opens(self) -> None:
        count = self.get_session_auto_opens()
        try:
            self.session_store.set(SESSION_AUTO_OPENS_KEY, str(count + 1))
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, "increment session auto-opens", None)

    def is_trigger_cooling_down(
        self, trigger_key: str, current_time: Optional[datetime] = None
    ) -> bool:
        return any(
            entry.key == trigger_key
            for entry in self.load_trigger_history(current_time)
        )

    def can_auto_open(
        self, trigger_key: str, current_time: Optional[datetime] = None
    ) -> bool:
        """Session cap not reached and this trigger has not fired in the window."""
        if self.get_session_auto_opens() >= self.rules.max_auto_opens_per_session:
            logger.debug("Auto-open %s blocked: session cap reached", trigger_key)
            return False
        if self.is_trigger_cooling_down(trigger_key, current_time):
            logger.debug("Auto-open %s blocked: trigger cooling down", trigger_key)
            return False
        return True

    def record_auto_open(
        self, trigger_key: str, current_time: Optional[datetime] = None
    ) -> None:
        self.save_trigger_to_history(trigger_key, current_time)
        self.increment_session_auto_opens()
