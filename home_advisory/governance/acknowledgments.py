"""
Planning window acknowledgments — remembers that the user has already seen a
system's planning window, so the advisor does not raise it again.

Persisted as a JSON array of {system_key, acknowledged_at, window_entered_at},
one entry per system, last write wins.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter

from home_advisory.governance.fallback import STORAGE_FAULTS, handle_storage_fault
from home_advisory.models.governance import PlanningWindowAcknowledgment
from home_advisory.storage.kv import KeyValueStore

logger = logging.getLogger("home_advisory.governance")

PLANNING_ACK_KEY = "habitta_planning_ack"

_acks_adapter = TypeAdapter(List[PlanningWindowAcknowledgment])


class PlanningAcknowledgments:
    """Per-system acknowledgment store over an injected key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_acknowledgments(self) -> List[PlanningWindowAcknowledgment]:
        try:
            raw = self.store.get(PLANNING_ACK_KEY)
            if not raw:
                return []
            return _acks_adapter.validate_json(raw)
        except STORAGE_FAULTS as e:
            return handle_storage_fault(e, "load planning acknowledgments", [])

    def _write(self, acks: List[PlanningWindowAcknowledgment], operation: str) -> None:
        try:
            self.store.set(
                PLANNING_ACK_KEY,
                json.dumps([a.model_dump(mode="json") for a in acks]),
            )
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, operation, None)

    def acknowledge(
        self, system_key: str, current_time: Optional[datetime] = None
    ) -> PlanningWindowAcknowledgment:
        """Upsert: replace the system's entry if present, else append."""
        if current_time is None:
            current_time = datetime.now(timezone.utc)

        ack = PlanningWindowAcknowledgment(
            system_key=system_key,
            acknowledged_at=current_time,
            window_entered_at=current_time,
        )

        acks = self.get_acknowledgments()
        for i, existing in enumerate(acks):
            if existing.system_key == system_key:
                acks[i] = ack
                break
        else:
            acks.append(ack)

        self._write(acks, "acknowledge planning window")
        logger.debug("Planning window acknowledged for %s", system_key)
        return ack

    def was_acknowledged(self, system_key: str) -> bool:
        return any(a.system_key == system_key for a in self.get_acknowledgments())

    def get(self, system_key: str) -> Optional[PlanningWindowAcknowledgment]:
        return next(
            (a for a in self.get_acknowledgments() if a.system_key == system_key),
            None,
        )

    def clear(self, system_key: str) -> None:
        acks = [a for a in self.get_acknowledgments() if a.system_key != system_key]
        self._write(acks, "clear planning acknowledgment")

    def clear_all(self) -> None:
        try:
            self.store.delete(PLANNING_ACK_KEY)
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, "clear planning acknowledgments", None)
