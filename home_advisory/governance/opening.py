"""
Baseline opening flag — the baseline_establishment opening message is shown
at most once per session.

Lives in the session-scoped store, so a new session shows the opening again.
"""

import logging

from home_advisory.governance.fallback import STORAGE_FAULTS, handle_storage_fault
from home_advisory.storage.kv import KeyValueStore

logger = logging.getLogger("home_advisory.governance")

BASELINE_OPENING_SHOWN_KEY = "habitta_baseline_opening_shown"


class BaselineOpeningFlag:
    def __init__(self, session_store: KeyValueStore):
        self.session_store = session_store

    def was_shown(self) -> bool:
        """An unreadable flag reads as not shown under fail-open."""
        try:
            return self.session_store.get(BASELINE_OPENING_SHOWN_KEY) == "true"
        except STORAGE_FAULTS as e:
            return handle_storage_fault(e, "read baseline opening flag", False)

    def mark_shown(self) -> None:
        try:
            self.session_store.set(BASELINE_OPENING_SHOWN_KEY, "true")
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, "mark baseline opening shown", None)

    def clear(self) -> None:
        try:
            self.session_store.delete(BASELINE_OPENING_SHOWN_KEY)
        except STORAGE_FAULTS as e:
            handle_storage_fault(e, "clear baseline opening flag", None)

    def claim(self) -> bool:
        """
        True the first time it is called in a session, False afterwards.
        Marks the flag on the way out.
        """
        if self.was_shown():
            return False
        self.mark_shown()
        logger.debug("Baseline opening shown for this session")
        return True
