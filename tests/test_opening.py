"""Tests for the once-per-session baseline opening flag."""

import logging

import pytest

from home_advisory.governance import fallback
from home_advisory.governance.fallback import FallbackPolicy, StorageFault
from home_advisory.governance.opening import BASELINE_OPENING_SHOWN_KEY, BaselineOpeningFlag
from home_advisory.storage.kv import InMemoryKeyValueStore


class TestBaselineOpeningFlag:
    def setup_method(self):
        self.store = InMemoryKeyValueStore()
        self.flag = BaselineOpeningFlag(self.store)

    def test_not_shown_initially(self):
        assert not self.flag.was_shown()

    def test_mark_shown(self):
        self.flag.mark_shown()
        assert self.flag.was_shown()
        assert self.store.get(BASELINE_OPENING_SHOWN_KEY) == "true"

    def test_only_true_string_counts(self):
        self.store.set(BASELINE_OPENING_SHOWN_KEY, "yes")
        assert not self.flag.was_shown()

    def test_clear(self):
        self.flag.mark_shown()
        self.flag.clear()
        assert not self.flag.was_shown()

    def test_claim_once(self):
        assert self.flag.claim()
        assert not self.flag.claim()

    def test_new_session_store_claims_again(self):
        self.flag.claim()
        assert BaselineOpeningFlag(InMemoryKeyValueStore()).claim()


class TestOpeningFlagStorageFaults:
    def test_unavailable_store_reads_not_shown(self, unavailable_store, caplog):
        flag = BaselineOpeningFlag(unavailable_store)
        with caplog.at_level(logging.WARNING, logger="home_advisory.governance"):
            assert not flag.was_shown()
            flag.mark_shown()
            flag.clear()
        assert "baseline opening" in caplog.text

    def test_fail_closed_raises(self, unavailable_store, monkeypatch):
        monkeypatch.setattr(fallback, "STORAGE_FALLBACK_POLICY", FallbackPolicy.FAIL_CLOSED)
        with pytest.raises(StorageFault, match="read baseline opening flag"):
            BaselineOpeningFlag(unavailable_store).was_shown()
