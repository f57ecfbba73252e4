"""Tests for key-value stores and logging setup."""

import logging

import pytest

from home_advisory.governance.cadence import TriggerCadence
from home_advisory.logging_config import setup_logging
from home_advisory.storage.kv import InMemoryKeyValueStore, SQLiteKeyValueStore, StorageError


class TestInMemoryStore:
    def test_get_set_delete(self):
        store = InMemoryKeyValueStore()
        assert store.get("k") is None
        store.set("k", "v")
        assert store.get("k") == "v"
        store.delete("k")
        assert store.get("k") is None

    def test_delete_missing_is_noop(self):
        InMemoryKeyValueStore().delete("missing")

    def test_initial_is_copied(self):
        initial = {"a": "1"}
        store = InMemoryKeyValueStore(initial)
        store.set("b", "2")
        assert initial == {"a": "1"}
        assert sorted(store.keys()) == ["a", "b"]


class TestSQLiteStore:
    def test_roundtrip(self, tmp_path):
        store = SQLiteKeyValueStore(str(tmp_path / "advisory.db"))
        store.set("k", "v1")
        store.set("k", "v2")
        assert store.get("k") == "v2"
        store.delete("k")
        assert store.get("k") is None
        store.close()

    def test_persists_across_connections(self, tmp_path):
        path = str(tmp_path / "advisory.db")
        first = SQLiteKeyValueStore(path)
        first.set("habitta_trigger_history", "[]")
        first.close()

        second = SQLiteKeyValueStore(path)
        assert second.get("habitta_trigger_history") == "[]"
        second.close()

    def test_closed_connection_raises_storage_error(self):
        store = SQLiteKeyValueStore()
        store.close()
        with pytest.raises(StorageError):
            store.get("k")
        with pytest.raises(StorageError):
            store.set("k", "v")
        with pytest.raises(StorageError):
            store.delete("k")

    def test_cadence_fails_open_on_closed_store(self):
        store = SQLiteKeyValueStore()
        store.close()
        assert TriggerCadence(store).can_auto_open("hvac_planning")


class TestLoggingSetup:
    def setup_method(self):
        self.logger = logging.getLogger("home_advisory")
        self.saved = list(self.logger.handlers)
        for handler in self.saved:
            self.logger.removeHandler(handler)

    def teardown_method(self):
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()
        for handler in self.saved:
            self.logger.addHandler(handler)

    def test_console_only_without_log_dir(self):
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_file_handler_with_log_dir(self, tmp_path):
        logger = setup_logging(tmp_path / "logs")
        logging.getLogger("home_advisory.scoring").debug("scored")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        assert "scored" in (tmp_path / "logs" / "home_advisory.log").read_text()

    def test_repeated_calls_do_not_duplicate(self):
        setup_logging()
        assert len(setup_logging().handlers) == 1
