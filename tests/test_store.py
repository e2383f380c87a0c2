"""Tests for the key-value store and WidgetStore."""

import pytest

from desk_core.errors import StoreError
from desk_core.store import KeyValueStore, WidgetStore, format_amount


class TestKeyValueStore:

    def test_missing_key_returns_default(self, store):
        assert store.get("nope") is None
        assert store.get("nope", "x") == "x"
        assert store.get_int("nope", 7) == 7

    def test_set_overwrites(self, store):
        store.set("k", 1)
        store.set("k", 2)
        assert store.get("k") == "2"
        assert store.get_int("k") == 2

    def test_transaction_rolls_back_on_error(self, store):
        store.set("k", "before")
        with pytest.raises(RuntimeError):
            with store.transaction() as tx:
                tx.set("k", "after")
                raise RuntimeError("boom")
        assert store.get("k") == "before"

    def test_path(self, tmp_path):
        assert KeyValueStore(tmp_path / "a.db").path == str(tmp_path / "a.db")

    def test_values_visible_to_another_instance(self, tmp_path):
        path = tmp_path / "shared.db"
        KeyValueStore(path).set("k", "v")
        assert KeyValueStore(path).get("k") == "v"

    def test_get_int_rejects_text(self, store):
        store.set("k", "abc")
        with pytest.raises(StoreError):
            store.get_int("k")

    def test_unopenable_path_raises_store_error(self, tmp_path):
        with pytest.raises(StoreError):
            KeyValueStore(tmp_path / "missing-dir" / "state.db")


class TestWidgetStore:

    def test_default_when_never_written(self, store):
        assert WidgetStore(store).get() == "₹0"

    def test_set_then_get(self, store):
        widget = WidgetStore(store)
        widget.set("₹152000")
        assert widget.get() == "₹152000"

    def test_last_write_wins(self, store):
        widget = WidgetStore(store)
        widget.set("₹1")
        widget.set("₹2")
        assert widget.get() == "₹2"

    def test_shared_between_processes_by_file(self, tmp_path):
        path = tmp_path / "state.db"
        WidgetStore(KeyValueStore(path)).set("₹99")
        assert WidgetStore(KeyValueStore(path)).get() == "₹99"


class TestFormatAmount:

    def test_whole_rupees_without_separators(self):
        assert format_amount(152000) == "₹152000"

    def test_zero(self):
        assert format_amount(0) == "₹0"
