"""
PULSE AGGREGATOR — Unit Tests for the Per-Asset State Store
"""
from datetime import datetime, timezone

from pulse_aggregator.data.models import SourceRecord
from pulse_aggregator.data.state import MarketStateStore, SymbolState

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def source(name, price):
    return SourceRecord(name=name, price=price, timestamp=NOW, weight=0.5)


class TestSymbolState:
    def test_record_created_once(self):
        state = SymbolState("BTC")
        first = state.ensure_record(NOW)
        assert state.ensure_record(NOW) is first
        assert first.price is None
        assert first.is_stale is True

    def test_upsert_replaces_in_place(self):
        state = SymbolState("BTC")
        state.ensure_record(NOW)
        state.upsert_source(source("a", 1.0))
        state.upsert_source(source("b", 2.0))
        state.upsert_source(source("a", 3.0))
        names = [s.name for s in state.record.sources]
        assert names == ["a", "b"]
        assert state.record.sources[0].price == 3.0

    def test_history_eviction_keeps_latest_200(self):
        state = SymbolState("BTC", history_size=200)
        for i in range(250):
            state.append_price(float(i))
        history = state.price_history
        assert len(history) == 200
        assert history[0] == 50.0
        assert history[-1] == 249.0
        assert history == sorted(history)


class TestMarketStateStore:
    def test_ensure_and_get(self):
        store = MarketStateStore()
        state = store.ensure("ETH")
        assert store.get("ETH") is state
        assert store.ensure("ETH") is state
        assert store.get("SOL") is None
        assert "ETH" in store

    def test_records_skip_symbols_without_observations(self):
        store = MarketStateStore()
        store.ensure("ETH")
        store.ensure("BTC").ensure_record(NOW)
        assert [r.symbol for r in store.records()] == ["BTC"]
        assert len(store) == 2

    def test_history_size_applies_to_new_states(self):
        store = MarketStateStore(history_size=3)
        state = store.ensure("BTC")
        for p in [1.0, 2.0, 3.0, 4.0]:
            state.append_price(p)
        assert state.price_history == [2.0, 3.0, 4.0]

    def test_clear(self):
        store = MarketStateStore()
        store.ensure("BTC").ensure_record(NOW)
        store.clear()
        assert len(store) == 0
        assert store.records() == []
        assert store.stats["symbols"] == 0
