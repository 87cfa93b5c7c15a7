"""
PULSE AGGREGATOR — Unit Tests for the Notification Channel
"""
import pytest

from pulse_aggregator.engines.events import EngineEvent, EventBus


class TestEventBus:
    def test_emit_reaches_subscribers_in_order(self):
        bus = EventBus()
        seen = []
        bus.subscribe(EngineEvent.STARTED, lambda p: seen.append(("first", p["n"])))
        bus.subscribe(EngineEvent.STARTED, lambda p: seen.append(("second", p["n"])))
        assert bus.emit(EngineEvent.STARTED, {"n": 1}) == 2
        assert seen == [("first", 1), ("second", 1)]

    def test_events_are_isolated(self):
        bus = EventBus()
        seen = []
        bus.subscribe(EngineEvent.STOPPED, seen.append)
        bus.emit(EngineEvent.STARTED, {})
        assert seen == []

    def test_unsubscribe_callable(self):
        bus = EventBus()
        seen = []
        unsubscribe = bus.subscribe(EngineEvent.ERROR, seen.append)
        unsubscribe()
        bus.emit(EngineEvent.ERROR, {"type": "x"})
        assert seen == []
        assert bus.subscriber_count(EngineEvent.ERROR) == 0

    def test_unsubscribe_unknown_handler(self):
        assert EventBus().unsubscribe(EngineEvent.ERROR, print) is False

    def test_failing_handler_does_not_block_others(self):
        bus = EventBus()
        seen = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe(EngineEvent.DATA_UPDATED, broken)
        bus.subscribe(EngineEvent.DATA_UPDATED, seen.append)
        delivered = bus.emit(EngineEvent.DATA_UPDATED, {"symbol": "BTC"})
        assert delivered == 1
        assert seen == [{"symbol": "BTC"}]

    def test_string_event_names(self):
        bus = EventBus()
        seen = []
        bus.subscribe("marketSummaryUpdated", seen.append)
        bus.emit(EngineEvent.MARKET_SUMMARY_UPDATED, {})
        assert len(seen) == 1

    def test_unknown_event_name_rejected(self):
        with pytest.raises(ValueError):
            EventBus().subscribe("priceExploded", print)

    def test_clear(self):
        bus = EventBus()
        bus.subscribe(EngineEvent.STARTED, print)
        bus.subscribe(EngineEvent.STOPPED, print)
        assert bus.subscriber_count() == 2
        bus.clear()
        assert bus.subscriber_count() == 0
