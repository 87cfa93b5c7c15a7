"""
PULSE AGGREGATOR — Unit Tests for the Market Summary Generator
"""
import pytest
from datetime import datetime, timezone

from pulse_aggregator.data.models import AggregatedRecord, TrendDirection
from pulse_aggregator.engines.market_summary import MarketSummaryGenerator

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def rec(symbol, confidence=90.0, change=0.0, volatility=0.0, cap=0.0, volume=0.0, stale=False):
    return AggregatedRecord(
        symbol=symbol,
        price=1.0,
        price_change_24h=change,
        volume_24h=volume,
        market_cap=cap,
        volatility=volatility,
        timestamp=NOW,
        confidence=confidence,
        is_stale=stale,
    )


class TestMarketSummaryGenerator:
    def test_confidence_filter(self):
        records = [rec("A", confidence=90), rec("B", confidence=50), rec("C", confidence=85)]
        summary = MarketSummaryGenerator(confidence_threshold=70).generate(records, NOW)
        ranked = {r.symbol for r in summary.top_gainers + summary.top_losers + summary.most_volatile}
        assert ranked == {"A", "C"}
        assert summary.symbols_considered == 2

    def test_threshold_is_inclusive(self):
        summary = MarketSummaryGenerator(confidence_threshold=70).generate([rec("A", confidence=70)])
        assert summary.symbols_considered == 1

    def test_stale_records_excluded(self):
        summary = MarketSummaryGenerator().generate([rec("A"), rec("B", stale=True)])
        assert [r.symbol for r in summary.top_gainers] == ["A"]

    def test_rankings_are_top_five(self):
        changes = {"A": 5.0, "B": -4.0, "C": 1.0, "D": 9.0, "E": -8.0, "F": 0.5, "G": 3.0}
        records = [rec(s, change=c, volatility=abs(c)) for s, c in changes.items()]
        summary = MarketSummaryGenerator().generate(records, NOW)

        assert [r.symbol for r in summary.top_gainers] == ["D", "A", "G", "C", "F"]
        assert [r.symbol for r in summary.top_losers] == ["E", "B", "F", "C", "G"]
        assert [r.symbol for r in summary.most_volatile] == ["D", "E", "A", "B", "G"]

    def test_totals(self):
        records = [rec("A", cap=100.0, volume=10.0), rec("B", cap=250.0, volume=5.0),
                   rec("C", cap=1e9, volume=1e9, confidence=10)]
        summary = MarketSummaryGenerator().generate(records)
        assert summary.total_market_cap == pytest.approx(350.0)
        assert summary.total_volume_24h == pytest.approx(15.0)

    @pytest.mark.parametrize("changes,expected", [
        ([3.0, 1.0], TrendDirection.BULLISH),
        ([-3.0, -1.0], TrendDirection.BEARISH),
        ([1.0, 1.0], TrendDirection.NEUTRAL),
        ([5.0, -5.0], TrendDirection.NEUTRAL),
    ])
    def test_market_direction(self, changes, expected):
        records = [rec(f"S{i}", change=c) for i, c in enumerate(changes)]
        assert MarketSummaryGenerator().generate(records).market_trend == expected

    def test_empty_market_is_neutral(self):
        summary = MarketSummaryGenerator().generate([], NOW)
        assert summary.market_trend == TrendDirection.NEUTRAL
        assert summary.total_market_cap == 0
        assert summary.top_gainers == []
        assert summary.last_updated == NOW
