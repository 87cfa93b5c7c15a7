"""
PULSE AGGREGATOR — Unit Tests for the Trend Classifier
"""
import pytest

from pulse_aggregator.data.models import MarketTrend, Signal, TechnicalIndicator, TrendDirection
from pulse_aggregator.engines.trend_classifier import TrendClassifier


def ind(signal: Signal, strength: float, name: str = "X") -> TechnicalIndicator:
    return TechnicalIndicator(name=name, value=1.0, signal=signal, strength=strength)


class TestTrendClassifier:
    def test_bullish_majority(self):
        direction, strength = TrendClassifier().determine_trend(
            [ind(Signal.BUY, 30), ind(Signal.BUY, 10), ind(Signal.SELL, 20)], 0.0
        )
        assert direction == TrendDirection.BULLISH
        assert strength == pytest.approx(20.0)

    def test_bearish_majority(self):
        direction, _ = TrendClassifier().determine_trend(
            [ind(Signal.SELL, 5), ind(Signal.NEUTRAL, 0), ind(Signal.SELL, 5)], 0.0
        )
        assert direction == TrendDirection.BEARISH

    def test_tie_is_neutral_with_half_strength(self):
        direction, strength = TrendClassifier().determine_trend(
            [ind(Signal.BUY, 40), ind(Signal.SELL, 20), ind(Signal.NEUTRAL, 0)], 0.0
        )
        assert direction == TrendDirection.NEUTRAL
        assert strength == pytest.approx(10.0)

    @pytest.mark.parametrize("change,expected", [
        (2.5, TrendDirection.BULLISH),
        (-2.5, TrendDirection.BEARISH),
        (2.0, TrendDirection.NEUTRAL),
        (-2.0, TrendDirection.NEUTRAL),
    ])
    def test_price_change_vote(self, change, expected):
        direction, _ = TrendClassifier().determine_trend([ind(Signal.NEUTRAL, 0)] * 3, change)
        assert direction == expected

    def test_price_change_breaks_tie(self):
        direction, _ = TrendClassifier().determine_trend(
            [ind(Signal.BUY, 10), ind(Signal.SELL, 10)], -5.0
        )
        assert direction == TrendDirection.BEARISH

    def test_strength_capped_at_100(self):
        _, strength = TrendClassifier().determine_trend([ind(Signal.BUY, 900), ind(Signal.BUY, 300)], 0.0)
        assert strength == 100.0

    def test_classify_builds_market_trend(self):
        indicators = [ind(Signal.BUY, 12, "SMA20"), ind(Signal.NEUTRAL, 0, "RSI"), ind(Signal.BUY, 3, "MACD")]
        trend = TrendClassifier().classify("BTC", indicators, 1.0)
        assert isinstance(trend, MarketTrend)
        assert trend.symbol == "BTC"
        assert trend.direction == TrendDirection.BULLISH
        assert trend.timeframe == "24h"
        assert trend.strength == pytest.approx(5.0)
        assert [i.name for i in trend.indicators] == ["SMA20", "RSI", "MACD"]
