"""
PULSE AGGREGATOR — Trend Classifier
Turns an indicator set plus the 24h price change into a directional call.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from pulse_aggregator.data.models import MarketTrend, Signal, TechnicalIndicator, TrendDirection
from pulse_aggregator.utils.helpers import utc_now

PRICE_CHANGE_VOTE_PCT = 2.0


class TrendClassifier:
    """
    Majority vote over indicator signals.

    Every buy indicator is a bullish vote, every sell indicator a bearish
    one; a 24h change above +2% or below -2% adds one more vote. Strength is
    the mean indicator strength, halved for a neutral call, capped at 100.
    """

    def __init__(self, timeframe: str = "24h", vote_threshold_pct: float = PRICE_CHANGE_VOTE_PCT):
        self.timeframe = timeframe
        self.vote_threshold_pct = vote_threshold_pct

    def determine_trend(
        self, indicators: List[TechnicalIndicator], price_change_24h: float
    ) -> Tuple[TrendDirection, float]:
        bullish = sum(1 for i in indicators if i.signal == Signal.BUY)
        bearish = sum(1 for i in indicators if i.signal == Signal.SELL)

        if price_change_24h > self.vote_threshold_pct:
            bullish += 1
        elif price_change_24h < -self.vote_threshold_pct:
            bearish += 1

        avg_strength = sum(i.strength for i in indicators) / len(indicators) if indicators else 0.0

        if bullish > bearish:
            return TrendDirection.BULLISH, min(100.0, avg_strength)
        elif bearish > bullish:
            return TrendDirection.BEARISH, min(100.0, avg_strength)
        return TrendDirection.NEUTRAL, min(100.0, avg_strength / 2)

    def classify(
        self,
        symbol: str,
        indicators: List[TechnicalIndicator],
        price_change_24h: float,
        now: Optional[datetime] = None,
    ) -> MarketTrend:
        direction, strength = self.determine_trend(indicators, price_change_24h)
        return MarketTrend(
            symbol=symbol,
            direction=direction,
            strength=strength,
            timeframe=self.timeframe,
            indicators=indicators,
            timestamp=now or utc_now(),
        )
