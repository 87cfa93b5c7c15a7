"""
PULSE AGGREGATOR — Market Summary Generator
Ranks the trusted records into gainers, losers and volatility leaders.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from pulse_aggregator.data.models import AggregatedRecord, MarketSummary, TrendDirection
from pulse_aggregator.utils.helpers import utc_now

MARKET_TREND_PCT = 1.0


class MarketSummaryGenerator:
    """Builds a MarketSummary from non-stale records above the confidence threshold."""

    def __init__(self, confidence_threshold: float = 70.0, top_n: int = 5):
        self.confidence_threshold = confidence_threshold
        self.top_n = top_n

    def qualifying(self, records: Iterable[AggregatedRecord]) -> List[AggregatedRecord]:
        return [
            r for r in records
            if not r.is_stale and r.confidence >= self.confidence_threshold
        ]

    @staticmethod
    def market_direction(records: List[AggregatedRecord]) -> TrendDirection:
        if not records:
            return TrendDirection.NEUTRAL
        avg_change = sum(r.price_change_24h for r in records) / len(records)
        if avg_change > MARKET_TREND_PCT:
            return TrendDirection.BULLISH
        elif avg_change < -MARKET_TREND_PCT:
            return TrendDirection.BEARISH
        return TrendDirection.NEUTRAL

    def generate(self, records: Iterable[AggregatedRecord], now: Optional[datetime] = None) -> MarketSummary:
        valid = self.qualifying(records)
        n = self.top_n

        return MarketSummary(
            total_market_cap=sum(r.market_cap for r in valid),
            total_volume_24h=sum(r.volume_24h for r in valid),
            market_trend=self.market_direction(valid),
            top_gainers=sorted(valid, key=lambda r: r.price_change_24h, reverse=True)[:n],
            top_losers=sorted(valid, key=lambda r: r.price_change_24h)[:n],
            most_volatile=sorted(valid, key=lambda r: r.volatility, reverse=True)[:n],
            symbols_considered=len(valid),
            last_updated=now or utc_now(),
        )
