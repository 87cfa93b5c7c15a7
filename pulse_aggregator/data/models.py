"""
PULSE AGGREGATOR — Data Models for Market Data
Canonical data structures shared by the ingestion, aggregation,
indicator and summary layers.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum


class Signal(str, Enum):
    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PriceObservation(BaseModel):
    """Single price report from one upstream feed for one symbol."""
    source: str
    symbol: str
    price: float
    timestamp: datetime
    price_change_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    market_cap: Optional[float] = None
    volatility: Optional[float] = None
    is_stale: bool = False

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SourceRecord(BaseModel):
    """Latest state of one feed for one symbol."""
    name: str
    price: float
    timestamp: datetime
    weight: float
    is_stale: bool = False
    is_active: bool = False


class AggregatedRecord(BaseModel):
    """Reconciled view of a symbol across all feeds."""
    symbol: str
    price: Optional[float] = None
    price_change_24h: float = 0.0
    volume_24h: float = 0.0
    market_cap: float = 0.0
    volatility: float = 0.0
    timestamp: datetime
    sources: List[SourceRecord] = Field(default_factory=list)
    confidence: float = 0.0
    is_stale: bool = True

    @property
    def active_sources(self) -> List[SourceRecord]:
        return [s for s in self.sources if s.is_active]


class TechnicalIndicator(BaseModel):
    """One indicator reading with its trading signal."""
    name: str
    value: float
    signal: Signal
    strength: float


class MarketTrend(BaseModel):
    """Directional call for a symbol derived from its indicators."""
    symbol: str
    direction: TrendDirection
    strength: float
    timeframe: str = "24h"
    indicators: List[TechnicalIndicator]
    timestamp: datetime


class MarketSummary(BaseModel):
    """Market-wide snapshot over the qualifying symbols."""
    total_market_cap: float
    total_volume_24h: float
    market_trend: TrendDirection
    top_gainers: List[AggregatedRecord]
    top_losers: List[AggregatedRecord]
    most_volatile: List[AggregatedRecord]
    symbols_considered: int
    last_updated: datetime
