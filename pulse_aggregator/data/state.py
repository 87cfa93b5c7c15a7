"""
PULSE AGGREGATOR — Per-Asset State Store
Owns, per tracked symbol, the aggregated record, its source records,
the bounded price history and the latest market trend.
"""
from collections import deque
from datetime import datetime
from typing import Deque, Dict, Iterator, List, Optional

from pulse_aggregator.data.models import AggregatedRecord, MarketTrend, SourceRecord
from pulse_aggregator.utils.logger import get_logger

logger = get_logger("state_store")


class SymbolState:
    """Everything the engine knows about one symbol."""

    def __init__(self, symbol: str, history_size: int = 200):
        self.symbol = symbol
        self.record: Optional[AggregatedRecord] = None
        self.history: Deque[float] = deque(maxlen=history_size)
        self.trend: Optional[MarketTrend] = None

    def ensure_record(self, now: datetime) -> AggregatedRecord:
        """Create the aggregated record on the first observation."""
        if self.record is None:
            self.record = AggregatedRecord(symbol=self.symbol, timestamp=now)
        return self.record

    def upsert_source(self, source: SourceRecord) -> None:
        """Replace the record of an existing source in place or append a new one."""
        record = self.record
        for i, existing in enumerate(record.sources):
            if existing.name == source.name:
                record.sources[i] = source
                return
        record.sources.append(source)

    def append_price(self, price: float) -> None:
        # deque(maxlen) drops the oldest sample once capacity is reached
        self.history.append(price)

    @property
    def price_history(self) -> List[float]:
        return list(self.history)


class MarketStateStore:
    """
    Explicit container for all per-symbol state.
    One instance per engine; nothing is kept at module level.
    """

    def __init__(self, history_size: int = 200):
        self.history_size = history_size
        self._symbols: Dict[str, SymbolState] = {}

    def ensure(self, symbol: str) -> SymbolState:
        state = self._symbols.get(symbol)
        if state is None:
            state = SymbolState(symbol, history_size=self.history_size)
            self._symbols[symbol] = state
        return state

    def get(self, symbol: str) -> Optional[SymbolState]:
        return self._symbols.get(symbol)

    def records(self) -> List[AggregatedRecord]:
        """All aggregated records that have received at least one observation."""
        return [s.record for s in self._symbols.values() if s.record is not None]

    def trends(self) -> List[MarketTrend]:
        return [s.trend for s in self._symbols.values() if s.trend is not None]

    @property
    def symbols(self) -> List[str]:
        return list(self._symbols.keys())

    def clear(self) -> None:
        count = len(self._symbols)
        self._symbols.clear()
        logger.info("state_cleared", symbols=count)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._symbols

    def __iter__(self) -> Iterator[SymbolState]:
        return iter(list(self._symbols.values()))

    def __len__(self) -> int:
        return len(self._symbols)

    @property
    def stats(self) -> Dict[str, int]:
        return {
            "symbols": len(self._symbols),
            "records": len(self.records()),
            "trends": len(self.trends()),
            "history_points": sum(len(s.history) for s in self._symbols.values()),
        }
