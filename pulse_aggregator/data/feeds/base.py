"""
PULSE AGGREGATOR — Base Feed Adapter Interface
Feed adapters turn a transport's raw payload into PriceObservations and
push them through the engine's ingestion boundary.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from pulse_aggregator.data.models import PriceObservation
from pulse_aggregator.utils.helpers import from_epoch_ms
from pulse_aggregator.utils.logger import get_logger

logger = get_logger("feeds")

ObservationSink = Callable[[PriceObservation], None]


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """Feeds stamp messages in epoch milliseconds; anything unusable becomes None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return from_epoch_ms(value)
    except (OverflowError, OSError, ValueError):
        return None


class BaseFeedAdapter(ABC):
    """Abstract base class for all upstream feed adapters."""

    def __init__(self, source: str, sink: Optional[ObservationSink] = None):
        self.source = source
        self._sink = sink
        self.delivered = 0
        self.rejected = 0

    def bind(self, sink: ObservationSink) -> None:
        """Attach the adapter to an ingestion sink, usually MarketDataAggregator.ingest."""
        self._sink = sink

    @abstractmethod
    def parse(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Map a raw payload to observation fields (without the source name)."""
        pass

    def normalize(self, payload: Dict[str, Any]) -> List[PriceObservation]:
        """Build observations from a payload; items that fail validation are skipped."""
        observations = []
        for fields in self.parse(payload):
            try:
                observations.append(PriceObservation(source=self.source, **fields))
            except (ValidationError, TypeError) as e:
                self.rejected += 1
                logger.debug("feed_item_rejected", source=self.source, error=str(e))
        return observations

    def handle(self, payload: Dict[str, Any]) -> int:
        """Normalize a payload and push every observation to the sink."""
        if self._sink is None:
            raise RuntimeError(f"feed adapter '{self.source}' is not bound to a sink")

        observations = self.normalize(payload)
        for observation in observations:
            self._sink(observation)
        self.delivered += len(observations)
        return len(observations)

    @property
    def stats(self) -> Dict[str, Any]:
        return {"source": self.source, "delivered": self.delivered, "rejected": self.rejected}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(source={self.source})"
