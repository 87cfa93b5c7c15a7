"""
PULSE AGGREGATOR — Streaming Feed Adapter
Single push messages from the price stream:
    {"tokenSymbol", "price", "priceChange24h", "timestamp" (epoch ms),
     "isFresh", "volume24h"?, "marketCap"?}
"""
from typing import Any, Dict, List, Optional

from pulse_aggregator.data.feeds.base import BaseFeedAdapter, ObservationSink, coerce_timestamp


class StreamingFeedAdapter(BaseFeedAdapter):
    """Streaming price pushes — carry volume and market cap."""

    def __init__(self, sink: Optional[ObservationSink] = None, source: str = "streaming"):
        super().__init__(source=source, sink=sink)

    def parse(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [{
            "symbol": payload.get("tokenSymbol"),
            "price": payload.get("price"),
            "price_change_24h": payload.get("priceChange24h"),
            "timestamp": coerce_timestamp(payload.get("timestamp")),
            # the stream reports freshness, the engine tracks staleness
            "is_stale": not payload.get("isFresh", False),
            "volume_24h": payload.get("volume24h"),
            "market_cap": payload.get("marketCap"),
        }]
