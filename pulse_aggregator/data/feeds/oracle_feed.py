"""
PULSE AGGREGATOR — Oracle Feed Adapter
Batch payloads from the on-chain oracle poller:
    {"updates": [{"tokenSymbol", "priceUSD", "priceChange24h",
                  "timestamp" (epoch ms), "isStale", "volatility"?}, ...]}
"""
from typing import Any, Dict, List, Optional

from pulse_aggregator.data.feeds.base import BaseFeedAdapter, ObservationSink, coerce_timestamp


class OracleFeedAdapter(BaseFeedAdapter):
    """Oracle price updates — primary, highest-weighted source."""

    def __init__(self, sink: Optional[ObservationSink] = None, source: str = "oracle"):
        super().__init__(source=source, sink=sink)

    def parse(self, payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {
                "symbol": update.get("tokenSymbol"),
                "price": update.get("priceUSD"),
                "price_change_24h": update.get("priceChange24h"),
                "timestamp": coerce_timestamp(update.get("timestamp")),
                "is_stale": bool(update.get("isStale", False)),
                "volatility": update.get("volatility"),
            }
            for update in payload.get("updates") or []
            if isinstance(update, dict)
        ]
