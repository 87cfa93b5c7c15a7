"""
PULSE AGGREGATOR — Notification Channel
Explicit publish/subscribe bus carrying engine events to subscribers.
"""
from enum import Enum
from typing import Any, Callable, Dict, List

from pulse_aggregator.utils.logger import get_logger

logger = get_logger("events")

Handler = Callable[[Dict[str, Any]], None]


class EngineEvent(str, Enum):
    INITIALIZED = "initialized"
    DATA_UPDATED = "dataUpdated"
    TREND_UPDATED = "trendUpdated"
    MARKET_SUMMARY_UPDATED = "marketSummaryUpdated"
    STARTED = "started"
    STOPPED = "stopped"
    CONFIG_UPDATED = "configUpdated"
    ERROR = "error"


class EventBus:
    """
    Observer list per event. Handlers are called synchronously in
    subscription order; a failing handler is logged and skipped.
    """

    def __init__(self):
        self._handlers: Dict[EngineEvent, List[Handler]] = {}

    def subscribe(self, event: EngineEvent, handler: Handler) -> Callable[[], None]:
        """Register a handler. Returns a callable that removes it again."""
        event = EngineEvent(event)
        self._handlers.setdefault(event, []).append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: EngineEvent, handler: Handler) -> bool:
        handlers = self._handlers.get(EngineEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def emit(self, event: EngineEvent, payload: Dict[str, Any]) -> int:
        """Deliver a payload to every handler of the event. Returns the number delivered."""
        delivered = 0
        for handler in list(self._handlers.get(EngineEvent(event), [])):
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.error("event_handler_error", event_name=EngineEvent(event).value, error=str(e))
        return delivered

    def subscriber_count(self, event: EngineEvent = None) -> int:
        if event is not None:
            return len(self._handlers.get(EngineEvent(event), []))
        return sum(len(h) for h in self._handlers.values())

    def clear(self) -> None:
        """Detach every subscriber."""
        self._handlers.clear()
