"""
PULSE AGGREGATOR — Market Data Aggregator
Ingests price observations from every feed, reconciles them per symbol,
runs technical analysis on the rolling history and publishes periodic
market summaries.

Pipeline per observation:
    validate -> upsert source -> weighted price + confidence -> dataUpdated
             -> history buffer -> indicators -> trend -> trendUpdated

Pipeline per scheduler tick:
    staleness sweep -> market summary -> marketSummaryUpdated
"""
import asyncio
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from pulse_aggregator.config.settings import (
    RUNTIME_OPTIONS, AggregatorSettings, get_settings, merge_aggregator_settings,
)
from pulse_aggregator.data.models import (
    AggregatedRecord, MarketSummary, MarketTrend, PriceObservation,
)
from pulse_aggregator.data.state import MarketStateStore, SymbolState
from pulse_aggregator.data.symbols import SymbolRegistry
from pulse_aggregator.engines import aggregation
from pulse_aggregator.engines.errors import AggregatorDestroyedError, NoEventLoopError
from pulse_aggregator.engines.events import EngineEvent, EventBus, Handler
from pulse_aggregator.engines.market_summary import MarketSummaryGenerator
from pulse_aggregator.engines.trend_classifier import TrendClassifier
from pulse_aggregator.indicators.registry import IndicatorRegistry
from pulse_aggregator.utils.helpers import is_valid_price, normalize_symbol, utc_now
from pulse_aggregator.utils.logger import get_logger

logger = get_logger("aggregator")


class AggregatorStatus(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    DESTROYED = "destroyed"


class MarketDataAggregator:
    """
    Owns all per-symbol state of one engine instance.

    Mutation happens synchronously inside ingest() and run_cycle() on the
    event loop thread, so two updates of one symbol never interleave.
    Threads feeding observations must hand them over with
    loop.call_soon_threadsafe(aggregator.ingest, observation).
    """

    def __init__(
        self,
        config: Optional[Union[AggregatorSettings, Dict[str, Any]]] = None,
        registry: Optional[SymbolRegistry] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if isinstance(config, AggregatorSettings):
            self.config = config.model_copy(deep=True)
        else:
            self.config, ignored = merge_aggregator_settings(get_settings().aggregator, config or {})
            if ignored:
                logger.warning("unknown_config_options", options=ignored)

        self._registry = registry
        self._clock = clock
        self.events = EventBus()
        self.store = MarketStateStore(history_size=self.config.history_size)
        self.indicators = IndicatorRegistry(self.config)
        self.classifier = TrendClassifier()

        self._status = AggregatorStatus.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._supported_symbols: List[str] = []
        self._last_summary: Optional[MarketSummary] = None
        self._observations = 0
        self._dropped = 0
        self._cycles = 0

    # ─── Notification plumbing ──────────────────────────────────

    def on(self, event: EngineEvent, handler: Handler) -> Callable[[], None]:
        """Subscribe to an engine event. Returns an unsubscribe callable."""
        return self.events.subscribe(event, handler)

    def off(self, event: EngineEvent, handler: Handler) -> bool:
        return self.events.unsubscribe(event, handler)

    def _emit(self, event: EngineEvent, payload: Optional[Dict[str, Any]] = None) -> None:
        payload = dict(payload or {})
        payload.setdefault("timestamp", self._clock())
        self.events.emit(event, payload)

    def _ensure_alive(self) -> None:
        if self._status == AggregatorStatus.DESTROYED:
            raise AggregatorDestroyedError("aggregator has been destroyed")

    # ─── Initialization ─────────────────────────────────────────

    async def initialize(self) -> List[str]:
        """Load the supported symbols once; a failing registry degrades to none."""
        self._ensure_alive()
        symbols: List[str] = []
        if self._registry is not None:
            try:
                symbols = await self._registry.get_supported_symbols()
            except Exception as e:
                logger.warning("initialization_failed", error=str(e))
                self._emit(EngineEvent.ERROR, {"type": "initialization", "error": str(e)})
                symbols = []

        self._supported_symbols = [
            normalize_symbol(s) for s in symbols if isinstance(s, str) and s.strip()
        ]
        for symbol in self._supported_symbols:
            self.store.ensure(symbol)

        logger.info("aggregator_initialized", symbols=len(self._supported_symbols))
        self._emit(EngineEvent.INITIALIZED, {
            "supported_symbols": list(self._supported_symbols),
            "config": self.config.model_dump(),
        })
        return list(self._supported_symbols)

    @property
    def supported_symbols(self) -> List[str]:
        return list(self._supported_symbols)

    # ─── Ingestion ──────────────────────────────────────────────

    def _drop(self, reason: str, **context) -> None:
        self._dropped += 1
        logger.debug("observation_dropped", reason=reason, **context)

    def ingest(self, observation: Union[PriceObservation, Dict[str, Any]]) -> None:
        """
        Accept one observation. Malformed input and disabled sources are
        dropped without an event; nothing is raised for bad data.
        """
        self._ensure_alive()

        if not isinstance(observation, PriceObservation):
            try:
                observation = PriceObservation.model_validate(observation)
            except ValidationError as e:
                self._drop("invalid_payload", errors=e.error_count())
                return

        symbol = normalize_symbol(observation.symbol)
        if not symbol:
            self._drop("empty_symbol", source=observation.source)
            return
        if not is_valid_price(observation.price):
            self._drop("invalid_price", symbol=symbol, source=observation.source)
            return

        source_settings = self.config.data_sources.get(observation.source)
        if source_settings is not None and not source_settings.enabled:
            self._drop("source_disabled", symbol=symbol, source=observation.source)
            return
        weight = source_settings.weight if source_settings is not None else self.config.fallback_weight

        now = self._clock()
        max_age = self.config.max_data_age
        state = self.store.ensure(symbol)
        record = state.ensure_record(now)

        state.upsert_source(aggregation.build_source_record(observation, weight, now, max_age))
        aggregation.apply_market_fields(record, observation)
        aggregation.aggregate(record, now, max_age)
        self._observations += 1

        self._emit(EngineEvent.DATA_UPDATED, {
            "symbol": symbol,
            "data": record.model_copy(deep=True),
            "timestamp": now,
        })

        if self.config.enable_technical_analysis and record.price is not None:
            state.append_price(record.price)
            self._update_technical_analysis(state, now)

    def ingest_many(self, observations: List[Union[PriceObservation, Dict[str, Any]]]) -> None:
        for observation in observations:
            self.ingest(observation)

    def _update_technical_analysis(self, state: SymbolState, now: datetime) -> None:
        indicators = self.indicators.compute_all(state.history)
        if not indicators:
            return

        trend = self.classifier.classify(state.symbol, indicators, state.record.price_change_24h, now)
        state.trend = trend

        self._emit(EngineEvent.TREND_UPDATED, {
            "symbol": state.symbol,
            "trend": trend.model_copy(deep=True),
            "timestamp": now,
        })

    # ─── Scheduler / lifecycle ──────────────────────────────────

    @property
    def status(self) -> AggregatorStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status == AggregatorStatus.RUNNING

    def start(self) -> None:
        """Schedule the periodic summary; a no-op when already running."""
        self._ensure_alive()
        if self._status == AggregatorStatus.RUNNING:
            logger.warning("aggregator_already_running")
            return

        self._schedule()
        self._status = AggregatorStatus.RUNNING
        logger.info("aggregator_started", update_interval=self.config.update_interval)
        self._emit(EngineEvent.STARTED, {"update_interval": self.config.update_interval})

    def stop(self) -> None:
        """Cancel the periodic summary; a no-op when already stopped."""
        self._ensure_alive()
        if self._status != AggregatorStatus.RUNNING:
            return

        self._cancel()
        self._status = AggregatorStatus.STOPPED
        logger.info("aggregator_stopped")
        self._emit(EngineEvent.STOPPED)

    def destroy(self) -> None:
        """Stop, detach every subscriber and drop all symbol state. Terminal."""
        if self._status == AggregatorStatus.DESTROYED:
            return
        self.stop()
        self.events.clear()
        self.store.clear()
        self._supported_symbols = []
        self._last_summary = None
        self._status = AggregatorStatus.DESTROYED
        logger.info("aggregator_destroyed")

    def _schedule(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            raise NoEventLoopError("start() must be called from a running asyncio event loop") from e
        self._task = loop.create_task(self._run_periodic(), name="pulse-aggregator-cycle")

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.config.update_interval)
            try:
                self.run_cycle()
            except Exception as e:
                logger.error("aggregation_cycle_error", error=str(e))
                self._emit(EngineEvent.ERROR, {"type": "cycle", "error": str(e)})

    def run_cycle(self) -> MarketSummary:
        """One scheduler tick: age every record, then publish a market summary."""
        self._ensure_alive()
        now = self._clock()
        max_age = self.config.max_data_age

        for state in self.store:
            record = state.record
            if record is None:
                continue
            if aggregation.sweep(record, now, max_age):
                logger.info("symbol_staleness_changed", symbol=state.symbol, is_stale=record.is_stale)
                self._emit(EngineEvent.DATA_UPDATED, {
                    "symbol": state.symbol,
                    "data": record.model_copy(deep=True),
                    "timestamp": now,
                })

        summary = self._build_summary(now)
        self._last_summary = summary
        self._cycles += 1

        logger.debug("market_summary_generated",
                     symbols=summary.symbols_considered,
                     market_trend=summary.market_trend.value)
        self._emit(EngineEvent.MARKET_SUMMARY_UPDATED, {"summary": summary, "timestamp": now})
        return summary

    def _build_summary(self, now: datetime) -> MarketSummary:
        generator = MarketSummaryGenerator(
            confidence_threshold=self.config.confidence_threshold,
            top_n=self.config.summary_size,
        )
        records = [r.model_copy(deep=True) for r in self.store.records()]
        return generator.generate(records, now)

    # ─── Public getters ─────────────────────────────────────────

    def get_aggregated_data(
        self, symbol: Optional[str] = None
    ) -> Union[Optional[AggregatedRecord], List[AggregatedRecord]]:
        """
        One symbol's record (or None), or every record when no symbol is given.
        Staleness is as of the last observation or scheduler tick.
        """
        if symbol is None:
            return [r.model_copy(deep=True) for r in self.store.records()]
        state = self.store.get(normalize_symbol(symbol))
        if state is None or state.record is None:
            return None
        return state.record.model_copy(deep=True)

    def get_market_trend(self, symbol: str) -> Optional[MarketTrend]:
        state = self.store.get(normalize_symbol(symbol))
        if state is None or state.trend is None:
            return None
        return state.trend.model_copy(deep=True)

    def get_all_market_trends(self) -> List[MarketTrend]:
        return [t.model_copy(deep=True) for t in self.store.trends()]

    def get_high_confidence_data(self) -> List[AggregatedRecord]:
        threshold = self.config.confidence_threshold
        return [r.model_copy(deep=True) for r in self.store.records() if r.confidence >= threshold]

    def get_market_summary(self) -> Optional[MarketSummary]:
        """The summary produced by the most recent tick."""
        if self._last_summary is None:
            return None
        return self._last_summary.model_copy(deep=True)

    def snapshot_summary(self) -> MarketSummary:
        """A summary of the current records, built without a tick: no sweep, no event."""
        return self._build_summary(self._clock())

    def get_price_history(self, symbol: str) -> List[float]:
        state = self.store.get(normalize_symbol(symbol))
        return state.price_history if state is not None else []

    # ─── Configuration ──────────────────────────────────────────

    def update_config(self, partial: Dict[str, Any]) -> AggregatorSettings:
        """
        Merge recognised runtime options. Unknown keys are ignored; invalid
        values raise pydantic.ValidationError and leave the config unchanged.
        """
        self._ensure_alive()
        previous_interval = self.config.update_interval
        self.config, ignored = merge_aggregator_settings(self.config, partial, RUNTIME_OPTIONS)
        if ignored:
            logger.warning("unknown_config_options", options=ignored)

        if self.is_running and self.config.update_interval != previous_interval:
            self._cancel()
            self._schedule()
            logger.info("aggregator_rescheduled", update_interval=self.config.update_interval)

        logger.info("config_updated", options=[k for k in partial if k not in ignored])
        self._emit(EngineEvent.CONFIG_UPDATED, {"config": self.config.model_dump()})
        return self.config.model_copy(deep=True)

    @property
    def stats(self) -> Dict[str, Any]:
        return {
            "status": self._status.value,
            "observations": self._observations,
            "dropped": self._dropped,
            "cycles": self._cycles,
            "subscribers": self.events.subscriber_count(),
            **self.store.stats,
        }


# Singleton used by the API process
_aggregator: Optional[MarketDataAggregator] = None


def get_aggregator(**kwargs) -> MarketDataAggregator:
    global _aggregator
    if _aggregator is None:
        _aggregator = MarketDataAggregator(**kwargs)
    return _aggregator


def destroy_aggregator() -> None:
    global _aggregator
    if _aggregator is not None:
        _aggregator.destroy()
        _aggregator = None
