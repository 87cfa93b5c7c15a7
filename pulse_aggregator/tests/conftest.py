"""
PULSE AGGREGATOR — Test Configuration & Fixtures
Shared fixtures for all test modules.
"""
import pytest
import pandas as pd
import numpy as np
from datetime import datetime, timezone, timedelta

from pulse_aggregator.data.models import PriceObservation
from pulse_aggregator.engines.aggregator import MarketDataAggregator
from pulse_aggregator.engines.events import EngineEvent


class FakeClock:
    """Deterministic clock the engine reads instead of the wall clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


class EventRecorder:
    """Subscribes to every engine event and keeps the payloads."""

    def __init__(self, aggregator: MarketDataAggregator):
        self.events = []
        for event in EngineEvent:
            aggregator.on(event, lambda payload, e=event: self.events.append((e, payload)))

    def of(self, event: EngineEvent):
        return [p for e, p in self.events if e == event]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine_config():
    return {
        "update_interval": 10.0,
        "confidence_threshold": 70.0,
        "max_data_age": 300.0,
        "enable_technical_analysis": True,
        "data_sources": {
            "feedA": {"enabled": True, "weight": 0.6},
            "feedB": {"enabled": True, "weight": 0.3},
            "muted": {"enabled": False, "weight": 0.5},
        },
    }


@pytest.fixture
def aggregator(engine_config, clock):
    engine = MarketDataAggregator(config=engine_config, clock=clock)
    yield engine
    engine.destroy()


@pytest.fixture
def recorder(aggregator):
    return EventRecorder(aggregator)


@pytest.fixture
def observe(clock):
    """Build an observation stamped with the fake clock's current time."""
    def _observe(symbol: str, source: str, price: float, **kwargs) -> PriceObservation:
        kwargs.setdefault("timestamp", clock())
        return PriceObservation(source=source, symbol=symbol, price=price, **kwargs)
    return _observe


@pytest.fixture
def rising_prices():
    """Strictly increasing series."""
    return pd.Series(np.linspace(100.0, 160.0, 60))


@pytest.fixture
def falling_prices():
    """Strictly decreasing series."""
    return pd.Series(np.linspace(160.0, 100.0, 60))


@pytest.fixture
def noisy_prices():
    """Random walk around 100 for range checks."""
    np.random.seed(42)
    returns = np.random.normal(0.0, 0.01, 200)
    return pd.Series(100.0 * np.exp(np.cumsum(returns)))
