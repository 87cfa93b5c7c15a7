"""
PULSE AGGREGATOR — Base Indicator Interface
Indicators implement evaluate(); calculate() wraps the reading into a
TechnicalIndicator. Indicators are stateless between calls.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import pandas as pd

from pulse_aggregator.data.models import Signal, TechnicalIndicator


def crossover_signal(fast: float, slow: float) -> Signal:
    """BUY when the fast value is above the slow one, SELL when below."""
    if fast > slow:
        return Signal.BUY
    if fast < slow:
        return Signal.SELL
    return Signal.NEUTRAL


class BaseIndicator(ABC):
    """Abstract base class for all technical indicators."""

    def __init__(self, name: str, params: Optional[Dict[str, Any]] = None):
        self.name = name
        self.params = params or {}

    @abstractmethod
    def evaluate(self, prices: pd.Series) -> Tuple[float, Signal, float]:
        """Return (value, signal, strength) for a series ordered oldest to newest."""

    def calculate(self, prices: pd.Series) -> TechnicalIndicator:
        if prices.empty:
            raise ValueError(f"{self.name} needs at least one price")

        value, signal, strength = self.evaluate(prices)
        return TechnicalIndicator(
            name=self.name,
            value=float(value),
            signal=signal,
            strength=float(strength),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, params={self.params})"
