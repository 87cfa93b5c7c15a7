"""
PULSE AGGREGATOR — Indicator Registry
Central registry that computes every indicator over a symbol's price history.
"""
import pandas as pd
from typing import List, Optional, Sequence

from pulse_aggregator.config.settings import AggregatorSettings
from pulse_aggregator.data.models import TechnicalIndicator
from pulse_aggregator.indicators.base import BaseIndicator
from pulse_aggregator.indicators.momentum import RSIIndicator
from pulse_aggregator.indicators.oscillators import MACDIndicator
from pulse_aggregator.indicators.trend import SMAIndicator
from pulse_aggregator.utils.logger import get_logger

logger = get_logger("indicator_registry")


class IndicatorRegistry:
    """
    The SMA, RSI and MACD set, built from the engine settings.
    Indicators hold no per-symbol state, so one registry serves every symbol.
    Nothing is computed until the history holds `min_history` samples.
    """

    def __init__(self, settings: Optional[AggregatorSettings] = None):
        self.settings = settings or AggregatorSettings()
        self.min_history = self.settings.min_history
        self._indicators: List[BaseIndicator] = [
            SMAIndicator(period=self.settings.sma_period),
            RSIIndicator(period=self.settings.rsi_period),
            MACDIndicator(
                fast=self.settings.macd_fast,
                slow=self.settings.macd_slow,
                signal=self.settings.macd_signal,
                smoothed_signal=self.settings.macd_smoothed_signal,
            ),
        ]
        logger.debug("indicators_registered", names=self.indicator_names)

    @property
    def indicator_names(self) -> List[str]:
        # reported by /metrics
        return [ind.name for ind in self._indicators]

    def compute_all(self, history: Sequence[float]) -> List[TechnicalIndicator]:
        """
        Compute all indicators on a price history ordered oldest to newest.
        Returns an empty list when the history is too short.
        """
        if len(history) < self.min_history:
            return []

        prices = pd.Series(list(history), dtype=float)
        return [indicator.calculate(prices) for indicator in self._indicators]
