"""
PULSE AGGREGATOR — Trend Indicators
SMA (20) and the EMA helper shared with MACD.
"""
from typing import Tuple

import pandas as pd

from pulse_aggregator.data.models import Signal
from pulse_aggregator.indicators.base import BaseIndicator, crossover_signal
from pulse_aggregator.utils.helpers import safe_divide


def ema_series(prices: pd.Series, period: int) -> pd.Series:
    """EMA seeded with the first sample, alpha = 2 / (period + 1)."""
    return prices.ewm(span=period, adjust=False).mean()


def calculate_ema(prices: pd.Series, period: int) -> float:
    """Latest EMA value; the latest price while fewer than `period` samples exist."""
    if len(prices) < period:
        return float(prices.iloc[-1])
    return float(ema_series(prices, period).iloc[-1])


def calculate_sma(prices: pd.Series, period: int) -> float:
    if len(prices) < period:
        return float(prices.iloc[-1])
    return float(prices.tail(period).mean())


class SMAIndicator(BaseIndicator):
    """Simple Moving Average — price above the average is a buy signal."""

    def __init__(self, period: int = 20):
        self.period = period
        super().__init__(name=f"SMA{period}", params={"period": period})

    def evaluate(self, prices: pd.Series) -> Tuple[float, Signal, float]:
        sma = calculate_sma(prices, self.period)
        current = float(prices.iloc[-1])
        strength = abs(safe_divide(current - sma, sma)) * 100.0
        return sma, crossover_signal(current, sma), strength
