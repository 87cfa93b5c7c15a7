"""
PULSE AGGREGATOR — Momentum Indicators
RSI (14)
"""
from typing import Tuple

import pandas as pd

from pulse_aggregator.data.models import Signal
from pulse_aggregator.indicators.base import BaseIndicator

RSI_NEUTRAL = 50.0
RSI_OVERBOUGHT = 70.0
RSI_OVERSOLD = 30.0


def calculate_rsi(prices: pd.Series, period: int = 14) -> float:
    """
    RSI from simple averages of the last `period` gains and losses.
    Returns 50 when fewer than period + 1 samples exist and 100 when there
    were no losses in the window.
    """
    if len(prices) < period + 1:
        return RSI_NEUTRAL

    delta = prices.diff().tail(period)
    avg_gain = float(delta.where(delta > 0, 0.0).sum()) / period
    avg_loss = float((-delta).where(delta < 0, 0.0).sum()) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


class RSIIndicator(BaseIndicator):
    """Relative Strength Index — overbought above 70 (sell), oversold below 30 (buy)."""

    def __init__(self, period: int = 14):
        self.period = period
        super().__init__(name="RSI", params={"period": period})

    def evaluate(self, prices: pd.Series) -> Tuple[float, Signal, float]:
        rsi = calculate_rsi(prices, self.period)

        # 0 at the threshold, 100 at the extreme
        if rsi > RSI_OVERBOUGHT:
            return rsi, Signal.SELL, (rsi - RSI_OVERBOUGHT) / (100.0 - RSI_OVERBOUGHT) * 100.0
        if rsi < RSI_OVERSOLD:
            return rsi, Signal.BUY, (RSI_OVERSOLD - rsi) / RSI_OVERSOLD * 100.0
        return rsi, Signal.NEUTRAL, 0.0
