"""
PULSE AGGREGATOR — Oscillator Indicators
MACD (12, 26, 9)
"""
from typing import Dict, Tuple
import pandas as pd

from pulse_aggregator.data.models import Signal
from pulse_aggregator.indicators.base import BaseIndicator, crossover_signal
from pulse_aggregator.indicators.trend import calculate_ema, ema_series


class MACDIndicator(BaseIndicator):
    """
    MACD — Moving Average Convergence Divergence.

    The MACD line is EMA(fast) - EMA(slow) of the latest history. With
    `smoothed_signal` the signal line is the EMA(signal) of the MACD series
    across the whole buffer; without it the signal line equals the MACD
    line, which pins the crossover to neutral.
    """

    def __init__(self, fast: int = 12, slow: int = 26, signal: int = 9, smoothed_signal: bool = True):
        self.fast = fast
        self.slow = slow
        self.signal_period = signal
        self.smoothed_signal = smoothed_signal
        super().__init__(name="MACD", params={
            "fast": fast, "slow": slow, "signal": signal, "smoothed_signal": smoothed_signal,
        })

    def compute_lines(self, prices: pd.Series) -> Dict[str, float]:
        macd = calculate_ema(prices, self.fast) - calculate_ema(prices, self.slow)

        if self.smoothed_signal and len(prices) >= self.slow:
            macd_line = ema_series(prices, self.fast) - ema_series(prices, self.slow)
            signal_line = float(ema_series(macd_line, self.signal_period).iloc[-1])
        else:
            signal_line = macd

        return {"macd": macd, "signal": signal_line, "histogram": macd - signal_line}

    def evaluate(self, prices: pd.Series) -> Tuple[float, Signal, float]:
        lines = self.compute_lines(prices)
        signal = crossover_signal(lines["macd"], lines["signal"])
        return lines["macd"], signal, abs(lines["histogram"]) * 10.0
