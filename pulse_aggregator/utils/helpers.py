"""
PULSE AGGREGATOR — Common Utility Functions
"""
from datetime import datetime, timezone
import math


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_timestamp() -> str:
    """Return current UTC timestamp as ISO string."""
    return utc_now().isoformat()


def from_epoch_ms(value: float) -> datetime:
    """Convert a feed's epoch-millisecond timestamp to a UTC datetime."""
    return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safe division avoiding ZeroDivisionError."""
    if denominator == 0:
        return default
    return numerator / denominator


def clamp(value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
    """Clamp a value between min and max."""
    return max(min_val, min(max_val, value))


def is_valid_price(price) -> bool:
    """A usable price is a real, finite, non-negative number."""
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    return math.isfinite(price) and price >= 0


def normalize_symbol(symbol: str) -> str:
    """Normalize symbol format: ' btc ' -> BTC."""
    return symbol.strip().upper()
