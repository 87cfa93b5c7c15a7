"""
PULSE AGGREGATOR — Engine Exceptions
"""


class AggregatorError(Exception):
    """Base class for aggregator errors."""


class AggregatorDestroyedError(AggregatorError):
    """Raised when a destroyed aggregator is used again."""


class NoEventLoopError(AggregatorError):
    """Raised when the scheduler is started outside a running asyncio loop."""
