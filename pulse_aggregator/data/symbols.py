"""
PULSE AGGREGATOR — Supported Symbol Registry
The engine asks a registry once, at initialization, which symbols to track.
"""
from typing import List, Optional, Protocol

from pulse_aggregator.config.settings import get_settings


class SymbolRegistry(Protocol):
    async def get_supported_symbols(self) -> List[str]:
        ...


class StaticSymbolRegistry:
    """Registry backed by a fixed list, by default the configured SYMBOLS."""

    def __init__(self, symbols: Optional[List[str]] = None):
        self._symbols = list(symbols) if symbols is not None else list(get_settings().symbols)

    async def get_supported_symbols(self) -> List[str]:
        return list(self._symbols)
