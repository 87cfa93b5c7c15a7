"""
PULSE AGGREGATOR — Central Configuration
All settings are loaded from environment variables with sensible defaults.
"""
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Any, Dict, Iterable, List, Optional, Tuple


class SourceSettings(BaseModel):
    """Per-feed enable flag and aggregation weight."""
    enabled: bool = True
    weight: float = Field(default=0.1, ge=0.0, le=1.0)


def default_data_sources() -> Dict[str, SourceSettings]:
    return {
        "oracle": SourceSettings(enabled=True, weight=0.6),
        "streaming": SourceSettings(enabled=True, weight=0.3),
        "fallback": SourceSettings(enabled=True, weight=0.1),
    }


class AggregatorSettings(BaseSettings):
    """Aggregation, confidence and technical-analysis parameters."""
    update_interval: float = Field(default=10.0, gt=0)  # seconds
    confidence_threshold: float = Field(default=70.0, ge=0, le=100)
    max_data_age: float = Field(default=300.0, gt=0)  # seconds
    enable_technical_analysis: bool = True
    data_sources: Dict[str, SourceSettings] = Field(default_factory=default_data_sources)

    fallback_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    history_size: int = Field(default=200, gt=0)
    min_history: int = Field(default=20, gt=0)
    summary_size: int = Field(default=5, gt=0)

    sma_period: int = 20
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    macd_smoothed_signal: bool = True

    model_config = SettingsConfigDict(env_prefix="AGGREGATOR_", env_file=".env", extra="ignore")


# Options accepted by a running engine's update_config()
RUNTIME_OPTIONS = (
    "update_interval",
    "confidence_threshold",
    "max_data_age",
    "enable_technical_analysis",
    "data_sources",
)


def merge_aggregator_settings(
    current: AggregatorSettings, partial: Dict[str, Any], allowed: Optional[Iterable[str]] = None
) -> Tuple[AggregatorSettings, List[str]]:
    """
    Overlay a partial mapping on existing settings and validate the result.
    Sources are merged one by one, so {"data_sources": {"oracle": {"weight": 0.5}}}
    keeps the oracle's enabled flag and every other source untouched.
    Returns the new settings and the option names that were ignored.
    """
    allowed = set(allowed) if allowed is not None else set(AggregatorSettings.model_fields)
    data = current.model_dump()
    ignored = []

    for key, value in partial.items():
        if key not in allowed:
            ignored.append(key)
            continue
        if key == "data_sources" and isinstance(value, dict):
            for name, source in value.items():
                if isinstance(source, SourceSettings):
                    source = source.model_dump()
                if not isinstance(source, dict):
                    # left for model_validate to reject
                    data["data_sources"][name] = source
                    continue
                merged = data["data_sources"].get(name, {"enabled": True, "weight": current.fallback_weight})
                merged.update(source)
                data["data_sources"][name] = merged
        else:
            data[key] = value

    return AggregatorSettings.model_validate(data), ignored


class AppSettings(BaseSettings):
    """Top-level application settings."""
    app_name: str = "PULSE AGGREGATOR"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    symbols: List[str] = ["BTC", "ETH", "SOL", "APT", "USDC"]

    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Singleton
_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings
