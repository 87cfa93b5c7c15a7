"""
PULSE AGGREGATOR — Multi-Source Aggregation & Confidence Scoring
Reconciles the per-source prices of a symbol into one weighted price and
scores how far that price can be trusted.

Confidence Formula (0-100):
    coverage    = active_sources / total_sources * 40
    freshness   = max(0, 1 - record_age / max_data_age) * 30
    consistency = max(0, 1 - stddev / mean) * 30   (2+ active sources)
                = 15                               (exactly 1 active source)
                = 0                                (no active source)
"""
from datetime import datetime
from typing import List

import numpy as np

from pulse_aggregator.data.models import AggregatedRecord, PriceObservation, SourceRecord
from pulse_aggregator.utils.helpers import clamp, safe_divide

COVERAGE_WEIGHT = 40.0
FRESHNESS_WEIGHT = 30.0
CONSISTENCY_WEIGHT = 30.0
SINGLE_SOURCE_CONSISTENCY = 15.0


def _age_seconds(now: datetime, then: datetime) -> float:
    return (now - then).total_seconds()


def is_source_active(source: SourceRecord, now: datetime, max_data_age: float) -> bool:
    return not source.is_stale and _age_seconds(now, source.timestamp) < max_data_age


def build_source_record(
    observation: PriceObservation, weight: float, now: datetime, max_data_age: float
) -> SourceRecord:
    source = SourceRecord(
        name=observation.source,
        price=observation.price,
        timestamp=observation.timestamp,
        weight=weight,
        is_stale=observation.is_stale,
    )
    source.is_active = is_source_active(source, now, max_data_age)
    return source


def refresh_activity(record: AggregatedRecord, now: datetime, max_data_age: float) -> List[SourceRecord]:
    """Re-evaluate every source of the record and return the active ones."""
    for source in record.sources:
        source.is_active = is_source_active(source, now, max_data_age)
    return record.active_sources


def weighted_price(active: List[SourceRecord]) -> float:
    total_weight = sum(s.weight for s in active)
    if total_weight == 0:
        return sum(s.price for s in active) / len(active)
    return sum(s.price * s.weight for s in active) / total_weight


def consistency_score(active: List[SourceRecord]) -> float:
    if len(active) >= 2:
        prices = np.array([s.price for s in active], dtype=float)
        mean = float(prices.mean())
        std_dev = float(prices.std())  # population stddev
        return max(0.0, 1.0 - safe_divide(std_dev, mean)) * CONSISTENCY_WEIGHT
    if len(active) == 1:
        return SINGLE_SOURCE_CONSISTENCY
    return 0.0


def calculate_confidence(record: AggregatedRecord, now: datetime, max_data_age: float) -> float:
    active = record.active_sources

    coverage = safe_divide(len(active), len(record.sources)) * COVERAGE_WEIGHT
    freshness = max(0.0, 1.0 - _age_seconds(now, record.timestamp) / max_data_age) * FRESHNESS_WEIGHT
    consistency = consistency_score(active)

    return clamp(coverage + freshness + consistency, 0.0, 100.0)


def aggregate(record: AggregatedRecord, now: datetime, max_data_age: float) -> None:
    """
    Recompute price, staleness and confidence of a record after one of its
    sources changed. With no active source the last price is kept.
    """
    active = refresh_activity(record, now, max_data_age)
    if active:
        record.price = weighted_price(active)
        record.timestamp = now
        record.is_stale = False
    else:
        record.is_stale = True
    record.confidence = calculate_confidence(record, now, max_data_age)


def apply_market_fields(record: AggregatedRecord, observation: PriceObservation) -> None:
    """Overwrite market fields with whatever the latest observation reported."""
    if observation.price_change_24h is not None:
        record.price_change_24h = observation.price_change_24h
    if observation.volume_24h is not None:
        record.volume_24h = observation.volume_24h
    if observation.market_cap is not None:
        record.market_cap = observation.market_cap
    if observation.volatility is not None:
        record.volatility = observation.volatility


def sweep(record: AggregatedRecord, now: datetime, max_data_age: float) -> bool:
    """
    Age a record without new input: refresh activity and confidence, never
    the price or timestamp. Returns True when the stale flag flipped.
    """
    was_stale = record.is_stale
    active = refresh_activity(record, now, max_data_age)
    if not active:
        record.is_stale = True
    record.confidence = calculate_confidence(record, now, max_data_age)
    return record.is_stale != was_stale
