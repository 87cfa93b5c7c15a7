"""
PULSE AGGREGATOR — FastAPI Application
Read and control surface over the running aggregator: /healthz, /metrics,
aggregated market data, trends, summaries, ingestion and configuration.
"""
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from pulse_aggregator.config.settings import get_settings
from pulse_aggregator.data.models import PriceObservation
from pulse_aggregator.data.symbols import StaticSymbolRegistry
from pulse_aggregator.engines.aggregator import destroy_aggregator, get_aggregator
from pulse_aggregator.utils.helpers import utc_now, utc_timestamp
from pulse_aggregator.utils.logger import get_logger, setup_logging

logger = get_logger("api")

# Application state
app_state: Dict[str, Any] = {
    "instance_id": str(uuid.uuid4())[:8],
    "started_at": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    setup_logging()
    settings = get_settings()
    app_state["started_at"] = utc_timestamp()

    logger.info("pulse_aggregator_starting",
                version=settings.version,
                instance=app_state["instance_id"])

    aggregator = get_aggregator(registry=StaticSymbolRegistry())
    await aggregator.initialize()
    aggregator.start()

    logger.info("pulse_aggregator_ready")

    yield

    logger.info("pulse_aggregator_shutting_down")
    destroy_aggregator()


app = FastAPI(
    title="PULSE AGGREGATOR",
    description="Multi-source market data aggregation and technical analysis",
    version="1.0.0",
    lifespan=lifespan,
)


# ─── Health & Metrics ───────────────────────────────────────────

@app.get("/healthz", tags=["System"])
async def health_check():
    """Fast health check endpoint for load balancers and monitoring."""
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "instance": app_state["instance_id"],
            "uptime_since": app_state["started_at"],
            "aggregator": get_aggregator().status.value,
            "timestamp": utc_timestamp(),
        },
    )


@app.get("/metrics", tags=["System"])
async def metrics():
    settings = get_settings()
    aggregator = get_aggregator()
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.version,
            "instance_id": app_state["instance_id"],
            "started_at": app_state["started_at"],
        },
        "aggregator": aggregator.stats,
        "indicators": aggregator.indicators.indicator_names,
        "supported_symbols": aggregator.supported_symbols,
        "timestamp": utc_timestamp(),
    }


# ─── Market Data ────────────────────────────────────────────────

@app.get("/api/v1/market/data", tags=["Market"])
async def all_market_data():
    records = get_aggregator().get_aggregated_data()
    return {"data": records, "count": len(records), "timestamp": utc_timestamp()}


@app.get("/api/v1/market/data/{symbol}", tags=["Market"])
async def market_data(symbol: str):
    record = get_aggregator().get_aggregated_data(symbol)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No aggregated data for {symbol}")
    return record


@app.get("/api/v1/market/high-confidence", tags=["Market"])
async def high_confidence_data():
    aggregator = get_aggregator()
    records = aggregator.get_high_confidence_data()
    return {
        "data": records,
        "threshold": aggregator.config.confidence_threshold,
        "timestamp": utc_timestamp(),
    }


@app.get("/api/v1/market/trends", tags=["Trends"])
async def all_trends():
    trends = get_aggregator().get_all_market_trends()
    return {"trends": trends, "count": len(trends), "timestamp": utc_timestamp()}


@app.get("/api/v1/market/trends/{symbol}", tags=["Trends"])
async def market_trend(symbol: str):
    trend = get_aggregator().get_market_trend(symbol)
    if trend is None:
        raise HTTPException(status_code=404, detail=f"No trend for {symbol}")
    return trend


@app.get("/api/v1/market/summary", tags=["Market"])
async def market_summary():
    """Latest periodic summary; before the first tick, a snapshot that publishes nothing."""
    aggregator = get_aggregator()
    summary = aggregator.get_market_summary()
    if summary is None:
        summary = aggregator.snapshot_summary()
    return summary


# ─── Ingestion & Control ────────────────────────────────────────

class ObservationRequest(BaseModel):
    source: str
    symbol: str
    price: float
    timestamp: Optional[datetime] = None
    price_change_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    market_cap: Optional[float] = None
    volatility: Optional[float] = None
    is_stale: bool = False


@app.post("/api/v1/ingest", status_code=202, tags=["Ingestion"])
async def ingest(request: ObservationRequest):
    """Push one observation; invalid prices are accepted and dropped like any feed noise."""
    data = request.model_dump()
    if data["timestamp"] is None:
        data["timestamp"] = utc_now()
    get_aggregator().ingest(PriceObservation(**data))
    return {"status": "accepted", "symbol": request.symbol}


@app.patch("/api/v1/config", tags=["Control"])
async def update_config(options: Dict[str, Any]):
    try:
        config = get_aggregator().update_config(options)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return {"config": config.model_dump(), "timestamp": utc_timestamp()}


@app.post("/api/v1/control/start", tags=["Control"])
async def start_aggregator():
    aggregator = get_aggregator()
    aggregator.start()
    return {"status": aggregator.status.value}


@app.post("/api/v1/control/stop", tags=["Control"])
async def stop_aggregator():
    aggregator = get_aggregator()
    aggregator.stop()
    return {"status": aggregator.status.value}
