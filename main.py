"""
PULSE AGGREGATOR — Main Entry Point
Serves the market data aggregator over HTTP. The engine itself is created,
initialized and started by the FastAPI lifespan in pulse_aggregator.api.app.
"""
import uvicorn
from pulse_aggregator.config.settings import get_settings
from pulse_aggregator.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def run_api():
    settings = get_settings()
    setup_logging()
    engine = settings.aggregator
    logger.info("serving_market_aggregator",
                version=settings.version,
                port=settings.port,
                symbols=settings.symbols,
                sources=sorted(name for name, s in engine.data_sources.items() if s.enabled),
                update_interval=engine.update_interval)
    uvicorn.run(
        "pulse_aggregator.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run_api()
