from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from prometheus_client import REGISTRY, CollectorRegistry

from mqtt_exporter.api.v1 import router as api_router
from mqtt_exporter.core.config import PrometheusConfig, settings
from mqtt_exporter.core.logging_config import get_logger
from mqtt_exporter.plugin import SysParams, plugin
from mqtt_exporter.services.metrics.instance import set_metrics_bridge
from mqtt_exporter.services.stats.collector import BrokerStats
from mqtt_exporter.services.stats.instance import set_broker_stats
from mqtt_exporter.services.stats.pusher import start_stats_pusher, stop_stats_pusher

logger = get_logger("app")


def create_app(registry: Optional[CollectorRegistry] = None,
               config: Optional[PrometheusConfig] = None,
               push_interval: Optional[float] = None) -> FastAPI:
    """Build the exporter application.

    The plugin is loaded here rather than in the lifespan so the scrape route
    exists before the first request. A second call against the same registry
    fails with DuplicateInstrumentError.
    """
    registry = registry if registry is not None else REGISTRY
    config = config or PrometheusConfig(path=settings.METRICS_PATH, port=settings.METRICS_PORT)
    interval = push_interval if push_interval is not None else settings.STATS_PUSH_INTERVAL
    stats = BrokerStats()

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Startup
        start_stats_pusher(bridge, stats, interval)

        yield

        # Shutdown
        await stop_stats_pusher()
        bridge.shutdown()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Prometheus exporter for MQTT broker statistics",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    # This process runs a single listener; any configured port resolves to it
    params = SysParams(http_servers={"": app, config.port: app, str(settings.PORT): app}, registry=registry)
    bridge = plugin.load(config, params)

    set_metrics_bridge(bridge)
    set_broker_stats(stats)

    app.include_router(api_router)
    return app
