import pytest
from fastapi import APIRouter, FastAPI
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from mqtt_exporter.core.config import PrometheusConfig
from mqtt_exporter.services.metrics.bridge import MetricsBridge
from mqtt_exporter.services.metrics.instance import set_metrics_bridge
from mqtt_exporter.services.stats.collector import BrokerStats
from mqtt_exporter.services.stats.instance import set_broker_stats


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def collector_registry():
    """Fresh prometheus_client registry so tests never share instruments."""
    return CollectorRegistry()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bridge(collector_registry, clock):
    """Active bridge mounted on a throwaway router."""
    return MetricsBridge(PrometheusConfig(), collector_registry, clock=clock).initialize(APIRouter())


@pytest.fixture
def scrape_client(collector_registry, clock):
    """Minimal app serving only the scrape endpoint, plus the bridge behind it."""
    app = FastAPI()
    bridge = MetricsBridge(PrometheusConfig(), collector_registry, clock=clock).initialize(app)
    return TestClient(app), bridge


@pytest.fixture
def client(collector_registry):
    """Full exporter application with lifespan running."""
    from mqtt_exporter.app import create_app

    app = create_app(registry=collector_registry, push_interval=3600)

    with TestClient(app) as test_client:
        yield test_client

    set_metrics_bridge(None)
    set_broker_stats(BrokerStats())
