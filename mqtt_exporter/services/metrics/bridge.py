"""MetricsBridge - lifecycle owner for the broker statistics exporter.

A bridge starts UNINITIALIZED. ``initialize`` builds every metric group,
registers the instruments with the host's CollectorRegistry and mounts the
scrape endpoint, moving the bridge to ACTIVE. There is no way back: the
instruments live until the process exits and ``shutdown`` does nothing.
"""

import time
from enum import Enum
from typing import Callable, Optional

from prometheus_client import CollectorRegistry

from mqtt_exporter.core.config import PrometheusConfig
from mqtt_exporter.core.logging_config import get_logger
from .exposer import MountPoint, expose
from .groups import MetricGroups, build_metric_groups
from .models import Snapshot
from .registry import InstrumentRegistry
from .translator import SnapshotTranslator

logger = get_logger(__name__)


class BridgeState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class MetricsBridge:
    """Translates host statistics snapshots into Prometheus instruments."""

    def __init__(self, config: Optional[PrometheusConfig] = None,
                 collector_registry: Optional[CollectorRegistry] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config or PrometheusConfig()
        self.registry = InstrumentRegistry(collector_registry)
        self.clock = clock
        self.state = BridgeState.UNINITIALIZED
        self.groups: Optional[MetricGroups] = None
        self.push_count = 0
        self.last_push_ts: Optional[float] = None
        self._translator: Optional[SnapshotTranslator] = None

    def initialize(self, mount: MountPoint) -> "MetricsBridge":
        """Build and register all instruments, then mount the scrape endpoint.

        Raises:
            DuplicateInstrumentError: if any instrument name is already
                registered in the CollectorRegistry (for instance when a
                second bridge is initialized against the same registry)
        """
        self.groups = build_metric_groups(self.registry, clock=self.clock)
        self._translator = SnapshotTranslator(self.registry, self.groups.server)
        expose(self.config.path, mount, self.registry.collector_registry)

        self.state = BridgeState.ACTIVE
        logger.info(f"Metrics bridge active: {len(self.registry)} instruments served at {self.config.path}")
        return self

    def push(self, snapshot: Snapshot) -> None:
        """Apply one snapshot. Never raises for bad data."""
        if self._translator is None:
            logger.warning("Push on an uninitialized metrics bridge ignored")
            return

        self._translator.push(snapshot)
        self.push_count += 1
        self.last_push_ts = time.time()

    def shutdown(self) -> None:
        """Instruments are process scoped; nothing to release."""
        logger.debug("Metrics bridge shutdown requested")

    def value(self, name: str) -> float:
        return self.registry.value(name)

    @property
    def is_active(self) -> bool:
        return self.state is BridgeState.ACTIVE


def initialize(config: PrometheusConfig, mount: MountPoint,
               collector_registry: Optional[CollectorRegistry] = None) -> MetricsBridge:
    """Create a bridge and bring it to ACTIVE in one step."""
    return MetricsBridge(config, collector_registry).initialize(mount)
