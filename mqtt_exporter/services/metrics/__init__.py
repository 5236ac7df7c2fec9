"""Broker statistics to Prometheus metrics translation.

This package holds the instrument registry, the metric group builders, the
snapshot translator and the scrape endpoint, tied together by MetricsBridge.
"""

from .bridge import BridgeState, MetricsBridge, initialize
from .models import Snapshot
from .registry import InstrumentKind, InstrumentRegistry
from .instance import get_metrics_bridge, set_metrics_bridge

__all__ = [
    "BridgeState",
    "MetricsBridge",
    "initialize",
    "Snapshot",
    "InstrumentKind",
    "InstrumentRegistry",
    "get_metrics_bridge",
    "set_metrics_bridge",
]
