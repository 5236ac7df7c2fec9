"""Broker statistics REST API endpoints.

Out-of-process brokers report snapshots here; they are folded into the
host's BrokerStats and reach the bridge on the next push cycle.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from mqtt_exporter.plugin import plugin
from mqtt_exporter.services.metrics.bridge import MetricsBridge
from mqtt_exporter.services.metrics.instance import get_metrics_bridge
from mqtt_exporter.services.metrics.models import (
    BridgeStatusModel,
    PluginInfoModel,
    Snapshot,
    StatsAcceptedModel,
)
from mqtt_exporter.services.stats.collector import BrokerStats
from mqtt_exporter.services.stats.instance import get_broker_stats
from mqtt_exporter.services.stats.pusher import is_pusher_running

router = APIRouter(tags=["stats"])


def get_bridge() -> Optional[MetricsBridge]:
    """FastAPI dependency for metrics bridge injection."""
    return get_metrics_bridge()


def get_stats() -> BrokerStats:
    """FastAPI dependency for the broker stats accumulator."""
    return get_broker_stats()


def _require_active(bridge: Optional[MetricsBridge]) -> MetricsBridge:
    if bridge is None or not bridge.is_active:
        raise HTTPException(
            status_code=503,
            detail="Metrics bridge is not initialized."
        )
    return bridge


@router.post("/stats", response_model=StatsAcceptedModel, status_code=202)
async def report_stats(
    snapshot: Snapshot,
    bridge: Optional[MetricsBridge] = Depends(get_bridge),
    stats: BrokerStats = Depends(get_stats),
):
    """Accept a statistics snapshot from a broker.

    Counter fields are deltas and accumulate until the next push; gauge
    fields replace the previously reported value.

    Raises:
        HTTPException: 503 if no bridge is active
    """
    _require_active(bridge)
    return StatsAcceptedModel(reported=stats.merge(snapshot))


@router.get("/status", response_model=BridgeStatusModel)
async def get_status(bridge: Optional[MetricsBridge] = Depends(get_bridge)):
    """Get exporter status.

    Raises:
        HTTPException: 503 if no bridge is active
    """
    bridge = _require_active(bridge)
    info = plugin.info()

    return BridgeStatusModel(
        state=bridge.state.value,
        plugin=PluginInfoModel(name=info.name, type=info.type, version=info.version),
        metrics_path=bridge.config.path,
        instruments=len(bridge.registry),
        pusher_running=is_pusher_running(),
        push_count=bridge.push_count,
        last_push_ts=bridge.last_push_ts,
    )
