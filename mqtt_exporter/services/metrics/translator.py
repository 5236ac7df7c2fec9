"""Snapshot translator - applies one statistics snapshot to the instruments.

The binding table below lists every tracked snapshot field exactly once, in
the order the fields are applied. Counter bindings add the reported delta,
gauge bindings replace the current value. Uptime is not part of the snapshot;
it is computed from the server group's start timestamp on every push.
"""

import math
from dataclasses import dataclass
from functools import reduce
from typing import List, Optional, Tuple

from mqtt_exporter.core.logging_config import get_logger
from .groups import PACKET_TYPES, Direction, ServerGroup, packet_metric_name, single_packet_metric_name
from .models import Snapshot
from .registry import InstrumentKind, InstrumentRegistry

logger = get_logger(__name__)


@dataclass(frozen=True)
class Binding:
    """Maps one snapshot field (attribute path) onto one instrument."""
    metric: str
    path: Tuple[str, ...]
    kind: InstrumentKind

    def resolve(self, snapshot: Snapshot) -> Optional[float]:
        return reduce(getattr, self.path, snapshot)


def _counter(metric: str, *path: str) -> Binding:
    return Binding(metric, path, InstrumentKind.COUNTER)


def _gauge(metric: str, *path: str) -> Binding:
    return Binding(metric, path, InstrumentKind.GAUGE)


def _packet_bindings() -> List[Binding]:
    bindings = [
        _counter("mqtt_packets_total_sent", "packets", "total", "sent"),
        _counter("mqtt_packets_total_recv", "packets", "total", "recv"),
    ]
    for label, direction in PACKET_TYPES:
        if direction is Direction.FLOW:
            for half in (Direction.SENT, Direction.RECV):
                bindings.append(_counter(packet_metric_name(label, half), "packets", label, half.value))
        else:
            bindings.append(_counter(single_packet_metric_name(label), "packets", label))
    return bindings


BINDINGS: Tuple[Binding, ...] = (
    _counter("mqtt_bytes_total_sent", "bytes", "sent"),
    _counter("mqtt_bytes_total_recv", "bytes", "recv"),
    _gauge("mqtt_clients_connected", "clients", "connected"),
    _gauge("mqtt_clients_persisted", "clients", "persisted"),
    _gauge("mqtt_clients_total", "clients", "total"),
    _gauge("mqtt_clients_maximum", "clients", "maximum"),
    *_packet_bindings(),
    _gauge("mqtt_packets_inflight_sent", "packets", "inflight", "sent"),
    _gauge("mqtt_packets_inflight_recv", "packets", "inflight", "recv"),
    _gauge("mqtt_packets_retained", "packets", "retained"),
    _gauge("mqtt_subscriptions_total", "subscriptions", "total"),
    _gauge("mqtt_subscriptions_maximum", "subscriptions", "maximum"),
)


class SnapshotTranslator:
    """Sole writer of instrument values.

    Pushes are expected to be serialized by the caller. A scrape running
    concurrently with a push may observe a partially applied snapshot.
    """

    def __init__(self, registry: InstrumentRegistry, server: ServerGroup,
                 bindings: Tuple[Binding, ...] = BINDINGS):
        self.registry = registry
        self.server = server
        self.bindings = bindings

    def push(self, snapshot: Snapshot) -> None:
        self.server.uptime.set(self.server.elapsed())

        for binding in self.bindings:
            value = binding.resolve(snapshot)
            if value is None:
                continue

            instrument = self.registry.get(binding.metric)
            if binding.kind is InstrumentKind.COUNTER:
                if not math.isfinite(value) or value < 0:
                    logger.warning(f"Ignoring invalid delta {value} for counter {binding.metric}")
                    continue
                instrument.inc(value)
            else:
                instrument.set(value)
