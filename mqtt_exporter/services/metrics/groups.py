"""Metric group builders.

Each builder creates one cluster of related instruments in an
InstrumentRegistry and returns a handle object for it. Builders are called
exactly once per bridge; calling one twice against the same registry fails
with DuplicateInstrumentError.

Names follow ``mqtt_<domain>_<subject>[_<direction>]`` and are a
compatibility surface for dashboards and alert rules.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple, Union

from prometheus_client import Counter, Gauge

from .registry import InstrumentRegistry


class Direction(str, Enum):
    SENT = "sent"
    RECV = "recv"
    FLOW = "flow"  # both sent and recv


# Control packet types in translation order. Single-direction types are
# counted from the server's point of view.
PACKET_TYPES: Tuple[Tuple[str, Direction], ...] = (
    ("connect", Direction.RECV),
    ("connack", Direction.SENT),
    ("publish", Direction.FLOW),
    ("puback", Direction.FLOW),
    ("pubrec", Direction.FLOW),
    ("pubrel", Direction.FLOW),
    ("pubcomp", Direction.FLOW),
    ("subscribe", Direction.RECV),
    ("suback", Direction.SENT),
    ("unsubscribe", Direction.RECV),
    ("unsuback", Direction.SENT),
    ("pingreq", Direction.RECV),
    ("pingresp", Direction.SENT),
    ("disconnect", Direction.FLOW),
    ("auth", Direction.FLOW),
    ("unknown", Direction.RECV),
)


@dataclass(frozen=True)
class FlowCounter:
    sent: Counter
    recv: Counter


@dataclass(frozen=True)
class FlowGauge:
    sent: Gauge
    recv: Gauge


@dataclass(frozen=True)
class ServerGroup:
    start_ts: float
    uptime: Gauge
    clock: Callable[[], float] = time.monotonic

    def elapsed(self) -> float:
        """Seconds since the group was built, never negative."""
        return max(0.0, self.clock() - self.start_ts)


@dataclass(frozen=True)
class ClientsGroup:
    connected: Gauge
    persisted: Gauge
    total: Gauge
    maximum: Gauge


@dataclass(frozen=True)
class SubscriptionsGroup:
    total: Gauge
    maximum: Gauge


@dataclass(frozen=True)
class PacketsGroup:
    total: FlowCounter
    types: Dict[str, Union[Counter, FlowCounter]]
    inflight: FlowGauge
    retained: Gauge


@dataclass(frozen=True)
class MetricGroups:
    server: ServerGroup
    bytes: FlowCounter
    clients: ClientsGroup
    packets: PacketsGroup
    subscriptions: SubscriptionsGroup


def packet_metric_name(label: str, direction: Direction) -> str:
    return f"mqtt_packets_{label}_{direction.value}"


def single_packet_metric_name(label: str) -> str:
    """Name of a single-direction packet counter.

    These counters are exported with the ``_recv`` suffix whichever way the
    packet travels; the help text carries the actual direction.
    """
    return packet_metric_name(label, Direction.RECV)


def packet_metric_help(label: str, direction: Direction) -> str:
    return f"The total number of {label} packets {direction.value} since server start"


def packet_metric_names(label: str) -> Tuple[str, str, str, str]:
    """(sent name, sent help, recv name, recv help) for a flow packet type."""
    return (
        packet_metric_name(label, Direction.SENT),
        packet_metric_help(label, Direction.SENT),
        packet_metric_name(label, Direction.RECV),
        packet_metric_help(label, Direction.RECV),
    )


def build_flow_counter(registry: InstrumentRegistry, name_sent: str, help_sent: str,
                       name_recv: str, help_recv: str) -> FlowCounter:
    return FlowCounter(
        sent=registry.create_counter(name_sent, help_sent),
        recv=registry.create_counter(name_recv, help_recv),
    )


def build_flow_gauge(registry: InstrumentRegistry, name_sent: str, help_sent: str,
                     name_recv: str, help_recv: str) -> FlowGauge:
    return FlowGauge(
        sent=registry.create_gauge(name_sent, help_sent),
        recv=registry.create_gauge(name_recv, help_recv),
    )


def build_server_group(registry: InstrumentRegistry, clock: Callable[[], float] = time.monotonic) -> ServerGroup:
    """Build the uptime gauge and capture the start timestamp used to compute it."""
    return ServerGroup(
        start_ts=clock(),
        uptime=registry.create_gauge(
            "mqtt_server_uptime",
            "The amount of seconds since server started"),
        clock=clock,
    )


def build_bytes_group(registry: InstrumentRegistry) -> FlowCounter:
    return build_flow_counter(
        registry,
        "mqtt_bytes_total_sent",
        "The total number of bytes sent since server start",
        "mqtt_bytes_total_recv",
        "The total number of bytes received since server start",
    )


def build_clients_group(registry: InstrumentRegistry) -> ClientsGroup:
    return ClientsGroup(
        connected=registry.create_gauge(
            "mqtt_clients_connected",
            "The number of clients connected to the server"),
        persisted=registry.create_gauge(
            "mqtt_clients_persisted",
            "The number of clients persisted on server"),
        total=registry.create_gauge(
            "mqtt_clients_total",
            "The total number of active and inactive clients"),
        maximum=registry.create_gauge(
            "mqtt_clients_maximum",
            "The number of clients ever connected to the server"),
    )


def build_subscriptions_group(registry: InstrumentRegistry) -> SubscriptionsGroup:
    return SubscriptionsGroup(
        total=registry.create_gauge(
            "mqtt_subscriptions_total",
            "The total number of active subscriptions"),
        maximum=registry.create_gauge(
            "mqtt_subscriptions_maximum",
            "The maximum amount active subscriptions has ever been on server since start"),
    )


def build_packets_group(registry: InstrumentRegistry) -> PacketsGroup:
    """Build the aggregate packet pair, one entry per control packet type,
    the in-flight gauge pair and the retained gauge."""
    total = build_flow_counter(
        registry,
        "mqtt_packets_total_sent",
        "The total number of packets of all types sent since server start",
        "mqtt_packets_total_recv",
        "The total number of packets of all types received since server start",
    )

    types: Dict[str, Union[Counter, FlowCounter]] = {}
    for label, direction in PACKET_TYPES:
        if direction is Direction.FLOW:
            types[label] = build_flow_counter(registry, *packet_metric_names(label))
        else:
            types[label] = registry.create_counter(
                single_packet_metric_name(label),
                packet_metric_help(label, direction),
            )

    inflight = build_flow_gauge(
        registry,
        "mqtt_packets_inflight_sent",
        "The total number of packets awaiting for client acknowledgement",
        "mqtt_packets_inflight_recv",
        "The total number of packets awaiting for server acknowledgement",
    )
    retained = registry.create_gauge("mqtt_packets_retained", "The total number of retained packets")

    return PacketsGroup(total=total, types=types, inflight=inflight, retained=retained)


def build_metric_groups(registry: InstrumentRegistry, clock: Callable[[], float] = time.monotonic) -> MetricGroups:
    """Build every group the bridge exports, in exposition order."""
    return MetricGroups(
        server=build_server_group(registry, clock=clock),
        bytes=build_bytes_group(registry),
        clients=build_clients_group(registry),
        packets=build_packets_group(registry),
        subscriptions=build_subscriptions_group(registry),
    )
