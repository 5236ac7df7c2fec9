"""BrokerStats - host-side accumulator of broker statistics.

Broker code records traffic and state changes here as they happen. The
push loop periodically calls ``snapshot()``, which drains the accumulated
counter deltas and reports the current gauges together with the host-owned
watermarks for clients and subscriptions.
"""

import threading
from collections import defaultdict
from typing import Dict, List, Optional

from mqtt_exporter.services.metrics.groups import PACKET_TYPES, Direction
from mqtt_exporter.services.metrics.models import Snapshot

FLOW_PACKETS = {label for label, direction in PACKET_TYPES if direction is Direction.FLOW}
PACKET_DIRECTIONS = dict(PACKET_TYPES)


class BrokerStats:
    """Thread-safe statistics accumulator owned by the host."""

    def __init__(self):
        self._lock = threading.Lock()
        # Counter deltas since the last drain, keyed by (domain, subject, direction)
        self._deltas: Dict[tuple, float] = defaultdict(float)
        # Latest absolute values keyed by (domain, subject)
        self._gauges: Dict[tuple, float] = {}
        self._clients_max = 0.0
        self._subs_max = 0.0

    def record_bytes(self, direction: str, count: int) -> None:
        """Record bytes written to ('sent') or read from ('recv') the network."""
        self._check_direction(direction)
        with self._lock:
            self._deltas[("bytes", "total", direction)] += count

    def record_packet(self, label: str, direction: str, count: int = 1) -> None:
        """Record control packets of one type; also feeds the all-types total."""
        self._check_direction(direction)
        expected = PACKET_DIRECTIONS.get(label)
        if expected is None:
            raise ValueError(f"Unknown packet type: {label}")
        if expected is not Direction.FLOW and expected.value != direction:
            raise ValueError(f"{label} packets are only counted as {expected.value}")

        with self._lock:
            self._deltas[("packets", label, direction)] += count
            self._deltas[("packets", "total", direction)] += count

    def set_clients(self, connected: int, persisted: int, total: int) -> None:
        with self._lock:
            self._gauges[("clients", "connected")] = connected
            self._gauges[("clients", "persisted")] = persisted
            self._gauges[("clients", "total")] = total
            self._clients_max = max(self._clients_max, total)

    def set_subscriptions(self, total: int) -> None:
        with self._lock:
            self._gauges[("subscriptions", "total")] = total
            self._subs_max = max(self._subs_max, total)

    def set_inflight(self, sent: int, recv: int) -> None:
        with self._lock:
            self._gauges[("inflight", "sent")] = sent
            self._gauges[("inflight", "recv")] = recv

    def set_retained(self, count: int) -> None:
        with self._lock:
            self._gauges[("packets", "retained")] = count

    def merge(self, snapshot: Snapshot) -> List[str]:
        """Fold a snapshot reported by an out-of-process broker into the
        accumulator. Returns the dotted names of the fields that were present."""
        reported: List[str] = []

        def add(key: tuple, value: Optional[float], field: str) -> None:
            if value is not None:
                self._deltas[key] += value
                reported.append(field)

        def put(key: tuple, value: Optional[float], field: str) -> None:
            if value is not None:
                self._gauges[key] = value
                reported.append(field)

        with self._lock:
            for direction in ("sent", "recv"):
                add(("bytes", "total", direction), getattr(snapshot.bytes, direction), f"bytes.{direction}")
                add(("packets", "total", direction), getattr(snapshot.packets.total, direction),
                    f"packets.total.{direction}")

            for label, direction in PACKET_TYPES:
                value = getattr(snapshot.packets, label)
                if direction is Direction.FLOW:
                    for half in ("sent", "recv"):
                        add(("packets", label, half), getattr(value, half), f"packets.{label}.{half}")
                else:
                    add(("packets", label, direction.value), value, f"packets.{label}")

            clients = snapshot.clients
            for name in ("connected", "persisted", "total"):
                put(("clients", name), getattr(clients, name), f"clients.{name}")
            put(("inflight", "sent"), snapshot.packets.inflight.sent, "packets.inflight.sent")
            put(("inflight", "recv"), snapshot.packets.inflight.recv, "packets.inflight.recv")
            put(("packets", "retained"), snapshot.packets.retained, "packets.retained")
            put(("subscriptions", "total"), snapshot.subscriptions.total, "subscriptions.total")

            # Watermarks: a reported maximum wins, otherwise track the reported totals
            if clients.maximum is not None:
                self._clients_max = max(self._clients_max, clients.maximum)
                reported.append("clients.maximum")
            if clients.total is not None:
                self._clients_max = max(self._clients_max, clients.total)
            if snapshot.subscriptions.maximum is not None:
                self._subs_max = max(self._subs_max, snapshot.subscriptions.maximum)
                reported.append("subscriptions.maximum")
            if snapshot.subscriptions.total is not None:
                self._subs_max = max(self._subs_max, snapshot.subscriptions.total)

        return reported

    def snapshot(self) -> Snapshot:
        """Drain counter deltas and return them with the current gauges."""
        with self._lock:
            deltas = dict(self._deltas)
            self._deltas.clear()
            gauges = dict(self._gauges)
            clients_max = self._clients_max
            subs_max = self._subs_max

        def flow(domain: str, subject: str) -> Dict[str, float]:
            return {
                "sent": deltas.get((domain, subject, "sent"), 0.0),
                "recv": deltas.get((domain, subject, "recv"), 0.0),
            }

        packets: Dict[str, object] = {"total": flow("packets", "total")}
        for label, direction in PACKET_TYPES:
            if direction is Direction.FLOW:
                packets[label] = flow("packets", label)
            else:
                packets[label] = deltas.get(("packets", label, direction.value), 0.0)
        packets["inflight"] = {
            "sent": gauges.get(("inflight", "sent")),
            "recv": gauges.get(("inflight", "recv")),
        }
        packets["retained"] = gauges.get(("packets", "retained"))

        return Snapshot.model_validate({
            "bytes": flow("bytes", "total"),
            "clients": {
                "connected": gauges.get(("clients", "connected")),
                "persisted": gauges.get(("clients", "persisted")),
                "total": gauges.get(("clients", "total")),
                "maximum": clients_max,
            },
            "packets": packets,
            "subscriptions": {
                "total": gauges.get(("subscriptions", "total")),
                "maximum": subs_max,
            },
        })

    @staticmethod
    def _check_direction(direction: str) -> None:
        if direction not in ("sent", "recv"):
            raise ValueError(f"Direction must be 'sent' or 'recv', got {direction!r}")
