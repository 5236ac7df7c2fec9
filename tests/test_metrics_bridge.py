"""
Tests for the MetricsBridge lifecycle and the push scenarios it serves.
"""

import random

import pytest
from fastapi import APIRouter

from mqtt_exporter.core.config import PrometheusConfig
from mqtt_exporter.core.exceptions import DuplicateInstrumentError
from mqtt_exporter.services.metrics import BridgeState, MetricsBridge, Snapshot, initialize
from mqtt_exporter.services.metrics.translator import BINDINGS
from mqtt_exporter.services.metrics.registry import InstrumentKind


def test_new_bridge_is_uninitialized(collector_registry):
    bridge = MetricsBridge(PrometheusConfig(), collector_registry)

    assert bridge.state is BridgeState.UNINITIALIZED
    assert not bridge.is_active
    assert len(bridge.registry) == 0


def test_initialize_activates_and_registers_everything(bridge):
    assert bridge.state is BridgeState.ACTIVE
    assert len(bridge.registry) == 37


def test_initialize_mounts_endpoint_at_config_path(collector_registry):
    router = APIRouter()

    initialize(PrometheusConfig(path="/stats/prom/"), router, collector_registry)

    assert [route.path for route in router.routes] == ["/stats/prom"]


def test_second_initialize_against_same_registry_fails(collector_registry):
    initialize(PrometheusConfig(), APIRouter(), collector_registry)

    with pytest.raises(DuplicateInstrumentError):
        initialize(PrometheusConfig(), APIRouter(), collector_registry)


def test_reinitializing_same_bridge_fails(bridge):
    with pytest.raises(DuplicateInstrumentError):
        bridge.initialize(APIRouter())


def test_push_before_initialize_is_ignored(collector_registry):
    bridge = MetricsBridge(PrometheusConfig(), collector_registry)

    bridge.push(Snapshot.model_validate({"bytes": {"sent": 5}}))

    assert bridge.push_count == 0
    assert bridge.last_push_ts is None


def test_shutdown_always_succeeds(bridge):
    assert bridge.shutdown() is None
    assert bridge.shutdown() is None
    assert bridge.state is BridgeState.ACTIVE


def test_cold_start_values(bridge):
    for name in bridge.registry.names():
        assert bridge.value(name) == 0.0, name


def test_single_push(bridge):
    bridge.push(Snapshot.model_validate({
        "bytes": {"sent": 100, "recv": 50},
        "clients": {"connected": 3},
    }))

    assert bridge.value("mqtt_bytes_total_sent") == 100
    assert bridge.value("mqtt_bytes_total_recv") == 50
    assert bridge.value("mqtt_clients_connected") == 3
    assert bridge.push_count == 1
    assert bridge.last_push_ts is not None


def test_two_pushes_counter_accumulates_gauge_replaces(bridge):
    bridge.push(Snapshot.model_validate({"bytes": {"sent": 100}, "clients": {"connected": 3}}))
    bridge.push(Snapshot.model_validate({"bytes": {"sent": 25}, "clients": {"connected": 1}}))

    assert bridge.value("mqtt_bytes_total_sent") == 125
    assert bridge.value("mqtt_clients_connected") == 1


def test_negative_delta_rejected(bridge):
    bridge.push(Snapshot.model_validate({"bytes": {"sent": 40}}))

    bridge.push(Snapshot.model_validate({"bytes": {"sent": -10}}))

    assert bridge.value("mqtt_bytes_total_sent") == 40


def test_uptime_tracks_clock(bridge, clock):
    bridge.push(Snapshot())
    first = bridge.value("mqtt_server_uptime")
    clock.advance(3)
    bridge.push(Snapshot())

    assert first == 0.0
    assert bridge.value("mqtt_server_uptime") == 3.0


def test_watermarks_are_passed_through(bridge):
    bridge.push(Snapshot.model_validate({
        "clients": {"total": 4, "maximum": 9},
        "subscriptions": {"total": 2, "maximum": 7},
    }))
    bridge.push(Snapshot.model_validate({
        "clients": {"maximum": 5},
        "subscriptions": {"maximum": 3},
    }))

    # the host owns the watermark; a lower value is reported verbatim
    assert bridge.value("mqtt_clients_maximum") == 5
    assert bridge.value("mqtt_subscriptions_maximum") == 3


def test_random_push_sequences_keep_counter_and_gauge_semantics(bridge):
    rng = random.Random(7)
    expected = {binding.metric: 0.0 for binding in BINDINGS}

    for _ in range(25):
        data = {}
        for binding in BINDINGS:
            if rng.random() < 0.3:
                continue  # absent field
            value = float(rng.randint(-20, 100))
            node = data
            for key in binding.path[:-1]:
                node = node.setdefault(key, {})
            node[binding.path[-1]] = value
            if binding.kind is InstrumentKind.COUNTER:
                expected[binding.metric] += max(value, 0.0)
            else:
                expected[binding.metric] = value
        bridge.push(Snapshot.model_validate(data))

    for metric, value in expected.items():
        assert bridge.value(metric) == value, metric
