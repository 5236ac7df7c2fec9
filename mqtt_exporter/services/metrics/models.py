"""Pydantic V2 models for broker statistics snapshots and API responses.

A Snapshot is what the host hands to ``MetricsBridge.push``. Every numeric
leaf is optional: ``None`` means the host has nothing to report for that
quantity and the matching instrument is left untouched. Counter-like leaves
carry the delta since the previous push; gauge-like leaves carry the current
absolute value.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class FlowStats(BaseModel):
    """Sent/received split of one quantity."""
    model_config = ConfigDict(frozen=True)

    sent: Optional[float] = None
    recv: Optional[float] = None


class ClientStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    connected: Optional[float] = None
    persisted: Optional[float] = None
    total: Optional[float] = None
    maximum: Optional[float] = None  # watermark maintained by the host


class SubscriptionStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: Optional[float] = None
    maximum: Optional[float] = None  # watermark maintained by the host


class PacketStats(BaseModel):
    """Per control packet type deltas plus in-flight and retained counts."""
    model_config = ConfigDict(frozen=True)

    total: FlowStats = Field(default_factory=FlowStats)
    connect: Optional[float] = None
    connack: Optional[float] = None
    publish: FlowStats = Field(default_factory=FlowStats)
    puback: FlowStats = Field(default_factory=FlowStats)
    pubrec: FlowStats = Field(default_factory=FlowStats)
    pubrel: FlowStats = Field(default_factory=FlowStats)
    pubcomp: FlowStats = Field(default_factory=FlowStats)
    subscribe: Optional[float] = None
    suback: Optional[float] = None
    unsubscribe: Optional[float] = None
    unsuback: Optional[float] = None
    pingreq: Optional[float] = None
    pingresp: Optional[float] = None
    disconnect: FlowStats = Field(default_factory=FlowStats)
    auth: FlowStats = Field(default_factory=FlowStats)
    unknown: Optional[float] = None
    inflight: FlowStats = Field(default_factory=FlowStats)
    retained: Optional[float] = None


class Snapshot(BaseModel):
    """Point-in-time broker statistics supplied by the host."""
    model_config = ConfigDict(frozen=True)

    bytes: FlowStats = Field(default_factory=FlowStats)
    clients: ClientStats = Field(default_factory=ClientStats)
    packets: PacketStats = Field(default_factory=PacketStats)
    subscriptions: SubscriptionStats = Field(default_factory=SubscriptionStats)


class PluginInfoModel(BaseModel):
    name: str
    type: str
    version: str


class BridgeStatusModel(BaseModel):
    """Lightweight health response for the exporter."""
    model_config = ConfigDict(from_attributes=True)

    state: str
    plugin: PluginInfoModel
    metrics_path: str
    instruments: int
    pusher_running: bool
    push_count: int
    last_push_ts: Optional[float] = None


class StatsAcceptedModel(BaseModel):
    status: str = "accepted"
    reported: List[str]
