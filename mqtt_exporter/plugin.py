"""Monitoring plugin entry point for MQTT broker hosts.

A host loads the plugin with its configuration and a SysParams bag giving
access to the process-wide CollectorRegistry and the HTTP listeners it owns.
``load`` returns an ACTIVE MetricsBridge the host then pushes snapshots into.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from prometheus_client import REGISTRY, CollectorRegistry
from pydantic import ValidationError

from mqtt_exporter import __version__
from mqtt_exporter.core.config import PrometheusConfig
from mqtt_exporter.core.exceptions import InvalidConfigError
from mqtt_exporter.services.metrics.bridge import MetricsBridge
from mqtt_exporter.services.metrics.exposer import MountPoint


@dataclass(frozen=True)
class PluginInfo:
    name: str
    type: str
    version: str


@dataclass
class SysParams:
    """Host resources handed to the plugin at load time."""
    http_servers: Dict[str, MountPoint] = field(default_factory=dict)
    registry: CollectorRegistry = REGISTRY

    def get_http_server(self, port: str) -> MountPoint:
        """Mount point of the listener selected by ``port``.

        Raises:
            InvalidConfigError: if the host runs no listener for ``port``
        """
        try:
            return self.http_servers[port]
        except KeyError:
            raise InvalidConfigError(f"No HTTP listener for port {port!r}") from None


class PrometheusPlugin:
    def __init__(self, version: str = __version__):
        self._info = PluginInfo(name="prometheus", type="monitoring", version=version)

    def info(self) -> PluginInfo:
        return self._info

    def load(self, config: Union[PrometheusConfig, Mapping[str, Any], None], params: SysParams) -> MetricsBridge:
        """Build all instruments and mount the scrape endpoint.

        Raises:
            InvalidConfigError: if ``config`` does not validate or names an
                unknown listener
            DuplicateInstrumentError: if the registry already holds the
                exporter's instruments
        """
        if not isinstance(config, PrometheusConfig):
            try:
                config = PrometheusConfig.model_validate(config or {})
            except ValidationError as e:
                raise InvalidConfigError(str(e)) from e

        mount = params.get_http_server(config.port)
        return MetricsBridge(config, params.registry).initialize(mount)


# Plugin symbol looked up by hosts
plugin = PrometheusPlugin()
