"""InstrumentRegistry - Flat table of named Prometheus instruments.

Every counter and gauge the bridge exports is created here, registered exactly
once with the host's prometheus_client CollectorRegistry, and looked up by its
stable metric name afterwards. The table is append-only for the lifetime of the
registry; there is no removal path.
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, disable_created_metrics

from mqtt_exporter.core.exceptions import DuplicateInstrumentError

Instrument = Union[Counter, Gauge]

# Counters are exposed as <name>_total only, without the extra <name>_created series
disable_created_metrics()


class InstrumentKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"


class InstrumentRegistry:
    """Owns the name -> instrument table for one bridge.

    Registration goes to the supplied CollectorRegistry, which is what the
    scrape endpoint serializes. Two InstrumentRegistry objects sharing one
    CollectorRegistry cannot both register the same name.
    """

    def __init__(self, collector_registry: Optional[CollectorRegistry] = None):
        self.collector_registry = collector_registry if collector_registry is not None else REGISTRY
        self._instruments: Dict[str, Instrument] = {}
        self._kinds: Dict[str, InstrumentKind] = {}

    def create_counter(self, name: str, help_text: str) -> Counter:
        """Create and register a monotonically increasing counter.

        Raises:
            DuplicateInstrumentError: if ``name`` is already registered
        """
        return self._register(name, InstrumentKind.COUNTER, Counter(name, help_text, registry=None))

    def create_gauge(self, name: str, help_text: str) -> Gauge:
        """Create and register a gauge holding an arbitrary current value.

        Raises:
            DuplicateInstrumentError: if ``name`` is already registered
        """
        return self._register(name, InstrumentKind.GAUGE, Gauge(name, help_text, registry=None))

    def _register(self, name: str, kind: InstrumentKind, instrument: Instrument) -> Instrument:
        if name in self._instruments:
            raise DuplicateInstrumentError(name)
        try:
            self.collector_registry.register(instrument)
        except ValueError as e:
            # prometheus_client reports "Duplicated timeseries in CollectorRegistry"
            raise DuplicateInstrumentError(name) from e

        self._instruments[name] = instrument
        self._kinds[name] = kind
        return instrument

    def get(self, name: str) -> Instrument:
        return self._instruments[name]

    def kind(self, name: str) -> InstrumentKind:
        return self._kinds[name]

    def value(self, name: str) -> float:
        """Current value of the instrument registered under ``name``.

        prometheus_client exposes counter samples with a ``_total`` suffix, so
        the sample name is derived from the instrument kind.
        """
        sample_name = f"{name}_total" if self._kinds[name] is InstrumentKind.COUNTER else name
        value = self.collector_registry.get_sample_value(sample_name)
        return 0.0 if value is None else value

    def names(self) -> List[str]:
        """Registered names in creation order."""
        return list(self._instruments)

    def __contains__(self, name: str) -> bool:
        return name in self._instruments

    def __len__(self) -> int:
        return len(self._instruments)
