"""MQTT broker statistics exported as Prometheus metrics."""

__version__ = "1.0.0"
