"""Module-level accessor for the active metrics bridge.

The host application sets the bridge once at startup; API routes read it
through ``get_metrics_bridge``.
"""

from typing import Optional

from .bridge import MetricsBridge

# Module-level singleton instance - unset until the host initializes a bridge
_bridge: Optional[MetricsBridge] = None


def get_metrics_bridge() -> Optional[MetricsBridge]:
    """Get the currently active metrics bridge, if any."""
    return _bridge


def set_metrics_bridge(bridge: Optional[MetricsBridge]) -> None:
    """Replace the active metrics bridge.

    Args:
        bridge: The bridge to serve, or None to detach
    """
    global _bridge
    _bridge = bridge
