"""Host-side broker statistics accumulation and push scheduling."""

from .collector import BrokerStats
from .instance import get_broker_stats, set_broker_stats
from .pusher import is_pusher_running, start_stats_pusher, stop_stats_pusher

__all__ = [
    "BrokerStats",
    "get_broker_stats",
    "set_broker_stats",
    "is_pusher_running",
    "start_stats_pusher",
    "stop_stats_pusher",
]
