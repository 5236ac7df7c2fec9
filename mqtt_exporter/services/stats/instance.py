"""Module-level singleton accessor for the host's BrokerStats accumulator."""

from .collector import BrokerStats

# Module-level singleton instance
_stats: BrokerStats = BrokerStats()


def get_broker_stats() -> BrokerStats:
    """Get the accumulator broker code records into."""
    return _stats


def set_broker_stats(stats: BrokerStats) -> None:
    """Replace the accumulator (used at startup and in tests)."""
    global _stats
    _stats = stats
