"""StatsPusher - Background task feeding broker snapshots into the bridge.

This is the host's sampling schedule: once per interval it drains the
BrokerStats accumulator and pushes the snapshot, making the loop the single
writer of instrument values.
"""

import asyncio
from typing import Optional

from mqtt_exporter.core.logging_config import get_logger
from mqtt_exporter.services.metrics.bridge import MetricsBridge
from .collector import BrokerStats

logger = get_logger("stats_pusher")

# Module-level task and stop event
_push_task: Optional[asyncio.Task] = None
_stop_event: Optional[asyncio.Event] = None


async def _stats_push_loop(bridge: MetricsBridge, stats: BrokerStats, interval: float,
                           stop_event: asyncio.Event) -> None:
    """Background loop that pushes one snapshot per interval.

    Args:
        bridge: Active metrics bridge to push into
        stats: Accumulator drained on every cycle
        interval: Seconds between pushes
        stop_event: Event to signal shutdown
    """
    logger.info(f"Stats pusher started with {interval}s interval")

    while not stop_event.is_set():
        try:
            bridge.push(stats.snapshot())
        except Exception as e:
            logger.error(f"Error in stats push loop: {e}")

        try:
            # Wait for interval or until stop event is set
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
            break  # Stop event was set
        except asyncio.TimeoutError:
            continue  # Timeout is normal, continue loop

    # Flush whatever accumulated since the last cycle
    bridge.push(stats.snapshot())
    logger.info("Stats pusher stopped")


def start_stats_pusher(bridge: MetricsBridge, stats: BrokerStats, interval: float) -> None:
    """Start the background stats pusher task."""
    global _push_task, _stop_event

    if _push_task is not None and not _push_task.done():
        logger.warning("Stats pusher already running")
        return

    _stop_event = asyncio.Event()
    _push_task = asyncio.create_task(_stats_push_loop(bridge, stats, interval, _stop_event))
    logger.info("Stats pusher task created")


async def stop_stats_pusher() -> None:
    """Stop the background stats pusher task and wait for its final flush."""
    global _push_task, _stop_event

    if _stop_event:
        _stop_event.set()

    if _push_task and not _push_task.done():
        try:
            await asyncio.wait_for(_push_task, timeout=5.0)
        except asyncio.TimeoutError:
            _push_task.cancel()

    _push_task = None
    _stop_event = None
    logger.info("Stats pusher stop requested")


def is_pusher_running() -> bool:
    return _push_task is not None and not _push_task.done()
