"""
MQTT Prometheus Exporter

Serves broker statistics as Prometheus metrics.

Environment Variables:
    METRICS_PATH: Scrape endpoint path (default: /metrics)
    STATS_PUSH_INTERVAL: Seconds between snapshot pushes (default: 1.0)
    HOST: Server host address (default: 0.0.0.0)
    PORT: Server port (default: 9234)
    DEBUG: Enable debug mode with auto-reload (default: false)

CLI Usage:
    python main.py

    # Scrape at /stats/prometheus, push every 5 seconds
    METRICS_PATH=/stats/prometheus STATS_PUSH_INTERVAL=5 python main.py
"""

import uvicorn

from mqtt_exporter.core.config import settings

if __name__ == "__main__":
    # Get configuration from settings
    port = settings.PORT
    host = settings.HOST

    print(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    print(f"Metrics endpoint: {settings.METRICS_PATH}")

    # If reload is enabled, restrict watch scope to backend code only.
    reload_enabled = bool(settings.DEBUG)
    reload_dirs = None
    if reload_enabled:
        from pathlib import Path

        repo_root = Path(__file__).resolve().parent
        reload_dirs = [str(repo_root / "mqtt_exporter")]

    uvicorn.run(
        "mqtt_exporter.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload_enabled,
        reload_dirs=reload_dirs,
    )
