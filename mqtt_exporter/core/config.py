import os

from pydantic import BaseModel, field_validator

from mqtt_exporter import __version__

DEFAULT_METRICS_PATH = "/metrics"


class Settings:
    # API Settings
    PROJECT_NAME: str = "MQTT Prometheus Exporter"
    VERSION: str = __version__
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 9234))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Metrics endpoint Settings
    METRICS_PATH: str = os.getenv("METRICS_PATH", DEFAULT_METRICS_PATH)
    METRICS_PORT: str = os.getenv("METRICS_PORT", "")  # "" selects the main listener

    # Host push schedule
    STATS_PUSH_INTERVAL: float = float(os.getenv("STATS_PUSH_INTERVAL", "1.0"))

    # Directory Settings
    LOG_DIR: str = os.getenv("LOG_DIR", "")


settings = Settings()


class PrometheusConfig(BaseModel):
    """Scrape endpoint configuration handed to the plugin by the host."""

    path: str = DEFAULT_METRICS_PATH
    port: str = ""

    @field_validator("path")
    @classmethod
    def normalize_path(cls, value: str) -> str:
        value = (value or "").strip().rstrip("/")
        if not value:
            return DEFAULT_METRICS_PATH
        if not value.startswith("/"):
            value = "/" + value
        return value

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, value) -> str:
        # listeners are keyed by string; accept 9234 as well as "9234"
        return "" if value is None else str(value)
