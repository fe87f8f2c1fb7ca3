"""
Telemetry Agent - Configuration

Loads settings from environment variables, an optional .env file and an
optional YAML config file.
"""

import socket
from pathlib import Path
from typing import Dict, Optional

import structlog
import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import Tier

logger = structlog.get_logger(__name__)


class AgentSettings(BaseSettings):
    """Agent settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Server
    server_url: str = Field(default="http://localhost:3000/api/telemetry", alias="TELEMETRY_SERVER_URL")
    api_key: str = Field(default="", alias="TELEMETRY_API_KEY")
    device_id: str = Field(default_factory=socket.gethostname, alias="DEVICE_ID")

    # Intervals (milliseconds)
    high_interval_ms: int = Field(default=5000, gt=0, alias="HIGH_FREQ_INTERVAL_MS")
    medium_interval_ms: int = Field(default=60000, gt=0, alias="MEDIUM_FREQ_INTERVAL_MS")
    low_interval_ms: int = Field(default=300000, gt=0, alias="LOW_FREQ_INTERVAL_MS")

    # Collectors
    collect_battery: bool = Field(default=True, alias="COLLECT_BATTERY")
    collect_thermal: bool = Field(default=True, alias="COLLECT_THERMAL")
    collect_cpu: bool = Field(default=True, alias="COLLECT_CPU")
    collect_gpu: bool = Field(default=True, alias="COLLECT_GPU")
    collect_memory: bool = Field(default=True, alias="COLLECT_MEMORY")
    collect_network: bool = Field(default=True, alias="COLLECT_NETWORK")
    collect_storage: bool = Field(default=True, alias="COLLECT_STORAGE")
    collect_sensors: bool = Field(default=True, alias="COLLECT_SENSORS")
    collect_processes: bool = Field(default=True, alias="COLLECT_PROCESSES")
    max_processes: int = Field(default=50, ge=1, alias="MAX_PROCESSES")
    probe_timeout_ms: int = Field(default=5000, gt=0, alias="PROBE_TIMEOUT_MS")

    # Logging
    log_level: str = Field(default="info", alias="LOG_LEVEL")
    log_to_file: bool = Field(default=False, alias="LOG_TO_FILE")
    log_file_path: str = Field(default="/var/log/pinephone-telemetry.log", alias="LOG_FILE_PATH")
    dry_run: bool = Field(default=False, alias="DRY_RUN")

    # API resilience
    api_retry_count: int = Field(default=3, ge=1, alias="API_RETRY_COUNT")
    api_retry_delay_ms: int = Field(default=1000, ge=0, alias="API_RETRY_DELAY_MS")
    api_timeout_ms: int = Field(default=10000, gt=0, alias="API_TIMEOUT_MS")

    # Offline buffer
    offline_buffer_enabled: bool = Field(default=True, alias="ENABLE_OFFLINE_BUFFER")
    offline_buffer_max_size: int = Field(default=1000, ge=1, alias="OFFLINE_BUFFER_MAX_SIZE")
    backlog_report_interval_ms: int = Field(default=60000, gt=0, alias="BACKLOG_REPORT_INTERVAL_MS")

    @property
    def intervals(self) -> Dict[Tier, float]:
        """Tier cadences in seconds."""
        return {
            Tier.HIGH: self.high_interval_ms / 1000,
            Tier.MEDIUM: self.medium_interval_ms / 1000,
            Tier.LOW: self.low_interval_ms / 1000,
        }

    @property
    def collectors(self) -> Dict[str, bool]:
        """Per-collector enable flags keyed by collector name."""
        return {
            "battery": self.collect_battery,
            "thermal": self.collect_thermal,
            "cpu": self.collect_cpu,
            "gpu": self.collect_gpu,
            "memory": self.collect_memory,
            "network": self.collect_network,
            "storage": self.collect_storage,
            "sensors": self.collect_sensors,
            "processes": self.collect_processes,
        }


def load_settings(config_path: Optional[str] = None, **overrides) -> AgentSettings:
    """Build settings, layering YAML file values and overrides over the environment."""
    values: dict = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found, using environment and defaults", path=config_path)
        else:
            with open(path, "r") as f:
                values = yaml.safe_load(f) or {}
            if not isinstance(values, dict):
                raise ValueError(f"Config file {config_path} must contain a mapping")
            logger.info("Configuration loaded", path=config_path)

    values.update({k: v for k, v in overrides.items() if v is not None})
    return AgentSettings(**values)
