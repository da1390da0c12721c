from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_BUNDLE_NAME = "ekslogsbundle"
DEFAULT_METADATA_URL = "http://169.254.169.254/latest/meta-data/instance-id"


def _env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class CollectorConfig:
    # Where the bundle directory and archive are created
    output_dir: str
    bundle_name: str

    # Instance identity lookup
    metadata_url: str
    metadata_timeout_seconds: float

    # Collection tuning
    docker_query_timeout_seconds: float
    disk_usage_threshold_percent: int
    journal_window_days: int

    # Filesystem root the host paths are resolved against ("/" on a real node)
    host_root: str

    log_level: str

    @property
    def bundle_dir(self) -> str:
        return os.path.join(self.output_dir, self.bundle_name)

    @property
    def archive_path(self) -> str:
        return os.path.join(self.output_dir, f"{self.bundle_name}.tar.gz")


@lru_cache(maxsize=1)
def load_collector_config() -> CollectorConfig:
    """
    Load collector configuration from environment variables.

    Every setting has a default matching a plain run on a cluster node; invalid numbers fall
    back to those defaults.
    """
    threshold = _env_int("EKS_LOG_COLLECTOR_DISK_THRESHOLD", 70)
    if threshold < 0 or threshold > 100:
        threshold = 70
    days = _env_int("EKS_LOG_COLLECTOR_JOURNAL_DAYS", 3)
    if days <= 0:
        days = 3

    return CollectorConfig(
        output_dir=os.path.abspath(_env_str("EKS_LOG_COLLECTOR_OUTPUT_DIR", os.getcwd())),
        bundle_name=_env_str("EKS_LOG_COLLECTOR_BUNDLE_NAME", DEFAULT_BUNDLE_NAME),
        metadata_url=_env_str("EKS_LOG_COLLECTOR_METADATA_URL", DEFAULT_METADATA_URL),
        metadata_timeout_seconds=_env_float("EKS_LOG_COLLECTOR_METADATA_TIMEOUT", 3.0),
        docker_query_timeout_seconds=_env_float("EKS_LOG_COLLECTOR_DOCKER_TIMEOUT", 75.0),
        disk_usage_threshold_percent=threshold,
        journal_window_days=days,
        host_root=_env_str("EKS_LOG_COLLECTOR_HOST_ROOT", "/"),
        log_level=_env_str("EKS_LOG_COLLECTOR_LOG_LEVEL", "INFO").upper(),
    )
