"""Configuration loaded from a YAML file into frozen dataclasses."""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta

import yaml

from smblogparser.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
DEFAULT_LOOKBACK_MS = 5 * 60 * 1000
DEFAULT_LIMIT = 5000
DEFAULT_JOB_NAME = "smblogparser"


@dataclass(frozen=True)
class LokiConfig:
    url: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "LokiConfig":
        return cls(url=str(d.get("url") or "").rstrip("/"))


@dataclass(frozen=True)
class PrometheusConfig:
    pushgateway_url: str = ""
    job_name: str = DEFAULT_JOB_NAME

    @classmethod
    def from_dict(cls, d: dict) -> "PrometheusConfig":
        return cls(
            pushgateway_url=str(d.get("pushgateway_url") or ""),
            job_name=d.get("job_name") or DEFAULT_JOB_NAME,
        )


@dataclass(frozen=True)
class QueryConfig:
    query: str = ""
    lookback_ms: int = DEFAULT_LOOKBACK_MS
    limit: int = DEFAULT_LIMIT
    device: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "QueryConfig":
        return cls(
            query=str(d.get("query") or ""),
            lookback_ms=int(d.get("lookback_ms") or DEFAULT_LOOKBACK_MS),
            limit=int(d.get("limit") or DEFAULT_LIMIT),
            device=str(d.get("device") or ""),
        )

    def time_range(self, now: datetime | None = None) -> tuple[datetime, datetime]:
        """Return (start, end) covering the last lookback_ms milliseconds."""
        end = now or datetime.now().astimezone()
        return end - timedelta(milliseconds=self.lookback_ms), end


@dataclass(frozen=True)
class Config:
    loki: LokiConfig = field(default_factory=LokiConfig)
    prometheus: PrometheusConfig = field(default_factory=PrometheusConfig)
    query: QueryConfig = field(default_factory=QueryConfig)

    @classmethod
    def from_dict(cls, d: dict) -> "Config":
        return cls(
            loki=LokiConfig.from_dict(d.get("loki") or {}),
            prometheus=PrometheusConfig.from_dict(d.get("prometheus") or {}),
            query=QueryConfig.from_dict(d.get("query") or {}),
        )


def load_yaml(path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load YAML config from *path* and return it as a dict.

    The path can be overridden via the ``CONFIG_PATH`` environment variable.
    """
    path = os.environ.get("CONFIG_PATH", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"failed to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(path: str = DEFAULT_CONFIG_PATH) -> Config:
    try:
        return Config.from_dict(load_yaml(path))
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigError(f"invalid config values: {e}") from e
