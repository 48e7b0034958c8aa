"""Configuration provider.

Config is read fresh on every ``get()``: the file is re-statted and reloaded
whenever its modification time changes, so operators can edit exchange and
queue names without restarting the process.

    from pushd.config import ConfigProvider
    provider = ConfigProvider()
    routing_key = provider.get().pushd.routing_key(EventKind.GENERIC)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from instrukt_ai_logging import get_logger
from pydantic import ValidationError

from pushd.config.loader import load_global_config
from pushd.config.schema import AmqpConfig, GlobalConfig, PresenceConfig, PushdConfig, RedisConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.pushd/pushd.yml")


def _load_env() -> None:
    env_path = os.getenv("PUSHD_ENV_PATH")
    if env_path:
        load_dotenv(Path(env_path).expanduser())
    else:
        load_dotenv()


def default_config_path() -> Path:
    override = os.getenv("PUSHD_CONFIG_PATH")
    return Path(override).expanduser() if override else DEFAULT_CONFIG_PATH.expanduser()


class ConfigProvider:
    """Read-only, hot-reloading view of the pushd configuration file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        _load_env()
        self._path = path if path is not None else default_config_path()
        self._mtime: float | None = None
        self._config = GlobalConfig()
        self._reload()

    @property
    def path(self) -> Path:
        return self._path

    def _current_mtime(self) -> float | None:
        try:
            return self._path.stat().st_mtime
        except FileNotFoundError:
            return None

    def _reload(self) -> None:
        mtime = self._current_mtime()
        try:
            self._config = load_global_config(self._path)
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning("Keeping previous config; reload of %s failed: %s", self._path, e)
        self._mtime = mtime

    def get(self) -> GlobalConfig:
        if self._current_mtime() != self._mtime:
            logger.info("Config file changed, reloading", path=str(self._path))
            self._reload()
        return self._config


__all__ = [
    "AmqpConfig",
    "ConfigProvider",
    "GlobalConfig",
    "PresenceConfig",
    "PushdConfig",
    "RedisConfig",
    "default_config_path",
]
