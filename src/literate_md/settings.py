"""Environment overrides layered on top of the configuration file.

``LITMD_CONFIG_PATH`` picks the file; ``LITMD_EOL``, ``LITMD_PARALLELISM`` and
``LITMD_ENABLE_LOCAL_API`` override the matching ``[runtime]`` keys, so a
build script can change them without editing the shared language table.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .config import CONFIG_FILE, EOL_STYLES, AppConfig, ConfigError, load_config

ENV_PREFIX = "LITMD_"


@dataclass(frozen=True, slots=True)
class Settings:
    config_path: Path = CONFIG_FILE
    enable_local_api: bool | None = None
    eol: str | None = None
    parallelism: int | None = None

    def apply(self, config: AppConfig) -> AppConfig:
        runtime = config.runtime
        if self.enable_local_api is not None:
            runtime.enable_local_api = self.enable_local_api
        if self.eol is not None:
            runtime.eol = self.eol
        if self.parallelism is not None:
            runtime.parallelism = self.parallelism
        return config


def _env(name: str) -> str | None:
    value = os.getenv(f"{ENV_PREFIX}{name}")
    return value.strip() if value and value.strip() else None


def _parse_bool(value: str | None) -> bool | None:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None


def _parse_eol(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.lower()
    if normalized not in EOL_STYLES:
        raise ConfigError(f"{ENV_PREFIX}EOL must be one of {sorted(EOL_STYLES)}, got {value!r}")
    return normalized


def _parse_parallelism(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigError(f"{ENV_PREFIX}PARALLELISM must be an integer, got {value!r}") from exc


def _read_settings() -> Settings:
    config_env = _env("CONFIG_PATH")
    return Settings(
        config_path=Path(config_env) if config_env else CONFIG_FILE,
        enable_local_api=_parse_bool(_env("ENABLE_LOCAL_API")),
        eol=_parse_eol(_env("EOL")),
        parallelism=_parse_parallelism(_env("PARALLELISM")),
    )


@lru_cache
def get_settings() -> Settings:
    return _read_settings()


def load_effective_config(path: Path | None = None) -> AppConfig:
    """Load the configuration file and apply the environment overrides."""

    settings = get_settings()
    return settings.apply(load_config(path or settings.config_path))


__all__ = ["ENV_PREFIX", "Settings", "get_settings", "load_effective_config"]
