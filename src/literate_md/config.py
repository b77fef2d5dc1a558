from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping


CONFIG_FILE = Path("literate-md.toml")

EOL_STYLES: dict[str, str] = {
    "native": os.linesep,
    "lf": "\n",
    "crlf": "\r\n",
}


class ConfigError(ValueError):
    """Raised when the configuration file holds an unusable entry."""


@dataclass(frozen=True, slots=True)
class LanguageConfig:
    open: str
    close: str
    lang: str | None = None

    def fence_tag(self, extension: str) -> str:
        return self.lang or extension


@dataclass(slots=True)
class RuntimeConfig:
    parallelism: int = 0
    log_file: str = ""
    eol: str = "native"
    enable_local_api: bool = False

    @property
    def workers(self) -> int:
        if self.parallelism > 0:
            return self.parallelism
        return min(8, os.cpu_count() or 1)

    @property
    def line_ending(self) -> str:
        return EOL_STYLES[self.eol]


@dataclass(slots=True)
class APIConfig:
    host: str = "127.0.0.1"
    port: int = 8000


@dataclass(slots=True)
class AppConfig:
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    languages: Mapping[str, LanguageConfig] = field(
        default_factory=lambda: MappingProxyType({})
    )
    api: APIConfig = field(default_factory=APIConfig)

    def language_for(self, extension: str) -> LanguageConfig | None:
        return self.languages.get(extension)


def _read_raw(path: Path) -> Mapping[str, object]:
    if not path.exists():
        return {}
    if path.suffix == ".json":
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        # Flat {ext: {open, close, lang}} table.
        return {"languages": data} if isinstance(data, Mapping) else {}
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _build_language(extension: str, data: object) -> LanguageConfig:
    if not isinstance(data, Mapping):
        raise ConfigError(f"Language entry for {extension!r} must be a table")
    open_marker = data.get("open")
    close_marker = data.get("close")
    if not isinstance(open_marker, str) or not open_marker:
        raise ConfigError(f"Language entry for {extension!r} needs a non-empty 'open'")
    if not isinstance(close_marker, str) or not close_marker:
        raise ConfigError(f"Language entry for {extension!r} needs a non-empty 'close'")
    lang = data.get("lang")
    return LanguageConfig(
        open=open_marker,
        close=close_marker,
        lang=str(lang) if lang else None,
    )


def _build_languages(data: Mapping[str, object] | None) -> Mapping[str, LanguageConfig]:
    if not data:
        return MappingProxyType({})
    table = {
        str(extension).lstrip("."): _build_language(str(extension), entry)
        for extension, entry in data.items()
    }
    return MappingProxyType(table)


def _build_runtime(data: Mapping[str, object] | None) -> RuntimeConfig:
    if not data:
        return RuntimeConfig()
    eol = str(data.get("eol", "native")).lower()
    if eol not in EOL_STYLES:
        raise ConfigError(f"Unsupported eol style: {eol!r}")
    return RuntimeConfig(
        parallelism=int(data.get("parallelism", 0)),
        log_file=str(data.get("log_file", "")),
        eol=eol,
        enable_local_api=bool(data.get("enable_local_api", False)),
    )


def _build_api(data: Mapping[str, object] | None) -> APIConfig:
    if not data:
        return APIConfig()
    return APIConfig(host=str(data.get("host", "127.0.0.1")), port=int(data.get("port", 8000)))


def load_config(path: Path | None = None) -> AppConfig:
    path = path or CONFIG_FILE
    raw = _read_raw(path)
    runtime_data = raw.get("runtime")
    languages_data = raw.get("languages")
    api_data = raw.get("api")
    return AppConfig(
        runtime=_build_runtime(runtime_data if isinstance(runtime_data, Mapping) else None),
        languages=_build_languages(languages_data if isinstance(languages_data, Mapping) else None),
        api=_build_api(api_data if isinstance(api_data, Mapping) else None),
    )


def dump_config(config: AppConfig) -> str:
    payload = {
        "runtime": {
            "parallelism": config.runtime.parallelism,
            "log_file": config.runtime.log_file,
            "eol": config.runtime.eol,
            "enable_local_api": config.runtime.enable_local_api,
        },
        "api": {
            "host": config.api.host,
            "port": config.api.port,
        },
        "languages": {
            extension: {
                "open": language.open,
                "close": language.close,
                "lang": language.fence_tag(extension),
            }
            for extension, language in sorted(config.languages.items())
        },
    }
    return json.dumps(payload, indent=2)
