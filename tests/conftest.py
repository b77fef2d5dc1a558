from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from literate_md.config import AppConfig, LanguageConfig
from literate_md.settings import get_settings


FOO = LanguageConfig(open="/*", close="*/", lang="c")


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def foo_config() -> AppConfig:
    return AppConfig(languages={"foo": FOO})


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "literate-md.toml"
    path.write_text(
        '[runtime]\neol = "lf"\n\n[languages.foo]\nopen = "/*"\nclose = "*/"\nlang = "c"\n',
        encoding="utf-8",
    )
    return path
