from __future__ import annotations

import os
import tempfile
from pathlib import Path


MARKDOWN_SUFFIX = ".md"


def extension_of(path: Path) -> str:
    return path.suffix[1:]


def markdown_path(path: Path) -> Path:
    return path.with_suffix(MARKDOWN_SUFFIX)


def ensure_directory(path: Path) -> None:
    # Sibling conversions may race to create the same parent.
    path.mkdir(parents=True, exist_ok=True)


def read_text(path: Path, encoding: str = "utf-8") -> str:
    with path.open("r", encoding=encoding, newline="") as handle:
        return handle.read()


def atomic_write(path: Path, data: str, encoding: str = "utf-8") -> None:
    """Write *data* to *path* without newline translation, all or nothing."""

    ensure_directory(path.parent)
    with tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        encoding=encoding,
        newline="",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
