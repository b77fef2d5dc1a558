from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .utils import ensure_directory


@dataclass(slots=True)
class RunLogEntry:
    source: str
    output_path: str | None
    status: str
    error_code: str | None = None
    lang: str | None = None
    code_blocks: int = 0
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class RunLogger:
    """Appends one JSON line per conversion attempt; a no-op without a file."""

    def __init__(self, log_file: Path | None) -> None:
        self._log_file = log_file
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self._log_file is not None

    def append(self, entry: RunLogEntry) -> None:
        if self._log_file is None:
            return
        line = json.dumps(entry.to_dict(), ensure_ascii=False)
        with self._lock:
            ensure_directory(self._log_file.parent)
            with self._log_file.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
