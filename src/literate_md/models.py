"""Domain models for literate source conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .config import LanguageConfig

if TYPE_CHECKING:
    from .core import ConversionError


@dataclass(frozen=True, slots=True)
class ConversionJob:
    """One file to convert, created on discovery and dropped once written."""

    source: Path
    output_path: Path
    extension: str
    language: LanguageConfig

    @property
    def lang(self) -> str:
        return self.language.fence_tag(self.extension)


@dataclass(slots=True)
class ConversionResult:
    """Result metadata for an individual conversion."""

    source: Path
    output_path: Path
    lang: str
    code_blocks: int
    elapsed_ms: float = 0.0

    @property
    def summary(self) -> str:
        return f"{self.source} -> {self.output_path}"


@dataclass(slots=True)
class WalkResult:
    """Aggregate results for one walk over an input tree."""

    converted: list[ConversionResult] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    errors: list[ConversionError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


__all__ = [
    "ConversionJob",
    "ConversionResult",
    "WalkResult",
]
