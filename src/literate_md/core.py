from __future__ import annotations

import re
import time
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path

from .config import AppConfig, LanguageConfig
from .logging import RunLogEntry, RunLogger
from .models import ConversionJob, ConversionResult
from .utils import atomic_write, extension_of, markdown_path, read_text

FENCE = "```"

LEADING_BREAKS = re.compile(r"\A(?:\r?\n)+")
TRAILING_BREAKS = re.compile(r"(?:\r?\n)+\Z")


class ConversionError(RuntimeError):
    def __init__(self, code: str, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.path = path


class UnsupportedExtension(KeyError):
    """Raised by the text API when no language is configured for an extension."""

    def __init__(self, extension: str) -> None:
        super().__init__(extension)
        self.extension = extension

    def __str__(self) -> str:
        return f"No language configured for extension {self.extension!r}"


class Region(str, Enum):
    PROSE = "prose"
    CODE = "code"


@dataclass(frozen=True, slots=True)
class DelimiterPatterns:
    leading_open: re.Pattern[str]
    delimiter: re.Pattern[str]


@lru_cache(maxsize=None)
def compile_patterns(language: LanguageConfig) -> DelimiterPatterns:
    """Build literal matchers for a language's prose delimiters.

    A delimiter only counts when it fills a whole line: it is preceded by at
    least one line break and followed by a line break or the end of the text.
    The trailing break run is left unconsumed so that two delimiters on
    consecutive lines are both found.
    """
    markers = sorted({language.open, language.close}, key=len, reverse=True)
    alternation = "|".join(re.escape(marker) for marker in markers)
    return DelimiterPatterns(
        leading_open=re.compile(rf"\A(?:\r?\n)*{re.escape(language.open)}(?=\r?\n)"),
        delimiter=re.compile(rf"(?:\r?\n)+(?P<marker>{alternation})(?=\r?\n|\Z)"),
    )


def _trim_breaks(text: str) -> str:
    return TRAILING_BREAKS.sub("", LEADING_BREAKS.sub("", text))


def split_regions(text: str, language: LanguageConfig) -> list[tuple[Region, str]]:
    """Split literate text into alternating prose and code regions.

    The text starts in prose when its first line is the open delimiter and in
    code otherwise. A close delimiter switches prose to code, an open
    delimiter switches code to prose; a delimiter that does not match the
    current region is kept verbatim. Line breaks next to a switching
    delimiter are dropped.
    """
    patterns = compile_patterns(language)
    leading = patterns.leading_open.match(text)
    if leading:
        state, start = Region.PROSE, leading.end()
    else:
        state, start = Region.CODE, 0

    regions: list[tuple[Region, str]] = []
    for match in patterns.delimiter.finditer(text, start):
        marker = match.group("marker")
        if state is Region.PROSE and marker == language.close:
            regions.append((state, _trim_breaks(text[start : match.start()])))
            state, start = Region.CODE, match.end()
        elif state is Region.CODE and marker == language.open:
            regions.append((state, _trim_breaks(text[start : match.start()])))
            state, start = Region.PROSE, match.end()
    regions.append((state, _trim_breaks(text[start:])))
    return regions


def normalize_regions(
    regions: list[tuple[Region, str]], separator: str
) -> list[tuple[Region, str]]:
    """Drop empty regions and merge the neighbours they separated."""
    # A lone region is kept even when empty: an empty file is still one code block.
    if len(regions) == 1:
        return regions
    merged: list[tuple[Region, str]] = []
    for kind, content in regions:
        if not content:
            continue
        if merged and merged[-1][0] is kind:
            merged[-1] = (kind, merged[-1][1] + separator + content)
        else:
            merged.append((kind, content))
    return merged


def render_markdown(
    regions: list[tuple[Region, str]], lang: str, eol: str
) -> str:
    if not regions:
        return ""
    parts: list[str] = []
    for kind, content in regions:
        if kind is Region.PROSE:
            parts.append(content)
        elif content:
            parts.append(f"{FENCE}{lang}{eol}{content}{eol}{FENCE}")
        else:
            parts.append(f"{FENCE}{lang}{eol}{FENCE}")
    return (eol + eol).join(parts) + eol


class LiterateConverter:
    """Rewrites literate source files into Markdown with fenced code blocks."""

    def __init__(
        self,
        config: AppConfig,
        *,
        eol: str | None = None,
        logger: RunLogger | None = None,
    ) -> None:
        self._config = config
        self._eol = eol if eol is not None else config.runtime.line_ending
        self._logger = logger or RunLogger(None)

    @property
    def config(self) -> AppConfig:
        return self._config

    def job_for(self, source: Path, output_path: Path) -> ConversionJob | None:
        extension = extension_of(source)
        language = self._config.language_for(extension)
        if language is None:
            return None
        return ConversionJob(
            source=source,
            output_path=markdown_path(output_path),
            extension=extension,
            language=language,
        )

    def convert_text(self, text: str, extension: str) -> str:
        language = self._config.language_for(extension)
        if language is None:
            raise UnsupportedExtension(extension)
        markdown, _ = self._render(text, language, language.fence_tag(extension))
        return markdown

    def convert(self, source: Path, output_path: Path) -> ConversionResult | None:
        job = self.job_for(source, output_path)
        if job is None:
            self.record_skip(source)
            return None
        return self.run_job(job)

    def record_skip(self, source: Path) -> None:
        self._log(RunLogEntry(source=str(source), output_path=None, status="skipped"), source)

    def run_job(self, job: ConversionJob) -> ConversionResult:
        start = time.perf_counter()
        try:
            text = self._read_source(job.source)
            markdown, code_blocks = self._render(text, job.language, job.lang)
            self._write_output(job.output_path, markdown)
        except ConversionError as exc:
            self._log_failure(job, exc)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._log(
            RunLogEntry(
                source=str(job.source),
                output_path=str(job.output_path),
                status="success",
                lang=job.lang,
                code_blocks=code_blocks,
                elapsed_ms=elapsed,
            ),
            job.source,
        )
        return ConversionResult(
            source=job.source,
            output_path=job.output_path,
            lang=job.lang,
            code_blocks=code_blocks,
            elapsed_ms=elapsed,
        )

    def _log(self, entry: RunLogEntry, source: Path) -> None:
        try:
            self._logger.append(entry)
        except OSError as exc:
            raise ConversionError(
                "WRITE_FAILURE", f"Cannot append run log for {source}: {exc}", source
            ) from exc

    def _log_failure(self, job: ConversionJob, exc: ConversionError) -> None:
        entry = RunLogEntry(
            source=str(job.source),
            output_path=str(job.output_path),
            status="failure",
            error_code=exc.code,
            lang=job.lang,
        )
        try:
            self._logger.append(entry)
        except OSError as log_exc:
            # The conversion error is the one raised.
            exc.add_note(f"Cannot append run log: {log_exc}")

    def _render(self, text: str, language: LanguageConfig, lang: str) -> tuple[str, int]:
        regions = normalize_regions(split_regions(text, language), self._eol + self._eol)
        code_blocks = sum(1 for kind, _ in regions if kind is Region.CODE)
        return render_markdown(regions, lang, self._eol), code_blocks

    def _read_source(self, source: Path) -> str:
        try:
            return read_text(source)
        except FileNotFoundError as exc:
            raise ConversionError("NOT_FOUND", f"Source file does not exist: {source}", source) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConversionError("READ_FAILURE", f"Cannot read {source}: {exc}", source) from exc

    def _write_output(self, output_path: Path, markdown: str) -> None:
        try:
            atomic_write(output_path, markdown)
        except OSError as exc:
            raise ConversionError(
                "WRITE_FAILURE", f"Cannot write {output_path}: {exc}", output_path
            ) from exc


__all__ = [
    "ConversionError",
    "LiterateConverter",
    "Region",
    "UnsupportedExtension",
    "compile_patterns",
    "normalize_regions",
    "render_markdown",
    "split_regions",
]
