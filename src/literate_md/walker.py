from __future__ import annotations

import concurrent.futures
import stat
from pathlib import Path
from typing import Callable, Iterator

from .core import ConversionError, LiterateConverter
from .models import ConversionJob, ConversionResult, WalkResult

ProgressCallback = Callable[[ConversionResult], None]


class TreeWalker:
    """Mirrors an input tree into an output tree, converting files concurrently.

    Discovery runs depth-first on the calling thread and hands each
    convertible file to a thread pool as soon as it is found. Every
    submitted conversion is allowed to finish; failures are collected on the
    returned :class:`WalkResult` rather than aborting the walk.
    """

    def __init__(self, converter: LiterateConverter, *, parallelism: int | None = None) -> None:
        self._converter = converter
        self._parallelism = max(1, parallelism or converter.config.runtime.workers)

    def walk(
        self,
        input_path: Path,
        output_path: Path,
        progress: ProgressCallback | None = None,
    ) -> WalkResult:
        callback = progress or (lambda _: None)
        result = WalkResult()
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._parallelism, thread_name_prefix="literate-md"
        ) as executor:
            future_map = {
                executor.submit(self._converter.run_job, job): job
                for job in self._discover(Path(input_path), Path(output_path), result)
            }
            for future in concurrent.futures.as_completed(future_map):
                try:
                    converted = future.result()
                except ConversionError as exc:
                    result.errors.append(exc)
                    continue
                result.converted.append(converted)
                callback(converted)

        result.converted.sort(key=lambda item: str(item.source))
        result.errors.sort(key=lambda exc: str(exc.path))
        return result

    def _discover(
        self, input_root: Path, output_root: Path, result: WalkResult
    ) -> Iterator[ConversionJob]:
        stack: list[tuple[Path, Path]] = [(input_root, output_root)]
        claimed: dict[Path, Path] = {}
        while stack:
            source, target = stack.pop()
            try:
                mode = source.stat().st_mode
            except FileNotFoundError:
                result.errors.append(
                    ConversionError("NOT_FOUND", f"Input path does not exist: {source}", source)
                )
                continue
            except OSError as exc:
                result.errors.append(
                    ConversionError("READ_FAILURE", f"Cannot stat {source}: {exc}", source)
                )
                continue

            if stat.S_ISDIR(mode):
                try:
                    children = sorted(source.iterdir())
                except OSError as exc:
                    result.errors.append(
                        ConversionError("READ_FAILURE", f"Cannot list {source}: {exc}", source)
                    )
                    continue
                # Reversed so the stack pops children in name order.
                stack.extend((child, target / child.name) for child in reversed(children))
            elif stat.S_ISREG(mode):
                job = self._converter.job_for(source, target)
                if job is None:
                    result.skipped.append(source)
                    try:
                        self._converter.record_skip(source)
                    except ConversionError as exc:
                        result.errors.append(exc)
                    continue
                # a.js and a.css in one directory would both become a.md.
                owner = claimed.setdefault(job.output_path, source)
                if owner != source:
                    result.errors.append(
                        ConversionError(
                            "WRITE_FAILURE",
                            f"{source} and {owner} both convert to {job.output_path}",
                            source,
                        )
                    )
                    continue
                yield job


__all__ = ["ProgressCallback", "TreeWalker"]
