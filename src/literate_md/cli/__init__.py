from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from ..config import AppConfig
from ..core import LiterateConverter
from ..logging import RunLogger
from ..models import ConversionResult
from ..settings import load_effective_config
from ..walker import TreeWalker

console = Console()

app = typer.Typer(help="Convert literate source trees into Markdown")


def _load_config() -> AppConfig:
    return load_effective_config()


def _report(result: ConversionResult) -> None:
    console.print(result.summary, markup=False, highlight=False, soft_wrap=True)


@app.command()
def convert(
    input: Path = typer.Option(..., "-i", "--input", help="Input file or directory"),
    output: Path = typer.Option(..., "-o", "--output", help="Output file or directory"),
) -> None:
    try:
        cfg = _load_config()
    except (OSError, ValueError) as exc:
        console.print(f"[red]Invalid configuration[/red]: {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from exc

    log_root = output if input.is_dir() else output.parent
    log_file = log_root / cfg.runtime.log_file if cfg.runtime.log_file else None
    converter = LiterateConverter(cfg, logger=RunLogger(log_file))
    result = TreeWalker(converter).walk(input, output, progress=_report)

    for error in result.errors:
        console.print(f"[red]{error.code}[/red]: {escape(str(error))}", highlight=False, soft_wrap=True)
    if not result.ok:
        console.print(
            f"Converted {len(result.converted)} files, "
            f"{len(result.errors)} failed.",
            soft_wrap=True,
        )
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
