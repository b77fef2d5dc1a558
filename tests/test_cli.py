from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from literate_md.cli import app

runner = CliRunner()


@pytest.fixture
def use_config(monkeypatch: pytest.MonkeyPatch, config_file: Path) -> Path:
    monkeypatch.setenv("LITMD_CONFIG_PATH", str(config_file))
    return config_file


def test_cli_converts_tree_and_reports_each_file(tmp_path: Path, use_config: Path) -> None:
    source, target = tmp_path / "in", tmp_path / "out"
    (source / "sub").mkdir(parents=True)
    (source / "a.foo").write_text("/*\nHello prose.\n*/\nint x = 1;", encoding="utf-8")
    (source / "sub" / "b.foo").write_text("int y;", encoding="utf-8")
    (source / "skip.txt").write_text("ignored", encoding="utf-8")

    result = runner.invoke(app, ["-i", str(source), "-o", str(target)])

    assert result.exit_code == 0, result.output
    assert f"{source / 'a.foo'} -> {target / 'a.md'}" in result.output
    assert f"{source / 'sub' / 'b.foo'} -> {target / 'sub' / 'b.md'}" in result.output
    assert "skip.txt" not in result.output
    assert (target / "a.md").exists()
    assert not (target / "skip.md").exists()


def test_cli_long_options(tmp_path: Path, use_config: Path) -> None:
    source = tmp_path / "one.foo"
    source.write_text("int x;", encoding="utf-8")

    result = runner.invoke(app, ["--input", str(source), "--output", str(tmp_path / "out" / "one.foo")])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "out" / "one.md").exists()


def test_cli_exits_non_zero_on_read_failure(tmp_path: Path, use_config: Path) -> None:
    source, target = tmp_path / "in", tmp_path / "out"
    source.mkdir()
    (source / "bad.foo").write_bytes(b"\xff\xfe")
    (source / "good.foo").write_text("int ok;", encoding="utf-8")

    result = runner.invoke(app, ["-i", str(source), "-o", str(target)])

    assert result.exit_code == 1
    assert "READ_FAILURE" in result.output
    assert f"{source / 'good.foo'} -> {target / 'good.md'}" in result.output
    assert (target / "good.md").exists()


def test_cli_exits_non_zero_on_missing_input(tmp_path: Path, use_config: Path) -> None:
    result = runner.invoke(app, ["-i", str(tmp_path / "nope"), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output


def test_cli_requires_both_paths(use_config: Path) -> None:
    result = runner.invoke(app, ["-i", "src"])
    assert result.exit_code != 0


def test_cli_rejects_invalid_configuration(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    bad = tmp_path / "bad.toml"
    bad.write_text('[languages.foo]\nopen = "/*"\n', encoding="utf-8")
    monkeypatch.setenv("LITMD_CONFIG_PATH", str(bad))
    (tmp_path / "in").mkdir()

    result = runner.invoke(app, ["-i", str(tmp_path / "in"), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_cli_writes_run_log_when_configured(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "literate-md.toml"
    config.write_text(
        '[runtime]\nlog_file = "run.jsonl"\n\n[languages.foo]\nopen = "/*"\nclose = "*/"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("LITMD_CONFIG_PATH", str(config))
    source, target = tmp_path / "in", tmp_path / "out"
    source.mkdir()
    (source / "a.foo").write_text("int a;", encoding="utf-8")
    (source / "b.txt").write_text("b", encoding="utf-8")

    result = runner.invoke(app, ["-i", str(source), "-o", str(target)])

    assert result.exit_code == 0, result.output
    entries = [json.loads(line) for line in (target / "run.jsonl").read_text(encoding="utf-8").splitlines()]
    assert sorted(entry["status"] for entry in entries) == ["skipped", "success"]
    assert next(entry for entry in entries if entry["status"] == "success")["lang"] == "foo"


def test_cli_rejects_invalid_environment_override(
    tmp_path: Path, use_config: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LITMD_EOL", "sideways")
    (tmp_path / "in").mkdir()

    result = runner.invoke(app, ["-i", str(tmp_path / "in"), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert not (tmp_path / "out").exists()
