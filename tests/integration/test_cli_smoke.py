"""
capital — CLI smoke contracts

File: tests/integration/test_cli_smoke.py

Purpose
- Verify exit codes, command output and the config file side effects of
  ``python -m capital check`` and ``dump``.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest
import yaml

from capital.main import ExitCode, cli_entrypoint

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("CAPITAL_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("NO_COLOR", "1")


def _run_cli(cwd: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("CAPITAL_")}
    existing_pythonpath = env.get("PYTHONPATH")
    src_pythonpath = str(SRC_PATH)
    env["PYTHONPATH"] = (
        src_pythonpath if not existing_pythonpath else f"{src_pythonpath}{os.pathsep}{existing_pythonpath}"
    )
    return subprocess.run(
        [sys.executable, "-m", "capital", *args],
        cwd=cwd,
        text=True,
        capture_output=True,
        check=False,
        env=env,
    )


@pytest.mark.integration
def test_check_subprocess_generates_config(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "check", "--data-dir", "plugin_data", "--json")

    assert completed.returncode == 0, completed.stderr
    payload = json.loads(completed.stdout)
    assert payload["schema_type"] == "basic"
    assert sorted(payload["transfer_methods"]) == ["addmoney", "pay", "takemoney"]
    assert payload["persisted"] is True
    assert (tmp_path / "plugin_data" / "config.yml").is_file()

    events = [json.loads(line) for line in completed.stderr.splitlines() if line.startswith("{")]
    assert any(event["message"].startswith("Saved config file") for event in events)


@pytest.mark.integration
def test_dump_subprocess_prints_yaml(tmp_path: Path) -> None:
    completed = _run_cli(tmp_path, "dump", "--data-dir", str(tmp_path), "--log-level", "error")

    assert completed.returncode == 0, completed.stderr
    document = yaml.safe_load(completed.stdout)
    assert document["schema"]["type"] == "basic"
    assert "#schema" in document


def test_check_reports_repairs_in_text_mode(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "config.yml").write_text(
        "analytics:\n  top-list:\n    max-entries: 0\n",
        encoding="utf-8",
    )

    exit_code = cli_entrypoint(["check", "--data-dir", str(tmp_path), "--no-color"])

    out = capsys.readouterr().out
    assert exit_code == ExitCode.SUCCESS
    assert "Capital config check" in out
    assert "Repaired values:" in out
    assert "analytics.top-list.max-entries" in out
    assert "config loaded" in out


def test_check_reports_regeneration(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "config.yml").write_text("schema: not a mapping\n", encoding="utf-8")

    exit_code = cli_entrypoint(["check", "--data-dir", str(tmp_path), "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == ExitCode.SUCCESS
    assert payload["regenerated"] is True
    assert payload["backup_path"] == str(tmp_path / "config.yml.old")


def test_data_dir_that_is_a_file_is_a_config_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    not_a_dir = tmp_path / "data"
    not_a_dir.write_text("", encoding="utf-8")

    exit_code = cli_entrypoint(["check", "--data-dir", str(not_a_dir)])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "not a directory" in capsys.readouterr().err


def test_invalid_log_level_is_a_config_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli_entrypoint(["check", "--data-dir", str(tmp_path), "--log-level", "chatty"])

    assert exit_code == ExitCode.CONFIG_ERROR
    assert "unsupported log level" in capsys.readouterr().err


def test_missing_subcommand_is_a_usage_error() -> None:
    assert cli_entrypoint([]) == ExitCode.CONFIG_ERROR
