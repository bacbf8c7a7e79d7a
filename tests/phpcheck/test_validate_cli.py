from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from phpcheck.state import SourceFile
from phpcheck.validate import main

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_cli_reports_invalid_files(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _write(tmp_path / "plugins" / "good.php", "<?php echo 1;\n")
    bad = _write(tmp_path / "plugins" / "bad.php", "<?php\nif (1) {\n")
    out_dir = tmp_path / "out"

    code = main([str(tmp_path / "plugins"), "--no-external", "--summary", "--out", str(out_dir)])

    lines = capsys.readouterr().out.splitlines()
    assert code == 1
    assert lines[0] == "files_found=2 valid=1 invalid=1"
    assert lines[1].startswith(f"invalid:{bad}:")
    assert "PARSE syntax error, unexpected end of file" in lines[1]
    assert "summary:" in lines
    assert "    PARSE: 1" in lines
    payload = json.loads((out_dir / "index.json").read_text(encoding="utf-8"))
    assert payload["total_invalid"] == 1


def test_cli_all_valid(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = _write(tmp_path / "one.php", "<?php\nnamespace Demo;\n")

    assert main([str(target)]) == 0
    assert capsys.readouterr().out.strip() == "files_found=1 valid=1 invalid=0"


def test_cli_reports_unreadable_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    target = _write(tmp_path / "locked.php", "<?php echo 1;\n")

    def denied(self: SourceFile) -> str:
        raise PermissionError("denied")

    monkeypatch.setattr(SourceFile, "read_text", denied)

    assert main([str(target)]) == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "files_found=1 valid=0 invalid=1",
        f"invalid:{target}:0: READ_ERROR Failed to read locked.php: denied",
    ]


def test_cli_config_error_exit_code(tmp_path: Path) -> None:
    target = _write(tmp_path / "one.php", "<?php\n")
    bad_config = _write(tmp_path / "phpcheck.yaml", "bogus: true\n")

    assert main([str(target), "--timeout", "0"]) == 2
    assert main([str(target), "--config", str(bad_config)]) == 2


def test_cli_module_entrypoint(tmp_path: Path) -> None:
    target = _write(tmp_path / "tpl.php", "<?php if ($x): ?>\n<b>x</b>\n<?php endif; ?>")
    env = dict(os.environ, PYTHONPATH=str(SRC_DIR), PHPCHECK_EXTERNAL="0")

    result = subprocess.run(
        [sys.executable, "-m", "phpcheck.validate", str(target)],
        capture_output=True,
        text=True,
        env=env,
    )

    assert result.returncode == 0
    assert result.stdout.strip() == "files_found=1 valid=1 invalid=0"
