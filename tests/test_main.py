"""Tests for the ``ccu`` command group and main() exit codes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generator
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from composer_check_updates.cli import cli, main
from composer_check_updates.__version__ import __version__
from composer_check_updates.exceptions import CCUError


@pytest.fixture(autouse=True)
def reset_ccu_logger() -> Generator[None, None, None]:
    yield
    root = logging.getLogger("ccu")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.mark.unit
class TestCLIGroup:
    """Tests for the top-level ``ccu`` group."""

    def test_version(self) -> None:
        result = CliRunner().invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == f"composer-check-updates {__version__}"

    def test_help_lists_commands(self) -> None:
        result = CliRunner().invoke(cli, ["-h"])

        assert result.exit_code == 0
        assert "check" in result.output
        assert "update" in result.output

    @pytest.mark.parametrize(
        "flags, level",
        [([], logging.WARNING), (["-v"], logging.INFO), (["-vv"], logging.DEBUG)],
    )
    def test_verbosity_sets_log_level(self, flags: list, level: int, project: Path) -> None:
        """Test each -v raises the ccu logger one level."""
        CliRunner().invoke(cli, [*flags, "check", "-d", str(project), "-f", "none/*"])

        assert logging.getLogger("ccu").level == level

    def test_missing_config_file_is_usage_error(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(cli, ["-c", str(tmp_path / "nope.toml"), "check"])
        assert result.exit_code == 2

    def test_unknown_command(self) -> None:
        result = CliRunner().invoke(cli, ["frobnicate"])
        assert result.exit_code == 2


@pytest.mark.unit
class TestMain:
    """Tests for main() exit code mapping."""

    def _run(self, monkeypatch: pytest.MonkeyPatch, *args: str) -> int:
        monkeypatch.setattr("sys.argv", ["ccu", *args])
        return main()

    def test_success(self, monkeypatch: pytest.MonkeyPatch, project: Path, packagist: list) -> None:
        assert self._run(monkeypatch, "check", "-d", str(project)) == 0

    def test_version_exits_zero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(monkeypatch, "--version") == 0

    def test_usage_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert self._run(monkeypatch, "check", "--target", "newest") == 2

    def test_application_error(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test a missing composer.json exits with 1."""
        assert self._run(monkeypatch, "check", "-d", str(tmp_path)) == 1

    def test_keyboard_interrupt(self) -> None:
        with patch("composer_check_updates.cli.cli", side_effect=KeyboardInterrupt):
            assert main() == 130

    def test_abort(self) -> None:
        with patch("composer_check_updates.cli.cli", side_effect=click.Abort):
            assert main() == 130

    def test_ccu_error(self, capsys: pytest.CaptureFixture) -> None:
        with patch("composer_check_updates.cli.cli", side_effect=CCUError("broken")):
            assert main() == 1

        assert "broken" in capsys.readouterr().out

    def test_unexpected_error(self, capsys: pytest.CaptureFixture) -> None:
        with patch("composer_check_updates.cli.cli", side_effect=RuntimeError("kaboom")):
            assert main() == 1

        assert "Unexpected error: kaboom" in capsys.readouterr().out

    def test_system_exit_code(self) -> None:
        with patch("composer_check_updates.cli.cli", side_effect=SystemExit(3)):
            assert main() == 3
