"""CLI smoke tests.

Basic tests to verify CLI wiring. Comprehensive tests are in tests/unit/cli/.
"""

from __future__ import annotations

from typer.testing import CliRunner

from plotkit.cli.main import app

runner = CliRunner()


def test_version_command_outputs_version() -> None:
    result = runner.invoke(app, ["version"], env={"NO_COLOR": "1", "TERM": "dumb"})
    assert result.exit_code == 0
    assert "plotkit" in result.stdout.lower()


def test_render_help_shows_options() -> None:
    result = runner.invoke(app, ["render", "--help"], env={"NO_COLOR": "1", "TERM": "dumb"})
    assert result.exit_code == 0
    assert "--output" in result.stdout


def test_cube_help_shows_options() -> None:
    result = runner.invoke(app, ["cube", "--help"], env={"NO_COLOR": "1", "TERM": "dumb"})
    assert result.exit_code == 0
    assert "--camera" in result.stdout
