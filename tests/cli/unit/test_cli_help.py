"""CLI smoke tests."""

from click.testing import CliRunner
from structured_records.cli import cli


def test_cli_displays_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "generate-config" in result.output
    assert "describe-schema" in result.output
    assert "generate-schema" in result.output
    assert "json-to-delimited" in result.output
    assert "delimited-to-json" in result.output
    assert "--verbose" in result.output
