"""CLI orchestration integration tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner
from structured_records.cli import cli
from structured_records.schema_model import parse_schema

PERSON_SCHEMA = {
    "type": "record",
    "name": "Person",
    "fields": [
        {"name": "name", "type": "string"},
        {"name": "age", "type": ["null", "int"]},
        {"name": "active", "type": "boolean"},
    ],
}


def _write_config(tmp_path: Path, **sections: object) -> Path:
    config = {"schema": {"inline": json.dumps(PERSON_SCHEMA)}, **sections}
    path = tmp_path / "codec.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def test_generate_config_command_writes_scaffold(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "codec.yaml"

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code == 0
    assert str(output_path.resolve()) in result.output
    assert "<REQUIRED>" in output_path.read_text(encoding="utf-8")


def test_generate_config_refuses_to_overwrite(tmp_path: Path) -> None:
    runner = CliRunner()
    output_path = tmp_path / "codec.yaml"
    output_path.write_text("keep", encoding="utf-8")

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code != 0
    assert output_path.read_text(encoding="utf-8") == "keep"


def test_describe_schema_prints_canonical_schema(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = _write_config(tmp_path)

    result = runner.invoke(cli, ["describe-schema", "--config", str(config_path)])

    assert result.exit_code == 0
    assert parse_schema(result.output) == parse_schema(json.dumps(PERSON_SCHEMA))


def test_json_to_delimited_writes_output_file(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = _write_config(tmp_path, delimited={"delimiter": "|"})
    input_path = tmp_path / "people.jsonl"
    input_path.write_text(
        '{"name":"Ann","age":null,"active":true}\n\n{"name":"Bo","age":4,"active":false}\n',
        encoding="utf-8",
    )
    output_path = tmp_path / "people.txt"

    result = runner.invoke(
        cli,
        [
            "json-to-delimited",
            "--config",
            str(config_path),
            "--input",
            str(input_path),
            "--output",
            str(output_path),
        ],
    )

    assert result.exit_code == 0
    assert output_path.read_text(encoding="utf-8") == "Ann||true\nBo|4|false\n"


def test_json_to_delimited_honors_lenient_setting(tmp_path: Path) -> None:
    runner = CliRunner()
    input_path = tmp_path / "people.jsonl"
    input_path.write_text('{"name":"Ann","active":true,"team":"blue"}\n', encoding="utf-8")
    arguments = ["json-to-delimited", "--input", str(input_path), "--config"]

    strict = runner.invoke(cli, [*arguments, str(_write_config(tmp_path))])
    lenient = runner.invoke(
        cli, [*arguments, str(_write_config(tmp_path, json={"lenient": True}))]
    )

    assert strict.exit_code == 1
    assert lenient.exit_code == 0
    assert lenient.output == "Ann,,true\n"


def test_delimited_to_json_writes_to_stdout(tmp_path: Path) -> None:
    runner = CliRunner()
    config_path = _write_config(tmp_path)
    input_path = tmp_path / "people.csv"
    input_path.write_text("Ann,,true\nBo,4,FALSE\n", encoding="utf-8")

    result = runner.invoke(
        cli, ["delimited-to-json", "--config", str(config_path), "--input", str(input_path)]
    )

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        '{"name":"Ann","age":null,"active":true}',
        '{"name":"Bo","age":4,"active":false}',
    ]


def test_generate_schema_reflects_over_a_dataclass(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "sample_models.py").write_text(
        "from __future__ import annotations\n"
        "from dataclasses import dataclass\n\n\n"
        "@dataclass\n"
        "class Person:\n"
        "    name: str\n"
        "    age: int | None\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    runner = CliRunner()

    result = runner.invoke(cli, ["generate-schema", "--type", "sample_models:Person"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "type": "record",
        "name": "Person",
        "fields": [
            {"name": "name", "type": "string"},
            {"name": "age", "type": ["null", "long"]},
        ],
    }
