"""Command line interface entry point."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

import click

from structured_records.configuration import (
    DEFAULT_CONFIG_FILENAME,
    Configuration,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from structured_records.conversion import (
    read_delimited_records,
    read_json_records,
    write_delimited_records,
    write_json_records,
)
from structured_records.errors import RecordCodecError
from structured_records.schema_generation import generate_schema
from structured_records.schema_model import schema_to_json

logger = logging.getLogger(__name__)


class CliError(Exception):
    """Custom CLI error."""


_CONFIG_OPTION = click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON codec configuration file",
)
_INPUT_OPTION = click.option(
    "--input",
    "input_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the file to convert",
)
_OUTPUT_OPTION = click.option(
    "--output",
    "output_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional output file; standard output when omitted",
)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="structured-records")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Schema-driven structured record converter."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML codec configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML codec configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="describe-schema")
@_CONFIG_OPTION
def describe_schema(config_path: str) -> None:
    """Print the configured record schema in canonical JSON form."""
    configuration = _load(config_path)
    click.echo(schema_to_json(configuration.schema.schema, indent=2))


@cli.command(name="generate-schema")
@click.option(
    "--type",
    "type_path",
    required=True,
    help="Native type to reflect over, as 'package.module:ClassName'",
)
def generate_schema_command(type_path: str) -> None:
    """Generate a record schema from a Python class."""
    native_type = _import_type(type_path)
    try:
        schema = generate_schema(native_type)
    except RecordCodecError as exc:
        raise CliError(str(exc)) from exc
    click.echo(schema_to_json(schema, indent=2))


@cli.command(name="json-to-delimited")
@_CONFIG_OPTION
@_INPUT_OPTION
@_OUTPUT_OPTION
def json_to_delimited(config_path: str, input_path: str, output_path: str | None) -> None:
    """Convert newline-delimited JSON records to delimited lines."""
    configuration = _load(config_path)
    settings = configuration.json
    try:
        with (
            open(input_path, encoding="utf-8") as source,
            click.open_file(output_path or "-", "w", encoding="utf-8") as sink,
        ):
            records = read_json_records(
                source,
                configuration.schema.schema,
                lenient=settings.lenient,
                max_depth=settings.max_depth,
            )
            count = write_delimited_records(records, sink, configuration.delimited.delimiter)
    except (RecordCodecError, OSError) as exc:
        raise CliError(str(exc)) from exc
    logger.info("Converted %d records from %s", count, input_path)
    if output_path:
        click.echo(str(Path(output_path).resolve()))


@cli.command(name="delimited-to-json")
@_CONFIG_OPTION
@_INPUT_OPTION
@_OUTPUT_OPTION
def delimited_to_json(config_path: str, input_path: str, output_path: str | None) -> None:
    """Convert delimited lines to newline-delimited JSON records."""
    configuration = _load(config_path)
    try:
        with (
            open(input_path, encoding="utf-8", newline="") as source,
            click.open_file(output_path or "-", "w", encoding="utf-8") as sink,
        ):
            records = read_delimited_records(
                source, configuration.delimited.delimiter, configuration.schema.schema
            )
            count = write_json_records(records, sink)
    except (RecordCodecError, OSError) as exc:
        raise CliError(str(exc)) from exc
    logger.info("Converted %d records from %s", count, input_path)
    if output_path:
        click.echo(str(Path(output_path).resolve()))


def _load(config_path: str) -> Configuration:
    try:
        return load_configuration(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc


def _import_type(type_path: str) -> Any:
    module_name, _, attribute = type_path.partition(":")
    if not module_name or not attribute:
        raise CliError(f"Type must be given as 'module:ClassName', got '{type_path}'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise CliError(f"Cannot import module '{module_name}': {exc}") from exc
    native_type: Any = module
    for part in attribute.split("."):
        try:
            native_type = getattr(native_type, part)
        except AttributeError as exc:
            raise CliError(f"'{type_path}' does not name an attribute: {exc}") from exc
    return native_type


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
