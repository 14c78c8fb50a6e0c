"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "codec.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Codec configuration template for structured-records.
# Replace every <REQUIRED> placeholder before running describe-schema or a conversion.
# Remove or adjust <OPTIONAL> entries only when the defaults do not fit.

schema:
  # Provide either inline record schema JSON text or a record schema path.
  inline: "<REQUIRED>"
  # path: "<OPTIONAL>"

json:
  # Discard object keys that are not schema fields instead of failing.
  lenient: false
  # Maximum nesting depth accepted while decoding.
  max_depth: 64

delimited:
  # Used literally; field values must not contain it.
  delimiter: ","
"""


def build_placeholder_configuration() -> str:
    """Build a YAML codec configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder codec configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Codec configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
