"""Boundary tests for the layering between schema, record and codec packages."""

from __future__ import annotations

from pathlib import Path


def _package_root() -> Path:
    return Path(__file__).resolve().parents[3] / "src" / "structured_records"


def _imports_in(package: str) -> str:
    return "\n".join(
        path.read_text(encoding="utf-8") for path in (_package_root() / package).glob("*.py")
    )


def test_schema_model_does_not_import_records_or_codecs() -> None:
    text = _imports_in("schema_model")

    for fragment in (
        "structured_records.record_model",
        "structured_records.json_codec",
        "structured_records.delimited_codec",
        "structured_records.conversion",
    ):
        assert fragment not in text, f"Forbidden schema_model dependency: {fragment}"


def test_codecs_do_not_import_each_other() -> None:
    assert "structured_records.delimited_codec" not in _imports_in("json_codec")
    assert "structured_records.json_codec" not in _imports_in("delimited_codec")
