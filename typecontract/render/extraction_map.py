"""Manifest of which source file contributed which declarations."""

from __future__ import annotations

from pathlib import Path

from ..logging import get_logger
from ..models import ExtractionContext
from .generator import generated_at
from .writer import write_json

LOGGER = get_logger(__name__)

EXTRACTION_MAP_VERSION = "2.0.0"
DEFAULT_EXTRACTION_MAP_FILENAME = "{api}.extraction-map.json"


def build_extraction_map(context: ExtractionContext, api_version: str | None = None) -> dict[str, object]:
    by_file: dict[str, list[str]] = {}
    for name, record in context.types.items():
        by_file.setdefault(record.source_file, []).append(name)
    return {
        "version": EXTRACTION_MAP_VERSION,
        "generatedTimestamp": generated_at(context),
        "apiId": context.rules.api_id,
        "apiVersion": api_version,
        "types": {source: sorted(by_file[source]) for source in sorted(by_file)},
    }


def write_extraction_map(context: ExtractionContext, path: Path, api_version: str | None = None) -> Path:
    payload = build_extraction_map(context, api_version)
    write_json(path, payload)
    LOGGER.info("Extraction map written to %s", path)
    return path


__all__ = ["DEFAULT_EXTRACTION_MAP_FILENAME", "EXTRACTION_MAP_VERSION", "build_extraction_map", "write_extraction_map"]
