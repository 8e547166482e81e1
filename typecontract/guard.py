"""Refuse any implicit ``any`` in the final declarations."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import ForbiddenTypeError
from .logging import get_logger
from .models import ExtractedType, ExtractionContext

LOGGER = get_logger(__name__)

FORBIDDEN_TOKEN = "any"
SNIPPET_RADIUS = 20
_FORBIDDEN_PATTERN = re.compile(rf"\b{FORBIDDEN_TOKEN}\b")


@dataclass(slots=True)
class Occurrence:
    offset: int
    line: int
    column: int
    snippet: str


def find_occurrences(definition: str, *, first_line: int = 1, first_column: int = 1) -> list[Occurrence]:
    """Locate every standalone ``any`` token.

    Line and column are translated into source coordinates assuming the
    definition starts at ``first_line``/``first_column``.
    """
    occurrences: list[Occurrence] = []
    for match in _FORBIDDEN_PATTERN.finditer(definition):
        start = match.start()
        before = definition[:start]
        line_offset = before.count("\n")
        if line_offset:
            column = start - before.rfind("\n")
        else:
            column = first_column + start
        snippet = definition[max(0, start - SNIPPET_RADIUS) : min(len(definition), start + SNIPPET_RADIUS)]
        occurrences.append(
            Occurrence(offset=start, line=first_line + line_offset, column=column, snippet=" ".join(snippet.split()))
        )
    return occurrences


def _report(context: ExtractionContext, record: ExtractedType, occurrences: list[Occurrence]) -> None:
    context.metrics.unknown_type_violations += 1
    for occurrence in occurrences:
        context.add_error(
            record.source_file,
            f"Type '{record.name}' contains '{FORBIDDEN_TOKEN}' type: {occurrence.snippet}. "
            "Use a specific type or a branded unknown instead.",
            type_name=record.name,
            line=occurrence.line,
            column=occurrence.column,
            code="any-type-violation",
        )


def enforce_no_any(context: ExtractionContext) -> None:
    """Scan every final definition; raise ForbiddenTypeError if ``any`` appears anywhere."""
    total = 0
    violating: list[str] = []
    for record in context.sorted_types():
        occurrences = find_occurrences(
            record.definition,
            first_line=record.location.line,
            first_column=record.location.column,
        )
        if not occurrences:
            continue
        _report(context, record, occurrences)
        total += len(occurrences)
        violating.append(record.name)
    if total:
        LOGGER.error("Found %d '%s' occurrences in %d declarations", total, FORBIDDEN_TOKEN, len(violating))
        raise ForbiddenTypeError(
            f"Extraction failed: {total} '{FORBIDDEN_TOKEN}' type violations found in "
            f"{len(violating)} declarations ({', '.join(violating)}). See errors for details.",
            context,
            occurrences=total,
            violating_types=violating,
        )


__all__ = ["FORBIDDEN_TOKEN", "Occurrence", "enforce_no_any", "find_occurrences"]
