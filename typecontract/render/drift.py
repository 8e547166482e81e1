"""Name-level drift between two generated contract artifacts."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

DECLARATION_HEADER = re.compile(r"export\s+(?:declare\s+)?(?:abstract\s+)?(?:interface|type|enum|class)\s+([A-Za-z_$][\w$]*)")


@dataclass(slots=True)
class DriftReport:
    """Added and removed exported names.

    Body edits that keep every name are not drift: only the name sets are
    compared once the texts differ.
    """

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    content_changed: bool = False
    previous_exists: bool = False

    @property
    def has_drift(self) -> bool:
        return bool(self.added or self.removed)

    @property
    def summary(self) -> str:
        if not self.previous_exists:
            return "No existing file to compare"
        if not self.content_changed:
            return "No drift detected"
        lines: list[str] = []
        if self.added:
            lines.append(f"Added types: {', '.join(self.added)}")
        if self.removed:
            lines.append(f"Removed types: {', '.join(self.removed)}")
        return "\n".join(lines) if lines else "Types modified but names unchanged"


def exported_names(content: str) -> set[str]:
    return {match.group(1) for match in DECLARATION_HEADER.finditer(content)}


def detect_drift(previous: str | None, current: str) -> DriftReport:
    if previous is None:
        return DriftReport()
    if previous == current:
        return DriftReport(previous_exists=True)
    old_names = exported_names(previous)
    new_names = exported_names(current)
    return DriftReport(
        added=sorted(new_names - old_names),
        removed=sorted(old_names - new_names),
        content_changed=True,
        previous_exists=True,
    )


__all__ = ["DECLARATION_HEADER", "DriftReport", "detect_drift", "exported_names"]
