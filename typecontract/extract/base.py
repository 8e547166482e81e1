"""Adapter contract for API-specific extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..models import ExtractionContext, ExtractionRules
from ..transform.engine import apply_rule_transforms
from ..transform.validator import run_validators


class TransformHook(Protocol):
    def __call__(self, context: ExtractionContext) -> None:
        """Apply API-specific edits to ``context.types`` in place."""


class ValidateHook(Protocol):
    def __call__(self, context: ExtractionContext) -> None:
        """Record validation outcomes in ``context.errors`` and metrics only."""


class ClassPredicate(Protocol):
    def __call__(self, name: str) -> bool:
        """Return True when a class declaration should be extracted."""


def reject_all_classes(name: str) -> bool:
    return False


def classes_named(*fragments: str) -> ClassPredicate:
    """Accept classes whose name contains any of ``fragments``."""

    def _predicate(name: str) -> bool:
        return any(fragment in name for fragment in fragments)

    return _predicate


@dataclass(slots=True)
class Adapter:
    """Rules plus the hooks injected into the generic pipeline."""

    rules: ExtractionRules
    apply_transformations: TransformHook = field(default=apply_rule_transforms)
    validate_types: ValidateHook = field(default=run_validators)
    should_extract_class: ClassPredicate = field(default=reject_all_classes)


__all__ = [
    "Adapter",
    "ClassPredicate",
    "TransformHook",
    "ValidateHook",
    "classes_named",
    "reject_all_classes",
]
