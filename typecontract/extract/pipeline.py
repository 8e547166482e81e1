"""Run extraction, transformation, validation and the ``any`` guard for one API."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..errors import ExtractionFailed, TransformFailure, ValidationFailure
from ..guard import enforce_no_any
from ..logging import get_logger
from ..models import ExtractionContext, ExtractionRules
from ..transform.engine import apply_rule_transforms
from ..transform.validator import run_validators
from .base import Adapter, ClassPredicate, TransformHook, ValidateHook, reject_all_classes
from .declarations import extract_files, normalize_paths

LOGGER = get_logger(__name__)


def extract_types(
    files: Sequence[str | Path],
    rules: ExtractionRules,
    *,
    apply_transformations: TransformHook = apply_rule_transforms,
    validate_types: ValidateHook = run_validators,
    should_extract_class: ClassPredicate = reject_all_classes,
) -> ExtractionContext:
    """Build a fresh context from ``files`` and run every pre-render stage once.

    Raises an ExtractionFailed subclass on parse failures, hook crashes and
    ``any`` violations; the partially filled context travels with the error.
    Validation failures are only recorded in ``context.errors``.
    """
    context = ExtractionContext(rules=rules, source_files=normalize_paths(list(files)))
    try:
        extract_files(context, context.source_files, should_extract_class)
        LOGGER.info(
            "Parsed %d files, extracted %d declarations for '%s'",
            context.metrics.files_parsed,
            context.metrics.types_extracted,
            rules.api_id,
        )
        try:
            apply_transformations(context)
        except ExtractionFailed:
            raise
        except Exception as error:
            context.add_error("", f"Transformation failed: {error}", code="transform")
            raise TransformFailure(f"Transformation failed: {error}", context) from error
        try:
            validate_types(context)
        except ExtractionFailed:
            raise
        except Exception as error:
            context.add_error("", f"Validation crashed: {error}", code="validation")
            raise ValidationFailure(f"Validation crashed: {error}", context) from error
        enforce_no_any(context)
    finally:
        context.metrics.finish()
    return context


def run_adapter(files: Sequence[str | Path], adapter: Adapter) -> ExtractionContext:
    return extract_types(
        files,
        adapter.rules,
        apply_transformations=adapter.apply_transformations,
        validate_types=adapter.validate_types,
        should_extract_class=adapter.should_extract_class,
    )


__all__ = ["extract_types", "run_adapter"]
