"""Structural and rule-supplied checks over extracted declarations."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..logging import get_logger
from ..models import ExtractedType, ExtractionContext, ValidationResult

LOGGER = get_logger(__name__)

StructuralCheck = Callable[[ExtractedType], Optional[ValidationResult]]


def require_field(field_name: str, *, suffix: str) -> StructuralCheck:
    """Declarations named ``*<suffix>`` must expose ``field_name``.

    Returns None for declarations the check does not apply to.
    """

    def _check(record: ExtractedType) -> ValidationResult | None:
        if not record.name.endswith(suffix):
            return None
        if record.property_named(field_name) is not None:
            return ValidationResult(valid=True)
        return ValidationResult(
            valid=False,
            errors=[f"{suffix} type {record.name} missing '{field_name}' field"],
        )

    return _check


def _record_result(context: ExtractionContext, record: ExtractedType, result: ValidationResult) -> None:
    for warning in result.warnings:
        LOGGER.warning("%s: %s", record.name, warning)
    if result.valid:
        context.metrics.validations_passed += 1
        return
    context.metrics.validations_failed += 1
    messages = result.errors or [f"Validation failed for {record.name}"]
    for message in messages:
        context.add_error(
            record.source_file,
            message,
            type_name=record.name,
            line=record.location.line,
            column=record.location.column,
            code="validation",
        )


def run_validators(context: ExtractionContext, checks: Iterable[StructuralCheck] = ()) -> None:
    """Run structural checks then the rule validator keyed by each declaration's name.

    Every check sees a detached copy, so ``context.types`` is never modified here.
    """
    checks = list(checks)
    validators = context.rules.validators
    for record in context.sorted_types():
        for check in checks:
            result = check(record.detached())
            if result is not None:
                _record_result(context, record, result)
        validator = validators.get(record.name)
        if validator is not None:
            _record_result(context, record, validator(record.detached()))
    LOGGER.info(
        "Validation finished: %d passed, %d failed",
        context.metrics.validations_passed,
        context.metrics.validations_failed,
    )


def with_checks(*checks: StructuralCheck) -> Callable[[ExtractionContext], None]:
    """Build a validation hook that runs ``checks`` before the rule validators."""

    def _hook(context: ExtractionContext) -> None:
        run_validators(context, checks)

    return _hook


__all__ = ["StructuralCheck", "require_field", "run_validators", "with_checks"]
