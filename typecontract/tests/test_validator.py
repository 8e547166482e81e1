"""Validators record outcomes without touching the declarations."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from typecontract.errors import ValidationFailure
from typecontract.extract.pipeline import extract_types
from typecontract.models import ExtractedType, ExtractionRules, ValidationResult
from typecontract.transform.validator import require_field, with_checks


def _product(record: ExtractedType) -> ValidationResult:
    return ValidationResult(valid=True, warnings=["Consider adding a description field"])


def _order(record: ExtractedType) -> ValidationResult:
    return ValidationResult(valid=False, errors=["Order must have a customer", "Order must have a date"])


def _destructive(record: ExtractedType) -> ValidationResult:
    record.properties.clear()
    record.name = "Mangled"
    return ValidationResult(valid=True)


def test_counts_passes_failures_and_errors(sample_models: Path, caplog: pytest.LogCaptureFixture) -> None:
    rules = ExtractionRules(api_id="sample", validators={"Product": _product, "Order": _order})
    with caplog.at_level(logging.WARNING):
        context = extract_types(
            [sample_models],
            rules,
            validate_types=with_checks(require_field("success", suffix="Response")),
        )

    assert context.metrics.validations_passed == 2
    assert context.metrics.validations_failed == 2
    validation_errors = [error for error in context.errors if error.code == "validation"]
    assert [error.type_name for error in validation_errors] == ["ErrorResponse", "Order", "Order"]
    assert validation_errors[0].message == "Response type ErrorResponse missing 'success' field"
    assert validation_errors[1].line == context.types["Order"].location.line
    assert "Consider adding a description field" in caplog.text


def test_validators_see_detached_copies(sample_models: Path) -> None:
    context = extract_types([sample_models], ExtractionRules(api_id="sample", validators={"User": _destructive}))
    user = context.types["User"]
    assert user.name == "User"
    assert len(user.properties) == 4
    assert context.metrics.validations_passed == 1


def test_crashing_validator_is_fatal(sample_models: Path) -> None:
    def crash(record: ExtractedType) -> ValidationResult:
        raise KeyError("missing")

    with pytest.raises(ValidationFailure):
        extract_types([sample_models], ExtractionRules(api_id="sample", validators={"User": crash}))
