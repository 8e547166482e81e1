"""Exception hierarchy for extraction runs."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ExtractionContext, ExtractionError, ExtractionMetrics
    from .render.drift import DriftReport


class TypeContractError(Exception):
    """Base class for all errors raised by typecontract."""


class ConfigurationError(TypeContractError):
    """Invalid configuration or adapter."""


class ExtractionFailed(TypeContractError):
    """A fatal condition aborted the run.

    The context is attached as it stood at the abort point so callers can
    still inspect the accumulated errors and metrics.
    """

    def __init__(self, message: str, context: ExtractionContext) -> None:
        super().__init__(message)
        self.context = context

    @property
    def errors(self) -> list[ExtractionError]:
        return self.context.errors

    @property
    def metrics(self) -> ExtractionMetrics:
        return self.context.metrics


class ParseFailure(ExtractionFailed):
    def __init__(self, message: str, context: ExtractionContext, *, file: str) -> None:
        super().__init__(message, context)
        self.file = file


class TransformFailure(ExtractionFailed):
    pass


class ValidationFailure(ExtractionFailed):
    pass


class ForbiddenTypeError(ExtractionFailed):
    def __init__(self, message: str, context: ExtractionContext, *, occurrences: int, violating_types: list[str]) -> None:
        super().__init__(message, context)
        self.occurrences = occurrences
        self.violating_types = violating_types


class DriftDetectedError(TypeContractError):
    def __init__(self, report: DriftReport) -> None:
        super().__init__(f"Type drift detected:\n{report.summary}")
        self.report = report


__all__ = [
    "ConfigurationError",
    "DriftDetectedError",
    "ExtractionFailed",
    "ForbiddenTypeError",
    "ParseFailure",
    "TransformFailure",
    "TypeContractError",
    "ValidationFailure",
]
