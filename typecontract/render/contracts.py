"""Strict third-party contracts artifact with drift protection."""

from __future__ import annotations

from pathlib import Path

from ..config import ContractsConfig
from ..errors import ConfigurationError, DriftDetectedError
from ..logging import get_logger
from ..models import ExtractionContext
from .drift import DriftReport, detect_drift
from .extraction_map import write_extraction_map
from .generator import COMPLIANCE_CHECKLIST, bucket_sections, generated_at
from .writer import write_text

LOGGER = get_logger(__name__)

BRANDED_UNKNOWN_ALIAS = (
    "  /**\n"
    "   * Branded unknown carrying where an unannotated type came from\n"
    "   */\n"
    "  export type BrandedUnknown<TBrand extends string = string, TContext extends string = string> =\n"
    "    unknown & { readonly __brand: TBrand; readonly __context: TContext };\n"
)


class ContractsGenerator:
    """Render ``declare module '@<api>/contracts'`` and guard it against drift."""

    def __init__(
        self,
        config: ContractsConfig,
        output_path: Path | None = None,
        extraction_map_path: Path | None = None,
    ) -> None:
        self.config = config
        target = output_path or (Path(config.output_path) if config.output_path else None)
        if target is None:
            raise ConfigurationError("contracts output path is not configured")
        self.output_path = target
        if extraction_map_path is None and config.extraction_map_path:
            extraction_map_path = Path(config.extraction_map_path)
        self.extraction_map_path = extraction_map_path

    def preamble(self, context: ExtractionContext) -> str:
        metrics = context.metrics
        lines = [
            "/**",
            " * Third-Party Type Contracts",
            " *",
            " * DO NOT EDIT MANUALLY - This file is auto-generated",
            " *",
            f" * API: {context.rules.api_id}",
            f" * Version: {self.config.api_version or 'unknown'}",
            f" * Generated: {generated_at(context)}",
            " *",
            " * EXTRACTION METRICS:",
            f" * - Files parsed: {metrics.files_parsed}",
            f" * - Types extracted: {metrics.types_extracted}",
            f" * - Transforms applied: {metrics.transforms_applied}",
            f" * - Any type violations: {metrics.unknown_type_violations}",
            f" * - Extraction time: {metrics.elapsed_ms}ms",
            " *",
            " * COMPLIANCE:",
            *(f" * [x] {item}" for item in COMPLIANCE_CHECKLIST),
            " * [x] Drift detection enabled",
            " */",
        ]
        return "\n".join(lines)

    def render(self, context: ExtractionContext) -> str:
        sections = bucket_sections(context, include_classes=False, indent="  ", force_export=True)
        parts = [
            self.preamble(context),
            "",
            f"declare module '@{context.rules.api_id}/contracts' {{",
            BRANDED_UNKNOWN_ALIAS,
        ]
        parts.extend(sections)
        parts.append("}\n")
        return "\n".join(parts)

    def read_existing(self) -> str | None:
        if not self.output_path.exists():
            return None
        return self.output_path.read_text(encoding="utf-8")

    def check_drift(self, context: ExtractionContext, content: str | None = None) -> DriftReport:
        rendered = content if content is not None else self.render(context)
        return detect_drift(self.read_existing(), rendered)

    def generate(self, context: ExtractionContext) -> DriftReport:
        """Render, compare with the committed artifact, then write it and the extraction map.

        With ``fail_on_drift`` a name-level change raises DriftDetectedError
        before anything is written.
        """
        content = self.render(context)
        report = self.check_drift(context, content)
        if report.has_drift:
            LOGGER.warning("Contract drift for '%s': %s", context.rules.api_id, report.summary.replace("\n", "; "))
            if self.config.fail_on_drift:
                raise DriftDetectedError(report)
        write_text(self.output_path, content)
        LOGGER.info("Contracts written to %s", self.output_path)
        if self.extraction_map_path is not None:
            write_extraction_map(context, self.extraction_map_path, self.config.api_version)
        return report


__all__ = ["BRANDED_UNKNOWN_ALIAS", "ContractsGenerator"]
