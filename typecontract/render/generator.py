"""Render extracted declarations into TypeScript artifacts."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from ..config import OutputConfig
from ..logging import get_logger
from ..models import DeclarationKind, ExtractedType, ExtractionContext
from ..paths import module_specifier, render_filename, type_filename
from .typescript import ensure_export, interface_text, strip_declare
from .writer import write_files

LOGGER = get_logger(__name__)

BUCKET_TITLES: tuple[tuple[DeclarationKind, str], ...] = (
    (DeclarationKind.INTERFACE, "INTERFACES"),
    (DeclarationKind.TYPE_ALIAS, "TYPE ALIASES"),
    (DeclarationKind.ENUM, "ENUMS"),
    (DeclarationKind.CLASS, "CLASSES"),
)
RULE = "=" * 76
INDEX_FILENAME = "index.ts"

COMPLIANCE_CHECKLIST: tuple[str, ...] = (
    "Zero 'any' usage (unannotated members use branded unknowns)",
    "All types maintain strict TypeScript compatibility",
    "Source locations preserved for traceability",
)


def format_timestamp(epoch: float) -> str:
    moment = datetime.fromtimestamp(epoch, tz=timezone.utc).replace(microsecond=0)
    return moment.isoformat().replace("+00:00", "Z")


def generated_at(context: ExtractionContext) -> str:
    metrics = context.metrics
    finished = metrics.finished_time if metrics.finished_time is not None else metrics.start_time
    return format_timestamp(finished)


def doc_block(record: ExtractedType, indent: str = "") -> str:
    lines = [f"{indent}/**"]
    if record.documentation:
        lines.extend(f"{indent} * {line}".rstrip() for line in record.documentation.splitlines())
    lines.append(f"{indent} * @source {record.source_file}:{record.location.line}")
    lines.append(f"{indent} */")
    return "\n".join(lines)


def indent_block(text: str, indent: str) -> str:
    if not indent:
        return text
    return "\n".join(f"{indent}{line}" if line.strip() else "" for line in text.splitlines())


def declaration_text(record: ExtractedType, *, indent: str = "", force_export: bool = False) -> str:
    """Declaration source; ``force_export`` targets the body of an ambient module."""
    if record.kind is DeclarationKind.INTERFACE and record.properties is not None:
        return interface_text(record, export=True if force_export else None, indent=indent)
    text = record.definition.strip()
    if force_export:
        text = ensure_export(strip_declare(text))
    elif record.is_exported:
        text = ensure_export(text)
    return indent_block(text, indent)


def render_declaration(record: ExtractedType, *, indent: str = "", force_export: bool = False) -> str:
    return f"{doc_block(record, indent)}\n{declaration_text(record, indent=indent, force_export=force_export)}"


def bucket_sections(
    context: ExtractionContext,
    *,
    include_classes: bool,
    indent: str = "",
    force_export: bool = False,
) -> list[str]:
    """Kind buckets in fixed order, each sorted by name and headed by its size."""
    groups = context.by_kind(include_classes=include_classes)
    sections: list[str] = []
    for kind, title in BUCKET_TITLES:
        members = groups.get(kind, [])
        if not members:
            continue
        header = "\n".join(
            [f"{indent}// {RULE}", f"{indent}// {title} ({len(members)} total)", f"{indent}// {RULE}"]
        )
        body = "\n\n".join(render_declaration(record, indent=indent, force_export=force_export) for record in members)
        sections.append(f"{header}\n\n{body}\n")
    return sections


class TypeGenerator:
    """Write a unified or split declaration artifact plus an optional index."""

    def __init__(self, config: OutputConfig, output_dir: Path | None = None) -> None:
        self.config = config
        self.output_dir = output_dir if output_dir is not None else Path(config.directory)

    def unified_filename(self, context: ExtractionContext) -> str:
        return render_filename(self.config.filename, context.rules.api_id)

    def _header(self) -> str:
        return f"{self.config.header.rstrip()}\n\n" if self.config.header else ""

    def metadata(self, context: ExtractionContext) -> str:
        metrics = context.metrics
        lines = [
            "/**",
            f" * Generated TypeScript Types for {context.rules.api_id} API",
            " *",
            " * EXTRACTION METRICS:",
            f" * - Files parsed: {metrics.files_parsed}",
            f" * - Types extracted: {metrics.types_extracted}",
            f" * - Transforms applied: {metrics.transforms_applied}",
            f" * - Validations passed: {metrics.validations_passed}",
            f" * - Validations failed: {metrics.validations_failed}",
            f" * - Any type violations: {metrics.unknown_type_violations}",
            f" * - Extraction time: {metrics.elapsed_ms}ms",
            f" * - Generated: {generated_at(context)}",
            " *",
            " * COMPLIANCE:",
            *(f" * [x] {item}" for item in COMPLIANCE_CHECKLIST),
            " */",
        ]
        return "\n".join(lines)

    def render_unified(self, context: ExtractionContext) -> str:
        sections = bucket_sections(context, include_classes=True)
        content = self._header() + self.metadata(context) + "\n\n"
        if sections:
            content += "\n".join(sections)
        return content

    def render_split(self, context: ExtractionContext) -> dict[str, str]:
        files: dict[str, str] = {}
        for record in context.sorted_types():
            provenance = "\n".join(
                [
                    "/**",
                    f" * Generated type: {record.name}",
                    f" * Source: {record.source_file}",
                    f" * Kind: {record.kind.value}",
                    " */",
                ]
            )
            files[type_filename(record.name)] = f"{self._header()}{provenance}\n\n{render_declaration(record)}\n"
        return files

    def render_index(self, context: ExtractionContext) -> str:
        lines = [
            "/**",
            " * Generated Type Index",
            f" * API: {context.rules.api_id}",
            f" * Total Types: {len(context.types)}",
            " */",
            "",
        ]
        if self.config.split_types:
            for record in context.sorted_types():
                if record.is_exported:
                    lines.append(f"export * from '{module_specifier(type_filename(record.name))}';")
        else:
            lines.append(f"export * from '{module_specifier(self.unified_filename(context))}';")
        return self._header() + "\n".join(lines) + "\n"

    def render(self, context: ExtractionContext) -> dict[Path, str]:
        """Render every artifact in memory; nothing touches the disk."""
        files: dict[Path, str] = {}
        if self.config.split_types:
            for name, content in self.render_split(context).items():
                files[self.output_dir / name] = content
        else:
            files[self.output_dir / self.unified_filename(context)] = self.render_unified(context)
        if self.config.generate_index:
            files[self.output_dir / INDEX_FILENAME] = self.render_index(context)
        return files

    def generate(self, context: ExtractionContext) -> list[Path]:
        files = self.render(context)
        written = write_files(files)
        LOGGER.info("Wrote %d artifact(s) to %s", len(written), self.output_dir)
        return written


__all__ = [
    "BUCKET_TITLES",
    "COMPLIANCE_CHECKLIST",
    "INDEX_FILENAME",
    "TypeGenerator",
    "bucket_sections",
    "declaration_text",
    "doc_block",
    "format_timestamp",
    "generated_at",
    "render_declaration",
]
