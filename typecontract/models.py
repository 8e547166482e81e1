"""Data model shared by every pipeline stage."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Mapping

from .logging import get_logger

LOGGER = get_logger(__name__)


class DeclarationKind(str, Enum):
    INTERFACE = "interface"
    TYPE_ALIAS = "type"
    ENUM = "enum"
    CLASS = "class"


@dataclass(slots=True)
class SourceLocation:
    line: int
    column: int


@dataclass(slots=True)
class PropertyInfo:
    name: str
    type: str
    optional: bool = False
    readonly: bool = False
    documentation: str | None = None


@dataclass(slots=True)
class ExtractedType:
    """One declaration reduced to its canonical record.

    ``syntax_node`` is the tree-sitter node the record was built from. It is only
    valid while the run that produced it is alive and is never serialized.
    """

    name: str
    kind: DeclarationKind
    definition: str
    source_file: str
    location: SourceLocation
    is_exported: bool = False
    documentation: str | None = None
    properties: list[PropertyInfo] | None = None
    type_parameters: list[str] = field(default_factory=list)
    type_parameter_declarations: list[str] = field(default_factory=list)
    extends: list[str] = field(default_factory=list)
    syntax_node: Any = field(default=None, repr=False, compare=False)

    def detached(self) -> ExtractedType:
        """Return a copy that shares no mutable state and no syntax handle."""
        properties = None
        if self.properties is not None:
            properties = [replace(prop) for prop in self.properties]
        return replace(
            self,
            location=replace(self.location),
            properties=properties,
            type_parameters=list(self.type_parameters),
            type_parameter_declarations=list(self.type_parameter_declarations),
            extends=list(self.extends),
            syntax_node=None,
        )

    def property_named(self, name: str) -> PropertyInfo | None:
        for prop in self.properties or ():
            if prop.name == name:
                return prop
        return None


@dataclass(slots=True)
class PropertyTransform:
    rename: str | None = None
    type: str | None = None
    optional: bool | None = None
    readonly: bool | None = None


@dataclass(slots=True)
class DiscriminatorSpec:
    property: str
    variants: dict[str, str]
    keep_base: bool = False


@dataclass(slots=True)
class TypeTransform:
    rename: str | None = None
    add_properties: list[PropertyInfo] = field(default_factory=list)
    remove_properties: list[str] = field(default_factory=list)
    transform_properties: dict[str, PropertyTransform] = field(default_factory=dict)
    discriminator: DiscriminatorSpec | None = None


@dataclass(slots=True)
class NamingRules:
    prefix: str | None = None
    suffix: str | None = None
    transform: Callable[[str], str] | None = None

    def is_empty(self) -> bool:
        return not (self.prefix or self.suffix or self.transform)


@dataclass(slots=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


TypeValidator = Callable[[ExtractedType], ValidationResult]


@dataclass(slots=True, frozen=True)
class ExtractionRules:
    api_id: str
    transforms: Mapping[str, TypeTransform] = field(default_factory=dict)
    exclude_types: frozenset[str] = frozenset()
    validators: Mapping[str, TypeValidator] = field(default_factory=dict)
    naming: NamingRules = field(default_factory=NamingRules)


@dataclass(slots=True)
class ExtractionError:
    file: str
    message: str
    type_name: str | None = None
    line: int | None = None
    column: int | None = None
    code: str = "extraction"

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {"file": self.file, "message": self.message, "code": self.code}
        if self.type_name is not None:
            payload["typeName"] = self.type_name
        if self.line is not None:
            payload["line"] = self.line
        if self.column is not None:
            payload["column"] = self.column
        return payload


@dataclass(slots=True)
class ExtractionMetrics:
    start_time: float = field(default_factory=time.time)
    files_parsed: int = 0
    types_extracted: int = 0
    transforms_applied: int = 0
    validations_passed: int = 0
    validations_failed: int = 0
    unknown_type_violations: int = 0
    finished_time: float | None = None

    def finish(self) -> None:
        if self.finished_time is None:
            self.finished_time = time.time()

    @property
    def elapsed_ms(self) -> int:
        end = self.finished_time if self.finished_time is not None else time.time()
        return max(0, int(round((end - self.start_time) * 1000)))

    def snapshot(self) -> dict[str, int]:
        return {
            "filesParsed": self.files_parsed,
            "typesExtracted": self.types_extracted,
            "transformsApplied": self.transforms_applied,
            "validationsPassed": self.validations_passed,
            "validationsFailed": self.validations_failed,
            "unknownTypeViolations": self.unknown_type_violations,
            "elapsedMs": self.elapsed_ms,
        }


@dataclass(slots=True)
class ExtractionContext:
    """Mutable state of a single extraction run.

    ``types`` is a last-write-wins mapping: storing a record under a name that
    is already present replaces the earlier record without error.
    """

    rules: ExtractionRules
    source_files: list[str] = field(default_factory=list)
    types: dict[str, ExtractedType] = field(default_factory=dict)
    metrics: ExtractionMetrics = field(default_factory=ExtractionMetrics)
    errors: list[ExtractionError] = field(default_factory=list)

    def put(self, record: ExtractedType) -> None:
        previous = self.types.get(record.name)
        if previous is not None and previous is not record:
            LOGGER.debug(
                "Declaration '%s' from %s replaces the one from %s",
                record.name,
                record.source_file,
                previous.source_file,
            )
        self.types[record.name] = record

    def remove(self, name: str) -> ExtractedType | None:
        return self.types.pop(name, None)

    def add_error(
        self,
        file: str,
        message: str,
        *,
        type_name: str | None = None,
        line: int | None = None,
        column: int | None = None,
        code: str = "extraction",
    ) -> ExtractionError:
        error = ExtractionError(
            file=file,
            message=message,
            type_name=type_name,
            line=line,
            column=column,
            code=code,
        )
        self.errors.append(error)
        return error

    def sorted_types(self) -> list[ExtractedType]:
        return [self.types[name] for name in sorted(self.types)]

    def by_kind(self, *, include_classes: bool = True) -> dict[DeclarationKind, list[ExtractedType]]:
        groups: dict[DeclarationKind, list[ExtractedType]] = {kind: [] for kind in DeclarationKind}
        for record in self.types.values():
            if record.kind is DeclarationKind.CLASS and not include_classes:
                continue
            groups[record.kind].append(record)
        for members in groups.values():
            members.sort(key=lambda item: item.name)
        return groups

    def release_syntax(self) -> None:
        for record in self.types.values():
            record.syntax_node = None


__all__ = [
    "DeclarationKind",
    "DiscriminatorSpec",
    "ExtractedType",
    "ExtractionContext",
    "ExtractionError",
    "ExtractionMetrics",
    "ExtractionRules",
    "NamingRules",
    "PropertyInfo",
    "PropertyTransform",
    "SourceLocation",
    "TypeTransform",
    "TypeValidator",
    "ValidationResult",
]
