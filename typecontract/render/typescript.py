"""TypeScript text fragments shared by the extractor, transforms and renderers."""

from __future__ import annotations

import re

from ..models import ExtractedType, PropertyInfo

_EXPORT_PREFIX = re.compile(r"^\s*export\b")
_DECLARE_PREFIX = re.compile(r"^(\s*(?:export\s+)?)declare\s+")
_BARE_LITERAL = re.compile(r"^(?:-?\d+(?:\.\d+)?|true|false|null)$")


def quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def literal_type(value: str) -> str:
    """Render a discriminator value as a literal type."""
    stripped = value.strip()
    if _BARE_LITERAL.match(stripped):
        return stripped
    if len(stripped) >= 2 and stripped[0] == stripped[-1] and stripped[0] in "'\"`":
        return stripped
    return quote_string(value)


def branded_unknown(category: str, origin: str) -> str:
    """Placeholder for a type that was never written down."""
    return (
        f"unknown & {{ readonly __brand: {quote_string(category)}; "
        f"readonly __context: {quote_string(origin)} }}"
    )


def has_export(text: str) -> bool:
    return bool(_EXPORT_PREFIX.match(text))


def ensure_export(text: str) -> str:
    stripped = text.strip()
    return stripped if has_export(stripped) else f"export {stripped}"


def strip_declare(text: str) -> str:
    """Drop a leading ``declare`` modifier, which is not allowed inside an ambient module."""
    return _DECLARE_PREFIX.sub(lambda match: match.group(1), text.strip(), count=1)


def type_parameter_list(names: list[str]) -> str:
    return f"<{', '.join(names)}>" if names else ""


def property_line(prop: PropertyInfo, *, indent: str = "  ", with_docs: bool = True) -> str:
    lines: list[str] = []
    if with_docs and prop.documentation:
        lines.append(f"{indent}/** {' '.join(prop.documentation.split())} */")
    readonly = "readonly " if prop.readonly else ""
    optional = "?" if prop.optional else ""
    lines.append(f"{indent}{readonly}{prop.name}{optional}: {prop.type};")
    return "\n".join(lines)


def interface_text(
    record: ExtractedType,
    *,
    export: bool | None = None,
    indent: str = "",
    with_docs: bool = True,
) -> str:
    """Render an interface record as declaration text."""
    exported = record.is_exported if export is None else export
    header = f"{indent}{'export ' if exported else ''}interface {record.name}"
    header += type_parameter_list(record.type_parameter_declarations or record.type_parameters)
    if record.extends:
        header += f" extends {', '.join(record.extends)}"
    lines = [header + " {"]
    for prop in record.properties or ():
        lines.append(property_line(prop, indent=indent + "  ", with_docs=with_docs))
    lines.append(f"{indent}}}")
    return "\n".join(lines)


def refresh_interface_definition(record: ExtractedType) -> None:
    record.definition = interface_text(record, with_docs=False)


__all__ = [
    "branded_unknown",
    "ensure_export",
    "has_export",
    "interface_text",
    "literal_type",
    "property_line",
    "quote_string",
    "refresh_interface_definition",
    "strip_declare",
    "type_parameter_list",
]
