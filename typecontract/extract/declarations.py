"""Reduce top-level TypeScript declarations to ExtractedType records."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Callable, Iterator

from ..errors import ParseFailure
from ..logging import get_logger
from ..models import DeclarationKind, ExtractedType, ExtractionContext, PropertyInfo, SourceLocation
from ..render.typescript import branded_unknown, refresh_interface_definition
from .parser import ParsedSource, SourceParser, first_error

LOGGER = get_logger(__name__)

ANONYMOUS_CLASS_NAME = "AnonymousClass"
QUOTES = "'\"`"

DECLARATION_KINDS: dict[str, DeclarationKind] = {
    "interface_declaration": DeclarationKind.INTERFACE,
    "type_alias_declaration": DeclarationKind.TYPE_ALIAS,
    "enum_declaration": DeclarationKind.ENUM,
    "class_declaration": DeclarationKind.CLASS,
    "abstract_class_declaration": DeclarationKind.CLASS,
    "class": DeclarationKind.CLASS,
}

_DOC_LINE_MARKER = re.compile(r"^\s*\*?\s?")


def clean_doc_comment(text: str) -> str | None:
    """Strip ``/** */`` delimiters and leading ``*`` markers from a doc comment."""
    body = text.strip()
    if not body.startswith("/**") or not body.endswith("*/"):
        return None
    body = body[3:-2]
    lines = [_DOC_LINE_MARKER.sub("", line, count=1).rstrip() for line in body.splitlines()]
    cleaned = "\n".join(lines).strip()
    return cleaned or None


class DeclarationExtractor:
    """Walk parsed files and store one record per qualifying declaration."""

    def __init__(
        self,
        context: ExtractionContext,
        should_extract_class: Callable[[str], bool],
        parser: SourceParser | None = None,
    ) -> None:
        self.context = context
        self.should_extract_class = should_extract_class
        self.parser = parser or SourceParser()

    # --- file level -------------------------------------------------------------

    def extract_file(self, path: str) -> list[ExtractedType]:
        parsed = self._parse(path)
        self.context.metrics.files_parsed += 1
        extracted: list[ExtractedType] = []
        exported_names: set[str] = set()
        for wrapper, declaration, exported in self._top_level_declarations(parsed, exported_names):
            record = self._build_record(parsed, wrapper, declaration, exported)
            if record is None:
                continue
            self.context.put(record)
            self.context.metrics.types_extracted += 1
            extracted.append(record)
        for record in extracted:
            if record.name in exported_names and not record.is_exported:
                record.is_exported = True
                if record.kind is DeclarationKind.INTERFACE:
                    refresh_interface_definition(record)
        LOGGER.debug("Extracted %d declarations from %s", len(extracted), path)
        return extracted

    def _parse(self, path: str) -> ParsedSource:
        try:
            parsed = self.parser.parse(path)
        except (OSError, ValueError) as error:
            self.context.add_error(path, f"Failed to parse source file: {error}", code="parse")
            raise ParseFailure(f"Failed to parse {path}: {error}", self.context, file=path) from error
        broken = first_error(parsed.root)
        if broken is not None:
            line, column = broken.start_point[0] + 1, broken.start_point[1] + 1
            self.context.add_error(
                path,
                f"Syntax error near '{parsed.text(broken)[:40]}'",
                line=line,
                column=column,
                code="parse",
            )
            raise ParseFailure(f"Failed to parse {path}: syntax error at {line}:{column}", self.context, file=path)
        return parsed

    def _top_level_declarations(
        self, parsed: ParsedSource, exported_names: set[str]
    ) -> Iterator[tuple[Any, Any, bool]]:
        for statement in parsed.root.named_children:
            if statement.type == "export_statement":
                declaration = statement.child_by_field_name("declaration")
                if declaration is None:
                    declaration = statement.child_by_field_name("value")
                if declaration is None:
                    exported_names.update(self._local_export_names(statement))
                    continue
                declaration = self._unwrap_ambient(declaration)
                if declaration is not None and declaration.type in DECLARATION_KINDS:
                    yield statement, declaration, True
            elif statement.type == "ambient_declaration":
                declaration = self._unwrap_ambient(statement)
                if declaration is not None and declaration.type in DECLARATION_KINDS:
                    yield statement, declaration, False
            elif statement.type in DECLARATION_KINDS:
                yield statement, statement, False

    @staticmethod
    def _unwrap_ambient(node: Any) -> Any | None:
        while node is not None and node.type == "ambient_declaration":
            node = next((child for child in node.named_children if child.type != "comment"), None)
        return node

    @staticmethod
    def _local_export_names(statement: Any) -> set[str]:
        if statement.child_by_field_name("source") is not None:
            return set()
        names: set[str] = set()
        for clause in statement.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type != "export_specifier":
                    continue
                name_node = specifier.child_by_field_name("name")
                if name_node is not None and name_node.text is not None:
                    names.add(name_node.text.decode("utf-8"))
        return names

    # --- declaration level ------------------------------------------------------

    def _build_record(self, parsed: ParsedSource, wrapper: Any, declaration: Any, exported: bool) -> ExtractedType | None:
        kind = DECLARATION_KINDS[declaration.type]
        name_node = declaration.child_by_field_name("name")
        name = parsed.text(name_node) if name_node is not None else ANONYMOUS_CLASS_NAME
        if name in self.context.rules.exclude_types:
            LOGGER.debug("Skipping excluded declaration '%s'", name)
            return None
        if kind is DeclarationKind.CLASS and not self.should_extract_class(name):
            return None

        record = ExtractedType(
            name=name,
            kind=kind,
            definition=parsed.text(wrapper).strip(),
            source_file=parsed.path,
            location=SourceLocation(line=wrapper.start_point[0] + 1, column=wrapper.start_point[1] + 1),
            is_exported=exported,
            documentation=self._documentation(parsed, wrapper),
            type_parameters=self._type_parameters(parsed, declaration),
            type_parameter_declarations=self._type_parameters(parsed, declaration, full=True),
            syntax_node=declaration,
        )
        if kind is DeclarationKind.INTERFACE:
            record.extends = self._interface_extends(parsed, declaration)
            record.properties = self._interface_properties(parsed, declaration, name)
            refresh_interface_definition(record)
        elif kind is DeclarationKind.CLASS:
            record.extends = self._class_extends(parsed, declaration)
        return record

    def _documentation(self, parsed: ParsedSource, node: Any) -> str | None:
        previous = node.prev_sibling
        if previous is None or previous.type != "comment":
            return None
        return clean_doc_comment(parsed.text(previous))

    @staticmethod
    def _type_parameters(parsed: ParsedSource, declaration: Any, *, full: bool = False) -> list[str]:
        """Parameter names, or with ``full`` each parameter with its constraint and default."""
        params = declaration.child_by_field_name("type_parameters")
        if params is None:
            return []
        names: list[str] = []
        for param in params.named_children:
            if param.type != "type_parameter":
                continue
            name_node = None if full else param.child_by_field_name("name")
            names.append(parsed.text(name_node if name_node is not None else param))
        return names

    @staticmethod
    def _interface_extends(parsed: ParsedSource, declaration: Any) -> list[str]:
        supertypes: list[str] = []
        for child in declaration.named_children:
            if child.type in {"extends_type_clause", "extends_clause"}:
                supertypes.extend(parsed.text(item) for item in child.named_children if item.type != "comment")
        return supertypes

    @staticmethod
    def _class_extends(parsed: ParsedSource, declaration: Any) -> list[str]:
        for child in declaration.named_children:
            if child.type != "class_heritage":
                continue
            for clause in child.named_children:
                if clause.type == "extends_clause":
                    text = parsed.text(clause).strip()
                    return [text[len("extends") :].strip()]
        return []

    # --- members and types ------------------------------------------------------

    def _interface_properties(self, parsed: ParsedSource, declaration: Any, owner: str) -> list[PropertyInfo]:
        body = declaration.child_by_field_name("body")
        if body is None:
            return []
        return self._members(parsed, body, owner)

    def _members(self, parsed: ParsedSource, body: Any, owner: str) -> list[PropertyInfo]:
        properties: list[PropertyInfo] = []
        for member in body.named_children:
            prop = self._member(parsed, member, owner)
            if prop is not None:
                properties.append(prop)
        return properties

    def _member(self, parsed: ParsedSource, member: Any, owner: str) -> PropertyInfo | None:
        if member.type == "comment":
            return None
        documentation = self._documentation(parsed, member)
        readonly = any(child.type == "readonly" for child in member.children)
        optional = any(child.type == "?" for child in member.children)
        if member.type == "property_signature":
            name = parsed.text(member.child_by_field_name("name"))
            origin = f"{owner}.{name.strip(QUOTES)}"
            annotation = member.child_by_field_name("type")
            if annotation is None or not annotation.named_children:
                type_text = branded_unknown("property", origin)
            else:
                type_text = self.render_type(parsed, annotation.named_children[0], origin)
            return PropertyInfo(name, type_text, optional, readonly, documentation)
        if member.type == "method_signature":
            name = parsed.text(member.child_by_field_name("name"))
            return PropertyInfo(name, self._method_type(parsed, member, f"{owner}.{name}"), optional, readonly, documentation)
        if member.type == "index_signature":
            closing = next((child for child in member.children if child.type == "]"), None)
            opening = next((child for child in member.children if child.type == "["), None)
            if opening is None or closing is None:
                return None
            name = parsed.source[opening.start_byte : closing.end_byte].decode("utf-8")
            annotation = member.child_by_field_name("type")
            if annotation is None or not annotation.named_children:
                type_text = branded_unknown("index", f"{owner}.{name}")
            else:
                type_text = self.render_type(parsed, annotation.named_children[0], f"{owner}.{name}")
            return PropertyInfo(name, type_text, False, readonly, documentation)
        if member.type in {"call_signature", "construct_signature"}:
            return self._signature(parsed, member, owner)
        LOGGER.debug("Ignoring %s member of %s", member.type, owner)
        return None

    def _signature(self, parsed: ParsedSource, member: Any, owner: str) -> PropertyInfo | None:
        """Keep a call or construct signature as a member named by its parameter list.

        ``(payload: Event): void`` becomes name ``(payload: Event)`` and type ``void``.
        """
        params = member.child_by_field_name("parameters")
        if params is None:
            return None
        name = parsed.source[member.start_byte : params.end_byte].decode("utf-8")
        returns = member.child_by_field_name("return_type")
        if returns is None:
            returns = member.child_by_field_name("type")
        if returns is None or not returns.named_children:
            type_text = branded_unknown("return", f"{owner}.{name}")
        else:
            type_text = self.render_type(parsed, returns.named_children[0], f"{owner}.{name}")
        return PropertyInfo(name, type_text, False, False, self._documentation(parsed, member))

    def _method_type(self, parsed: ParsedSource, member: Any, origin: str) -> str:
        type_params = member.child_by_field_name("type_parameters")
        params = member.child_by_field_name("parameters")
        returns = member.child_by_field_name("return_type")
        prefix = parsed.text(type_params) if type_params is not None else ""
        arguments = parsed.text(params) if params is not None else "()"
        if returns is None or not returns.named_children:
            result = branded_unknown("return", origin)
        else:
            result = self.render_type(parsed, returns.named_children[0], origin)
        return f"{prefix}{arguments} => {result}"

    def render_type(self, parsed: ParsedSource, node: Any, origin: str) -> str:
        """Render a type node; shapes without a dedicated rule keep their source text."""
        if node.type == "predefined_type":
            return parsed.text(node)
        if node.type == "object_type":
            members = self._members(parsed, node, origin)
            if not members:
                return "{}"
            parts = []
            for prop in members:
                readonly = "readonly " if prop.readonly else ""
                optional = "?" if prop.optional else ""
                parts.append(f"{readonly}{prop.name}{optional}: {prop.type}")
            return "{ " + "; ".join(parts) + " }"
        if node.type == "array_type" and node.named_children:
            return f"{self.render_type(parsed, node.named_children[0], origin)}[]"
        if node.type == "union_type":
            return " | ".join(
                self.render_type(parsed, child, origin) for child in node.named_children if child.type != "comment"
            )
        return parsed.text(node)


def extract_files(
    context: ExtractionContext,
    files: list[str],
    should_extract_class: Callable[[str], bool],
) -> None:
    extractor = DeclarationExtractor(context, should_extract_class)
    for path in files:
        extractor.extract_file(path)


def normalize_paths(files: list[str] | list[Path]) -> list[str]:
    """Deduplicate and sort input paths so discovery order never leaks into output."""
    return sorted({str(Path(path)) for path in files})


__all__ = [
    "ANONYMOUS_CLASS_NAME",
    "DeclarationExtractor",
    "clean_doc_comment",
    "extract_files",
    "normalize_paths",
]
