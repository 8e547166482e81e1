"""Rule-driven edits applied to extracted declarations."""

from __future__ import annotations

import re
from dataclasses import replace

from ..logging import get_logger
from ..models import (
    DeclarationKind,
    DiscriminatorSpec,
    ExtractedType,
    ExtractionContext,
    PropertyInfo,
    TypeTransform,
)
from ..render.typescript import literal_type, refresh_interface_definition, type_parameter_list
from .naming import apply_naming, reference_pattern, rewrite_references

LOGGER = get_logger(__name__)


def _rewrite_header(definition: str, old: str, new: str) -> str:
    pattern = re.compile(rf"\b(interface|type|enum|class)(\s+){re.escape(old)}(?![\w$])")
    return pattern.sub(lambda match: f"{match.group(1)}{match.group(2)}{new}", definition, count=1)


def rename_record(context: ExtractionContext, record: ExtractedType, new_name: str) -> bool:
    """Re-key ``record`` under ``new_name``; an existing record of that name is replaced."""
    if not new_name or new_name == record.name:
        return False
    old_name = record.name
    if context.types.get(old_name) is record:
        context.remove(old_name)
    record.name = new_name
    if record.kind is DeclarationKind.INTERFACE:
        refresh_interface_definition(record)
    else:
        record.definition = _rewrite_header(record.definition, old_name, new_name)
    context.put(record)
    LOGGER.debug("Renamed '%s' to '%s'", old_name, new_name)
    return True


def apply_property_edits(record: ExtractedType, transform: TypeTransform) -> bool:
    """Remove, alter and add properties in that order. Returns True if anything changed."""
    wants_edits = transform.remove_properties or transform.transform_properties or transform.add_properties
    if not wants_edits:
        return False
    if record.properties is None:
        LOGGER.warning("Property edits for '%s' ignored: %s declarations have no properties", record.name, record.kind.value)
        return False

    original = [replace(prop) for prop in record.properties]
    removed = set(transform.remove_properties)
    properties = [prop for prop in record.properties if prop.name not in removed]

    for name, edit in transform.transform_properties.items():
        for prop in properties:
            if prop.name != name:
                continue
            if edit.rename is not None:
                prop.name = edit.rename
            if edit.type is not None:
                prop.type = edit.type
            if edit.optional is not None:
                prop.optional = edit.optional
            if edit.readonly is not None:
                prop.readonly = edit.readonly

    for added in transform.add_properties:
        for index, prop in enumerate(properties):
            if prop.name == added.name:
                properties[index] = replace(added)
                break
        else:
            properties.append(replace(added))

    record.properties = properties
    if properties == original:
        return False
    refresh_interface_definition(record)
    return True


def variant_documentation(owner: str, discriminator: DiscriminatorSpec, literal: str) -> str:
    return f"Variant of {owner} where {discriminator.property} is {literal_type(literal)}."


def _narrowed_properties(base: ExtractedType, discriminator: DiscriminatorSpec, literal: str) -> list[PropertyInfo]:
    template = base.property_named(discriminator.property)
    narrowed = PropertyInfo(
        name=discriminator.property,
        type=literal_type(literal),
        optional=False,
        readonly=template.readonly if template is not None else False,
        documentation=template.documentation if template is not None else None,
    )
    properties: list[PropertyInfo] = []
    seen: set[str] = set()
    for prop in base.properties or ():
        if prop.name in seen:
            continue
        seen.add(prop.name)
        properties.append(narrowed if prop.name == discriminator.property else replace(prop))
    if template is None:
        properties.insert(0, narrowed)
    return properties


def synthesize_discriminated_union(
    context: ExtractionContext, base: ExtractedType, discriminator: DiscriminatorSpec
) -> ExtractedType:
    """Split ``base`` into one interface per variant plus a union alias.

    The alias takes the base name unless ``discriminator.keep_base`` is set, in which case
    it is stored as ``<Base>Union`` next to the untouched base. Returns the alias.
    """
    if base.properties is None:
        raise ValueError(f"Cannot discriminate '{base.name}': only interfaces can be split into variants")
    if not discriminator.variants:
        raise ValueError(f"Cannot discriminate '{base.name}': no variants configured")

    generics = type_parameter_list(base.type_parameters)
    declared_generics = type_parameter_list(base.type_parameter_declarations or base.type_parameters)
    for literal, variant_name in discriminator.variants.items():
        variant = ExtractedType(
            name=variant_name,
            kind=DeclarationKind.INTERFACE,
            definition="",
            source_file=base.source_file,
            location=replace(base.location),
            is_exported=base.is_exported,
            documentation=variant_documentation(base.name, discriminator, literal),
            properties=_narrowed_properties(base, discriminator, literal),
            type_parameters=list(base.type_parameters),
            type_parameter_declarations=list(base.type_parameter_declarations),
            extends=list(base.extends),
            syntax_node=base.syntax_node,
        )
        refresh_interface_definition(variant)
        context.put(variant)

    alias_name = f"{base.name}Union" if discriminator.keep_base else base.name
    members = " | ".join(f"{name}{generics}" for name in discriminator.variants.values())
    export = "export " if base.is_exported else ""
    alias = ExtractedType(
        name=alias_name,
        kind=DeclarationKind.TYPE_ALIAS,
        definition=f"{export}type {alias_name}{declared_generics} = {members};",
        source_file=base.source_file,
        location=replace(base.location),
        is_exported=base.is_exported,
        documentation=base.documentation,
        type_parameters=list(base.type_parameters),
        type_parameter_declarations=list(base.type_parameter_declarations),
        syntax_node=base.syntax_node,
    )
    context.put(alias)
    LOGGER.debug("Discriminated '%s' on '%s' into %d variants", base.name, discriminator.property, len(discriminator.variants))
    return alias


def apply_naming_rules(context: ExtractionContext) -> dict[str, str]:
    """Rename every declaration per ``rules.naming`` and return the old -> new mapping."""
    naming = context.rules.naming
    if naming.is_empty():
        return {}
    renames: dict[str, str] = {}
    for name in sorted(context.types):
        record = context.types.get(name)
        if record is None or record.name != name:
            continue
        target = apply_naming(name, naming)
        if target != name:
            renames[name] = target
    for old_name, new_name in renames.items():
        record = context.types.get(old_name)
        if record is not None:
            rename_record(context, record, new_name)
    return renames


def _is_signature(member_name: str) -> bool:
    return member_name.startswith(("(", "<", "[", "new ", "new(", "new<"))


def update_references(context: ExtractionContext, renames: dict[str, str]) -> None:
    """Point every declaration body at renamed declarations.

    Interfaces are rebuilt from their rewritten members. Aliases and classes have
    their source text rewritten in place; headers were renamed beforehand. Enum
    bodies hold member names only and are left alone.
    """
    pattern = reference_pattern(renames)
    if pattern is None:
        return
    for record in context.types.values():
        record.extends = [rewrite_references(item, renames, pattern) for item in record.extends]
        record.type_parameter_declarations = [
            rewrite_references(item, renames, pattern) for item in record.type_parameter_declarations
        ]
        if record.properties is not None:
            for prop in record.properties:
                prop.type = rewrite_references(prop.type, renames, pattern)
                if _is_signature(prop.name):
                    prop.name = rewrite_references(prop.name, renames, pattern)
            refresh_interface_definition(record)
        elif record.kind is not DeclarationKind.ENUM:
            record.definition = rewrite_references(record.definition, renames, pattern)


def apply_rule_transforms(context: ExtractionContext) -> None:
    """Default transformation hook driven entirely by ``context.rules``."""
    changed: set[int] = set()
    renames: dict[str, str] = {}
    variants: list[tuple[ExtractedType, ExtractedType, DiscriminatorSpec, str]] = []

    for name in sorted(context.rules.transforms):
        transform = context.rules.transforms[name]
        record = context.types.get(name)
        if record is None:
            LOGGER.debug("Transform for '%s' skipped: declaration not extracted", name)
            continue
        if apply_property_edits(record, transform):
            changed.add(id(record))
        discriminator = transform.discriminator
        if discriminator is not None:
            alias = synthesize_discriminated_union(context, record, discriminator)
            owner = record if discriminator.keep_base else alias
            changed.add(id(owner))
            for literal, variant_name in discriminator.variants.items():
                variant = context.types.get(variant_name)
                if variant is not None:
                    variants.append((variant, owner, discriminator, literal))
            record = context.types.get(name, record)
        if transform.rename and rename_record(context, record, transform.rename):
            renames[name] = transform.rename
            changed.add(id(record))

    for old_name, new_name in apply_naming_rules(context).items():
        for source, target in list(renames.items()):
            if target == old_name:
                renames[source] = new_name
        renames[old_name] = new_name
        record = context.types.get(new_name)
        if record is not None:
            changed.add(id(record))

    update_references(context, {old: new for old, new in renames.items() if old != new})
    for variant, owner, discriminator, literal in variants:
        variant.documentation = variant_documentation(owner.name, discriminator, literal)
    context.metrics.transforms_applied += len(changed)
    LOGGER.info("Applied transforms to %d declarations", len(changed))


__all__ = [
    "apply_naming_rules",
    "apply_property_edits",
    "apply_rule_transforms",
    "rename_record",
    "synthesize_discriminated_union",
    "update_references",
    "variant_documentation",
]
