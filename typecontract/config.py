"""Configuration models for typecontract."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field, field_validator

from .models import (
    DiscriminatorSpec,
    ExtractionRules,
    NamingRules,
    PropertyInfo,
    PropertyTransform,
    TypeTransform,
)

DEFAULT_PATTERNS: list[str] = ["**/*.ts", "**/*.tsx"]
DEFAULT_EXCLUDES: list[str] = [
    "**/node_modules/**",
    "**/*.test.ts",
    "**/*.spec.ts",
    "**/*.d.ts",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
]


class SourceConfig(BaseModel):
    root: str = "."
    patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_PATTERNS))
    exclude: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDES))


class OutputConfig(BaseModel):
    directory: str = "src/types/generated"
    filename: str = "{api}.types.ts"
    generate_index: bool = True
    split_types: bool = False
    header: str | None = None

    @field_validator("filename")
    @classmethod
    def _filename_has_extension(cls, value: str) -> str:
        if not value.endswith(".ts"):
            raise ValueError("output filename must end with .ts")
        return value


class ContractsConfig(BaseModel):
    output_path: str | None = None
    extraction_map_path: str | None = None
    fail_on_drift: bool = False
    api_version: str | None = None


class PropertyConfig(BaseModel):
    name: str
    type: str
    optional: bool = False
    readonly: bool = False
    documentation: str | None = None

    def to_property(self) -> PropertyInfo:
        return PropertyInfo(
            name=self.name,
            type=self.type,
            optional=self.optional,
            readonly=self.readonly,
            documentation=self.documentation,
        )


class PropertyTransformConfig(BaseModel):
    rename: str | None = None
    type: str | None = None
    optional: bool | None = None
    readonly: bool | None = None


class DiscriminatorConfig(BaseModel):
    property: str
    variants: Dict[str, str]
    keep_base: bool = False

    @field_validator("variants")
    @classmethod
    def _variants_not_empty(cls, value: Dict[str, str]) -> Dict[str, str]:
        if not value:
            raise ValueError("a discriminator needs at least one variant")
        return value


class TransformConfig(BaseModel):
    rename: str | None = None
    add_properties: List[PropertyConfig] = Field(default_factory=list)
    remove_properties: List[str] = Field(default_factory=list)
    transform_properties: Dict[str, PropertyTransformConfig] = Field(default_factory=dict)
    discriminate: DiscriminatorConfig | None = None

    def to_transform(self) -> TypeTransform:
        discriminator = None
        if self.discriminate is not None:
            discriminator = DiscriminatorSpec(
                property=self.discriminate.property,
                variants=dict(self.discriminate.variants),
                keep_base=self.discriminate.keep_base,
            )
        return TypeTransform(
            rename=self.rename,
            add_properties=[prop.to_property() for prop in self.add_properties],
            remove_properties=list(self.remove_properties),
            transform_properties={
                name: PropertyTransform(**edit.model_dump()) for name, edit in self.transform_properties.items()
            },
            discriminator=discriminator,
        )


class NamingConfig(BaseModel):
    prefix: str | None = None
    suffix: str | None = None


class RulesConfig(BaseModel):
    transforms: Dict[str, TransformConfig] = Field(default_factory=dict)
    exclude_types: List[str] = Field(default_factory=list)
    naming: NamingConfig = Field(default_factory=NamingConfig)

    def to_rules(self, api_id: str) -> ExtractionRules:
        return ExtractionRules(
            api_id=api_id,
            transforms={name: transform.to_transform() for name, transform in self.transforms.items()},
            exclude_types=frozenset(self.exclude_types),
            naming=NamingRules(prefix=self.naming.prefix, suffix=self.naming.suffix),
        )


class TypeExtractionConfig(BaseModel):
    api: str
    source: SourceConfig = Field(default_factory=SourceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    contracts: ContractsConfig = Field(default_factory=ContractsConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    adapter: str = "generic"
    log_level: str = "INFO"

    @field_validator("api")
    @classmethod
    def _api_is_identifier(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError('"api" must not be empty')
        return cleaned


__all__ = [
    "ContractsConfig",
    "DiscriminatorConfig",
    "NamingConfig",
    "OutputConfig",
    "PropertyConfig",
    "PropertyTransformConfig",
    "RulesConfig",
    "SourceConfig",
    "TransformConfig",
    "TypeExtractionConfig",
]
