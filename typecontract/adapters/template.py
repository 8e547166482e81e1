"""Example adapter for a payments-style API.

Copy this module next to your project, rename the rules and point
``adapter`` in ``typecontract.yaml`` at ``yourmodule:build_adapter``.
"""

from __future__ import annotations

from ..config import TypeExtractionConfig
from ..extract.base import Adapter, classes_named
from ..models import (
    DiscriminatorSpec,
    ExtractedType,
    ExtractionRules,
    NamingRules,
    PropertyInfo,
    PropertyTransform,
    TypeTransform,
    ValidationResult,
)
from ..transform.validator import require_field, with_checks

PREFIX = "MyAPI"


def prefix_name(name: str) -> str:
    return name if name.startswith(PREFIX) else f"{PREFIX}{name}"


def _property_names(record: ExtractedType) -> set[str]:
    return {prop.name for prop in record.properties or ()}


def validate_product(record: ExtractedType) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []
    names = _property_names(record)
    for required in ("id", "name", "price", "currency"):
        if required not in names:
            errors.append(f"Missing required field: {required}")
    price = record.property_named("price")
    if price is not None and "number" not in price.type:
        errors.append("Price field must be a number type")
    if "description" not in names:
        warnings.append("Consider adding a description field")
    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_order(record: ExtractedType) -> ValidationResult:
    items = record.property_named("items")
    if items is None:
        return ValidationResult(valid=False, errors=["Order must have items field"])
    if "[]" not in items.type and not items.type.startswith("Array<"):
        return ValidationResult(valid=False, errors=["Order items must be an array"])
    return ValidationResult(valid=True)


def validate_user(record: ExtractedType) -> ValidationResult:
    names = _property_names(record)
    errors = [f"Missing required field: {field}" for field in ("id", "email") if field not in names]
    return ValidationResult(valid=not errors, errors=errors)


def default_rules() -> ExtractionRules:
    return ExtractionRules(
        api_id="myapi",
        transforms={
            "Payment": TypeTransform(
                discriminator=DiscriminatorSpec(
                    property="method",
                    variants={"card": "CardPayment", "bank": "BankPayment", "crypto": "CryptoPayment"},
                )
            ),
            "User": TypeTransform(
                add_properties=[
                    PropertyInfo(
                        name="displayName",
                        type="string",
                        optional=True,
                        readonly=True,
                        documentation="Formatted display name",
                    )
                ]
            ),
            "Order": TypeTransform(
                transform_properties={
                    "status": PropertyTransform(type="'pending' | 'processing' | 'completed' | 'cancelled'"),
                    "total": PropertyTransform(type="number", optional=False),
                }
            ),
        },
        exclude_types=frozenset({"InternalHelper", "TestMock", "DeprecatedType"}),
        validators={
            prefix_name("Product"): validate_product,
            prefix_name("Order"): validate_order,
            prefix_name("User"): validate_user,
        },
        naming=NamingRules(transform=prefix_name),
    )


def build_adapter(config: TypeExtractionConfig | None = None) -> Adapter:
    rules = default_rules()
    if config is not None:
        configured = config.rules.to_rules(config.api)
        rules = ExtractionRules(
            api_id=config.api,
            transforms={**rules.transforms, **configured.transforms},
            exclude_types=rules.exclude_types | configured.exclude_types,
            validators=rules.validators,
            naming=rules.naming,
        )
    return Adapter(
        rules=rules,
        validate_types=with_checks(require_field("success", suffix="Response")),
        should_extract_class=classes_named("Client", "Service", "API"),
    )


__all__ = ["build_adapter", "default_rules", "prefix_name", "validate_order", "validate_product", "validate_user"]
