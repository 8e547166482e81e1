"""Rule-driven transformations: property edits, unions, renames and naming."""

from __future__ import annotations

from pathlib import Path

import pytest

from typecontract.errors import TransformFailure
from typecontract.extract.base import classes_named
from typecontract.extract.pipeline import extract_types
from typecontract.models import (
    DeclarationKind,
    DiscriminatorSpec,
    ExtractionContext,
    ExtractionRules,
    NamingRules,
    PropertyInfo,
    PropertyTransform,
    TypeTransform,
)
from typecontract.transform.naming import apply_naming

PAYMENT_VARIANTS = {"card": "CardPayment", "bank": "BankPayment"}


def _rules(**transforms: TypeTransform) -> ExtractionRules:
    return ExtractionRules(api_id="sample", transforms=transforms, exclude_types=frozenset({"InternalHelper"}))


def test_payment_becomes_discriminated_union(sample_models: Path) -> None:
    rules = _rules(Payment=TypeTransform(discriminator=DiscriminatorSpec("method", PAYMENT_VARIANTS)))
    context = extract_types([sample_models], rules)

    alias = context.types["Payment"]
    assert alias.kind is DeclarationKind.TYPE_ALIAS
    assert alias.definition == "export type Payment = CardPayment | BankPayment;"

    card = context.types["CardPayment"]
    assert card.kind is DeclarationKind.INTERFACE
    assert card.is_exported
    assert [prop.name for prop in card.properties] == ["id", "method", "amount"]
    method = card.property_named("method")
    assert method.type == "'card'"
    assert not method.optional
    assert card.property_named("amount").readonly
    assert "  method: 'card';" in card.definition
    assert context.types["BankPayment"].property_named("method").type == "'bank'"
    assert card.location == context.types["Payment"].location
    assert context.metrics.transforms_applied == 1


def test_keep_base_adds_union_alongside(sample_models: Path) -> None:
    discriminator = DiscriminatorSpec("method", PAYMENT_VARIANTS, keep_base=True)
    context = extract_types([sample_models], _rules(Payment=TypeTransform(discriminator=discriminator)))
    assert context.types["Payment"].kind is DeclarationKind.INTERFACE
    assert context.types["PaymentUnion"].definition == "export type PaymentUnion = CardPayment | BankPayment;"


def test_missing_discriminator_is_prepended_and_literals_keep_shape(sample_models: Path) -> None:
    discriminator = DiscriminatorSpec("version", {"1": "ListResponseV1", "true": "ListResponseFlag"})
    context = extract_types([sample_models], _rules(ListResponse=TypeTransform(discriminator=discriminator)))
    first = context.types["ListResponseV1"]
    assert [prop.name for prop in first.properties] == ["version", "success", "data"]
    assert first.property_named("version").type == "1"
    assert first.type_parameters == ["T"]
    assert context.types["ListResponseFlag"].property_named("version").type == "true"
    assert context.types["ListResponse"].definition == (
        "export type ListResponse<T> = ListResponseV1<T> | ListResponseFlag<T>;"
    )


def test_discriminating_a_non_interface_fails(sample_models: Path) -> None:
    discriminator = DiscriminatorSpec("kind", {"a": "CurrencyA"})
    with pytest.raises(TransformFailure) as excinfo:
        extract_types([sample_models], _rules(Currency=TypeTransform(discriminator=discriminator)))
    assert isinstance(excinfo.value.__cause__, ValueError)
    assert excinfo.value.errors[-1].code == "transform"


def test_property_edits_remove_then_alter_then_add(sample_models: Path) -> None:
    transform = TypeTransform(
        remove_properties=["id"],
        transform_properties={"status": PropertyTransform(type="'open' | 'closed'"), "total": PropertyTransform(optional=False)},
        add_properties=[PropertyInfo(name="note", type="string", optional=True, documentation="Free text")],
    )
    context = extract_types([sample_models], _rules(Order=transform))
    order = context.types["Order"]
    assert [prop.name for prop in order.properties] == ["items", "status", "total", "note"]
    assert "  status: 'open' | 'closed';" in order.definition
    assert "  total: number;" in order.definition
    assert "  note?: string;" in order.definition
    assert "Free text" not in order.definition
    assert context.metrics.transforms_applied == 1


def test_rename_rewrites_declaration_header(sample_models: Path) -> None:
    context = extract_types([sample_models], _rules(Status=TypeTransform(rename="AccountStatus")))
    assert "Status" not in context.types
    assert context.types["AccountStatus"].definition.startswith("export enum AccountStatus {")


def test_prefix_naming_updates_references(write_ts) -> None:
    path = write_ts(
        "accounts.ts",
        """
        export interface User {
          id: string;
        }
        export interface TestAccount {
          owner: User;
          label: 'User';
        }
        export type Users = User[];
        """,
    )
    context = extract_types([path], ExtractionRules(api_id="test-api", naming=NamingRules(prefix="Test")))
    assert sorted(context.types) == ["TestAccount", "TestUser", "TestUsers"]
    account = context.types["TestAccount"]
    assert account.property_named("owner").type == "TestUser"
    assert account.property_named("label").type == "'User'"
    assert context.types["TestUsers"].definition == "export type TestUsers = TestUser[];"
    assert context.types["TestUser"].definition.startswith("export interface TestUser {")
    assert context.metrics.transforms_applied == 2


def test_prefix_naming_rewrites_class_bodies_but_not_enum_members(write_ts) -> None:
    path = write_ts(
        "client.ts",
        """
        export interface User {
          id: string;
        }
        export enum Role {
          User = 'user',
        }
        export class UserClient {
          async getUser(id: string): Promise<User> {
            return fetch(`/users/${id}`).then((response) => response.json() as Promise<User>);
          }
        }
        """,
    )
    rules = ExtractionRules(api_id="test-api", naming=NamingRules(prefix="Test"))
    context = extract_types([path], rules, should_extract_class=classes_named("Client"))
    client = context.types["TestUserClient"].definition
    assert client.startswith("export class TestUserClient {")
    assert "async getUser(id: string): Promise<TestUser> {" in client
    assert "as Promise<TestUser>" in client
    assert "`/users/${id}`" in client
    assert "  User = 'user'," in context.types["TestRole"].definition


def test_variant_documentation_follows_renames(sample_models: Path) -> None:
    rules = ExtractionRules(
        api_id="sample",
        naming=NamingRules(prefix="Test"),
        transforms={"Payment": TypeTransform(discriminator=DiscriminatorSpec("method", PAYMENT_VARIANTS))},
        exclude_types=frozenset({"InternalHelper"}),
    )
    context = extract_types([sample_models], rules)
    assert context.types["TestCardPayment"].documentation == "Variant of TestPayment where method is 'card'."
    assert context.types["TestBankPayment"].documentation == "Variant of TestPayment where method is 'bank'."


def test_apply_naming_rules() -> None:
    assert apply_naming("User", NamingRules(prefix="Test")) == "TestUser"
    assert apply_naming("TestUser", NamingRules(prefix="Test")) == "TestUser"
    assert apply_naming("User", NamingRules(suffix="Dto")) == "UserDto"
    assert apply_naming("User", NamingRules(prefix="Test", transform=str.upper)) == "USER"


def test_custom_transform_hook_errors_are_wrapped(sample_models: Path) -> None:
    def explode(context: ExtractionContext) -> None:
        raise RuntimeError("boom")

    with pytest.raises(TransformFailure, match="boom") as excinfo:
        extract_types([sample_models], _rules(), apply_transformations=explode)
    assert excinfo.value.context.metrics.types_extracted == 10
