"""The ``any`` guard over final declarations."""

from __future__ import annotations

from pathlib import Path

import pytest

from typecontract.errors import ForbiddenTypeError
from typecontract.extract.pipeline import extract_types
from typecontract.guard import find_occurrences
from typecontract.models import ExtractionRules, NamingRules, PropertyTransform, TypeTransform

LOOSE_TYPES = Path(__file__).resolve().parent / "data" / "loose_api" / "types.ts"


def test_word_boundaries() -> None:
    assert find_occurrences("Anything | company | many | anyhow | any_value") == []
    found = find_occurrences("Map<string, any>")
    assert len(found) == 1
    assert found[0].offset == 12
    assert found[0].snippet == "Map<string, any>"


def test_occurrence_coordinates_follow_source() -> None:
    definition = "export interface X {\n  a: any;\n  b: any[];\n}"
    found = find_occurrences(definition, first_line=10, first_column=1)
    assert [(item.line, item.column) for item in found] == [(11, 6), (12, 6)]


def test_any_aborts_run_with_one_error_per_occurrence() -> None:
    rules = ExtractionRules(api_id="test-api", naming=NamingRules(prefix="Test"))
    with pytest.raises(ForbiddenTypeError) as excinfo:
        extract_types([LOOSE_TYPES], rules)
    failure = excinfo.value
    assert failure.occurrences == 1
    assert failure.violating_types == ["TestBadType"]
    assert failure.metrics.unknown_type_violations == 1
    violations = [error for error in failure.errors if error.code == "any-type-violation"]
    assert len(violations) == 1
    assert violations[0].type_name == "TestBadType"
    assert violations[0].line == 8
    assert "Use a specific type" in violations[0].message
    assert violations[0].to_dict()["typeName"] == "TestBadType"
    assert violations[0].to_dict()["code"] == "any-type-violation"
    assert failure.metrics.finished_time is not None


def test_counts_types_once_and_occurrences_each(write_ts) -> None:
    path = write_ts(
        "loose.ts",
        """
        export interface Envelope {
          payload: any;
          items: any[];
        }
        export type Bag = Record<string, any>;
        export interface Clean {
          company: string;
        }
        """,
    )
    with pytest.raises(ForbiddenTypeError) as excinfo:
        extract_types([path], ExtractionRules(api_id="loose"))
    failure = excinfo.value
    assert failure.occurrences == 3
    assert failure.violating_types == ["Bag", "Envelope"]
    assert failure.metrics.unknown_type_violations == 2
    assert len([error for error in failure.errors if error.code == "any-type-violation"]) == 3


def test_documentation_prose_is_not_scanned(write_ts) -> None:
    path = write_ts(
        "documented.ts",
        """
        /** Accepts any payload the server sends. */
        export interface Message {
          /** Can be any string at all */
          body: string;
        }
        """,
    )
    context = extract_types([path], ExtractionRules(api_id="docs"))
    assert context.metrics.unknown_type_violations == 0
    assert context.errors == []


def test_transforms_can_clear_violations(write_ts) -> None:
    path = write_ts("fixable.ts", "export interface Event {\n  data: any;\n}\n")
    rules = ExtractionRules(
        api_id="fixable",
        transforms={"Event": TypeTransform(transform_properties={"data": PropertyTransform(type="unknown")})},
    )
    context = extract_types([path], rules)
    assert context.types["Event"].property_named("data").type == "unknown"
    assert context.metrics.unknown_type_violations == 0


def test_call_and_construct_signatures_are_scanned(write_ts) -> None:
    path = write_ts(
        "handlers.ts",
        """
        export interface Handler {
          (payload: any): void;
          new (x: any): Handler;
        }
        export interface Box<T extends any> {
          value: T;
        }
        """,
    )
    with pytest.raises(ForbiddenTypeError) as excinfo:
        extract_types([path], ExtractionRules(api_id="handlers"))
    failure = excinfo.value
    assert failure.occurrences == 3
    assert failure.violating_types == ["Box", "Handler"]
    lines = sorted(error.line for error in failure.errors if error.code == "any-type-violation")
    assert lines == [2, 3, 5]
