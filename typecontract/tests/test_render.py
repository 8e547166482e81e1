"""Artifact rendering, contracts, drift detection and the extraction map."""

from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from typecontract.config import ContractsConfig, OutputConfig
from typecontract.errors import DriftDetectedError
from typecontract.extract.base import classes_named
from typecontract.extract.pipeline import extract_types
from typecontract.models import ExtractionRules
from typecontract.render.contracts import ContractsGenerator
from typecontract.render.drift import detect_drift, exported_names
from typecontract.render.extraction_map import EXTRACTION_MAP_VERSION, write_extraction_map
from typecontract.render.generator import TypeGenerator


def _extract(files: list[Path], *excluded: str, with_classes: bool = False):
    rules = ExtractionRules(api_id="sample", exclude_types=frozenset({"InternalHelper", *excluded}))
    if with_classes:
        return extract_types(files, rules, should_extract_class=classes_named("Client"))
    return extract_types(files, rules)


def test_unified_render_is_idempotent(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files)
    generator = TypeGenerator(OutputConfig(), output_dir=tmp_path)
    first = generator.render(context)
    second = generator.render(context)
    assert first == second
    assert sorted(path.name for path in first) == ["index.ts", "sample.types.ts"]


def test_unified_layout(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files, with_classes=True)
    generator = TypeGenerator(OutputConfig(header="// Copyright Example"), output_dir=tmp_path)
    written = generator.generate(context)
    assert {path.name for path in written} == {"index.ts", "sample.types.ts"}

    content = (tmp_path / "sample.types.ts").read_text(encoding="utf-8")
    assert content.startswith("// Copyright Example\n\n/**\n * Generated TypeScript Types for sample API")
    assert " * - Types extracted: 11" in content
    interfaces = content.index("// INTERFACES (7 total)")
    aliases = content.index("// TYPE ALIASES (2 total)")
    enums = content.index("// ENUMS (1 total)")
    classes = content.index("// CLASSES (1 total)")
    assert interfaces < aliases < enums < classes
    assert content.index("export interface ErrorResponse {") < content.index("export interface User {")
    assert "/**\n * A registered user.\n * @source " in content
    assert "models.ts:4\n */\nexport interface User {" in content
    assert "\ntype LocalOnly = string;" in content

    index = (tmp_path / "index.ts").read_text(encoding="utf-8")
    assert "export * from './sample.types';" in index


def test_split_mode_indexes_only_exported(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files)
    TypeGenerator(OutputConfig(split_types=True), output_dir=tmp_path).generate(context)
    assert (tmp_path / "User.ts").exists()
    assert (tmp_path / "LocalOnly.ts").exists()
    assert not (tmp_path / "sample.types.ts").exists()
    user = (tmp_path / "User.ts").read_text(encoding="utf-8")
    assert " * Generated type: User" in user
    assert " * Kind: interface" in user

    index = (tmp_path / "index.ts").read_text(encoding="utf-8")
    assert "export * from './User';" in index
    assert "export * from './Metadata';" in index
    assert "LocalOnly" not in index
    assert " * Total Types: 10" in index


def test_index_can_be_disabled(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files)
    TypeGenerator(OutputConfig(generate_index=False, filename="{api}-api.ts"), output_dir=tmp_path).generate(context)
    assert sorted(path.name for path in tmp_path.iterdir()) == ["sample-api.ts"]


def test_contracts_artifact_layout(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files, with_classes=True)
    output = tmp_path / "contracts" / "sample.d.ts"
    generator = ContractsGenerator(ContractsConfig(api_version="1.2.3"), output_path=output)
    report = generator.generate(context)
    assert not report.previous_exists
    assert not report.has_drift

    content = output.read_text(encoding="utf-8")
    assert " * Version: 1.2.3" in content
    assert "declare module '@sample/contracts' {" in content
    assert "  export type BrandedUnknown<TBrand extends string = string" in content
    assert "  export interface User {" in content
    assert "    readonly createdAt: number;" in content
    assert "  export type LocalOnly = string;" in content
    assert "UserClient" not in content
    assert "CLASSES" not in content
    assert content.endswith("}\n")


def test_ambient_declarations_drop_declare_inside_contracts_module(write_ts, tmp_path: Path) -> None:
    path = write_ts(
        "ambient.d.ts",
        """
        declare type Region = 'eu' | 'us';
        export declare enum Mode {
          Fast = 'fast',
        }
        declare interface Zone {
          region: Region;
        }
        """,
    )
    context = extract_types([path], ExtractionRules(api_id="ambient"))
    output = tmp_path / "contracts" / "ambient.d.ts"
    ContractsGenerator(ContractsConfig(), output_path=output).generate(context)

    content = output.read_text(encoding="utf-8")
    assert "  export type Region = 'eu' | 'us';" in content
    assert "  export enum Mode {" in content
    assert "  export interface Zone {" in content
    assert "export declare" not in content
    assert "  declare " not in content

    unified = TypeGenerator(OutputConfig(generate_index=False), output_dir=tmp_path / "out").render_unified(context)
    assert "declare type Region = 'eu' | 'us';" in unified
    assert "export declare enum Mode {" in unified


def test_removed_type_is_reported_as_removed_only(sample_files: list[Path], tmp_path: Path) -> None:
    output = tmp_path / "sample.d.ts"
    generator = ContractsGenerator(ContractsConfig(), output_path=output)
    generator.generate(_extract(sample_files))

    report = generator.generate(_extract(sample_files, "Product"))
    assert report.previous_exists
    assert report.removed == ["Product"]
    assert report.added == []
    assert report.has_drift
    assert report.summary == "Removed types: Product"
    assert "interface Product" not in output.read_text(encoding="utf-8")


def test_fail_on_drift_aborts_before_writing(sample_files: list[Path], tmp_path: Path) -> None:
    output = tmp_path / "sample.d.ts"
    map_path = tmp_path / "map.json"
    ContractsGenerator(ContractsConfig(), output_path=output).generate(_extract(sample_files))
    before = output.read_text(encoding="utf-8")

    strict = ContractsGenerator(ContractsConfig(fail_on_drift=True), output_path=output, extraction_map_path=map_path)
    with pytest.raises(DriftDetectedError) as excinfo:
        strict.generate(_extract(sample_files, "Order", "Status"))
    assert excinfo.value.report.removed == ["Order", "Status"]
    assert str(excinfo.value).startswith("Type drift detected:\n")
    assert output.read_text(encoding="utf-8") == before
    assert not map_path.exists()


def test_body_edits_are_not_drift() -> None:
    previous = "export interface A {\n  id: string;\n}\nexport declare type B = string;\n"
    current = "export interface A {\n  id: number;\n}\nexport declare type B = string;\n"
    report = detect_drift(previous, current)
    assert not report.has_drift
    assert report.content_changed
    assert report.summary == "Types modified but names unchanged"
    assert exported_names(previous) == {"A", "B"}
    assert detect_drift(None, current).summary == "No existing file to compare"
    assert detect_drift(current, current).summary == "No drift detected"


def test_extraction_map(sample_files: list[Path], tmp_path: Path) -> None:
    context = _extract(sample_files, with_classes=True)
    path = write_extraction_map(context, tmp_path / "map" / "sample.json", api_version="2024-01")
    payload = orjson.loads(path.read_bytes())
    assert payload["version"] == EXTRACTION_MAP_VERSION
    assert payload["apiId"] == "sample"
    assert payload["apiVersion"] == "2024-01"
    assert payload["generatedTimestamp"].endswith("Z")
    models, client = (str(source) for source in sample_files[::-1])
    assert list(payload["types"]) == sorted([models, client])
    assert payload["types"][client] == ["UserClient"]
    assert payload["types"][models][:3] == ["Currency", "ErrorResponse", "ListResponse"]
    assert len(payload["types"][models]) == 10
    assert path.read_text(encoding="utf-8").endswith("}\n")
