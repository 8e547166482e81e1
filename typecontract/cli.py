"""Command-line interface for typecontract."""

from __future__ import annotations

import fnmatch
import importlib
from pathlib import Path
from typing import Iterable, List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import TypeExtractionConfig
from .errors import ConfigurationError, DriftDetectedError, ExtractionFailed
from .extract.base import Adapter
from .extract.pipeline import run_adapter
from .logging import configure_logging, get_logger
from .models import ExtractionContext
from .paths import display_path, render_filename
from .render.contracts import ContractsGenerator
from .render.extraction_map import DEFAULT_EXTRACTION_MAP_FILENAME, write_extraction_map
from .render.generator import TypeGenerator

app = typer.Typer(help="Extract strict TypeScript contracts from third-party API sources.")
LOGGER = get_logger(__name__)
CONSOLE = Console(stderr=True)

CONFIG_FILENAME = "typecontract.yaml"
BUILTIN_ADAPTERS: dict[str, str] = {
    "generic": "typecontract.adapters.generic",
    "template": "typecontract.adapters.template",
}


@app.callback()
def main() -> None:
    """typecontract CLI root."""
    return None


def _load_yaml_config(config_path: Path) -> dict[str, object]:
    if not config_path.exists():
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:  # pragma: no cover - yaml error path
        raise typer.BadParameter(f"Failed to parse {config_path}: {error}") from error
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{config_path.name} must contain a mapping")
    return data


def _set_dotted(target: dict[str, object], dotted: str, value: object) -> None:
    *parents, leaf = dotted.split(".")
    node = target
    for key in parents:
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child
    node[leaf] = value


def _merge_config(config_path: Path, overrides: dict[str, object]) -> TypeExtractionConfig:
    merged = _load_yaml_config(config_path)
    for dotted, value in overrides.items():
        if value is None:
            continue
        _set_dotted(merged, dotted, value)
    if "api" not in merged:
        raise typer.BadParameter(f"No API configured. Pass --api or add 'api' to {config_path.name}.")
    try:
        return TypeExtractionConfig(**merged)
    except ValidationError as error:
        raise typer.BadParameter(f"Invalid configuration: {error}") from error


def _is_ignored(relative_path: str, patterns: Iterable[str]) -> bool:
    candidates = (relative_path, f"./{relative_path}")
    return any(fnmatch.fnmatch(candidate, pattern) for pattern in patterns for candidate in candidates)


def _collect_source_files(source_root: Path, patterns: Iterable[str], exclude: list[str]) -> list[Path]:
    selected: dict[Path, None] = {}
    for pattern in patterns:
        for path in source_root.glob(pattern):
            if not path.is_file():
                continue
            rel = path.relative_to(source_root).as_posix()
            if _is_ignored(rel, exclude):
                continue
            selected[path.resolve()] = None
    return sorted(selected)


def _resolve_adapter(config: TypeExtractionConfig) -> Adapter:
    reference = BUILTIN_ADAPTERS.get(config.adapter, config.adapter)
    module_name, _, attribute = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise ConfigurationError(f"No adapter found for '{config.adapter}': {error}") from error
    factory = getattr(module, attribute or "build_adapter", None)
    if not callable(factory):
        raise ConfigurationError(f"Adapter '{config.adapter}' does not expose a build_adapter callable")
    adapter = factory(config)
    if not isinstance(adapter, Adapter):
        raise ConfigurationError(f"Adapter '{config.adapter}' returned {type(adapter).__name__}, expected Adapter")
    return adapter


def _resolve(root: Path, value: str) -> Path:
    path = Path(value)
    return path if path.is_absolute() else (root / path).resolve()


def _print_summary(context: ExtractionContext) -> None:
    table = Table(title=f"Extraction results: {context.rules.api_id}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for key, value in context.metrics.snapshot().items():
        table.add_row(key, str(value))
    CONSOLE.print(table)


def _print_errors(context: ExtractionContext, root: Path) -> None:
    if not context.errors:
        return
    table = Table(title=f"Errors ({len(context.errors)})")
    table.add_column("Location")
    table.add_column("Type")
    table.add_column("Code")
    table.add_column("Message")
    for error in context.errors:
        location = display_path(error.file, root) if error.file else "-"
        if error.line is not None:
            location += f":{error.line}"
        table.add_row(location, error.type_name or "-", error.code, error.message)
    CONSOLE.print(table)


@app.command("extract")
def extract(
    root: Path = typer.Option(Path("."), exists=True, dir_okay=True, file_okay=False, help="Project root."),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help=f"YAML config (default: {CONFIG_FILENAME})."),
    api: Optional[str] = typer.Option(None, help="API identifier, e.g. stripe."),
    source: Optional[str] = typer.Option(None, help="Source directory relative to the project root."),
    pattern: Optional[List[str]] = typer.Option(None, help="Glob pattern for source files (repeatable)."),
    exclude: Optional[List[str]] = typer.Option(None, help="Glob pattern to skip (repeatable)."),
    out_dir: Optional[str] = typer.Option(None, help="Directory for generated declarations."),
    filename: Optional[str] = typer.Option(None, help="Output filename pattern; {api} is substituted."),
    split: bool = typer.Option(False, "--split", help="Write one file per declaration."),
    no_index: bool = typer.Option(False, "--no-index", help="Do not write index.ts."),
    contracts: Optional[str] = typer.Option(None, help="Path of the strict contracts artifact."),
    extraction_map: Optional[str] = typer.Option(None, help="Path of the extraction map JSON."),
    api_version: Optional[str] = typer.Option(None, help="Version of the API being extracted."),
    fail_on_drift: bool = typer.Option(False, "--fail-on-drift", help="Abort if exported names changed."),
    fail_on_validation: bool = typer.Option(False, "--fail-on-validation", help="Abort on validation errors."),
    adapter: Optional[str] = typer.Option(None, help="Adapter name or module[:factory]."),
    log_level: Optional[str] = typer.Option(None, help="Log level (default INFO)."),
) -> None:
    root_path = root.resolve()
    config_path = _resolve(root_path, str(config_file)) if config_file else root_path / CONFIG_FILENAME

    overrides: dict[str, object] = {
        "api": api,
        "source.root": source,
        "source.patterns": list(pattern) if pattern else None,
        "source.exclude": list(exclude) if exclude else None,
        "output.directory": out_dir,
        "output.filename": filename,
        "output.split_types": True if split else None,
        "output.generate_index": False if no_index else None,
        "contracts.output_path": contracts,
        "contracts.extraction_map_path": extraction_map,
        "contracts.api_version": api_version,
        "contracts.fail_on_drift": True if fail_on_drift else None,
        "adapter": adapter,
        "log_level": log_level,
    }
    config = _merge_config(config_path, overrides)
    configure_logging(config.log_level)

    try:
        resolved_adapter = _resolve_adapter(config)
    except ConfigurationError as error:
        raise typer.BadParameter(str(error)) from error

    source_root = _resolve(root_path, config.source.root)
    files = _collect_source_files(source_root, config.source.patterns, config.source.exclude)
    if not files:
        LOGGER.warning("No source files matched under %s", source_root)
        return
    LOGGER.info("Found %d source files for '%s'", len(files), config.api)

    try:
        context = run_adapter(files, resolved_adapter)
    except ExtractionFailed as error:
        _print_errors(error.context, root_path)
        LOGGER.error("%s", error)
        raise typer.Exit(code=1) from error

    _print_summary(context)
    _print_errors(context, root_path)
    if fail_on_validation and context.metrics.validations_failed:
        LOGGER.error("%d validation failures; no artifacts written", context.metrics.validations_failed)
        raise typer.Exit(code=1)

    output_dir = _resolve(root_path, config.output.directory)
    if config.contracts.extraction_map_path:
        map_path = _resolve(root_path, config.contracts.extraction_map_path)
    else:
        map_path = output_dir / render_filename(DEFAULT_EXTRACTION_MAP_FILENAME, config.api)
    contracts_generator = None
    if config.contracts.output_path:
        contracts_generator = ContractsGenerator(
            config.contracts,
            output_path=_resolve(root_path, config.contracts.output_path),
            extraction_map_path=map_path,
        )

    try:
        if contracts_generator is not None and config.contracts.fail_on_drift:
            report = contracts_generator.check_drift(context)
            if report.has_drift:
                raise DriftDetectedError(report)
        TypeGenerator(config.output, output_dir=output_dir).generate(context)
        if contracts_generator is not None:
            contracts_generator.generate(context)
    except DriftDetectedError as error:
        LOGGER.error("%s", error)
        raise typer.Exit(code=1) from error

    if contracts_generator is None:
        write_extraction_map(context, map_path, config.contracts.api_version)
    context.release_syntax()
    LOGGER.info("Type extraction complete for '%s'", config.api)


__all__ = ["app"]
