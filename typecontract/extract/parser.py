"""Tree-sitter parser access for TypeScript sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..logging import get_logger

LOGGER = get_logger(__name__)


class TsDialect(Enum):
    TYPESCRIPT = "typescript"
    TSX = "tsx"


EXTENSION_TO_DIALECT: dict[str, TsDialect] = {
    ".ts": TsDialect.TYPESCRIPT,
    ".mts": TsDialect.TYPESCRIPT,
    ".cts": TsDialect.TYPESCRIPT,
    ".tsx": TsDialect.TSX,
}


def detect_dialect(file_path: str | Path) -> TsDialect | None:
    """Return the grammar for a path; ``.d.ts`` files use the TypeScript grammar."""
    return EXTENSION_TO_DIALECT.get(Path(file_path).suffix.lower())


@dataclass(slots=True)
class ParsedSource:
    path: str
    source: bytes
    tree: Any  # tree_sitter.Tree

    @property
    def root(self) -> Any:
        return self.tree.root_node

    def text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8")


def first_error(node: Any) -> Any | None:
    """Depth-first search for the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_error(child)
        if found is not None:
            return found
    return node


@dataclass(slots=True)
class SourceParser:
    """Per-run holder of tree-sitter parsers, one per dialect."""

    _parsers: dict[TsDialect, Any] = field(default_factory=dict)

    def _parser_for(self, dialect: TsDialect) -> Any:
        parser = self._parsers.get(dialect)
        if parser is None:
            from tree_sitter_language_pack import get_parser

            parser = get_parser(dialect.value)
            self._parsers[dialect] = parser
            LOGGER.debug("Loaded tree-sitter grammar '%s'", dialect.value)
        return parser

    def parse(self, file_path: str | Path, content: bytes | None = None) -> ParsedSource:
        """Parse a file; raises ValueError for unsupported extensions and OSError on read failures."""
        dialect = detect_dialect(file_path)
        if dialect is None:
            raise ValueError(f"Unsupported file type: {Path(file_path).suffix or '<none>'}")
        if content is None:
            content = Path(file_path).read_bytes()
        tree = self._parser_for(dialect).parse(content)
        return ParsedSource(path=str(file_path), source=content, tree=tree)


__all__ = ["ParsedSource", "SourceParser", "TsDialect", "detect_dialect", "first_error"]
