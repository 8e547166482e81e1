"""Path helper utilities."""

from __future__ import annotations

import re
from pathlib import Path

API_PLACEHOLDER = "{api}"
_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.$-]")


def _normalize_relative(path: str) -> str:
    """Return a forward-slashed relative path without leading separators."""
    return path.replace("\\", "/").lstrip("/")


def render_filename(pattern: str, api_id: str) -> str:
    """Substitute the API identifier into a filename pattern."""
    return pattern.replace(API_PLACEHOLDER, api_id)


def module_specifier(filename: str) -> str:
    """Return the relative import specifier for a generated ``.ts`` file."""
    stem = filename[:-3] if filename.endswith(".ts") else filename
    return "./" + _normalize_relative(stem)


def type_filename(type_name: str) -> str:
    """Filename used for a single declaration in split mode."""
    return f"{_UNSAFE_FILENAME.sub('_', type_name)}.ts"


def display_path(path: str | Path, root: Path | None = None) -> str:
    """Return ``path`` relative to ``root`` when possible, forward-slashed."""
    target = Path(path)
    if root is not None:
        try:
            return target.resolve().relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return target.as_posix()


__all__ = ["API_PLACEHOLDER", "display_path", "module_specifier", "render_filename", "type_filename"]
