"""Artifact writer helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import orjson


def write_text(file_path: Path, content: str) -> None:
    """Atomically replace ``file_path`` with ``content`` (UTF-8)."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", delete=False, dir=file_path.parent, prefix=f".{file_path.name}.", newline="\n"
        ) as handle:
            tmp_path = Path(handle.name)
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, file_path)
        tmp_path = None
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def write_json(file_path: Path, payload: dict[str, object]) -> None:
    """Serialize ``payload`` with two-space indentation and a trailing newline."""
    text = orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8")
    write_text(file_path, text + "\n")


def write_files(files: dict[Path, str]) -> list[Path]:
    """Write fully rendered artifacts in path order."""
    written: list[Path] = []
    for path in sorted(files):
        write_text(path, files[path])
        written.append(path)
    return written


__all__ = ["write_files", "write_json", "write_text"]
