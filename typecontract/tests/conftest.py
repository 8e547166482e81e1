"""Shared fixtures for the typecontract test suite."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Callable

import pytest

DATA_DIR = Path(__file__).resolve().parent / "data"
SAMPLE_API = DATA_DIR / "sample_api"


@pytest.fixture()
def sample_files() -> list[Path]:
    return sorted(SAMPLE_API.glob("*.ts"))


@pytest.fixture()
def sample_models() -> Path:
    return SAMPLE_API / "models.ts"


@pytest.fixture()
def write_ts(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return path

    return _write
