"""Logging utilities."""

from __future__ import annotations

import logging
from typing import Iterable

from rich.console import Console
from rich.logging import RichHandler

QUIET_LOGGERS: tuple[str, ...] = ("tree_sitter", "tree_sitter_language_pack")


def configure_logging(level: str = "INFO", *, rich_tracebacks: bool = True, console: Console | None = None) -> None:
    """Route typecontract logs through a rich handler on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=rich_tracebacks,
        markup=False,
        show_path=level.upper() == "DEBUG",
    )
    logging.basicConfig(level=level.upper(), handlers=[handler], format="%(message)s", force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, *extra_names: Iterable[str]) -> logging.Logger:
    """Return a namespaced logger."""
    namespace = ".".join([name, *extra_names]) if extra_names else name
    return logging.getLogger(namespace)


__all__ = ["configure_logging", "get_logger"]
