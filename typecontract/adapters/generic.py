"""Adapter whose rules come entirely from configuration."""

from __future__ import annotations

from ..config import TypeExtractionConfig
from ..extract.base import Adapter


def build_adapter(config: TypeExtractionConfig) -> Adapter:
    return Adapter(rules=config.rules.to_rules(config.api))


__all__ = ["build_adapter"]
