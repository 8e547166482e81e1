"""Naming conventions applied to declaration names."""

from __future__ import annotations

import re
from typing import Mapping

from ..models import NamingRules


def apply_naming(name: str, rules: NamingRules) -> str:
    """Return the conventional name for ``name``.

    A custom transform replaces prefix/suffix handling entirely. Prefix and
    suffix are only added when the name does not already carry them.
    """
    if rules.transform is not None:
        return rules.transform(name)
    result = name
    if rules.prefix and not result.startswith(rules.prefix):
        result = rules.prefix + result
    if rules.suffix and not result.endswith(rules.suffix):
        result = result + rules.suffix
    return result


def reference_pattern(names: Mapping[str, str]) -> re.Pattern[str] | None:
    """Match bare references to any of ``names`` (not qualified, not quoted)."""
    if not names:
        return None
    alternatives = "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))
    return re.compile(rf"(?<![\w$.'\"`])({alternatives})(?![\w$'\"`])")


def rewrite_references(text: str, renames: Mapping[str, str], pattern: re.Pattern[str] | None = None) -> str:
    pattern = pattern or reference_pattern(renames)
    if pattern is None:
        return text
    return pattern.sub(lambda match: renames[match.group(1)], text)


__all__ = ["apply_naming", "reference_pattern", "rewrite_references"]
