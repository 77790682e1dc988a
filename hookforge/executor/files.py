from __future__ import annotations

import re
from fnmatch import fnmatchcase
from pathlib import PurePath
from typing import Iterable

_SEPARATORS = re.compile(r"[,\s]+")


def parse_glob(patterns: str) -> tuple[list[str], list[str]]:
    """Split a glob string into (include, exclude) pattern lists.

    Patterns are separated by commas or whitespace; a leading ``!`` marks an
    exclusion.
    """
    includes: list[str] = []
    excludes: list[str] = []

    for pattern in _SEPARATORS.split(patterns):
        if not pattern:
            continue
        if pattern.startswith("!"):
            if len(pattern) > 1:
                excludes.append(pattern[1:])
        else:
            includes.append(pattern)

    return includes, excludes


def select_files(patterns: str, files: Iterable[str]) -> list[str]:
    includes, excludes = parse_glob(patterns)

    if not includes:
        return []

    selected = []
    for path in files:
        forms = _candidate_forms(path)
        if not any(_matches(pattern, forms) for pattern in includes):
            continue
        if any(_matches(pattern, forms) for pattern in excludes):
            continue
        selected.append(path)

    return selected


def _candidate_forms(path: str) -> tuple[str, ...]:
    normalized = path.replace("\\", "/")
    return (path, PurePath(normalized).name, normalized)


def _matches(pattern: str, forms: tuple[str, ...]) -> bool:
    variants = [pattern]
    # "a/**/b" should also match "a/b"
    if "**/" in pattern:
        variants.append(pattern.replace("**/", ""))

    return any(fnmatchcase(form, variant) for form in forms for variant in variants)
