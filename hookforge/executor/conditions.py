"""Task eligibility conditions.

A condition is a short expression attached to a task with the ``if`` key:

    branch == main        branch != main        branch =~ ^release/
    env:CI                !env:CI
    exists:Cargo.toml     !exists:.skip-lint

Anything else is treated as true so that a typo never silently disables a
hook; a warning is logged instead.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)

_BRANCH = re.compile(r"^branch\s*(==|!=|=~)(.*)$", re.DOTALL)

_PREFIXES = ("!env:", "env:", "!exists:", "exists:")


def branch_regex(condition: str) -> str | None:
    """Return the pattern of a ``branch =~ R`` condition, None for any other form."""
    match = _BRANCH.match(condition.strip())
    if match is None or match.group(1) != "=~":
        return None
    return match.group(2).strip()


def is_known_condition(condition: str) -> bool:
    condition = condition.strip()
    if not condition:
        return True
    return _BRANCH.match(condition) is not None or condition.startswith(_PREFIXES)


def evaluate_condition(
    condition: str | None,
    branch: str | None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    if condition is None:
        return True

    condition = condition.strip()
    if not condition:
        return True

    if environ is None:
        environ = os.environ

    match = _BRANCH.match(condition)
    if match is not None:
        return _evaluate_branch(match.group(1), match.group(2).strip(), branch or "")

    if condition.startswith("!env:"):
        return condition[len("!env:"):].strip() not in environ

    if condition.startswith("env:"):
        return condition[len("env:"):].strip() in environ

    if condition.startswith("!exists:"):
        return not Path(condition[len("!exists:"):].strip()).exists()

    if condition.startswith("exists:"):
        return Path(condition[len("exists:"):].strip()).exists()

    logger.warning("Unknown condition format: %s (task will run)", condition)
    return True


def _evaluate_branch(op: str, operand: str, branch: str) -> bool:
    match op:
        case "==":
            return branch == operand
        case "!=":
            return branch != operand
        case "=~":
            try:
                return re.search(operand, branch) is not None
            except re.error:
                logger.warning("Invalid branch pattern: %s (task will run)", operand)
                return True
        case _:
            raise AssertionError("Unreachable")
