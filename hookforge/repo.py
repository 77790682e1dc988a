"""Thin git subprocess wrapper for the inputs a hook run needs."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class RepoError(Exception):
    """Error from a git command."""


def _run(args: list[str], cwd: Path | None) -> subprocess.CompletedProcess[str]:
    logger.debug("git %s", " ".join(args))
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except OSError as exc:
        raise RepoError(f"git {' '.join(args)}: {exc}") from exc


def staged_files(cwd: Path | None = None) -> list[str]:
    """Paths staged in the index, relative to the repository root."""
    result = _run(["diff", "--cached", "--name-only"], cwd)
    if result.returncode != 0:
        raise RepoError(f"Not a git repository (or any of the parent directories): {result.stderr.strip()}")
    return [line for line in result.stdout.splitlines() if line]


def current_branch(cwd: Path | None = None) -> str | None:
    """Short name of the checked out branch, None on a detached HEAD."""
    result = _run(["symbolic-ref", "--short", "-q", "HEAD"], cwd)
    if result.returncode == 1:
        return None
    if result.returncode != 0:
        raise RepoError(f"git symbolic-ref: {result.stderr.strip()}")
    return result.stdout.strip() or None
