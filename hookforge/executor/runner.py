from __future__ import annotations

import logging
import re
import subprocess
import time
from typing import Sequence

from hookforge.config.types import TaskConfig

from .types import ExecutionContext, TaskResult

logger = logging.getLogger(__name__)

FILES_PLACEHOLDER = "{files}"

_ARG_PLACEHOLDER = re.compile(r"\$(\d+)|\{(\d+)\}")
_UNSAFE = re.compile(r"[^\w@%+=:,./-]")
_DQUOTE_SPECIAL = re.compile(r'[\\"$`]')


def build_command(task: TaskConfig, files: Sequence[str], args: Sequence[str] = ()) -> str:
    files_str = " ".join(_quote(path) for path in files)
    command = task.run

    if FILES_PLACEHOLDER in command:
        command = command.replace(FILES_PLACEHOLDER, files_str)
    elif task.glob is not None and files:
        command = f"{command} {files_str}"

    def substitute(match: re.Match[str]) -> str:
        index = int(match.group(1) or match.group(2))
        if 1 <= index <= len(args):
            return args[index - 1]
        return match.group(0)

    return _ARG_PLACEHOLDER.sub(substitute, command)


def run_task(task: TaskConfig, files: Sequence[str], context: ExecutionContext) -> TaskResult:
    command = build_command(task, files, context.args)
    logger.debug("Executing %s: %s (cwd=%s)", task.name, command, task.cwd or ".")

    start = time.monotonic()
    try:
        result = subprocess.run(
            command,
            shell=True,
            cwd=task.cwd or None,
            env={**context.environ, **task.env},
            capture_output=True,
            text=True,
            errors="replace",
        )
    except (OSError, ValueError) as exc:
        # ValueError: NUL byte or "=" in an environment name
        duration = time.monotonic() - start
        logger.error("Failed to execute task %s: %s", task.name, exc)
        return TaskResult(task.name, False, -1, "", str(exc), duration)

    duration = time.monotonic() - start

    return TaskResult(
        task.name,
        result.returncode == 0,
        result.returncode,
        result.stdout,
        result.stderr,
        duration,
    )


def _quote(path: str) -> str:
    if not path or _UNSAFE.search(path):
        # Inside double quotes the shell still expands \ " $ and `
        escaped = _DQUOTE_SPECIAL.sub(r"\\\g<0>", path)
        return f'"{escaped}"'
    return path
