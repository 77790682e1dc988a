import os
from dataclasses import dataclass, field
from typing import Mapping

from hookforge.config.types import Settings


@dataclass(frozen=True)
class ExecutionContext:
    settings: Settings
    files: tuple[str, ...] = ()
    branch: str | None = None
    args: tuple[str, ...] = ()
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))


@dataclass(frozen=True)
class TaskResult:
    name: str
    success: bool
    exit_code: int
    stdout: str
    stderr: str
    duration_s: float


@dataclass(frozen=True)
class ExecutionStats:
    total_tasks: int
    successful_tasks: int
    failed_tasks: int
    wall_time_s: float
    # Sum of the per-task durations
    cpu_time_s: float
    parallel_savings_s: float


@dataclass(frozen=True)
class HookResult:
    hook: str
    results: tuple[TaskResult, ...]
    total_duration_s: float
    success: bool
    stats: ExecutionStats
    allowed_failures: frozenset[str] = frozenset()
    skipped_reason: str | None = None

    def get(self, name: str) -> TaskResult | None:
        for result in self.results:
            if result.name == name:
                return result
        return None

    def names(self) -> list[str]:
        return [result.name for result in self.results]
