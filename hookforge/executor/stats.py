from __future__ import annotations

from typing import Collection, Sequence

from .types import ExecutionStats, HookResult, TaskResult


def compute_stats(results: Sequence[TaskResult], wall_time_s: float) -> ExecutionStats:
    total = len(results)
    successful = sum(1 for result in results if result.success)
    cpu_time_s = sum(result.duration_s for result in results)

    return ExecutionStats(
        total_tasks=total,
        successful_tasks=successful,
        failed_tasks=total - successful,
        wall_time_s=wall_time_s,
        cpu_time_s=cpu_time_s,
        parallel_savings_s=max(0.0, cpu_time_s - wall_time_s),
    )


def build_hook_result(
    hook: str,
    results: Sequence[TaskResult],
    wall_time_s: float,
    allowed_failures: Collection[str] = (),
    skipped_reason: str | None = None,
) -> HookResult:
    """Fold task results, kept in completion order, into the hook result.

    Tasks that were never dispatched are simply absent and do not count
    against success. Every collected result does, including the failures of
    tasks named in ``allowed_failures``; those names only label the output.
    """
    return HookResult(
        hook=hook,
        results=tuple(results),
        total_duration_s=wall_time_s,
        success=all(result.success for result in results),
        stats=compute_stats(results, wall_time_s),
        allowed_failures=frozenset(allowed_failures),
        skipped_reason=skipped_reason,
    )


def format_duration(seconds: float) -> str:
    ms = int(seconds * 1000)
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60_000:
        return f"{ms / 1000:.2f}s"
    return f"{ms // 60_000}m {(ms % 60_000) // 1000}s"
