from __future__ import annotations

import logging
import os
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from hookforge.config.types import HookConfig, TaskConfig
from hookforge.graph.dag import TaskGraph

from .ci import is_ci
from .conditions import evaluate_condition
from .files import select_files
from .runner import run_task
from .stats import build_hook_result
from .types import ExecutionContext, HookResult, TaskResult

logger = logging.getLogger(__name__)


class Executor:
    def __init__(self, context: ExecutionContext):
        self.context = context

    def max_workers(self, parallel: bool) -> int:
        if not parallel:
            return 1
        if self.context.settings.max_parallel > 0:
            return self.context.settings.max_parallel
        # process_cpu_count honours CPU affinity (Python 3.13+)
        cpu_count = getattr(os, "process_cpu_count", os.cpu_count)
        return cpu_count() or 4

    def run_hook(
        self,
        hook: HookConfig,
        *,
        parallel: bool | None = None,
        fail_fast: bool | None = None,
    ) -> HookResult:
        """Run every eligible task of the hook and collect their results.

        Explicit ``parallel``/``fail_fast`` arguments win over the hook
        overrides, which win over the global settings.
        """
        start = time.monotonic()
        settings = self.context.settings

        parallel = _first(parallel, hook.parallel, settings.parallel)
        fail_fast = _first(fail_fast, hook.fail_fast, settings.fail_fast)
        skip_ci = _first(hook.skip_ci, settings.skip_ci)

        if skip_ci and is_ci(self.context.environ):
            logger.info("Skipping %s hook in CI environment", hook.name)
            return build_hook_result(
                hook.name, [], time.monotonic() - start, skipped_reason="ci"
            )

        # Raises CycleError before anything runs
        order = TaskGraph.from_hook(hook).topo_order()

        eligible = []
        for task in order:
            if evaluate_condition(task.condition, self.context.branch, self.context.environ):
                eligible.append(task)
            else:
                logger.debug("Condition '%s' is false, excluding %s", task.condition, task.name)

        results = self._schedule(eligible, self.max_workers(parallel), fail_fast)
        allowed = {task.name for task in eligible if task.allow_failure}
        return build_hook_result(hook.name, results, time.monotonic() - start, allowed)

    def _schedule(
        self,
        order: list[TaskConfig],
        max_workers: int,
        fail_fast: bool,
    ) -> list[TaskResult]:
        # Only the calling thread touches the bookkeeping below; workers just
        # run the subprocess and hand back a TaskResult through their future.
        names = {task.name for task in order}
        pending = list(order)
        running: dict[Future[TaskResult], TaskConfig] = {}
        completed: set[str] = set()
        results: list[TaskResult] = []
        failed = False

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hookforge") as pool:
            while pending or running:
                if not failed:
                    self._admit(pool, pending, running, completed, names, max_workers)

                if not running:
                    if pending and not failed:
                        raise AssertionError("Unreachable: no admissible task in a topological order")
                    break

                done, _ = wait(running, return_when=FIRST_COMPLETED)
                for future in done:
                    task = running.pop(future)
                    result = future.result()
                    results.append(result)
                    completed.add(task.name)

                    if result.success:
                        logger.info("%s passed in %.3fs", task.name, result.duration_s)
                    elif task.allow_failure:
                        logger.info("%s failed with exit code %d (allowed)", task.name, result.exit_code)
                    else:
                        logger.info("%s failed with exit code %d", task.name, result.exit_code)
                        if fail_fast and not failed:
                            failed = True
                            if pending:
                                logger.warning(
                                    "Fail fast: not starting %s",
                                    ", ".join(t.name for t in pending),
                                )

        return results

    def _admit(
        self,
        pool: ThreadPoolExecutor,
        pending: list[TaskConfig],
        running: dict[Future[TaskResult], TaskConfig],
        completed: set[str],
        names: set[str],
        max_workers: int,
    ) -> None:
        index = 0
        while index < len(pending) and len(running) < max_workers:
            task = pending[index]

            # Dependencies outside this run (unknown or excluded by condition) are satisfied
            if any(dep in names and dep not in completed for dep in task.depends_on):
                index += 1
                continue

            pending.pop(index)

            files: list[str] = []
            if task.glob is not None:
                files = select_files(task.glob, self.context.files)
                if not files:
                    logger.debug("No files match '%s', skipping %s", task.glob, task.name)
                    completed.add(task.name)
                    # A skip can unblock tasks already passed over
                    index = 0
                    continue

            logger.debug("Starting %s", task.name)
            future = pool.submit(run_task, task, files, self.context)
            running[future] = task


def _first(*values: bool | None) -> bool:
    for value in values:
        if value is not None:
            return value
    raise AssertionError("Unreachable")
