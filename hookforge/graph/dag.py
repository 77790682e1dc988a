from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from hookforge.config.types import HookConfig, TaskConfig

from .types import CycleError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskGraph:
    tasks: dict[str, TaskConfig]
    _deps: dict[str, tuple[str, ...]]
    _dependents: dict[str, tuple[str, ...]]

    @classmethod
    def from_hook(cls, hook: HookConfig, *, warn_unknown: bool = True) -> TaskGraph:
        return cls.from_tasks(hook.tasks, hook.name, warn_unknown=warn_unknown)

    @classmethod
    def from_tasks(
        cls,
        tasks: list[TaskConfig],
        hook_name: str = "",
        *,
        warn_unknown: bool = True,
    ) -> TaskGraph:
        index = {task.name: task for task in tasks}
        deps: dict[str, tuple[str, ...]] = {}
        dependents: dict[str, list[str]] = {name: [] for name in index}

        for task in tasks:
            present = []
            for dep in task.depends_on:
                # Unknown names count as already satisfied
                if dep not in index:
                    if warn_unknown:
                        logger.warning(
                            "%s: task '%s' depends on unknown task '%s', ignoring",
                            hook_name or "hook",
                            task.name,
                            dep,
                        )
                    continue
                present.append(dep)
                dependents[dep].append(task.name)
            deps[task.name] = tuple(present)

        return cls(
            index,
            deps,
            {name: tuple(names) for name, names in dependents.items()},
        )

    def __len__(self) -> int:
        return len(self.tasks)

    def dependencies(self, name: str) -> tuple[str, ...]:
        return self._deps[name]

    def dependents(self, name: str) -> tuple[str, ...]:
        return self._dependents[name]

    def topo_order(self) -> list[TaskConfig]:
        in_degree = {name: len(deps) for name, deps in self._deps.items()}
        ready = deque(name for name, degree in in_degree.items() if degree == 0)
        out: list[TaskConfig] = []

        while ready:
            name = ready.popleft()
            out.append(self.tasks[name])
            for dependent in self._dependents[name]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready.append(dependent)

        if len(out) < len(self.tasks):
            stuck = [name for name, degree in in_degree.items() if degree > 0]
            raise CycleError(stuck)

        return out
