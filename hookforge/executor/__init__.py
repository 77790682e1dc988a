from .conditions import evaluate_condition
from .executor import Executor
from .files import select_files
from .runner import build_command, run_task
from .stats import build_hook_result, format_duration
from .types import ExecutionContext, ExecutionStats, HookResult, TaskResult

__all__ = [
    "Executor",
    "ExecutionContext",
    "ExecutionStats",
    "HookResult",
    "TaskResult",
    "build_command",
    "build_hook_result",
    "evaluate_condition",
    "format_duration",
    "run_task",
    "select_files",
]
