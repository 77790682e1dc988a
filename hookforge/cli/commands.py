from __future__ import annotations

import argparse
import logging
import sys

from hookforge import repo
from hookforge.config import ConfigError, ProjectConfig, find_config_file, load_project, validate_project
from hookforge.executor import ExecutionContext, Executor, HookResult, format_duration
from hookforge.graph import GraphError, TaskGraph
from hookforge.repo import RepoError

from .args import build_parser

logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        _configure_logging(args.verbose)

        match args.command:
            case "run":
                return cmd_run(args)
            case "list":
                return cmd_list(args)
            case "graph":
                return cmd_graph(args)
            case "validate":
                return cmd_validate(args)
            case _:
                return 2

    except KeyError as exc:
        # str(KeyError) wraps the message in quotes
        print(exc.args[0] if exc.args else str(exc), file=sys.stderr)
        return 2

    except (ConfigError, GraphError, RepoError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def cmd_run(args: argparse.Namespace) -> int:
    project = _load(args)
    hook = project.get_hook(args.hook)

    if args.files is not None:
        files = list(args.files)
        try:
            branch = repo.current_branch()
        except RepoError:
            logger.debug("Not in a git repository, running without a branch")
            branch = None
    else:
        files = repo.staged_files()
        branch = repo.current_branch()

    context = ExecutionContext(
        settings=project.settings,
        files=tuple(files),
        branch=branch,
        args=tuple(args.args),
    )
    executor = Executor(context)
    hr = executor.run_hook(
        hook,
        parallel=False if args.sequential else None,
        fail_fast=False if args.no_fail_fast else None,
    )
    _print_result(hr)
    return 0 if hr.success else 1


def cmd_list(args: argparse.Namespace) -> int:
    project = _load(args)
    for hook_name in project.hook_names():
        print(hook_name)
        for task in project.get_hook(hook_name):
            glob = f" [{task.glob}]" if task.glob else ""
            print(f"  {task.name}{glob}: {task.run}")
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    project = _load(args)
    graph = TaskGraph.from_hook(project.get_hook(args.hook))
    for task in graph.topo_order():
        deps = " ".join(graph.dependencies(task.name))
        print(f"{task.name}: {deps}".rstrip())
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    project = _load(args, report_warnings=False)
    warnings = validate_project(project)
    for hook_name in project.hook_names():
        # Surfaces cycles as errors
        TaskGraph.from_hook(project.get_hook(hook_name), warn_unknown=False).topo_order()

    for warning in warnings:
        print(f"WARNING {warning}")
    if not warnings:
        print("OK")
    return 0


def _load(args: argparse.Namespace, report_warnings: bool = True) -> ProjectConfig:
    path = args.config or find_config_file()
    if path is None:
        raise ConfigError("No hookforge.toml found in this directory or any parent")
    return load_project(path, report_warnings=report_warnings)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)


def _print_result(hr: HookResult) -> None:
    if hr.skipped_reason is not None:
        print(f"SKIP {hr.hook} ({hr.skipped_reason})")
        return

    for result in hr.results:
        duration = format_duration(result.duration_s)
        if result.success:
            print(f"OK {result.name}, {duration}, exit code = {result.exit_code}")
            continue

        status = "ALLOWED" if result.name in hr.allowed_failures else "FAIL"
        print(f"{status} {result.name}, {duration}, exit code = {result.exit_code}")
        if result.stdout:
            print(result.stdout.rstrip())
        if result.stderr:
            print(result.stderr.rstrip(), file=sys.stderr)

    stats = hr.stats
    print(
        f"{stats.successful_tasks}/{stats.total_tasks} tasks passed"
        f" in {format_duration(stats.wall_time_s)}"
    )
    if stats.parallel_savings_s > 0:
        print(f"Saved {format_duration(stats.parallel_savings_s)} through parallel execution")
