from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hookforge")

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config file (default: search upwards for hookforge.toml/.yaml/.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scheduling decisions",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # run
    run = subparsers.add_parser("run", help="Run a hook")
    run.add_argument("hook", help="Hook name, e.g. pre-commit")
    run.add_argument(
        "-f",
        "--file",
        dest="files",
        action="append",
        default=None,
        help="Run against this file instead of the staged ones (repeatable)",
    )
    run.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Keep starting tasks after a failure",
    )
    run.add_argument(
        "--sequential",
        action="store_true",
        help="Run one task at a time",
    )
    run.add_argument(
        "args",
        nargs="*",
        help="Arguments passed by git to the hook, available as $1/{1}... (use -- before dashed values)",
    )

    # list
    subparsers.add_parser("list", help="List hooks and their tasks")

    # graph
    graph = subparsers.add_parser("graph", help="Show task execution order of a hook")
    graph.add_argument("hook", help="Hook name")

    # validate
    subparsers.add_parser("validate", help="Check the config file")

    return parser
