import json
import logging
import re
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from hookforge.executor.conditions import branch_regex, is_known_condition

from .types import (
    GIT_HOOKS,
    ConfigError,
    HookConfig,
    ProjectConfig,
    Settings,
    TaskConfig,
    UnsupportedConfigFormatError,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (
    "hookforge.toml",
    ".hookforge.toml",
    "hookforge.yaml",
    ".hookforge.yaml",
    "hookforge.yml",
    "hookforge.json",
)


def find_config_file(start: str | Path | None = None) -> Path | None:
    current = Path(start or Path.cwd()).expanduser().resolve()

    for directory in (current, *current.parents):
        for name in CONFIG_FILE_NAMES:
            candidate = directory / name
            if candidate.is_file():
                return candidate

    return None


def load_project(path: str | Path, *, report_warnings: bool = True) -> ProjectConfig:
    """Load and check a config file.

    Non-fatal problems found by ``validate_project`` are logged unless
    ``report_warnings`` is false (callers that print them themselves).
    """
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    project = _build_project_config(raw_file)

    if report_warnings:
        for warning in validate_project(project):
            logger.warning("%s: %s", pure_path.name, warning)

    return project


def validate_project(project: ProjectConfig) -> list[str]:
    """Non-fatal problems: the engine tolerates them, but they are usually typos."""
    warnings: list[str] = []

    for hook_name in project.hook_names():
        hook = project.get_hook(hook_name)

        if hook_name not in GIT_HOOKS:
            warnings.append(f"'{hook_name}' is not a standard git hook")

        if len(hook) == 0:
            warnings.append(f"Hook '{hook_name}' has no tasks defined")

        names = set(hook.task_names())
        for task in hook:
            for dep in task.depends_on:
                if dep not in names:
                    warnings.append(
                        f"{hook_name}.{task.name}: dependency '{dep}' is not defined in this hook and will be ignored"
                    )

            if task.condition is not None and not is_known_condition(task.condition):
                warnings.append(
                    f"{hook_name}.{task.name}: unknown condition '{task.condition}', the task will always run"
                )

    return warnings


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    match fmt:
        case "yaml":
            return _parse_yaml(path)
        case "toml":
            return _parse_toml(path)
        case "json":
            return _parse_json(path)
        case _:
            raise AssertionError("Unreachable")


def _parse_yaml(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path}: invalid YAML") from exc

    # An empty file is a valid (empty) configuration
    if raw_file is None:
        return {}

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: YAML parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _parse_toml(path: Path) -> Mapping[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: invalid TOML") from exc


def _parse_json(path: Path) -> Mapping[str, Any]:
    try:
        raw_file = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: JSON parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_project_config(raw: Mapping[str, Any]) -> ProjectConfig:
    keys = {"version", "settings", "hooks"}
    hooks = {}

    for field in raw.keys():
        if field not in keys:
            raise ConfigError(f"Can't process top-level field: {field}")

    version = raw.get("version", "1")
    if not isinstance(version, (str, int)) or isinstance(version, bool):
        raise ConfigError(f"'version' must be a string, got {type(version)}")

    settings = _build_settings(raw.get("settings", {}))

    raw_hooks = raw.get("hooks", {})
    if not isinstance(raw_hooks, Mapping):
        raise ConfigError(f"'hooks' must be a mapping, got {type(raw_hooks)}")

    for hook_name, fields in raw_hooks.items():
        if not isinstance(hook_name, str) or len(hook_name.strip()) < 1:
            raise ConfigError(f"Hook name must be a non empty string, got {hook_name!r}")

        if not isinstance(fields, Mapping):
            raise ConfigError(f"{hook_name} must be a mapping")

        hook_name_norm = hook_name.strip()
        hooks[hook_name_norm] = _build_hook_config(hook_name_norm, fields)

    return ProjectConfig(hooks=hooks, settings=settings, version=str(version))


def _build_settings(fields: Any) -> Settings:
    keys = {"parallel", "max_parallel", "fail_fast", "skip_ci"}
    settings = Settings()

    if not isinstance(fields, Mapping):
        raise ConfigError(f"'settings' must be a mapping, got {type(fields)}")

    for field, value in fields.items():
        if field not in keys:
            raise ConfigError(f"settings: Can't process: {field}")

        if field == "max_parallel":
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError("settings: max_parallel should be an integer")
            if value < 0:
                raise ConfigError("settings: max_parallel can't be negative (0 means auto)")
        elif not isinstance(value, bool):
            raise ConfigError(f"settings: {field} should be true or false")

        setattr(settings, field, value)

    return settings


def _build_hook_config(hook_name: str, fields: Mapping[str, Any]) -> HookConfig:
    keys = {"tasks", "parallel", "fail_fast", "skip_ci"}
    tasks: list[TaskConfig] = []
    seen: set[str] = set()
    overrides: dict[str, bool] = {}

    for field, value in fields.items():
        if field not in keys:
            raise ConfigError(f"{hook_name}: Can't process: {field}")

        if field != "tasks":
            if not isinstance(value, bool):
                raise ConfigError(f"{hook_name}: {field} should be true or false")
            overrides[field] = value

    raw_tasks = fields.get("tasks", [])
    if not isinstance(raw_tasks, list):
        raise ConfigError(f"{hook_name}: 'tasks' should be a list")

    for index, item in enumerate(raw_tasks):
        location = f"{hook_name}.tasks[{index}]"

        if not isinstance(item, Mapping):
            raise ConfigError(f"{location} must be a mapping")

        task = _build_task_config(location, item)

        if task.name in seen:
            raise ConfigError(
                f"{location}: Duplicate task name '{task.name}', names must be unique within a hook"
            )

        seen.add(task.name)
        tasks.append(task)

    return HookConfig(name=hook_name, tasks=tasks, **overrides)


def _build_task_config(location: str, fields: Mapping[str, Any]) -> TaskConfig:
    keys = {
        "name",
        "run",
        "glob",
        "staged",
        "cwd",
        "env",
        "allow_failure",
        "if",
        "depends_on",
    }
    depends_on = []
    seen = set()
    env = {}

    for field in fields.keys():
        if field not in keys:
            raise ConfigError(f"{location}: Can't process: {field}")

    name = _required_string(location, fields, "name")
    location = f"{location} ({name})"
    run = _required_string(location, fields, "run")

    glob = _optional_string(location, fields, "glob")
    cwd = _optional_string(location, fields, "cwd")
    condition = _optional_string(location, fields, "if")

    if condition is not None:
        pattern = branch_regex(condition)
        if pattern is not None:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ConfigError(
                    f"{location}: Invalid regex '{pattern}' in condition"
                ) from exc

    staged = fields.get("staged", True)
    allow_failure = fields.get("allow_failure", False)
    for key, value in (("staged", staged), ("allow_failure", allow_failure)):
        if not isinstance(value, bool):
            raise ConfigError(f"{location}: {key} should be true or false")

    if "depends_on" in fields:
        if not isinstance(fields["depends_on"], list):
            raise ConfigError(f"{location}: Dependencies should be in a list.")

        for item in fields["depends_on"]:
            if not isinstance(item, str):
                raise ConfigError(
                    f"{location}: {item} should be a string in the dependency list"
                )

            dep = item.strip()

            if len(dep) < 1:
                raise ConfigError(f"{location}: A dependency is empty")

            if dep == name:
                raise ConfigError(f"{location}: A task cannot be self dependent")

            # Allows to ignore duplicates dependency
            if dep in seen:
                continue

            depends_on.append(dep)
            seen.add(dep)

    if "env" in fields:
        if not isinstance(fields["env"], Mapping):
            raise ConfigError(f"{location}: Env should be a mapping")

        for key, item in fields["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"{location}: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError(f"{location}: A key can't be empty")

            if "=" in key or "\0" in key:
                raise ConfigError(f"{location}: Invalid environment variable name {key!r}")

            if not isinstance(item, str):
                raise ConfigError(f"{location}: {item} should be a string")

            if "\0" in item:
                raise ConfigError(f"{location}: {key} contains a NUL byte")

            env[key.strip()] = item

    return TaskConfig(
        name=name,
        run=run,
        glob=glob,
        staged=staged,
        cwd=cwd,
        env=env,
        allow_failure=allow_failure,
        condition=condition,
        depends_on=depends_on,
    )


def _required_string(location: str, fields: Mapping[str, Any], key: str) -> str:
    if key not in fields:
        raise ConfigError(f"{location}: missing '{key}'")

    value = fields[key]
    if not isinstance(value, str):
        raise ConfigError(f"{location}: '{key}' should be a string")

    if len(value.strip()) < 1:
        raise ConfigError(f"{location}: '{key}' can't be empty")

    return value.strip()


def _optional_string(location: str, fields: Mapping[str, Any], key: str) -> str | None:
    if key not in fields:
        return None

    value = fields[key]
    if not isinstance(value, str):
        raise ConfigError(f"{location}: '{key}' should be a string")

    if len(value.strip()) < 1:
        raise ConfigError(f"{location}: Please provide a value for '{key}' or remove this field")

    return value.strip()
