from dataclasses import dataclass, field

GIT_HOOKS = (
    "pre-commit",
    "prepare-commit-msg",
    "commit-msg",
    "post-commit",
    "pre-push",
    "pre-rebase",
    "post-checkout",
    "post-merge",
    "pre-auto-gc",
)


@dataclass
class TaskConfig:
    name: str
    run: str
    glob: str | None = None
    staged: bool = True
    cwd: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    allow_failure: bool = False
    condition: str | None = None
    depends_on: list[str] = field(default_factory=list)


@dataclass
class Settings:
    parallel: bool = True
    # 0 means one worker per available CPU
    max_parallel: int = 0
    fail_fast: bool = True
    skip_ci: bool = False


@dataclass
class HookConfig:
    name: str
    tasks: list[TaskConfig]
    parallel: bool | None = None
    fail_fast: bool | None = None
    skip_ci: bool | None = None

    def __iter__(self):
        yield from self.tasks

    def __len__(self):
        return len(self.tasks)

    def has_task(self, name: str) -> bool:
        return any(task.name == name for task in self.tasks)

    def get_task(self, name: str) -> TaskConfig:
        for task in self.tasks:
            if task.name == name:
                return task
        raise KeyError(name)

    def task_names(self) -> list[str]:
        return [task.name for task in self.tasks]


@dataclass
class ProjectConfig:
    hooks: dict[str, HookConfig]
    settings: Settings = field(default_factory=Settings)
    version: str = "1"

    def __len__(self):
        return len(self.hooks)

    def has_hook(self, name: str) -> bool:
        return name in self.hooks

    def get_hook(self, name: str) -> HookConfig:
        if not self.has_hook(name):
            raise KeyError(f"Hook '{name}' not found in configuration")

        return self.hooks[name]

    def hook_names(self) -> list[str]:
        return sorted(self.hooks.keys())


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
