from .loader import find_config_file, load_project, validate_project
from .types import (
    ConfigError,
    HookConfig,
    ProjectConfig,
    Settings,
    TaskConfig,
    UnsupportedConfigFormatError,
)

__all__ = [
    "find_config_file",
    "load_project",
    "validate_project",
    "ProjectConfig",
    "HookConfig",
    "TaskConfig",
    "Settings",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
