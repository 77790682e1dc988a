import os
from typing import Mapping

CI_VARIABLES = (
    "CI",
    "CONTINUOUS_INTEGRATION",
    "GITHUB_ACTIONS",
    "GITLAB_CI",
    "CIRCLECI",
    "TRAVIS",
    "JENKINS_URL",
    "BUILDKITE",
    "DRONE",
    "AZURE_PIPELINES",
    "TEAMCITY_VERSION",
)


def is_ci(environ: Mapping[str, str] | None = None) -> bool:
    if environ is None:
        environ = os.environ
    return any(name in environ for name in CI_VARIABLES)
