"""Assistant launch public surface."""

from bedlaunch.launcher.coordinator import (
    CONFIG_ERROR_EXIT_CODE,
    ChildExited,
    LaunchCoordinator,
    LaunchFailed,
    LaunchFailureKind,
    LaunchOutcome,
    LaunchRequest,
    invalid_models_message,
)
from bedlaunch.launcher.environment import (
    API_ENV_VARS,
    BEDROCK_ENV_VARS,
    build_launch_environment,
)
from bedlaunch.launcher.factory import (
    FetcherFactory,
    LauncherContext,
    LauncherFactory,
    resolve_api_key,
)
from bedlaunch.launcher.overrides import LaunchOverrides, apply_overrides
from bedlaunch.launcher.process import (
    ExecutableNotFoundError,
    ProcessHandle,
    ProcessRunner,
    SubprocessRunner,
    find_executable,
)

__all__ = [
    "API_ENV_VARS",
    "BEDROCK_ENV_VARS",
    "CONFIG_ERROR_EXIT_CODE",
    "ChildExited",
    "ExecutableNotFoundError",
    "FetcherFactory",
    "LaunchCoordinator",
    "LaunchFailed",
    "LaunchFailureKind",
    "LaunchOutcome",
    "LaunchOverrides",
    "LaunchRequest",
    "LauncherContext",
    "LauncherFactory",
    "ProcessHandle",
    "ProcessRunner",
    "SubprocessRunner",
    "apply_overrides",
    "build_launch_environment",
    "find_executable",
    "invalid_models_message",
    "resolve_api_key",
]
