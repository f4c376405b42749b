"""Archive loader/executor."""

from .errors import (
    ExecutionError,
    ExtractionError,
    InstallError,
    InvalidArchiveError,
    RunnerError,
)
from .install import dependency_specs, install_argv, install_command
from .runner import (
    ProcessLauncher,
    ProcessResult,
    Runner,
    RunResult,
    read_manifest,
    spawn_process,
)

__all__ = [
    "ExecutionError",
    "ExtractionError",
    "InstallError",
    "InvalidArchiveError",
    "ProcessLauncher",
    "ProcessResult",
    "RunResult",
    "Runner",
    "RunnerError",
    "dependency_specs",
    "install_argv",
    "install_command",
    "read_manifest",
    "spawn_process",
]
