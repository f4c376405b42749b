"""Runner-specific error types."""

from __future__ import annotations

from typing import Sequence

from typh_core.errors import ConfigurationError, TyphonError


class RunnerError(TyphonError):
    """Base type for failures while unpacking or running an archive."""


class InvalidArchiveError(ConfigurationError):
    """Raised when a file is not a readable ``.typh`` archive with a manifest."""


class ExtractionError(RunnerError):
    """Raised when the archive payload cannot be extracted into the cache."""


class InstallError(RunnerError):
    """Raised when the package manager could not be spawned or exited non-zero."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        detail = stderr.strip()
        super().__init__(f"{message}\n{detail}" if detail else message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class ExecutionError(RunnerError):
    """Raised when the package entry file exits with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        super().__init__(f"command exited with status {returncode}: {' '.join(command)}")
        self.command = tuple(command)
        self.returncode = returncode
