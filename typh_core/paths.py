"""Platform-independent helpers for Typhon paths."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_data_dir

_DEFAULT_APP_NAME = "typhon"
_DEFAULT_APP_AUTHOR = "Typhon"


@dataclass(frozen=True)
class UserDirs:
    """Platform location of the default Typhon home, overridable for tests."""

    app_name: str = _DEFAULT_APP_NAME
    app_author: str = _DEFAULT_APP_AUTHOR
    data_dir_override: Path | None = None

    def data_dir(self) -> Path:
        if self.data_dir_override:
            return self.data_dir_override
        return Path(user_data_dir(self.app_name, appauthor=self.app_author))
