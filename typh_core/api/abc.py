"""Abstract base class for Typhon commands."""

from __future__ import annotations

from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typh_core.app import TyphonApp


class TyphAbstractCommand(ABC):
    """Base interface for commands; instances receive the owning application."""

    def __init__(self, app: "TyphonApp") -> None:
        self.app = app

    @classmethod
    @abstractmethod
    def configure(cls, parser: ArgumentParser) -> None:
        """Let the command configure CLI arguments."""

    @abstractmethod
    def run(self, argv: Namespace) -> int:
        """Execute the command with parsed arguments."""
