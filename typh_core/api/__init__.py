"""Public helpers for writing Typhon commands."""

from .abc import TyphAbstractCommand
from .decorators import typhcommand

__all__ = ["TyphAbstractCommand", "typhcommand"]
