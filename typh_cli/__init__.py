"""Command line entry point for Typhon."""

from .main import main

__all__ = ["main"]
