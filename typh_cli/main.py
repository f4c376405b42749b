"""Typhon CLI entrypoint backed by the command registry."""

from __future__ import annotations

import argparse
import inspect
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, Sequence

from typh_core.app import TyphonApp
from typh_core.errors import TyphonError
from typh_core.registry import (
    AmbiguousCommandError,
    CommandEntry,
    CommandRegistry,
    UnknownCommandError,
)
from typh_core.runner import ExecutionError, ProcessLauncher

CLI_VERSION = "0.1.0"
LOG_LEVEL_ENV = "TYPHON_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


def main(
    argv: Sequence[str] | None = None,
    *,
    home: Path | str | None = None,
    project_dir: Path | str | None = None,
    launcher: ProcessLauncher | None = None,
) -> int:
    """Resolve and run a Typhon command."""

    tokens = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        options, tokens = _split_global_options(tokens)
    except ValueError as exc:
        print(f"[typh] {exc}")
        return 2
    _configure_logging(options.get("log_level"))
    home = options.get("home") or home

    if "--version" in tokens[:1]:
        print(f"typh v{CLI_VERSION}")
        return 0

    project_root = Path(project_dir) if project_dir is not None else Path.cwd()
    try:
        app = TyphonApp(home=home, launcher=launcher)
        app.bootstrap(project_root)
    except (TyphonError, OSError) as exc:
        print(f"[typh] error: {exc}")
        return 1

    registry = app.commands
    if not tokens or tokens[0] in ("-h", "--help"):
        return _print_overview(registry)

    try:
        spec, command_args = _extract_command_spec(tokens, registry)
        entry = registry.lookup(spec)
    except UnknownCommandError as exc:
        print(str(exc))
        return 1
    except AmbiguousCommandError as exc:
        candidates = ", ".join(exc.candidates)
        print(f"Command is ambiguous ({candidates}); use group:name to disambiguate.")
        return 1

    parser = argparse.ArgumentParser(
        prog=f"typh {registry.label_for(entry)}",
        description=_command_description(entry),
    )
    entry.command.configure(parser)
    try:
        parsed_args = parser.parse_args(command_args)
    except SystemExit as exc:
        return exc.code or 0

    command = entry.command(app)
    try:
        result = command.run(parsed_args)
    except ExecutionError as exc:
        logger.debug("command %s failed", entry.qualified_name, exc_info=True)
        print(f"[typh:{entry.name}] error: {exc}")
        return exc.returncode
    except (TyphonError, OSError) as exc:
        logger.debug("command %s failed", entry.qualified_name, exc_info=True)
        print(f"[typh:{entry.name}] error: {exc}")
        return 1
    return to_int(result)


def run() -> int:
    return main()


def _split_global_options(tokens: list[str]) -> tuple[dict[str, str], list[str]]:
    """Consume leading ``--log-level`` / ``--home`` options placed before the command."""

    options: dict[str, str] = {}
    remaining = list(tokens)
    while remaining and remaining[0].split("=", 1)[0] in ("--log-level", "--home"):
        flag = remaining.pop(0)
        if "=" in flag:
            flag, value = flag.split("=", 1)
        elif remaining:
            value = remaining.pop(0)
        else:
            raise ValueError(f"{flag} expects a value")
        options[flag.lstrip("-").replace("-", "_")] = value
    return options, remaining


def _configure_logging(level: str | None) -> None:
    name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_overview(registry: CommandRegistry) -> int:
    print("Usage: typh [--log-level LEVEL] [--home DIR] <command> [args...]\n")
    entries = registry.entries()
    cores = [entry for entry in entries if entry.builtin]
    plugins = [entry for entry in entries if not entry.builtin]
    _render_section("Core commands", cores, registry)
    if plugins:
        print()
        _render_section("Plugin commands", plugins, registry)
    print("\nUse group:name to disambiguate commands when needed.")
    return 0


def _render_section(title: str, entries: Iterable[CommandEntry], registry: CommandRegistry) -> None:
    print(title + ":")
    for entry in entries:
        lines = _command_description(entry).splitlines()
        short = lines[0] if lines else ""
        print(f"  {registry.label_for(entry):<20} {short}")


def _command_description(entry: CommandEntry) -> str:
    return (inspect.getdoc(entry.command) or "").strip()


def _extract_command_spec(args: Sequence[str], registry: CommandRegistry) -> tuple[str, list[str]]:
    """Accept ``group:name``, ``group name`` or a bare ``name`` as the command token."""

    first, *rest = args
    if rest and ":" not in first and f"{first}:{rest[0]}" in registry:
        return f"{first}:{rest[0]}", list(rest[1:])
    return first, list(rest)


def to_int(result: int | None) -> int:
    return 0 if result is None else result
