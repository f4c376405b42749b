"""Classpath-style entry point conversion (``com.example.Main`` → ``com/example/Main``)."""

from __future__ import annotations

import os

SCRIPT_EXTENSIONS = frozenset({"js", "mjs", "cjs", "ts", "json"})


def to_module_path(main: str, *, posix: bool = False) -> str:
    """Rewrite the directory portion of a dotted entry point into a path.

    Only the segments before the file name are joined with the path
    separator; the file name itself, including a trailing script extension,
    is kept verbatim. A leading ``./`` is dropped.
    """

    while main.startswith("./"):
        main = main[2:]
    if not main:
        return main
    parts = main.split(".")
    if len(parts) <= 1:
        return main
    if len(parts) > 2 and parts[-1] in SCRIPT_EXTENSIONS:
        parts = [*parts[:-2], f"{parts[-2]}.{parts[-1]}"]
    elif len(parts) == 2 and parts[-1] in SCRIPT_EXTENSIONS:
        return main
    separator = "/" if posix else os.sep
    return separator.join(parts)
