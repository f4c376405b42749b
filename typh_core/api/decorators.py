"""Decorator that marks command classes with registry metadata."""

from __future__ import annotations

from typing import Any, Callable, Type

from .abc import TyphAbstractCommand

_Candidate = Type[Any]


def _determine_group(cls: type, override: str | None) -> str:
    if override:
        return override
    module = getattr(cls, "__module__", "")
    return module.split(".")[0] or "typh"


def typhcommand(
    cls: _Candidate | None = None,
    *,
    name: str | None = None,
    group: str | None = None,
) -> Callable[[_Candidate], _Candidate] | _Candidate:
    def wrap(target: _Candidate) -> _Candidate:
        if not isinstance(target, type) or not issubclass(target, TyphAbstractCommand):
            raise TypeError(f"{target!r} must subclass TyphAbstractCommand to be registered.")
        metadata = {
            "kind": "command",
            "name": name or target.__name__,
            "group": _determine_group(target, group),
        }
        metadata["qualified_name"] = f"{metadata['group']}:{metadata['name']}"
        setattr(target, "__typh_feature__", metadata)
        return target

    if cls is None:
        return wrap
    return wrap(cls)
