"""Pipeline events and the synchronous bus that delivers them."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, DefaultDict

if TYPE_CHECKING:
    from typh_core.packager import PackagerOptions
    from typh_core.project import Project

__all__ = [
    "BuildEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "EventResult",
    "RunEvent",
    "STANDARD_EVENTS",
    "TestEvent",
]

BUILD_EVENT = "build"
RUN_EVENT = "run"
TEST_EVENT = "test"
STANDARD_EVENTS = (BUILD_EVENT, RUN_EVENT, TEST_EVENT)


class EventResult(Enum):
    """What a handler wants the pipeline to do next."""

    CONTINUE = "continue"
    CANCEL = "cancel"


@dataclass(frozen=True)
class BuildEvent:
    project: "Project"
    options: "PackagerOptions"


@dataclass(frozen=True)
class RunEvent:
    file: Path
    performance: bool = False


@dataclass(frozen=True)
class TestEvent:
    """Synthetic event dispatched by plugin tests; carries nothing."""

    __test__ = False


@dataclass(frozen=True)
class Event:
    """Lightweight event descriptor."""

    name: str
    payload: Any = None


EventHandler = Callable[[Event], "EventResult | None"]


@dataclass(frozen=True)
class _EventSubscription:
    priority: int
    order: int
    handler: EventHandler


class EventBus:
    """Synchronous event bus with deterministic delivery and cooperative cancel."""

    def __init__(self) -> None:
        self._handlers: DefaultDict[str, list[_EventSubscription]] = defaultdict(list)
        self._sequence: DefaultDict[str, int] = defaultdict(int)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self.on(event_name, handler)

    def on(self, event_name: str, handler: EventHandler, priority: int = 0) -> None:
        """Register a handler for `event_name` with optional priority."""
        order = self._sequence[event_name]
        self._sequence[event_name] = order + 1
        self._handlers[event_name].append(
            _EventSubscription(priority=priority, order=order, handler=handler)
        )

    def emit(self, event_name: str, payload: Any = None) -> bool:
        """Deliver the event; return ``True`` once a handler asks to cancel."""
        event = Event(event_name, payload)
        subscriptions = sorted(
            self._handlers.get(event_name, ()),
            key=lambda item: (-item.priority, item.order),
        )
        for subscription in subscriptions:
            if subscription.handler(event) is EventResult.CANCEL:
                return True
        return False
