"""
Schedule events and the publish/subscribe bus.

The schedule manager publishes one Event per state transition (or failed
attempt). Listeners are attached explicitly and receive events synchronously,
in attachment order, on the publishing thread.

Listener contract:
- name: short label used in log lines
- is_interested_in(kind): skip events the listener does not care about
- on_event(event): handle one event

A listener that raises is logged and skipped; the publisher never sees the
error and the remaining listeners still run.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, runtime_checkable

from astroschedule.model import utcnow

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    TASK_ADDED = "TASK_ADDED"
    TASK_REMOVED = "TASK_REMOVED"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_COMPLETED = "TASK_COMPLETED"
    TASK_CONFLICT = "TASK_CONFLICT"
    TASK_ADD_FAILED = "TASK_ADD_FAILED"
    TASK_UPDATE_FAILED = "TASK_UPDATE_FAILED"
    TASK_VALIDATION_FAILED = "TASK_VALIDATION_FAILED"
    SCHEDULE_CLEARED = "SCHEDULE_CLEARED"
    SCHEDULE_IMPORTED = "SCHEDULE_IMPORTED"
    SCHEDULE_EXPORTED = "SCHEDULE_EXPORTED"

    def __str__(self) -> str:
        return self.value


FAILURE_KINDS = frozenset(
    {
        EventKind.TASK_CONFLICT,
        EventKind.TASK_ADD_FAILED,
        EventKind.TASK_UPDATE_FAILED,
        EventKind.TASK_VALIDATION_FAILED,
    }
)


@dataclass(frozen=True)
class Event:
    kind: EventKind
    message: str
    timestamp: datetime = field(default_factory=utcnow)
    context: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    @property
    def is_error(self) -> bool:
        return self.kind in FAILURE_KINDS

    @classmethod
    def create(cls, kind: EventKind, message: str, **context: Any) -> Event:
        return cls(kind=kind, message=message, context=context)

    @classmethod
    def from_error(cls, kind: EventKind, error: BaseException, message: Optional[str] = None, **context: Any) -> Event:
        context.setdefault("error_name", type(error).__name__)
        context.setdefault("error", str(error))
        return cls(kind=kind, message=message or str(error), context=context)


@runtime_checkable
class ScheduleListener(Protocol):
    name: str

    def is_interested_in(self, kind: EventKind) -> bool: ...

    def on_event(self, event: Event) -> None: ...


class BaseListener:
    """
    Convenience base: interest is a fixed set of kinds (None = everything).
    """

    name = "listener"

    def __init__(self, interested_in: Optional[Iterable[EventKind]] = None) -> None:
        self.interested_events: Optional[frozenset[EventKind]] = (
            frozenset(interested_in) if interested_in is not None else None
        )

    def is_interested_in(self, kind: EventKind) -> bool:
        return self.interested_events is None or kind in self.interested_events

    def on_event(self, event: Event) -> None:  # pragma: no cover - overridden
        raise NotImplementedError


class CallbackListener(BaseListener):
    """Wrap a plain callable as a listener."""

    def __init__(
        self,
        callback: Callable[[Event], None],
        interested_in: Optional[Iterable[EventKind]] = None,
        name: Optional[str] = None,
    ) -> None:
        super().__init__(interested_in)
        self._callback = callback
        self.name = name or getattr(callback, "__name__", "callback")

    def on_event(self, event: Event) -> None:
        self._callback(event)


class EventBus:
    def __init__(self) -> None:
        self._listeners: list[ScheduleListener] = []
        self._lock = threading.Lock()

    def attach(self, listener: ScheduleListener) -> bool:
        """
        Register a listener. Returns False if it is already attached.
        """
        with self._lock:
            if any(existing is listener for existing in self._listeners):
                logger.warning("Listener already attached: %s", _name_of(listener))
                return False
            self._listeners.append(listener)
            total = len(self._listeners)
        logger.info("Listener attached: %s (total=%d)", _name_of(listener), total)
        return True

    def detach(self, listener: ScheduleListener) -> bool:
        with self._lock:
            for i, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[i]
                    break
            else:
                return False
            total = len(self._listeners)
        logger.info("Listener detached: %s (total=%d)", _name_of(listener), total)
        return True

    def detach_all(self) -> None:
        with self._lock:
            self._listeners.clear()
        logger.info("All listeners detached")

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def publish(self, event: Event) -> None:
        """
        Deliver `event` to every interested listener in attachment order.
        """
        with self._lock:
            listeners = list(self._listeners)

        logger.debug("Publishing %s to %d listeners", event.kind, len(listeners))
        for listener in listeners:
            try:
                if not listener.is_interested_in(event.kind):
                    continue
                listener.on_event(event)
            except Exception:
                logger.exception("Listener %s failed while handling %s", _name_of(listener), event.kind)


def _name_of(listener: Any) -> str:
    return str(getattr(listener, "name", None) or type(listener).__name__)
