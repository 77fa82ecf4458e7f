"""
Task change events.

Published after a schedule change is committed so rule-based consumers
(QA alerts, notifications) can react without the engine knowing about them.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskDatesChanged:
    """A task's dates moved."""

    task_id: str
    old_start: date
    old_end: date
    new_start: date
    new_end: date

    @property
    def shift_days(self) -> int:
        return (self.new_start - self.old_start).days


Listener = Callable[[TaskDatesChanged], None]


class EventBus:
    """Synchronous publish/subscribe for task change events."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def publish(self, event: TaskDatesChanged) -> int:
        """
        Deliver an event to every listener.

        A failing listener is logged and skipped. Returns the number of
        listeners that handled the event.
        """
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(event)
                delivered += 1
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {event.task_id}")
        return delivered

    def __len__(self) -> int:
        return len(self._listeners)
