"""
Gantt Scheduler.

Runs one schedule change end to end: propagate the move, apply the result to
the in-memory task store, refresh critical flags, persist through the task
store connector and announce the change.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from schemas.tasks import DateUpdate

from .connectors.base_connector import BaseTaskStore, BatchUpdateResult
from .core.critical_path import CriticalPathAnalyzer, apply_critical_flags
from .core.models import DateRange
from .core.network import TaskNetwork
from .core.propagator import SchedulePropagator
from .events import EventBus, TaskDatesChanged

logger = logging.getLogger(__name__)


class SchedulerBusyError(RuntimeError):
    """Raised when a change is requested while another is still committing."""


@dataclass
class ScheduleUpdate:
    """Outcome of one committed schedule change."""

    moved_task_id: str
    changes: dict[str, DateRange]
    previous: dict[str, DateRange]
    critical_task_ids: set[str] = field(default_factory=set)
    unresolved: set[str] = field(default_factory=set)
    failed: dict[str, str] = field(default_factory=dict)  # task_id -> persistence error

    def is_empty(self) -> bool:
        return not self.changes

    @property
    def cascaded(self) -> bool:
        """True if tasks other than the moved one were rescheduled."""
        return any(tid != self.moved_task_id for tid in self.changes)


class GanttScheduler:
    """
    Owns the task network of one project and serializes changes to it.

    Changes run synchronously; while one is committing, further requests
    raise SchedulerBusyError.
    """

    def __init__(self, network: TaskNetwork, store: Optional[BaseTaskStore] = None,
                 events: Optional[EventBus] = None):
        self.network = network
        self.store = store
        self.events = events if events is not None else EventBus()
        self.analyzer = CriticalPathAnalyzer()
        self._busy = False
        self.refresh_critical()

    @property
    def busy(self) -> bool:
        return self._busy

    def move_task(self, task_id: str, new_start: date, new_end: date) -> ScheduleUpdate:
        """Give a task new dates and cascade to its dependents."""
        if self._busy:
            raise SchedulerBusyError(f"Cannot move {task_id}: a schedule change is in flight")

        self._busy = True
        try:
            result = SchedulePropagator(self.network).run(task_id, new_start, new_end)
            update = ScheduleUpdate(
                moved_task_id=task_id,
                changes=result.changes,
                previous=result.previous,
                unresolved=result.unresolved,
            )
            if result.is_empty():
                update.critical_task_ids = self.refresh_critical()
                return update

            self._commit(update)
            logger.info(f"Moved {task_id}: {result.get_summary()}")
            return update
        finally:
            self._busy = False

    def shift_task(self, task_id: str, day_delta: int) -> ScheduleUpdate:
        """Move a task by whole days, keeping its duration."""
        task = self.network.get_task(task_id)
        if task is None:
            logger.warning(f"Shift skipped: unknown task {task_id}")
            return ScheduleUpdate(moved_task_id=task_id, changes={}, previous={})
        shifted = task.date_range.shifted(day_delta)
        return self.move_task(task_id, shifted.start, shifted.end)

    def revert(self, update: ScheduleUpdate) -> ScheduleUpdate:
        """Put every task touched by an update back on its previous dates."""
        if self._busy:
            raise SchedulerBusyError("Cannot revert: a schedule change is in flight")

        self._busy = True
        try:
            current = {tid: self.network.tasks[tid].date_range
                       for tid in update.previous if tid in self.network}
            restore = {tid: rng for tid, rng in update.previous.items() if tid in current}
            undo = ScheduleUpdate(
                moved_task_id=update.moved_task_id,
                changes=restore,
                previous=current,
            )
            if restore:
                self._commit(undo)
                logger.info(f"Reverted change to {update.moved_task_id} ({len(restore)} task(s))")
            return undo
        finally:
            self._busy = False

    def normalize(self) -> ScheduleUpdate:
        """Push tasks that violate their dependencies to the earliest valid start."""
        if self._busy:
            raise SchedulerBusyError("Cannot normalize: a schedule change is in flight")

        self._busy = True
        try:
            previous = self.network.snapshot()
            changes = SchedulePropagator(self.network).resolve_violations()
            update = ScheduleUpdate(
                moved_task_id='',
                changes=changes,
                previous={tid: previous[tid] for tid in changes},
            )
            if changes:
                self._commit(update)
            else:
                update.critical_task_ids = self.refresh_critical()
            return update
        finally:
            self._busy = False

    def refresh_critical(self) -> set[str]:
        """Recompute critical flags over the current network."""
        critical = self.analyzer.mark_critical(self.network)
        apply_critical_flags(self.network, critical)
        return critical

    def sync_pending(self) -> BatchUpdateResult:
        """Retry persisting tasks whose previous write failed."""
        pending = [t for t in self.network.tasks.values() if t.unsynced]
        if not pending or self.store is None:
            return BatchUpdateResult()
        result = self._persist({t.task_id: t.date_range for t in pending})
        if result.failed:
            logger.warning(f"{len(result.failed)} task(s) still unsynced")
        return result

    def _commit(self, update: ScheduleUpdate) -> None:
        # Optimistic: in-memory state reflects the change before persistence answers
        self.network.apply_updates(update.changes)
        update.critical_task_ids = self.refresh_critical()

        moved = {tid: rng for tid, rng in update.changes.items()
                 if update.previous.get(tid, rng) != rng}

        if self.store is not None and moved:
            persisted = self._persist(moved)
            update.failed = dict(persisted.failed)

        for task_id, new_range in moved.items():
            old_range = update.previous[task_id]
            self.events.publish(TaskDatesChanged(
                task_id=task_id,
                old_start=old_range.start,
                old_end=old_range.end,
                new_start=new_range.start,
                new_end=new_range.end,
            ))

    def _persist(self, changes: dict[str, DateRange]) -> BatchUpdateResult:
        updates = [DateUpdate(task_id=tid, start_date=rng.start, end_date=rng.end)
                   for tid, rng in changes.items()]
        try:
            result = self.store.update_task_dates(updates)
        except Exception as e:
            # Whole batch lost; keep the optimistic dates and flag every task
            logger.exception(f"Task store rejected batch of {len(updates)} update(s)")
            result = BatchUpdateResult(failed={u.task_id: str(e) for u in updates})

        for task_id in result.succeeded:
            if task_id in self.network:
                self.network.tasks[task_id].unsynced = False
        for task_id, error in result.failed.items():
            if task_id in self.network:
                self.network.tasks[task_id].unsynced = True
            logger.error(f"Task {task_id} dates not persisted: {error}")
        return result
