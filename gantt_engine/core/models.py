"""
Data models for dependency scheduling.

Defines dataclasses for tasks, finish-to-start dependencies, and the results
of propagation and critical path analysis.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from gantt_engine.utils.dates import add_days, days_between


@dataclass(frozen=True)
class DateRange:
    """Start/end calendar dates of a task."""

    start: date
    end: date

    @property
    def duration_days(self) -> int:
        return days_between(self.start, self.end)

    def is_valid(self) -> bool:
        return self.end >= self.start

    def shifted(self, days: int) -> 'DateRange':
        """Same duration, moved by a whole number of days."""
        return DateRange(add_days(self.start, days), add_days(self.end, days))

    def to_dict(self) -> dict:
        return {'start_date': self.start, 'end_date': self.end}


@dataclass
class Task:
    """Represents a schedulable Gantt task."""

    task_id: str
    start_date: date
    end_date: date
    title: str = ''
    category: str = ''
    status: str = 'pending'
    progress: float = 0.0
    color: Optional[str] = None

    # Graph position (kept symmetric by TaskNetwork)
    predecessors: set[str] = field(default_factory=set)
    successors: set[str] = field(default_factory=set)

    # Externally set "critical" flag; OR'ed into the computed result
    critical_override: bool = False

    # Volatile state, never persisted as authoritative
    is_critical: bool = False
    unsynced: bool = False

    # Fields the engine carries for display only
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start_date, self.end_date)

    @property
    def duration_days(self) -> int:
        """Whole days between start and end."""
        return days_between(self.start_date, self.end_date)

    def set_dates(self, new_range: DateRange) -> None:
        """Move the task. Rejects ranges that would give a negative duration."""
        if not new_range.is_valid():
            raise ValueError(
                f"Task {self.task_id}: end {new_range.end} before start {new_range.start}"
            )
        self.start_date = new_range.start
        self.end_date = new_range.end

    def is_milestone(self) -> bool:
        """Check if task is a milestone (zero duration)."""
        return self.duration_days == 0


@dataclass
class Dependency:
    """Represents a finish-to-start predecessor-successor relationship."""

    pred_task_id: str
    succ_task_id: str
    lag_days: int = 0  # negative = lead time

    def is_self_loop(self) -> bool:
        return self.pred_task_id == self.succ_task_id

    def earliest_successor_start(self, pred_end: date) -> date:
        """Earliest start this edge allows for the successor."""
        return add_days(pred_end, self.lag_days)


@dataclass
class PropagationResult:
    """Results from propagating one task's date change."""

    moved_task_id: str
    changes: dict[str, DateRange]          # task_id -> new range (moved task included)
    previous: dict[str, DateRange]         # task_id -> range before the call
    order: list[str]                       # finalization order
    unresolved: set[str] = field(default_factory=set)

    @classmethod
    def empty(cls, moved_task_id: str) -> 'PropagationResult':
        return cls(moved_task_id=moved_task_id, changes={}, previous={}, order=[])

    def is_empty(self) -> bool:
        return not self.changes

    def get_affected_task_ids(self) -> list[str]:
        """Changed tasks other than the moved one, in finalization order."""
        return [tid for tid in self.order
                if tid != self.moved_task_id and tid in self.changes]

    def get_summary(self) -> str:
        if self.is_empty():
            return "No changes"
        summary = f"{len(self.changes)} task(s) rescheduled"
        if self.unresolved:
            summary += f", {len(self.unresolved)} left unresolved (cycle)"
        return summary


@dataclass
class CriticalPathResult:
    """Results from zero-slack critical task detection."""

    critical_task_ids: set[str]
    critical_edges: list[tuple[str, str]]  # (pred, succ) pairs with no gap
    overridden_task_ids: set[str]          # added only by the external flag
    total_tasks: int

    def is_critical(self, task_id: str) -> bool:
        return task_id in self.critical_task_ids

    def get_summary(self) -> str:
        return (f"{len(self.critical_task_ids)} of {self.total_tasks} tasks critical "
                f"({len(self.critical_edges)} zero-slack links, "
                f"{len(self.overridden_task_ids)} flagged manually)")
