"""Builders shared by the unit tests."""
from datetime import date, timedelta

from gantt_engine.core.models import Dependency, Task
from gantt_engine.core.network import TaskNetwork


def JAN(day: int) -> date:
    return date(2025, 1, day)


def make_task(task_id: str, start: date, duration_days: int, **kwargs) -> Task:
    """Task starting on `start` lasting `duration_days`."""
    return Task(task_id=task_id, start_date=start,
                end_date=start + timedelta(days=duration_days), **kwargs)


def link(network: TaskNetwork, pred: str, succ: str, lag: int = 0) -> None:
    network.add_dependency(Dependency(pred_task_id=pred, succ_task_id=succ, lag_days=lag))
