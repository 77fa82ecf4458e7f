"""
Schedule Propagator.

Moves one task and recomputes every transitively dependent task with
finish-to-start semantics, in topological order over the affected subgraph.
"""

import logging
from collections import deque
from datetime import date
from typing import Optional

from gantt_engine.utils.dates import add_days

from .models import DateRange, PropagationResult
from .network import TaskNetwork

logger = logging.getLogger(__name__)


class SchedulePropagator:
    """
    Cascade engine for task date changes.

    The network is read as a snapshot and never mutated; callers get a delta
    map back and decide when to commit it with ``TaskNetwork.apply_updates``.
    """

    def __init__(self, network: TaskNetwork):
        self.network = network

    def propagate(self, task_id: str, new_start: date, new_end: date) -> dict[str, DateRange]:
        """
        Move a task and cascade the change to its dependents.

        Returns {task_id: DateRange} for every task whose dates changed,
        including the moved task. Unknown ids and inverted ranges give {}.
        """
        return self.run(task_id, new_start, new_end).changes

    def run(self, task_id: str, new_start: date, new_end: date) -> PropagationResult:
        """
        Execute a propagation pass.

        Kahn's algorithm restricted to the tasks reachable from the moved
        task: a successor becomes ready once every incoming edge from inside
        that subgraph has been finalized, then gets
        start = max(pred.end + lag) over all of its predecessors.
        Tasks stuck on a cycle are never finalized and keep their dates.
        """
        task = self.network.get_task(task_id)
        if task is None:
            logger.warning(f"Propagation skipped: unknown task {task_id}")
            return PropagationResult.empty(task_id)

        new_range = DateRange(new_start, new_end)
        if not new_range.is_valid():
            logger.warning(
                f"Propagation skipped: task {task_id} end {new_end} before start {new_start}"
            )
            return PropagationResult.empty(task_id)

        if new_range == task.date_range:
            return PropagationResult(
                moved_task_id=task_id,
                changes={task_id: new_range},
                previous={task_id: task.date_range},
                order=[task_id],
            )

        dates: dict[str, DateRange] = {task_id: new_range}
        order = [task_id]
        finalized = {task_id}

        # Edges from outside the reachable set are already final for this
        # pass, so only edges inside it gate readiness.
        reachable = self.network.get_all_successors(task_id)
        reachable.discard(task_id)
        scope = reachable | {task_id}
        pending = {
            tid: sum(1 for dep in self.network.get_predecessors(tid)
                     if dep.pred_task_id in scope)
            for tid in reachable
        }

        queue: deque[str] = deque()
        self._release(task_id, pending, finalized, queue)

        while queue:
            current_id = queue.popleft()
            if current_id in finalized:
                continue

            current = self.network.tasks[current_id]
            start = self._constrained_start(current_id, dates)
            dates[current_id] = DateRange(start, add_days(start, current.duration_days))
            finalized.add(current_id)
            order.append(current_id)

            self._release(current_id, pending, finalized, queue)

        unresolved = reachable - finalized
        if unresolved:
            logger.warning(
                f"Propagation from {task_id} left {len(unresolved)} task(s) unresolved "
                f"(circular dependency): {sorted(unresolved)[:5]}"
            )

        changes = {}
        previous = {}
        for tid in order:
            original = self.network.tasks[tid].date_range
            if tid == task_id or dates[tid] != original:
                changes[tid] = dates[tid]
                previous[tid] = original

        logger.debug(f"Propagated {task_id}: {len(changes)} change(s), order={order}")

        return PropagationResult(
            moved_task_id=task_id,
            changes=changes,
            previous=previous,
            order=order,
            unresolved=unresolved,
        )

    def _release(self, task_id: str, pending: dict[str, int],
                 finalized: set[str], queue: deque) -> None:
        """Count down successors of a finalized task; enqueue the ready ones."""
        for dep in self.network.get_successors(task_id):
            succ_id = dep.succ_task_id
            if succ_id in finalized or succ_id not in pending:
                continue
            pending[succ_id] -= 1
            if pending[succ_id] == 0:
                queue.append(succ_id)

    def _constrained_start(self, task_id: str,
                           dates: dict[str, DateRange]) -> date:
        """Latest start demanded by any predecessor (in-pass dates win)."""
        candidate: Optional[date] = None
        for dep in self.network.get_predecessors(task_id):
            pred_range = dates.get(dep.pred_task_id)
            if pred_range is None:
                pred_range = self.network.tasks[dep.pred_task_id].date_range
            driven = dep.earliest_successor_start(pred_range.end)
            if candidate is None or driven > candidate:
                candidate = driven
        # Only reached for tasks with at least one predecessor
        return candidate

    def resolve_violations(self) -> dict[str, DateRange]:
        """
        Push forward every task that starts before its predecessors allow.

        Walks the whole network in topological order. Tasks with slack keep
        their position; only violated constraints move a task, and its
        duration is preserved. Raises CircularDependencyError on cycles.
        """
        dates = self.network.snapshot()
        changes = {}

        for task_id in self.network.topological_sort():
            if not self.network.get_predecessors(task_id):
                continue
            current = dates[task_id]
            required = self._constrained_start(task_id, dates)
            if required > current.start:
                moved = current.shifted((required - current.start).days)
                dates[task_id] = moved
                changes[task_id] = moved

        if changes:
            logger.info(f"Resolved {len(changes)} dependency violation(s)")
        return changes
