"""
Task Network for dependency scheduling.

In-memory task store: tasks plus finish-to-start edges, with mirrored
predecessor/successor bookkeeping, topological sorting and network traversal.
"""

import logging
from collections import defaultdict, deque
from copy import copy
from typing import Iterable, Mapping, Optional

from .models import DateRange, Dependency, Task

logger = logging.getLogger(__name__)


class SelfDependencyError(ValueError):
    """Raised when a task is made to depend on itself."""


class CircularDependencyError(ValueError):
    """Raised when an operation needs an acyclic network and finds a cycle."""

    def __init__(self, message: str, task_ids: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.task_ids = sorted(task_ids or [])


class TaskNetwork:
    """
    Task dependency network.

    Every edge P -> S is stored once per direction: in the adjacency maps and
    in ``Task.successors`` of P / ``Task.predecessors`` of S. All mutations go
    through this class so both directions stay consistent.
    """

    def __init__(self):
        self.tasks: dict[str, Task] = {}
        self._successors: dict[str, dict[str, Dependency]] = defaultdict(dict)
        self._predecessors: dict[str, dict[str, Dependency]] = defaultdict(dict)

    def add_task(self, task: Task) -> None:
        """Add a task to the network. Edge sets on the task are rebuilt from edges."""
        if not task.date_range.is_valid():
            raise ValueError(
                f"Task {task.task_id}: end {task.end_date} before start {task.start_date}"
            )
        task.predecessors = set(self._predecessors.get(task.task_id, {}))
        task.successors = set(self._successors.get(task.task_id, {}))
        self.tasks[task.task_id] = task

    def remove_task(self, task_id: str) -> Optional[Task]:
        """Remove a task and every edge touching it."""
        task = self.tasks.get(task_id)
        if task is None:
            return None
        for succ_id in list(self._successors.get(task_id, {})):
            self.remove_dependency(task_id, succ_id)
        for pred_id in list(self._predecessors.get(task_id, {})):
            self.remove_dependency(pred_id, task_id)
        del self.tasks[task_id]
        return task

    def add_dependency(self, dep: Dependency) -> None:
        """
        Add a dependency to the network.

        Both predecessor and successor tasks must exist in the network.
        Adding an existing pair again replaces its lag.
        """
        if dep.is_self_loop():
            raise SelfDependencyError(f"Task {dep.pred_task_id} cannot depend on itself")
        if dep.pred_task_id not in self.tasks:
            raise ValueError(f"Predecessor task {dep.pred_task_id} not in network")
        if dep.succ_task_id not in self.tasks:
            raise ValueError(f"Successor task {dep.succ_task_id} not in network")

        self._link(dep)

    def add_dependency_safe(self, dep: Dependency) -> bool:
        """
        Add a dependency only if both tasks exist and it is not a self-loop.

        Returns True if added, False if skipped.
        """
        if dep.is_self_loop():
            return False
        if dep.pred_task_id not in self.tasks or dep.succ_task_id not in self.tasks:
            return False
        self._link(dep)
        return True

    def _link(self, dep: Dependency) -> None:
        self._successors[dep.pred_task_id][dep.succ_task_id] = dep
        self._predecessors[dep.succ_task_id][dep.pred_task_id] = dep
        self.tasks[dep.pred_task_id].successors.add(dep.succ_task_id)
        self.tasks[dep.succ_task_id].predecessors.add(dep.pred_task_id)

    def remove_dependency(self, pred_task_id: str, succ_task_id: str) -> bool:
        """Remove an edge in both directions. Returns False if it did not exist."""
        if succ_task_id not in self._successors.get(pred_task_id, {}):
            return False
        del self._successors[pred_task_id][succ_task_id]
        del self._predecessors[succ_task_id][pred_task_id]
        if pred_task_id in self.tasks:
            self.tasks[pred_task_id].successors.discard(succ_task_id)
        if succ_task_id in self.tasks:
            self.tasks[succ_task_id].predecessors.discard(pred_task_id)
        return True

    @property
    def dependencies(self) -> list[Dependency]:
        return [dep for edges in self._successors.values() for dep in edges.values()]

    def get_task(self, task_id: str) -> Optional[Task]:
        """Get a task by ID."""
        return self.tasks.get(task_id)

    def get_dependency(self, pred_task_id: str, succ_task_id: str) -> Optional[Dependency]:
        return self._successors.get(pred_task_id, {}).get(succ_task_id)

    def get_successors(self, task_id: str) -> list[Dependency]:
        """Get dependencies where task_id is the predecessor, ordered by successor id."""
        edges = self._successors.get(task_id, {})
        return [edges[sid] for sid in sorted(edges)]

    def get_predecessors(self, task_id: str) -> list[Dependency]:
        """Get dependencies where task_id is the successor, ordered by predecessor id."""
        edges = self._predecessors.get(task_id, {})
        return [edges[pid] for pid in sorted(edges)]

    def get_successor_tasks(self, task_id: str) -> list[Task]:
        """Get successor Task objects."""
        return [self.tasks[d.succ_task_id] for d in self.get_successors(task_id)]

    def get_predecessor_tasks(self, task_id: str) -> list[Task]:
        """Get predecessor Task objects."""
        return [self.tasks[d.pred_task_id] for d in self.get_predecessors(task_id)]

    def get_start_tasks(self) -> list[str]:
        """Get task IDs with no predecessors."""
        return [tid for tid in self.tasks if not self._predecessors.get(tid)]

    def get_end_tasks(self) -> list[str]:
        """Get task IDs with no successors."""
        return [tid for tid in self.tasks if not self._successors.get(tid)]

    def topological_sort(self) -> list[str]:
        """
        Return task IDs in topological order (predecessors before successors).

        Uses Kahn's algorithm; among ready tasks the smallest id goes first.
        Raises CircularDependencyError if a cycle is detected.
        """
        in_degree = {tid: len(self._predecessors.get(tid, {})) for tid in self.tasks}

        queue = deque(sorted(tid for tid, deg in in_degree.items() if deg == 0))
        result = []

        while queue:
            task_id = queue.popleft()
            result.append(task_id)

            for dep in self.get_successors(task_id):
                in_degree[dep.succ_task_id] -= 1
                if in_degree[dep.succ_task_id] == 0:
                    queue.append(dep.succ_task_id)

        if len(result) != len(self.tasks):
            remaining = set(self.tasks) - set(result)
            raise CircularDependencyError(
                f"Circular dependency detected involving {len(remaining)} tasks: "
                f"{sorted(remaining)[:5]}",
                remaining,
            )

        return result

    def get_all_predecessors(self, task_id: str, include_self: bool = False) -> set[str]:
        """Get all predecessor task IDs (transitive closure)."""
        return self._closure(task_id, self._predecessors, include_self)

    def get_all_successors(self, task_id: str, include_self: bool = False) -> set[str]:
        """Get all successor task IDs (transitive closure)."""
        return self._closure(task_id, self._successors, include_self)

    @staticmethod
    def _closure(task_id: str, adjacency: Mapping[str, Mapping[str, Dependency]],
                 include_self: bool) -> set[str]:
        result = set()
        visited = set()
        queue = deque([task_id])

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)

            for other_id in adjacency.get(current, {}):
                result.add(other_id)
                queue.append(other_id)

        if include_self:
            result.add(task_id)
        return result

    def snapshot(self) -> dict[str, DateRange]:
        """Current date assignment of every task."""
        return {tid: task.date_range for tid, task in self.tasks.items()}

    def apply_updates(self, updates: Mapping[str, DateRange]) -> list[str]:
        """
        Apply a batch of date changes.

        The batch is validated before anything is written, so it applies
        fully or not at all. Returns the ids of tasks whose dates changed.
        """
        for task_id, new_range in updates.items():
            if task_id not in self.tasks:
                raise ValueError(f"Task {task_id} not in network")
            if not new_range.is_valid():
                raise ValueError(
                    f"Task {task_id}: end {new_range.end} before start {new_range.start}"
                )

        changed = []
        for task_id, new_range in updates.items():
            task = self.tasks[task_id]
            if task.date_range != new_range:
                task.set_dates(new_range)
                changed.append(task_id)
        return changed

    def clone(self) -> 'TaskNetwork':
        """
        Create a copy of the network for what-if analysis.

        Tasks are shallow-copied with fresh edge sets so modifications
        don't affect the original.
        """
        new_network = TaskNetwork()

        for tid, task in self.tasks.items():
            new_task = copy(task)
            new_task.predecessors = set()
            new_task.successors = set()
            new_task.payload = dict(task.payload)
            new_network.tasks[tid] = new_task

        for dep in self.dependencies:
            new_network._link(copy(dep))

        return new_network

    def to_records(self) -> list[dict]:
        """Resolved task list for the rendering layer, ordered by start date."""
        records = []
        for task in sorted(self.tasks.values(), key=lambda t: (t.start_date, t.task_id)):
            records.append({
                'id': task.task_id,
                'title': task.title,
                'start_date': task.start_date,
                'end_date': task.end_date,
                'duration_days': task.duration_days,
                'predecessors': sorted(task.predecessors),
                'successors': sorted(task.successors),
                'is_critical': task.is_critical,
                'unsynced': task.unsynced,
                'category': task.category,
                'status': task.status,
                'progress': task.progress,
                'color': task.color,
            })
        return records

    def get_statistics(self) -> dict:
        """Get network statistics."""
        statuses = defaultdict(int)
        for task in self.tasks.values():
            statuses[task.status] += 1

        return {
            'total_tasks': len(self.tasks),
            'total_dependencies': len(self.dependencies),
            'start_tasks': len(self.get_start_tasks()),
            'end_tasks': len(self.get_end_tasks()),
            'critical_tasks': sum(1 for t in self.tasks.values() if t.is_critical),
            'unsynced_tasks': sum(1 for t in self.tasks.values() if t.unsynced),
            'statuses': dict(statuses),
        }

    def validate(self) -> list[str]:
        """
        Validate network integrity.

        Returns list of issues found (empty if valid).
        """
        issues = []

        for task in self.tasks.values():
            if task.end_date < task.start_date:
                issues.append(f"Task {task.task_id} ends before it starts")
            if task.task_id in task.predecessors or task.task_id in task.successors:
                issues.append(f"Task {task.task_id} depends on itself")
            if task.predecessors != set(self._predecessors.get(task.task_id, {})):
                issues.append(f"Task {task.task_id} predecessor set out of sync with edges")
            if task.successors != set(self._successors.get(task.task_id, {})):
                issues.append(f"Task {task.task_id} successor set out of sync with edges")

        try:
            self.topological_sort()
        except CircularDependencyError as e:
            issues.append(str(e))

        return issues

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: str) -> bool:
        return task_id in self.tasks

    def __repr__(self) -> str:
        return f"TaskNetwork({len(self.tasks)} tasks, {len(self.dependencies)} dependencies)"
