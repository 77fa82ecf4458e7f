"""
Critical Path Analysis.

Zero-slack adjacency heuristic: a link P -> S is critical when S starts on or
before the day P finishes. Both ends of such a link are marked critical.
This is not a forward/backward float computation.
"""

import logging
from typing import Iterable, Mapping, Optional, Union

from .models import CriticalPathResult, DateRange, Task
from .network import TaskNetwork

logger = logging.getLogger(__name__)


class CriticalPathAnalyzer:
    """Derives critical task ids from current dates and edges."""

    def mark_critical(
        self,
        tasks: Union[TaskNetwork, Iterable[Task]],
        overrides: Optional[Mapping[str, DateRange]] = None,
    ) -> set[str]:
        """
        Return the ids of critical tasks.

        Args:
            tasks: Network or plain task list (edges read from the tasks' successor sets)
            overrides: Pending dates to evaluate instead of the stored ones
        """
        return self.analyze(tasks, overrides).critical_task_ids

    def analyze(
        self,
        tasks: Union[TaskNetwork, Iterable[Task]],
        overrides: Optional[Mapping[str, DateRange]] = None,
    ) -> CriticalPathResult:
        """Full analysis with the links that triggered each mark."""
        by_id = tasks.tasks if isinstance(tasks, TaskNetwork) else {t.task_id: t for t in tasks}
        overrides = overrides or {}

        def dates_of(task_id: str) -> DateRange:
            if task_id in overrides:
                return overrides[task_id]
            return by_id[task_id].date_range

        critical = set()
        edges = []

        for pred_id in sorted(by_id):
            pred_end = dates_of(pred_id).end
            for succ_id in sorted(by_id[pred_id].successors):
                if succ_id not in by_id:
                    continue
                if dates_of(succ_id).start <= pred_end:
                    critical.add(pred_id)
                    critical.add(succ_id)
                    edges.append((pred_id, succ_id))

        # Manual flags only ever add
        flagged = {tid for tid, task in by_id.items() if task.critical_override}
        overridden = flagged - critical
        critical |= flagged

        result = CriticalPathResult(
            critical_task_ids=critical,
            critical_edges=edges,
            overridden_task_ids=overridden,
            total_tasks=len(by_id),
        )
        logger.debug(result.get_summary())
        return result


def apply_critical_flags(network: TaskNetwork, critical_ids: set[str]) -> None:
    """Write the volatile is_critical flag. Manually flagged tasks stay critical."""
    for task_id, task in network.tasks.items():
        task.is_critical = task_id in critical_ids or task.critical_override
