"""Task store kept in process memory."""
from typing import Dict, Iterable, List, Optional

from schemas.tasks import DateUpdate, TaskRecord

from .base_connector import BaseTaskStore, BatchUpdateResult


class InMemoryTaskStore(BaseTaskStore):
    """
    Dict-backed task store for offline sessions.

    Records are grouped by project id. ``fail_task_ids`` makes updates for
    those tasks report a failure, which mimics a flaky remote.
    """

    def __init__(self, records: Optional[Dict[str, List[TaskRecord]]] = None,
                 fail_task_ids: Optional[Iterable[str]] = None):
        super().__init__('memory')
        self._records: Dict[str, Dict[str, TaskRecord]] = {
            project_id: {r.id: r for r in rows}
            for project_id, rows in (records or {}).items()
        }
        self.fail_task_ids = set(fail_task_ids or [])

    def fetch_tasks(self, project_id: str) -> List[TaskRecord]:
        return [r.model_copy(deep=True) for r in self._records.get(project_id, {}).values()]

    def update_task_dates(self, updates: Iterable[DateUpdate]) -> BatchUpdateResult:
        result = BatchUpdateResult()
        for update in updates:
            record = self._find(update.task_id)
            if record is None:
                result.failed[update.task_id] = 'task not found'
            elif update.task_id in self.fail_task_ids:
                result.failed[update.task_id] = 'write rejected'
            else:
                record.start_date = update.start_date
                record.end_date = update.end_date
                result.succeeded.append(update.task_id)
        if result.failed:
            self.logger.error(f'{len(result.failed)} task update(s) failed: {sorted(result.failed)}')
        return result

    def _find(self, task_id: str) -> Optional[TaskRecord]:
        for rows in self._records.values():
            if task_id in rows:
                return rows[task_id]
        return None
