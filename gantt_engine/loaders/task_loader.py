"""
Data Loader for task listings.

Builds TaskNetwork objects from task store records or CSV exports and
flattens a network back into a DataFrame for reporting.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Union

import pandas as pd

from gantt_engine.core.models import Dependency, Task
from gantt_engine.core.network import TaskNetwork
from gantt_engine.utils.dates import parse_date
from schemas.tasks import TaskRecord

logger = logging.getLogger(__name__)

ID_LIST_SEPARATOR = ';'


def _to_record(row: Union[TaskRecord, dict]) -> TaskRecord:
    if isinstance(row, TaskRecord):
        return row
    return TaskRecord.model_validate(row)


def build_network(records: Iterable[Union[TaskRecord, dict]]) -> TaskNetwork:
    """
    Construct a TaskNetwork from task listing records.

    Predecessor lists and successor lists are merged, so an edge listed on
    only one side still appears on both. Edges pointing at unknown tasks and
    self-dependencies are skipped with a warning.

    Args:
        records: TaskRecord objects or plain dicts with the same fields

    Returns:
        Populated TaskNetwork
    """
    records = [_to_record(r) for r in records]
    network = TaskNetwork()

    for record in records:
        network.add_task(Task(
            task_id=record.id,
            start_date=record.start_date,
            end_date=record.end_date,
            title=record.title,
            category=record.category,
            status=record.status,
            progress=record.progress,
            color=record.color,
            critical_override=record.is_critical,
            payload=record.extra_fields(),
        ))

    by_id = {r.id: r for r in records}
    edges: dict[tuple[str, str], int] = {}
    for record in records:
        for pred_id in record.predecessors:
            edges[(pred_id, record.id)] = record.lag_for(pred_id)
        for succ_id in record.successors:
            if (record.id, succ_id) in edges:
                continue
            succ = by_id.get(succ_id)
            edges[(record.id, succ_id)] = succ.lag_for(record.id) if succ else 0

    skipped = 0
    for (pred_id, succ_id), lag in edges.items():
        dep = Dependency(pred_task_id=pred_id, succ_task_id=succ_id, lag_days=lag)
        if not network.add_dependency_safe(dep):
            logger.warning(f"Skipping dependency {pred_id} -> {succ_id}: "
                           f"{'self-dependency' if dep.is_self_loop() else 'unknown task'}")
            skipped += 1

    logger.info(f"Loaded {len(network.tasks)} tasks, {len(network.dependencies)} dependencies"
                + (f" ({skipped} skipped)" if skipped else ""))
    return network


def _split_ids(val: Any) -> list[str]:
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return []
    return [part.strip() for part in str(val).split(ID_LIST_SEPARATOR) if part.strip()]


def load_tasks_csv(path: Path) -> TaskNetwork:
    """
    Load a task listing exported as CSV.

    Expected columns: id, start_date, end_date; optional title, predecessors,
    successors (';'-separated ids), lag_days, is_critical, category, status,
    progress, color. Other columns become payload.
    """
    df = pd.read_csv(path, dtype={'id': str, 'predecessors': str, 'successors': str})

    records = []
    for row in df.to_dict(orient='records'):
        record = {k: v for k, v in row.items() if not (isinstance(v, float) and pd.isna(v))}
        record['start_date'] = parse_date(row.get('start_date'))
        record['end_date'] = parse_date(row.get('end_date'))
        record['predecessors'] = _split_ids(row.get('predecessors'))
        record['successors'] = _split_ids(row.get('successors'))
        if 'lag_days' in record:
            record['lag_days'] = int(record['lag_days'])
        if 'is_critical' in record:
            record['is_critical'] = str(record['is_critical']).strip().lower() in ('1', 'true', 'y', 'yes')
        records.append(record)

    return build_network(records)


def tasks_to_dataframe(network: TaskNetwork) -> pd.DataFrame:
    """Flatten the resolved schedule into a DataFrame, one row per task."""
    rows = network.to_records()
    for row in rows:
        row['predecessors'] = ID_LIST_SEPARATOR.join(row['predecessors'])
        row['successors'] = ID_LIST_SEPARATOR.join(row['successors'])
    columns = ['id', 'title', 'start_date', 'end_date', 'duration_days', 'predecessors',
               'successors', 'is_critical', 'unsynced', 'category', 'status', 'progress', 'color']
    return pd.DataFrame(rows, columns=columns)
