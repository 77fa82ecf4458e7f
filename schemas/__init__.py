"""
Task store record schemas.

Pydantic models for the task listing read from the task store and the date
updates written back to it.

Usage:
    from schemas import TaskRecord, DateUpdate

    record = TaskRecord.model_validate(row)
"""

from .tasks import DateUpdate, TaskRecord

__all__ = [
    'TaskRecord',
    'DateUpdate',
]
