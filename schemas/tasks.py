"""
Task Store record schemas.

Shapes exchanged with the remote task store: the per-project task listing
and the batch date update payload.
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class TaskRecord(BaseModel):
    """
    One task as listed by the task store.

    Extra columns are accepted and carried through as display payload.
    """
    model_config = ConfigDict(extra='allow', populate_by_name=True)

    id: str = Field(description="Unique task identifier")
    title: str = Field(default='', description="Task title")
    start_date: date = Field(description="First day of the task")
    end_date: date = Field(description="Last day of the task")
    predecessors: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices('predecessors', 'dependencies'),
        description="Ids of tasks that must finish first",
    )
    successors: List[str] = Field(default_factory=list, description="Ids of dependent tasks")
    lag_days: int = Field(default=0, description="Lag applied to every incoming dependency")
    lags: Dict[str, int] = Field(
        default_factory=dict,
        description="Per-predecessor lag overriding lag_days",
    )
    is_critical: bool = Field(default=False, description="Manual critical flag")
    category: str = Field(default='', description="Grouping category")
    status: str = Field(default='pending', description="Workflow status")
    progress: float = Field(default=0.0, description="Percent complete")
    color: Optional[str] = Field(default=None, description="Bar color")

    @field_validator('id', mode='before')
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator('predecessors', 'successors', mode='before')
    @classmethod
    def _ids_to_str(cls, value: Any) -> Any:
        if value is None:
            return []
        return [str(v) for v in value]

    @model_validator(mode='after')
    def _check_range(self) -> 'TaskRecord':
        if self.end_date < self.start_date:
            raise ValueError(f"Task {self.id}: end_date {self.end_date} before start_date {self.start_date}")
        return self

    def lag_for(self, pred_id: str) -> int:
        """Lag of the incoming edge from pred_id."""
        return self.lags.get(pred_id, self.lag_days)

    def extra_fields(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class DateUpdate(BaseModel):
    """
    New dates for one task, sent to the store's batch update entry point.
    """
    task_id: str = Field(description="Task identifier")
    start_date: date = Field(description="New start date")
    end_date: date = Field(description="New end date")

    @model_validator(mode='after')
    def _check_range(self) -> 'DateUpdate':
        if self.end_date < self.start_date:
            raise ValueError(f"Task {self.task_id}: end_date before start_date")
        return self

    def to_payload(self) -> Dict[str, str]:
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
        }
