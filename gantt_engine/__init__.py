"""
Gantt Scheduling Engine.

Keeps task dates consistent under finish-to-start dependencies, cascades
moves to dependent tasks and flags zero-slack (critical) tasks.
"""

from .core import (
    Task,
    Dependency,
    DateRange,
    PropagationResult,
    CriticalPathResult,
    TaskNetwork,
    SelfDependencyError,
    CircularDependencyError,
    SchedulePropagator,
    CriticalPathAnalyzer,
    apply_critical_flags,
)
from .events import EventBus, TaskDatesChanged
from .scheduler import GanttScheduler, ScheduleUpdate, SchedulerBusyError
from .interaction import DragAdapter, DragSession, quantize_day_delta
from .loaders import build_network, load_tasks_csv, tasks_to_dataframe

__all__ = [
    # Models
    'Task',
    'Dependency',
    'DateRange',
    'PropagationResult',
    'CriticalPathResult',
    # Core
    'TaskNetwork',
    'SelfDependencyError',
    'CircularDependencyError',
    'SchedulePropagator',
    'CriticalPathAnalyzer',
    'apply_critical_flags',
    # Orchestration
    'GanttScheduler',
    'ScheduleUpdate',
    'SchedulerBusyError',
    'EventBus',
    'TaskDatesChanged',
    'DragAdapter',
    'DragSession',
    'quantize_day_delta',
    # Loading
    'build_network',
    'load_tasks_csv',
    'tasks_to_dataframe',
]
