"""
Dependency scheduling core.

This module provides:
- Task network construction with mirrored dependency bookkeeping
- Cascade propagation of date changes in topological order
- Zero-slack critical task detection
"""

from .models import Task, Dependency, DateRange, PropagationResult, CriticalPathResult
from .network import TaskNetwork, SelfDependencyError, CircularDependencyError
from .propagator import SchedulePropagator
from .critical_path import CriticalPathAnalyzer, apply_critical_flags

__all__ = [
    'Task',
    'Dependency',
    'DateRange',
    'PropagationResult',
    'CriticalPathResult',
    'TaskNetwork',
    'SelfDependencyError',
    'CircularDependencyError',
    'SchedulePropagator',
    'CriticalPathAnalyzer',
    'apply_critical_flags',
]
