"""Task listing loaders."""

from .task_loader import build_network, load_tasks_csv, tasks_to_dataframe

__all__ = ['build_network', 'load_tasks_csv', 'tasks_to_dataframe']
