"""Base class for task store connections."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, List
import logging

from schemas.tasks import DateUpdate, TaskRecord

logger = logging.getLogger(__name__)


@dataclass
class BatchUpdateResult:
    """Per-task outcome of a batch date update."""

    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # task_id -> error

    @property
    def ok(self) -> bool:
        return not self.failed

    def merge(self, other: 'BatchUpdateResult') -> None:
        self.succeeded.extend(other.succeeded)
        self.failed.update(other.failed)


class BaseTaskStore(ABC):
    """
    Abstract base class for task stores.
    Defines the interface the scheduler reads tasks from and writes dates to.
    """

    def __init__(self, name: str, timeout: int = 30):
        """
        Initialize the store.

        Args:
            name: Name of the store (for logging)
            timeout: Request timeout in seconds
        """
        self.name = name
        self.timeout = timeout
        self.logger = logging.getLogger(f'{__name__}.{name}')

    @abstractmethod
    def fetch_tasks(self, project_id: str) -> List[TaskRecord]:
        """
        List every task of a project with its dependencies.

        Args:
            project_id: Project identifier

        Returns:
            Task records
        """
        pass

    @abstractmethod
    def update_task_dates(self, updates: Iterable[DateUpdate]) -> BatchUpdateResult:
        """
        Persist new dates for a batch of tasks.

        Each task succeeds or fails on its own; failures are reported,
        not raised.
        """
        pass

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
