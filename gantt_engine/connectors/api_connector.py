"""Task store connector for the project REST API."""
import requests
from typing import Any, Dict, Iterable, List, Optional
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import logging

from gantt_engine.config.settings import settings
from schemas.tasks import DateUpdate, TaskRecord

from .base_connector import BaseTaskStore, BatchUpdateResult

logger = logging.getLogger(__name__)


class APITaskStore(BaseTaskStore):
    """
    Task store reached over HTTP.
    Handles authentication, retries, and per-task error reporting.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[int] = None,
        name: str = 'task_store',
    ):
        """
        Initialize the API task store. Unset arguments fall back to settings.

        Args:
            base_url: Base URL for the API
            api_key: API key sent as a bearer token
            timeout: Request timeout in seconds
            retry_attempts: Number of retry attempts
            retry_delay: Backoff factor between retries in seconds
            name: Name used in log records
        """
        super().__init__(name, timeout if timeout is not None else settings.TASK_STORE_TIMEOUT)
        base_url = base_url if base_url is not None else settings.TASK_STORE_BASE_URL
        if not base_url:
            raise ValueError('Task store base URL is not configured (TASK_STORE_BASE_URL)')
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key if api_key is not None else settings.TASK_STORE_API_KEY
        self.retry_attempts = (retry_attempts if retry_attempts is not None
                               else settings.TASK_STORE_RETRY_ATTEMPTS)
        self.retry_delay = retry_delay if retry_delay is not None else settings.TASK_STORE_RETRY_DELAY
        self.session = requests.Session()
        self._setup_retry_strategy()
        self._authenticate()

    def _setup_retry_strategy(self) -> None:
        """Configure retry strategy for the session."""
        retry_strategy = Retry(
            total=self.retry_attempts,
            backoff_factor=self.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=['GET', 'PATCH'],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount('http://', adapter)
        self.session.mount('https://', adapter)

    def _authenticate(self) -> None:
        """For API key auth, this just sets headers."""
        self.session.headers.update({'User-Agent': 'gantt-engine/0.1'})
        if self.api_key:
            self.session.headers.update({'Authorization': f'Bearer {self.api_key}'})

    def _url(self, endpoint: str) -> str:
        return f'{self.base_url}/{endpoint.lstrip("/")}'

    def fetch_tasks(self, project_id: str) -> List[TaskRecord]:
        """
        GET the task listing of a project.

        Raises:
            requests.RequestException: If the request fails
        """
        response = self.session.get(
            self._url(f'projects/{project_id}/tasks'),
            timeout=self.timeout,
        )
        response.raise_for_status()
        body: Any = response.json()
        rows = body.get('tasks', []) if isinstance(body, dict) else body
        records = [TaskRecord.model_validate(row) for row in rows]
        self.logger.info(f'Fetched {len(records)} tasks for project {project_id}')
        return records

    def update_task_dates(self, updates: Iterable[DateUpdate]) -> BatchUpdateResult:
        """PATCH each task's dates; one failing task does not stop the rest."""
        result = BatchUpdateResult()
        for update in updates:
            try:
                response = self.session.patch(
                    self._url(f'tasks/{update.task_id}'),
                    json=update.to_payload(),
                    timeout=self.timeout,
                )
                response.raise_for_status()
                result.succeeded.append(update.task_id)
            except requests.RequestException as e:
                self.logger.error(f'Failed to persist dates for task {update.task_id}: {e}')
                result.failed[update.task_id] = str(e)
        return result

    def validate_connection(self) -> bool:
        """Validate API connection by making a simple request."""
        try:
            response = self.session.get(self._url('health'), timeout=self.timeout)
            is_valid = response.status_code < 400
            if is_valid:
                self.logger.info(f'Connection to {self.name} validated')
            else:
                self.logger.warning(f'Connection validation failed: {response.status_code}')
            return is_valid
        except requests.RequestException as e:
            self.logger.error(f'Connection validation error: {e}')
            return False

    def close(self) -> None:
        """Close the session."""
        self.session.close()
        self.logger.info(f'Closed connection to {self.name}')
