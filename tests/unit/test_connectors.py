"""Unit tests for task store connectors."""
from datetime import date
from unittest.mock import MagicMock

import pytest
import requests

from gantt_engine.connectors import APITaskStore, BatchUpdateResult, InMemoryTaskStore
from gantt_engine.scheduler import GanttScheduler
from gantt_engine.loaders import build_network
from schemas.tasks import DateUpdate, TaskRecord

from factories import JAN


def _response(json_data=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f'{status_code} Error')
    return response


@pytest.fixture
def api_store():
    store = APITaskStore(base_url='https://tasks.example.com/api/', api_key='secret',
                         retry_attempts=0)
    store.session = MagicMock()
    return store


class TestAPITaskStore:
    """HTTP store with a mocked session."""

    def test_missing_base_url(self):
        with pytest.raises(ValueError):
            APITaskStore(base_url='')

    def test_auth_header(self):
        store = APITaskStore(base_url='https://tasks.example.com', api_key='secret')
        assert store.session.headers['Authorization'] == 'Bearer secret'
        store.close()

    def test_fetch_tasks_list_body(self, api_store, sample_task_records):
        api_store.session.get.return_value = _response(sample_task_records)

        records = api_store.fetch_tasks('p1')

        assert [r.id for r in records] == ['A', 'B', 'C']
        assert records[2].predecessors == ['B']
        url = api_store.session.get.call_args[0][0]
        assert url == 'https://tasks.example.com/api/projects/p1/tasks'

    def test_fetch_tasks_wrapped_body(self, api_store, sample_task_records):
        api_store.session.get.return_value = _response({'tasks': sample_task_records[:1]})
        assert len(api_store.fetch_tasks('p1')) == 1

    def test_fetch_tasks_http_error(self, api_store):
        api_store.session.get.return_value = _response(status_code=500)
        with pytest.raises(requests.HTTPError):
            api_store.fetch_tasks('p1')

    def test_update_reports_per_task_failures(self, api_store):
        """A failing PATCH does not stop the rest of the batch."""
        api_store.session.patch.side_effect = [
            _response({}),
            requests.ConnectionError('connection reset'),
            _response({}),
        ]
        updates = [DateUpdate(task_id=t, start_date=JAN(2), end_date=JAN(4)) for t in 'ABC']

        result = api_store.update_task_dates(updates)

        assert result.succeeded == ['A', 'C']
        assert 'connection reset' in result.failed['B']
        assert not result.ok
        payload = api_store.session.patch.call_args_list[0][1]['json']
        assert payload == {'start_date': '2025-01-02', 'end_date': '2025-01-04'}

    def test_validate_connection(self, api_store):
        api_store.session.get.return_value = _response(status_code=200)
        assert api_store.validate_connection() is True

        api_store.session.get.side_effect = requests.Timeout('slow')
        assert api_store.validate_connection() is False


class TestInMemoryTaskStore:
    """Offline store."""

    def _store(self, sample_task_records, **kwargs):
        records = [TaskRecord.model_validate(r) for r in sample_task_records]
        return InMemoryTaskStore({'p1': records}, **kwargs)

    def test_fetch_returns_copies(self, sample_task_records):
        store = self._store(sample_task_records)
        first = store.fetch_tasks('p1')
        first[0].start_date = date(2030, 1, 1)
        assert store.fetch_tasks('p1')[0].start_date == JAN(1)
        assert store.fetch_tasks('other') == []

    def test_update_writes_dates(self, sample_task_records):
        store = self._store(sample_task_records)
        result = store.update_task_dates([DateUpdate(task_id='B', start_date=JAN(4), end_date=JAN(7))])
        assert result.ok
        assert store.fetch_tasks('p1')[1].start_date == JAN(4)

    def test_update_failures(self, sample_task_records):
        store = self._store(sample_task_records, fail_task_ids=['C'])
        result = store.update_task_dates([
            DateUpdate(task_id='C', start_date=JAN(9), end_date=JAN(11)),
            DateUpdate(task_id='Z', start_date=JAN(9), end_date=JAN(11)),
        ])
        assert result.failed == {'C': 'write rejected', 'Z': 'task not found'}

    def test_round_trip_through_scheduler(self, sample_task_records):
        """Fetch, move, and read the persisted cascade back."""
        store = self._store(sample_task_records, fail_task_ids=['C'])
        network = build_network(store.fetch_tasks('p1'))
        scheduler = GanttScheduler(network, store=store)

        update = scheduler.move_task('A', JAN(2), JAN(4))

        stored = {r.id: r for r in store.fetch_tasks('p1')}
        assert stored['B'].start_date == JAN(4)
        assert update.failed == {'C': 'write rejected'}
        assert network.tasks['C'].unsynced is True
        assert network.tasks['C'].start_date == JAN(9)


class TestBatchUpdateResult:

    def test_merge(self):
        result = BatchUpdateResult(succeeded=['A'])
        result.merge(BatchUpdateResult(succeeded=['B'], failed={'C': 'boom'}))
        assert result.succeeded == ['A', 'B']
        assert result.failed == {'C': 'boom'}
