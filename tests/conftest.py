"""Pytest configuration and fixtures."""
from unittest.mock import MagicMock

import pytest

from factories import JAN, link, make_task
from gantt_engine.connectors.base_connector import BaseTaskStore, BatchUpdateResult
from gantt_engine.core.network import TaskNetwork


@pytest.fixture
def chain_network() -> TaskNetwork:
    """A (Jan 1-3) -> B (Jan 3-5) -> C (Jan 5-8), all lag 0."""
    network = TaskNetwork()
    network.add_task(make_task('A', JAN(1), 2, title='Excavation'))
    network.add_task(make_task('B', JAN(3), 2, title='Footings'))
    network.add_task(make_task('C', JAN(5), 3, title='Slab'))
    link(network, 'A', 'B')
    link(network, 'B', 'C')
    return network


@pytest.fixture
def diamond_network() -> TaskNetwork:
    """A -> B, A -> C, B -> D, C -> D with B shorter than C."""
    network = TaskNetwork()
    network.add_task(make_task('A', JAN(1), 2))
    network.add_task(make_task('B', JAN(3), 1))
    network.add_task(make_task('C', JAN(3), 4))
    network.add_task(make_task('D', JAN(7), 2))
    link(network, 'A', 'B')
    link(network, 'A', 'C')
    link(network, 'B', 'D')
    link(network, 'C', 'D')
    return network


@pytest.fixture
def cycle_network() -> TaskNetwork:
    """X -> Y -> X (malformed two-task cycle)."""
    network = TaskNetwork()
    network.add_task(make_task('X', JAN(1), 2))
    network.add_task(make_task('Y', JAN(3), 2))
    link(network, 'X', 'Y')
    link(network, 'Y', 'X')
    return network


@pytest.fixture
def mock_task_store():
    """Mock task store where every update succeeds."""
    store = MagicMock(spec=BaseTaskStore)
    store.update_task_dates.side_effect = lambda updates: BatchUpdateResult(
        succeeded=[u.task_id for u in updates]
    )
    return store


@pytest.fixture
def sample_task_records() -> list[dict]:
    """Task listing as the store returns it."""
    return [
        {'id': 'A', 'title': 'Site prep', 'start_date': '2025-01-01', 'end_date': '2025-01-03',
         'successors': ['B']},
        {'id': 'B', 'title': 'Framing', 'start_date': '2025-01-03', 'end_date': '2025-01-06',
         'predecessors': ['A'], 'lag_days': 0},
        {'id': 'C', 'title': 'Roofing', 'start_date': '2025-01-08', 'end_date': '2025-01-10',
         'dependencies': ['B'], 'lag_days': 2, 'is_critical': True, 'location': 'Block 4'},
    ]
