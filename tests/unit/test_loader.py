"""Unit tests for building task networks from listings."""
import logging

import pytest
from pydantic import ValidationError

from gantt_engine.loaders import build_network, load_tasks_csv, tasks_to_dataframe

from factories import JAN


class TestBuildNetwork:
    """Task store records to TaskNetwork."""

    def test_edges_merged_from_both_sides(self, sample_task_records):
        network = build_network(sample_task_records)

        assert len(network) == 3
        assert network.tasks['A'].successors == {'B'}
        assert network.tasks['B'].predecessors == {'A'}
        assert network.tasks['C'].predecessors == {'B'}
        assert network.tasks['B'].successors == {'C'}
        assert network.validate() == []

    def test_lag_and_flags_carried(self, sample_task_records):
        network = build_network(sample_task_records)

        assert network.get_dependency('B', 'C').lag_days == 2
        assert network.get_dependency('A', 'B').lag_days == 0
        assert network.tasks['C'].critical_override is True
        assert network.tasks['A'].critical_override is False

    def test_extra_fields_become_payload(self, sample_task_records):
        network = build_network(sample_task_records)
        assert network.tasks['C'].payload['location'] == 'Block 4'
        assert network.tasks['C'].title == 'Roofing'
        assert network.tasks['C'].start_date == JAN(8)

    def test_bad_edges_skipped(self, sample_task_records, caplog):
        """Unknown ids and self references are dropped, not fatal."""
        sample_task_records[0]['predecessors'] = ['ghost', 'A']

        with caplog.at_level(logging.WARNING):
            network = build_network(sample_task_records)

        assert network.tasks['A'].predecessors == set()
        assert 'unknown task' in caplog.text
        assert 'self-dependency' in caplog.text

    def test_per_predecessor_lag(self):
        records = [
            {'id': 'A', 'start_date': '2025-01-01', 'end_date': '2025-01-02'},
            {'id': 'B', 'start_date': '2025-01-01', 'end_date': '2025-01-03'},
            {'id': 'C', 'start_date': '2025-01-05', 'end_date': '2025-01-06',
             'predecessors': ['A', 'B'], 'lag_days': 1, 'lags': {'B': -1}},
        ]
        network = build_network(records)
        assert network.get_dependency('A', 'C').lag_days == 1
        assert network.get_dependency('B', 'C').lag_days == -1

    def test_inverted_record_rejected(self):
        with pytest.raises(ValidationError):
            build_network([{'id': 'A', 'start_date': '2025-01-05', 'end_date': '2025-01-01'}])


class TestCsv:
    """CSV exports."""

    def test_load_tasks_csv(self, tmp_path):
        csv_path = tmp_path / 'tasks.csv'
        csv_path.write_text(
            'id,title,start_date,end_date,predecessors,lag_days,is_critical,zone\n'
            '1,Dig,2025-01-01,2025-01-03,,,false,North\n'
            '2,Pour,2025-01-03,2025-01-05,1,1,true,\n'
        )

        network = load_tasks_csv(csv_path)

        assert set(network.tasks) == {'1', '2'}
        assert network.tasks['1'].start_date == JAN(1)
        assert network.get_dependency('1', '2').lag_days == 1
        assert network.tasks['2'].critical_override is True
        assert network.tasks['1'].critical_override is False
        assert network.tasks['1'].payload == {'zone': 'North'}

    def test_multiple_predecessors_split(self, tmp_path):
        csv_path = tmp_path / 'tasks.csv'
        csv_path.write_text(
            'id,start_date,end_date,predecessors\n'
            'A,2025-01-01,2025-01-02,\n'
            'B,2025-01-01,2025-01-02,\n'
            'C,2025-01-03,2025-01-04,A; B\n'
        )
        network = load_tasks_csv(csv_path)
        assert network.tasks['C'].predecessors == {'A', 'B'}


class TestDataFrame:
    """Reporting output."""

    def test_tasks_to_dataframe(self, chain_network):
        df = tasks_to_dataframe(chain_network)

        assert list(df['id']) == ['A', 'B', 'C']
        assert df.loc[df['id'] == 'B', 'predecessors'].iloc[0] == 'A'
        assert df.loc[df['id'] == 'C', 'duration_days'].iloc[0] == 3
        assert 'unsynced' in df.columns
