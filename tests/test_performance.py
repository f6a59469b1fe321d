"""
Tests for performance.py: the player x match-date table.

Usage:
    pytest tests/test_performance.py
"""

import pytest

from grids import GridInstance
from performance import AVERAGE_FIELD, MISSING_CELL, build_performance_table, date_label

DATA = [
    {'name': 'Zed', 'performance': [
        {'match_date': '2024-03-08', 'hltv_2': 1.4, 'adr': 95.0},
        {'match_date': '2024-03-01', 'hltv_2': 1.0, 'adr': 70.0},
    ]},
    {'name': 'amy', 'performance': [
        {'match_date': '2024-03-01', 'hltv_2': 0.8, 'adr': None},
    ]},
    {'name': 'Bob', 'performance': []},
    {'name': 'Cem', 'performance': [
        {'match_date': '2024-03-08', 'hltv_2': 'n/a', 'adr': 60.0},
    ]},
]


def test_dates_become_ordered_columns():
    columns, _records = build_performance_table(DATA, 'hltv_2')
    fields = [c.field for c in columns]
    assert fields == ['name', '2024-03-01', '2024-03-08', AVERAGE_FIELD]
    assert [c.label for c in columns][1:3] == ['01.03', '08.03']
    assert all(c.missing_text == MISSING_CELL for c in columns[1:])


def test_records_carry_values_and_average():
    _columns, records = build_performance_table(DATA, 'hltv_2')
    by_name = {r['name']: r for r in records}
    assert by_name['Zed']['2024-03-01'] == 1.0
    assert by_name['Zed'][AVERAGE_FIELD] == pytest.approx(1.2)
    assert by_name['amy']['2024-03-08'] is None
    assert by_name['Bob'][AVERAGE_FIELD] is None
    assert by_name['Cem'][AVERAGE_FIELD] is None


def test_grid_orders_by_average_with_empty_players_last():
    columns, records = build_performance_table(DATA, 'hltv_2')
    grid = GridInstance('performance-hltv_2', columns, AVERAGE_FIELD).load(records)
    # Bob and Cem have no values and keep their alphabetical order
    assert grid.visible_names() == ['Zed', 'amy', 'Bob', 'Cem']
    missing = grid.rows[1]['cells'][2]
    assert missing['text'] == MISSING_CELL
    assert 'text-gray-400' in missing['classes']


def test_metric_selects_values():
    columns, records = build_performance_table(DATA, 'adr')
    grid = GridInstance('performance-adr', columns, AVERAGE_FIELD).load(records)
    assert grid.visible_names() == ['Zed', 'Cem', 'amy', 'Bob']


def test_bad_input():
    columns, records = build_performance_table(None)
    assert records == []
    assert [c.field for c in columns] == ['name', AVERAGE_FIELD]
    _columns, records = build_performance_table([{'name': 'A', 'performance': [{'hltv_2': 1}]}])
    assert records == [{'name': 'A', AVERAGE_FIELD: None}]
    with pytest.raises(ValueError):
        build_performance_table(DATA, 'kills')


def test_date_label():
    assert date_label('2024-12-31') == '31.12'
