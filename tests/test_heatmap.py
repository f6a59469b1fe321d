"""
Tests for heatmap.py: gradient mapping, text contrast and column colouring.

Usage:
    pytest tests/test_heatmap.py
"""

from heatmap import (
    DEFAULT_GRADIENT, INVALID_BACKGROUND, INVALID_TEXT, apply_heatmap_to_column,
    calculate_color, calculate_text_color, get_luminance, interpolate_color, to_number
)

RED = DEFAULT_GRADIENT[0]['color']
YELLOW = DEFAULT_GRADIENT[1]['color']
GREEN = DEFAULT_GRADIENT[2]['color']


def badge_rows(texts):
    return [{'placeholder': False, 'cells': [{'text': 'p'}, {'text': t, 'badge': True, 'style': {}}]}
            for t in texts]


def test_extremes_map_to_end_stops():
    """Minimum and maximum values get the exact end stop colours."""
    assert calculate_color(10, 10, 30, DEFAULT_GRADIENT) == RED
    assert calculate_color(30, 10, 30, DEFAULT_GRADIENT) == GREEN
    assert calculate_color(20, 10, 30, DEFAULT_GRADIENT) == YELLOW


def test_degenerate_range_returns_middle_stop():
    for value in (5, 0, 100, None, float('nan')):
        assert calculate_color(value, 5, 5, DEFAULT_GRADIENT) == YELLOW


def test_missing_value_and_empty_stops():
    assert calculate_color(None, 0, 10, DEFAULT_GRADIENT) == YELLOW
    assert calculate_color(3, 0, 10, []) == '#ffffff'


def test_values_outside_range_are_clamped():
    assert calculate_color(-50, 0, 10, DEFAULT_GRADIENT) == RED
    assert calculate_color(500, 0, 10, DEFAULT_GRADIENT) == GREEN


def test_interpolation_between_stops():
    stops = [{'percent': 0, 'color': '#000000'}, {'percent': 1, 'color': '#ffffff'}]
    assert calculate_color(5, 0, 10, stops) == '#808080'
    assert interpolate_color('#000000', '#ff0000', 0.25) == '#400000'


def test_percent_beyond_last_stop_uses_last_pair():
    stops = [{'percent': 0, 'color': '#000000'},
             {'percent': 0.25, 'color': '#ff0000'},
             {'percent': 0.5, 'color': '#00ff00'}]
    assert calculate_color(10, 0, 10, stops) == '#00ff00'


def test_luminance_and_text_colour():
    assert get_luminance('#ffffff') > get_luminance('#000000')
    assert calculate_text_color('#ffffff') == '#000000'
    assert calculate_text_color('#000000') == '#ffffff'
    assert calculate_text_color(YELLOW) == '#000000'
    assert calculate_text_color('#EF4444') == '#ffffff'
    assert calculate_text_color('#123456') == calculate_text_color('#123456')


def test_to_number_parses_formatted_text():
    assert to_number('1,234.5') == 1234.5
    assert to_number('45.0%') == 45.0
    assert to_number('N/A') is None
    assert to_number('-') is None
    assert to_number(None) is None
    assert to_number(3) == 3.0


def test_column_colours_use_visible_range():
    rows = badge_rows(['10', '20', '30'])
    apply_heatmap_to_column(rows, 1, DEFAULT_GRADIENT)
    backgrounds = [row['cells'][1]['style']['background-color'] for row in rows]
    assert backgrounds == [RED, YELLOW, GREEN]
    assert rows[1]['cells'][1]['style']['color'] == '#000000'
    # Non-badge cells are left alone
    assert 'style' not in rows[0]['cells'][0]


def test_unparseable_cells_are_grey_and_ignored_for_range():
    rows = badge_rows(['1.00', 'N/A', '2.00'])
    apply_heatmap_to_column(rows, 1, DEFAULT_GRADIENT)
    assert rows[1]['cells'][1]['style'] == {'background-color': INVALID_BACKGROUND, 'color': INVALID_TEXT}
    assert rows[0]['cells'][1]['style']['background-color'] == RED
    assert rows[2]['cells'][1]['style']['background-color'] == GREEN


def test_placeholder_and_all_invalid_columns_untouched():
    placeholder = [{'placeholder': True, 'cells': []}]
    apply_heatmap_to_column(placeholder, 1, DEFAULT_GRADIENT)
    assert placeholder == [{'placeholder': True, 'cells': []}]

    rows = badge_rows(['N/A', 'N/A'])
    apply_heatmap_to_column(rows, 1, DEFAULT_GRADIENT)
    assert all(row['cells'][1]['style'] == {} for row in rows)
