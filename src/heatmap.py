"""Heatmap colouring for rendered stat grids.

Colours are '#rrggbb' strings and gradients are ordered lists of
``{'percent': float, 'color': str}`` stops, the same shape the JSON column
configs use.
"""

import math
import numbers

WHITE = '#ffffff'
BLACK = '#000000'
INVALID_BACKGROUND = '#e5e7eb'
INVALID_TEXT = '#4b5563'
LUMINANCE_THRESHOLD = 0.4

DEFAULT_GRADIENT = [
    {'percent': 0, 'color': '#EF4444'},
    {'percent': 0.5, 'color': '#FDE68A'},
    {'percent': 1, 'color': '#22C55E'}
]

# Spreadsheet-style palette used on the season, last 10 and night tables
SHEET_GRADIENT = [
    {'percent': 0, 'color': '#f8696b'},
    {'percent': 0.5, 'color': '#ffeb84'},
    {'percent': 1, 'color': '#63be7b'}
]


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    text = str(color).strip().lstrip('#')
    if len(text) == 3:
        text = ''.join(ch * 2 for ch in text)
    if len(text) != 6:
        raise ValueError(f'Invalid hex colour: {color!r}')
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


def rgb_to_hex(rgb) -> str:
    return '#' + ''.join(f'{max(0, min(255, int(c))):02x}' for c in rgb)


def interpolate_color(color1: str, color2: str, factor: float) -> str:
    r1, g1, b1 = hex_to_rgb(color1)
    r2, g2, b2 = hex_to_rgb(color2)
    # JS Math.round semantics: halves round up
    r = math.floor(r1 + factor * (r2 - r1) + 0.5)
    g = math.floor(g1 + factor * (g2 - g1) + 0.5)
    b = math.floor(b1 + factor * (b2 - b1) + 0.5)
    return rgb_to_hex((r, g, b))


def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def calculate_color(value, min_val, max_val, stops) -> str:
    """Map ``value`` inside ``[min_val, max_val]`` onto the gradient ``stops``.

    A degenerate range or a missing value yields the middle stop's colour so
    a column with nothing to discriminate reads as neutral.
    """
    if not stops:
        return WHITE
    if max_val == min_val or _is_missing(value):
        return stops[len(stops) // 2]['color']

    value = float(value)
    clamped = max(min_val, min(max_val, value))
    percent = (clamped - min_val) / (max_val - min_val)
    if percent < stops[0]['percent']:
        return stops[0]['color']

    lower = stops[-2] if len(stops) > 1 else stops[0]
    upper = stops[-1]
    for i in range(len(stops) - 1):
        if stops[i]['percent'] <= percent <= stops[i + 1]['percent']:
            lower = stops[i]
            upper = stops[i + 1]
            break

    span = upper['percent'] - lower['percent']
    factor = 0 if span == 0 else (percent - lower['percent']) / span
    if factor <= 0:
        return lower['color']
    if factor >= 1:
        return upper['color']
    return interpolate_color(lower['color'], upper['color'], factor)


def _linearize(channel: int) -> float:
    srgb = channel / 255
    if srgb <= 0.03928:
        return srgb / 12.92
    return ((srgb + 0.055) / 1.055) ** 2.4


def get_luminance(color: str) -> float:
    r, g, b = hex_to_rgb(color)
    return 0.2126 * _linearize(r) + 0.7152 * _linearize(g) + 0.0722 * _linearize(b)


def calculate_text_color(background: str) -> str:
    """Black text on light backgrounds, white otherwise."""
    return BLACK if get_luminance(background) > LUMINANCE_THRESHOLD else WHITE


def to_number(value) -> float | None:
    """Best-effort conversion of formatted strings to float for heatmaps."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        return None if math.isnan(value) else float(value)

    text = str(value).strip()
    if not text or text in ('-', 'N/A'):
        return None

    try:
        text = text.replace(',', '')
        if text.endswith('%'):
            text = text[:-1]
        number = float(text)
    except ValueError:
        return None
    return None if math.isnan(number) else number


def apply_heatmap_to_column(rows: list, column_index: int, stops) -> None:
    """Mutates badge cells of one column in-place, adding a ``style`` dict.

    The range comes from the rows as currently rendered, so the same player
    can be coloured differently on a last-10 grid than on the season grid.
    """
    cells = []
    for row in rows:
        if row.get('placeholder'):
            continue
        row_cells = row.get('cells') or []
        if column_index >= len(row_cells):
            continue
        cell = row_cells[column_index]
        if cell.get('badge'):
            cells.append(cell)

    if not cells:
        return

    parsed = [to_number(cell.get('text')) for cell in cells]
    values = [v for v in parsed if v is not None]
    if not values:
        return

    min_val = min(values)
    max_val = max(values)

    for cell, value in zip(cells, parsed):
        if value is None:
            cell['style'] = {
                'background-color': INVALID_BACKGROUND,
                'color': INVALID_TEXT
            }
            continue
        background = calculate_color(value, min_val, max_val, stops)
        cell['style'] = {
            'background-color': background,
            'color': calculate_text_color(background)
        }
