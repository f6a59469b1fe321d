"""Sortable stat grids.

A ``GridInstance`` keeps the dataset it was loaded with as an immutable
baseline. Every sort works on a fresh copy of that baseline and the visible
rows are rebuilt from scratch, so repeated header clicks never drift or drop
rows. Heat columns are repainted after every render using only the rows that
are currently shown.
"""

import math
import numbers

from heatmap import apply_heatmap_to_column, DEFAULT_GRADIENT
from sorting import sort_records, SORT_DIRECTIONS

UNINITIALIZED = 'uninitialized'
RENDERED = 'rendered'

NO_DATA_TEXT = 'No data available.'
MISSING_TEXT = 'N/A'
UNKNOWN_PLAYER = 'Unknown Player'


class GridStateError(RuntimeError):
    """Raised when a grid operation is called in the wrong state."""


def format_stat(value, decimals: int = 1) -> str:
    if value is None or isinstance(value, bool):
        return MISSING_TEXT
    if not isinstance(value, numbers.Real) or math.isnan(value):
        return MISSING_TEXT
    return f'{value:.{decimals}f}'


def diff_class(value) -> str:
    if not isinstance(value, numbers.Real) or isinstance(value, bool) or math.isnan(value):
        return ''
    if value > 0:
        return 'text-green-600'
    if value < 0:
        return 'text-red-600'
    return 'text-gray-500'


def build_cell(record: dict, column, index: int) -> dict:
    value = record.get(column.field)
    classes = ['text-left' if index == 0 else 'text-center']

    if column.field == 'name':
        text = str(value) if value not in (None, '') else UNKNOWN_PLAYER
        classes.append('font-medium text-gray-900 whitespace-nowrap')
    elif value is None:
        text = column.missing_text or MISSING_TEXT
        if column.missing_text:
            classes.append('text-gray-400')
    elif column.is_percent:
        text = format_stat(value, 1 if column.decimals is None else column.decimals)
        if text != MISSING_TEXT:
            text = f'{text}%'
    elif column.decimals is not None:
        text = format_stat(value, column.decimals)
    else:
        text = str(value)

    if column.is_diff:
        css = diff_class(value)
        if css:
            classes.append(css)

    return {
        'field': column.field,
        'value': value,
        'text': text,
        'classes': ' '.join(classes),
        'badge': column.is_badge or column.is_heat,
        'style': {}
    }


def build_rows(records, columns) -> list[dict]:
    if not records:
        return [{
            'placeholder': True,
            'colspan': len(columns),
            'text': NO_DATA_TEXT,
            'cells': []
        }]

    rows = []
    for record in records:
        rows.append({
            'placeholder': False,
            'name': record.get('name'),
            'cells': [build_cell(record, col, i) for i, col in enumerate(columns)]
        })
    return rows


class GridInstance:
    """One rendered table and its sort state."""

    def __init__(self, grid_id: str, columns, default_sort_key: str,
                 default_sort_dir: str = 'desc', title: str | None = None) -> None:
        if default_sort_dir not in SORT_DIRECTIONS:
            raise ValueError(f'Unknown sort direction: {default_sort_dir!r}')
        self.grid_id = grid_id
        self.columns = tuple(columns)
        self.title = title or grid_id
        self.default_sort_key = default_sort_key
        self.default_sort_dir = default_sort_dir
        self.state = UNINITIALIZED
        self.sort_key = None
        self.sort_dir = 'desc'
        self.rows: list[dict] = []
        self._baseline: tuple = ()

    @property
    def baseline(self) -> list[dict]:
        return [dict(record) for record in self._baseline]

    def has_column(self, field: str) -> bool:
        return any(col.field == field for col in self.columns)

    def heat_columns(self) -> list[tuple[int, str]]:
        return [(i, col.field) for i, col in enumerate(self.columns) if col.is_heat]

    def load(self, records) -> 'GridInstance':
        if self.state != UNINITIALIZED:
            raise GridStateError(f'Grid {self.grid_id} is already loaded; use reload()')
        self._capture(records)
        return self

    def reload(self, records) -> 'GridInstance':
        if self.state != RENDERED:
            raise GridStateError(f'Grid {self.grid_id} has not been loaded yet')
        self._capture(records)
        return self

    def resort(self, key: str) -> 'GridInstance':
        if self.state != RENDERED:
            raise GridStateError(f'Grid {self.grid_id} has not been loaded yet')
        direction = 'asc' if key == self.sort_key and self.sort_dir == 'desc' else 'desc'
        self._render(key, direction)
        return self

    def colorize(self, column_index: int) -> None:
        gradient = self.columns[column_index].gradient or DEFAULT_GRADIENT
        apply_heatmap_to_column(self.rows, column_index, gradient)

    def header_state(self) -> list[dict]:
        headers = []
        for col in self.columns:
            active = col.field == self.sort_key
            css = ['sortable-header']
            if active:
                css.extend(['sort-active', f'sort-{self.sort_dir}'])
            headers.append({
                'field': col.field,
                'label': col.label,
                'active': active,
                'direction': self.sort_dir if active else None,
                'css': ' '.join(css)
            })
        return headers

    def visible_names(self) -> list:
        return [row.get('name') for row in self.rows if not row.get('placeholder')]

    def to_dict(self) -> dict:
        return {
            'grid_id': self.grid_id,
            'title': self.title,
            'state': self.state,
            'sort_key': self.sort_key,
            'sort_dir': self.sort_dir,
            'headers': self.header_state(),
            'rows': self.rows
        }

    def _capture(self, records) -> None:
        self._baseline = tuple(dict(record) for record in (records or []))
        self._render(self.default_sort_key, self.default_sort_dir)

    def _render(self, key: str, direction: str) -> None:
        ordered = sort_records(self.baseline, key, direction)
        self.rows = build_rows(ordered, self.columns)
        self.sort_key = key
        self.sort_dir = direction
        self.state = RENDERED
        if not ordered:
            return
        for index, _field in self.heat_columns():
            self.colorize(index)


class GridRegistry:
    """Owns every grid shown by the dashboard, keyed by grid id.

    Each grid remembers the snapshot version it was loaded from so a page
    view only reloads a grid when its source file actually changed.
    """

    def __init__(self) -> None:
        self._grids: dict[str, GridInstance] = {}
        self._versions: dict[str, object] = {}

    def __contains__(self, grid_id) -> bool:
        return grid_id in self._grids

    def __len__(self) -> int:
        return len(self._grids)

    def create(self, grid_id: str, columns, default_sort_key: str,
               default_sort_dir: str = 'desc', title: str | None = None) -> GridInstance:
        if grid_id in self._grids:
            raise GridStateError(f'Grid {grid_id} already exists')
        grid = GridInstance(grid_id, columns, default_sort_key, default_sort_dir, title)
        self._grids[grid_id] = grid
        return grid

    def get(self, grid_id: str) -> GridInstance:
        return self._grids[grid_id]

    def ensure(self, grid_id: str, columns, default_sort_key: str,
               default_sort_dir: str = 'desc', title: str | None = None) -> GridInstance:
        """Return the grid, creating it first; a changed column layout replaces it."""
        grid = self._grids.get(grid_id)
        if grid is not None and grid.columns == tuple(columns):
            return grid
        self.discard(grid_id)
        return self.create(grid_id, columns, default_sort_key, default_sort_dir, title)

    def load_or_reload(self, grid_id: str, records) -> GridInstance:
        grid = self.get(grid_id)
        if grid.state == UNINITIALIZED:
            return grid.load(records)
        return grid.reload(records)

    def sync(self, grid_id: str, records, version) -> GridInstance:
        grid = self.get(grid_id)
        if grid.state == UNINITIALIZED or self._versions.get(grid_id) != version:
            self.load_or_reload(grid_id, records)
            self._versions[grid_id] = version
        return grid

    def grids_with_prefix(self, prefix: str) -> list[GridInstance]:
        return [grid for grid_id, grid in self._grids.items() if grid_id.startswith(prefix)]

    def discard(self, grid_id: str) -> None:
        self._grids.pop(grid_id, None)
        self._versions.pop(grid_id, None)

    def clear_versions(self) -> None:
        self._versions.clear()
