import os
import re
from pathlib import Path
from threading import Lock
from urllib.parse import urlsplit

from flask import Flask, render_template, request, redirect, url_for, jsonify

from duels import build_duel_matrix, validate_duel_payload
from grids import GridRegistry, GridStateError
from performance import DEFAULT_METRIC, PERFORMANCE_METRICS, AVERAGE_FIELD, build_performance_table
from schemas import (
    DEFAULT_SORT_DIR, DEFAULT_SORT_KEY, LAST10_COLUMNS, NIGHT_COLUMNS,
    SEASON_COLUMNS, SONMAC_COLUMNS
)
from snapshots import SnapshotStore, DUELLO_SEZON_NAME, DUELLO_SON_MAC_NAME

# Setup Flask with correct template and static paths for Docker
APP_ROOT = Path(__file__).parent.parent
TEMPLATE_DIR = APP_ROOT / 'templates'
STATIC_DIR = APP_ROOT / 'static'

APP_TITLE = os.getenv('CSB_SITE_TITLE', 'CS Batağı')

SEASON_GRID = 'season-avg'
LAST10_GRID = 'last10'
NIGHT_GRID = 'night-avg'
PERFORMANCE_PREFIX = 'performance-'
SONMAC_PREFIX = 'sonmac-'
TEAM_COLORS = {'team1': 'blue', 'team2': 'green'}

app = Flask(__name__, template_folder=str(TEMPLATE_DIR), static_folder=str(STATIC_DIR))
app.config['SEND_FILE_MAX_AGE_DEFAULT'] = 3600

STORE = SnapshotStore()
GRIDS = GridRegistry()

# Every request reads and mutates the shared grids; waitress serves from a thread pool
GRID_LOCK = Lock()


@app.template_filter('inline_style')
def inline_style_filter(style) -> str:
    """Render a cell style dict as a CSS declaration list."""
    if not style:
        return ''
    return '; '.join(f'{prop}: {value} !important' for prop, value in style.items())


def slugify(value: str) -> str:
    """Lowercase id safe for a single URL path segment."""
    slug = re.sub(r'[^a-z0-9_-]+', '_', str(value).strip().lower()).strip('_')
    return slug or 'x'


def unique_id(base: str, taken: set) -> str:
    candidate = base
    suffix = 2
    while candidate in taken:
        candidate = f'{base}-{suffix}'
        suffix += 1
    taken.add(candidate)
    return candidate


def sonmac_grid_id(map_id: str, team_name: str, color: str) -> str:
    return f'{SONMAC_PREFIX}{map_id}-{slugify(team_name)}-{color}'


def performance_grid_id(metric: str) -> str:
    return f'{PERFORMANCE_PREFIX}{metric}'


def safe_next(value: str | None) -> str:
    """Only same-site absolute paths are allowed as redirect targets."""
    parts = urlsplit(value or '')
    if (not value or not value.startswith('/') or value.startswith('//')
            or '\\' in value or parts.scheme or parts.netloc):
        return url_for('index')
    return value


def sync_grid(grid_id: str, columns, records, version, title: str):
    GRIDS.ensure(grid_id, columns, DEFAULT_SORT_KEY, DEFAULT_SORT_DIR, title)
    return GRIDS.sync(grid_id, records, version)


def sync_season():
    records, version = STORE.season_avg()
    return sync_grid(SEASON_GRID, SEASON_COLUMNS, records, version, 'Sezon Ortalaması')


def sync_last10():
    records, version = STORE.last10()
    return sync_grid(LAST10_GRID, LAST10_COLUMNS, records, version, 'Son 10 Maç')


def sync_night():
    records, version = STORE.night_avg()
    return sync_grid(NIGHT_GRID, NIGHT_COLUMNS, records, version, 'Gece Ortalaması')


def sync_sonmac() -> list[dict]:
    """One grid per team per map; grids for maps that disappeared are dropped."""
    maps, version = STORE.sonmac()
    sections = []
    current = set()
    map_ids = set()
    for map_name, teams in maps.items():
        map_id = unique_id(slugify(map_name), map_ids)
        section = {'map': map_name, 'map_id': map_id, 'teams': []}
        for team_key, team in teams.items():
            color = TEAM_COLORS.get(team_key, 'gray')
            grid_id = unique_id(sonmac_grid_id(map_id, team['name'], color), current)
            grid = sync_grid(grid_id, SONMAC_COLUMNS, team['players'], version, team['name'])
            section['teams'].append({
                'name': team['name'],
                'score': team['score'],
                'color': color,
                'grid': grid
            })
        sections.append(section)

    for grid in GRIDS.grids_with_prefix(SONMAC_PREFIX):
        if grid.grid_id not in current:
            GRIDS.discard(grid.grid_id)
    return sections


def sync_performance(metric: str):
    data, version = STORE.performance()
    columns, records = build_performance_table(data, metric)
    grid_id = performance_grid_id(metric)
    GRIDS.ensure(grid_id, columns, AVERAGE_FIELD, 'desc', PERFORMANCE_METRICS[metric])
    return GRIDS.sync(grid_id, records, version)


def sync_all() -> None:
    sync_season()
    sync_last10()
    sync_night()
    sync_sonmac()
    for metric in PERFORMANCE_METRICS:
        sync_performance(metric)


def load_duel_matrix(name: str):
    data, _version = STORE.duello(name)
    if not validate_duel_payload(data):
        return None
    return build_duel_matrix(data['playerRows'], data['playerCols'], data['duels'])


def render_stats_page(grid, page: str):
    return render_template('stats.html',
                           app_title=APP_TITLE,
                           page=page,
                           grid=grid,
                           last_update=STORE.last_update())


@app.route('/')
def index():
    with GRID_LOCK:
        return render_stats_page(sync_season(), 'season')


@app.route('/last10')
def last10():
    with GRID_LOCK:
        return render_stats_page(sync_last10(), 'last10')


@app.route('/night')
def night():
    with GRID_LOCK:
        return render_stats_page(sync_night(), 'night')


@app.route('/sonmac')
def sonmac():
    """Latest match, one tab per map."""
    with GRID_LOCK:
        sections = sync_sonmac()
        selected = request.args.get('map')
        if sections and selected not in {s['map_id'] for s in sections}:
            selected = sections[0]['map_id']
        return render_template('sonmac.html',
                               app_title=APP_TITLE,
                               page='sonmac',
                               sections=sections,
                               selected_map=selected,
                               last_update=STORE.last_update())


@app.route('/performance')
def performance():
    """Per-match table for one metric, picked with ?metric=."""
    metric = request.args.get('metric', DEFAULT_METRIC)
    if metric not in PERFORMANCE_METRICS:
        metric = DEFAULT_METRIC
    with GRID_LOCK:
        grid = sync_performance(metric)
        return render_template('performance.html',
                               app_title=APP_TITLE,
                               page='performance',
                               grid=grid,
                               metric=metric,
                               metrics=PERFORMANCE_METRICS,
                               last_update=STORE.last_update())


@app.route('/duello')
def duello():
    with GRID_LOCK:
        return render_template('duello.html',
                               app_title=APP_TITLE,
                               page='duello',
                               heading='Duello (Son Maç)',
                               matrix=load_duel_matrix(DUELLO_SON_MAC_NAME),
                               last_update=STORE.last_update())


@app.route('/duello/sezon')
def duello_sezon():
    with GRID_LOCK:
        return render_template('duello.html',
                               app_title=APP_TITLE,
                               page='duello_sezon',
                               heading='Duello (Sezon)',
                               matrix=load_duel_matrix(DUELLO_SEZON_NAME),
                               last_update=STORE.last_update())


@app.route('/grids/<grid_id>/sort', methods=['POST'])
def sort_grid(grid_id: str):
    """Header activation from the server-rendered pages."""
    key = request.form.get('key', '')
    next_url = safe_next(request.form.get('next'))
    with GRID_LOCK:
        try:
            grid = GRIDS.get(grid_id)
            if grid.has_column(key):
                grid.resort(key)
            else:
                print(f'⚠️ Sort request ignored for {grid_id}: unknown column {key!r}')
        except (KeyError, GridStateError) as e:
            print(f'⚠️ Sort request ignored for {grid_id}: {e}')
    return redirect(next_url)


@app.route('/api/grids/<grid_id>')
def grid_state(grid_id: str):
    with GRID_LOCK:
        if grid_id not in GRIDS:
            return jsonify({'error': f'Unknown grid: {grid_id}'}), 404
        return jsonify(GRIDS.get(grid_id).to_dict())


@app.route('/api/grids/<grid_id>/sort', methods=['POST'])
def api_sort_grid(grid_id: str):
    payload = request.get_json(silent=True) or {}
    key = payload.get('key') or request.form.get('key') or request.args.get('key')
    if not key:
        return jsonify({'error': 'Missing sort key'}), 400
    with GRID_LOCK:
        if grid_id not in GRIDS:
            return jsonify({'error': f'Unknown grid: {grid_id}'}), 404
        grid = GRIDS.get(grid_id)
        if not grid.has_column(key):
            return jsonify({'error': f'Unknown sort key: {key}'}), 400
        try:
            grid.resort(key)
        except GridStateError as e:
            return jsonify({'error': str(e)}), 409
        return jsonify(grid.to_dict())


@app.route('/api/reload', methods=['POST'])
def api_reload():
    """Re-read every snapshot and reload grids whose data changed."""
    with GRID_LOCK:
        STORE.force_reload()
        GRIDS.clear_versions()
        sync_all()
        return jsonify({'grids': len(GRIDS), 'last_update': STORE.last_update()})


if __name__ == '__main__':
    port = int(os.getenv('CSB_WEB_PORT', '8090'))
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'

    if debug_mode:
        print(f'🔥 Starting in DEBUG mode with hot reload on port {port}')
        app.run(host='0.0.0.0', port=port, debug=True, use_reloader=True)
    else:
        from waitress import serve
        serve(app, host='0.0.0.0', port=port)
