"""Head-to-head kill matrix.

``duels[row][col]`` holds ``{'kills': n, 'deaths': m}`` where ``kills`` is how
often the row player killed the column player and ``deaths`` the reverse.
"""

from urllib.parse import quote

SELF_BACKGROUND = '#f3f4f6'
DIVIDER_COLOR = '#cccccc'
LIGHT_GREEN = '#e8f5e9'
LIGHT_RED = '#ffebee'
GRAY_BACKGROUND = '#f3f4f6'
WIN_CIRCLE = 'bg-green-600'
LOSS_CIRCLE = 'bg-red-600'
ZERO_CIRCLE = 'bg-gray-400'

REQUIRED_KEYS = ('playerRows', 'playerCols', 'duels')


def validate_duel_payload(data) -> bool:
    if not isinstance(data, dict):
        return False
    if any(data.get(key) is None for key in REQUIRED_KEYS):
        return False
    return (isinstance(data['playerRows'], list)
            and isinstance(data['playerCols'], list)
            and isinstance(data['duels'], dict))


def _count(entry: dict, key: str) -> int:
    try:
        return int(entry.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def describe_duel(counter: dict) -> str:
    return f"{counter['killer']} killed {counter['killed']} {counter['count']} times"


def build_counter(killer: str, killed: str, count: int, position: str, circle_class: str) -> dict:
    counter = {
        'killer': killer,
        'killed': killed,
        'count': count,
        'position': position,
        'css': circle_class if count > 0 else ZERO_CIRCLE
    }
    counter['title'] = describe_duel(counter)
    return counter


def triangle_background(bottom_left: str, top_right: str) -> str:
    svg = ("<svg xmlns='http://www.w3.org/2000/svg' width='100%' height='100%' "
           "viewBox='0 0 100 100' preserveAspectRatio='none'>"
           f"<polygon points='0,0 0,100 100,100' fill='{bottom_left}'/>"
           f"<polygon points='0,0 100,0 100,100' fill='{top_right}'/>"
           f"<line x1='0' y1='0' x2='100' y2='100' stroke='{DIVIDER_COLOR}' stroke-width='1'/>"
           "</svg>")
    return f'url("data:image/svg+xml;utf8,{quote(svg)}")'


def build_duel_cell(row_name: str, col_name: str, entry) -> dict:
    if row_name == col_name:
        return {'kind': 'self', 'text': '', 'style': {'background-color': SELF_BACKGROUND}}

    kills = _count(entry, 'kills') if isinstance(entry, dict) else 0
    deaths = _count(entry, 'deaths') if isinstance(entry, dict) else 0
    if kills <= 0 and deaths <= 0:
        return {'kind': 'empty', 'text': '-', 'classes': 'text-gray-400', 'style': {}}

    # Ties keep the row player on the green side
    if deaths > kills:
        bl_bg, tr_bg = LIGHT_RED, LIGHT_GREEN
        bl_circle, tr_circle = LOSS_CIRCLE, WIN_CIRCLE
    else:
        bl_bg, tr_bg = LIGHT_GREEN, LIGHT_RED
        bl_circle, tr_circle = WIN_CIRCLE, LOSS_CIRCLE

    if kills == 0:
        bl_bg = GRAY_BACKGROUND
    if deaths == 0:
        tr_bg = GRAY_BACKGROUND

    return {
        'kind': 'duel',
        'text': '',
        'kills': kills,
        'deaths': deaths,
        'style': {
            'background-image': triangle_background(bl_bg, tr_bg),
            'background-repeat': 'no-repeat',
            'background-size': '100% 100%'
        },
        'counters': [
            build_counter(row_name, col_name, kills, 'bottom-left', bl_circle),
            build_counter(col_name, row_name, deaths, 'top-right', tr_circle)
        ]
    }


def lookup_duel(duels: dict, row_name: str, col_name: str):
    entry = (duels.get(row_name) or {}).get(col_name)
    if isinstance(entry, dict) and (_count(entry, 'kills') or _count(entry, 'deaths')):
        return entry
    # Forward entry missing or all zero: mirror the reverse one with roles swapped
    reverse = (duels.get(col_name) or {}).get(row_name)
    if isinstance(reverse, dict) and (_count(reverse, 'kills') or _count(reverse, 'deaths')):
        return {'kills': reverse.get('deaths'), 'deaths': reverse.get('kills')}
    return entry


def build_duel_matrix(player_rows, player_cols, duels) -> dict:
    """Build the row/cell structure the duello template renders."""
    duels = duels or {}
    rows = []
    for row_name in player_rows or []:
        cells = [build_duel_cell(row_name, col_name, lookup_duel(duels, row_name, col_name))
                 for col_name in player_cols or []]
        rows.append({'name': row_name, 'cells': cells})
    return {'columns': list(player_cols or []), 'rows': rows}


def find_counter(matrix: dict, killer: str, killed: str) -> dict | None:
    for row in matrix.get('rows', []):
        for cell in row['cells']:
            for counter in cell.get('counters', []):
                if counter['killer'] == killer and counter['killed'] == killed:
                    return counter
    return None
