"""Player x match-date performance table.

``performance_data.json`` holds one entry per player::

    [{"name": "A", "performance": [{"match_date": "2024-03-01", "hltv_2": 1.1, "adr": 80.2}]}]

Each metric gets its own grid with one column per match date. Rows default to
the player's average for that metric, best first, players without a single
value last.
"""

import pandas as pd

from schemas import Column, NAME_COLUMN

PERFORMANCE_METRICS = {
    'hltv_2': 'HLTV 2.0',
    'adr': 'ADR'
}
DEFAULT_METRIC = 'hltv_2'
AVERAGE_FIELD = 'average'
MISSING_CELL = '-'


def _players(data) -> list[dict]:
    if not isinstance(data, list):
        return []
    players = [p for p in data if isinstance(p, dict) and p.get('name')]
    return sorted(players, key=lambda p: str(p['name']).lower())


def _entries_frame(players, metric: str) -> pd.DataFrame:
    entries = []
    for player in players:
        for entry in player.get('performance') or []:
            if isinstance(entry, dict) and entry.get('match_date'):
                entries.append({
                    'name': player['name'],
                    'match_date': entry['match_date'],
                    'value': entry.get(metric)
                })

    if not entries:
        return pd.DataFrame(columns=['name', 'match_date', 'value', 'date', 'date_key'])

    df = pd.DataFrame(entries)
    df['value'] = pd.to_numeric(df['value'], errors='coerce')
    df['date'] = pd.to_datetime(df['match_date'], errors='coerce', utc=True, format='mixed')
    df = df.dropna(subset=['date'])
    df['date_key'] = df['date'].dt.strftime('%Y-%m-%d')
    return df.sort_values('date', kind='stable')


def date_label(date_key: str) -> str:
    """'2024-03-01' -> '01.03'"""
    return pd.Timestamp(date_key).strftime('%d.%m')


def performance_columns(date_keys) -> tuple:
    columns = [NAME_COLUMN]
    columns.extend(Column(key, date_label(key), 2, missing_text=MISSING_CELL) for key in date_keys)
    columns.append(Column(AVERAGE_FIELD, 'Ort.', 2, missing_text=MISSING_CELL))
    return tuple(columns)


def build_performance_table(data, metric: str = DEFAULT_METRIC) -> tuple[tuple, list[dict]]:
    """Return ``(columns, records)`` for one metric.

    Records carry one key per match date plus ``average``; dates a player
    did not play, and averages with nothing to average, are ``None``.
    """
    if metric not in PERFORMANCE_METRICS:
        raise ValueError(f'Unknown performance metric: {metric!r}')

    players = _players(data)
    if not players:
        return performance_columns([]), []

    df = _entries_frame(players, metric)
    date_keys = df['date_key'].drop_duplicates().tolist()
    table = None
    if date_keys:
        # Later entries for the same player and day win
        latest = df.drop_duplicates(subset=['name', 'date_key'], keep='last')
        table = latest.pivot(index='name', columns='date_key', values='value')

    records = []
    for player in players:
        name = player['name']
        has_row = table is not None and name in table.index
        values = table.loc[name] if has_row else pd.Series(dtype=float)
        record = {'name': name}
        for key in date_keys:
            value = values.get(key)
            record[key] = None if value is None or pd.isna(value) else float(value)
        present = [record[key] for key in date_keys if record[key] is not None]
        record[AVERAGE_FIELD] = sum(present) / len(present) if present else None
        records.append(record)
    return performance_columns(date_keys), records
