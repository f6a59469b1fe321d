import json
import os
import time
from pathlib import Path

import pandas as pd

from stat_paths import DATA_DIR, data_path
from schemas import NIGHT_FIELD_MAP

TIMEZONE = os.getenv('CSB_TZ', 'Europe/Istanbul')
SNAPSHOT_TTL = int(os.getenv('CSB_SNAPSHOT_TTL', '30'))

SEASON_AVG_NAME = os.getenv('CSB_SEASON_AVG_NAME', 'season_avg.json')
LAST10_NAME = os.getenv('CSB_LAST10_NAME', 'last10.json')
NIGHT_AVG_NAME = os.getenv('CSB_NIGHT_AVG_NAME', 'night_avg.json')
SONMAC_NAME = os.getenv('CSB_SONMAC_NAME', 'sonmac.json')
DUELLO_SON_MAC_NAME = os.getenv('CSB_DUELLO_NAME', 'duello_son_mac.json')
DUELLO_SEZON_NAME = os.getenv('CSB_DUELLO_SEZON_NAME', 'duello_sezon.json')
PERFORMANCE_NAME = os.getenv('CSB_PERFORMANCE_NAME', 'performance_data.json')


def read_json(path: Path):
    if not path.exists():
        print(f'⚠️ Snapshot not found: {path}')
        return None
    try:
        with open(path, 'r', encoding='utf-8') as file:
            return json.load(file)
    except Exception as e:
        print(f'❌ Failed to read snapshot {path}: {e}')
        return None


def canonicalize_records(records, field_map: dict | None = None) -> list[dict]:
    """Rename source keys to canonical fields and coerce stats to numbers.

    Anything that does not parse as a number becomes ``None``; ``name`` is
    kept as text.
    """
    if not isinstance(records, list):
        return []
    rows = [r for r in records if isinstance(r, dict)]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    if field_map:
        df = df.rename(columns=field_map)
    df = df.loc[:, ~df.columns.duplicated()]

    for col in df.columns:
        if col == 'name':
            continue
        df[col] = pd.to_numeric(df[col], errors='coerce')

    if 'name' not in df.columns:
        df['name'] = None

    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient='records')


def format_last_update(value) -> str | None:
    if not value:
        return None
    try:
        ts = pd.to_datetime(value, unit='s', utc=True)
        try:
            ts = ts.tz_convert(TIMEZONE)
        except Exception:
            pass
        return ts.strftime('%Y-%m-%d %H:%M')
    except Exception:
        return str(value)


class SnapshotStore:
    """Reads JSON snapshots and only re-parses files whose mtime changed."""

    def __init__(self, data_dir: Path | None = None) -> None:
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR
        self._entries: dict[str, dict] = {}

    def path(self, name: str) -> Path:
        return data_path(name, self.data_dir)

    def _mtime(self, name: str) -> float | None:
        try:
            return self.path(name).stat().st_mtime
        except OSError:
            return None

    def get(self, name: str) -> tuple[object, float | None]:
        """Return ``(data, version)``; the version changes when the file does."""
        now = time.time()
        entry = self._entries.get(name)
        if entry and now - entry['checked'] < SNAPSHOT_TTL:
            return entry['data'], entry['version']

        version = self._mtime(name)
        if entry and entry['version'] == version:
            entry['checked'] = now
            return entry['data'], version

        data = read_json(self.path(name)) if version is not None else None
        self._entries[name] = {'data': data, 'version': version, 'checked': now}
        return data, version

    def force_reload(self) -> None:
        self._entries.clear()

    def last_update(self) -> str | None:
        versions = [e['version'] for e in self._entries.values() if e.get('version')]
        return format_last_update(max(versions)) if versions else None

    def season_avg(self):
        data, version = self.get(SEASON_AVG_NAME)
        return canonicalize_records(data), version

    def last10(self):
        data, version = self.get(LAST10_NAME)
        return canonicalize_records(data), version

    def night_avg(self):
        data, version = self.get(NIGHT_AVG_NAME)
        return canonicalize_records(data, NIGHT_FIELD_MAP), version

    def sonmac(self):
        """Latest match as ``{map_name: {'team1': {...}, 'team2': {...}}}``."""
        data, version = self.get(SONMAC_NAME)
        maps = data.get('maps') if isinstance(data, dict) else None
        if not isinstance(maps, dict):
            return {}, version

        result = {}
        for map_name, map_data in maps.items():
            if not isinstance(map_data, dict):
                continue
            teams = {}
            for team_key in ('team1', 'team2'):
                team = map_data.get(team_key)
                if not isinstance(team, dict):
                    continue
                teams[team_key] = {
                    'name': team.get('name') or team_key,
                    'score': team.get('score'),
                    'players': canonicalize_records(team.get('players'))
                }
            result[map_name] = teams
        return result, version

    def duello(self, name: str):
        return self.get(name)

    def performance(self):
        data, version = self.get(PERFORMANCE_NAME)
        return (data if isinstance(data, list) else []), version
