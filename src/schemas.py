"""Column layouts for every stat grid and the key maps used to canonicalize
snapshot records before they reach a grid."""

from typing import NamedTuple

from heatmap import DEFAULT_GRADIENT, SHEET_GRADIENT

DEFAULT_SORT_KEY = 'hltv_2'
DEFAULT_SORT_DIR = 'desc'


class Column(NamedTuple):
    field: str
    label: str
    decimals: int | None = None
    is_percent: bool = False
    is_heat: bool = False
    is_badge: bool = False
    is_diff: bool = False
    gradient: list | None = None
    missing_text: str | None = None


def heat(field: str, label: str, decimals: int, gradient=None) -> Column:
    return Column(field, label, decimals, is_heat=True, is_badge=True,
                  gradient=gradient or SHEET_GRADIENT)


NAME_COLUMN = Column('name', 'Oyuncu')

SEASON_COLUMNS = (
    NAME_COLUMN,
    heat('hltv_2', 'HLTV2', 2),
    heat('adr', 'ADR', 1),
    heat('kd', 'K/D', 2),
    Column('mvp', 'MVP', 0),
    Column('kills', 'Kills', 1),
    Column('deaths', 'Deaths', 1),
    Column('assists', 'Assists', 1),
    Column('hs', 'HS', 1),
    Column('hs_ratio', 'HS/Kill ratio', 1, is_percent=True),
    Column('first_kill', 'First Kill', 1),
    Column('first_death', 'First Death', 1),
    Column('bomb_planted', 'Bomb Planted', 1),
    Column('bomb_defused', 'Bomb Defused', 1),
    Column('hltv', 'HLTV', 2),
    Column('kast', 'KAST', 1, is_percent=True),
    Column('utl_dmg', 'Utility Damage', 1),
    Column('two_kills', '2 kills', 1),
    Column('three_kills', '3 kills', 1),
    Column('four_kills', '4 kills', 1),
    Column('five_kills', '5 kills', 1),
    Column('matches', 'Nr of Matches', 0),
    Column('win_rate', 'WIN RATE (%)', 1, is_percent=True),
    Column('avg_clutches', 'Nr of clutches per game', 2),
    Column('avg_clutches_won', 'Clutches Won', 1),
    Column('clutch_success', 'Successful Clutch (%)', 1, is_percent=True),
)

LAST10_COLUMNS = SEASON_COLUMNS

NIGHT_COLUMNS = (
    NAME_COLUMN,
    heat('hltv_2', 'HLTV2', 2),
    heat('adr', 'ADR', 1),
    heat('kd', 'K/D', 2),
    Column('hltv_2_diff', 'HLTV2 DIFF', 2, is_diff=True),
    Column('adr_diff', 'ADR DIFF', 1, is_diff=True),
    Column('mvp', 'MVP', 0),
    Column('kills', 'Kills', 0),
    Column('deaths', 'Deaths', 0),
    Column('assists', 'Assists', 0),
    Column('hs', 'HS', 0),
    Column('hs_ratio', 'HS/Kill ratio', 1, is_percent=True),
    Column('first_kill', 'First Kill', 0),
    Column('first_death', 'First Death', 0),
    Column('bomb_planted', 'Bomb Planted', 0),
    Column('bomb_defused', 'Bomb Defused', 0),
    Column('hltv', 'HLTV', 2),
    Column('kast', 'KAST', 1, is_percent=True),
    Column('utl_dmg', 'Utility Damage', 1),
    Column('two_kills', '2 kills', 0),
    Column('three_kills', '3 kills', 0),
    Column('four_kills', '4 kills', 0),
    Column('five_kills', '5 kills', 0),
    Column('matches', 'Nr of Matches', 0),
    Column('clutches', 'Clutch Opportunity', 0),
    Column('clutches_won', 'Clutches Won', 0),
)

SONMAC_COLUMNS = (
    NAME_COLUMN,
    heat('hltv_2', 'HLTV2', 2, DEFAULT_GRADIENT),
    heat('adr', 'ADR', 0, DEFAULT_GRADIENT),
    heat('kd', 'K/D', 2, DEFAULT_GRADIENT),
    Column('mvp', 'MVP', 1),
    Column('kills', 'Kills', 0),
    Column('deaths', 'Deaths', 0),
    Column('assists', 'Assists', 0),
    Column('hs', 'HS', 0),
    Column('hs_ratio', 'HS/Kill ratio', 1),
    Column('first_kill', 'First Kill', 0),
    Column('first_death', 'First Death', 0),
    Column('bomb_planted', 'Bomb Planted', 0),
    Column('bomb_defused', 'Bomb Defused', 0),
    Column('hltv', 'HLTV', 2),
    Column('kast', 'KAST', 2, is_percent=True),
    Column('utl_dmg', 'Utility Damage', 0),
    Column('two_kills', '2 kills', 0),
    Column('three_kills', '3 kills', 0),
    Column('four_kills', '4 kills', 0),
    Column('five_kills', '5 kills', 0),
    Column('score', 'Score', 0),
    Column('clutches', 'Nr of clutches', 0),
    Column('clutches_won', 'Clutches Won', 0),
)

# Night-average snapshots use display-style keys
NIGHT_FIELD_MAP = {
    'HLTV 2': 'hltv_2',
    'ADR': 'adr',
    'K/D': 'kd',
    'HLTV2 DIFF': 'hltv_2_diff',
    'ADR DIFF': 'adr_diff',
    'MVP': 'mvp',
    'Kills': 'kills',
    'Deaths': 'deaths',
    'Assists': 'assists',
    'HS': 'hs',
    'HS/Kill ratio': 'hs_ratio',
    'First Kill': 'first_kill',
    'First Death': 'first_death',
    'Bomb Planted': 'bomb_planted',
    'Bomb Defused': 'bomb_defused',
    'HLTV': 'hltv',
    'KAST': 'kast',
    'Utility Damage': 'utl_dmg',
    '2 kills': 'two_kills',
    '3 kills': 'three_kills',
    '4 kills': 'four_kills',
    '5 kills': 'five_kills',
    'Nr of Matches': 'matches',
    'Clutch Opportunity': 'clutches',
    'Clutches Won': 'clutches_won',
}
