import math
import numbers
from functools import cmp_to_key

SORT_DIRECTIONS = ('asc', 'desc')


def _is_missing(value) -> bool:
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def parse_number(value) -> float | None:
    """Numeric value of a sort operand, accepting numeric strings."""
    if isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        return float(value)
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def compare_values(a, b) -> int:
    """Ascending comparison of two record values.

    Missing values sit below everything else; two numbers (or numeric
    strings) compare numerically and anything else falls back to a
    case-insensitive string comparison.
    """
    a_missing = _is_missing(a)
    b_missing = _is_missing(b)
    if a_missing or b_missing:
        if a_missing and b_missing:
            return 0
        return -1 if a_missing else 1

    num_a = parse_number(a)
    num_b = parse_number(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)

    str_a = str(a).lower()
    str_b = str(b).lower()
    return (str_a > str_b) - (str_a < str_b)


def sort_records(records, key: str, direction: str = 'desc') -> list:
    """Return a new list of ``records`` ordered by ``key``.

    The input is never mutated. Ties keep their input order in both
    directions.
    """
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f'Unknown sort direction: {direction!r}')

    sign = 1 if direction == 'asc' else -1

    def compare(left, right):
        return sign * compare_values(left.get(key), right.get(key))

    return sorted(records, key=cmp_to_key(compare))
