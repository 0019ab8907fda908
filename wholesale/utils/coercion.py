"""Convert JSON/form values to column types. Each raises ValueError with a field message."""

from datetime import date, datetime

_TRUE_STRINGS = {'1', 'true', 'yes', 'on'}
_FALSE_STRINGS = {'0', 'false', 'no', 'off', ''}


def to_int(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError('must be an integer')
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError('must be an integer')
        return int(value)
    if isinstance(value, str):
        value = value.strip()
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError('must be an integer') from None


def to_float(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValueError('must be a number')
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError('must be a number') from None


def to_date(value):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValueError('must be a date (YYYY-MM-DD)') from None
    raise ValueError('must be a date (YYYY-MM-DD)')


def to_bool(value):
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return value.strip().lower() in _TRUE_STRINGS
    raise ValueError('must be true or false')
