"""
Literal grammars and millisecond-offset helpers for the binders.

Every parser accepts exactly one grammar, without surrounding whitespace,
and raises MalformedLiteral for anything else:

- date: ``YYYY-M[M]-D[D]``
- timestamp: ``YYYY-M[M]-D[D] H[H]:MM:SS[.f]`` with up to nine fraction digits
- time: ``HH:MM:SS``
- decimal: optional sign, digits with an optional fraction, optional exponent
- integer: optional sign followed by digits, any length

Timestamps with more than six fraction digits are returned as a
pandas.Timestamp so the nanoseconds are not lost.
"""
import datetime
import decimal
import re

import pandas as pd
from dateutil import tz
from dbbind.exceptions import MalformedLiteral

__all__ = [
    'parse_date',
    'parse_timestamp',
    'parse_time',
    'parse_decimal',
    'parse_integer',
    'epoch_millis',
    'from_epoch_millis',
]

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=tz.UTC)
MILLISECOND = datetime.timedelta(milliseconds=1)

_DATE = re.compile(r'(\d{4})-(\d{1,2})-(\d{1,2})')
_TIMESTAMP = re.compile(r'(\d{4})-(\d{1,2})-(\d{1,2}) (\d{1,2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?')
_TIME = re.compile(r'(\d{2}):(\d{2}):(\d{2})')
_DECIMAL = re.compile(r'[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')
_INTEGER = re.compile(r'[+-]?\d+')


def _match(pattern: re.Pattern, text: str, category: str) -> re.Match:
    match = pattern.fullmatch(text)
    if match is None:
        raise MalformedLiteral(text, category)
    return match


def parse_date(text: str) -> datetime.date:
    """Parse a ``YYYY-MM-DD`` date literal.

    >>> parse_date('2023-06-15')
    datetime.date(2023, 6, 15)
    >>> parse_date('2023-6-5')
    datetime.date(2023, 6, 5)
    """
    year, month, day = _match(_DATE, text, 'date').groups()
    try:
        return datetime.date(int(year), int(month), int(day))
    except ValueError as exc:
        raise MalformedLiteral(text, 'date') from exc


def parse_timestamp(text: str) -> datetime.datetime:
    """Parse a ``YYYY-MM-DD HH:MM:SS[.fffffffff]`` timestamp literal.

    >>> parse_timestamp('2023-06-15 10:30:00')
    datetime.datetime(2023, 6, 15, 10, 30)
    >>> parse_timestamp('2023-06-15 10:30:00.25')
    datetime.datetime(2023, 6, 15, 10, 30, 0, 250000)
    >>> parse_timestamp('2023-06-15 10:30:00.123456789').nanosecond
    789
    """
    *fields, fraction = _match(_TIMESTAMP, text, 'timestamp').groups()
    year, month, day, hour, minute, second = map(int, fields)
    nanos = int((fraction or '').ljust(9, '0'))
    try:
        if nanos % 1000:
            return pd.Timestamp(year=year, month=month, day=day, hour=hour,
                                minute=minute, second=second,
                                microsecond=nanos // 1000,
                                nanosecond=nanos % 1000)
        return datetime.datetime(year, month, day, hour, minute, second, nanos // 1000)
    except ValueError as exc:
        raise MalformedLiteral(text, 'timestamp') from exc


def parse_time(text: str) -> datetime.time:
    """Parse an ``HH:MM:SS`` time literal.

    >>> parse_time('10:30:05')
    datetime.time(10, 30, 5)
    """
    hour, minute, second = map(int, _match(_TIME, text, 'time').groups())
    try:
        return datetime.time(hour, minute, second)
    except ValueError as exc:
        raise MalformedLiteral(text, 'time') from exc


def parse_decimal(text: str) -> decimal.Decimal:
    """Parse an arbitrary-precision decimal literal.

    >>> parse_decimal('3.14')
    Decimal('3.14')
    >>> parse_decimal('-1.5E+3')
    Decimal('-1.5E+3')
    """
    _match(_DECIMAL, text, 'decimal')
    return decimal.Decimal(text)


def parse_integer(text: str) -> int:
    """Parse an arbitrary-precision integer literal.

    >>> parse_integer('123456789012345')
    123456789012345
    >>> parse_integer('-42')
    -42
    >>> len(str(parse_integer('7' * 5000) // 10 ** 4990))
    10
    """
    _match(_INTEGER, text, 'integer')
    # int(str) is capped by sys.get_int_max_str_digits(), Decimal is not
    return int(decimal.Decimal(text))


def epoch_millis(value: datetime.datetime) -> int:
    """Milliseconds since the epoch. Naive values are read as UTC.

    >>> epoch_millis(datetime.datetime(1970, 1, 2))
    86400000
    >>> epoch_millis(datetime.datetime(1970, 1, 1, 1, tzinfo=tz.tzoffset(None, 3600)))
    0
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz.UTC)
    return (value - EPOCH) // MILLISECOND


def from_epoch_millis(millis: int) -> datetime.datetime:
    """Naive UTC datetime for a millisecond offset.

    Raises OverflowError when the offset falls outside years 1-9999, as it
    does for aware datetimes near datetime.min or datetime.max.

    >>> from_epoch_millis(86400123)
    datetime.datetime(1970, 1, 2, 0, 0, 0, 123000)
    """
    return EPOCH.replace(tzinfo=None) + millis * MILLISECOND


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
