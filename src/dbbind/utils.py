"""
Shared helpers for null detection, driver values and dialect detection.
"""
import logging
import math
from typing import Any

import numpy as np
import pandas as pd

__all__ = [
    'is_null',
    'to_driver_value',
    'get_dialect_name',
    'get_raw_connection',
]

logger = logging.getLogger(__name__)


def is_null(value: Any) -> bool:
    """Check if a value is null-equivalent.

    >>> is_null(None), is_null(float('nan')), is_null(pd.NaT), is_null(pd.NA)
    (True, True, True, True)
    >>> is_null(np.datetime64('NaT'))
    True
    >>> is_null(''), is_null(0), is_null('nan')
    (False, False, False)
    """
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, float | np.floating):
        return math.isnan(value)
    if isinstance(value, np.datetime64):
        return bool(np.isnat(value))
    return False


def to_driver_value(value: Any) -> Any:
    """Convert NumPy and pandas scalars to the Python values drivers accept.

    Anything else is returned unchanged.

    >>> to_driver_value(np.int64(42)), to_driver_value(np.float32(0.5))
    (42, 0.5)
    >>> to_driver_value(np.datetime64('2023-01-15T10:30:00'))
    datetime.datetime(2023, 1, 15, 10, 30)
    >>> to_driver_value('x')
    'x'
    """
    if is_null(value):
        return None

    if isinstance(value, np.bool_):
        return bool(value)

    if isinstance(value, np.floating | np.integer | np.unsignedinteger):
        return value.item()

    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)

    if isinstance(value, pd.Timestamp):
        if value.nanosecond:
            logger.debug(f'Dropping nanoseconds from {value} for driver binding')
        return value.to_pydatetime(warn=False)

    if isinstance(value, pd.Timedelta):
        return value.to_pytimedelta()

    return value


# Driver package -> dialect name
_DRIVER_DIALECTS = {
    'psycopg': 'postgresql',
    'sqlite3': 'sqlite',
}


def get_dialect_name(connection: Any) -> str:
    """Dialect of a DB-API connection.

    An explicit ``dialect`` attribute (a name or an object with a ``name``)
    wins. Otherwise the wrapped driver connection is unwrapped and its
    module decides.

    >>> import sqlite3
    >>> get_dialect_name(sqlite3.connect(':memory:'))
    'sqlite'
    """
    dialect = getattr(connection, 'dialect', None)
    if dialect is not None:
        return str(getattr(dialect, 'name', dialect)).lower()

    raw = get_raw_connection(connection)
    package = type(raw).__module__.partition('.')[0]
    if package in _DRIVER_DIALECTS:
        return _DRIVER_DIALECTS[package]

    raise AttributeError(f'Cannot determine dialect for {type(connection)}')


def get_raw_connection(connection: Any) -> Any:
    """Extract the raw DBAPI connection from a wrapper."""
    if hasattr(connection, 'dbapi_connection'):
        return get_raw_connection(connection.dbapi_connection)
    if hasattr(connection, 'driver_connection'):
        return connection.driver_connection
    return connection


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
