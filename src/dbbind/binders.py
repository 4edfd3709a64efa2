"""
Binders: named strategies that coerce a value before binding it to a statement.

Each binder targets one column category and checks the value's type in a
fixed order, using the first rule that matches. Values no rule recognizes
are bound with ``set_generic`` so the driver decides what to do with them.
Null-equivalent values (None, NaN, NaT, pd.NA) are always bound with
``set_null``.

Binders are stateless singletons, one per category:

- default: always generic binding
- string: str as is, enum members by name, anything else through str()
- date: dates, datetimes truncated to their date, 'YYYY-MM-DD' strings
- timestamp: datetimes, dates at midnight, 'YYYY-MM-DD HH:MM:SS[.f]' strings
- time: times, time of day of datetimes, 'HH:MM:SS' strings
- decimal: decimal literal strings
- integer: ints as bigint, enum members by position, integer literal strings

Usage:
    binder = get_binder('date')
    binder.bind(stmt, 1, '2023-06-15')
"""
import datetime
import decimal
import enum
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd
from dbbind.exceptions import BindError, BindFailed
from dbbind.literals import epoch_millis, from_epoch_millis, parse_date
from dbbind.literals import parse_decimal, parse_integer, parse_time
from dbbind.literals import parse_timestamp
from dbbind.statement import SqlType, Statement
from dbbind.utils import is_null

__all__ = [
    'Binder',
    'default_binder',
    'string_binder',
    'date_binder',
    'timestamp_binder',
    'time_binder',
    'decimal_binder',
    'integer_binder',
    'get_binder',
    'get_available_categories',
]

logger = logging.getLogger(__name__)


def _is_aware(value: datetime.datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _via_millis(value: datetime.datetime) -> datetime.datetime:
    """Naive UTC datetime at millisecond precision."""
    return from_epoch_millis(epoch_millis(value))


def _ordinal(member: enum.Enum) -> int:
    """Zero-based position of a member within its enumeration."""
    return list(type(member)).index(member)


class Binder(ABC):
    """Base class for binders.

    Subclasses set `category` and implement `_bind` for non-null values.
    """

    __slots__ = ()

    category: str = ''

    @property
    def name(self) -> str:
        """Stable diagnostic identifier."""
        return f'binders.{self.category}'

    def bind(self, statement: Statement, position: int, value: Any) -> None:
        """Bind `value` at the 1-based `position` of `statement`.

        Raises MalformedLiteral if a string does not parse for this category
        and BindFailed if the statement rejects the parameter or the value
        falls outside the datetime range once normalized to UTC.
        """
        if is_null(value):
            self._call(statement.set_null, position)
            return
        try:
            self._bind(statement, position, value)
        except OverflowError as exc:
            raise BindFailed(self.category, position, exc) from exc

    @abstractmethod
    def _bind(self, statement: Statement, position: int, value: Any) -> None:
        pass

    def _call(self, setter: Callable[..., None], position: int, *args: Any) -> None:
        try:
            setter(position, *args)
        except BindError:
            raise
        except Exception as exc:
            raise BindFailed(self.category, position, exc) from exc

    def _generic(self, statement: Statement, position: int, value: Any) -> None:
        logger.debug(f'{self.name}: no rule for {type(value).__name__}, using generic binding')
        self._call(statement.set_generic, position, value)


class DefaultBinder(Binder):
    """Generic binding for every value.
    """

    __slots__ = ()
    category = 'default'

    def _bind(self, statement, position, value):
        self._call(statement.set_generic, position, value)


class StringBinder(Binder):
    """Binder for CHAR and VARCHAR columns.

    Enum members are bound by name, other objects by their str().
    """

    __slots__ = ()
    category = 'string'

    def _bind(self, statement, position, value):
        if isinstance(value, str):
            text = value
        elif isinstance(value, enum.Enum):
            text = value.name
        elif type(value) is int:
            # str(int) is capped by sys.get_int_max_str_digits()
            text = str(decimal.Decimal(value))
        else:
            text = str(value)
        self._call(statement.set_text, position, text)


class DateBinder(Binder):
    """Binder for DATE columns.
    """

    __slots__ = ()
    category = 'date'

    def _bind(self, statement, position, value):
        if isinstance(value, np.datetime64):
            value = pd.Timestamp(value)

        if isinstance(value, datetime.datetime):
            self._call(statement.set_date, position, _via_millis(value).date())
        elif isinstance(value, datetime.date):
            self._call(statement.set_date, position, value)
        elif isinstance(value, str):
            self._call(statement.set_date, position, parse_date(value))
        else:
            self._generic(statement, position, value)


class TimestampBinder(Binder):
    """Binder for TIMESTAMP columns.

    Naive datetimes are bound unchanged, aware ones are converted to naive UTC.
    """

    __slots__ = ()
    category = 'timestamp'

    def _bind(self, statement, position, value):
        if isinstance(value, np.datetime64):
            value = pd.Timestamp(value)

        if isinstance(value, datetime.datetime):
            if _is_aware(value):
                value = _via_millis(value)
            self._call(statement.set_timestamp, position, value)
        elif isinstance(value, datetime.date):
            self._call(statement.set_timestamp, position,
                       datetime.datetime.combine(value, datetime.time()))
        elif isinstance(value, str):
            self._call(statement.set_timestamp, position, parse_timestamp(value))
        else:
            self._generic(statement, position, value)


class TimeBinder(Binder):
    """Binder for TIME columns.
    """

    __slots__ = ()
    category = 'time'

    def _bind(self, statement, position, value):
        if isinstance(value, np.datetime64):
            value = pd.Timestamp(value)

        if isinstance(value, datetime.time):
            self._call(statement.set_time, position, value)
        elif isinstance(value, datetime.datetime):
            self._call(statement.set_time, position, _via_millis(value).time())
        elif isinstance(value, datetime.date):
            self._call(statement.set_time, position, datetime.time())
        elif isinstance(value, str):
            self._call(statement.set_time, position, parse_time(value))
        else:
            self._generic(statement, position, value)


class DecimalBinder(Binder):
    """Binder for NUMERIC and DECIMAL columns.

    Only strings are converted; numbers go to the driver as they are.
    """

    __slots__ = ()
    category = 'decimal'

    def _bind(self, statement, position, value):
        if isinstance(value, str):
            self._call(statement.set_decimal, position, parse_decimal(value))
        else:
            self._generic(statement, position, value)


class IntegerBinder(Binder):
    """Binder for integer columns.

    Integers and integer strings are bound with a BIGINT hint. Enum members
    are bound by their zero-based position, so an IntEnum member binds its
    value while a plain Enum member binds its ordinal.
    """

    __slots__ = ()
    category = 'integer'

    def _bind(self, statement, position, value):
        if isinstance(value, int) and not isinstance(value, bool):
            self._call(statement.set_generic_typed, position, int(value), SqlType.BIGINT)
        elif isinstance(value, enum.Enum):
            self._call(statement.set_generic_typed, position, _ordinal(value), SqlType.INTEGER)
        elif isinstance(value, str):
            self._call(statement.set_generic_typed, position, parse_integer(value), SqlType.BIGINT)
        else:
            self._generic(statement, position, value)


DEFAULT_BINDER = DefaultBinder()
STRING_BINDER = StringBinder()
DATE_BINDER = DateBinder()
TIMESTAMP_BINDER = TimestampBinder()
TIME_BINDER = TimeBinder()
DECIMAL_BINDER = DecimalBinder()
INTEGER_BINDER = IntegerBinder()

_BINDERS: dict[str, Binder] = {
    binder.category: binder for binder in (
        DEFAULT_BINDER,
        STRING_BINDER,
        DATE_BINDER,
        TIMESTAMP_BINDER,
        TIME_BINDER,
        DECIMAL_BINDER,
        INTEGER_BINDER,
        )
    }


def default_binder() -> Binder:
    """Binder using generic binding for every value."""
    return DEFAULT_BINDER


def string_binder() -> Binder:
    """Binder for CHAR and VARCHAR columns."""
    return STRING_BINDER


def date_binder() -> Binder:
    """Binder for DATE columns."""
    return DATE_BINDER


def timestamp_binder() -> Binder:
    """Binder for TIMESTAMP columns."""
    return TIMESTAMP_BINDER


def time_binder() -> Binder:
    """Binder for TIME columns."""
    return TIME_BINDER


def decimal_binder() -> Binder:
    """Binder for NUMERIC and DECIMAL columns."""
    return DECIMAL_BINDER


def integer_binder() -> Binder:
    """Binder for integer columns."""
    return INTEGER_BINDER


def get_available_categories() -> list[str]:
    """Return list of binder category names."""
    return list(_BINDERS.keys())


def get_binder(category: str) -> Binder:
    """Get the binder for a category name.

    >>> get_binder('Date').name
    'binders.date'
    """
    binder = _BINDERS.get(str(category).lower())
    if binder is None:
        available = get_available_categories()
        raise ValueError(f'Unsupported binder category: {category}. Available: {available}')
    return binder


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
