"""
Statement binding interface and DB-API backed statements.

Binders only talk to a Statement through its ``set_*`` methods. This module
defines that interface and provides statements that collect parameters for a
single DB-API ``cursor.execute`` call:

- ParameterStatement: records parameters, no driver-specific adaptation
- SqliteStatement: adapts temporal and decimal values to text for sqlite3
- PostgresStatement: adds psycopg integer type hints

Usage:
    stmt = prepare(conn, 'INSERT INTO t (id, born) VALUES (?, ?)')
    integer_binder().bind(stmt, 1, '42')
    date_binder().bind(stmt, 2, '2023-06-15')
    stmt.execute()
"""
import datetime
import decimal
import enum
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Self

from psycopg.types.numeric import Int4, Int8

from dbbind.utils import get_dialect_name, get_raw_connection, to_driver_value

__all__ = [
    'SqlType',
    'Statement',
    'ParameterStatement',
    'SqliteStatement',
    'PostgresStatement',
    'register_statement',
    'get_available_dialects',
    'prepare',
]

logger = logging.getLogger(__name__)

# Registry of dialect name -> statement class
_STATEMENT_REGISTRY: dict[str, type['ParameterStatement']] = {}


class SqlType(enum.Enum):
    """Target parameter type of a binding call.
    """
    TEXT = 'text'
    DATE = 'date'
    TIMESTAMP = 'timestamp'
    TIME = 'time'
    DECIMAL = 'decimal'
    INTEGER = 'integer'
    BIGINT = 'bigint'
    GENERIC = 'generic'
    NULL = 'null'


class Statement(ABC):
    """Parameter binding interface of a prepared statement.

    Positions are 1-based.
    """

    @abstractmethod
    def set_text(self, position: int, value: str) -> None:
        """Bind a string."""

    @abstractmethod
    def set_date(self, position: int, value: datetime.date) -> None:
        """Bind a calendar date."""

    @abstractmethod
    def set_timestamp(self, position: int, value: datetime.datetime) -> None:
        """Bind a point in time."""

    @abstractmethod
    def set_time(self, position: int, value: datetime.time) -> None:
        """Bind a time of day."""

    @abstractmethod
    def set_decimal(self, position: int, value: Any) -> None:
        """Bind an exact decimal."""

    @abstractmethod
    def set_generic(self, position: int, value: Any) -> None:
        """Bind a value, letting the driver infer its type."""

    @abstractmethod
    def set_generic_typed(self, position: int, value: Any, sql_type: SqlType) -> None:
        """Bind a value with an explicit type hint."""

    @abstractmethod
    def set_null(self, position: int) -> None:
        """Bind NULL."""


def register_statement(dialect: str):
    """Decorator to register a statement class for a dialect.

    Usage:
        @register_statement('sqlite')
        class SqliteStatement(ParameterStatement):
            ...
    """
    def decorator(cls: type['ParameterStatement']) -> type['ParameterStatement']:
        _STATEMENT_REGISTRY[dialect] = cls
        return cls
    return decorator


class ParameterStatement(Statement):
    """Statement collecting parameters for one DB-API execute call.
    """

    def __init__(self, connection: Any, sql: str) -> None:
        self.connection = connection
        self.sql = sql
        self.closed = False
        self._params: dict[int, Any] = {}

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _bind(self, position: int, value: Any, sql_type: SqlType) -> None:
        if self.closed:
            raise ValueError('Cannot bind parameters on a closed statement')
        if isinstance(position, bool) or not isinstance(position, int) or position < 1:
            raise ValueError(f'Parameter position must be an integer >= 1, got {position!r}')
        self._params[position] = self.adapt(value, sql_type)

    def adapt(self, value: Any, sql_type: SqlType) -> Any:
        """Convert a bound value to the form passed to the driver.
        """
        if sql_type is SqlType.GENERIC:
            return to_driver_value(value)
        return value

    def set_text(self, position: int, value: str) -> None:
        self._bind(position, value, SqlType.TEXT)

    def set_date(self, position: int, value: datetime.date) -> None:
        self._bind(position, value, SqlType.DATE)

    def set_timestamp(self, position: int, value: datetime.datetime) -> None:
        self._bind(position, value, SqlType.TIMESTAMP)

    def set_time(self, position: int, value: datetime.time) -> None:
        self._bind(position, value, SqlType.TIME)

    def set_decimal(self, position: int, value: Any) -> None:
        self._bind(position, value, SqlType.DECIMAL)

    def set_generic(self, position: int, value: Any) -> None:
        self._bind(position, value, SqlType.GENERIC)

    def set_generic_typed(self, position: int, value: Any, sql_type: SqlType) -> None:
        self._bind(position, value, sql_type)

    def set_null(self, position: int) -> None:
        self._bind(position, None, SqlType.NULL)

    @property
    def parameters(self) -> tuple:
        """Bound parameters ordered by position.

        Raises ValueError if a position below the highest bound one is missing.
        """
        if not self._params:
            return ()
        count = max(self._params)
        missing = [i for i in range(1, count + 1) if i not in self._params]
        if missing:
            raise ValueError(f'Parameters not bound at positions: {missing}')
        return tuple(self._params[i] for i in range(1, count + 1))

    def clear_parameters(self) -> None:
        """Forget all bound parameters so the statement can be reused."""
        self._params.clear()

    @contextmanager
    def _cursor(self):
        """Context manager for cursor lifecycle.
        """
        cursor = get_raw_connection(self.connection).cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    def execute(self) -> int:
        """Execute the statement with the bound parameters and return the row count.
        """
        if self.closed:
            raise ValueError('Cannot execute a closed statement')
        params = self.parameters
        logger.debug(f'Executing {self.sql!r} with {len(params)} parameters')
        with self._cursor() as cursor:
            cursor.execute(self.sql, params)
            return cursor.rowcount

    def close(self) -> None:
        self.closed = True
        self._params.clear()


@register_statement('sqlite')
class SqliteStatement(ParameterStatement):
    """sqlite3 statement.

    sqlite3 has no native date, time or decimal storage, so those are bound
    as ISO 8601 and decimal strings.
    """

    def adapt(self, value: Any, sql_type: SqlType) -> Any:
        if value is None:
            return None
        match sql_type:
            case SqlType.DATE | SqlType.TIME:
                return value.isoformat()
            case SqlType.TIMESTAMP:
                return value.isoformat(sep=' ')
            case SqlType.DECIMAL:
                return str(value)
            case SqlType.INTEGER | SqlType.BIGINT:
                return int(value)
            case SqlType.GENERIC:
                value = to_driver_value(value)
                if isinstance(value, datetime.datetime):
                    return value.isoformat(sep=' ')
                if isinstance(value, datetime.date | datetime.time):
                    return value.isoformat()
                if isinstance(value, decimal.Decimal):
                    return str(value)
                return value
        return value


@register_statement('postgresql')
class PostgresStatement(ParameterStatement):
    """psycopg statement.

    Integer hints are expressed with psycopg's Int4/Int8 wrappers so the
    parameter is sent as int4/int8 rather than a type picked from the value.
    """

    def adapt(self, value: Any, sql_type: SqlType) -> Any:
        if value is None:
            return None
        match sql_type:
            case SqlType.BIGINT:
                return Int8(value)
            case SqlType.INTEGER:
                return Int4(value)
            case SqlType.GENERIC:
                return to_driver_value(value)
        return value


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STATEMENT_REGISTRY.keys())


def prepare(connection: Any, sql: str) -> ParameterStatement:
    """Create the statement registered for the connection's dialect.
    """
    dialect = get_dialect_name(connection)
    if dialect not in _STATEMENT_REGISTRY:
        available = get_available_dialects()
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')
    return _STATEMENT_REGISTRY[dialect](connection, sql)
