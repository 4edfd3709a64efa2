"""
Binder selection for database columns.

Resolves the binder to use for a column from, in order:

1. Column overrides (``table.column`` first, then ``column``)
2. Type name overrides
3. Built-in SQL type names
4. PostgreSQL type OIDs (cursor description type codes)
5. The fallback category, ``default`` unless configured

Usage:
    config = configure({'column_binders': {'users.status': 'string'}})
    binder = config.get_binder(type_name='VARCHAR(20)')
    binders = config.get_binders(cursor.description, table='users')
"""
import json
import logging
import pathlib
import re
from dataclasses import dataclass
from typing import Any

from psycopg.postgres import types as pg_types

from dbbind.binders import Binder, get_available_categories, get_binder

from libb import ConfigOptions, load_options

__all__ = [
    'BindOptions',
    'BinderConfiguration',
    'configure',
    'normalize_type_name',
]

logger = logging.getLogger(__name__)

SQL_TYPE_CATEGORIES: dict[str, str] = {}
for name in [
    'char',
    'character',
    'varchar',
    'character varying',
    'nchar',
    'nvarchar',
    'national character',
    'national character varying',
    'text',
    'ntext',
    'clob',
    'nclob',
    'longvarchar',
    'longnvarchar',
    'bpchar',
    'name',
]:
    SQL_TYPE_CATEGORIES[name] = 'string'
for name in ['date']:
    SQL_TYPE_CATEGORIES[name] = 'date'
for name in [
    'timestamp',
    'timestamp without time zone',
    'timestamp with time zone',
    'timestamptz',
    'datetime',
    'datetime2',
    'smalldatetime',
    'datetimeoffset',
]:
    SQL_TYPE_CATEGORIES[name] = 'timestamp'
for name in [
    'time',
    'time without time zone',
    'time with time zone',
    'timetz',
]:
    SQL_TYPE_CATEGORIES[name] = 'time'
for name in [
    'decimal',
    'numeric',
    'number',
    'money',
    'smallmoney',
]:
    SQL_TYPE_CATEGORIES[name] = 'decimal'
for name in [
    'tinyint',
    'smallint',
    'mediumint',
    'int',
    'integer',
    'bigint',
    'int2',
    'int4',
    'int8',
    'smallserial',
    'serial',
    'bigserial',
]:
    SQL_TYPE_CATEGORIES[name] = 'integer'

_oid = lambda x: pg_types.get(x).oid

POSTGRES_OID_CATEGORIES: dict[int, str] = {}
for v in [_oid('"char"'), _oid('bpchar'), _oid('name'), _oid('text'), _oid('varchar')]:
    POSTGRES_OID_CATEGORIES[v] = 'string'
for v in [_oid('date')]:
    POSTGRES_OID_CATEGORIES[v] = 'date'
for v in [_oid('timestamp'), _oid('timestamptz')]:
    POSTGRES_OID_CATEGORIES[v] = 'timestamp'
for v in [_oid('time'), _oid('timetz')]:
    POSTGRES_OID_CATEGORIES[v] = 'time'
for v in [_oid('numeric')]:
    POSTGRES_OID_CATEGORIES[v] = 'decimal'
for v in [_oid('int2'), _oid('int4'), _oid('int8')]:
    POSTGRES_OID_CATEGORIES[v] = 'integer'

_PRECISION = re.compile(r'\([^)]*\)')
_WHITESPACE = re.compile(r'\s+')


def normalize_type_name(type_name: str) -> str:
    """Lower-case a SQL type name and strip length/precision.

    >>> normalize_type_name('VARCHAR(255)')
    'varchar'
    >>> normalize_type_name('timestamp(3)  WITH time zone')
    'timestamp with time zone'
    """
    name = _PRECISION.sub(' ', str(type_name).lower())
    return _WHITESPACE.sub(' ', name).strip()


def _validate_categories(mapping: dict[str, str], what: str) -> None:
    """Raise ValueError if a mapping names an unknown category."""
    available = get_available_categories()
    for key, category in mapping.items():
        if str(category).lower() not in available:
            raise ValueError(f'Unknown binder category {category!r} for {what} {key!r}. '
                             f'Available: {available}')


@dataclass
class BindOptions(ConfigOptions):
    """Options

    - fallback: category used when nothing else matches (default: `default`)
    - column_binders: column name or `table.column` -> category
    - type_binders: SQL type name -> category, checked before the built-in names
    - mapping_file: JSON file with `columns` and `types` objects merged into
      the two mappings above
    """
    fallback: str = 'default'
    column_binders: dict = None
    type_binders: dict = None
    mapping_file: str = None

    def __post_init__(self):
        self.column_binders = {str(k).lower(): str(v).lower() for k, v in (self.column_binders or {}).items()}
        self.type_binders = {normalize_type_name(k): str(v).lower() for k, v in (self.type_binders or {}).items()}
        self.fallback = str(self.fallback).lower()
        if self.mapping_file:
            self.load_mapping_file(self.mapping_file)
        _validate_categories({'fallback': self.fallback}, 'option')
        _validate_categories(self.column_binders, 'column')
        _validate_categories(self.type_binders, 'type')

    def load_mapping_file(self, mapping_file: str | pathlib.Path) -> None:
        """Merge column and type mappings from a JSON file."""
        with pathlib.Path(mapping_file).open() as f:
            config = json.load(f)

        for key, category in config.get('columns', {}).items():
            self.column_binders[key.lower()] = str(category).lower()
        for key, category in config.get('types', {}).items():
            self.type_binders[normalize_type_name(key)] = str(category).lower()

        logger.info(f'Loaded binder mapping configuration from {mapping_file}')


class BinderConfiguration:
    """Chooses a binder per column.
    """

    def __init__(self, options: BindOptions | None = None) -> None:
        self.options = options or BindOptions()

    def _column_category(self, column: str, table: str | None) -> str | None:
        columns = self.options.column_binders
        if table:
            key = f'{table.lower()}.{column.lower()}'
            if key in columns:
                return columns[key]
        return columns.get(column.lower())

    def get_category(self, type_code: Any = None, type_name: str | None = None,
                     column: str | None = None, table: str | None = None) -> str:
        """Resolve the binder category for a column.
        """
        if column:
            category = self._column_category(column, table)
            if category:
                return category

        if type_name:
            name = normalize_type_name(type_name)
            if name in self.options.type_binders:
                return self.options.type_binders[name]
            if name in SQL_TYPE_CATEGORIES:
                return SQL_TYPE_CATEGORIES[name]

        if isinstance(type_code, int) and type_code in POSTGRES_OID_CATEGORIES:
            return POSTGRES_OID_CATEGORIES[type_code]

        logger.debug(f'No binder mapping for column={column} type={type_name or type_code}, '
                     f'using {self.options.fallback}')
        return self.options.fallback

    def get_binder(self, type_code: Any = None, type_name: str | None = None,
                   column: str | None = None, table: str | None = None) -> Binder:
        """Resolve the binder for a column.

        Args:
            type_code: Driver type code, e.g. a PostgreSQL type OID
            type_name: SQL type name such as 'varchar(20)' or 'timestamptz'
            column: Column name, for column overrides
            table: Table name, for `table.column` overrides

        Returns
            The singleton binder for the resolved category
        """
        return get_binder(self.get_category(type_code, type_name, column, table))

    def get_binders(self, description: Any, table: str | None = None) -> list[Binder]:
        """Resolve one binder per entry of a DB-API cursor description.
        """
        if not description:
            return []
        return [self.get_binder(type_code=desc[1], column=desc[0], table=table)
                for desc in description]


@load_options(cls=BindOptions)
def configure(options: BindOptions | dict[str, Any] | str,
              config: Any | None = None, **kw: Any) -> BinderConfiguration:
    """Create a binder configuration.

    Args:
        options: Can be:
                - BindOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        BinderConfiguration using the options
    """
    return BinderConfiguration(options)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
