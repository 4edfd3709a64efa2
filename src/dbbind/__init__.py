"""
Value coercion for database statement parameters.

A binder converts an application value to the parameter form required by a
column category before handing it to the statement:

    from dbbind import date_binder, prepare

    stmt = prepare(conn, 'INSERT INTO events (day) VALUES (?)')
    date_binder().bind(stmt, 1, '2023-06-15')
    stmt.execute()

Binders are stateless singletons and safe to share across threads.
"""
__version__ = '0.1.0'

from dbbind.binders import Binder, date_binder, decimal_binder, default_binder
from dbbind.binders import get_available_categories, get_binder, integer_binder
from dbbind.binders import string_binder, time_binder, timestamp_binder
from dbbind.configuration import BinderConfiguration, BindOptions, configure
from dbbind.exceptions import BindError, BindFailed, MalformedLiteral
from dbbind.statement import ParameterStatement, PostgresStatement, SqliteStatement
from dbbind.statement import SqlType, Statement, prepare, register_statement

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
    'BinderConfiguration',
    'BindOptions',
    'configure',
    'Statement',
    'ParameterStatement',
    'SqliteStatement',
    'PostgresStatement',
    'SqlType',
    'prepare',
    'register_statement',
    'BindError',
    'BindFailed',
    'MalformedLiteral',
]
