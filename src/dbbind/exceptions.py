"""
Binding-specific exception classes.
"""
from typing import Any


class BindError(Exception):
    """Base class for all binding errors.
    """


class MalformedLiteral(BindError, ValueError):
    """Text value does not match the literal grammar of the target category.

    Raised before the statement is touched.
    """

    def __init__(self, text: str, category: str) -> None:
        self.text = text
        self.category = category
        super().__init__(f'Cannot parse {text!r} as a {category} literal')


class BindFailed(BindError):
    """The statement rejected a parameter or the value is out of range.

    The original driver error is kept in `error` and chained as `__cause__`.
    """

    def __init__(self, category: str, position: int, error: BaseException) -> None:
        self.category = category
        self.position = position
        self.error = error
        super().__init__(f'{category} binder failed at parameter {position}: {error}')

    def __reduce__(self) -> tuple[type, tuple[Any, ...]]:
        return self.__class__, (self.category, self.position, self.error)
