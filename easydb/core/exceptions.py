"""
Exception hierarchy for easydb.

Validation errors (``InvalidIdentifier``, ``InvalidOrderBy``, ``InvalidValue``,
``MissingTable``) are programmer errors: they are raised while a statement is
being built and are never swallowed. ``ExecutionFailure`` is raised inside the
executor and turned into a ``False`` result before it reaches the caller.
``ConnectionFailure`` is raised when the backend cannot be reached.
"""


class EasyDBError(Exception):
    """Base class for all easydb errors."""

    pass


class InvalidIdentifier(EasyDBError, ValueError):
    """Raised when a table/column name contains characters outside [A-Za-z0-9_.]."""

    pass


class InvalidOrderBy(EasyDBError, ValueError):
    """Raised when an ORDER BY fragment fails validation."""

    pass


class InvalidValue(EasyDBError, ValueError):
    """Raised when a bound value is not one of the supported scalar kinds."""

    pass


class MissingTable(EasyDBError, ValueError):
    """Raised when a statement is rendered before a table was selected."""

    pass


class ExecutionFailure(EasyDBError):
    """Driver-level failure while executing a statement."""

    def __init__(self, message: str, *, sql: str = "", params: tuple = ()) -> None:
        super().__init__(message)
        self.sql = sql
        self.params = params


class ConnectionFailure(EasyDBError):
    """Raised when a connection to the backend cannot be opened."""

    pass
