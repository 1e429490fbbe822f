"""
Errors raised by sqldao.

Driver and SQLAlchemy errors raised while a statement runs are not wrapped;
they reach the caller unchanged.
"""


class SqlDaoError(Exception):
    """Base class for every error raised by this package."""


class TemplateNotConfiguredError(SqlDaoError):
    """No mapping document is available for template-backed calls."""


class TemplateNotReadyError(SqlDaoError, TimeoutError):
    """The mapping document did not finish loading within the configured timeout."""


class StatementNotFoundError(SqlDaoError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"statement not found: {name}")
        self.name = name


class StatementTypeError(SqlDaoError, TypeError):
    """A statement was used with an entry point that does not accept its type."""


class UnsupportedQueryTypeError(SqlDaoError, ValueError):
    def __init__(self, query_type: object) -> None:
        super().__init__(f"Unsupported query type: {query_type!r}")
        self.query_type = query_type


class MappingDocumentError(SqlDaoError, ValueError):
    """The mapping document is malformed or one of its statements is invalid."""


class TemplateCompileError(SqlDaoError, ValueError):
    pass


class TemplateRenderError(SqlDaoError, ValueError):
    pass
