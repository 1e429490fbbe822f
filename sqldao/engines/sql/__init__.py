"""
SQL engine: Jinja2 template compiler, executor and paginator.
"""

from sqldao.engines.sql.executor import execute_sql, normalize_sql
from sqldao.engines.sql.helpers import TemplateUtils
from sqldao.engines.sql.pagination import derive_count_sql, paginate
from sqldao.engines.sql.template_engine import SqlRenderer, compile_template, parse_parameters

__all__ = [
    "SqlRenderer",
    "TemplateUtils",
    "compile_template",
    "derive_count_sql",
    "execute_sql",
    "normalize_sql",
    "paginate",
    "parse_parameters",
]
