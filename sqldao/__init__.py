"""
sqldao: named SQL statements from XML mapping documents on async SQLAlchemy.
"""

from sqldao.core.config import settings
from sqldao.core.engine import QueryTypeEnum, SqlEngine, create_engine
from sqldao.dao import SqlDao
from sqldao.engines.sql.helpers import TemplateUtils
from sqldao.schemas import Paging

__all__ = [
    "Paging",
    "QueryTypeEnum",
    "SqlDao",
    "SqlEngine",
    "TemplateUtils",
    "create_engine",
    "settings",
]
