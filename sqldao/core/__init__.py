"""
Core: settings, the SQLAlchemy engine adapter and entity discovery.
"""

from sqldao.core.config import Settings, settings
from sqldao.core.discovery import load_entities
from sqldao.core.engine import QueryTypeEnum, SqlEngine, coerce_query_type, create_engine

__all__ = [
    "Settings",
    "settings",
    "QueryTypeEnum",
    "SqlEngine",
    "coerce_query_type",
    "create_engine",
    "load_entities",
]
