"""
Mapper: mapping-document loading, compiled statements and the registry.
"""

from sqldao.mapper.loader import build_statements, load_template, parse_mapping_document
from sqldao.mapper.registry import RegistryStateEnum, StatementRegistry
from sqldao.mapper.statement import MAPPER_TYPES, Statement

__all__ = [
    "MAPPER_TYPES",
    "RegistryStateEnum",
    "Statement",
    "StatementRegistry",
    "build_statements",
    "load_template",
    "parse_mapping_document",
]
