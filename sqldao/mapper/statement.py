"""
Named statement compiled from a mapping document.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqldao.core.engine import QueryTypeEnum
from sqldao.engines.sql.template_engine import SqlRenderer

# Top-level element names a mapping document may use (case-insensitive).
MAPPER_TYPES: tuple[QueryTypeEnum, ...] = (QueryTypeEnum.SELECT, QueryTypeEnum.RAW)


@dataclass(frozen=True)
class Statement:
    name: str
    type: QueryTypeEnum
    renderer: SqlRenderer
    single: bool = False

    @property
    def collapses(self) -> bool:
        """Results are reduced to their first element (``single`` or RAW)."""
        return self.single or self.type == QueryTypeEnum.RAW

    def render(self, params: Mapping[str, Any] | None = None) -> str:
        return self.renderer(params)
