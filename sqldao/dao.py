"""
SqlDao: entity CRUD plus named, template-mapped SQL statements.

    dao = SqlDao(engine, User, "mappers/user.xml")
    rows = await dao.invoke("byAge", {"age": 30})
    page = await dao.invoke_by_page("byAge", Paging(index=0, size=20), {"age": 30})

The mapping document is loaded once per DAO. Loading starts at construction
when an event loop is running, otherwise on the first template-backed call.
CRUD methods never wait for it.
"""

import asyncio
import os
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from sqldao.core.discovery import load_entities
from sqldao.core.engine import QueryTypeEnum, SqlEngine
from sqldao.engines.sql.executor import execute_sql
from sqldao.engines.sql.helpers import TemplateUtils, entity_fields
from sqldao.engines.sql.pagination import paginate
from sqldao.exceptions import StatementTypeError
from sqldao.mapper.registry import StatementRegistry
from sqldao.mapper.statement import Statement
from sqldao.schemas import Paging


class SqlDao:
    def __init__(
        self,
        engine: SqlEngine,
        model: type,
        template: str | os.PathLike[str] | None = None,
        *,
        models: Iterable[type] = (),
        ready_timeout: float | None = None,
    ) -> None:
        self.engine = engine
        self.model = model
        # Read-only view of the entities templates may reference as Model.<Name>.
        registered = {m.__name__: m for m in models}
        registered[model.__name__] = model
        self.models: Mapping[str, type] = MappingProxyType(registered)
        self._registry = StatementRegistry(
            template,
            {"Utils": TemplateUtils, "Model": self.models},
            ready_timeout=ready_timeout,
        )
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            self._registry.start()

    @property
    def registry(self) -> StatementRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # Entity CRUD (no template involved)
    # ------------------------------------------------------------------

    def _values(self, record: Any, fields: Iterable[str] | None) -> dict[str, Any]:
        """Declared fields of *record* that are not None, limited to *fields*."""
        allowed = set(fields) if fields is not None else None
        values: dict[str, Any] = {}
        for attr, _ in entity_fields(self.model):
            if allowed is not None and attr not in allowed:
                continue
            value = record.get(attr) if isinstance(record, Mapping) else getattr(record, attr, None)
            if value is not None:
                values[attr] = value
        return values

    async def save(self, record: Any, fields: Iterable[str] | None = None) -> Any:
        """Insert *record* (mapping or entity). None-valued fields are left to DB defaults."""
        return await self.engine.create(self.model, self._values(record, fields))

    async def select_by_id(self, pk: Any) -> Any | None:
        return await self.engine.find_by_pk(self.model, pk)

    async def find_one(self, where: Mapping[str, Any] | None = None) -> Any | None:
        return await self.engine.find_one(self.model, where)

    async def find_all(self, where: Mapping[str, Any] | None = None) -> list[Any]:
        return await self.engine.find_all(self.model, where)

    async def update(
        self,
        record: Mapping[str, Any],
        where: Mapping[str, Any] | None = None,
        fields: Iterable[str] | None = None,
    ) -> int:
        """Update matching rows; returns the affected row count."""
        values = dict(record)
        if fields is not None:
            allowed = set(fields)
            values = {k: v for k, v in values.items() if k in allowed}
        return await self.engine.update(self.model, values, where)

    async def remove(self, where: Mapping[str, Any] | None = None) -> int:
        return await self.engine.destroy(self.model, where)

    # ------------------------------------------------------------------
    # Raw SQL
    # ------------------------------------------------------------------

    async def execute_sql(
        self,
        sql: str,
        query_type: QueryTypeEnum | str,
        params: Mapping[str, Any] | None = None,
        model: type | None = None,
    ) -> Any:
        return await execute_sql(self.engine, sql, query_type, params, model=model)

    async def select_by_page(
        self,
        sql: str,
        paging: Paging,
        params: Mapping[str, Any] | None = None,
    ) -> Paging:
        return await paginate(self.engine, sql, paging, params)

    # ------------------------------------------------------------------
    # Named statements
    # ------------------------------------------------------------------

    async def get_mapper(self) -> Mapping[str, Statement]:
        return await self._registry.wait_ready()

    async def invoke(
        self,
        name: str,
        params: Mapping[str, Any] | None = None,
        model: type | None = None,
    ) -> Any:
        """Run statement *name*. ``single`` and RAW statements return the first
        element of the result (None when empty)."""
        statement = await self._registry.resolve(name)
        sql = statement.render(params)
        result = await execute_sql(self.engine, sql, statement.type, params, model=model)
        if statement.collapses and isinstance(result, list):
            return result[0] if result else None
        return result

    async def invoke_by_page(
        self,
        name: str,
        paging: Paging,
        params: Mapping[str, Any] | None = None,
    ) -> Paging:
        statement = await self._registry.resolve(name)
        if statement.type != QueryTypeEnum.SELECT:
            raise StatementTypeError(f"statement {name} is not a SELECT statement")
        sql = statement.render(params)
        return await paginate(self.engine, sql, paging, params)

    # ------------------------------------------------------------------

    @staticmethod
    async def load_entities(
        engine: SqlEngine,
        root: str | os.PathLike[str],
        exclude: Iterable[str] | None = None,
    ) -> list[type]:
        """Import entity modules under *root* and create missing tables."""
        return await load_entities(engine, root, exclude)
