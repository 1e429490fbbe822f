"""
Adapter over an SQLAlchemy ``AsyncEngine``.

Two narrow contracts are exposed to the rest of the package:

- ``query(sql, replacements=..., query_type=..., model=...)``: run one textual
  statement with ``:name`` binds. SELECT returns rows (dicts, or entity
  instances when *model* is given); every other type returns
  ``[affected_count, affected_rows]``.
- single-entity CRUD (``create``, ``find_by_pk``, ``find_one``, ``find_all``,
  ``update``, ``destroy``) on SQLModel / declarative entity classes.

Connection pooling and statement concurrency belong to SQLAlchemy.
"""

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from sqlalchemy import Table, delete, select, text, update
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from sqldao.core.config import settings
from sqldao.exceptions import UnsupportedQueryTypeError


class QueryTypeEnum(str, Enum):
    """Statement types the engine knows how to run and shape results for."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    BULKUPDATE = "BULKUPDATE"
    DELETE = "DELETE"
    BULKDELETE = "BULKDELETE"
    UPSERT = "UPSERT"
    RAW = "RAW"


def coerce_query_type(value: Any) -> QueryTypeEnum:
    """Accept an enum member or a case-insensitive name; reject anything else."""
    if isinstance(value, QueryTypeEnum):
        return value
    if isinstance(value, str):
        try:
            return QueryTypeEnum(value.strip().upper())
        except ValueError:
            pass
    raise UnsupportedQueryTypeError(value)


def _hydrate(model: type, row: dict[str, Any]) -> Any:
    validate = getattr(model, "model_validate", None)
    if validate is not None:
        return validate(row)
    return model(**row)


class SqlEngine:
    """Relational engine used by ``SqlDao`` and the SQL executor."""

    query_types: frozenset[QueryTypeEnum] = frozenset(QueryTypeEnum)

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def query(
        self,
        sql: str,
        *,
        replacements: Mapping[str, Any] | None = None,
        query_type: QueryTypeEnum | str = QueryTypeEnum.SELECT,
        model: type | None = None,
    ) -> list[Any]:
        kind = coerce_query_type(query_type)
        async with self._engine.begin() as conn:
            result = await conn.execute(text(sql), dict(replacements or {}))
            rows = [dict(r) for r in result.mappings().all()] if result.returns_rows else []
            if kind == QueryTypeEnum.SELECT:
                if model is not None:
                    return [_hydrate(model, r) for r in rows]
                return rows
            return [result.rowcount, rows]

    # ------------------------------------------------------------------
    # Single-entity CRUD
    # ------------------------------------------------------------------

    async def create(self, model: type, values: Mapping[str, Any]) -> Any:
        entity = model(**values)
        async with self._sessions() as session:
            session.add(entity)
            await session.commit()
            await session.refresh(entity)
        return entity

    async def find_by_pk(self, model: type, pk: Any) -> Any | None:
        async with self._sessions() as session:
            return await session.get(model, pk)

    async def find_one(self, model: type, where: Mapping[str, Any] | None = None) -> Any | None:
        async with self._sessions() as session:
            result = await session.execute(select(model).filter_by(**(where or {})))
            return result.scalars().first()

    async def find_all(self, model: type, where: Mapping[str, Any] | None = None) -> list[Any]:
        async with self._sessions() as session:
            result = await session.execute(select(model).filter_by(**(where or {})))
            return list(result.scalars().all())

    async def update(
        self,
        model: type,
        values: Mapping[str, Any],
        where: Mapping[str, Any] | None = None,
    ) -> int:
        stmt = update(model).filter_by(**(where or {})).values(**values)
        async with self._sessions() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    async def destroy(self, model: type, where: Mapping[str, Any] | None = None) -> int:
        stmt = delete(model).filter_by(**(where or {}))
        async with self._sessions() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount

    # ------------------------------------------------------------------
    # Schema / lifecycle
    # ------------------------------------------------------------------

    async def sync_tables(self, tables: Iterable[Table]) -> None:
        """Create the given tables if they do not exist. Never alters or drops."""
        by_metadata: dict[int, tuple[Any, list[Table]]] = {}
        for table in tables:
            by_metadata.setdefault(id(table.metadata), (table.metadata, []))[1].append(table)
        if not by_metadata:
            return

        def _create(sync_conn: Any) -> None:
            for metadata, group in by_metadata.values():
                metadata.create_all(sync_conn, tables=group, checkfirst=True)

        async with self._engine.begin() as conn:
            await conn.run_sync(_create)

    async def dispose(self) -> None:
        await self._engine.dispose()


def create_engine(url: str | None = None, **kwargs: Any) -> SqlEngine:
    """Build an ``SqlEngine`` from *url* or ``SQLDAO_DATABASE_URL``."""
    url = url or settings.DATABASE_URL
    if not url:
        raise ValueError("database url is required (pass url= or set SQLDAO_DATABASE_URL)")
    kwargs.setdefault("echo", settings.SQL_ECHO)
    return SqlEngine(create_async_engine(url, **kwargs))
