"""
Helper namespace exposed to mapping templates as ``Utils``.

``join`` and ``array_to_obj`` expand a sequence into uniquely named binds::

    WHERE id IN ({{ Utils.join(ids, name="id") }})

renders ``WHERE id IN (:_id_0,:_id_1)``; the caller merges
``array_to_obj(ids, name="id")`` into the execution params so every bind has
a value.
"""

from collections.abc import Iterable, Sequence
from types import SimpleNamespace
from typing import Any

from sqlalchemy import inspect

from sqldao.engines.sql.filters import SqlSafe


def _bind_name(name: str, index: int) -> str:
    return f"_{name}_{index}"


def join(array: Iterable[Any], sep: str = ",", name: str = "arr") -> SqlSafe:
    return SqlSafe(sep.join(f":{_bind_name(name, i)}" for i, _ in enumerate(array)))


def array_to_obj(array: Iterable[Any], name: str = "arr") -> dict[str, Any]:
    return {_bind_name(name, i): item for i, item in enumerate(array)}


def entity_fields(model: type) -> list[tuple[str, str]]:
    """Ordered ``(attribute, column)`` pairs for a mapped entity class."""
    return [(attr.key, attr.columns[0].name) for attr in inspect(model).column_attrs]


def field_attribute_map(model: type) -> SqlSafe:
    """Projection ``column AS attribute, ...`` in declaration order."""
    fields: Sequence[tuple[str, str]] = entity_fields(model)
    return SqlSafe(",".join(f"{column} AS {attr}" for attr, column in fields))


TemplateUtils = SimpleNamespace(
    join=join,
    array_to_obj=array_to_obj,
    field_attribute_map=field_attribute_map,
)
