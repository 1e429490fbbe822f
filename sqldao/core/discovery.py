"""
Entity discovery: import entity modules under a directory and create their
tables if missing.

Every ``.py`` file below *root* is imported (symlinked directories are
followed, excluded directory names are pruned). Classes mapped to a table
(``__table__`` set on a SQLModel subclass) are collected and passed to
``SqlEngine.sync_tables``, which only ever creates missing tables.
"""

import hashlib
import importlib.util
import logging
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType
from typing import Any

from sqlmodel import SQLModel

from sqldao.core.config import settings
from sqldao.core.engine import SqlEngine

_log = logging.getLogger(__name__)

_MODULE_PREFIX = "_sqldao_entities_"


def _module_name(path: Path) -> str:
    digest = hashlib.md5(str(path).encode(), usedforsecurity=False).hexdigest()[:12]
    return f"{_MODULE_PREFIX}{digest}_{path.stem}"


def _import_file(path: Path) -> ModuleType:
    """Import *path* once; later calls return the cached module."""
    name = _module_name(path)
    cached = sys.modules.get(name)
    if cached is not None:
        return cached
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot load module from {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return module


def is_entity(obj: Any) -> bool:
    """True for SQLModel classes declared with ``table=True``."""
    return (
        isinstance(obj, type)
        and issubclass(obj, SQLModel)
        and getattr(obj, "__table__", None) is not None
    )


def _iter_python_files(root: Path, exclude: set[str]) -> Iterable[Path]:
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        dirnames[:] = sorted(d for d in dirnames if d not in exclude)
        for filename in sorted(filenames):
            if filename.endswith(".py"):
                yield Path(dirpath, filename).resolve()


async def load_entities(
    engine: SqlEngine,
    root: str | os.PathLike[str],
    exclude: Iterable[str] | None = None,
) -> list[type]:
    """Import entity modules under *root* and create their tables if missing.

    Returns the entity classes that were synchronized, in discovery order.
    A module that fails to import is logged and skipped.
    """
    skip = set(settings.ENTITY_EXCLUDE_DIRS if exclude is None else exclude)
    entities: list[type] = []
    seen: set[int] = set()
    for path in _iter_python_files(Path(root), skip):
        try:
            module = _import_file(path)
        except Exception:
            _log.error("Failed to load entity module %s", path, exc_info=True)
            continue
        for obj in vars(module).values():
            # Only classes defined in this file; re-exported imports are skipped.
            if is_entity(obj) and obj.__module__ == module.__name__ and id(obj) not in seen:
                seen.add(id(obj))
                entities.append(obj)

    await engine.sync_tables(e.__table__ for e in entities)
    _log.info(
        "Entity discovery under %s finished: %s",
        root,
        ", ".join(e.__name__ for e in entities) or "(none)",
    )
    return entities
