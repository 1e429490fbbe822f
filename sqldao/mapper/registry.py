"""
Statement registry: the compiled mapping table of one DAO and its readiness.

States:

- UNINITIALIZED: a document path is configured, loading has not finished.
- READY: statements are loaded; the table is read-only from here on.
- UNAVAILABLE: no document was configured.
- FAILED: loading raised; the captured error is re-raised (as the cause of
  ``TemplateNotConfiguredError``) to every template-backed caller.

Waiters block on a one-shot future that the load task resolves exactly once,
whatever the outcome.
"""

import asyncio
import functools
import logging
import os
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from sqldao.core.config import settings
from sqldao.exceptions import (
    StatementNotFoundError,
    TemplateNotConfiguredError,
    TemplateNotReadyError,
)
from sqldao.mapper.loader import load_template
from sqldao.mapper.statement import Statement

_log = logging.getLogger(__name__)


class RegistryStateEnum(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"


class StatementRegistry:
    def __init__(
        self,
        template: str | os.PathLike[str] | None,
        context: Mapping[str, Any] | None = None,
        *,
        ready_timeout: float | None = None,
    ) -> None:
        self._template = Path(template) if template else None
        self._context = MappingProxyType(dict(context or {}))
        self._ready_timeout = ready_timeout
        self._statements: Mapping[str, Statement] = MappingProxyType({})
        self._error: BaseException | None = None
        self._loaded: asyncio.Future[RegistryStateEnum] | None = None
        self._task: asyncio.Task[None] | None = None
        self._state = (
            RegistryStateEnum.UNINITIALIZED
            if self._template is not None
            else RegistryStateEnum.UNAVAILABLE
        )

    @property
    def state(self) -> RegistryStateEnum:
        return self._state

    @property
    def error(self) -> BaseException | None:
        return self._error

    @property
    def template(self) -> Path | None:
        return self._template

    def names(self) -> list[str]:
        return list(self._statements)

    def start(self) -> None:
        """Schedule the load on the running loop.

        A no-op while a load is pending on this loop. A load left behind by
        another (closed) loop is replaced.
        """
        if self._state != RegistryStateEnum.UNINITIALIZED:
            return
        loop = asyncio.get_running_loop()
        loaded = self._loaded
        if loaded is not None and loaded.get_loop() is loop and not loaded.done():
            return
        loaded = loop.create_future()
        task = loop.create_task(self._load(loaded), name=f"sqldao-load:{self._template}")
        task.add_done_callback(functools.partial(self._load_done, loaded))
        self._loaded = loaded
        self._task = task

    async def _load(self, loaded: asyncio.Future[RegistryStateEnum]) -> None:
        try:
            statements = await load_template(self._template, self._context)
        except Exception as e:
            _log.error("Failed to load mapping template %s", self._template, exc_info=True)
            self._error = e
            self._state = RegistryStateEnum.FAILED
        else:
            self._statements = MappingProxyType(statements)
            self._state = RegistryStateEnum.READY
        if not loaded.done():
            loaded.set_result(self._state)

    def _load_done(
        self, loaded: asyncio.Future[RegistryStateEnum], task: asyncio.Task[None]
    ) -> None:
        # cancelled loads (e.g. by loop shutdown) leave the registry UNINITIALIZED
        if not task.cancelled():
            return
        loaded.cancel()
        if self._loaded is loaded:
            self._loaded = None
            self._task = None

    async def wait_ready(self) -> Mapping[str, Statement]:
        """Return the statement table once loaded.

        Raises ``TemplateNotConfiguredError`` when no document is configured or
        loading failed, ``TemplateNotReadyError`` when ``ready_timeout`` elapses.
        """
        if self._state == RegistryStateEnum.UNINITIALIZED:
            self.start()
            timeout = (
                self._ready_timeout
                if self._ready_timeout is not None
                else settings.MAPPER_READY_TIMEOUT
            )
            try:
                await asyncio.wait_for(asyncio.shield(self._loaded), timeout)
            except asyncio.TimeoutError as e:
                raise TemplateNotReadyError(
                    f"mapping template {self._template} not loaded after {timeout}s"
                ) from e
            if self._state == RegistryStateEnum.UNINITIALIZED:
                raise TemplateNotReadyError(f"mapping template {self._template} not loaded")

        if self._state == RegistryStateEnum.UNAVAILABLE:
            raise TemplateNotConfiguredError("no template")
        if self._state == RegistryStateEnum.FAILED:
            raise TemplateNotConfiguredError(
                f"no template: loading {self._template} failed: {self._error}"
            ) from self._error
        return self._statements

    async def resolve(self, name: str) -> Statement:
        statements = await self.wait_ready()
        statement = statements.get(name)
        if statement is None:
            raise StatementNotFoundError(name)
        return statement
