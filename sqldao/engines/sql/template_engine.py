"""
Template compiler: mapping-document SQL text -> reusable renderer.

Templates are Jinja2 with the filters from ``filters`` and the block tags from
``extensions``. Compilation happens once per statement at load time; a
``SqlRenderer`` then turns a params mapping into SQL text.

Each renderer closes over a read-only *context* (``Utils`` helpers and the
``Model`` entity mapping of the owning DAO). Caller params are layered on top,
so a param may shadow a context name for that render only.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from jinja2 import (
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateSyntaxError,
    Undefined,
    UndefinedError,
    meta,
)

from sqldao.core.config import settings
from sqldao.engines.sql.extensions import SQL_EXTENSIONS
from sqldao.engines.sql.filters import SQL_FILTERS, sql_finalize
from sqldao.exceptions import TemplateCompileError, TemplateRenderError

_ENVIRONMENTS: dict[bool, Environment] = {}

_PREVIEW_LEN = 300


def _preview(source: str) -> str:
    return source[:_PREVIEW_LEN] + "..." if len(source) > _PREVIEW_LEN else source


def _get_sql_env(strict: bool) -> Environment:
    """Shared Environment per undefined-handling mode."""
    env = _ENVIRONMENTS.get(strict)
    if env is None:
        env = Environment(
            autoescape=False,
            extensions=SQL_EXTENSIONS,
            finalize=sql_finalize,
            undefined=StrictUndefined if strict else Undefined,
        )
        env.filters.update(SQL_FILTERS)
        _ENVIRONMENTS[strict] = env
    return env


class SqlRenderer:
    """Compiled statement template. Calling it renders SQL text."""

    def __init__(
        self,
        template: Template,
        source: str,
        context: Mapping[str, Any],
        parameters: tuple[str, ...],
    ) -> None:
        self._template = template
        self._source = source
        self._context = context
        self.parameters = parameters

    @property
    def source(self) -> str:
        return self._source

    def __call__(self, params: Mapping[str, Any] | None = None) -> str:
        values = {**self._context, **(params or {})}
        try:
            return self._template.render(values)
        except UndefinedError as e:
            raise TemplateRenderError(
                f"SQL template variable not found: {e}. "
                f"Available params: {sorted(params or {})}."
            ) from e
        except TemplateError as e:
            raise TemplateRenderError(
                f"SQL template render error: {e}. Template preview:\n{_preview(self._source)}"
            ) from e

    def __repr__(self) -> str:
        return f"SqlRenderer({_preview(self._source)!r})"


def compile_template(
    source: str,
    context: Mapping[str, Any] | None = None,
    *,
    strict: bool | None = None,
) -> SqlRenderer:
    """Compile *source* once. Syntax errors raise ``TemplateCompileError`` here,
    not on first render."""
    if strict is None:
        strict = settings.TEMPLATE_STRICT_UNDEFINED
    env = _get_sql_env(strict)
    ctx = MappingProxyType(dict(context or {}))
    try:
        ast = env.parse(source)
        template = env.from_string(ast)
    except TemplateSyntaxError as e:
        raise TemplateCompileError(
            f"SQL template syntax error: {e} (line {e.lineno}). "
            f"Template preview:\n{_preview(source)}"
        ) from e
    names = meta.find_undeclared_variables(ast) - set(ctx)
    return SqlRenderer(template, source, ctx, tuple(sorted(names)))


def parse_parameters(source: str) -> list[str]:
    """Variable names a template expects from its params (undeclared names)."""
    ast = _get_sql_env(False).parse(source)
    return sorted(meta.find_undeclared_variables(ast))
