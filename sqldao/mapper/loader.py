"""
Mapping loader: XML document -> ``{name: Statement}``.

Document shape::

    <mapper>
      <select id="byAge"><![CDATA[
        SELECT id, name FROM users WHERE age > :age
      ]]></select>
      <select id="countAll" single="true">SELECT count(1) AS n FROM users</select>
      <raw id="rename">UPDATE users SET name = :name WHERE id = :id</raw>
    </mapper>

The root element is not significant. Children are grouped by tag; a tag seen
once maps to a single element, a repeated tag to a list. Attributes are merged
into the element mapping and its trimmed text is stored under ``_``.
"""

import asyncio
import logging
import os
from collections.abc import Mapping
from typing import Any

from lxml import etree

from sqldao.core.engine import QueryTypeEnum
from sqldao.engines.sql.template_engine import compile_template
from sqldao.exceptions import MappingDocumentError
from sqldao.mapper.statement import MAPPER_TYPES, Statement

_log = logging.getLogger(__name__)

TEXT_KEY = "_"


def _element_value(el: etree._Element) -> Any:
    parts = [el.text or ""]
    children: dict[str, Any] = {}
    for child in el:
        if isinstance(child.tag, str):
            tag = etree.QName(child).localname
            value = _element_value(child)
            if tag in children:
                existing = children[tag]
                if isinstance(existing, list):
                    existing.append(value)
                else:
                    children[tag] = [existing, value]
            else:
                children[tag] = value
        parts.append(child.tail or "")
    text = "".join(parts).strip()

    attrs = dict(el.attrib)
    if not attrs and not children:
        return text
    value: dict[str, Any] = {**attrs, **children}
    if text:
        value[TEXT_KEY] = text
    return value


def parse_mapping_document(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Parse the document at *path* into nested dicts (root wrapper dropped)."""
    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.parse(os.fspath(path), parser).getroot()
    except (OSError, etree.XMLSyntaxError) as e:
        raise MappingDocumentError(f"cannot parse mapping document {path}: {e}") from e
    value = _element_value(root)
    return value if isinstance(value, dict) else {}


def _is_true(value: Any) -> bool:
    return isinstance(value, str) and value.strip().lower() == "true"


def build_statements(
    document: Mapping[str, Any],
    context: Mapping[str, Any] | None = None,
) -> dict[str, Statement]:
    """Compile every recognized element of a parsed document.

    Unknown top-level keys are logged and skipped. An element without ``id``,
    a duplicated ``id`` or a template that does not compile raises
    ``MappingDocumentError`` / ``TemplateCompileError``.
    """
    statements: dict[str, Statement] = {}
    for key, value in document.items():
        query_type = key.upper()
        if query_type not in MAPPER_TYPES:
            _log.warning("Mapping document: unsupported statement type %r skipped", key)
            continue
        items = value if isinstance(value, list) else [value]
        for item in items:
            if not isinstance(item, dict) or not item.get("id"):
                raise MappingDocumentError(f"<{key}> element without an id attribute")
            name = item["id"]
            if name in statements:
                raise MappingDocumentError(f"duplicate statement id: {name}")
            statements[name] = Statement(
                name=name,
                type=QueryTypeEnum(query_type),
                renderer=compile_template(item.get(TEXT_KEY, ""), context),
                single=_is_true(item.get("single")),
            )
    return statements


async def load_template(
    path: str | os.PathLike[str],
    context: Mapping[str, Any] | None = None,
) -> dict[str, Statement]:
    """Parse (off the event loop) and compile the mapping document at *path*."""
    document = await asyncio.to_thread(parse_mapping_document, path)
    statements = build_statements(document, context)
    _log.info("Loaded mapping template %s: %s", path, ", ".join(statements) or "(empty)")
    return statements
