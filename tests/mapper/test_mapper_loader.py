"""Unit tests for mapper.loader."""

import logging
from pathlib import Path

import pytest

from sqldao.core.engine import QueryTypeEnum
from sqldao.engines.sql.helpers import TemplateUtils
from sqldao.exceptions import MappingDocumentError, TemplateCompileError
from sqldao.mapper.loader import build_statements, load_template, parse_mapping_document
from tests.utils.db import run
from tests.utils.entities import Person


class TestParseMappingDocument:
    def test_shape(self, write_mapper):
        path = write_mapper(
            """<mapper>
                 <select id="a">  SELECT 1  </select>
                 <select id="b" single="true">SELECT 2</select>
                 <raw id="c"><![CDATA[UPDATE t SET x = 1 WHERE y < 2]]></raw>
               </mapper>"""
        )
        doc = parse_mapping_document(path)
        assert doc == {
            "select": [
                {"id": "a", "_": "SELECT 1"},
                {"id": "b", "single": "true", "_": "SELECT 2"},
            ],
            "raw": {"id": "c", "_": "UPDATE t SET x = 1 WHERE y < 2"},
        }

    def test_empty_root(self, write_mapper):
        assert parse_mapping_document(write_mapper("<mapper/>")) == {}

    def test_malformed(self, write_mapper):
        with pytest.raises(MappingDocumentError, match="cannot parse"):
            parse_mapping_document(write_mapper("<mapper><select id='a'>"))

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(MappingDocumentError):
            parse_mapping_document(tmp_path / "absent.xml")


class TestBuildStatements:
    def test_types_and_flags(self):
        doc = {
            "SELECT": [{"id": "a", "_": "SELECT 1"}, {"id": "b", "single": "TRUE", "_": "SELECT 2"}],
            "Raw": {"id": "c", "_": "DELETE FROM t", "single": "false"},
        }
        statements = build_statements(doc)
        assert {n: (s.type, s.single) for n, s in statements.items()} == {
            "a": (QueryTypeEnum.SELECT, False),
            "b": (QueryTypeEnum.SELECT, True),
            "c": (QueryTypeEnum.RAW, False),
        }
        assert statements["c"].collapses
        assert not statements["a"].collapses
        assert statements["a"].render({}) == "SELECT 1"

    def test_unknown_key_skipped(self, caplog: pytest.LogCaptureFixture):
        with caplog.at_level(logging.WARNING, logger="sqldao.mapper.loader"):
            statements = build_statements({"update": {"id": "u", "_": "UPDATE t"}})
        assert statements == {}
        assert "update" in caplog.text

    def test_missing_id(self):
        with pytest.raises(MappingDocumentError, match="without an id"):
            build_statements({"select": {"_": "SELECT 1"}})

    def test_plain_text_element_has_no_id(self):
        with pytest.raises(MappingDocumentError):
            build_statements({"select": "SELECT 1"})

    def test_duplicate_id(self):
        with pytest.raises(MappingDocumentError, match="duplicate statement id: a"):
            build_statements({"select": {"id": "a", "_": "SELECT 1"}, "raw": {"id": "a", "_": "x"}})

    def test_compile_error_surfaces(self):
        with pytest.raises(TemplateCompileError):
            build_statements({"select": {"id": "a", "_": "SELECT {% if x %}"}})

    def test_context_reaches_renderer(self):
        statements = build_statements(
            {"select": {"id": "a", "_": "SELECT {{ Utils.field_attribute_map(Model.Person) }} FROM person"}},
            {"Utils": TemplateUtils, "Model": {"Person": Person}},
        )
        assert statements["a"].render() == (
            "SELECT id AS id,name AS name,age AS age,email AS email FROM person"
        )


def test_load_template_fixture(person_mapper: Path):
    statements = run(
        load_template(person_mapper, {"Utils": TemplateUtils, "Model": {"Person": Person}})
    )
    assert sorted(statements) == ["byIds", "byMinAge", "countAll", "insert", "petsOf", "rename", "search"]
    assert statements["countAll"].single
    assert statements["rename"].type == QueryTypeEnum.RAW
