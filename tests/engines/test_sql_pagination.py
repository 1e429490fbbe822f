"""Unit tests for engines.sql.pagination."""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from sqldao.engines.sql.pagination import derive_count_sql, paginate, window_sql
from sqldao.schemas import Paging
from tests.utils.db import run


class TestDeriveCountSql:
    def test_order_by_truncated(self):
        sql = "select id, name from users where age > :age order by name"
        assert derive_count_sql(sql) == "select count(1) as count from users where age > :age "

    def test_order_by_with_placeholder_kept(self):
        sql = "select id from t order by :sortcol"
        assert derive_count_sql(sql) == "select count(1) as count from t order by :sortcol"

    def test_positional_placeholder_after_order_by_kept(self):
        assert derive_count_sql("select a from t order by a limit ?").endswith("limit ?")

    def test_case_insensitive_and_case_preserving(self):
        sql = "SELECT Id, Name\nFROM Users WHERE Name = :userName ORDER BY Id"
        assert derive_count_sql(sql) == "select count(1) as count from Users WHERE Name = :userName "

    def test_only_first_from_replaced(self):
        sql = "select a from t where b in (select b from u)"
        assert derive_count_sql(sql) == "select count(1) as count from t where b in (select b from u)"

    def test_identifier_containing_from_not_a_boundary(self):
        sql = "select from_date, to_date from periods"
        assert derive_count_sql(sql) == "select count(1) as count from periods"

    def test_cast_is_not_a_placeholder(self):
        sql = "select a from t order by a::text"
        assert derive_count_sql(sql) == "select count(1) as count from t "

    def test_no_order_by(self):
        assert derive_count_sql("select * from t") == "select count(1) as count from t"


def test_window_sql():
    assert window_sql("select * from t", 20, 10) == "select * from t\nlimit 20,10"


class TestPaginate:
    def test_zero_count_runs_one_query(self, fake_engine: MagicMock):
        fake_engine.query.return_value = [{"count": 0}]
        paging = Paging(index=0, size=10)

        out = run(paginate(fake_engine, "select id from t where a = :a", paging, {"a": 1}))

        assert out is paging
        assert paging.count == 0
        assert not paging.items
        fake_engine.query.assert_awaited_once()
        assert fake_engine.query.await_args.args[0] == "select count(1) as count from t where a = :a"

    def test_fetches_window_when_count_positive(self, fake_engine: MagicMock):
        rows = [{"id": i} for i in range(10)]
        fake_engine.query.side_effect = [[{"count": 25}], rows]
        paging = Paging(index=0, size=10)

        run(paginate(fake_engine, "select id from t order by id", paging, {}))

        assert paging.count == 25
        assert paging.items == rows
        assert len(paging.items) <= paging.size
        first, second = fake_engine.query.await_args_list
        assert first.args[0] == "select count(1) as count from t"
        assert second.args[0] == "select id from t order by id limit 0,10"
        assert second.kwargs["replacements"] == {}

    def test_params_forwarded_to_both_queries(self, fake_engine: MagicMock):
        fake_engine.query.side_effect = [[{"count": 1}], [{"id": 7}]]
        run(paginate(fake_engine, "select id from t where a = :a", Paging(), {"a": 3}))
        for call in fake_engine.query.await_args_list:
            assert call.kwargs["replacements"] == {"a": 3}

    def test_window_survives_trailing_line_comment(self, fake_engine: MagicMock):
        fake_engine.query.side_effect = [[{"count": 25}], [{"id": 1}]]
        run(paginate(fake_engine, "select id from t order by id -- oldest first", Paging(), {}))
        _, second = fake_engine.query.await_args_list
        assert second.args[0] == "select id from t order by id limit 0,10"

    def test_empty_count_result_treated_as_zero(self, fake_engine: MagicMock):
        fake_engine.query.return_value = []
        paging = run(paginate(fake_engine, "select id from t", Paging(), None))
        assert paging.count == 0
        assert paging.items is None


class TestPaging:
    def test_defaults(self):
        p = Paging()
        assert (p.index, p.size, p.count, p.items) == (0, 10, None, None)

    def test_rejects_bad_window(self):
        with pytest.raises(ValidationError):
            Paging(index=-1, size=10)
        with pytest.raises(ValidationError):
            Paging(index=0, size=0)
