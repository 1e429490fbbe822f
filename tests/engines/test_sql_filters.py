"""Unit tests for engines.sql.filters."""

from sqldao.engines.sql.filters import (
    SqlSafe,
    in_list,
    sql_bool,
    sql_finalize,
    sql_float,
    sql_int,
    sql_like_start,
    sql_raw,
    sql_string,
)


class TestScalarFilters:
    def test_sql_string(self):
        assert sql_string("a'b") == "'a''b'"
        assert sql_string(None) == "NULL"
        assert isinstance(sql_string("x"), SqlSafe)

    def test_sql_int(self):
        assert sql_int("42") == "42"
        assert sql_int("x") == "NULL"
        assert sql_int(None) == "NULL"

    def test_sql_float(self):
        assert sql_float("2.5") == "2.5"
        assert sql_float(None) == "NULL"

    def test_sql_bool(self):
        assert sql_bool(1) == "TRUE"
        assert sql_bool(0) == "FALSE"
        assert sql_bool(None) == "NULL"

    def test_sql_like_start_escapes_wildcards(self):
        assert sql_like_start("50%_off") == "'50\\%\\_off%'"

    def test_sql_raw(self):
        assert sql_raw("users") == "users"


class TestInList:
    def test_values(self):
        assert in_list([1, "a", None, True]) == "(1, 'a', NULL, TRUE)"

    def test_empty_matches_nothing(self):
        assert in_list([]) == "(SELECT 1 WHERE 1=0)"
        assert in_list(None) == "(SELECT 1 WHERE 1=0)"

    def test_string_is_not_iterated(self):
        assert in_list("abc") == "(SELECT 1 WHERE 1=0)"


class TestFinalize:
    def test_safe_passthrough(self):
        assert sql_finalize(SqlSafe(":_arr_0")) == ":_arr_0"

    def test_literals(self):
        assert sql_finalize(3) == "3"
        assert sql_finalize(False) == "FALSE"
        assert sql_finalize("x") == "'x'"
        assert sql_finalize((1, 2)) == "(1, 2)"
