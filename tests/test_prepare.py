"""
Tests de la réinjection des valeurs dans un SQL paramétré.
"""

import datetime

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import Query, Expr, inject_parameters, MysqlQueryBuilder


class TestInjectParameters:
    """Tests de inject_parameters."""

    def test_question_marks(self):
        sql = "SELECT * FROM t WHERE a = ? AND b = ?"
        assert inject_parameters(sql, [1, "x"], "mysql") == \
            "SELECT * FROM t WHERE a = 1 AND b = 'x'"

    def test_numbered_placeholders(self):
        assert inject_parameters("SELECT $2, $1", ["a", 2], "postgres") == "SELECT 2, 'a'"

    def test_placeholder_inside_string_untouched(self):
        assert inject_parameters("SELECT '?', ?", [1], "sqlite") == "SELECT '?', 1"

    def test_dialect_escaping(self):
        assert inject_parameters("SELECT ?", ["it's"], MysqlQueryBuilder()) == "SELECT 'it\\'s'"
        assert inject_parameters("SELECT $1", ["it's"], "postgres") == "SELECT 'it''s'"

    def test_python_objects(self):
        result = inject_parameters("SELECT ?", [datetime.date(2020, 1, 2)], "sqlite")
        assert result == "SELECT '2020-01-02'"

    def test_missing_value(self):
        with pytest.raises(ValueError):
            inject_parameters("SELECT ?, ?", [1], "mysql")

    def test_numbered_out_of_range(self):
        with pytest.raises(ValueError):
            inject_parameters("SELECT $3", [1, 2], "postgres")

    @pytest.mark.parametrize("dialect", ["mysql", "postgres", "sqlite"])
    def test_matches_inline_rendering(self, dialect):
        query = (Query.select()
                 .column("character")
                 .from_("character")
                 .and_where(Expr.col("size_w").is_in([3, 4]))
                 .and_where(Expr.col("character").like("A%")))
        sql, values = query.build(dialect)
        assert inject_parameters(sql, values, dialect) == query.to_string(dialect)
