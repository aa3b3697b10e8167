"""
Tests de la ligne de commande et de l'export JSON.
"""

import datetime
import json

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import Query, Expr, QueryExporter, Value
from sql_builder.__main__ import main
from sql_builder.json_exporter import to_json, value_to_json


# ============================================================
# SECTION 1: EXPORT JSON
# ============================================================

class TestQueryExporter:
    """Tests de QueryExporter."""

    def test_export_built_query(self):
        sql, values = (Query.select().column("id").from_("glyph")
                       .and_where(Expr.col("image").eq("A")).build("postgres"))
        data = json.loads(QueryExporter().export(sql, values, "postgres"))
        assert data == {
            "sql": 'SELECT "id" FROM "glyph" WHERE "image" = $1',
            "values": ["A"],
            "dialect": "postgres",
        }

    def test_dialect_omitted(self):
        data = QueryExporter().export_to_dict("SELECT ?", [1])
        assert "dialect" not in data

    def test_compact(self):
        assert "\n" not in to_json("SELECT ?", [1], compact=True)

    def test_value_conversion(self):
        assert value_to_json(Value.from_python(b"\x01\xff")) == "01FF"
        assert value_to_json(Value.from_python(datetime.date(2020, 1, 2))) == "2020-01-02"
        assert value_to_json(Value.from_python([1, None])) == [1, None]
        assert value_to_json(Value.json({"a": 1})) == {"a": 1}

    def test_export_to_file(self, tmp_path):
        target = tmp_path / "query.json"
        QueryExporter().export_to_file("SELECT ?", [1], str(target))
        assert json.loads(target.read_text(encoding='utf-8'))["values"] == [1]

    def test_audit_export(self):
        audit = (Query.insert().into_table(("s", "glyph")).columns(["id"])
                 .select_from(Query.select().column("id").from_("font"))).audit()
        assert QueryExporter().audit_to_dict(audit) == {
            "requests": [
                {"access_type": "INSERT", "schema": "s", "table": "glyph"},
                {"access_type": "SELECT", "schema": None, "table": "font"},
            ]
        }


# ============================================================
# SECTION 2: LIGNE DE COMMANDE
# ============================================================

class TestCommandLine:
    """Tests de main()."""

    def test_tokens(self, capsys):
        main(["--tokens", "SELECT ?"])
        data = json.loads(capsys.readouterr().out)
        assert data["tokens"][0] == {"type": "UNQUOTED", "value": "SELECT", "position": 0}
        assert data["tokens"][-1]["type"] == "PUNCTUATION"

    def test_inject(self, capsys):
        main(["--inject", "--dialect", "postgres", "--values", '[1, "A"]', "SELECT $1, $2"])
        assert capsys.readouterr().out.strip() == "SELECT 1, 'A'"

    def test_export(self, capsys):
        main(["--values", "[1]", "SELECT ?"])
        data = json.loads(capsys.readouterr().out)
        assert data == {"sql": "SELECT ?", "values": [1], "dialect": "MySQL"}

    def test_input_file_and_output(self, tmp_path, capsys):
        source = tmp_path / "query.sql"
        source.write_text("SELECT ?", encoding='utf-8')
        target = tmp_path / "out.txt"
        main(["--inject", "--values", '["x"]', "-f", str(source), "-o", str(target)])
        assert target.read_text(encoding='utf-8') == "SELECT 'x'"
        assert "Résultat sauvegardé" in capsys.readouterr().out

    def test_missing_file(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-f", "/nonexistent/query.sql"])
        assert exc_info.value.code == 1
        assert "n'existe pas" in capsys.readouterr().err

    def test_no_sql(self, capsys):
        with pytest.raises(SystemExit):
            main([])
        assert "Aucun SQL" in capsys.readouterr().err

    def test_values_not_a_list(self, capsys):
        with pytest.raises(SystemExit):
            main(["--values", '{"a": 1}', "SELECT ?"])
        assert "Erreur" in capsys.readouterr().err

    def test_missing_placeholder_value(self, capsys):
        with pytest.raises(SystemExit):
            main(["--inject", "SELECT ?"])
        assert "placeholder" in capsys.readouterr().err

    def test_unknown_dialect(self, capsys):
        with pytest.raises(SystemExit):
            main(["--dialect", "oracle", "SELECT 1"])
        assert "Unknown dialect" in capsys.readouterr().err
