"""
Tests du constructeur INSERT et de la clause ON CONFLICT.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import Query, Expr, Func, OnConflict, ColValNumMismatch, UnsupportedFeatureError


def glyph_insert():
    return (Query.insert()
            .into_table("glyph")
            .columns(["aspect", "image"])
            .values_panic([5.15, "12A"])
            .values_panic([4.21, "123"]))


def upsert(on_conflict):
    return (Query.insert()
            .into_table("glyph")
            .columns(["id", "aspect", "image"])
            .values_panic([1, 2, "x"])
            .on_conflict(on_conflict))


# ============================================================
# SECTION 1: LIGNES DE VALEURS
# ============================================================

class TestValuesRows:
    """Tests des lignes VALUES."""

    def test_mysql_inline(self):
        assert glyph_insert().to_string("mysql") == (
            "INSERT INTO `glyph` (`aspect`, `image`) VALUES (5.15, '12A'), (4.21, '123')"
        )

    def test_postgres_build(self):
        sql, values = glyph_insert().build("postgres")
        assert sql == 'INSERT INTO "glyph" ("aspect", "image") VALUES ($1, $2), ($3, $4)'
        assert values.as_params() == [5.15, "12A", 4.21, "123"]

    def test_expression_values(self):
        query = (Query.insert().into_table("glyph").columns(["created", "aspect"])
                 .values_panic([Expr.current_timestamp(), 1]))
        assert query.to_string("sqlite") == \
            'INSERT INTO "glyph" ("created", "aspect") VALUES (CURRENT_TIMESTAMP, 1)'

    def test_length_mismatch(self):
        with pytest.raises(ColValNumMismatch) as exc_info:
            Query.insert().into_table("glyph").columns(["aspect"]).values([1, 2])
        assert exc_info.value == ColValNumMismatch(1, 2)

    def test_replace(self):
        query = Query.insert().replace().into_table("glyph").columns(["aspect"]).values_panic([1])
        assert query.to_string("mysql") == "REPLACE INTO `glyph` (`aspect`) VALUES (1)"
        assert query.to_string("sqlite") == 'REPLACE INTO "glyph" ("aspect") VALUES (1)'

    def test_replace_unsupported_on_postgres(self):
        query = Query.insert().replace().into_table("glyph").columns(["aspect"]).values_panic([1])
        with pytest.raises(UnsupportedFeatureError):
            query.to_string("postgres")


# ============================================================
# SECTION 2: AUTRES SOURCES
# ============================================================

class TestSources:
    """Tests de INSERT ... SELECT et des valeurs par défaut."""

    def test_select_from(self):
        select = (Query.select().column("aspect").from_("glyph")
                  .and_where(Expr.col("aspect").gt(2)))
        query = Query.insert().into_table("glyph").columns(["aspect"]).select_from(select)
        assert query.to_string("postgres") == \
            'INSERT INTO "glyph" ("aspect") SELECT "aspect" FROM "glyph" WHERE "aspect" > 2'

    def test_select_from_arity_mismatch(self):
        select = Query.select().columns(["a", "b"]).from_("glyph")
        with pytest.raises(ColValNumMismatch):
            Query.insert().into_table("glyph").columns(["aspect"]).select_from(select)

    def test_default_values(self):
        query = Query.insert().into_table("glyph").or_default_values()
        assert query.to_string("postgres") == 'INSERT INTO "glyph" VALUES (DEFAULT)'
        assert query.to_string("sqlite") == 'INSERT INTO "glyph" DEFAULT VALUES'

    def test_default_values_many(self):
        query = Query.insert().into_table("glyph").or_default_values(2)
        assert query.to_string("mysql") == "INSERT INTO `glyph` VALUES (DEFAULT), (DEFAULT)"


# ============================================================
# SECTION 3: ON CONFLICT
# ============================================================

class TestOnConflict:
    """Tests des clauses de conflit par dialecte."""

    def test_update_columns_postgres(self):
        query = upsert(OnConflict.column("id").update_columns(["aspect", "image"]))
        assert query.to_string("postgres") == (
            'INSERT INTO "glyph" ("id", "aspect", "image") VALUES (1, 2, \'x\') '
            'ON CONFLICT ("id") DO UPDATE SET "aspect" = "excluded"."aspect", '
            '"image" = "excluded"."image"'
        )

    def test_update_columns_mysql(self):
        query = upsert(OnConflict.column("id").update_columns(["aspect", "image"]))
        assert query.to_string("mysql") == (
            "INSERT INTO `glyph` (`id`, `aspect`, `image`) VALUES (1, 2, 'x') "
            "ON DUPLICATE KEY UPDATE `aspect` = VALUES(`aspect`), `image` = VALUES(`image`)"
        )

    def test_update_expression(self):
        query = upsert(OnConflict.column("id").value("aspect", Expr.col("aspect").add(1)))
        assert query.to_string("sqlite").endswith(
            'ON CONFLICT ("id") DO UPDATE SET "aspect" = "aspect" + 1')

    def test_do_nothing(self):
        query = upsert(OnConflict.column("id").do_nothing())
        assert query.to_string("postgres").endswith('ON CONFLICT ("id") DO NOTHING')

    def test_do_nothing_on_mysql(self):
        query = upsert(OnConflict.column("id").do_nothing_on(["id"]))
        assert query.to_string("mysql").endswith("ON DUPLICATE KEY UPDATE `id` = `id`")

    def test_on_constraint(self):
        query = upsert(OnConflict.on_constraint("glyph_pkey").do_nothing())
        assert query.to_string("postgres").endswith(
            'ON CONFLICT ON CONSTRAINT "glyph_pkey" DO NOTHING')

    def test_expression_target(self):
        query = upsert(OnConflict.expr(Func.lower(Expr.col("image"))).do_nothing())
        assert query.to_string("postgres").endswith('ON CONFLICT (LOWER("image")) DO NOTHING')

    def test_target_where(self):
        on_conflict = (OnConflict.column("id")
                       .target_and_where(Expr.col("image").is_null())
                       .do_nothing())
        assert upsert(on_conflict).to_string("postgres").endswith(
            'ON CONFLICT ("id") WHERE "image" IS NULL DO NOTHING')

    def test_action_where(self):
        on_conflict = (OnConflict.column("id")
                       .update_column("aspect")
                       .action_and_where(Expr.col(("glyph", "aspect")).gt(0)))
        assert upsert(on_conflict).to_string("postgres").endswith(
            'DO UPDATE SET "aspect" = "excluded"."aspect" WHERE "glyph"."aspect" > 0')


# ============================================================
# SECTION 4: RETURNING
# ============================================================

class TestReturning:
    """Tests de RETURNING (absent sous MySQL)."""

    def test_returning_column(self):
        query = glyph_insert().returning_col("id")
        assert query.to_string("postgres").endswith(' RETURNING "id"')
        assert query.to_string("sqlite").endswith(' RETURNING "id"')

    def test_returning_omitted_mysql(self):
        query = glyph_insert().returning_all()
        assert "RETURNING" not in query.to_string("mysql")

    def test_returning_exprs(self):
        query = glyph_insert().returning(
            Query.returning().exprs([Expr.col("id"), Expr.col("aspect").mul(2)]))
        assert query.to_string("postgres").endswith(' RETURNING "id", "aspect" * 2')
