"""
Tests des constructeurs UPDATE et DELETE.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import Query, Expr, Order


# ============================================================
# SECTION 1: UPDATE
# ============================================================

class TestUpdate:
    """Tests du constructeur UPDATE."""

    def test_values_and_where(self):
        query = (Query.update()
                 .table("glyph")
                 .values([("aspect", 2.1), ("image", "x")])
                 .and_where(Expr.col("id").eq(1)))
        assert query.to_string("mysql") == \
            "UPDATE `glyph` SET `aspect` = 2.1, `image` = 'x' WHERE `id` = 1"

    def test_build_postgres(self):
        query = (Query.update()
                 .table("glyph")
                 .value("aspect", 2.1)
                 .and_where(Expr.col("id").eq(1)))
        sql, values = query.build("postgres")
        assert sql == 'UPDATE "glyph" SET "aspect" = $1 WHERE "id" = $2'
        assert values == [2.1, 1]

    def test_expression_value(self):
        query = Query.update().table("glyph").value("aspect", Expr.col("aspect").add(1))
        assert query.to_string("sqlite") == 'UPDATE "glyph" SET "aspect" = "aspect" + 1'

    def test_order_and_limit(self):
        query = (Query.update().table("glyph").value("a", 1)
                 .order_by("id", Order.ASC).limit(1))
        assert query.to_string("mysql") == "UPDATE `glyph` SET `a` = 1 ORDER BY `id` ASC LIMIT 1"

    def test_from_postgres(self):
        query = (Query.update()
                 .table("glyph")
                 .value("aspect", Expr.col(("font", "size")))
                 .from_("font")
                 .and_where(Expr.col(("glyph", "font_id")).equals(("font", "id"))))
        assert query.to_string("postgres") == (
            'UPDATE "glyph" SET "aspect" = "font"."size" FROM "font" '
            'WHERE "glyph"."font_id" = "font"."id"'
        )

    def test_from_mysql_becomes_join(self):
        query = (Query.update()
                 .table("glyph")
                 .value("aspect", Expr.col(("font", "size")))
                 .from_("font")
                 .and_where(Expr.col(("glyph", "font_id")).equals(("font", "id"))))
        assert query.to_string("mysql") == (
            "UPDATE `glyph` JOIN `font` ON `glyph`.`font_id` = `font`.`id` "
            "SET `glyph`.`aspect` = `font`.`size`"
        )

    def test_returning(self):
        query = Query.update().table("glyph").value("a", 1).returning_col("id")
        assert query.to_string("postgres") == 'UPDATE "glyph" SET "a" = 1 RETURNING "id"'
        assert query.to_string("mysql") == "UPDATE `glyph` SET `a` = 1"


# ============================================================
# SECTION 2: DELETE
# ============================================================

class TestDelete:
    """Tests du constructeur DELETE."""

    def test_where(self):
        query = Query.delete().from_table("glyph").and_where(Expr.col("id").eq(1))
        assert query.to_string("postgres") == 'DELETE FROM "glyph" WHERE "id" = 1'

    def test_schema_qualified(self):
        query = Query.delete().from_table(("public", "glyph"))
        assert query.to_string("postgres") == 'DELETE FROM "public"."glyph"'

    def test_order_and_limit(self):
        query = Query.delete().from_table("glyph").order_by("id", Order.DESC).limit(1)
        assert query.to_string("mysql") == "DELETE FROM `glyph` ORDER BY `id` DESC LIMIT 1"

    def test_build_sqlite(self):
        query = Query.delete().from_table("glyph").and_where(Expr.col("image").like("A%"))
        sql, values = query.build("sqlite")
        assert sql == 'DELETE FROM "glyph" WHERE "image" LIKE ?'
        assert values == ["A%"]

    def test_returning(self):
        query = (Query.delete().from_table("glyph")
                 .and_where(Expr.col("id").eq(1))
                 .returning_col("id"))
        assert query.to_string("sqlite") == 'DELETE FROM "glyph" WHERE "id" = 1 RETURNING "id"'
