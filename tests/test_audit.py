"""
Tests de l'audit des tables lues et écrites.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import (
    Query, Expr, Func, Order, Returning, UnionType, CommonTableExpression, WithClause,
    AccessType, AuditError,
)
from sql_builder.audit import QueryAccessRequest


def font_ids():
    return Query.select().column("id").from_("font")


# ============================================================
# SECTION 1: LECTURES
# ============================================================

class TestSelectAudit:
    """Tests des tables lues par un SELECT."""

    def test_single_table(self):
        audit = Query.select().column("id").from_("glyph").audit()
        assert audit.selected_tables() == ["glyph"]
        assert audit.inserts() == []

    def test_join_and_where_subquery(self):
        query = (Query.select()
                 .column("id")
                 .from_("glyph")
                 .left_join("font", Expr.col(("glyph", "font_id")).equals(("font", "id")))
                 .and_where(Expr.col("id").in_subquery(
                     Query.select().column("id").from_(("public", "character")))))
        assert query.audit().selects() == [
            (None, "glyph"), (None, "font"), ("public", "character"),
        ]

    def test_duplicates_removed(self):
        query = (Query.select().column(("g1", "id"))
                 .from_as("glyph", "g1")
                 .inner_join("glyph", Expr.cust("TRUE")))
        assert query.audit().selected_tables() == ["glyph"]

    def test_union(self):
        query = (Query.select().column("id").from_("glyph")
                 .union(UnionType.ALL, font_ids()))
        assert query.audit().selected_tables() == ["glyph", "font"]

    def test_subquery_in_select_list(self):
        query = Query.select().expr(Expr.exists(font_ids())).from_("glyph")
        assert query.audit().selected_tables() == ["font", "glyph"]

    def test_subquery_inside_function_and_case(self):
        expr = (Expr.case(Expr.col("a").in_subquery(font_ids()), 1)
                .finally_(Func.coalesce([Query.select().column("x").from_("extra"), 0])))
        query = Query.select().expr(expr).from_("glyph")
        assert query.audit().selected_tables() == ["font", "extra", "glyph"]

    def test_from_subquery(self):
        query = Query.select().column("id").from_subquery(font_ids(), "f")
        assert query.audit().selected_tables() == ["font"]

    def test_having(self):
        query = (Query.select().column("font_id").from_("glyph")
                 .group_by_col("font_id")
                 .and_having(Expr.col("font_id").in_subquery(font_ids())))
        assert query.audit().selected_tables() == ["glyph", "font"]

    def test_group_by_and_order_by_subqueries(self):
        query = (Query.select().column("id").from_("glyph")
                 .add_group_by([Query.select().column("id").from_("extra")])
                 .order_by_expr(Expr.col("font_id").eq(font_ids()), Order.ASC))
        assert query.audit().selected_tables() == ["glyph", "extra", "font"]


# ============================================================
# SECTION 2: ÉCRITURES
# ============================================================

class TestWriteAudit:
    """Tests des INSERT, UPDATE et DELETE."""

    def test_insert(self):
        query = Query.insert().into_table("glyph").columns(["a"]).values_panic([1])
        audit = query.audit()
        assert audit.inserted_tables() == ["glyph"]
        assert audit.selects() == []

    def test_insert_returning_reads_target(self):
        query = (Query.insert().into_table("glyph").columns(["a"]).values_panic([1])
                 .returning_col("id"))
        assert query.audit().requests == [
            QueryAccessRequest(AccessType.SELECT, None, "glyph"),
            QueryAccessRequest(AccessType.INSERT, None, "glyph"),
        ]

    def test_insert_select(self):
        query = (Query.insert().into_table("glyph").columns(["id"])
                 .select_from(font_ids()))
        audit = query.audit()
        assert audit.inserted_tables() == ["glyph"]
        assert audit.selected_tables() == ["font"]

    def test_update_with_from(self):
        query = (Query.update().table(("s", "glyph"))
                 .value("a", Expr.col(("font", "size")))
                 .from_("font"))
        audit = query.audit()
        assert audit.updates() == [("s", "glyph")]
        assert audit.selects() == [(None, "font")]

    def test_update_where_subquery(self):
        query = (Query.update().table("glyph").value("a", 1)
                 .and_where(Expr.col("font_id").in_subquery(font_ids())))
        audit = query.audit()
        assert audit.updated_tables() == ["glyph"]
        assert audit.selected_tables() == ["font"]

    def test_delete(self):
        query = (Query.delete().from_table("glyph")
                 .and_where(Expr.col("font_id").in_subquery(font_ids())))
        audit = query.audit()
        assert audit.deletes() == [(None, "glyph")]
        assert audit.selected_tables() == ["font"]

    def test_delete_without_table(self):
        with pytest.raises(AuditError):
            Query.delete().audit()

    def test_update_order_by_subquery(self):
        query = (Query.update().table("glyph").value("a", 1)
                 .order_by_expr(Expr.col("font_id").in_subquery(font_ids()), Order.DESC))
        assert query.audit().selected_tables() == ["font"]

    def test_delete_returning_subquery(self):
        query = (Query.delete().from_table("glyph")
                 .returning(Returning().exprs([Expr.col("id"), font_ids()])))
        assert query.audit().requests == [
            QueryAccessRequest(AccessType.SELECT, None, "glyph"),
            QueryAccessRequest(AccessType.DELETE, None, "glyph"),
            QueryAccessRequest(AccessType.SELECT, None, "font"),
        ]


# ============================================================
# SECTION 3: CTE
# ============================================================

class TestCteAudit:
    """Les noms de CTE ne sont pas des tables externes."""

    def cte(self):
        return (CommonTableExpression().table_name("cte")
                .query(Query.select().column("id").from_("glyph")))

    def test_with_cte(self):
        query = Query.select().column("id").from_("cte").with_cte(self.cte())
        assert query.audit().selected_tables() == ["glyph"]

    def test_with_query(self):
        query = WithClause().cte(self.cte()).query(
            Query.select().column("id").from_("cte"))
        assert query.audit().selected_tables() == ["glyph"]

    def test_qualified_name_kept(self):
        query = Query.select().column("id").from_(("s", "cte")).with_cte(self.cte())
        assert query.audit().selects() == [("s", "cte"), (None, "glyph")]

    def test_with_delete(self):
        query = WithClause().cte(self.cte()).query(
            Query.delete().from_table("font")
            .and_where(Expr.col("id").in_subquery(Query.select().column("id").from_("cte"))))
        audit = query.audit()
        assert audit.deleted_tables() == ["font"]
        assert audit.selected_tables() == ["glyph"]
