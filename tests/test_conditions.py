"""
Tests de l'algèbre des conditions et des clauses WHERE / HAVING.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder import Query, Expr, Cond, Condition, ConditionMixError
from sql_builder.condition import all_, any_, ConditionType


def a():
    return Expr.col("a").eq(1)


def b():
    return Expr.col("b").eq(2)


def c():
    return Expr.col("c").eq(3)


def select():
    return Query.select().column("id").from_("t")


# ============================================================
# SECTION 1: ARBRE DE CONDITIONS
# ============================================================

class TestConditionTree:
    """Tests de Cond.all / Cond.any."""

    def test_add_returns_new_condition(self):
        base = Cond.all()
        extended = base.add(a())
        assert base.is_empty()
        assert extended.len() == 1

    def test_add_option_none(self):
        assert Cond.all().add_option(None).is_empty()
        assert Cond.all().add_option(a()).len() == 1

    def test_not_toggles(self):
        condition = Cond.any().add(a())
        assert condition.not_().negate is True
        assert condition.not_().not_().negate is False
        assert condition.negate is False

    def test_single_child_unwrapped(self):
        condition = Cond.all().add(Cond.any().add(a()))
        assert condition.conditions == [a()]

    def test_negated_single_child_kept(self):
        nested = Cond.any().add(a()).not_()
        condition = Cond.all().add(nested)
        assert isinstance(condition.conditions[0], Condition)

    def test_helpers(self):
        assert all_(a(), b()).condition_type == ConditionType.ALL
        assert any_(a(), b()).condition_type == ConditionType.ANY
        assert all_(a(), b()).len() == 2


# ============================================================
# SECTION 2: RENDU DES ARBRES
# ============================================================

class TestConditionRendering:
    """Tests de cond_where et de la réduction en expression."""

    def test_all(self):
        query = select().cond_where(all_(a(), b()))
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE "a" = 1 AND "b" = 2'

    def test_any(self):
        query = select().cond_where(any_(a(), b()))
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE "a" = 1 OR "b" = 2'

    def test_any_merged_with_and_where(self):
        query = select().cond_where(any_(a(), b())).and_where(c())
        assert query.to_string("postgres") == \
            'SELECT "id" FROM "t" WHERE ("a" = 1 OR "b" = 2) AND "c" = 3'

    def test_all_conditions_flattened(self):
        query = select().cond_where(all_(a(), b())).cond_where(all_(c()))
        assert query.to_string("postgres") == \
            'SELECT "id" FROM "t" WHERE "a" = 1 AND "b" = 2 AND "c" = 3'

    def test_negated(self):
        query = select().cond_where(all_(a(), b()).not_())
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE NOT ("a" = 1 AND "b" = 2)'

    def test_empty_condition_omitted(self):
        assert select().cond_where(Cond.any()).to_string("postgres") == 'SELECT "id" FROM "t"'

    def test_negated_empty_condition(self):
        query = select().cond_where(Cond.all().not_())
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE NOT TRUE'

    def test_nested_empty_any_is_false(self):
        query = select().cond_where(Cond.all().add(Cond.any()).add(a()))
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE FALSE AND "a" = 1'

    def test_values_in_textual_order(self):
        query = select().and_where(a()).and_where(Expr.col("b").is_in([2, 3]))
        sql, values = query.build("postgres")
        assert sql == 'SELECT "id" FROM "t" WHERE "a" = $1 AND "b" IN ($2, $3)'
        assert values.as_params() == [1, 2, 3]


# ============================================================
# SECTION 3: CHAÎNE and_where / or_where
# ============================================================

class TestLogicalChain:
    """Tests de la chaîne historique."""

    def test_or_chain(self):
        query = select().or_where(a()).or_where(b())
        assert query.to_string("mysql") == "SELECT `id` FROM `t` WHERE `a` = 1 OR `b` = 2"

    def test_and_after_or(self):
        query = select().or_where(a()).and_where(b())
        assert query.to_string("mysql") == "SELECT `id` FROM `t` WHERE `a` = 1 AND `b` = 2"

    def test_nested_binary_wrapped(self):
        query = select().or_where(Expr.col("a").eq(1).or_(Expr.col("b").eq(2))).or_where(c())
        assert query.to_string("postgres") == \
            'SELECT "id" FROM "t" WHERE ("a" = 1 OR "b" = 2) OR "c" = 3'

    def test_single_link_not_wrapped(self):
        query = select().or_where(Expr.col("a").eq(1).or_(Expr.col("b").eq(2)))
        assert query.to_string("postgres") == 'SELECT "id" FROM "t" WHERE "a" = 1 OR "b" = 2'

    def test_link_with_simple_right_operand_not_wrapped(self):
        """La chaîne ne parenthèse pas un maillon dont l'opérande droit n'est pas binaire."""
        query = select().or_where(a()).and_where(b().or_(Expr.cust("c")))
        assert query.to_string("postgres") == \
            'SELECT "id" FROM "t" WHERE "a" = 1 AND "b" = 2 OR (c)'

    def test_or_after_tree_fails(self):
        with pytest.raises(ConditionMixError):
            select().and_where(a()).or_where(b())

    def test_tree_after_chain_fails(self):
        with pytest.raises(ConditionMixError):
            select().or_where(a()).cond_where(all_(b()))


# ============================================================
# SECTION 4: HAVING ET JOINTURES
# ============================================================

class TestOtherClauses:
    """Tests des conditions hors WHERE."""

    def test_having(self):
        query = (Query.select()
                 .column("font_id")
                 .expr(Expr.col("size").sum())
                 .from_("glyph")
                 .group_by_col("font_id")
                 .and_having(Expr.col("size").sum().gt(10)))
        assert query.to_string("postgres") == (
            'SELECT "font_id", SUM("size") FROM "glyph" GROUP BY "font_id" HAVING SUM("size") > 10'
        )

    def test_join_on_condition(self):
        query = (Query.select()
                 .column(("g", "id"))
                 .from_as("glyph", "g")
                 .left_join("font", any_(Expr.col(("g", "font_id")).equals(("font", "id")),
                                         Expr.col(("g", "font_id")).is_null())))
        assert query.to_string("sqlite") == (
            'SELECT "g"."id" FROM "glyph" AS "g" LEFT JOIN "font" '
            'ON "g"."font_id" = "font"."id" OR "g"."font_id" IS NULL'
        )
