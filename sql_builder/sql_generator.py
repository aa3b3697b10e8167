"""
SQL Generator - Rend l'arbre de requêtes en SQL.

Ce module contient le moteur de rendu partagé par tous les dialectes:
parcours des requêtes, règles de précédence et de parenthésage des
expressions, rendu des conditions. Les dialectes (voir dialects.py)
ne redéfinissent que les points où leur syntaxe diverge.

Le rendu écrit dans un SqlWriter: les valeurs paramétrées y sont
poussées dans l'ordre textuel des placeholders.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .ast_nodes import (
    ARITHMETIC_OPERS, BETWEEN_OPERS, COMPARISON_OPERS, IN_OPERS, IS_OPERS,
    LEFT_ASSOCIATIVE_OPERS, LIKE_OPERS, LOGICAL_OPERS, SHIFT_OPERS,
    AsEnumExpr, BinaryExpr, BinOper, ColumnExpr, ConstantExpr, CustomBinOper,
    CustomExpr, CustomFunction, CustomWithExpr, Expr, Function, FunctionCall,
    KeywordExpr, PgBinOper, PgFunction, SqliteBinOper, SubQueryExpr, SubQueryOper,
    TupleExpr, TypeNameExpr, UnaryExpr, ValueExpr, ValuesExpr, cast_as,
)
from .condition import CaseStatement, Condition, ConditionHolder, LogicalOper
from .errors import SQLBuilderError, UnsupportedFeatureError
from .idens import (
    ColumnRef, CustomKeyword, FunctionRef, Iden, SubQueryRef, Table, TableName,
    TableRef, TypeRef, ValuesRef,
)
from .on_conflict import OnConflict, OnConflictActionKind, OnConflictTargetKind
from .options import BuildOptions, get_prefer_more_parentheses
from .statements import (
    JoinExpr, LockClause, Order, OrderExpr,
    OrderField, ReturningClause, ReturningKind, SelectExpr,
)
from .tokenizer import tokenize
from .value_encoder import ValueEncoder
from .values import Value
from .window import FrameKind, Frame, WindowStatement
from .writer import SqlWriter

logger = logging.getLogger(__name__)


# Expressions qui ne demandent jamais de parenthèses
_SIMPLE_EXPRS = (
    ColumnExpr, TupleExpr, ValuesExpr, ConstantExpr, FunctionCall, ValueExpr,
    KeywordExpr, CaseStatement, SubQueryExpr, TypeNameExpr,
)


@dataclass
class DialectFeatures:
    """Caractéristiques d'un dialecte, lues par le moteur de rendu."""

    # Nom du dialecte (messages d'erreur, export)
    name: str = "generic"

    # Caractère de citation des identifiants
    identifier_quote: str = '"'

    # Placeholder des valeurs paramétrées, numéroté ($1, $2...) ou non (?)
    placeholder: str = '?'
    numbered_placeholders: bool = False

    # Famille d'opérateurs binaires propres au dialecte (PgBinOper, SqliteBinOper)
    extension_operators: Optional[type] = None

    # Supporte les fonctions PgFunction
    supports_pg_functions: bool = False

    # Supporte RETURNING
    supports_returning: bool = True

    # Supporte les verrous FOR UPDATE / FOR SHARE
    supports_lock: bool = True

    # Les membres d'une union sont entre parenthèses
    parenthesized_unions: bool = True

    # Supporte REPLACE INTO
    supports_replace: bool = True

    # Supporte FULL OUTER JOIN
    supports_full_outer_join: bool = True

    # Supporte ANY / SOME / ALL devant une sous-requête
    supports_subquery_quantifiers: bool = True

    # Supporte DISTINCT ON (...) et DISTINCTROW
    supports_distinct_on: bool = False
    supports_distinct_row: bool = False

    # Supporte [NOT] MATERIALIZED et SEARCH / CYCLE dans les CTE
    supports_cte_materialization: bool = False
    supports_cte_search_cycle: bool = False

    # Préfixe des lignes d'une liste VALUES utilisée comme table (MySQL: ROW)
    values_row_prefix: str = ''

    # LIMIT implicite quand seul OFFSET est donné
    offset_only_limit: Optional[int] = None


class QueryBuilder(ValueEncoder):
    """
    Moteur de rendu SQL.

    Les nœuds sont dispatchés par nom de classe vers les méthodes
    `_prepare_<NomDeClasse>`.
    """

    features = DialectFeatures()

    def __init__(self, options: Optional[BuildOptions] = None):
        """
        Initialise le moteur de rendu.

        Args:
            options: Options de rendu; à défaut, les options globales sont lues au rendu
        """
        self.options = options

    @property
    def dialect_name(self) -> str:
        return self.features.name

    @property
    def prefer_more_parentheses(self) -> bool:
        if self.options is not None:
            return self.options.prefer_more_parentheses
        return get_prefer_more_parentheses()

    def placeholder(self) -> Tuple[str, bool]:
        """Placeholder du dialecte et indicateur de numérotation."""
        return self.features.placeholder, self.features.numbered_placeholders

    def _dispatch(self, node: Any, sql: SqlWriter) -> None:
        node_type = type(node).__name__
        method = getattr(self, f'_prepare_{node_type}', None)
        if method is None:
            raise SQLBuilderError(f"Cannot render node of type {node_type}")
        method(node, sql)

    # ============== Requêtes ==============

    def prepare_query_statement(self, query: Any, sql: SqlWriter) -> None:
        """Rend une requête complète (SELECT, INSERT, UPDATE, DELETE, WITH)."""
        self._dispatch(query, sql)

    def _prepare_SelectStatement(self, select, sql: SqlWriter) -> None:
        if select.with_clause is not None:
            self.prepare_with_clause(select.with_clause, sql)

        sql.write_str("SELECT ")
        if select.distinct_mode is not None:
            self.prepare_select_distinct(select.distinct_mode, sql)
            sql.write_str(" ")

        for i, select_expr in enumerate(select.selects):
            if i > 0:
                sql.write_str(", ")
            self.prepare_select_expr(select_expr, sql)

        if select.from_tables:
            sql.write_str(" FROM ")
            for i, table_ref in enumerate(select.from_tables):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_table_ref(table_ref, sql)
                self.prepare_index_hints(table_ref, select, sql)

        for join in select.joins:
            sql.write_str(" ")
            self.prepare_join_expr(join, sql)

        self.prepare_condition(select.where_clause, "WHERE", sql)

        if select.groups:
            sql.write_str(" GROUP BY ")
            for i, expr in enumerate(select.groups):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_expr(expr, sql)

        self.prepare_condition(select.having_clause, "HAVING", sql)

        for union_type, union_select in select.unions_list:
            self.prepare_union(union_type, union_select, sql)

        if select.orders:
            sql.write_str(" ORDER BY ")
            self.prepare_order_exprs(select.orders, sql)

        self.prepare_select_limit_offset(select, sql)

        if select.lock_clause is not None:
            self.prepare_select_lock(select.lock_clause, sql)

        if select.window_clause is not None:
            name, window = select.window_clause
            sql.write_str(" WINDOW ")
            self.prepare_iden(name, sql)
            sql.write_str(" AS (")
            self.prepare_window_statement(window, sql)
            sql.write_str(")")

    def _prepare_InsertStatement(self, insert, sql: SqlWriter) -> None:
        if insert.with_clause is not None:
            self.prepare_with_clause(insert.with_clause, sql)

        if insert.replace_:
            if not self.features.supports_replace:
                raise UnsupportedFeatureError("REPLACE", self.dialect_name)
            sql.write_str("REPLACE")
        else:
            sql.write_str("INSERT")
        if insert.table is not None:
            sql.write_str(" INTO ")
            self.prepare_table_ref(insert.table, sql)

        if (insert.default_values and not insert.cols and not insert.values_rows
                and insert.select_source is None):
            sql.write_str(" ")
            self.insert_default_values(insert.default_values, sql)
        else:
            sql.write_str(" (")
            for i, column in enumerate(insert.cols):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_iden(column, sql)
            sql.write_str(")")

            if insert.values_rows:
                sql.write_str(" VALUES ")
                for i, row in enumerate(insert.values_rows):
                    if i > 0:
                        sql.write_str(", ")
                    sql.write_str("(")
                    for j, expr in enumerate(row):
                        if j > 0:
                            sql.write_str(", ")
                        self.prepare_expr(expr, sql)
                    sql.write_str(")")
            elif insert.select_source is not None:
                sql.write_str(" ")
                self.prepare_query_statement(insert.select_source, sql)

        if insert.on_conflict_clause is not None:
            self.prepare_on_conflict(insert.on_conflict_clause, sql)
        self.prepare_returning(insert.returning_clause, sql)

    def insert_default_values(self, num_rows: int, sql: SqlWriter) -> None:
        sql.write_str("VALUES ")
        for i in range(num_rows):
            if i > 0:
                sql.write_str(", ")
            sql.write_str("(DEFAULT)")

    def _prepare_UpdateStatement(self, update, sql: SqlWriter) -> None:
        if update.with_clause is not None:
            self.prepare_with_clause(update.with_clause, sql)

        sql.write_str("UPDATE ")
        if update.table_ref is not None:
            self.prepare_table_ref(update.table_ref, sql)
        self.prepare_update_join(update, sql)

        sql.write_str(" SET ")
        for i, (column, expr) in enumerate(update.assignments):
            if i > 0:
                sql.write_str(", ")
            self.prepare_update_column(update, column, sql)
            sql.write_str(" = ")
            self.prepare_expr(expr, sql)

        self.prepare_update_from(update, sql)
        self.prepare_update_condition(update, sql)

        if update.orders:
            sql.write_str(" ORDER BY ")
            self.prepare_order_exprs(update.orders, sql)
        if update.limit_value is not None:
            sql.write_str(" LIMIT ")
            self.prepare_value(update.limit_value, sql)
        self.prepare_returning(update.returning_clause, sql)

    def prepare_update_join(self, update, sql: SqlWriter) -> None:
        """Seul MySQL réécrit FROM en jointure."""
        pass

    def prepare_update_column(self, update, column: Iden, sql: SqlWriter) -> None:
        self.prepare_iden(column, sql)

    def prepare_update_from(self, update, sql: SqlWriter) -> None:
        if not update.from_tables:
            return
        sql.write_str(" FROM ")
        for i, table_ref in enumerate(update.from_tables):
            if i > 0:
                sql.write_str(", ")
            self.prepare_table_ref(table_ref, sql)

    def prepare_update_condition(self, update, sql: SqlWriter) -> None:
        self.prepare_condition(update.where_clause, "WHERE", sql)

    def _prepare_DeleteStatement(self, delete, sql: SqlWriter) -> None:
        if delete.with_clause is not None:
            self.prepare_with_clause(delete.with_clause, sql)

        sql.write_str("DELETE ")
        if delete.table is not None:
            sql.write_str("FROM ")
            self.prepare_table_ref(delete.table, sql)

        self.prepare_condition(delete.where_clause, "WHERE", sql)
        if delete.orders:
            sql.write_str(" ORDER BY ")
            self.prepare_order_exprs(delete.orders, sql)
        if delete.limit_value is not None:
            sql.write_str(" LIMIT ")
            self.prepare_value(delete.limit_value, sql)
        self.prepare_returning(delete.returning_clause, sql)

    def _prepare_WithQuery(self, query, sql: SqlWriter) -> None:
        if query.query_ is None:
            raise SQLBuilderError("WITH query has no main statement")
        self.prepare_with_clause(query.with_clause_, sql)
        self.prepare_query_statement(query.query_, sql)

    # ============== Clauses de SELECT ==============

    def prepare_select_distinct(self, distinct: Any, sql: SqlWriter) -> None:
        from .select import DistinctOn, SelectDistinct
        if isinstance(distinct, DistinctOn):
            if not self.features.supports_distinct_on:
                raise UnsupportedFeatureError("DISTINCT ON", self.dialect_name)
            sql.write_str("DISTINCT ON (")
            for i, expr in enumerate(distinct.columns):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_expr(expr, sql)
            sql.write_str(")")
            return
        if distinct == SelectDistinct.DISTINCT_ROW and not self.features.supports_distinct_row:
            raise UnsupportedFeatureError("DISTINCTROW", self.dialect_name)
        sql.write_str(distinct.value)

    def prepare_select_expr(self, select_expr: SelectExpr, sql: SqlWriter) -> None:
        self.prepare_expr(select_expr.expr, sql)
        window = select_expr.window
        if window is not None:
            if window.name is not None:
                sql.write_str(" OVER ")
                self.prepare_iden(window.name, sql)
            else:
                sql.write_str(" OVER ( ")
                self.prepare_window_statement(window.window, sql)
                sql.write_str(" )")
        if select_expr.alias is not None:
            sql.write_str(" AS ")
            self.prepare_iden(select_expr.alias, sql)

    def prepare_index_hints(self, table_ref: TableRef, select, sql: SqlWriter) -> None:
        """Seul MySQL rend les indications d'index."""
        pass

    def prepare_join_expr(self, join: JoinExpr, sql: SqlWriter) -> None:
        self.prepare_join_type(join, sql)
        sql.write_str(" ")
        if join.lateral:
            sql.write_str("LATERAL ")
        self.prepare_table_ref(join.table, sql)
        if join.on is not None:
            self.prepare_condition(join.on, "ON", sql)

    def prepare_join_type(self, join: JoinExpr, sql: SqlWriter) -> None:
        from .statements import JoinType
        if join.join == JoinType.FULL_OUTER_JOIN and not self.features.supports_full_outer_join:
            raise UnsupportedFeatureError("FULL OUTER JOIN", self.dialect_name)
        sql.write_str(join.join.value)

    def prepare_union(self, union_type, select, sql: SqlWriter) -> None:
        sql.write_str(f" {union_type.value} ")
        if self.features.parenthesized_unions:
            sql.write_str("(")
            self.prepare_query_statement(select, sql)
            sql.write_str(")")
        else:
            self.prepare_query_statement(select, sql)

    def prepare_select_limit_offset(self, select, sql: SqlWriter) -> None:
        if select.limit_value is not None:
            sql.write_str(" LIMIT ")
            self.prepare_value(select.limit_value, sql)
        if select.offset_value is not None:
            if select.limit_value is None and self.features.offset_only_limit is not None:
                sql.write_str(" LIMIT ")
                self.prepare_value(Value.from_python(self.features.offset_only_limit), sql)
            sql.write_str(" OFFSET ")
            self.prepare_value(select.offset_value, sql)

    def prepare_select_lock(self, lock: LockClause, sql: SqlWriter) -> None:
        if not self.features.supports_lock:
            return
        sql.write_str(" ")
        sql.write_str(lock.type.value)
        if lock.tables:
            sql.write_str(" OF ")
            for i, table_ref in enumerate(lock.tables):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_table_ref(table_ref, sql)
        if lock.behavior is not None:
            sql.write_str(" ")
            sql.write_str(lock.behavior.value)

    # ============== Tri ==============

    def prepare_order_exprs(self, orders: List[OrderExpr], sql: SqlWriter) -> None:
        for i, order_expr in enumerate(orders):
            if i > 0:
                sql.write_str(", ")
            self.prepare_order_expr(order_expr, sql)

    def prepare_order_expr(self, order_expr: OrderExpr, sql: SqlWriter) -> None:
        if not isinstance(order_expr.order, OrderField):
            self.prepare_expr(order_expr.expr, sql)
        self.prepare_order(order_expr, sql)
        if order_expr.nulls is not None:
            sql.write_str(f" NULLS {order_expr.nulls.value}")

    def prepare_order(self, order_expr: OrderExpr, sql: SqlWriter) -> None:
        order = order_expr.order
        if isinstance(order, OrderField):
            self.prepare_field_order(order_expr, order, sql)
        elif order == Order.ASC:
            sql.write_str(" ASC")
        else:
            sql.write_str(" DESC")

    def prepare_field_order(self, order_expr: OrderExpr, field: OrderField,
                            sql: SqlWriter) -> None:
        """`CASE WHEN expr=v0 THEN 0 ... ELSE n END`, valeurs en ligne."""
        sql.write_str("CASE ")
        for i, value in enumerate(field.values):
            sql.write_str("WHEN ")
            self.prepare_expr(order_expr.expr, sql)
            sql.write_str("=")
            sql.write_str(self.value_to_string(value))
            sql.write_str(f" THEN {i} ")
        sql.write_str(f"ELSE {len(field.values)} END")

    # ============== Fenêtres ==============

    def prepare_window_statement(self, window: WindowStatement, sql: SqlWriter) -> None:
        if window.partitions:
            sql.write_str("PARTITION BY ")
            for i, expr in enumerate(window.partitions):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_expr(expr, sql)
        if window.orders:
            sql.write_str(" ORDER BY ")
            self.prepare_order_exprs(window.orders, sql)
        frame = window.frame_clause
        if frame is not None:
            sql.write_str(f" {frame.type.value} ")
            if frame.end is not None:
                sql.write_str("BETWEEN ")
                self.prepare_frame(frame.start, sql)
                sql.write_str(" AND ")
                self.prepare_frame(frame.end, sql)
            else:
                self.prepare_frame(frame.start, sql)

    def prepare_frame(self, frame: Frame, sql: SqlWriter) -> None:
        if frame.kind in (FrameKind.PRECEDING, FrameKind.FOLLOWING):
            sql.write_str(f"{frame.offset} {frame.kind.value}")
        else:
            sql.write_str(frame.kind.value)

    # ============== WITH ==============

    def prepare_with_clause(self, with_clause, sql: SqlWriter) -> None:
        if not with_clause.cte_expressions:
            raise SQLBuilderError("Cannot build a WITH clause without common table expression")
        sql.write_str("WITH ")
        if with_clause.recursive_:
            sql.write_str("RECURSIVE ")
        for i, cte in enumerate(with_clause.cte_expressions):
            if i > 0:
                sql.write_str(", ")
            self.prepare_common_table_expression(cte, sql)
        if with_clause.recursive_ and self.features.supports_cte_search_cycle:
            self.prepare_with_clause_recursive_options(with_clause, sql)

    def prepare_common_table_expression(self, cte, sql: SqlWriter) -> None:
        if cte.table_name_ is None:
            raise SQLBuilderError("Common table expression has no name")
        self.prepare_iden(cte.table_name_, sql)
        if cte.cols:
            sql.write_str(" (")
            for i, column in enumerate(cte.cols):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_iden(column, sql)
            sql.write_str(") ")
        else:
            sql.write_str(" ")
        sql.write_str("AS ")
        if cte.materialized_ is not None and self.features.supports_cte_materialization:
            if not cte.materialized_:
                sql.write_str("NOT ")
            sql.write_str("MATERIALIZED ")
        sql.write_str("(")
        if cte.values_rows is not None:
            self.prepare_values_list(cte.values_rows, sql, self.features.values_row_prefix)
        elif cte.query_ is not None:
            self.prepare_query_statement(cte.query_, sql)
        else:
            raise SQLBuilderError(f"Common table expression {cte.table_name_} has no query")
        sql.write_str(") ")

    def prepare_with_clause_recursive_options(self, with_clause, sql: SqlWriter) -> None:
        search = with_clause.search_
        if search is not None and search.expr is not None:
            sql.write_str(f"SEARCH {search.order.value} FIRST BY ")
            self.prepare_expr(search.expr.expr, sql)
            sql.write_str(" SET ")
            self.prepare_iden(search.expr.alias, sql)
            sql.write_str(" ")
        cycle = with_clause.cycle_
        if cycle is not None and cycle.expr is not None:
            sql.write_str("CYCLE ")
            self.prepare_expr(cycle.expr, sql)
            sql.write_str(" SET ")
            self.prepare_iden(cycle.set_as, sql)
            sql.write_str(" USING ")
            self.prepare_iden(cycle.using, sql)
            sql.write_str(" ")

    # ============== ON CONFLICT / RETURNING ==============

    def prepare_on_conflict(self, on_conflict: OnConflict, sql: SqlWriter) -> None:
        self.prepare_on_conflict_keywords(sql)
        self.prepare_on_conflict_target(on_conflict, sql)
        self.prepare_on_conflict_condition(on_conflict.target_where, sql)
        self.prepare_on_conflict_action(on_conflict, sql)
        self.prepare_on_conflict_condition(on_conflict.action_where, sql)

    def prepare_on_conflict_keywords(self, sql: SqlWriter) -> None:
        sql.write_str(" ON CONFLICT")

    def prepare_on_conflict_target(self, on_conflict: OnConflict, sql: SqlWriter) -> None:
        items: List[Any] = []
        for target in on_conflict.targets:
            if target.kind == OnConflictTargetKind.CONSTRAINT:
                sql.write_str(" ON CONSTRAINT ")
                self.prepare_iden(target.items[0], sql)
                return
            items.extend(target.items)
        if not items:
            return
        sql.write_str(" (")
        for i, item in enumerate(items):
            if i > 0:
                sql.write_str(", ")
            if isinstance(item, Iden):
                self.prepare_iden(item, sql)
            else:
                self.prepare_expr(item, sql)
        sql.write_str(")")

    def prepare_on_conflict_condition(self, condition: ConditionHolder, sql: SqlWriter) -> None:
        self.prepare_condition(condition, "WHERE", sql)

    def prepare_on_conflict_action(self, on_conflict: OnConflict, sql: SqlWriter) -> None:
        action = on_conflict.action
        if action is None:
            return
        if action.kind == OnConflictActionKind.DO_NOTHING:
            sql.write_str(" DO NOTHING")
            return
        self.prepare_on_conflict_do_update_keywords(sql)
        self.prepare_on_conflict_updates(action.items, sql)

    def prepare_on_conflict_do_update_keywords(self, sql: SqlWriter) -> None:
        sql.write_str(" DO UPDATE SET ")

    def prepare_on_conflict_updates(self, updates, sql: SqlWriter) -> None:
        for i, update in enumerate(updates):
            if i > 0:
                sql.write_str(", ")
            self.prepare_iden(update.column, sql)
            sql.write_str(" = ")
            if update.expr is None:
                self.prepare_on_conflict_excluded_value(update.column, sql)
            else:
                self.prepare_expr(update.expr, sql)

    def prepare_on_conflict_excluded_value(self, column: Iden, sql: SqlWriter) -> None:
        self.prepare_iden(Iden("excluded"), sql)
        sql.write_str(".")
        self.prepare_iden(column, sql)

    def prepare_returning(self, returning: Optional[ReturningClause], sql: SqlWriter) -> None:
        if returning is None or not self.features.supports_returning:
            return
        sql.write_str(" RETURNING ")
        if returning.kind == ReturningKind.ALL:
            sql.write_str("*")
            return
        for i, item in enumerate(returning.items):
            if i > 0:
                sql.write_str(", ")
            if returning.kind == ReturningKind.COLUMNS:
                self.prepare_column_ref(item, sql)
            else:
                self.prepare_expr(item, sql)

    # ============== Conditions ==============

    def prepare_condition(self, condition: ConditionHolder, keyword: str, sql: SqlWriter) -> None:
        """Rend ` KEYWORD <condition>`, ou rien si la clause est vide."""
        if condition.is_empty():
            return
        sql.write_str(f" {keyword} ")
        if condition.is_chain():
            chain = condition.contents
            for i, link in enumerate(chain):
                self.prepare_logical_chain_oper(link, i, len(chain), sql)
        else:
            self.prepare_condition_where(condition.contents, sql)

    def prepare_logical_chain_oper(self, link, index: int, length: int, sql: SqlWriter) -> None:
        if index > 0:
            sql.write_str(" AND " if link.oper == LogicalOper.AND else " OR ")
        expr = link.expr
        # deux binaires imbriqués dans une chaîne de plus d'un maillon
        need_parentheses = (length > 1 and isinstance(expr, BinaryExpr)
                            and isinstance(expr.right, BinaryExpr))
        if need_parentheses:
            sql.write_str("(")
        self.prepare_expr(expr, sql)
        if need_parentheses:
            sql.write_str(")")

    def prepare_condition_where(self, condition: Condition, sql: SqlWriter) -> None:
        self.prepare_expr(condition.to_expr(), sql)

    # ============== Expressions ==============

    def prepare_expr(self, expr: Expr, sql: SqlWriter) -> None:
        self._dispatch(expr, sql)

    def _prepare_ColumnExpr(self, expr: ColumnExpr, sql: SqlWriter) -> None:
        self.prepare_column_ref(expr.col, sql)

    def _prepare_ValueExpr(self, expr: ValueExpr, sql: SqlWriter) -> None:
        self.prepare_value(expr.val, sql)

    def _prepare_ConstantExpr(self, expr: ConstantExpr, sql: SqlWriter) -> None:
        sql.write_str(self.value_to_string(expr.val))

    def _prepare_TupleExpr(self, expr: TupleExpr, sql: SqlWriter) -> None:
        sql.write_str("(")
        for i, item in enumerate(expr.exprs):
            if i > 0:
                sql.write_str(", ")
            self.prepare_expr(item, sql)
        sql.write_str(")")

    def _prepare_ValuesExpr(self, expr: ValuesExpr, sql: SqlWriter) -> None:
        sql.write_str("(")
        for i, value in enumerate(expr.values):
            if i > 0:
                sql.write_str(", ")
            self.prepare_value(value, sql)
        sql.write_str(")")

    def _prepare_UnaryExpr(self, expr: UnaryExpr, sql: SqlWriter) -> None:
        sql.write_str(expr.op.value)
        sql.write_str(" ")
        paren = not self.inner_expr_well_known_greater_precedence(expr.expr, expr.op)
        if paren:
            sql.write_str("(")
        self.prepare_expr(expr.expr, sql)
        if paren:
            sql.write_str(")")

    def _prepare_BinaryExpr(self, expr: BinaryExpr, sql: SqlWriter) -> None:
        op = expr.op
        if op in IN_OPERS and isinstance(expr.right, TupleExpr) and not expr.right.exprs:
            # IN () vide: toujours faux, NOT IN () vide: toujours vrai
            right = 2 if op == BinOper.IN else 1
            self.binary_expr(ConstantExpr(Value.from_python(1)), BinOper.EQUAL,
                             ConstantExpr(Value.from_python(right)), sql)
            return
        self.binary_expr(expr.left, op, expr.right, sql)

    def binary_expr(self, left: Expr, op: Any, right: Expr, sql: SqlWriter) -> None:
        """
        Rend `left op right` avec le minimum de parenthèses.

        Args:
            left: Opérande gauche
            op: Opérateur binaire
            right: Opérande droit
            sql: Collecteur de sortie
        """
        drop_left_assoc = (isinstance(left, BinaryExpr) and left.op == op
                           and op in LEFT_ASSOCIATIVE_OPERS)
        left_paren = (not self.inner_expr_well_known_greater_precedence(left, op)
                      and not drop_left_assoc)
        if left_paren:
            sql.write_str("(")
        self.prepare_expr(left, sql)
        if left_paren:
            sql.write_str(")")

        sql.write_str(" ")
        self.prepare_bin_oper(op, sql)
        sql.write_str(" ")

        # BETWEEN, LIKE ... ESCAPE et CAST(... AS type) sont représentés par des binaires imbriqués
        drop_right_between = (op in BETWEEN_OPERS and isinstance(right, BinaryExpr)
                              and right.op == BinOper.AND)
        drop_right_escape = (op in LIKE_OPERS and isinstance(right, BinaryExpr)
                             and right.op == BinOper.ESCAPE)
        drop_right_as = op == BinOper.AS and isinstance(right, CustomExpr)
        right_paren = (not self.inner_expr_well_known_greater_precedence(right, op)
                       and not drop_right_between
                       and not drop_right_escape
                       and not drop_right_as)
        if right_paren:
            sql.write_str("(")
        self.prepare_expr(right, sql)
        if right_paren:
            sql.write_str(")")

    def inner_expr_well_known_greater_precedence(self, inner: Expr, outer_oper: Any) -> bool:
        """
        Vrai si `inner` lie plus fort que `outer_oper` sans ambiguïté.

        Seules les combinaisons dont la précédence est identique sur tous
        les dialectes sont reconnues; dans le doute, on parenthèse.
        """
        if isinstance(inner, _SIMPLE_EXPRS):
            return True
        if not isinstance(inner, BinaryExpr):
            return False
        if self.prefer_more_parentheses:
            return False
        inner_oper = inner.op
        if inner_oper in ARITHMETIC_OPERS or inner_oper in SHIFT_OPERS:
            return (outer_oper in COMPARISON_OPERS or outer_oper in BETWEEN_OPERS
                    or outer_oper in IN_OPERS or outer_oper in LIKE_OPERS
                    or outer_oper in LOGICAL_OPERS)
        if (inner_oper in COMPARISON_OPERS or inner_oper in IN_OPERS
                or inner_oper in LIKE_OPERS or inner_oper in IS_OPERS):
            return outer_oper in LOGICAL_OPERS
        return False

    def prepare_bin_oper(self, op: Any, sql: SqlWriter) -> None:
        if isinstance(op, CustomBinOper):
            sql.write_str(op.op)
            return
        if isinstance(op, (PgBinOper, SqliteBinOper)) and not isinstance(
                op, self.features.extension_operators or ()):
            raise UnsupportedFeatureError(f"Operator {op.value}", self.dialect_name)
        sql.write_str(op.value)

    def _prepare_SubQueryExpr(self, expr: SubQueryExpr, sql: SqlWriter) -> None:
        if expr.op is not None:
            if expr.op != SubQueryOper.EXISTS and not self.features.supports_subquery_quantifiers:
                raise UnsupportedFeatureError(f"{expr.op.value} sub-query", self.dialect_name)
            sql.write_str(f"{expr.op.value} ")
        sql.write_str("(")
        self.prepare_query_statement(expr.query, sql)
        sql.write_str(")")

    def _prepare_KeywordExpr(self, expr: KeywordExpr, sql: SqlWriter) -> None:
        keyword = expr.keyword
        if isinstance(keyword, CustomKeyword):
            sql.write_str(keyword.iden.to_string())
        else:
            sql.write_str(keyword.value)

    def _prepare_CustomExpr(self, expr: CustomExpr, sql: SqlWriter) -> None:
        sql.write_str(expr.sql)

    def _prepare_CustomWithExpr(self, expr: CustomWithExpr, sql: SqlWriter) -> None:
        """
        Substitue les placeholders du fragment par les expressions.

        Un placeholder doublé (`??`, `$$`) est un placeholder littéral;
        sous PostgreSQL `$N` désigne la N-ième expression.
        """
        placeholder, numbered = self.placeholder()
        tokens = tokenize(expr.sql)
        count = 0
        i = 0
        while i < len(tokens):
            token = tokens[i]
            following = tokens[i + 1] if i + 1 < len(tokens) else None
            if token.is_punctuation and token.value == placeholder:
                if (following is not None and following.is_punctuation
                        and following.value == placeholder):
                    sql.write_str(placeholder)
                    i += 2
                    continue
                if numbered and following is not None and following.is_unquoted \
                        and following.value.isdigit():
                    position = int(following.value) - 1
                    self._prepare_custom_argument(expr, position, sql)
                    i += 2
                    continue
                self._prepare_custom_argument(expr, count, sql)
                count += 1
            else:
                sql.write_str(token.value)
            i += 1

    def _prepare_custom_argument(self, expr: CustomWithExpr, position: int,
                                 sql: SqlWriter) -> None:
        if position < 0 or position >= len(expr.exprs):
            raise SQLBuilderError(
                f"Placeholder {position + 1} has no matching expression in {expr.sql!r}")
        self.prepare_expr(expr.exprs[position], sql)

    def _prepare_FunctionCall(self, call: FunctionCall, sql: SqlWriter) -> None:
        self.prepare_function_name(call.func, sql)
        sql.write_str("(")
        for i, arg in enumerate(call.args):
            if i > 0:
                sql.write_str(", ")
            if call.mod_at(i).distinct:
                sql.write_str("DISTINCT ")
            self.prepare_expr(arg, sql)
        sql.write_str(")")

    def prepare_function_name(self, func: Any, sql: SqlWriter) -> None:
        if isinstance(func, CustomFunction):
            sql.write_str(func.name.to_string())
        elif isinstance(func, PgFunction):
            if not self.features.supports_pg_functions:
                raise UnsupportedFeatureError(f"Function {func.value}", self.dialect_name)
            sql.write_str(func.value)
        else:
            sql.write_str(self.function_name(func))

    def function_name(self, func: Function) -> str:
        """Nom rendu d'une fonction connue (redéfini par les dialectes)."""
        return func.value

    def _prepare_CaseStatement(self, case: CaseStatement, sql: SqlWriter) -> None:
        sql.write_str("(CASE")
        for when in case.when:
            sql.write_str(" WHEN (")
            self.prepare_condition_where(when.condition, sql)
            sql.write_str(") THEN ")
            self.prepare_expr(when.result, sql)
        if case.else_ is not None:
            sql.write_str(" ELSE ")
            self.prepare_expr(case.else_, sql)
        sql.write_str(" END)")

    def _prepare_AsEnumExpr(self, expr: AsEnumExpr, sql: SqlWriter) -> None:
        """Les types énumérés n'existent que sous PostgreSQL: ailleurs l'expression est rendue seule."""
        self.prepare_expr(expr.expr, sql)

    def _prepare_TypeNameExpr(self, expr: TypeNameExpr, sql: SqlWriter) -> None:
        self.prepare_type_ref(expr.type_ref, sql)

    # ============== Identifiants et tables ==============

    def quote_iden(self, iden: Any) -> str:
        """Cite un identifiant en doublant le caractère de citation."""
        quote = self.features.identifier_quote
        return f"{quote}{str(iden).replace(quote, quote * 2)}{quote}"

    def prepare_iden(self, iden: Any, sql: SqlWriter) -> None:
        sql.write_str(self.quote_iden(iden))

    def prepare_table_name(self, name: TableName, sql: SqlWriter) -> None:
        sql.write_str('.'.join(self.quote_iden(part) for part in name.parts()))

    def prepare_type_ref(self, type_ref: TypeRef, sql: SqlWriter) -> None:
        self.prepare_table_name(TableName(type_ref.name, type_ref.schema, type_ref.database), sql)

    def prepare_column_ref(self, col: ColumnRef, sql: SqlWriter) -> None:
        if col.table is not None:
            self.prepare_table_name(col.table, sql)
            sql.write_str(".")
        if col.is_asterisk:
            sql.write_str("*")
        else:
            self.prepare_iden(col.column, sql)

    def prepare_table_ref(self, table_ref: TableRef, sql: SqlWriter) -> None:
        if isinstance(table_ref, Table):
            self.prepare_table_name(table_ref.name, sql)
            alias = table_ref.alias
        elif isinstance(table_ref, SubQueryRef):
            sql.write_str("(")
            self.prepare_query_statement(table_ref.query, sql)
            sql.write_str(")")
            alias = table_ref.alias
        elif isinstance(table_ref, FunctionRef):
            self.prepare_expr(table_ref.call, sql)
            alias = table_ref.alias
        elif isinstance(table_ref, ValuesRef):
            sql.write_str("(")
            self.prepare_values_list(table_ref.rows, sql, self.features.values_row_prefix)
            sql.write_str(")")
            alias = table_ref.alias
        else:
            raise SQLBuilderError(f"Cannot render table reference {table_ref!r}")
        if alias is not None:
            sql.write_str(" AS ")
            self.prepare_iden(alias, sql)

    def prepare_values_list(self, rows, sql: SqlWriter, row_prefix: str = '') -> None:
        """`VALUES (v, v), (v, v)` avec valeurs paramétrées."""
        sql.write_str("VALUES ")
        for i, row in enumerate(rows):
            if i > 0:
                sql.write_str(", ")
            sql.write_str(f"{row_prefix}(")
            for j, value in enumerate(row):
                if j > 0:
                    sql.write_str(", ")
                self.prepare_value(value, sql)
            sql.write_str(")")

    # ============== Valeurs ==============

    def prepare_value(self, value: Value, sql: SqlWriter) -> None:
        sql.push_param(value, self)

    def cast_enum(self, expr: AsEnumExpr) -> FunctionCall:
        """CAST de l'expression vers le type énuméré."""
        return cast_as(expr.expr, expr.type_name)
