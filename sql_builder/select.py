"""
Constructeur de requêtes SELECT.

    query = (Query.select()
             .column("character")
             .column(("font", "name"))
             .from_("character")
             .left_join("font", Expr.col(("character", "font_id")).equals(("font", "id")))
             .and_where(Expr.col("size_w").is_in([3, 4]))
             .to_string(MysqlQueryBuilder()))

Toutes les méthodes modifient la requête et retournent self.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from .ast_nodes import ColumnExpr, CustomExpr, Expr, FunctionCall, into_expr
from .condition import ConditionHolder, LogicalChainOper, into_condition
from .idens import (
    FunctionRef, Iden, SubQueryRef, TableRef, ValuesRef,
    into_column_ref, into_iden, into_table_ref,
)
from .statements import (
    ConditionalStatement, IndexHint, IndexHintScope, IndexHintType, JoinExpr,
    JoinType, LockBehavior, LockClause, LockType, OrderedStatement, OrderExpr,
    QueryStatement, SelectExpr, WindowSelectType,
)
from .values import Value


class SelectDistinct(Enum):
    ALL = "ALL"
    DISTINCT = "DISTINCT"
    DISTINCT_ROW = "DISTINCTROW"


@dataclass
class DistinctOn:
    """`DISTINCT ON (cols)` (PostgreSQL)."""
    columns: List[Any] = field(default_factory=list)


class UnionType(Enum):
    INTERSECT = "INTERSECT"
    DISTINCT = "UNION"
    EXCEPT = "EXCEPT"
    ALL = "UNION ALL"


class SelectStatement(QueryStatement, ConditionalStatement, OrderedStatement):
    """Requête SELECT."""

    def __init__(self):
        self.distinct_mode: Optional[Any] = None
        self.selects: List[SelectExpr] = []
        self.from_tables: List[TableRef] = []
        self.joins: List[JoinExpr] = []
        self.where_clause = ConditionHolder()
        self.groups: List[Expr] = []
        self.having_clause = ConditionHolder()
        self.unions_list: List[Tuple[UnionType, 'SelectStatement']] = []
        self.orders: List[OrderExpr] = []
        self.limit_value: Optional[Value] = None
        self.offset_value: Optional[Value] = None
        self.lock_clause: Optional[LockClause] = None
        self.window_clause: Optional[Tuple[Iden, Any]] = None
        self.index_hints: List[Tuple[TableRef, IndexHint]] = []
        self.with_clause = None

    @classmethod
    def new(cls) -> 'SelectStatement':
        return cls()

    # ============== Liste de sélection ==============

    def distinct(self) -> 'SelectStatement':
        self.distinct_mode = SelectDistinct.DISTINCT
        return self

    def distinct_row(self) -> 'SelectStatement':
        """`DISTINCTROW` (MySQL)."""
        self.distinct_mode = SelectDistinct.DISTINCT_ROW
        return self

    def all_rows(self) -> 'SelectStatement':
        self.distinct_mode = SelectDistinct.ALL
        return self

    def distinct_on(self, columns: Iterable[Any]) -> 'SelectStatement':
        self.distinct_mode = DistinctOn([ColumnExpr(into_column_ref(c)) for c in columns])
        return self

    def column(self, column: Any) -> 'SelectStatement':
        return self.expr(ColumnExpr(into_column_ref(column)))

    def columns(self, columns: Iterable[Any]) -> 'SelectStatement':
        for column in columns:
            self.column(column)
        return self

    def expr(self, expr: Any) -> 'SelectStatement':
        if isinstance(expr, SelectExpr):
            self.selects.append(expr)
        else:
            self.selects.append(SelectExpr(into_expr(expr)))
        return self

    def exprs(self, exprs: Iterable[Any]) -> 'SelectStatement':
        for expr in exprs:
            self.expr(expr)
        return self

    def expr_as(self, expr: Any, alias: Any) -> 'SelectStatement':
        self.selects.append(SelectExpr(into_expr(expr), into_iden(alias)))
        return self

    def expr_window(self, expr: Any, window) -> 'SelectStatement':
        """`expr OVER ( window )`."""
        self.selects.append(SelectExpr(into_expr(expr), None, WindowSelectType(window=window)))
        return self

    def expr_window_as(self, expr: Any, window, alias: Any) -> 'SelectStatement':
        self.selects.append(SelectExpr(into_expr(expr), into_iden(alias),
                                       WindowSelectType(window=window)))
        return self

    def expr_window_name(self, expr: Any, name: Any) -> 'SelectStatement':
        """`expr OVER name`, la fenêtre étant déclarée par window()."""
        self.selects.append(SelectExpr(into_expr(expr), None,
                                       WindowSelectType(name=into_iden(name))))
        return self

    def expr_window_name_as(self, expr: Any, name: Any, alias: Any) -> 'SelectStatement':
        self.selects.append(SelectExpr(into_expr(expr), into_iden(alias),
                                       WindowSelectType(name=into_iden(name))))
        return self

    def clear_selects(self) -> 'SelectStatement':
        self.selects = []
        return self

    # ============== FROM ==============

    def from_(self, table: Any) -> 'SelectStatement':
        self.from_tables.append(into_table_ref(table))
        return self

    def from_as(self, table: Any, alias: Any) -> 'SelectStatement':
        self.from_tables.append(into_table_ref(table, alias))
        return self

    def from_subquery(self, query: 'SelectStatement', alias: Any) -> 'SelectStatement':
        self.from_tables.append(SubQueryRef(query, into_iden(alias)))
        return self

    def from_function(self, call: FunctionCall, alias: Any) -> 'SelectStatement':
        self.from_tables.append(FunctionRef(call, into_iden(alias)))
        return self

    def from_values(self, rows: Iterable[Iterable[Any]], alias: Any) -> 'SelectStatement':
        """`FROM (VALUES (...), (...)) AS alias`."""
        value_rows = [tuple(Value.from_python(v) for v in row) for row in rows]
        self.from_tables.append(ValuesRef(value_rows, into_iden(alias)))
        return self

    def from_clear(self) -> 'SelectStatement':
        self.from_tables = []
        return self

    # ============== Jointures ==============

    def _join(self, join: JoinType, table: TableRef, condition: Any,
              lateral: bool = False) -> 'SelectStatement':
        on = ConditionHolder()
        if condition is not None:
            on.add_condition(into_condition(condition))
        self.joins.append(JoinExpr(join, table, on, lateral))
        return self

    def join(self, join: JoinType, table: Any, condition: Any) -> 'SelectStatement':
        return self._join(join, into_table_ref(table), condition)

    def join_as(self, join: JoinType, table: Any, alias: Any, condition: Any) -> 'SelectStatement':
        return self._join(join, into_table_ref(table, alias), condition)

    def join_subquery(self, join: JoinType, query: 'SelectStatement', alias: Any,
                      condition: Any) -> 'SelectStatement':
        return self._join(join, SubQueryRef(query, into_iden(alias)), condition)

    def join_lateral(self, join: JoinType, query: 'SelectStatement', alias: Any,
                     condition: Any) -> 'SelectStatement':
        return self._join(join, SubQueryRef(query, into_iden(alias)), condition, lateral=True)

    def left_join(self, table: Any, condition: Any) -> 'SelectStatement':
        return self.join(JoinType.LEFT_JOIN, table, condition)

    def right_join(self, table: Any, condition: Any) -> 'SelectStatement':
        return self.join(JoinType.RIGHT_JOIN, table, condition)

    def inner_join(self, table: Any, condition: Any) -> 'SelectStatement':
        return self.join(JoinType.INNER_JOIN, table, condition)

    def full_outer_join(self, table: Any, condition: Any) -> 'SelectStatement':
        return self.join(JoinType.FULL_OUTER_JOIN, table, condition)

    def cross_join(self, table: Any) -> 'SelectStatement':
        return self._join(JoinType.CROSS_JOIN, into_table_ref(table), None)

    def straight_join(self, table: Any, condition: Any) -> 'SelectStatement':
        return self.join(JoinType.STRAIGHT_JOIN, table, condition)

    # ============== GROUP BY / HAVING ==============

    def group_by_col(self, column: Any) -> 'SelectStatement':
        return self.add_group_by([ColumnExpr(into_column_ref(column))])

    def group_by_columns(self, columns: Iterable[Any]) -> 'SelectStatement':
        return self.add_group_by(ColumnExpr(into_column_ref(c)) for c in columns)

    def add_group_by(self, exprs: Iterable[Any]) -> 'SelectStatement':
        self.groups.extend(into_expr(e) for e in exprs)
        return self

    def group_by_customs(self, sqls: Iterable[str]) -> 'SelectStatement':
        self.groups.extend(CustomExpr(sql) for sql in sqls)
        return self

    def cond_having(self, condition: Any) -> 'SelectStatement':
        self.having_clause.add_condition(condition)
        return self

    def and_having(self, expr: Any) -> 'SelectStatement':
        self.having_clause.and_where(expr)
        return self

    def or_having(self, expr: Any) -> 'SelectStatement':
        self.having_clause.add_and_or(LogicalChainOper.or_(expr))
        return self

    # ============== LIMIT / OFFSET ==============

    def limit(self, limit: int) -> 'SelectStatement':
        self.limit_value = Value.from_python(int(limit))
        return self

    def reset_limit(self) -> 'SelectStatement':
        self.limit_value = None
        return self

    def offset(self, offset: int) -> 'SelectStatement':
        self.offset_value = Value.from_python(int(offset))
        return self

    def reset_offset(self) -> 'SelectStatement':
        self.offset_value = None
        return self

    # ============== Verrous ==============

    def lock(self, lock_type: LockType) -> 'SelectStatement':
        self.lock_clause = LockClause(lock_type)
        return self

    def lock_shared(self) -> 'SelectStatement':
        return self.lock(LockType.SHARE)

    def lock_exclusive(self) -> 'SelectStatement':
        return self.lock(LockType.UPDATE)

    def lock_with_tables(self, lock_type: LockType, tables: Iterable[Any]) -> 'SelectStatement':
        self.lock_clause = LockClause(lock_type, [into_table_ref(t) for t in tables])
        return self

    def lock_with_behavior(self, lock_type: LockType, behavior: LockBehavior) -> 'SelectStatement':
        self.lock_clause = LockClause(lock_type, [], behavior)
        return self

    def lock_with_tables_behavior(self, lock_type: LockType, tables: Iterable[Any],
                                  behavior: LockBehavior) -> 'SelectStatement':
        self.lock_clause = LockClause(lock_type, [into_table_ref(t) for t in tables], behavior)
        return self

    # ============== Unions ==============

    def union(self, union_type: UnionType, query: 'SelectStatement') -> 'SelectStatement':
        self.unions_list.append((union_type, query))
        return self

    def unions(self, unions: Iterable[Tuple[UnionType, 'SelectStatement']]) -> 'SelectStatement':
        self.unions_list.extend(unions)
        return self

    # ============== WITH ==============

    def with_(self, clause) -> 'Any':
        """Enveloppe la requête dans une WithQuery."""
        from .with_clause import into_with_clause
        return into_with_clause(clause).query(self)

    def with_cte(self, clause) -> 'SelectStatement':
        """Attache une clause WITH rendue en tête de la requête."""
        from .with_clause import into_with_clause
        self.with_clause = into_with_clause(clause)
        return self

    # ============== Fenêtres nommées ==============

    def window(self, name: Any, window) -> 'SelectStatement':
        """`WINDOW name AS ( window )`."""
        self.window_clause = (into_iden(name), window)
        return self

    # ============== Index (MySQL) ==============

    def _index_hint(self, index: Any, hint_type: IndexHintType,
                    scope: IndexHintScope) -> 'SelectStatement':
        if not self.from_tables:
            raise ValueError("No table to hint: call from_() before adding an index hint")
        self.index_hints.append((self.from_tables[-1], IndexHint(into_iden(index), hint_type, scope)))
        return self

    def use_index(self, index: Any, scope: IndexHintScope = IndexHintScope.ALL) -> 'SelectStatement':
        return self._index_hint(index, IndexHintType.USE, scope)

    def force_index(self, index: Any, scope: IndexHintScope = IndexHintScope.ALL) -> 'SelectStatement':
        return self._index_hint(index, IndexHintType.FORCE, scope)

    def ignore_index(self, index: Any, scope: IndexHintScope = IndexHintScope.ALL) -> 'SelectStatement':
        return self._index_hint(index, IndexHintType.IGNORE, scope)
