"""Constructeur de requêtes UPDATE."""

from typing import Any, Iterable, List, Optional, Tuple

from .ast_nodes import Expr, into_expr
from .condition import ConditionHolder
from .idens import Iden, TableRef, into_iden, into_table_ref
from .statements import (
    ConditionalStatement, OrderedStatement, OrderExpr, QueryStatement,
    Returning, ReturningClause,
)
from .values import Value


class UpdateStatement(QueryStatement, ConditionalStatement, OrderedStatement):
    """
    Requête UPDATE.

    Sous MySQL, une clause FROM est réécrite en `JOIN ... ON <where>`.
    """

    def __init__(self):
        self.table_ref: Optional[TableRef] = None
        self.from_tables: List[TableRef] = []
        self.assignments: List[Tuple[Iden, Expr]] = []
        self.where_clause = ConditionHolder()
        self.orders: List[OrderExpr] = []
        self.limit_value: Optional[Value] = None
        self.returning_clause: Optional[ReturningClause] = None
        self.with_clause = None

    @classmethod
    def new(cls) -> 'UpdateStatement':
        return cls()

    def table(self, table: Any) -> 'UpdateStatement':
        self.table_ref = into_table_ref(table)
        return self

    def table_as(self, table: Any, alias: Any) -> 'UpdateStatement':
        self.table_ref = into_table_ref(table, alias)
        return self

    def from_(self, table: Any) -> 'UpdateStatement':
        self.from_tables.append(into_table_ref(table))
        return self

    def from_as(self, table: Any, alias: Any) -> 'UpdateStatement':
        self.from_tables.append(into_table_ref(table, alias))
        return self

    def value(self, column: Any, value: Any) -> 'UpdateStatement':
        """`col = valeur`; une expression est acceptée à la place de la valeur."""
        self.assignments.append((into_iden(column), into_expr(value)))
        return self

    def value_expr(self, column: Any, expr: Expr) -> 'UpdateStatement':
        return self.value(column, expr)

    def values(self, values: Iterable[Tuple[Any, Any]]) -> 'UpdateStatement':
        for column, value in values:
            self.value(column, value)
        return self

    def limit(self, limit: int) -> 'UpdateStatement':
        self.limit_value = Value.from_python(int(limit))
        return self

    def reset_limit(self) -> 'UpdateStatement':
        self.limit_value = None
        return self

    def returning(self, returning: ReturningClause) -> 'UpdateStatement':
        self.returning_clause = returning
        return self

    def returning_col(self, column: Any) -> 'UpdateStatement':
        return self.returning(Returning().column(column))

    def returning_all(self) -> 'UpdateStatement':
        return self.returning(Returning().all())

    def returning_exprs(self, exprs: Iterable[Any]) -> 'UpdateStatement':
        return self.returning(Returning().exprs(exprs))

    def with_(self, clause):
        from .with_clause import into_with_clause
        return into_with_clause(clause).query(self)

    def with_cte(self, clause) -> 'UpdateStatement':
        from .with_clause import into_with_clause
        self.with_clause = into_with_clause(clause)
        return self
