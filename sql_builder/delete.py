"""Constructeur de requêtes DELETE."""

from typing import Any, Iterable, List, Optional

from .condition import ConditionHolder
from .idens import TableRef, into_table_ref
from .statements import (
    ConditionalStatement, OrderedStatement, OrderExpr, QueryStatement,
    Returning, ReturningClause,
)
from .values import Value


class DeleteStatement(QueryStatement, ConditionalStatement, OrderedStatement):
    """Requête DELETE."""

    def __init__(self):
        self.table: Optional[TableRef] = None
        self.where_clause = ConditionHolder()
        self.orders: List[OrderExpr] = []
        self.limit_value: Optional[Value] = None
        self.returning_clause: Optional[ReturningClause] = None
        self.with_clause = None

    @classmethod
    def new(cls) -> 'DeleteStatement':
        return cls()

    def from_table(self, table: Any) -> 'DeleteStatement':
        self.table = into_table_ref(table)
        return self

    def limit(self, limit: int) -> 'DeleteStatement':
        self.limit_value = Value.from_python(int(limit))
        return self

    def reset_limit(self) -> 'DeleteStatement':
        self.limit_value = None
        return self

    def returning(self, returning: ReturningClause) -> 'DeleteStatement':
        self.returning_clause = returning
        return self

    def returning_col(self, column: Any) -> 'DeleteStatement':
        return self.returning(Returning().column(column))

    def returning_all(self) -> 'DeleteStatement':
        return self.returning(Returning().all())

    def returning_exprs(self, exprs: Iterable[Any]) -> 'DeleteStatement':
        return self.returning(Returning().exprs(exprs))

    def with_(self, clause):
        from .with_clause import into_with_clause
        return into_with_clause(clause).query(self)

    def with_cte(self, clause) -> 'DeleteStatement':
        from .with_clause import into_with_clause
        self.with_clause = into_with_clause(clause)
        return self
