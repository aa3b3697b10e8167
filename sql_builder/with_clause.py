"""
Clause WITH et expressions de table communes (CTE).

Une CTE associe un nom, une liste de colonnes optionnelle et une requête
(ou une liste de lignes VALUES). Les options SEARCH et CYCLE ne
s'appliquent qu'aux clauses récursives et ne sont rendues que par
PostgreSQL.

    cte = CommonTableExpression().table_name("cte").query(select)
    WithClause().cte(cte).query(Query.select().column(Asterisk).from_("cte"))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from .ast_nodes import ColumnExpr, into_expr
from .errors import SQLBuilderError
from .idens import Alias, Iden, Table, into_iden
from .statements import QueryStatement, SelectExpr
from .values import Value


class CommonTableExpression:
    """Expression de table commune."""

    def __init__(self):
        self.table_name_: Optional[Iden] = None
        self.cols: List[Iden] = []
        self.query_: Optional[QueryStatement] = None
        self.values_rows: Optional[List[List[Value]]] = None
        self.materialized_: Optional[bool] = None

    @classmethod
    def new(cls) -> 'CommonTableExpression':
        return cls()

    def table_name(self, name: Any) -> 'CommonTableExpression':
        self.table_name_ = into_iden(name)
        return self

    def column(self, column: Any) -> 'CommonTableExpression':
        self.cols.append(into_iden(column))
        return self

    def columns(self, columns: Iterable[Any]) -> 'CommonTableExpression':
        self.cols.extend(into_iden(c) for c in columns)
        return self

    def materialized(self, materialized: bool) -> 'CommonTableExpression':
        """Indication MATERIALIZED / NOT MATERIALIZED (PostgreSQL)."""
        self.materialized_ = materialized
        return self

    def query(self, query: QueryStatement) -> 'CommonTableExpression':
        self.query_ = query
        self.values_rows = None
        return self

    def values(self, rows: Iterable[Iterable[Any]]) -> 'CommonTableExpression':
        """Corps de CTE sous forme de lignes littérales: `AS (VALUES (...), ...)`."""
        self.values_rows = [[Value.from_python(v) for v in row] for row in rows]
        self.query_ = None
        return self

    @classmethod
    def from_select(cls, select) -> 'CommonTableExpression':
        """
        Construit une CTE depuis un SELECT.

        Les colonnes sont déduites des alias ou des noms de colonnes; le nom
        vaut `cte_<table>` pour la première table du FROM.
        """
        cte = cls()
        cte.try_set_cols_from_select(select)
        if select.from_tables and isinstance(select.from_tables[0], Table):
            first = select.from_tables[0]
            name = first.alias if first.alias is not None else first.name.name
            cte.table_name_ = Alias(f"cte_{name}")
        cte.query_ = select
        return cte

    def try_set_cols_from_select(self, select) -> bool:
        """Retourne False (colonnes inchangées) si une expression n'est pas nommée."""
        cols = []
        for select_expr in select.selects:
            if select_expr.alias is not None:
                cols.append(select_expr.alias)
                continue
            expr = select_expr.expr
            if not isinstance(expr, ColumnExpr) or expr.col.is_asterisk:
                return False
            parts = [] if expr.col.table is None else [str(p) for p in expr.col.table.parts()]
            parts.append(str(expr.col.column))
            cols.append(Alias('_'.join(parts)))
        self.cols = cols
        return True


class SearchOrder(Enum):
    BREADTH = "BREADTH"
    DEPTH = "DEPTH"


@dataclass
class Search:
    """`SEARCH BREADTH|DEPTH FIRST BY expr SET alias`."""
    order: Optional[SearchOrder] = None
    expr: Optional[SelectExpr] = None

    @classmethod
    def new_from_order_and_expr(cls, order: SearchOrder, expr: SelectExpr) -> 'Search':
        if expr.alias is None:
            raise SQLBuilderError("SEARCH expression must have an alias")
        return cls(order, expr)


@dataclass
class Cycle:
    """`CYCLE expr SET alias USING alias`."""
    expr: Any = None
    set_as: Optional[Iden] = None
    using: Optional[Iden] = None

    @classmethod
    def new_from_expr_set_using(cls, expr: Any, set_as: Any, using: Any) -> 'Cycle':
        return cls(into_expr(expr), into_iden(set_as), into_iden(using))


class WithClause:
    """Clause WITH [RECURSIVE] regroupant une ou plusieurs CTE."""

    def __init__(self):
        self.recursive_ = False
        self.search_: Optional[Search] = None
        self.cycle_: Optional[Cycle] = None
        self.cte_expressions: List[CommonTableExpression] = []

    @classmethod
    def new(cls) -> 'WithClause':
        return cls()

    def recursive(self, recursive: bool) -> 'WithClause':
        self.recursive_ = recursive
        return self

    def search(self, search: Search) -> 'WithClause':
        self.search_ = search
        return self

    def cycle(self, cycle: Cycle) -> 'WithClause':
        self.cycle_ = cycle
        return self

    def cte(self, cte: CommonTableExpression) -> 'WithClause':
        self.cte_expressions.append(cte)
        return self

    def query(self, query: QueryStatement) -> 'WithQuery':
        """Associe la clause à la requête principale."""
        return WithQuery().with_clause(self).query(query)


def into_with_clause(value: Any) -> WithClause:
    """Accepte une WithClause ou une CTE seule."""
    if isinstance(value, WithClause):
        return value
    if isinstance(value, CommonTableExpression):
        return WithClause().cte(value)
    raise TypeError(f"Cannot convert {value!r} into a WITH clause")


class WithQuery(QueryStatement):
    """Requête précédée d'une clause WITH."""

    def __init__(self):
        self.with_clause_ = WithClause()
        self.query_: Optional[QueryStatement] = None

    @classmethod
    def new(cls) -> 'WithQuery':
        return cls()

    def with_clause(self, with_clause: WithClause) -> 'WithQuery':
        self.with_clause_ = with_clause
        return self

    def recursive(self, recursive: bool) -> 'WithQuery':
        self.with_clause_.recursive(recursive)
        return self

    def search(self, search: Search) -> 'WithQuery':
        self.with_clause_.search(search)
        return self

    def cycle(self, cycle: Cycle) -> 'WithQuery':
        self.with_clause_.cycle(cycle)
        return self

    def cte(self, cte: CommonTableExpression) -> 'WithQuery':
        self.with_clause_.cte(cte)
        return self

    def query(self, query: QueryStatement) -> 'WithQuery':
        self.query_ = query
        return self
