"""
Socle commun des requêtes.

QueryStatement fournit les trois points de sortie (build, build_collect,
to_string) et l'audit. Les mixins ConditionalStatement et
OrderedStatement portent les clauses WHERE et ORDER BY partagées par
SELECT, UPDATE et DELETE.
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple, Union

from .ast_nodes import ColumnExpr, CustomExpr, Expr, SubQueryExpr, into_expr
from .condition import ConditionHolder, LogicalChainOper
from .idens import into_column_ref
from .values import Value, Values
from .writer import SqlWriter, SqlWriterString, SqlWriterValues

logger = logging.getLogger(__name__)


def _resolve_builder(query_builder: Any):
    from .dialects import get_query_builder
    return get_query_builder(query_builder)


# ============== Tri ==============

@dataclass
class OrderField:
    """Ordre imposé par une liste de valeurs (rendu en CASE)."""
    values: List[Value] = field(default_factory=list)


class Order(Enum):
    ASC = "ASC"
    DESC = "DESC"

    @staticmethod
    def field(values: Iterable[Any]) -> OrderField:
        return OrderField([Value.from_python(v) for v in values])


class NullOrdering(Enum):
    FIRST = "FIRST"
    LAST = "LAST"


@dataclass
class OrderExpr:
    expr: Expr
    order: Union[Order, OrderField]
    nulls: Optional[NullOrdering] = None


# ============== RETURNING ==============

class ReturningKind(Enum):
    ALL = "ALL"
    COLUMNS = "COLUMNS"
    EXPRS = "EXPRS"


@dataclass
class ReturningClause:
    kind: ReturningKind
    items: List[Any] = field(default_factory=list)


class Returning:
    """Fabrique des clauses RETURNING."""

    def all(self) -> ReturningClause:
        return ReturningClause(ReturningKind.ALL)

    def column(self, column: Any) -> ReturningClause:
        return ReturningClause(ReturningKind.COLUMNS, [into_column_ref(column)])

    def columns(self, columns: Iterable[Any]) -> ReturningClause:
        return ReturningClause(ReturningKind.COLUMNS, [into_column_ref(c) for c in columns])

    def expr(self, expr: Any) -> ReturningClause:
        return ReturningClause(ReturningKind.EXPRS, [into_expr(expr)])

    def exprs(self, exprs: Iterable[Any]) -> ReturningClause:
        return ReturningClause(ReturningKind.EXPRS, [into_expr(e) for e in exprs])


# ============== Requête de base ==============

class QueryStatement:
    """Base de toutes les requêtes construisibles."""

    def build(self, query_builder: Any) -> Tuple[str, Values]:
        """
        Rend la requête avec placeholders.

        Args:
            query_builder: Dialecte (instance ou nom: "mysql", "postgres", "sqlite")

        Returns:
            Tuple (sql, valeurs collectées dans l'ordre des placeholders)
        """
        builder = _resolve_builder(query_builder)
        placeholder, numbered = builder.placeholder()
        writer = SqlWriterValues(placeholder, numbered)
        builder.prepare_query_statement(self, writer)
        sql, values = writer.into_parts()
        logger.debug(f"Built {type(self).__name__} for {builder.dialect_name}: {len(values)} values")
        return sql, values

    def build_collect(self, query_builder: Any, writer: SqlWriter) -> str:
        """Rend la requête dans un collecteur fourni par l'appelant."""
        builder = _resolve_builder(query_builder)
        builder.prepare_query_statement(self, writer)
        return writer.result()

    def to_string(self, query_builder: Any) -> str:
        """Rend la requête avec les valeurs en ligne (débogage)."""
        builder = _resolve_builder(query_builder)
        writer = SqlWriterString()
        builder.prepare_query_statement(self, writer)
        return writer.result()

    def audit(self):
        """Tables lues et écrites par la requête."""
        from .audit import audit_statement
        return audit_statement(self)

    def to_expr(self) -> SubQueryExpr:
        """La requête utilisée comme sous-requête dans une expression."""
        return SubQueryExpr(None, self)

    def clone(self):
        return copy.deepcopy(self)

    def take(self):
        """Retourne la requête courante et remet celle-ci à zéro."""
        taken = copy.copy(self)
        self.__init__()
        return taken

    def apply(self, func):
        func(self)
        return self

    def apply_if(self, value: Any, func):
        """Applique `func(self, value)` si `value` n'est pas None."""
        if value is not None:
            func(self, value)
        return self

    def conditions(self, flag: bool, if_true, if_false):
        if flag:
            if_true(self)
        else:
            if_false(self)
        return self


class ConditionalStatement:
    """Mixin des requêtes avec clause WHERE (attribut `where_clause`)."""

    where_clause: ConditionHolder

    def and_or_where(self, oper: LogicalChainOper):
        self.where_clause.add_and_or(oper)
        return self

    def and_where(self, expr: Any):
        self.where_clause.and_where(expr)
        return self

    def and_where_option(self, expr: Optional[Any]):
        if expr is not None:
            self.and_where(expr)
        return self

    def or_where(self, expr: Any):
        """
        Ajoute `OR expr` à la chaîne historique de la clause WHERE.

        La chaîne garde sa mise en forme historique: un maillon n'est mis
        entre parenthèses que si son opérande droit est lui-même binaire.
        `and_where(b.or_(Expr.cust("c")))` après un or_where rend donc
        `a AND b OR (c)`; préférer cond_where() pour mélanger AND et OR.

        Raises:
            ConditionMixError: si la clause contient déjà un arbre de conditions
        """
        self.where_clause.add_and_or(LogicalChainOper.or_(expr))
        return self

    def cond_where(self, condition: Any):
        self.where_clause.add_condition(condition)
        return self


class OrderedStatement:
    """Mixin des requêtes avec clause ORDER BY (attribut `orders`)."""

    orders: List[OrderExpr]

    def add_order_by(self, order: OrderExpr):
        self.orders.append(order)
        return self

    def clear_order_by(self):
        self.orders = []
        return self

    def order_by(self, column: Any, order: Union[Order, OrderField]):
        return self.add_order_by(OrderExpr(ColumnExpr(into_column_ref(column)), order))

    def order_by_expr(self, expr: Any, order: Union[Order, OrderField]):
        return self.add_order_by(OrderExpr(into_expr(expr), order))

    def order_by_customs(self, columns: Iterable[Tuple[str, Order]]):
        for sql, order in columns:
            self.add_order_by(OrderExpr(CustomExpr(sql), order))
        return self

    def order_by_columns(self, columns: Iterable[Tuple[Any, Order]]):
        for column, order in columns:
            self.order_by(column, order)
        return self

    def order_by_with_nulls(self, column: Any, order: Union[Order, OrderField],
                            nulls: NullOrdering):
        return self.add_order_by(OrderExpr(ColumnExpr(into_column_ref(column)), order, nulls))

    def order_by_expr_with_nulls(self, expr: Any, order: Union[Order, OrderField],
                                 nulls: NullOrdering):
        return self.add_order_by(OrderExpr(into_expr(expr), order, nulls))

    def order_by_columns_with_nulls(self, columns: Iterable[Tuple[Any, Order, NullOrdering]]):
        for column, order, nulls in columns:
            self.order_by_with_nulls(column, order, nulls)
        return self


# ============== Clauses de SELECT ==============

@dataclass
class WindowSelectType:
    """Fenêtre d'une expression: nommée (`OVER "w"`) ou en ligne (`OVER ( ... )`)."""
    name: Optional[Any] = None
    window: Optional[Any] = None


@dataclass
class SelectExpr:
    """Élément de la liste de sélection."""
    expr: Expr
    alias: Optional[Any] = None
    window: Optional[WindowSelectType] = None


class JoinType(Enum):
    JOIN = "JOIN"
    CROSS_JOIN = "CROSS JOIN"
    INNER_JOIN = "INNER JOIN"
    LEFT_JOIN = "LEFT JOIN"
    RIGHT_JOIN = "RIGHT JOIN"
    FULL_OUTER_JOIN = "FULL OUTER JOIN"
    STRAIGHT_JOIN = "STRAIGHT_JOIN"


@dataclass
class JoinExpr:
    join: JoinType
    table: Any
    on: Optional[ConditionHolder] = None
    lateral: bool = False


class LockType(Enum):
    UPDATE = "FOR UPDATE"
    NO_KEY_UPDATE = "FOR NO KEY UPDATE"
    SHARE = "FOR SHARE"
    KEY_SHARE = "FOR KEY SHARE"


class LockBehavior(Enum):
    NOWAIT = "NOWAIT"
    SKIP_LOCKED = "SKIP LOCKED"


@dataclass
class LockClause:
    type: LockType
    tables: List[Any] = field(default_factory=list)
    behavior: Optional[LockBehavior] = None


class IndexHintType(Enum):
    USE = "USE"
    IGNORE = "IGNORE"
    FORCE = "FORCE"


class IndexHintScope(Enum):
    ALL = ""
    JOIN = "FOR JOIN "
    ORDER = "FOR ORDER BY "
    GROUP = "FOR GROUP BY "


@dataclass
class IndexHint:
    """Indication d'index MySQL (ignorée par les autres dialectes)."""
    index: Any
    type: IndexHintType
    scope: IndexHintScope = IndexHintScope.ALL
