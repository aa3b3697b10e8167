"""
Audit des accès d'une requête.

Parcourt l'arbre d'une requête et relève chaque table lue ou écrite,
sans rien rendre. Les sous-requêtes (FROM, jointures, expressions,
conditions, CTE) sont visitées récursivement; les noms de CTE déclarés
dans une clause WITH ne sont pas comptés comme des tables externes.

    audit = Query.select().column("id").from_("glyph").audit()
    audit.selected_tables()  # ['glyph']
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .condition import Condition, ConditionHolder
from .errors import AuditError
from .idens import FunctionRef, SubQueryRef, Table, TableRef
from .statements import OrderExpr, ReturningClause, ReturningKind

logger = logging.getLogger(__name__)


class AccessType(Enum):
    """Nature d'un accès à une table."""
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True)
class QueryAccessRequest:
    """Un accès: type, schéma éventuel et nom de table."""
    access_type: AccessType
    schema: Optional[str]
    table: str

    @property
    def schema_table(self) -> Tuple[Optional[str], str]:
        return (self.schema, self.table)


@dataclass
class QueryAccessAudit:
    """Résultat de l'audit: accès dans l'ordre de rencontre, sans doublons."""
    requests: List[QueryAccessRequest] = field(default_factory=list)

    def _filter(self, access_type: AccessType) -> List[QueryAccessRequest]:
        return [r for r in self.requests if r.access_type == access_type]

    def selects(self) -> List[Tuple[Optional[str], str]]:
        return [r.schema_table for r in self._filter(AccessType.SELECT)]

    def inserts(self) -> List[Tuple[Optional[str], str]]:
        return [r.schema_table for r in self._filter(AccessType.INSERT)]

    def updates(self) -> List[Tuple[Optional[str], str]]:
        return [r.schema_table for r in self._filter(AccessType.UPDATE)]

    def deletes(self) -> List[Tuple[Optional[str], str]]:
        return [r.schema_table for r in self._filter(AccessType.DELETE)]

    def selected_tables(self) -> List[str]:
        return [r.table for r in self._filter(AccessType.SELECT)]

    def inserted_tables(self) -> List[str]:
        return [r.table for r in self._filter(AccessType.INSERT)]

    def updated_tables(self) -> List[str]:
        return [r.table for r in self._filter(AccessType.UPDATE)]

    def deleted_tables(self) -> List[str]:
        return [r.table for r in self._filter(AccessType.DELETE)]


def _schema_table(table_ref: TableRef) -> Optional[Tuple[Optional[str], str]]:
    """(schéma, table) d'une table nommée; None pour les autres références."""
    if not isinstance(table_ref, Table):
        return None
    name = table_ref.name
    schema = name.schema.to_string() if name.schema is not None else None
    return (schema, name.name.to_string())


class AuditWalker:
    """
    Parcours récursif d'une requête.

    Chaque méthode `_walk_<Type>` visite un type de nœud; les nœuds sans
    méthode dédiée (colonnes, valeurs, mots-clés...) ne contiennent
    aucune table.
    """

    def __init__(self):
        self.access: List[QueryAccessRequest] = []

    def push(self, access_type: AccessType, schema: Optional[str], table: str) -> None:
        self.access.append(QueryAccessRequest(access_type, schema, table))

    def walk(self, node) -> None:
        """Visite un nœud quelconque (requête, expression, condition, table)."""
        if node is None:
            return
        method = getattr(self, f'_walk_{type(node).__name__}', None)
        if method is not None:
            method(node)

    # ============== Requêtes ==============

    def _walk_SelectStatement(self, select) -> None:
        for select_expr in select.selects:
            self.walk(select_expr.expr)
        for table_ref in select.from_tables:
            self.walk_table(table_ref)
        for join in select.joins:
            self.walk_table(join.table)
            if join.on is not None:
                self.walk_condition_holder(join.on)
        for _, union_select in select.unions_list:
            self.walk(union_select)
        self.walk_condition_holder(select.where_clause)
        for expr in select.groups:
            self.walk(expr)
        self.walk_condition_holder(select.having_clause)
        self.walk_orders(select.orders)
        if select.with_clause is not None:
            self.walk_with_clause(select.with_clause)
            self.cleanup_with_clause(select.with_clause)

    def _walk_WithQuery(self, with_query) -> None:
        self.walk_with_clause(with_query.with_clause_)
        self.walk(with_query.query_)
        self.cleanup_with_clause(with_query.with_clause_)

    def _walk_InsertStatement(self, insert) -> None:
        schema, table = self.target(insert.table)
        if insert.returning_clause is not None:
            self.push(AccessType.SELECT, schema, table)
        self.push(AccessType.INSERT, schema, table)
        self.walk(insert.select_source)
        for row in insert.values_rows:
            for expr in row:
                self.walk(expr)
        self.walk_returning(insert.returning_clause)
        if insert.with_clause is not None:
            self.walk_with_clause(insert.with_clause)
            self.cleanup_with_clause(insert.with_clause)

    def _walk_UpdateStatement(self, update) -> None:
        schema, table = self.target(update.table_ref)
        if update.returning_clause is not None:
            self.push(AccessType.SELECT, schema, table)
        self.push(AccessType.UPDATE, schema, table)
        for table_ref in update.from_tables:
            self.walk_table(table_ref)
        for _, expr in update.assignments:
            self.walk(expr)
        self.walk_condition_holder(update.where_clause)
        self.walk_orders(update.orders)
        self.walk_returning(update.returning_clause)
        if update.with_clause is not None:
            self.walk_with_clause(update.with_clause)
            self.cleanup_with_clause(update.with_clause)

    def _walk_DeleteStatement(self, delete) -> None:
        schema, table = self.target(delete.table)
        if delete.returning_clause is not None:
            self.push(AccessType.SELECT, schema, table)
        self.push(AccessType.DELETE, schema, table)
        self.walk_condition_holder(delete.where_clause)
        self.walk_orders(delete.orders)
        self.walk_returning(delete.returning_clause)
        if delete.with_clause is not None:
            self.walk_with_clause(delete.with_clause)
            self.cleanup_with_clause(delete.with_clause)

    @staticmethod
    def target(table_ref: Optional[TableRef]) -> Tuple[Optional[str], str]:
        """
        Table cible d'une écriture.

        Raises:
            AuditError: si la cible est absente ou n'est pas une table nommée
        """
        schema_table = _schema_table(table_ref) if table_ref is not None else None
        if schema_table is None:
            raise AuditError()
        return schema_table

    # ============== Tables ==============

    def walk_table(self, table_ref: TableRef) -> None:
        if isinstance(table_ref, Table):
            schema, table = _schema_table(table_ref)
            self.push(AccessType.SELECT, schema, table)
        elif isinstance(table_ref, SubQueryRef):
            self.walk(table_ref.query)
        elif isinstance(table_ref, FunctionRef):
            self.walk(table_ref.call)

    def walk_orders(self, orders: List[OrderExpr]) -> None:
        for order in orders:
            self.walk(order.expr)

    def walk_returning(self, returning: Optional[ReturningClause]) -> None:
        """Seules les expressions d'un RETURNING peuvent contenir une sous-requête."""
        if returning is not None and returning.kind == ReturningKind.EXPRS:
            for expr in returning.items:
                self.walk(expr)

    # ============== WITH ==============

    def walk_with_clause(self, with_clause) -> None:
        if with_clause.search_ is not None and with_clause.search_.expr is not None:
            self.walk(with_clause.search_.expr.expr)
        if with_clause.cycle_ is not None:
            self.walk(with_clause.cycle_.expr)
        for cte in with_clause.cte_expressions:
            self.walk(cte.query_)

    def cleanup_with_clause(self, with_clause) -> None:
        """Retire les lectures non qualifiées qui désignent une CTE déclarée."""
        names = {cte.table_name_.to_string() for cte in with_clause.cte_expressions
                 if cte.table_name_ is not None}
        self.access = [
            request for request in self.access
            if not (request.access_type == AccessType.SELECT
                    and request.schema is None and request.table in names)
        ]

    # ============== Expressions ==============

    def _walk_UnaryExpr(self, expr) -> None:
        self.walk(expr.expr)

    def _walk_AsEnumExpr(self, expr) -> None:
        self.walk(expr.expr)

    def _walk_BinaryExpr(self, expr) -> None:
        self.walk(expr.left)
        self.walk(expr.right)

    def _walk_SubQueryExpr(self, expr) -> None:
        self.walk(expr.query)

    def _walk_TupleExpr(self, expr) -> None:
        for item in expr.exprs:
            self.walk(item)

    def _walk_CustomWithExpr(self, expr) -> None:
        for item in expr.exprs:
            self.walk(item)

    def _walk_FunctionCall(self, call) -> None:
        for arg in call.args:
            self.walk(arg)

    def _walk_CaseStatement(self, case) -> None:
        for when in case.when:
            self.walk(when.condition)
            self.walk(when.result)
        self.walk(case.else_)

    # ============== Conditions ==============

    def _walk_Condition(self, condition: Condition) -> None:
        for child in condition.conditions:
            self.walk(child)

    def walk_condition_holder(self, holder: ConditionHolder) -> None:
        if isinstance(holder.contents, list):
            for oper in holder.contents:
                self.walk(oper.expr)
        else:
            self.walk(holder.contents)


def _dedup(requests: List[QueryAccessRequest]) -> List[QueryAccessRequest]:
    """Garde la première occurrence de chaque (type, schéma, table)."""
    seen = set()
    result = []
    for request in requests:
        if request in seen:
            continue
        seen.add(request)
        result.append(request)
    return result


def audit_statement(statement) -> QueryAccessAudit:
    """
    Audite une requête.

    Args:
        statement: SELECT, INSERT, UPDATE, DELETE ou requête WITH

    Returns:
        Les accès relevés, dédoublonnés

    Raises:
        AuditError: si la table cible d'une écriture ne peut pas être identifiée
    """
    walker = AuditWalker()
    walker.walk(statement)
    audit = QueryAccessAudit(_dedup(walker.access))
    logger.debug(f"Audited {type(statement).__name__}: {len(audit.requests)} accesses")
    return audit
