"""
Clause ON CONFLICT (PostgreSQL, SQLite) / ON DUPLICATE KEY (MySQL).

    OnConflict.column("id").update_columns(["aspect", "image"])
    # PostgreSQL: ON CONFLICT ("id") DO UPDATE SET "aspect" = "excluded"."aspect", ...
    # MySQL:      ON DUPLICATE KEY UPDATE `aspect` = VALUES(`aspect`), ...
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from .ast_nodes import Expr, into_expr
from .condition import ConditionHolder, LogicalChainOper
from .idens import Iden, into_iden


class OnConflictTargetKind(Enum):
    COLUMNS = "COLUMNS"
    EXPRS = "EXPRS"
    CONSTRAINT = "CONSTRAINT"


@dataclass
class OnConflictTarget:
    """Cible du conflit: colonnes, expressions d'index ou contrainte nommée."""
    kind: OnConflictTargetKind
    items: List[Any] = field(default_factory=list)


@dataclass
class OnConflictUpdate:
    """
    Affectation du DO UPDATE.

    `expr` à None signifie « reprendre la valeur proposée »
    (`excluded.col` ou `VALUES(col)`).
    """
    column: Iden
    expr: Optional[Expr] = None


class OnConflictActionKind(Enum):
    DO_NOTHING = "DO_NOTHING"
    UPDATE = "UPDATE"


@dataclass
class OnConflictAction:
    kind: OnConflictActionKind
    # DO_NOTHING: clés primaires pour l'émulation MySQL; UPDATE: affectations
    items: List[Any] = field(default_factory=list)


class OnConflict:
    """Comportement d'un INSERT en cas de conflit de clé."""

    def __init__(self):
        self.targets: List[OnConflictTarget] = []
        self.target_where = ConditionHolder()
        self.action: Optional[OnConflictAction] = None
        self.action_where = ConditionHolder()

    @classmethod
    def new(cls) -> 'OnConflict':
        return cls()

    # ============== Cibles ==============

    @classmethod
    def column(cls, column: Any) -> 'OnConflict':
        return cls.columns([column])

    @classmethod
    def columns(cls, columns: Iterable[Any]) -> 'OnConflict':
        on_conflict = cls()
        on_conflict.targets.append(
            OnConflictTarget(OnConflictTargetKind.COLUMNS, [into_iden(c) for c in columns]))
        return on_conflict

    @classmethod
    def expr(cls, expr: Any) -> 'OnConflict':
        """Cible sur une expression d'index: `ON CONFLICT (LOWER("email"))`."""
        return cls.exprs([expr])

    @classmethod
    def exprs(cls, exprs: Iterable[Any]) -> 'OnConflict':
        on_conflict = cls()
        on_conflict.targets.append(
            OnConflictTarget(OnConflictTargetKind.EXPRS, [into_expr(e) for e in exprs]))
        return on_conflict

    @classmethod
    def on_constraint(cls, name: str) -> 'OnConflict':
        """`ON CONFLICT ON CONSTRAINT "name"` (PostgreSQL)."""
        on_conflict = cls()
        on_conflict.targets.append(
            OnConflictTarget(OnConflictTargetKind.CONSTRAINT, [into_iden(name)]))
        return on_conflict

    # ============== Actions ==============

    def do_nothing(self) -> 'OnConflict':
        """DO NOTHING; sous MySQL rendu `INSERT ... ON DUPLICATE KEY IGNORE`."""
        self.action = OnConflictAction(OnConflictActionKind.DO_NOTHING)
        return self

    def do_nothing_on(self, pk_columns: Iterable[Any]) -> 'OnConflict':
        """
        DO NOTHING émulé sous MySQL par `UPDATE pk = pk`.

        Args:
            pk_columns: Colonnes de la clé primaire

        Returns:
            self
        """
        self.action = OnConflictAction(OnConflictActionKind.DO_NOTHING,
                                       [into_iden(c) for c in pk_columns])
        return self

    def _updates(self) -> List[OnConflictUpdate]:
        if self.action is None or self.action.kind != OnConflictActionKind.UPDATE:
            self.action = OnConflictAction(OnConflictActionKind.UPDATE)
        return self.action.items

    def update_column(self, column: Any) -> 'OnConflict':
        return self.update_columns([column])

    def update_columns(self, columns: Iterable[Any]) -> 'OnConflict':
        updates = self._updates()
        updates.extend(OnConflictUpdate(into_iden(c)) for c in columns)
        return self

    def update_value(self, column: Any, value: Any) -> 'OnConflict':
        return self.update_expr(column, value)

    def update_values(self, column_values: Iterable[Tuple[Any, Any]]) -> 'OnConflict':
        return self.update_exprs(column_values)

    def value(self, column: Any, value: Any) -> 'OnConflict':
        """Affectation explicite: `col = valeur` (valeur ou expression)."""
        return self.update_expr(column, value)

    def values(self, column_values: Iterable[Tuple[Any, Any]]) -> 'OnConflict':
        return self.update_exprs(column_values)

    def update_expr(self, column: Any, expr: Any) -> 'OnConflict':
        self._updates().append(OnConflictUpdate(into_iden(column), into_expr(expr)))
        return self

    def update_exprs(self, column_exprs: Iterable[Tuple[Any, Any]]) -> 'OnConflict':
        updates = self._updates()
        for column, expr in column_exprs:
            updates.append(OnConflictUpdate(into_iden(column), into_expr(expr)))
        return self

    # ============== Conditions ==============

    def target_and_where(self, expr: Any) -> 'OnConflict':
        """WHERE de l'index partiel ciblé (PostgreSQL)."""
        self.target_where.and_where(expr)
        return self

    def target_and_where_option(self, expr: Optional[Any]) -> 'OnConflict':
        if expr is not None:
            self.target_and_where(expr)
        return self

    def target_and_or_where(self, oper: LogicalChainOper) -> 'OnConflict':
        self.target_where.add_and_or(oper)
        return self

    def target_cond_where(self, condition: Any) -> 'OnConflict':
        self.target_where.add_condition(condition)
        return self

    def action_and_where(self, expr: Any) -> 'OnConflict':
        """WHERE appliqué à l'action DO UPDATE."""
        self.action_where.and_where(expr)
        return self

    def action_and_where_option(self, expr: Optional[Any]) -> 'OnConflict':
        if expr is not None:
            self.action_and_where(expr)
        return self

    def action_and_or_where(self, oper: LogicalChainOper) -> 'OnConflict':
        self.action_where.add_and_or(oper)
        return self

    def action_cond_where(self, condition: Any) -> 'OnConflict':
        self.action_where.add_condition(condition)
        return self
