"""
Fenêtres des fonctions analytiques.

    WindowStatement.partition_by("font_id").order_by("id", Order.ASC)
    # PARTITION BY "font_id" ORDER BY "id" ASC
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from .ast_nodes import ColumnExpr, CustomExpr, Expr, into_expr
from .idens import into_column_ref
from .statements import OrderedStatement, OrderExpr


class FrameType(Enum):
    RANGE = "RANGE"
    ROWS = "ROWS"


class FrameKind(Enum):
    UNBOUNDED_PRECEDING = "UNBOUNDED PRECEDING"
    PRECEDING = "PRECEDING"
    CURRENT_ROW = "CURRENT ROW"
    FOLLOWING = "FOLLOWING"
    UNBOUNDED_FOLLOWING = "UNBOUNDED FOLLOWING"


@dataclass(frozen=True)
class Frame:
    """Borne de cadre; `offset` n'a de sens que pour PRECEDING/FOLLOWING."""
    kind: FrameKind
    offset: Optional[int] = None

    @classmethod
    def unbounded_preceding(cls) -> 'Frame':
        return cls(FrameKind.UNBOUNDED_PRECEDING)

    @classmethod
    def preceding(cls, offset: int) -> 'Frame':
        return cls(FrameKind.PRECEDING, int(offset))

    @classmethod
    def current_row(cls) -> 'Frame':
        return cls(FrameKind.CURRENT_ROW)

    @classmethod
    def following(cls, offset: int) -> 'Frame':
        return cls(FrameKind.FOLLOWING, int(offset))

    @classmethod
    def unbounded_following(cls) -> 'Frame':
        return cls(FrameKind.UNBOUNDED_FOLLOWING)


@dataclass
class FrameClause:
    type: FrameType
    start: Frame
    end: Optional[Frame] = None


class WindowStatement(OrderedStatement):
    """Définition de fenêtre: partitions, tri et cadre."""

    def __init__(self):
        self.partitions: List[Expr] = []
        self.orders: List[OrderExpr] = []
        self.frame_clause: Optional[FrameClause] = None

    @classmethod
    def new(cls) -> 'WindowStatement':
        return cls()

    @classmethod
    def partition_by(cls, column: Any) -> 'WindowStatement':
        window = cls()
        window.partitions.append(ColumnExpr(into_column_ref(column)))
        return window

    @classmethod
    def partition_by_custom(cls, sql: str) -> 'WindowStatement':
        window = cls()
        window.partitions.append(CustomExpr(sql))
        return window

    def partition(self, column: Any) -> 'WindowStatement':
        self.partitions.append(ColumnExpr(into_column_ref(column)))
        return self

    def add_partition_by(self, expr: Any) -> 'WindowStatement':
        self.partitions.append(into_expr(expr))
        return self

    def frame_start(self, frame_type: FrameType, start: Frame) -> 'WindowStatement':
        return self.frame(frame_type, start, None)

    def frame_between(self, frame_type: FrameType, start: Frame, end: Frame) -> 'WindowStatement':
        return self.frame(frame_type, start, end)

    def frame(self, frame_type: FrameType, start: Frame, end: Optional[Frame] = None) -> 'WindowStatement':
        self.frame_clause = FrameClause(frame_type, start, end)
        return self
