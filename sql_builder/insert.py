"""
Constructeur de requêtes INSERT.

    (Query.insert()
        .into_table("glyph")
        .columns(["aspect", "image"])
        .values_panic([5.15, "12A"])
        .values_panic([4.21, "123"]))
    # INSERT INTO "glyph" ("aspect", "image") VALUES (5.15, '12A'), (4.21, '123')
"""

from typing import Any, Iterable, List, Optional

from .ast_nodes import Expr, into_expr
from .errors import ColValNumMismatch
from .idens import Iden, TableRef, into_iden, into_table_ref
from .on_conflict import OnConflict
from .statements import QueryStatement, Returning, ReturningClause


class InsertStatement(QueryStatement):
    """Requête INSERT (ou REPLACE)."""

    def __init__(self):
        self.replace_ = False
        self.table: Optional[TableRef] = None
        self.cols: List[Iden] = []
        # Source: liste de lignes ou requête SELECT
        self.values_rows: List[List[Expr]] = []
        self.select_source = None
        self.on_conflict_clause: Optional[OnConflict] = None
        self.returning_clause: Optional[ReturningClause] = None
        self.default_values: int = 0
        self.with_clause = None

    @classmethod
    def new(cls) -> 'InsertStatement':
        return cls()

    def replace(self) -> 'InsertStatement':
        """`REPLACE INTO` (MySQL, SQLite)."""
        self.replace_ = True
        return self

    def into_table(self, table: Any) -> 'InsertStatement':
        self.table = into_table_ref(table)
        return self

    def columns(self, columns: Iterable[Any]) -> 'InsertStatement':
        self.cols = [into_iden(c) for c in columns]
        return self

    # ============== Source ==============

    def values(self, values: Iterable[Any]) -> 'InsertStatement':
        """
        Ajoute une ligne.

        Args:
            values: Valeurs ou expressions, une par colonne déclarée

        Returns:
            self

        Raises:
            ColValNumMismatch: si le nombre de valeurs diffère du nombre de colonnes
        """
        row = [into_expr(v) for v in values]
        if len(row) != len(self.cols):
            raise ColValNumMismatch(len(self.cols), len(row))
        if row:
            self.values_rows.append(row)
            self.select_source = None
        return self

    def values_panic(self, values: Iterable[Any]) -> 'InsertStatement':
        """Comme values(); l'erreur de longueur est une erreur de programmation."""
        return self.values(values)

    def values_from_panic(self, rows: Iterable[Iterable[Any]]) -> 'InsertStatement':
        for row in rows:
            self.values_panic(row)
        return self

    def select_from(self, select) -> 'InsertStatement':
        """
        `INSERT INTO t (cols) SELECT ...`.

        Raises:
            ColValNumMismatch: si l'arité du SELECT diffère du nombre de colonnes
        """
        if len(select.selects) != len(self.cols):
            raise ColValNumMismatch(len(self.cols), len(select.selects))
        self.select_source = select
        self.values_rows = []
        return self

    def or_default_values(self, num_rows: int = 1) -> 'InsertStatement':
        """Lignes de valeurs par défaut, utilisées si aucune colonne ni source n'est donnée."""
        self.default_values = num_rows
        return self

    def or_default_values_many(self, num_rows: int) -> 'InsertStatement':
        return self.or_default_values(num_rows)

    # ============== Conflit / RETURNING ==============

    def on_conflict(self, on_conflict: OnConflict) -> 'InsertStatement':
        self.on_conflict_clause = on_conflict
        return self

    def returning(self, returning: ReturningClause) -> 'InsertStatement':
        self.returning_clause = returning
        return self

    def returning_col(self, column: Any) -> 'InsertStatement':
        return self.returning(Returning().column(column))

    def returning_all(self) -> 'InsertStatement':
        return self.returning(Returning().all())

    # ============== WITH ==============

    def with_(self, clause):
        from .with_clause import into_with_clause
        return into_with_clause(clause).query(self)

    def with_cte(self, clause) -> 'InsertStatement':
        from .with_clause import into_with_clause
        self.with_clause = into_with_clause(clause)
        return self
