"""
Exceptions levées par le constructeur de requêtes.

Une seule erreur est récupérable (ColValNumMismatch); toutes les autres
signalent une erreur de programmation et interrompent le rendu.
"""

from enum import Enum
from typing import Optional


class SQLBuilderError(Exception):
    """Erreur de base du constructeur SQL."""
    pass


class ColValNumMismatch(SQLBuilderError):
    """Le nombre de valeurs d'une ligne INSERT ne correspond pas au nombre de colonnes."""

    def __init__(self, col_len: int, val_len: int):
        self.col_len = col_len
        self.val_len = val_len
        super().__init__(
            f"Columns and values length mismatch: {col_len} columns, {val_len} values"
        )

    def __eq__(self, other):
        if not isinstance(other, ColValNumMismatch):
            return NotImplemented
        return (self.col_len, self.val_len) == (other.col_len, other.val_len)

    def __hash__(self):
        return hash((self.col_len, self.val_len))


class UnsupportedFeatureError(SQLBuilderError):
    """Construction refusée par le dialecte cible (erreur de programmation)."""

    def __init__(self, feature: str, dialect: Optional[str] = None):
        self.feature = feature
        self.dialect = dialect
        if dialect:
            super().__init__(f"{feature} is not supported by {dialect}")
        else:
            super().__init__(f"{feature} is not supported")


class ConditionMixError(SQLBuilderError):
    """Mélange de la chaîne and_where/or_where avec cond_where."""

    def __init__(self):
        super().__init__("Cannot mix `and_where`/`or_where` and `cond_where` in statements")


class AuditErrorKind(Enum):
    """Causes d'échec de l'audit."""
    UNABLE_TO_PARSE_QUERY = "unable_to_parse_query"


class AuditError(SQLBuilderError):
    """L'audit n'a pas pu identifier la table cible d'une requête."""

    UNABLE_TO_PARSE_QUERY = AuditErrorKind.UNABLE_TO_PARSE_QUERY

    def __init__(self, kind: AuditErrorKind = AuditErrorKind.UNABLE_TO_PARSE_QUERY,
                 message: str = "Unable to parse query"):
        self.kind = kind
        super().__init__(message)
