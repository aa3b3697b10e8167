"""
Vocabulaire des identifiants SQL.

Ce module définit les noms (tables, colonnes, schémas, alias), les
références de colonnes et de tables, les références de types et les
mots-clés utilisés par l'arbre de requêtes.

Un identifiant peut être fourni sous plusieurs formes:
- une chaîne: "glyph"
- un membre d'Enum: Glyph.TABLE (sa valeur est le nom rendu)
- un Iden / Alias explicite
- un tuple pour les noms qualifiés: ("glyph", "id"), ("schema", "glyph", "id")
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union


class Iden:
    """Nom SQL rendu sans guillemets; l'égalité porte sur le nom rendu."""

    __slots__ = ('name',)

    def __init__(self, name: str):
        self.name = str(name)

    def to_string(self) -> str:
        return self.name

    def __str__(self):
        return self.name

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def __eq__(self, other):
        if isinstance(other, Iden):
            return self.name == other.name
        if isinstance(other, str):
            return self.name == other
        return NotImplemented

    def __hash__(self):
        return hash(self.name)


class Alias(Iden):
    """Identifiant construit à la volée (alias de table, de colonne, de CTE...)."""

    @classmethod
    def new(cls, name: str) -> 'Alias':
        return cls(name)


class _AsteriskType:
    """Le `*` des listes de sélection."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "Asterisk"


Asterisk = _AsteriskType()


IdenLike = Union[str, Iden, Enum]


def into_iden(value: Any) -> Iden:
    """
    Convertit une chaîne, un membre d'Enum ou un Iden en Iden.

    Args:
        value: Nom à convertir

    Returns:
        L'identifiant correspondant
    """
    if isinstance(value, Iden):
        return value
    if isinstance(value, Enum):
        if isinstance(value.value, str):
            return Iden(value.value)
        return Iden(value.name.lower())
    if isinstance(value, str):
        return Iden(value)
    raise TypeError(f"Cannot convert {value!r} into an identifier")


# ============== Noms qualifiés ==============

@dataclass(frozen=True)
class TableName:
    """Nom de table éventuellement qualifié par schéma et base."""
    name: Iden
    schema: Optional[Iden] = None
    database: Optional[Iden] = None

    def parts(self) -> List[Iden]:
        """Segments du nom, du plus large au plus précis."""
        result = []
        if self.database is not None:
            result.append(self.database)
        if self.schema is not None:
            result.append(self.schema)
        result.append(self.name)
        return result


def into_table_name(value: Any) -> TableName:
    """Convertit `t`, `(schema, t)` ou `(db, schema, t)` en TableName."""
    if isinstance(value, TableName):
        return value
    if isinstance(value, tuple):
        if len(value) == 2:
            return TableName(into_iden(value[1]), schema=into_iden(value[0]))
        if len(value) == 3:
            return TableName(into_iden(value[2]), schema=into_iden(value[1]),
                             database=into_iden(value[0]))
        raise TypeError(f"Cannot convert {value!r} into a table name")
    return TableName(into_iden(value))


@dataclass(frozen=True)
class ColumnRef:
    """
    Référence de colonne.

    `column` à None désigne l'astérisque (`*` ou `table.*`).
    """
    column: Optional[Iden]
    table: Optional[TableName] = None

    @property
    def is_asterisk(self) -> bool:
        return self.column is None


def into_column_ref(value: Any) -> ColumnRef:
    """
    Convertit une forme de colonne en ColumnRef.

    Formes acceptées: `col`, `Asterisk`, `(table, col)`, `(schema, table, col)`,
    `(db, schema, table, col)`; `col` peut être `Asterisk` dans un tuple.
    """
    if isinstance(value, ColumnRef):
        return value
    if value is Asterisk:
        return ColumnRef(None)
    if isinstance(value, tuple):
        if len(value) < 2 or len(value) > 4:
            raise TypeError(f"Cannot convert {value!r} into a column reference")
        table = into_table_name(value[:-1] if len(value) > 2 else value[0])
        column = value[-1]
        if column is Asterisk:
            return ColumnRef(None, table)
        return ColumnRef(into_iden(column), table)
    return ColumnRef(into_iden(value))


# ============== Références de tables ==============

class TableRef:
    """Classe de base des références de table (FROM, JOIN, INTO...)."""
    pass


@dataclass
class Table(TableRef):
    """Table nommée, éventuellement qualifiée et aliasée."""
    name: TableName
    alias: Optional[Iden] = None


@dataclass
class SubQueryRef(TableRef):
    """Sous-requête SELECT utilisée comme table."""
    query: Any
    alias: Iden


@dataclass
class FunctionRef(TableRef):
    """Appel de fonction utilisé comme table (`FROM func() AS alias`)."""
    call: Any
    alias: Iden


@dataclass
class ValuesRef(TableRef):
    """Liste de tuples littéraux utilisée comme table (`(VALUES ...) AS alias`)."""
    rows: List[Tuple[Any, ...]]
    alias: Iden


def into_table_ref(value: Any, alias: Any = None) -> TableRef:
    """Convertit un nom (ou une TableRef) en référence de table."""
    if isinstance(value, TableRef):
        if alias is not None and isinstance(value, Table):
            return Table(value.name, into_iden(alias))
        return value
    return Table(into_table_name(value), into_iden(alias) if alias is not None else None)


# ============== Types ==============

@dataclass(frozen=True)
class TypeRef:
    """Nom de type éventuellement qualifié (cible d'un CAST)."""
    name: Iden
    schema: Optional[Iden] = None
    database: Optional[Iden] = None


def into_type_ref(value: Any) -> TypeRef:
    if isinstance(value, TypeRef):
        return value
    table = into_table_name(value)
    return TypeRef(table.name, table.schema, table.database)


# ============== Mots-clés ==============

class Keyword(Enum):
    """Mots-clés SQL utilisables comme expression."""
    NULL = "NULL"
    CURRENT_DATE = "CURRENT_DATE"
    CURRENT_TIME = "CURRENT_TIME"
    CURRENT_TIMESTAMP = "CURRENT_TIMESTAMP"
    DEFAULT = "DEFAULT"


@dataclass(frozen=True)
class CustomKeyword:
    """Mot-clé libre, rendu tel quel."""
    iden: Iden
