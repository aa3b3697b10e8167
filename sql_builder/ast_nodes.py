"""
Nœuds de l'Arbre Syntaxique Abstrait (AST) des expressions SQL.

Ce module définit les opérateurs, les variantes d'expressions et les
appels de fonctions. Chaque expression expose une API fluide qui
construit de nouveaux nœuds sans modifier le nœud courant:

    Expr.col("size_w").add(1).mul(2)      # ("size_w" + 1) * 2
    Expr.col("id").is_in([3, 4, 5])       # "id" IN (3, 4, 5)
"""

from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from .idens import (
    Asterisk, ColumnRef, CustomKeyword, Iden, Keyword, TypeRef,
    into_column_ref, into_iden, into_type_ref,
)
from .values import Value, ValueType


# ============== Opérateurs ==============

class UnOper(Enum):
    """Opérateurs unaires."""
    NOT = "NOT"


class BinOper(Enum):
    """Opérateurs binaires communs à tous les dialectes."""
    AND = "AND"
    OR = "OR"
    LIKE = "LIKE"
    NOT_LIKE = "NOT LIKE"
    IS = "IS"
    IS_NOT = "IS NOT"
    IN = "IN"
    NOT_IN = "NOT IN"
    BETWEEN = "BETWEEN"
    NOT_BETWEEN = "NOT BETWEEN"
    EQUAL = "="
    NOT_EQUAL = "<>"
    SMALLER_THAN = "<"
    GREATER_THAN = ">"
    SMALLER_THAN_OR_EQUAL = "<="
    GREATER_THAN_OR_EQUAL = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    MOD = "%"
    LSHIFT = "<<"
    RSHIFT = ">>"
    BIT_AND = "&"
    BIT_OR = "|"
    AS = "AS"
    ESCAPE = "ESCAPE"


class PgBinOper(Enum):
    """Opérateurs binaires propres à PostgreSQL."""
    ILIKE = "ILIKE"
    NOT_ILIKE = "NOT ILIKE"
    MATCHES = "@@"
    CONTAINS = "@>"
    CONTAINED = "<@"
    CONCATENATE = "||"
    OVERLAP = "&&"
    SIMILARITY = "%"
    WORD_SIMILARITY = "<%"
    STRICT_WORD_SIMILARITY = "<<%"
    SIMILARITY_DISTANCE = "<->"
    WORD_SIMILARITY_DISTANCE = "<<->"
    STRICT_WORD_SIMILARITY_DISTANCE = "<<<->"
    GET_JSON_FIELD = "->"
    CAST_JSON_FIELD = "->>"
    REGEX = "~"
    REGEX_CASE_INSENSITIVE = "~*"
    NOT_REGEX = "!~"
    NOT_REGEX_CASE_INSENSITIVE = "!~*"


class SqliteBinOper(Enum):
    """Opérateurs binaires propres à SQLite."""
    GLOB = "GLOB"
    MATCH = "MATCH"
    GET_JSON_FIELD = "->"
    CAST_JSON_FIELD = "->>"


@dataclass(frozen=True)
class CustomBinOper:
    """Opérateur libre, rendu tel quel."""
    op: str


AnyBinOper = Union[BinOper, PgBinOper, SqliteBinOper, CustomBinOper]


class SubQueryOper(Enum):
    """Opérateurs préfixes de sous-requête."""
    EXISTS = "EXISTS"
    ANY = "ANY"
    SOME = "SOME"
    ALL = "ALL"


# Classes de précédence
ARITHMETIC_OPERS = frozenset({BinOper.ADD, BinOper.SUB, BinOper.MUL, BinOper.DIV, BinOper.MOD})
SHIFT_OPERS = frozenset({BinOper.LSHIFT, BinOper.RSHIFT})
COMPARISON_OPERS = frozenset({
    BinOper.EQUAL, BinOper.NOT_EQUAL, BinOper.SMALLER_THAN, BinOper.GREATER_THAN,
    BinOper.SMALLER_THAN_OR_EQUAL, BinOper.GREATER_THAN_OR_EQUAL,
})
IS_OPERS = frozenset({BinOper.IS, BinOper.IS_NOT})
IN_OPERS = frozenset({BinOper.IN, BinOper.NOT_IN})
LIKE_OPERS = frozenset({BinOper.LIKE, BinOper.NOT_LIKE, PgBinOper.ILIKE, PgBinOper.NOT_ILIKE})
BETWEEN_OPERS = frozenset({BinOper.BETWEEN, BinOper.NOT_BETWEEN})
LOGICAL_OPERS = frozenset({BinOper.AND, BinOper.OR, UnOper.NOT})
LEFT_ASSOCIATIVE_OPERS = frozenset({
    BinOper.AND, BinOper.OR, BinOper.ADD, BinOper.SUB, BinOper.MUL, BinOper.MOD,
})


# ============== Expressions ==============

class Expr(ABC):
    """
    Classe de base de toutes les expressions.

    Les constructeurs statiques (Expr.col, Expr.val, ...) créent des
    feuilles; les méthodes d'instance combinent l'expression courante
    avec d'autres opérandes.
    """

    # ---------- Constructeurs ----------

    @staticmethod
    def col(column: Any) -> 'ColumnExpr':
        """Référence de colonne: `col`, `(table, col)`, `(schema, table, col)`."""
        return ColumnExpr(into_column_ref(column))

    @staticmethod
    def column(column: Any) -> 'ColumnExpr':
        return ColumnExpr(into_column_ref(column))

    @staticmethod
    def asterisk() -> 'ColumnExpr':
        return ColumnExpr(ColumnRef(None))

    @staticmethod
    def val(value: Any) -> 'ValueExpr':
        """Valeur paramétrée (passe par le collecteur de valeurs)."""
        return ValueExpr(Value.from_python(value))

    @staticmethod
    def value(value: Any) -> 'Expr':
        """Expression telle quelle, ou valeur paramétrée pour un objet Python."""
        return into_expr(value)

    @staticmethod
    def expr(value: Any) -> 'Expr':
        return into_expr(value)

    @staticmethod
    def constant(value: Any) -> 'ConstantExpr':
        """Littéral toujours rendu en ligne."""
        return ConstantExpr(Value.from_python(value))

    @staticmethod
    def cust(sql: str) -> 'CustomExpr':
        """Fragment SQL brut, rendu tel quel."""
        return CustomExpr(sql)

    @staticmethod
    def cust_with_values(sql: str, values: Iterable[Any]) -> 'CustomWithExpr':
        """Fragment SQL dont les placeholders reçoivent des valeurs."""
        return CustomWithExpr(sql, [ValueExpr(Value.from_python(v)) for v in values])

    @staticmethod
    def cust_with_expr(sql: str, expr: Any) -> 'CustomWithExpr':
        return CustomWithExpr(sql, [into_expr(expr)])

    @staticmethod
    def cust_with_exprs(sql: str, exprs: Iterable[Any]) -> 'CustomWithExpr':
        """Fragment SQL dont les placeholders reçoivent des expressions."""
        return CustomWithExpr(sql, [into_expr(e) for e in exprs])

    @staticmethod
    def tuple(items: Iterable[Any]) -> 'TupleExpr':
        return TupleExpr([into_expr(item) for item in items])

    @staticmethod
    def case(condition: Any, then: Any) -> 'Expr':
        """Début d'une expression CASE (voir CaseStatement)."""
        from .condition import CaseStatement
        return CaseStatement().case(condition, then)

    @staticmethod
    def exists(query: Any) -> 'SubQueryExpr':
        return SubQueryExpr(SubQueryOper.EXISTS, query)

    @staticmethod
    def any(query: Any) -> 'SubQueryExpr':
        return SubQueryExpr(SubQueryOper.ANY, query)

    @staticmethod
    def some(query: Any) -> 'SubQueryExpr':
        return SubQueryExpr(SubQueryOper.SOME, query)

    @staticmethod
    def all(query: Any) -> 'SubQueryExpr':
        return SubQueryExpr(SubQueryOper.ALL, query)

    @staticmethod
    def current_date() -> 'KeywordExpr':
        return KeywordExpr(Keyword.CURRENT_DATE)

    @staticmethod
    def current_time() -> 'KeywordExpr':
        return KeywordExpr(Keyword.CURRENT_TIME)

    @staticmethod
    def current_timestamp() -> 'KeywordExpr':
        return KeywordExpr(Keyword.CURRENT_TIMESTAMP)

    @staticmethod
    def keyword_null() -> 'KeywordExpr':
        return KeywordExpr(Keyword.NULL)

    @staticmethod
    def keyword_default() -> 'KeywordExpr':
        return KeywordExpr(Keyword.DEFAULT)

    @staticmethod
    def custom_keyword(name: Any) -> 'KeywordExpr':
        return KeywordExpr(CustomKeyword(into_iden(name)))

    # ---------- Opérateurs génériques ----------

    def binary(self, op: AnyBinOper, right: Any) -> 'BinaryExpr':
        return BinaryExpr(self, op, into_expr(right))

    def unary(self, op: UnOper) -> 'UnaryExpr':
        return UnaryExpr(op, self)

    # ---------- Comparaisons ----------

    def eq(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.EQUAL, value)

    def ne(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.NOT_EQUAL, value)

    def gt(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.GREATER_THAN, value)

    def gte(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.GREATER_THAN_OR_EQUAL, value)

    def lt(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.SMALLER_THAN, value)

    def lte(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.SMALLER_THAN_OR_EQUAL, value)

    def equals(self, column: Any) -> 'BinaryExpr':
        """Égalité avec une autre colonne: `a = b`."""
        return BinaryExpr(self, BinOper.EQUAL, ColumnExpr(into_column_ref(column)))

    def not_equals(self, column: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.NOT_EQUAL, ColumnExpr(into_column_ref(column)))

    def is_(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.IS, value)

    def is_not(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.IS_NOT, value)

    def is_null(self) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.IS, KeywordExpr(Keyword.NULL))

    def is_not_null(self) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.IS_NOT, KeywordExpr(Keyword.NULL))

    def between(self, low: Any, high: Any) -> 'BinaryExpr':
        """`x BETWEEN a AND b`; le AND interne est structurel."""
        return BinaryExpr(self, BinOper.BETWEEN,
                          BinaryExpr(into_expr(low), BinOper.AND, into_expr(high)))

    def not_between(self, low: Any, high: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.NOT_BETWEEN,
                          BinaryExpr(into_expr(low), BinOper.AND, into_expr(high)))

    # ---------- Motifs ----------

    def like(self, pattern: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.LIKE, _like_operand(pattern))

    def not_like(self, pattern: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.NOT_LIKE, _like_operand(pattern))

    def ilike(self, pattern: Any) -> 'BinaryExpr':
        return BinaryExpr(self, PgBinOper.ILIKE, _like_operand(pattern))

    def not_ilike(self, pattern: Any) -> 'BinaryExpr':
        return BinaryExpr(self, PgBinOper.NOT_ILIKE, _like_operand(pattern))

    def glob(self, pattern: Any) -> 'BinaryExpr':
        return self.binary(SqliteBinOper.GLOB, pattern)

    # ---------- Appartenance ----------

    def is_in(self, values: Iterable[Any]) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.IN, TupleExpr([into_expr(v) for v in values]))

    def is_not_in(self, values: Iterable[Any]) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.NOT_IN, TupleExpr([into_expr(v) for v in values]))

    def in_tuples(self, rows: Iterable[Iterable[Any]]) -> 'BinaryExpr':
        """`(a, b) IN ((1, 2), (3, 4))`."""
        return BinaryExpr(self, BinOper.IN,
                          TupleExpr([Expr.tuple(row) for row in rows]))

    def in_subquery(self, query: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.IN, SubQueryExpr(None, query))

    def not_in_subquery(self, query: Any) -> 'BinaryExpr':
        return BinaryExpr(self, BinOper.NOT_IN, SubQueryExpr(None, query))

    # ---------- Arithmétique ----------

    def add(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.ADD, value)

    def sub(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.SUB, value)

    def mul(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.MUL, value)

    def div(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.DIV, value)

    def mod_(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.MOD, value)

    def left_shift(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.LSHIFT, value)

    def right_shift(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.RSHIFT, value)

    def bit_and(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.BIT_AND, value)

    def bit_or(self, value: Any) -> 'BinaryExpr':
        return self.binary(BinOper.BIT_OR, value)

    # ---------- Logique ----------

    def and_(self, other: Any) -> 'BinaryExpr':
        return self.binary(BinOper.AND, other)

    def or_(self, other: Any) -> 'BinaryExpr':
        return self.binary(BinOper.OR, other)

    def not_(self) -> 'UnaryExpr':
        return UnaryExpr(UnOper.NOT, self)

    # ---------- PostgreSQL ----------

    def matches(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.MATCHES, value)

    def contains(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.CONTAINS, value)

    def contained(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.CONTAINED, value)

    def concat(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.CONCATENATE, value)

    def get_json_field(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.GET_JSON_FIELD, value)

    def cast_json_field(self, value: Any) -> 'BinaryExpr':
        return self.binary(PgBinOper.CAST_JSON_FIELD, value)

    # ---------- Fonctions ----------

    def max(self) -> 'FunctionCall':
        return FunctionCall(Function.MAX, [self])

    def min(self) -> 'FunctionCall':
        return FunctionCall(Function.MIN, [self])

    def sum(self) -> 'FunctionCall':
        return FunctionCall(Function.SUM, [self])

    def avg(self) -> 'FunctionCall':
        return FunctionCall(Function.AVG, [self])

    def abs(self) -> 'FunctionCall':
        return FunctionCall(Function.ABS, [self])

    def count(self) -> 'FunctionCall':
        return FunctionCall(Function.COUNT, [self])

    def count_distinct(self) -> 'FunctionCall':
        return FunctionCall(Function.COUNT, [self], [FuncArgMod(distinct=True)])

    def if_null(self, value: Any) -> 'FunctionCall':
        return FunctionCall(Function.IF_NULL, [self, into_expr(value)])

    def cast_as(self, type_name: Any) -> 'FunctionCall':
        """`CAST(expr AS type)`; voir cast_as()."""
        return cast_as(self, type_name)

    def as_enum(self, type_name: Any) -> 'AsEnumExpr':
        """Annotation de type énuméré (rendue en CAST sous PostgreSQL)."""
        return AsEnumExpr(into_iden(type_name), self)


@dataclass
class ColumnExpr(Expr):
    """Colonne (ou astérisque)."""
    col: ColumnRef


@dataclass
class ValueExpr(Expr):
    """Valeur paramétrée."""
    val: Value


@dataclass
class ConstantExpr(Expr):
    """Littéral rendu en ligne, jamais paramétré."""
    val: Value


@dataclass
class TupleExpr(Expr):
    """Tuple d'expressions: `(e1, e2, ...)`."""
    exprs: List[Expr] = field(default_factory=list)


@dataclass
class ValuesExpr(Expr):
    """Liste de valeurs paramétrées: `(v1, v2, ...)`."""
    values: List[Value] = field(default_factory=list)


@dataclass
class UnaryExpr(Expr):
    op: UnOper
    expr: Expr


@dataclass
class BinaryExpr(Expr):
    left: Expr
    op: Any
    right: Expr


@dataclass
class SubQueryExpr(Expr):
    """Sous-requête, éventuellement préfixée par EXISTS/ANY/SOME/ALL."""
    op: Optional[SubQueryOper]
    query: Any


@dataclass
class KeywordExpr(Expr):
    keyword: Union[Keyword, CustomKeyword]


@dataclass
class CustomExpr(Expr):
    """Fragment SQL brut."""
    sql: str


@dataclass
class CustomWithExpr(Expr):
    """Fragment SQL avec placeholders substitués par des expressions."""
    sql: str
    exprs: List[Expr] = field(default_factory=list)


@dataclass
class AsEnumExpr(Expr):
    type_name: Iden
    expr: Expr


@dataclass
class TypeNameExpr(Expr):
    """Nom de type, cible d'un CAST."""
    type_ref: TypeRef


# ============== Fonctions ==============

class Function(Enum):
    """Fonctions SQL connues; le nom rendu dépend du dialecte."""
    MAX = "MAX"
    MIN = "MIN"
    SUM = "SUM"
    AVG = "AVG"
    ABS = "ABS"
    COUNT = "COUNT"
    IF_NULL = "IFNULL"
    GREATEST = "GREATEST"
    LEAST = "LEAST"
    CHAR_LENGTH = "CHAR_LENGTH"
    CAST = "CAST"
    LOWER = "LOWER"
    UPPER = "UPPER"
    BIT_AND = "BIT_AND"
    BIT_OR = "BIT_OR"
    RANDOM = "RANDOM"
    ROUND = "ROUND"
    MD5 = "MD5"
    COALESCE = "COALESCE"


class PgFunction(Enum):
    """Fonctions propres à PostgreSQL."""
    TO_TSQUERY = "TO_TSQUERY"
    TO_TSVECTOR = "TO_TSVECTOR"
    PHRASETO_TSQUERY = "PHRASETO_TSQUERY"
    PLAINTO_TSQUERY = "PLAINTO_TSQUERY"
    WEBSEARCH_TO_TSQUERY = "WEBSEARCH_TO_TSQUERY"
    TS_RANK = "TS_RANK"
    TS_RANK_CD = "TS_RANK_CD"
    STARTS_WITH = "STARTS_WITH"
    GEN_RANDOM_UUID = "GEN_RANDOM_UUID"
    ANY = "ANY"
    SOME = "SOME"
    ALL = "ALL"
    DATE_TRUNC = "DATE_TRUNC"
    ARRAY_AGG = "ARRAY_AGG"


@dataclass(frozen=True)
class CustomFunction:
    """Fonction libre, nom rendu sans guillemets."""
    name: Iden


@dataclass(frozen=True)
class FuncArgMod:
    """Modificateur d'argument de fonction."""
    distinct: bool = False


@dataclass
class FunctionCall(Expr):
    """Appel de fonction: `NAME(arg1, arg2, ...)`."""
    func: Any
    args: List[Expr] = field(default_factory=list)
    mods: List[FuncArgMod] = field(default_factory=list)

    def arg(self, value: Any) -> 'FunctionCall':
        return self.arg_with(value, FuncArgMod())

    def arg_with(self, value: Any, mod: FuncArgMod) -> 'FunctionCall':
        while len(self.mods) < len(self.args):
            self.mods.append(FuncArgMod())
        self.args.append(into_expr(value))
        self.mods.append(mod)
        return self

    def args_(self, values: Iterable[Any]) -> 'FunctionCall':
        for value in values:
            self.arg(value)
        return self

    def mod_at(self, index: int) -> FuncArgMod:
        if index < len(self.mods):
            return self.mods[index]
        return FuncArgMod()


def cast_as(expr: Any, type_name: Any) -> FunctionCall:
    """
    `CAST(expr AS type)`.

    Un nom simple est rendu tel quel (`text`, `int4[]`); un type qualifié,
    tuple `(schema, type)` ou TypeRef, est rendu cité.
    """
    if isinstance(type_name, (tuple, TypeRef)):
        target = TypeNameExpr(into_type_ref(type_name))
    else:
        target = CustomExpr(into_iden(type_name).to_string())
    return FunctionCall(Function.CAST, [BinaryExpr(into_expr(expr), BinOper.AS, target)])


# ============== Conversions ==============

@dataclass
class LikeExpr:
    """Motif LIKE avec caractère d'échappement optionnel."""
    pattern: str
    escape_char: Optional[str] = None

    @classmethod
    def new(cls, pattern: str) -> 'LikeExpr':
        return cls(pattern)

    def escape(self, char: str) -> 'LikeExpr':
        return LikeExpr(self.pattern, char)


def _like_operand(pattern: Any) -> Expr:
    if isinstance(pattern, LikeExpr):
        value = ValueExpr(Value.from_python(pattern.pattern))
        if pattern.escape_char is None:
            return value
        return BinaryExpr(value, BinOper.ESCAPE, ConstantExpr(Value.char(pattern.escape_char)))
    return into_expr(pattern)


def into_expr(value: Any) -> Expr:
    """
    Convertit un opérande en expression.

    Les expressions sont retournées telles quelles; les conditions et les
    requêtes SELECT passent par leur méthode to_expr(); les mots-clés
    deviennent des KeywordExpr; tout le reste devient une valeur paramétrée.
    """
    if isinstance(value, Expr):
        return value
    if isinstance(value, Value):
        return ValueExpr(value)
    if isinstance(value, (Keyword, CustomKeyword)):
        return KeywordExpr(value)
    to_expr = getattr(value, 'to_expr', None)
    if to_expr is not None and callable(to_expr):
        return to_expr()
    return ValueExpr(Value.from_python(value))
