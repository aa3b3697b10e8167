"""
Fabriques d'appels de fonctions SQL.

    Func.max(Expr.col("size_w"))          # MAX("size_w")
    Func.if_null(Expr.col("a"), 0)        # IFNULL / COALESCE selon le dialecte
    PgFunc.to_tsquery("a & b", None)      # TO_TSQUERY($1)
"""

from enum import Enum
from typing import Any, Iterable, Optional

from .ast_nodes import (
    CustomFunction, FuncArgMod, Function, FunctionCall, PgFunction,
    cast_as, into_expr,
)
from .idens import into_iden


def _call(func: Any, *args: Any) -> FunctionCall:
    return FunctionCall(func, [into_expr(arg) for arg in args])


class Func:
    """Fonctions communes à tous les dialectes."""

    @staticmethod
    def cust(name: Any) -> FunctionCall:
        """Fonction libre; les arguments s'ajoutent avec .arg()/.args_()."""
        return FunctionCall(CustomFunction(into_iden(name)))

    @staticmethod
    def max(expr: Any) -> FunctionCall:
        return _call(Function.MAX, expr)

    @staticmethod
    def min(expr: Any) -> FunctionCall:
        return _call(Function.MIN, expr)

    @staticmethod
    def sum(expr: Any) -> FunctionCall:
        return _call(Function.SUM, expr)

    @staticmethod
    def avg(expr: Any) -> FunctionCall:
        return _call(Function.AVG, expr)

    @staticmethod
    def abs(expr: Any) -> FunctionCall:
        return _call(Function.ABS, expr)

    @staticmethod
    def count(expr: Any) -> FunctionCall:
        return _call(Function.COUNT, expr)

    @staticmethod
    def count_distinct(expr: Any) -> FunctionCall:
        return FunctionCall(Function.COUNT, [into_expr(expr)], [FuncArgMod(distinct=True)])

    @staticmethod
    def char_length(expr: Any) -> FunctionCall:
        return _call(Function.CHAR_LENGTH, expr)

    @staticmethod
    def greatest(exprs: Iterable[Any]) -> FunctionCall:
        return _call(Function.GREATEST, *exprs)

    @staticmethod
    def least(exprs: Iterable[Any]) -> FunctionCall:
        return _call(Function.LEAST, *exprs)

    @staticmethod
    def if_null(expr: Any, fallback: Any) -> FunctionCall:
        return _call(Function.IF_NULL, expr, fallback)

    @staticmethod
    def cast_as(expr: Any, type_name: Any) -> FunctionCall:
        return cast_as(expr, type_name)

    @staticmethod
    def coalesce(exprs: Iterable[Any]) -> FunctionCall:
        return _call(Function.COALESCE, *exprs)

    @staticmethod
    def lower(expr: Any) -> FunctionCall:
        return _call(Function.LOWER, expr)

    @staticmethod
    def upper(expr: Any) -> FunctionCall:
        return _call(Function.UPPER, expr)

    @staticmethod
    def bit_and(expr: Any) -> FunctionCall:
        return _call(Function.BIT_AND, expr)

    @staticmethod
    def bit_or(expr: Any) -> FunctionCall:
        return _call(Function.BIT_OR, expr)

    @staticmethod
    def round(expr: Any) -> FunctionCall:
        return _call(Function.ROUND, expr)

    @staticmethod
    def round_with_precision(expr: Any, precision: Any) -> FunctionCall:
        return _call(Function.ROUND, expr, precision)

    @staticmethod
    def random() -> FunctionCall:
        """RAND() sous MySQL, RANDOM() ailleurs."""
        return FunctionCall(Function.RANDOM)

    @staticmethod
    def md5(expr: Any) -> FunctionCall:
        return _call(Function.MD5, expr)


class PgDateTruncUnit(Enum):
    """Unités acceptées par DATE_TRUNC."""
    MICROSECONDS = "microseconds"
    MILLISECONDS = "milliseconds"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"
    DECADE = "decade"
    CENTURY = "century"
    MILLENNIUM = "millennium"


class PgFunc:
    """Fonctions propres à PostgreSQL (refusées par les autres dialectes)."""

    @staticmethod
    def _with_regconfig(func: PgFunction, expr: Any, regconfig: Optional[int]) -> FunctionCall:
        if regconfig is None:
            return _call(func, expr)
        return _call(func, regconfig, expr)

    @staticmethod
    def to_tsquery(expr: Any, regconfig: Optional[int] = None) -> FunctionCall:
        return PgFunc._with_regconfig(PgFunction.TO_TSQUERY, expr, regconfig)

    @staticmethod
    def to_tsvector(expr: Any, regconfig: Optional[int] = None) -> FunctionCall:
        return PgFunc._with_regconfig(PgFunction.TO_TSVECTOR, expr, regconfig)

    @staticmethod
    def phraseto_tsquery(expr: Any, regconfig: Optional[int] = None) -> FunctionCall:
        return PgFunc._with_regconfig(PgFunction.PHRASETO_TSQUERY, expr, regconfig)

    @staticmethod
    def plainto_tsquery(expr: Any, regconfig: Optional[int] = None) -> FunctionCall:
        return PgFunc._with_regconfig(PgFunction.PLAINTO_TSQUERY, expr, regconfig)

    @staticmethod
    def websearch_to_tsquery(expr: Any, regconfig: Optional[int] = None) -> FunctionCall:
        return PgFunc._with_regconfig(PgFunction.WEBSEARCH_TO_TSQUERY, expr, regconfig)

    @staticmethod
    def ts_rank(vector: Any, query: Any) -> FunctionCall:
        return _call(PgFunction.TS_RANK, vector, query)

    @staticmethod
    def ts_rank_cd(vector: Any, query: Any) -> FunctionCall:
        return _call(PgFunction.TS_RANK_CD, vector, query)

    @staticmethod
    def starts_with(text: Any, prefix: Any) -> FunctionCall:
        return _call(PgFunction.STARTS_WITH, text, prefix)

    @staticmethod
    def gen_random_uuid() -> FunctionCall:
        return FunctionCall(PgFunction.GEN_RANDOM_UUID)

    @staticmethod
    def any(expr: Any) -> FunctionCall:
        return _call(PgFunction.ANY, expr)

    @staticmethod
    def some(expr: Any) -> FunctionCall:
        return _call(PgFunction.SOME, expr)

    @staticmethod
    def all(expr: Any) -> FunctionCall:
        return _call(PgFunction.ALL, expr)

    @staticmethod
    def date_trunc(unit: PgDateTruncUnit, expr: Any) -> FunctionCall:
        return _call(PgFunction.DATE_TRUNC, PgDateTruncUnit(unit).value, expr)

    @staticmethod
    def array_agg(expr: Any) -> FunctionCall:
        return _call(PgFunction.ARRAY_AGG, expr)

    @staticmethod
    def array_agg_distinct(expr: Any) -> FunctionCall:
        return FunctionCall(PgFunction.ARRAY_AGG, [into_expr(expr)], [FuncArgMod(distinct=True)])
