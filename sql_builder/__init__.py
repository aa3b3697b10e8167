"""
SQL Builder - Un constructeur de requêtes SQL dynamiques multi-dialectes.

Ce module fournit:
- Query: Constructeurs SELECT, INSERT, UPDATE, DELETE et WITH
- Expr / Func / Cond: Expressions, fonctions et conditions composables
- Dialectes: Rendu MySQL, PostgreSQL et SQLite (placeholders, quoting, échappement)
- Audit: Tables lues et écrites par une requête
- Prepare: Réinjection des valeurs dans un SQL paramétré (débogage)
- Export JSON: Conversion d'une requête construite en JSON

Usage:
    from sql_builder import Query, Expr, Cond, Asterisk

    query = (Query.select()
        .column("character")
        .from_("character")
        .and_where(Expr.col("size_w").is_in([3, 4]))
        .and_where(Expr.col("character").like("A%")))

    # Requête paramétrée
    sql, values = query.build("postgres")
    # SELECT "character" FROM "character" WHERE "size_w" IN ($1, $2) AND "character" LIKE $3

    # Valeurs en ligne (débogage)
    query.to_string("mysql")
    # SELECT `character` FROM `character` WHERE `size_w` IN (3, 4) AND `character` LIKE 'A%'

    # Tables accédées
    query.audit().selected_tables()  # ['character']
"""

from .errors import (
    SQLBuilderError, ColValNumMismatch, UnsupportedFeatureError, ConditionMixError,
    AuditError, AuditErrorKind,
)
from .options import BuildOptions, set_prefer_more_parentheses, reset_options
from .idens import Iden, Alias, Asterisk, ColumnRef, TableName, TypeRef, Keyword
from .values import Value, Values, ValueType
from .ast_nodes import (
    Expr, BinOper, UnOper, PgBinOper, SqliteBinOper, SubQueryOper, LikeExpr,
    Function, PgFunction, FunctionCall, FuncArgMod,
)
from .condition import Condition, Cond, ConditionHolder, CaseStatement, all_, any_
from .func import Func, PgFunc, PgDateTruncUnit
from .statements import Order, NullOrdering, Returning, JoinType, LockType, LockBehavior, IndexHintScope
from .select import SelectStatement, UnionType
from .insert import InsertStatement
from .update import UpdateStatement
from .delete import DeleteStatement
from .on_conflict import OnConflict
from .window import WindowStatement, Frame, FrameType
from .with_clause import WithClause, WithQuery, CommonTableExpression, Search, Cycle, SearchOrder
from .query import Query
from .writer import SqlWriter, SqlWriterValues, SqlWriterString
from .sql_generator import QueryBuilder
from .dialects import (
    SQLDialect, MysqlQueryBuilder, PostgresQueryBuilder, SqliteQueryBuilder,
    get_query_builder, parse_dialect,
)
from .tokenizer import SQLTokenizer, Token, TokenType, tokenize
from .prepare import inject_parameters
from .audit import AccessType, QueryAccessRequest, QueryAccessAudit
from .json_exporter import QueryExporter

__version__ = "0.1.0"
__all__ = [
    "Query",
    "Expr",
    "Func",
    "PgFunc",
    "Cond",
    "Condition",
    "Asterisk",
    "Alias",
    "Iden",
    "TypeRef",
    "Value",
    "Values",
    "Order",
    "NullOrdering",
    "OnConflict",
    "Returning",
    "WindowStatement",
    "Frame",
    "FrameType",
    "WithClause",
    "WithQuery",
    "CommonTableExpression",
    "MysqlQueryBuilder",
    "PostgresQueryBuilder",
    "SqliteQueryBuilder",
    "SQLDialect",
    "get_query_builder",
    "BuildOptions",
    "set_prefer_more_parentheses",
    "SQLTokenizer",
    "tokenize",
    "inject_parameters",
    "QueryAccessAudit",
    "AccessType",
    "QueryExporter",
    "SQLBuilderError",
    "ColValNumMismatch",
    "UnsupportedFeatureError",
    "ConditionMixError",
    "AuditError",
]
