"""
Dialectes SQL supportés par le constructeur.

Ce module définit les dialectes cibles, leurs caractéristiques et les
moteurs de rendu qui en dérivent. Chaque moteur ne redéfinit que les
règles où le dialecte s'écarte du rendu commun (voir sql_generator.py).
"""

from enum import Enum
from typing import Any, Union

from .ast_nodes import AsEnumExpr, Function, PgBinOper, SqliteBinOper
from .errors import UnsupportedFeatureError
from .idens import Iden, Table, TableRef
from .on_conflict import OnConflict, OnConflictActionKind
from .sql_generator import DialectFeatures, QueryBuilder
from .statements import OrderExpr, OrderField, NullOrdering
from .values import Value, ValueType
from .writer import SqlWriter


class SQLDialect(Enum):
    """Dialectes SQL supportés."""
    MYSQL = "mysql"            # MySQL / MariaDB
    POSTGRESQL = "postgresql"  # PostgreSQL
    SQLITE = "sqlite"          # SQLite


def get_dialect_features(dialect: SQLDialect) -> DialectFeatures:
    """Retourne les caractéristiques d'un dialecte."""

    if dialect == SQLDialect.MYSQL:
        return DialectFeatures(
            name="MySQL",
            identifier_quote='`',
            supports_returning=False,
            supports_full_outer_join=False,
            supports_distinct_row=True,
            values_row_prefix='ROW',
            offset_only_limit=2 ** 64 - 1,
        )

    elif dialect == SQLDialect.POSTGRESQL:
        return DialectFeatures(
            name="PostgreSQL",
            placeholder='$',
            numbered_placeholders=True,
            extension_operators=PgBinOper,
            supports_replace=False,
            supports_pg_functions=True,
            supports_distinct_on=True,
            supports_cte_materialization=True,
            supports_cte_search_cycle=True,
        )

    elif dialect == SQLDialect.SQLITE:
        return DialectFeatures(
            name="SQLite",
            extension_operators=SqliteBinOper,
            supports_lock=False,
            parenthesized_unions=False,
            supports_subquery_quantifiers=False,
            offset_only_limit=-1,
        )

    raise ValueError(f"Unknown dialect: {dialect}")


# ============== MySQL ==============

_MYSQL_ESCAPES = {
    '\\': '\\\\',
    "'": "\\'",
    '"': '\\"',
    '\0': '\\0',
    '\x08': '\\b',
    '\t': '\\t',
    '\x1a': '\\z',
    '\n': '\\n',
    '\r': '\\r',
}


class MysqlQueryBuilder(QueryBuilder):
    """Rendu MySQL: identifiants entre backticks, ON DUPLICATE KEY, pas de RETURNING."""

    features = get_dialect_features(SQLDialect.MYSQL)

    def escape_string(self, text: str) -> str:
        return ''.join(_MYSQL_ESCAPES.get(char, char) for char in text)

    def function_name(self, func: Function) -> str:
        if func == Function.RANDOM:
            return "RAND"
        return func.value

    def prepare_index_hints(self, table_ref: TableRef, select, sql: SqlWriter) -> None:
        hints = [hint for hinted, hint in select.index_hints if hinted is table_ref]
        if not hints:
            return
        sql.write_str(" ")
        for i, hint in enumerate(hints):
            if i > 0:
                sql.write_str(" ")
            sql.write_str(f"{hint.type.value} INDEX {hint.scope.value}(")
            self.prepare_iden(hint.index, sql)
            sql.write_str(")")

    def prepare_order_expr(self, order_expr: OrderExpr, sql: SqlWriter) -> None:
        # MySQL ne connaît pas NULLS FIRST / LAST
        if order_expr.nulls is not None:
            self.prepare_expr(order_expr.expr, sql)
            if order_expr.nulls == NullOrdering.FIRST:
                sql.write_str(" IS NULL DESC, ")
            else:
                sql.write_str(" IS NULL ASC, ")
        if not isinstance(order_expr.order, OrderField):
            self.prepare_expr(order_expr.expr, sql)
        self.prepare_order(order_expr, sql)

    def prepare_update_join(self, update, sql: SqlWriter) -> None:
        # UPDATE ... FROM n'existe pas: la première table devient une jointure
        if not update.from_tables:
            return
        sql.write_str(" JOIN ")
        self.prepare_table_ref(update.from_tables[0], sql)
        self.prepare_condition(update.where_clause, "ON", sql)

    def prepare_update_column(self, update, column: Iden, sql: SqlWriter) -> None:
        table_ref = update.table_ref
        if update.from_tables and isinstance(table_ref, Table) and table_ref.alias is None:
            self.prepare_table_name(table_ref.name, sql)
            sql.write_str(".")
        self.prepare_iden(column, sql)

    def prepare_update_from(self, update, sql: SqlWriter) -> None:
        pass

    def prepare_update_condition(self, update, sql: SqlWriter) -> None:
        if not update.from_tables:
            self.prepare_condition(update.where_clause, "WHERE", sql)

    def prepare_on_conflict_keywords(self, sql: SqlWriter) -> None:
        sql.write_str(" ON DUPLICATE KEY")

    def prepare_on_conflict_target(self, on_conflict: OnConflict, sql: SqlWriter) -> None:
        pass

    def prepare_on_conflict_condition(self, condition, sql: SqlWriter) -> None:
        pass

    def prepare_on_conflict_action(self, on_conflict: OnConflict, sql: SqlWriter) -> None:
        action = on_conflict.action
        if action is not None and action.kind == OnConflictActionKind.DO_NOTHING:
            if not action.items:
                sql.write_str(" IGNORE")
                return
            # pk = pk: mise à jour sans effet
            self.prepare_on_conflict_do_update_keywords(sql)
            for i, column in enumerate(action.items):
                if i > 0:
                    sql.write_str(", ")
                self.prepare_iden(column, sql)
                sql.write_str(" = ")
                self.prepare_iden(column, sql)
            return
        super().prepare_on_conflict_action(on_conflict, sql)

    def prepare_on_conflict_do_update_keywords(self, sql: SqlWriter) -> None:
        sql.write_str(" UPDATE ")

    def prepare_on_conflict_excluded_value(self, column: Iden, sql: SqlWriter) -> None:
        sql.write_str("VALUES(")
        self.prepare_iden(column, sql)
        sql.write_str(")")


# ============== PostgreSQL ==============

class PostgresQueryBuilder(QueryBuilder):
    """Rendu PostgreSQL: placeholders numérotés, opérateurs et fonctions étendus."""

    features = get_dialect_features(SQLDialect.POSTGRESQL)

    def escape_string(self, text: str) -> str:
        return text.replace('\\', '\\\\').replace("'", "''")

    def quote_string(self, text: str) -> str:
        """Préfixe E dès que la chaîne contient une barre oblique inverse."""
        escaped = self.escape_string(text)
        if '\\' in text:
            return f"E'{escaped}'"
        return f"'{escaped}'"

    def value_to_string(self, value: Value) -> str:
        if value.type == ValueType.BYTES and value.value is not None:
            return f"'\\x{bytes(value.value).hex()}'"
        return super().value_to_string(value)

    def array_to_string(self, value: Value) -> str:
        """`ARRAY[e1,e2]`, `'{}'` pour un tableau vide."""
        if not value.value:
            return "'{}'"
        items = []
        for item in value.value:
            if isinstance(item, Value):
                items.append(self.value_to_string(item))
            else:
                items.append(self.value_to_string(Value(value.item_type, item)))
        return "ARRAY[" + ','.join(items) + "]"

    def function_name(self, func: Function) -> str:
        if func == Function.IF_NULL:
            return "COALESCE"
        return func.value

    def _prepare_AsEnumExpr(self, expr: AsEnumExpr, sql: SqlWriter) -> None:
        self.prepare_expr(self.cast_enum(expr), sql)


# ============== SQLite ==============

class SqliteQueryBuilder(QueryBuilder):
    """Rendu SQLite: pas de verrous, unions sans parenthèses, DEFAULT VALUES."""

    features = get_dialect_features(SQLDialect.SQLITE)

    _FUNCTION_NAMES = {
        Function.CHAR_LENGTH: "LENGTH",
        Function.GREATEST: "MAX",
        Function.LEAST: "MIN",
    }

    def function_name(self, func: Function) -> str:
        return self._FUNCTION_NAMES.get(func, func.value)

    def insert_default_values(self, num_rows: int, sql: SqlWriter) -> None:
        sql.write_str("DEFAULT VALUES")


# ============== Résolution ==============

_BUILDERS = {
    SQLDialect.MYSQL: MysqlQueryBuilder,
    SQLDialect.POSTGRESQL: PostgresQueryBuilder,
    SQLDialect.SQLITE: SqliteQueryBuilder,
}

_ALIASES = {
    "mysql": SQLDialect.MYSQL,
    "mariadb": SQLDialect.MYSQL,
    "postgres": SQLDialect.POSTGRESQL,
    "postgresql": SQLDialect.POSTGRESQL,
    "pg": SQLDialect.POSTGRESQL,
    "sqlite": SQLDialect.SQLITE,
    "sqlite3": SQLDialect.SQLITE,
}


def parse_dialect(name: str) -> SQLDialect:
    """
    Convertit un nom de dialecte en SQLDialect.

    Args:
        name: Nom du dialecte (insensible à la casse)

    Returns:
        Le dialecte correspondant

    Raises:
        ValueError: si le nom est inconnu
    """
    dialect = _ALIASES.get(name.strip().lower())
    if dialect is None:
        raise ValueError(f"Unknown dialect: {name}. Choose from: mysql, postgres, sqlite")
    return dialect


def get_query_builder(query_builder: Union[QueryBuilder, SQLDialect, str, Any]) -> QueryBuilder:
    """Retourne un moteur de rendu depuis une instance, un SQLDialect ou un nom."""
    if isinstance(query_builder, QueryBuilder):
        return query_builder
    if isinstance(query_builder, type) and issubclass(query_builder, QueryBuilder):
        return query_builder()
    if isinstance(query_builder, str):
        query_builder = parse_dialect(query_builder)
    if isinstance(query_builder, SQLDialect):
        return _BUILDERS[query_builder]()
    raise TypeError(f"Cannot use {query_builder!r} as a query builder")
