"""Point d'entrée des constructeurs de requêtes."""

from .delete import DeleteStatement
from .insert import InsertStatement
from .select import SelectStatement
from .statements import Returning
from .update import UpdateStatement
from .with_clause import WithClause


class Query:
    """
    Fabrique des requêtes.

        Query.select().column("id").from_("glyph")
        Query.insert().into_table("glyph").columns(["aspect"])
    """

    @staticmethod
    def select() -> SelectStatement:
        return SelectStatement()

    @staticmethod
    def insert() -> InsertStatement:
        return InsertStatement()

    @staticmethod
    def update() -> UpdateStatement:
        return UpdateStatement()

    @staticmethod
    def delete() -> DeleteStatement:
        return DeleteStatement()

    @staticmethod
    def with_() -> WithClause:
        return WithClause()

    @staticmethod
    def returning() -> Returning:
        return Returning()
