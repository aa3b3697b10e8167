"""
Exporteur JSON des requêtes construites.

Convertit le couple (sql, valeurs) retourné par build(), ou le résultat
d'un audit, en JSON.
"""

import json
from typing import Any, Dict, Iterable, Optional

from .audit import QueryAccessAudit
from .value_encoder import ValueEncoder
from .values import Value, ValueType

_PLAIN_TYPES = frozenset({
    ValueType.BOOL, ValueType.TINY_INT, ValueType.SMALL_INT, ValueType.INT,
    ValueType.BIG_INT, ValueType.TINY_UNSIGNED, ValueType.SMALL_UNSIGNED,
    ValueType.UNSIGNED, ValueType.BIG_UNSIGNED, ValueType.FLOAT, ValueType.DOUBLE,
    ValueType.STRING, ValueType.CHAR, ValueType.ENUM, ValueType.JSON,
})


def value_to_json(value: Value, encoder: Optional[ValueEncoder] = None) -> Any:
    """
    Convertit une valeur en objet sérialisable.

    Les types JSON natifs sont gardés tels quels; les octets deviennent
    de l'hexadécimal majuscule; les autres (dates, Decimal, UUID...) leur
    littéral SQL sans apostrophes.
    """
    encoder = encoder or ValueEncoder()
    if value.value is None:
        return None
    if value.type in _PLAIN_TYPES:
        return value.value
    if value.type == ValueType.BYTES:
        return bytes(value.value).hex().upper()
    if value.type == ValueType.ARRAY:
        return [value_to_json(item, encoder) for item in value.value]
    if value.type == ValueType.VECTOR:
        return [float(item) for item in value.value]
    text = encoder.value_to_string(value)
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        text = text[1:-1]
    return text


class QueryExporter:
    """Exporte une requête construite ou un audit vers JSON."""

    def __init__(self, indent: int = 2, compact: bool = False):
        """
        Initialise l'exporteur.

        Args:
            indent: Indentation pour le JSON
            compact: Mode compact (sans indentation)
        """
        self.indent = None if compact else indent
        self.encoder = ValueEncoder()

    def export(self, sql: str, values: Iterable[Any], dialect: Optional[str] = None) -> str:
        """
        Exporte une requête paramétrée en JSON.

        Args:
            sql: SQL rendu
            values: Valeurs collectées (Value ou objets Python)
            dialect: Nom du dialecte, inclus s'il est fourni

        Returns:
            Chaîne JSON
        """
        data = self.export_to_dict(sql, values, dialect)
        return json.dumps(data, indent=self.indent, ensure_ascii=False)

    def export_to_dict(self, sql: str, values: Iterable[Any],
                       dialect: Optional[str] = None) -> Dict[str, Any]:
        output = {
            "sql": sql,
            "values": [value_to_json(Value.from_python(v), self.encoder) for v in values],
        }
        if dialect is not None:
            output["dialect"] = dialect
        return output

    def export_to_file(self, sql: str, values: Iterable[Any], filepath: str,
                       dialect: Optional[str] = None) -> None:
        data = self.export_to_dict(sql, values, dialect)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=self.indent, ensure_ascii=False)

    def export_audit(self, audit: QueryAccessAudit) -> str:
        """Exporte le résultat d'un audit en JSON."""
        return json.dumps(self.audit_to_dict(audit), indent=self.indent, ensure_ascii=False)

    def audit_to_dict(self, audit: QueryAccessAudit) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "access_type": request.access_type.value,
                    "schema": request.schema,
                    "table": request.table,
                }
                for request in audit.requests
            ]
        }


def to_json(sql: str, values: Iterable[Any], dialect: Optional[str] = None,
            indent: int = 2, compact: bool = False) -> str:
    """Fonction utilitaire pour convertir une requête construite en JSON."""
    return QueryExporter(indent=indent, compact=compact).export(sql, values, dialect)
