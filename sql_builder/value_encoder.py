"""
Encodage des valeurs en littéraux SQL.

Le mixin ValueEncoder rend une Value en ligne (forme de débogage,
constantes, injection de paramètres). Les dialectes ne redéfinissent que
les règles qui divergent: échappement des chaînes, tableaux.
"""

import datetime
import json

from .errors import UnsupportedFeatureError
from .values import INTEGER_TYPES, Value, ValueType


def format_float(value: float) -> str:
    """Flottant sans `.0` superflu: 1.0 -> `1`, 0.5 -> `0.5`."""
    if value != value or value in (float('inf'), float('-inf')):
        return str(value)
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def format_offset(moment: datetime.datetime) -> str:
    """Décalage horaire au format ` ±HH:MM`."""
    offset = moment.utcoffset()
    total_minutes = int(offset.total_seconds() // 60)
    sign = '+' if total_minutes >= 0 else '-'
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


class ValueEncoder:
    """Rendu en ligne des valeurs, partagé par tous les dialectes."""

    # Nom du dialecte, utilisé dans les messages d'erreur
    dialect_name = "generic"

    def value_to_string(self, value: Value) -> str:
        """
        Rend une valeur en littéral SQL.

        Args:
            value: Valeur typée

        Returns:
            Le littéral, `NULL` si la valeur est nulle

        Raises:
            UnsupportedFeatureError: si le dialecte ne sait pas rendre la catégorie
        """
        if value.value is None:
            return "NULL"
        value_type = value.type
        payload = value.value

        if value_type == ValueType.BOOL:
            return "TRUE" if payload else "FALSE"
        if value_type in INTEGER_TYPES:
            return str(int(payload))
        if value_type in (ValueType.FLOAT, ValueType.DOUBLE):
            return format_float(float(payload))
        if value_type in (ValueType.STRING, ValueType.CHAR, ValueType.ENUM):
            return self.quote_string(str(payload))
        if value_type == ValueType.BYTES:
            return f"x'{bytes(payload).hex().upper()}'"
        if value_type == ValueType.JSON:
            return self.quote_string(json.dumps(payload, separators=(',', ':'),
                                                ensure_ascii=False))
        if value_type == ValueType.DATE:
            return f"'{payload.strftime('%Y-%m-%d')}'"
        if value_type == ValueType.TIME:
            return f"'{payload.strftime('%H:%M:%S.%f')}'"
        if value_type == ValueType.DATETIME:
            return f"'{payload.strftime('%Y-%m-%d %H:%M:%S.%f')}'"
        if value_type == ValueType.DATETIME_TZ:
            return f"'{payload.strftime('%Y-%m-%d %H:%M:%S.%f')} {format_offset(payload)}'"
        if value_type == ValueType.DECIMAL:
            return str(payload)
        if value_type in (ValueType.UUID, ValueType.IP_NETWORK, ValueType.MAC_ADDRESS):
            return self.quote_string(str(payload))
        if value_type == ValueType.VECTOR:
            return "'[" + ','.join(format_float(float(v)) for v in payload) + "]'"
        if value_type == ValueType.ARRAY:
            return self.array_to_string(value)
        raise UnsupportedFeatureError(f"Inline rendering of {value_type.name}", self.dialect_name)

    # ============== Chaînes ==============

    def escape_string(self, text: str) -> str:
        """Échappement par défaut: apostrophe doublée."""
        return text.replace("'", "''")

    def quote_string(self, text: str) -> str:
        return f"'{self.escape_string(text)}'"

    # ============== Tableaux ==============

    def array_to_string(self, value: Value) -> str:
        raise UnsupportedFeatureError("Array values", self.dialect_name)
