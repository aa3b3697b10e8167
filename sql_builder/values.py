"""
Modèle des valeurs SQL.

Une valeur porte une catégorie (ValueType) et une charge utile Python.
La charge utile None représente le NULL de la catégorie. Les tableaux
contiennent des Value du type d'élément déclaré, ce qui permet le rendu
récursif des tableaux imbriqués.
"""

import datetime
import ipaddress
import uuid
from decimal import Decimal
from enum import Enum, auto
from typing import Any, Iterable, List, Optional


class ValueType(Enum):
    """Catégories de valeurs reconnues."""
    BOOL = auto()
    TINY_INT = auto()
    SMALL_INT = auto()
    INT = auto()
    BIG_INT = auto()
    TINY_UNSIGNED = auto()
    SMALL_UNSIGNED = auto()
    UNSIGNED = auto()
    BIG_UNSIGNED = auto()
    FLOAT = auto()
    DOUBLE = auto()
    STRING = auto()
    CHAR = auto()
    BYTES = auto()
    ENUM = auto()
    JSON = auto()
    DATE = auto()
    TIME = auto()
    DATETIME = auto()
    DATETIME_TZ = auto()
    DECIMAL = auto()
    UUID = auto()
    IP_NETWORK = auto()
    MAC_ADDRESS = auto()
    ARRAY = auto()
    VECTOR = auto()


INTEGER_TYPES = frozenset({
    ValueType.TINY_INT, ValueType.SMALL_INT, ValueType.INT, ValueType.BIG_INT,
    ValueType.TINY_UNSIGNED, ValueType.SMALL_UNSIGNED, ValueType.UNSIGNED,
    ValueType.BIG_UNSIGNED,
})

_INT32_MIN, _INT32_MAX = -(2 ** 31), 2 ** 31 - 1
_INT64_MIN, _INT64_MAX = -(2 ** 63), 2 ** 63 - 1
_UINT64_MAX = 2 ** 64 - 1


class Value:
    """Valeur SQL typée."""

    __slots__ = ('type', 'value', 'item_type', 'type_name')

    def __init__(self, type: ValueType, value: Any = None,
                 item_type: Optional[ValueType] = None,
                 type_name: Optional[str] = None):
        self.type = type
        self.value = value
        self.item_type = item_type
        self.type_name = type_name

    # ============== Constructeurs ==============

    @classmethod
    def of(cls, value_type: ValueType, value: Any = None) -> 'Value':
        """Construit une valeur d'une catégorie explicite."""
        if value_type == ValueType.ARRAY:
            raise TypeError("Use Value.array() to build array values")
        if value_type == ValueType.BYTES and value is not None:
            value = bytes(value)
        return cls(value_type, value)

    @classmethod
    def null(cls, value_type: ValueType = ValueType.STRING) -> 'Value':
        """NULL typé."""
        return cls(value_type, None)

    @classmethod
    def char(cls, value: Optional[str]) -> 'Value':
        if value is not None and len(value) != 1:
            raise ValueError(f"CHAR value must be a single character, got {value!r}")
        return cls(ValueType.CHAR, value)

    @classmethod
    def enum(cls, type_name: str, variant: Optional[str]) -> 'Value':
        """Valeur d'un type énuméré SQL (le nom du type est conservé)."""
        return cls(ValueType.ENUM, variant, type_name=type_name)

    @classmethod
    def json(cls, value: Any) -> 'Value':
        """Document JSON (dict, liste, scalaire)."""
        return cls(ValueType.JSON, value)

    @classmethod
    def vector(cls, items: Optional[Iterable[float]]) -> 'Value':
        """Vecteur de flottants (pgvector)."""
        return cls(ValueType.VECTOR, None if items is None else [float(i) for i in items])

    @classmethod
    def array(cls, item_type: ValueType, items: Optional[Iterable[Any]]) -> 'Value':
        """
        Tableau homogène.

        Args:
            item_type: Catégorie des éléments
            items: Éléments (Value ou objets Python), None pour un tableau NULL

        Returns:
            La valeur tableau
        """
        if items is None:
            return cls(ValueType.ARRAY, None, item_type=item_type)
        converted = []
        for item in items:
            if isinstance(item, Value):
                converted.append(item)
            elif item_type == ValueType.ARRAY:
                converted.append(cls.from_python(item) if item is not None
                                 else cls(ValueType.ARRAY, None))
            else:
                converted.append(cls(item_type, item))
        return cls(ValueType.ARRAY, converted, item_type=item_type)

    @classmethod
    def from_python(cls, obj: Any) -> 'Value':
        """
        Déduit la catégorie d'un objet Python.

        Args:
            obj: Objet Python (ou Value, retourné tel quel)

        Returns:
            La valeur typée

        Raises:
            TypeError: si l'objet n'a pas d'équivalent SQL
            ValueError: si un entier dépasse 64 bits
        """
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls(ValueType.STRING, None)
        if isinstance(obj, bool):
            return cls(ValueType.BOOL, obj)
        if isinstance(obj, int):
            if _INT32_MIN <= obj <= _INT32_MAX:
                return cls(ValueType.INT, obj)
            if _INT64_MIN <= obj <= _INT64_MAX:
                return cls(ValueType.BIG_INT, obj)
            if 0 <= obj <= _UINT64_MAX:
                return cls(ValueType.BIG_UNSIGNED, obj)
            raise ValueError(f"Integer {obj} does not fit in 64 bits")
        if isinstance(obj, float):
            return cls(ValueType.DOUBLE, obj)
        if isinstance(obj, str):
            return cls(ValueType.STRING, obj)
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return cls(ValueType.BYTES, bytes(obj))
        if isinstance(obj, Decimal):
            return cls(ValueType.DECIMAL, obj)
        # datetime est une sous-classe de date
        if isinstance(obj, datetime.datetime):
            if obj.tzinfo is not None and obj.utcoffset() is not None:
                return cls(ValueType.DATETIME_TZ, obj)
            return cls(ValueType.DATETIME, obj)
        if isinstance(obj, datetime.date):
            return cls(ValueType.DATE, obj)
        if isinstance(obj, datetime.time):
            return cls(ValueType.TIME, obj)
        if isinstance(obj, uuid.UUID):
            return cls(ValueType.UUID, obj)
        if isinstance(obj, (ipaddress.IPv4Network, ipaddress.IPv6Network,
                            ipaddress.IPv4Interface, ipaddress.IPv6Interface,
                            ipaddress.IPv4Address, ipaddress.IPv6Address)):
            return cls(ValueType.IP_NETWORK, obj)
        if isinstance(obj, Enum):
            return cls(ValueType.ENUM, str(obj.value), type_name=type(obj).__name__.lower())
        if isinstance(obj, dict):
            return cls(ValueType.JSON, obj)
        if isinstance(obj, (list, tuple)):
            items = [cls.from_python(item) for item in obj]
            item_type = next((item.type for item in items if item.value is not None), None)
            if item_type is None:
                item_type = items[0].type if items else ValueType.STRING
            return cls(ValueType.ARRAY, items, item_type=item_type)
        raise TypeError(f"Cannot convert {obj!r} into a SQL value")

    # ============== Accès ==============

    @property
    def is_null(self) -> bool:
        return self.value is None

    def as_python(self) -> Any:
        """Retourne la charge utile Python (récursivement pour les tableaux)."""
        if self.type == ValueType.ARRAY and self.value is not None:
            return [item.as_python() for item in self.value]
        return self.value

    def __eq__(self, other):
        if isinstance(other, Value):
            return (self.type == other.type and self.value == other.value
                    and self.item_type == other.item_type
                    and self.type_name == other.type_name)
        return self.as_python() == other

    def __hash__(self):
        # cohérent avec __eq__: une Value est égale à sa charge utile nue
        payload = self.as_python()
        try:
            return hash(payload)
        except TypeError:
            return hash(repr(payload))


    def __repr__(self):
        if self.type == ValueType.ARRAY:
            return f"Value({self.type.name}[{self.item_type.name if self.item_type else '?'}], {self.as_python()!r})"
        return f"Value({self.type.name}, {self.value!r})"


class Values(list):
    """Valeurs collectées pendant la construction, dans l'ordre des placeholders."""

    def as_params(self) -> List[Any]:
        """Charges utiles Python, prêtes pour un curseur DB-API."""
        return [value.as_python() for value in self]

    def __repr__(self):
        return f"Values({list.__repr__(self)})"


def into_value(obj: Any) -> Value:
    """Raccourci pour Value.from_python."""
    return Value.from_python(obj)
