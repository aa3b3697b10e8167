"""
Tests des valeurs typées et de leur rendu en ligne.
"""

import datetime
import uuid
from decimal import Decimal
from enum import Enum

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder.values import Value, Values, ValueType, into_value
from sql_builder.dialects import MysqlQueryBuilder, PostgresQueryBuilder, SqliteQueryBuilder
from sql_builder.errors import UnsupportedFeatureError


class FontSize(Enum):
    SMALL = "small"
    LARGE = "large"


mysql = MysqlQueryBuilder()
postgres = PostgresQueryBuilder()
sqlite = SqliteQueryBuilder()


# ============================================================
# SECTION 1: INFÉRENCE DES TYPES
# ============================================================

class TestFromPython:
    """Tests de Value.from_python."""

    def test_none(self):
        value = Value.from_python(None)
        assert value.is_null

    def test_bool_before_int(self):
        assert Value.from_python(True).type == ValueType.BOOL

    def test_int_sizes(self):
        assert Value.from_python(1).type == ValueType.INT
        assert Value.from_python(2 ** 40).type == ValueType.BIG_INT
        assert Value.from_python(2 ** 63).type == ValueType.BIG_UNSIGNED

    def test_int_overflow(self):
        with pytest.raises(ValueError):
            Value.from_python(2 ** 64)

    def test_float_string_bytes(self):
        assert Value.from_python(1.5).type == ValueType.DOUBLE
        assert Value.from_python("a").type == ValueType.STRING
        assert Value.from_python(b"\x01").type == ValueType.BYTES

    def test_datetimes(self):
        assert Value.from_python(datetime.date(2020, 1, 2)).type == ValueType.DATE
        assert Value.from_python(datetime.datetime(2020, 1, 2)).type == ValueType.DATETIME
        aware = datetime.datetime(2020, 1, 2, tzinfo=datetime.timezone.utc)
        assert Value.from_python(aware).type == ValueType.DATETIME_TZ
        assert Value.from_python(datetime.time(3, 4)).type == ValueType.TIME

    def test_decimal_uuid(self):
        assert Value.from_python(Decimal("1.5")).type == ValueType.DECIMAL
        assert Value.from_python(uuid.uuid4()).type == ValueType.UUID

    def test_enum(self):
        value = Value.from_python(FontSize.SMALL)
        assert value.type == ValueType.ENUM
        assert value.value == "small"
        assert value.type_name == "fontsize"

    def test_dict_is_json(self):
        assert Value.from_python({"a": 1}).type == ValueType.JSON

    def test_list_is_array(self):
        value = Value.from_python([1, 2])
        assert value.type == ValueType.ARRAY
        assert value.item_type == ValueType.INT

    def test_unsupported_object(self):
        with pytest.raises(TypeError):
            Value.from_python(object())

    def test_value_passthrough(self):
        value = Value.char("x")
        assert into_value(value) is value

    def test_char_single_character(self):
        with pytest.raises(ValueError):
            Value.char("ab")


# ============================================================
# SECTION 2: ÉGALITÉ ET LISTES DE VALEURS
# ============================================================

class TestEquality:
    """Tests de l'égalité des valeurs."""

    def test_equal_to_payload(self):
        assert Value.from_python(1) == 1
        assert Value.from_python("A") == "A"

    def test_hash_matches_payload(self):
        assert hash(Value.from_python(1)) == hash(1)
        assert 1 in {Value.from_python(1)}
        assert Value.from_python("A") in {"A"}
        assert {Value(ValueType.INT, 1): "x"}[1] == "x"

    def test_type_matters_between_values(self):
        assert Value(ValueType.INT, 1) != Value(ValueType.BIG_INT, 1)

    def test_values_list(self):
        values = Values([Value.from_python(1), Value.from_python("x")])
        assert values == [1, "x"]
        assert values.as_params() == [1, "x"]

    def test_array_as_python(self):
        assert Value.from_python([1, 2]).as_python() == [1, 2]


# ============================================================
# SECTION 3: RENDU EN LIGNE
# ============================================================

class TestInlineRendering:
    """Tests de value_to_string, commun à tous les dialectes."""

    def test_null(self):
        assert mysql.value_to_string(Value.null(ValueType.INT)) == "NULL"

    def test_bool(self):
        assert sqlite.value_to_string(Value.from_python(True)) == "TRUE"
        assert sqlite.value_to_string(Value.from_python(False)) == "FALSE"

    def test_numbers(self):
        assert postgres.value_to_string(Value.from_python(42)) == "42"
        assert postgres.value_to_string(Value.from_python(1.0)) == "1"
        assert postgres.value_to_string(Value.from_python(0.5)) == "0.5"
        assert postgres.value_to_string(Value.from_python(Decimal("1.50"))) == "1.50"

    def test_date(self):
        value = Value.from_python(datetime.date(2020, 1, 2))
        assert mysql.value_to_string(value) == "'2020-01-02'"

    def test_datetime_with_offset(self):
        moment = datetime.datetime(2020, 1, 2, 3, 4, 5,
                                   tzinfo=datetime.timezone(datetime.timedelta(hours=2)))
        assert postgres.value_to_string(Value.from_python(moment)) == \
            "'2020-01-02 03:04:05.000000 +02:00'"

    def test_json(self):
        assert sqlite.value_to_string(Value.json({"a": 1})) == "'{\"a\":1}'"

    def test_vector(self):
        assert postgres.value_to_string(Value.vector([1, 2.5])) == "'[1,2.5]'"

    def test_enum_is_quoted(self):
        assert mysql.value_to_string(Value.from_python(FontSize.LARGE)) == "'large'"


class TestStringEscaping:
    """Tests de l'échappement des chaînes par dialecte."""

    def test_mysql(self):
        value = Value.from_python("a'b\\c\n")
        assert mysql.value_to_string(value) == "'a\\'b\\\\c\\n'"

    def test_postgres_quote(self):
        assert postgres.value_to_string(Value.from_python("it's")) == "'it''s'"

    def test_postgres_backslash_prefix(self):
        assert postgres.value_to_string(Value.from_python("a\\b")) == "E'a\\\\b'"

    def test_sqlite_backslash_literal(self):
        assert sqlite.value_to_string(Value.from_python("a\\b'")) == "'a\\b'''"


class TestBytesAndArrays:
    """Tests des octets et tableaux."""

    def test_bytes_mysql(self):
        assert mysql.value_to_string(Value.from_python(b"\x01\xab")) == "x'01AB'"

    def test_bytes_postgres(self):
        assert postgres.value_to_string(Value.from_python(b"\x01\xab")) == "'\\x01ab'"

    def test_array_postgres(self):
        assert postgres.value_to_string(Value.from_python([1, 2, 3])) == "ARRAY[1,2,3]"

    def test_array_of_strings_postgres(self):
        assert postgres.value_to_string(Value.from_python(["a", "b"])) == "ARRAY['a','b']"

    def test_empty_array_postgres(self):
        assert postgres.value_to_string(Value.array(ValueType.INT, [])) == "'{}'"

    def test_nested_array_postgres(self):
        assert postgres.value_to_string(Value.from_python([[1], [2]])) == "ARRAY[ARRAY[1],ARRAY[2]]"

    def test_array_unsupported_mysql(self):
        with pytest.raises(UnsupportedFeatureError):
            mysql.value_to_string(Value.from_python([1, 2]))
