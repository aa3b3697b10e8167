"""
Tests exhaustifs pour le tokenizer de fragments SQL.
"""

import pytest
import sys
sys.path.insert(0, '..')

from sql_builder.tokenizer import SQLTokenizer, TokenType, Token, tokenize


# ============================================================
# SECTION 1: FAMILLES DE TOKENS
# ============================================================

class TestTokenFamilies:
    """Tests des quatre familles de tokens."""

    def test_tokenize_empty(self):
        assert tokenize("") == []

    def test_tokenize_select(self):
        tokens = tokenize("SELECT * FROM t")
        assert [t.type for t in tokens] == [
            TokenType.UNQUOTED, TokenType.SPACE, TokenType.PUNCTUATION,
            TokenType.SPACE, TokenType.UNQUOTED, TokenType.SPACE, TokenType.UNQUOTED,
        ]
        assert [t.value for t in tokens] == ["SELECT", " ", "*", " ", "FROM", " ", "t"]

    def test_consecutive_spaces_single_token(self):
        tokens = tokenize("a \t\n b")
        assert len(tokens) == 3
        assert tokens[1].is_space
        assert tokens[1].value == " \t\n "

    def test_identifier_with_dollar(self):
        tokens = tokenize("a$b")
        assert len(tokens) == 1
        assert tokens[0].is_unquoted
        assert tokens[0].value == "a$b"

    def test_dollar_not_first(self):
        # `$1` est un placeholder PostgreSQL: `$` puis `1`
        tokens = tokenize("$1")
        assert tokens[0].is_punctuation
        assert tokens[0].value == "$"
        assert tokens[1].is_unquoted
        assert tokens[1].value == "1"

    def test_punctuation_one_char_each(self):
        tokens = tokenize("(?)")
        assert [t.value for t in tokens] == ["(", "?", ")"]
        assert all(t.is_punctuation for t in tokens)

    def test_positions(self):
        tokens = tokenize("a = ?")
        assert [t.position for t in tokens] == [0, 1, 2, 3, 4]


# ============================================================
# SECTION 2: CHAÎNES QUOTÉES
# ============================================================

class TestQuoted:
    """Tests des chaînes et identifiants quotés."""

    def test_single_quotes(self):
        tokens = tokenize("'hello world'")
        assert len(tokens) == 1
        assert tokens[0].is_quoted
        assert tokens[0].value == "'hello world'"

    def test_doubled_delimiter(self):
        tokens = tokenize("'it''s'")
        assert len(tokens) == 1
        assert tokens[0].unquote() == "it's"

    def test_backslash_escape(self):
        tokens = tokenize('"a\\"b" c')
        assert tokens[0].is_quoted
        assert tokens[0].value == '"a\\"b"'
        assert tokens[-1].value == "c"

    def test_backticks(self):
        tokens = tokenize("`my col`")
        assert tokens[0].is_quoted
        assert tokens[0].unquote() == "my col"

    def test_brackets(self):
        tokens = tokenize("[my col] x")
        assert tokens[0].is_quoted
        assert tokens[0].value == "[my col]"
        assert tokens[0].unquote() == "my col"

    def test_placeholder_inside_string(self):
        tokens = tokenize("'?' = ?")
        assert tokens[0].is_quoted
        assert tokens[-1].is_punctuation
        assert tokens[-1].value == "?"

    def test_unterminated_string(self):
        # Le tokenizer n'échoue jamais
        tokens = tokenize("x 'abc")
        assert tokens[-1].is_quoted
        assert tokens[-1].value == "'abc"

    def test_unquote_non_quoted(self):
        assert Token(TokenType.UNQUOTED, "abc").unquote() is None


# ============================================================
# SECTION 3: RÉVERSIBILITÉ
# ============================================================

class TestRoundTrip:
    """La concaténation des tokens redonne l'entrée."""

    @pytest.mark.parametrize("sql", [
        "SELECT * FROM `character` WHERE id = ?",
        "a = 'it''s' AND b = \"x\\\"y\"",
        "x IN ($1, $2) -- commentaire",
        "   ",
        "[a]]b]",
        "'never closed",
    ])
    def test_concatenation(self, sql):
        assert ''.join(t.value for t in tokenize(sql)) == sql

    def test_iterator(self):
        tokenizer = SQLTokenizer("a b")
        assert [t.value for t in tokenizer] == ["a", " ", "b"]
