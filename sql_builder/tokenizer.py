"""
Tokenizer (Analyseur Lexical) pour fragments SQL.

Découpe une chaîne SQL en quatre familles de tokens: espaces, mots non
quotés, chaînes quotées et ponctuation. La concaténation des tokens
redonne toujours l'entrée exacte; le tokenizer n'échoue jamais.

Il sert à réécrire les placeholders des fragments personnalisés et à
réinjecter les valeurs dans un SQL paramétré, sans toucher aux `?`
présents à l'intérieur des chaînes.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Iterator, List, Optional


class TokenType(Enum):
    """Types de tokens."""
    SPACE = auto()
    UNQUOTED = auto()
    QUOTED = auto()
    PUNCTUATION = auto()


@dataclass
class Token:
    """Représente un token et sa position dans le texte source."""
    type: TokenType
    value: str
    position: int = 0

    @property
    def is_space(self) -> bool:
        return self.type == TokenType.SPACE

    @property
    def is_unquoted(self) -> bool:
        return self.type == TokenType.UNQUOTED

    @property
    def is_quoted(self) -> bool:
        return self.type == TokenType.QUOTED

    @property
    def is_punctuation(self) -> bool:
        return self.type == TokenType.PUNCTUATION

    def unquote(self) -> Optional[str]:
        """Contenu d'une chaîne quotée, délimiteurs et échappements doublés retirés."""
        if not self.is_quoted:
            return None
        return SQLTokenizer(self.value)._unquote()

    def __str__(self):
        return self.value

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r})"


class SQLTokenizer:
    """Analyseur lexical pour fragments SQL."""

    SPACE_CHARS = ' \t\r\n'
    IDENTIFIER_CHARS = '_$'
    ESCAPE_CHAR = '\\'

    # Délimiteur ouvrant -> délimiteur fermant
    DELIMITERS = {
        '`': '`',
        '[': ']',
        "'": "'",
        '"': '"',
    }

    def __init__(self, sql: str):
        """
        Initialise le tokenizer.

        Args:
            sql: Le fragment SQL à découper
        """
        self.sql = sql
        self.pos = 0

    def _current_char(self) -> Optional[str]:
        """Retourne le caractère courant ou None si fin de chaîne."""
        if self.pos >= len(self.sql):
            return None
        return self.sql[self.pos]

    def _at_end(self) -> bool:
        return self.pos >= len(self.sql)

    @staticmethod
    def _is_alphanumeric(char: str) -> bool:
        return char.isalpha() or char in '0123456789'

    # ============== Familles de tokens ==============

    def _read_space(self) -> Optional[Token]:
        start = self.pos
        while not self._at_end() and self._current_char() in self.SPACE_CHARS:
            self.pos += 1
        if self.pos == start:
            return None
        return Token(TokenType.SPACE, self.sql[start:self.pos], start)

    def _read_unquoted(self) -> Optional[Token]:
        # `_` et `$` sont admis sauf en première position
        start = self.pos
        while not self._at_end():
            char = self._current_char()
            if self._is_alphanumeric(char):
                self.pos += 1
            elif self.pos > start and char in self.IDENTIFIER_CHARS:
                self.pos += 1
            else:
                break
        if self.pos == start:
            return None
        return Token(TokenType.UNQUOTED, self.sql[start:self.pos], start)

    def _read_quoted(self) -> Optional[Token]:
        start = self.pos
        opening = self._current_char()
        if opening not in self.DELIMITERS:
            return None
        closing = self.DELIMITERS[opening]
        self.pos += 1
        escape = False
        while not self._at_end():
            char = self._current_char()
            if not escape and char == closing:
                self.pos += 1
                # Délimiteur doublé: caractère littéral (sauf pour `[...]`)
                if opening != '[' and self._current_char() == closing:
                    self.pos += 1
                    continue
                break
            escape = not escape and char == self.ESCAPE_CHAR
            self.pos += 1
        return Token(TokenType.QUOTED, self.sql[start:self.pos], start)

    def _read_punctuation(self) -> Optional[Token]:
        char = self._current_char()
        if char is None or char in self.SPACE_CHARS or self._is_alphanumeric(char):
            return None
        start = self.pos
        self.pos += 1
        return Token(TokenType.PUNCTUATION, char, start)

    def _next_token(self) -> Optional[Token]:
        return (self._read_space() or self._read_unquoted()
                or self._read_quoted() or self._read_punctuation())

    def _unquote(self) -> str:
        opening = self._current_char()
        if opening not in self.DELIMITERS:
            return self.sql
        closing = self.DELIMITERS[opening]
        self.pos += 1
        result = []
        escape = False
        while not self._at_end():
            char = self._current_char()
            if not escape and char == closing:
                self.pos += 1
                if opening != '[' and self._current_char() == closing:
                    result.append(char)
                    self.pos += 1
                    continue
                break
            escape = not escape and char == self.ESCAPE_CHAR
            result.append(char)
            self.pos += 1
        return ''.join(result)

    # ============== API ==============

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self._next_token()
            if token is None:
                return
            yield token

    def tokenize(self) -> List[Token]:
        """
        Découpe le texte complet.

        Returns:
            Liste des tokens, dans l'ordre du texte
        """
        return list(self)


def tokenize(sql: str) -> List[Token]:
    """Fonction utilitaire pour découper un fragment SQL."""
    return SQLTokenizer(sql).tokenize()
