"""
Collecteurs de sortie SQL.

Deux implémentations partagent la même interface:
- SqlWriterValues: écrit des placeholders et collecte les valeurs
- SqlWriterString: écrit les valeurs en ligne (forme de débogage)
"""

from typing import List, Tuple

from .values import Value, Values


class SqlWriter:
    """Interface commune des collecteurs de sortie."""

    def __init__(self):
        self._parts: List[str] = []

    def write_str(self, text: str) -> None:
        self._parts.append(text)

    def write_char(self, char: str) -> None:
        self._parts.append(char)

    def write_format(self, template: str, *args) -> None:
        self._parts.append(template.format(*args))

    def push_param(self, value: Value, query_builder) -> None:
        raise NotImplementedError

    def result(self) -> str:
        """Retourne le SQL écrit jusqu'ici."""
        return ''.join(self._parts)

    def into_parts(self) -> Tuple[str, Values]:
        return self.result(), Values()

    def __str__(self):
        return self.result()


class SqlWriterValues(SqlWriter):
    """
    Collecteur paramétré.

    Chaque valeur poussée est ajoutée à la liste des valeurs et remplacée
    dans le SQL par le placeholder du dialecte (`?` ou `$N`).
    """

    def __init__(self, placeholder: str = '?', numbered: bool = False):
        super().__init__()
        self.placeholder = placeholder
        self.numbered = numbered
        self.counter = 0
        self.values = Values()

    def push_param(self, value: Value, query_builder=None) -> None:
        self.counter += 1
        self.values.append(value)
        if self.numbered:
            self._parts.append(f"{self.placeholder}{self.counter}")
        else:
            self._parts.append(self.placeholder)

    def into_parts(self) -> Tuple[str, Values]:
        return self.result(), self.values


class SqlWriterString(SqlWriter):
    """Collecteur de débogage: les valeurs sont rendues en littéraux."""

    def push_param(self, value: Value, query_builder) -> None:
        self._parts.append(query_builder.value_to_string(value))
