"""
Réinjection des valeurs dans un SQL paramétré.

Produit une version lisible d'une requête construite avec build(), pour
les journaux et le débogage. Ne jamais exécuter le résultat: les valeurs
y sont en ligne.

    sql, values = query.build("postgres")
    inject_parameters(sql, values, "postgres")
"""

import logging
from typing import Any, Iterable, List

from .tokenizer import SQLTokenizer
from .values import Value

logger = logging.getLogger(__name__)


def inject_parameters(sql: str, params: Iterable[Any], query_builder: Any) -> str:
    """
    Remplace chaque placeholder par le littéral de la valeur correspondante.

    Les `?` (ou `$N`) situés dans une chaîne quotée ne sont pas touchés.

    Args:
        sql: SQL rendu avec placeholders
        params: Valeurs (Value ou objets Python), dans l'ordre des placeholders
        query_builder: Dialecte (instance ou nom) qui encode les littéraux

    Returns:
        Le SQL avec les valeurs en ligne

    Raises:
        ValueError: si un placeholder n'a pas de valeur correspondante
    """
    from .dialects import get_query_builder

    builder = get_query_builder(query_builder)
    values: List[Value] = [Value.from_python(p) for p in params]
    placeholder, numbered = builder.placeholder()

    tokens = SQLTokenizer(sql).tokenize()
    output = []
    counter = 0
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.is_punctuation and token.value == placeholder:
            if not numbered:
                output.append(builder.value_to_string(_param_at(values, counter)))
                counter += 1
                i += 1
                continue
            if i + 1 < len(tokens) and tokens[i + 1].is_unquoted and tokens[i + 1].value.isdigit():
                index = int(tokens[i + 1].value) - 1
                output.append(builder.value_to_string(_param_at(values, index)))
                i += 2
                continue
        output.append(token.value)
        i += 1

    logger.debug(f"Injected {len(values)} parameters for {builder.dialect_name}")
    return ''.join(output)


def _param_at(values: List[Value], index: int) -> Value:
    if index < 0 or index >= len(values):
        raise ValueError(f"No value for placeholder #{index + 1} ({len(values)} given)")
    return values[index]
