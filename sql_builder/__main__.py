#!/usr/bin/env python3
"""
SQL Builder - Script principal.

Outils de débogage en ligne de commande autour du SQL rendu: découpage
en tokens, réinjection des valeurs dans un SQL paramétré et export JSON.

Usage:
    python -m sql_builder --tokens "SELECT * FROM t WHERE a = ?"
    python -m sql_builder --inject --dialect postgres --values '[1, "A"]' "SELECT $1, $2"
    python -m sql_builder --values '[1]' "SELECT * FROM t WHERE a = ?"
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .dialects import get_query_builder
from .json_exporter import QueryExporter
from .prepare import inject_parameters


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Inspecte du SQL paramétré: tokens, réinjection des valeurs, export JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemples:
  # Afficher les tokens
  python -m sql_builder --tokens "SELECT * FROM t WHERE a = ?"

  # Réinjecter les valeurs (débogage uniquement)
  python -m sql_builder --inject --dialect mysql --values '[1, "x"]' "SELECT ? + ?"

  # Export JSON de la requête et de ses valeurs
  python -m sql_builder --dialect postgres --values '[1]' "SELECT $1"

Dialectes supportés: mysql, postgres, sqlite
"""
    )

    parser.add_argument(
        "sql",
        nargs="?",
        help="SQL à traiter"
    )

    parser.add_argument(
        "-f", "--file",
        type=str,
        help="Fichier SQL à traiter"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        help="Fichier de sortie"
    )

    parser.add_argument(
        "-d", "--dialect",
        type=str,
        default="mysql",
        help="Dialecte: mysql, postgres ou sqlite (défaut: mysql)"
    )

    parser.add_argument(
        "--values",
        type=str,
        default="[]",
        help="Valeurs des placeholders, en tableau JSON"
    )

    parser.add_argument(
        "--tokens",
        action="store_true",
        help="Afficher seulement les tokens (analyse lexicale)"
    )

    parser.add_argument(
        "--inject",
        action="store_true",
        help="Afficher le SQL avec les valeurs en ligne"
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="Indentation du JSON (défaut: 2)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Activer les logs DEBUG"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    # Récupération du SQL
    if args.file:
        filepath = Path(args.file)
        if not filepath.exists():
            print(f"Erreur: Le fichier '{args.file}' n'existe pas.", file=sys.stderr)
            sys.exit(1)
        sql = filepath.read_text(encoding='utf-8')
    elif args.sql:
        sql = args.sql
    else:
        print("Erreur: Aucun SQL fourni.", file=sys.stderr)
        print("Usage: python -m sql_builder --tokens \"SELECT * FROM t\"", file=sys.stderr)
        sys.exit(1)

    if not sql.strip():
        print("Erreur: Le SQL est vide.", file=sys.stderr)
        sys.exit(1)

    # Mode tokens uniquement
    if args.tokens:
        from .tokenizer import SQLTokenizer
        tokens = SQLTokenizer(sql).tokenize()
        result = {
            "tokens": [
                {
                    "type": token.type.name,
                    "value": token.value,
                    "position": token.position
                }
                for token in tokens
            ]
        }
        _write_output(json.dumps(result, indent=args.indent, ensure_ascii=False), args.output)
        return

    try:
        builder = get_query_builder(args.dialect)
        values = json.loads(args.values)
        if not isinstance(values, list):
            raise ValueError("--values must be a JSON array")
        if args.inject:
            output = inject_parameters(sql, values, builder)
        else:
            exporter = QueryExporter(indent=args.indent)
            output = exporter.export(sql, values, builder.dialect_name)
    except (ValueError, TypeError) as e:
        print(f"Erreur: {e}", file=sys.stderr)
        sys.exit(1)

    _write_output(output, args.output)


def _write_output(text: str, output_path) -> None:
    if output_path:
        Path(output_path).write_text(text, encoding='utf-8')
        print(f"Résultat sauvegardé dans '{output_path}'")
    else:
        print(text)


if __name__ == "__main__":
    main()
