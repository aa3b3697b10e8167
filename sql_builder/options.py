"""
Options de construction des requêtes.

Usage:
    from sql_builder.options import BuildOptions, set_prefer_more_parentheses

    # Par dialecte
    builder = PostgresQueryBuilder(options=BuildOptions(prefer_more_parentheses=True))

    # Pour tout le processus (une seule fois, au démarrage)
    set_prefer_more_parentheses(True)
"""

from dataclasses import dataclass


@dataclass
class BuildOptions:
    """Options de rendu SQL."""

    # Parenthèses autour de chaque sous-expression binaire
    prefer_more_parentheses: bool = False


@dataclass
class _GlobalOptions:
    prefer_more_parentheses: bool = False
    prefer_more_parentheses_set: bool = False


_GLOBAL_OPTIONS = _GlobalOptions()


def set_prefer_more_parentheses(value: bool) -> None:
    """
    Active les parenthèses systématiques pour tout le processus.

    Args:
        value: Nouvelle valeur de l'option

    Raises:
        RuntimeError: si l'option a déjà été positionnée
    """
    if _GLOBAL_OPTIONS.prefer_more_parentheses_set:
        raise RuntimeError("Can't set the same global option `prefer_more_parentheses` twice")
    _GLOBAL_OPTIONS.prefer_more_parentheses = value
    _GLOBAL_OPTIONS.prefer_more_parentheses_set = True


def get_prefer_more_parentheses() -> bool:
    """Retourne la valeur globale de l'option."""
    return _GLOBAL_OPTIONS.prefer_more_parentheses


def reset_options() -> None:
    """Remet les options globales à leur valeur par défaut (tests)."""
    _GLOBAL_OPTIONS.prefer_more_parentheses = False
    _GLOBAL_OPTIONS.prefer_more_parentheses_set = False
