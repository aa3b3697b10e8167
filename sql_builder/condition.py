"""
Algèbre des conditions.

Une Condition est un arbre ALL (conjonction) / ANY (disjonction),
éventuellement nié, dont les feuilles sont des expressions. Elle se
réduit en expression binaire au moment du rendu:

    Cond.all()               -> TRUE
    Cond.any()               -> FALSE
    Cond.all().add(a).add(b) -> a AND b
    Cond.any().add(a).not_() -> NOT a

Le ConditionHolder porte la clause WHERE/HAVING/ON d'une requête: vide,
chaîne historique and_where/or_where, ou arbre de conditions.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Union

from .ast_nodes import BinOper, ConstantExpr, Expr, UnaryExpr, UnOper, BinaryExpr, into_expr
from .errors import ConditionMixError
from .values import Value

logger = logging.getLogger(__name__)


class ConditionType(Enum):
    ALL = "ALL"
    ANY = "ANY"


@dataclass
class Condition:
    """
    Nœud de l'arbre de conditions.

    Les méthodes de construction retournent une nouvelle Condition; la
    condition d'origine n'est jamais modifiée.
    """
    condition_type: ConditionType = ConditionType.ALL
    negate: bool = False
    conditions: List[Union['Condition', Expr]] = field(default_factory=list)

    @classmethod
    def all(cls) -> 'Condition':
        """Conjonction vide (TRUE)."""
        return cls(ConditionType.ALL)

    @classmethod
    def any(cls) -> 'Condition':
        """Disjonction vide (FALSE)."""
        return cls(ConditionType.ANY)

    def add(self, condition: Any) -> 'Condition':
        """
        Ajoute un enfant (expression ou condition imbriquée).

        Une condition imbriquée non niée qui n'a qu'un seul enfant est
        remplacée par cet enfant.

        Args:
            condition: Expression, Condition, ou opérande convertible en expression

        Returns:
            Une nouvelle Condition
        """
        if isinstance(condition, Condition):
            child = condition
            if len(child.conditions) == 1 and not child.negate:
                child = child.conditions[0]
        else:
            child = into_expr(condition)
        return replace(self, conditions=self.conditions + [child])

    def add_option(self, condition: Optional[Any]) -> 'Condition':
        """Ajoute l'enfant seulement s'il n'est pas None."""
        if condition is None:
            return replace(self, conditions=list(self.conditions))
        return self.add(condition)

    def not_(self) -> 'Condition':
        """Inverse la négation."""
        return replace(self, negate=not self.negate, conditions=list(self.conditions))

    def is_empty(self) -> bool:
        return not self.conditions

    def len(self) -> int:
        return len(self.conditions)

    def to_expr(self) -> Expr:
        """Réduit l'arbre en expression (repli à gauche avec AND/OR)."""
        op = BinOper.AND if self.condition_type == ConditionType.ALL else BinOper.OR
        result: Optional[Expr] = None
        for child in self.conditions:
            child_expr = child.to_expr() if isinstance(child, Condition) else child
            result = child_expr if result is None else BinaryExpr(result, op, child_expr)
        if result is None:
            result = ConstantExpr(Value.from_python(self.condition_type == ConditionType.ALL))
        if self.negate:
            return UnaryExpr(UnOper.NOT, result)
        return result


Cond = Condition


def into_condition(value: Any) -> Condition:
    """Une expression devient `Cond.all().add(expr)`."""
    if isinstance(value, Condition):
        return value
    return Condition.all().add(value)


def all_(*conditions: Any) -> Condition:
    """Raccourci: Cond.all() avec tous les enfants donnés."""
    result = Condition.all()
    for condition in conditions:
        result = result.add(condition)
    return result


def any_(*conditions: Any) -> Condition:
    """Raccourci: Cond.any() avec tous les enfants donnés."""
    result = Condition.any()
    for condition in conditions:
        result = result.add(condition)
    return result


# ============== Chaîne historique ==============

class LogicalOper(Enum):
    AND = "AND"
    OR = "OR"


@dataclass
class LogicalChainOper:
    """Maillon de la chaîne and_where/or_where."""
    oper: LogicalOper
    expr: Expr

    @classmethod
    def and_(cls, expr: Any) -> 'LogicalChainOper':
        return cls(LogicalOper.AND, into_expr(expr))

    @classmethod
    def or_(cls, expr: Any) -> 'LogicalChainOper':
        return cls(LogicalOper.OR, into_expr(expr))


class ConditionHolder:
    """
    Contenu d'une clause conditionnelle.

    `contents` vaut None (clause absente), une liste de LogicalChainOper
    (chaîne historique) ou une Condition.
    """

    def __init__(self, contents: Union[None, List[LogicalChainOper], Condition] = None):
        self.contents = contents

    def is_empty(self) -> bool:
        """Vrai si rien ne doit être rendu (un arbre nié vide compte comme non vide)."""
        if self.contents is None:
            return True
        if isinstance(self.contents, list):
            return not self.contents
        return self.contents.is_empty() and not self.contents.negate

    def is_chain(self) -> bool:
        return isinstance(self.contents, list)

    def add_and_or(self, oper: LogicalChainOper) -> None:
        """
        Ajoute un maillon à la chaîne historique.

        Raises:
            ConditionMixError: si la clause contient déjà un arbre de conditions
        """
        if self.contents is None:
            self.contents = [oper]
        elif isinstance(self.contents, list):
            self.contents.append(oper)
        else:
            raise ConditionMixError()

    def add_condition(self, addition: Any) -> None:
        """
        Fusionne une condition dans la clause.

        Une conjonction non niée absorbe directement les enfants d'une autre
        conjonction non niée; dans tous les autres cas les deux conditions
        sont réunies sous un nouveau ALL.

        Raises:
            ConditionMixError: si la clause contient déjà une chaîne historique
        """
        addition = into_condition(addition)
        current = self.contents
        if current is None:
            self.contents = addition
        elif isinstance(current, list):
            raise ConditionMixError()
        elif current.condition_type == ConditionType.ALL and not current.negate:
            if addition.condition_type == ConditionType.ALL and not addition.negate:
                self.contents = replace(current, conditions=current.conditions + addition.conditions)
            else:
                self.contents = current.add(addition)
        else:
            self.contents = Condition.all().add(current).add(addition)
        logger.debug(f"Condition merged, {self.contents.len()} top-level children")

    def and_where(self, expr: Any) -> None:
        """`and_where`: rejoint la chaîne si elle existe, sinon l'arbre."""
        if isinstance(self.contents, list):
            self.add_and_or(LogicalChainOper.and_(expr))
        else:
            self.add_condition(expr)


# ============== CASE ==============

@dataclass
class CaseWhen:
    condition: Condition
    result: Expr


@dataclass
class CaseStatement(Expr):
    """
    Expression CASE.

    Rendue `(CASE WHEN (cond) THEN res ... ELSE res END)`.
    """
    when: List[CaseWhen] = field(default_factory=list)
    else_: Optional[Expr] = None

    def case(self, condition: Any, then: Any) -> 'CaseStatement':
        self.when.append(CaseWhen(into_condition(condition), into_expr(then)))
        return self

    def finally_(self, otherwise: Any) -> 'CaseStatement':
        self.else_ = into_expr(otherwise)
        return self
