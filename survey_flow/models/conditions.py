"""Condition vocabulary shared by the evaluator, the validator and the client payload.

Enum values are the wire tokens stored in the database and shipped to the
browser mirror; renaming one is a data migration.
"""

from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    LESS_THAN = "less_than"
    GREATER_THAN = "greater_than"
    EQUAL_TO = "equal_to"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"


class LogicType(str, Enum):
    SINGLE = "single"
    AND = "and"
    OR = "or"
    RANGE = "range"

    @property
    def uses_second_condition(self) -> bool:
        return self is not LogicType.SINGLE


class ConditionalType(str, Enum):
    SCALE = "scale"
    OPTION = "option"


def coerce_operator(token: object) -> Operator | None:
    """Return the Operator for a stored token, or None when unknown."""
    if isinstance(token, Operator):
        return token
    try:
        return Operator(str(token))
    except ValueError:
        return None


__all__ = ["Operator", "LogicType", "ConditionalType", "coerce_operator"]
