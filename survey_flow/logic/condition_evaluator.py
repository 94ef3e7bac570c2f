"""Condition evaluation for conditional questions.

Pure functions: (observed value, question condition) -> decision. Scale
conditions compare a number against one or two (operator, operand) pairs;
option conditions test whether any trigger option is selected.

Malformed runtime input never raises. A missing operator or operand, an
unknown operator token, or an observed value of the wrong type makes the
condition indeterminate, and an indeterminate condition always hides the
question regardless of ``show_if_condition_met``.

The browser copy in ``survey_flow/static/conditional_flow.js`` mirrors these
rules; both are checked against ``tests/fixtures/visibility_corpus.json``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional
import logging
import math
import operator as _op

from survey_flow.models.conditions import ConditionalType, LogicType, Operator, coerce_operator
from survey_flow.models.survey_types import QuestionSpec

logger = logging.getLogger(__name__)


_COMPARATORS = {
    Operator.LESS_THAN: _op.lt,
    Operator.GREATER_THAN: _op.gt,
    # Exact match; no tolerance for floating-point noise
    Operator.EQUAL_TO: _op.eq,
    Operator.GREATER_THAN_OR_EQUAL: _op.ge,
    Operator.LESS_THAN_OR_EQUAL: _op.le,
}


def as_number(value: Any) -> Optional[float]:
    """Return a float for int/float/Decimal input, else None.

    Booleans and strings are type mismatches, NaN is treated as missing.
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        f = float(value)
        return None if math.isnan(f) else f
    return None


def compare(observed: Any, operator_token: Any, operand: Any) -> Optional[bool]:
    """Apply one comparator; None when any input is missing or malformed."""
    op = coerce_operator(operator_token)
    left = as_number(observed)
    right = as_number(operand)
    if op is None or left is None or right is None:
        return None
    return bool(_COMPARATORS[op](left, right))


def evaluate_scale_condition(observed: Any, spec: QuestionSpec) -> Optional[bool]:
    first = compare(observed, spec.operator, spec.value)
    if first is None:
        return None
    if not spec.logic_type.uses_second_condition:
        return first
    second = compare(observed, spec.operator_2, spec.value_2)
    if second is None:
        return None
    if spec.logic_type is LogicType.OR:
        return first or second
    # AND and RANGE share one rule: both clauses as configured must hold
    return first and second


def evaluate_option_condition(observed: Any, spec: QuestionSpec) -> Optional[bool]:
    triggers = {str(t) for t in (spec.trigger_option_ids or [])}
    if not triggers:
        return None
    if observed is None or isinstance(observed, (str, bytes)) or not isinstance(observed, Iterable):
        return None
    selected = {str(x) for x in observed}
    # OR across trigger options
    return not selected.isdisjoint(triggers)


def evaluate_condition(observed: Any, spec: QuestionSpec) -> Optional[bool]:
    """Return True/False when the condition can be decided, None otherwise."""
    if spec.conditional_type is ConditionalType.OPTION:
        return evaluate_option_condition(observed, spec)
    return evaluate_scale_condition(observed, spec)


def condition_met(observed: Any, spec: QuestionSpec) -> bool:
    return evaluate_condition(observed, spec) is True


def should_show(observed: Any, spec: QuestionSpec) -> bool:
    """Final visibility for a conditional question given its parent's observed value."""
    if not spec.is_conditional:
        return True
    met = evaluate_condition(observed, spec)
    if met is None:
        logger.debug(
            "condition_indeterminate qid=%s parent=%s observed=%r",
            spec.id,
            spec.conditional_parent_id,
            observed,
        )
        return False
    return met if spec.show_if_condition_met else not met


__all__ = [
    "as_number",
    "compare",
    "evaluate_scale_condition",
    "evaluate_option_condition",
    "evaluate_condition",
    "condition_met",
    "should_show",
]
