"""Authoring-time validation of question configuration.

Every structural invariant of the rule model is enforced here, before a
question is written: conditional depth of one hop, scale bounds, range
ordering, trigger-option ownership and the matrix parent/row rules. The
evaluator relies on these checks and never re-validates at answer time.
"""

from __future__ import annotations

from typing import Mapping
import logging

from survey_flow.logic.condition_evaluator import as_number
from survey_flow.models.capability import Capability
from survey_flow.models.conditions import ConditionalType, LogicType, Operator, coerce_operator
from survey_flow.models.survey_types import QuestionSpec

logger = logging.getLogger(__name__)

OPTION_PARENT_CAPABILITIES = frozenset({Capability.SINGLE_CHOICE, Capability.MULTIPLE_CHOICE})


class ConfigurationError(ValueError):
    """Invalid question configuration, raised only while authoring."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


def _check_scale_bounds(question: QuestionSpec) -> None:
    if question.capability is not Capability.SCALE:
        if question.scale_min is not None or question.scale_max is not None:
            raise ConfigurationError("SCALE_BOUNDS_NOT_ALLOWED", "only scale questions carry scale bounds")
        return
    if question.scale_min is None or question.scale_max is None:
        raise ConfigurationError("SCALE_BOUNDS_REQUIRED", "scale questions need scale_min and scale_max")
    if question.scale_max <= question.scale_min:
        raise ConfigurationError("SCALE_BOUNDS_INVALID", "scale_max must be greater than scale_min")


def _check_options(question: QuestionSpec) -> None:
    capability = question.capability
    if not capability.owns_options and question.options:
        raise ConfigurationError("OPTIONS_NOT_ALLOWED", f"{capability.value} questions own no options")
    if capability.owns_options and not question.options:
        raise ConfigurationError("OPTIONS_REQUIRED", f"{capability.value} questions need at least one option")
    if question.max_selections is not None:
        if not capability.supports_options or capability is Capability.MATRIX_PARENT:
            raise ConfigurationError("MAX_SELECTIONS_NOT_ALLOWED", "max_selections is not compatible with this question type")
        if question.max_selections < 1:
            raise ConfigurationError("MAX_SELECTIONS_INVALID", "max_selections must be greater than 0")
        if not capability.supports_multiple_selection and question.max_selections > 1:
            raise ConfigurationError("MAX_SELECTIONS_INVALID", "max_selections must be 1 for this question type")
    if question.min_selections is not None:
        if not capability.supports_options or capability is Capability.MATRIX_PARENT:
            raise ConfigurationError("MIN_SELECTIONS_NOT_ALLOWED", "min_selections is not compatible with this question type")
        if question.min_selections < 0:
            raise ConfigurationError("MIN_SELECTIONS_INVALID", "min_selections must not be negative")
        if not capability.supports_multiple_selection and question.min_selections > 1:
            raise ConfigurationError("MIN_SELECTIONS_INVALID", "min_selections must be at most 1 for this question type")
        if question.max_selections is not None and question.max_selections < question.min_selections:
            raise ConfigurationError("SELECTION_RANGE_INVALID", "max_selections must not be less than min_selections")


def _check_matrix(question: QuestionSpec, questions_by_id: Mapping[str, QuestionSpec]) -> None:
    if question.capability is Capability.MATRIX_PARENT:
        if question.matrix_parent_id is not None:
            raise ConfigurationError("MATRIX_PARENT_NESTED", "a matrix parent cannot have a matrix parent")
        if question.is_conditional:
            raise ConfigurationError("MATRIX_PARENT_CONDITIONAL", "a matrix parent cannot be conditional")
        return
    if question.capability is Capability.MATRIX_ROW and question.matrix_parent_id is None:
        raise ConfigurationError("MATRIX_ROW_PARENT_REQUIRED", "matrix rows need a matrix parent")
    if question.matrix_parent_id is None:
        return
    if question.capability is not Capability.MATRIX_ROW:
        raise ConfigurationError("MATRIX_ROW_CAPABILITY", "questions under a matrix parent must be matrix rows")
    parent = questions_by_id.get(str(question.matrix_parent_id))
    if parent is None or parent.capability is not Capability.MATRIX_PARENT:
        raise ConfigurationError("MATRIX_PARENT_INVALID", "matrix_parent must reference a matrix parent question")
    if question.is_conditional:
        raise ConfigurationError("MATRIX_ROW_CONDITIONAL", "a matrix row cannot be conditional")


def _check_scale_condition(question: QuestionSpec, parent: QuestionSpec) -> None:
    if parent.capability is not Capability.SCALE:
        raise ConfigurationError("CONDITIONAL_PARENT_NOT_SCALE", "scale conditions need a scale parent")
    if question.trigger_option_ids:
        raise ConfigurationError("TRIGGER_OPTIONS_NOT_ALLOWED", "scale conditions take no trigger options")

    clauses = [(question.operator, question.value)]
    if question.logic_type.uses_second_condition:
        clauses.append((question.operator_2, question.value_2))
    for position, (op_token, operand) in enumerate(clauses, start=1):
        if op_token is None or operand is None:
            raise ConfigurationError(
                "CONDITION_INCOMPLETE", f"operator and value {position} are required for {question.logic_type.value} logic"
            )
        if coerce_operator(op_token) is None:
            raise ConfigurationError("CONDITION_OPERATOR_UNKNOWN", f"unknown operator {op_token!r}")
        number = as_number(operand)
        if number is None or number < parent.scale_min or number > parent.scale_max:
            raise ConfigurationError(
                "CONDITION_VALUE_OUT_OF_RANGE",
                f"value {operand} must lie within the parent scale {parent.scale_min}..{parent.scale_max}",
            )

    if question.logic_type is LogicType.RANGE:
        if (
            coerce_operator(question.operator) is not Operator.GREATER_THAN_OR_EQUAL
            or coerce_operator(question.operator_2) is not Operator.LESS_THAN_OR_EQUAL
        ):
            raise ConfigurationError(
                "RANGE_OPERATORS_INVALID", "range logic requires greater_than_or_equal then less_than_or_equal"
            )
        if question.value > question.value_2:
            raise ConfigurationError("RANGE_BOUNDS_REVERSED", "range lower bound must not exceed the upper bound")


def _check_option_condition(question: QuestionSpec, parent: QuestionSpec) -> None:
    if parent.capability not in OPTION_PARENT_CAPABILITIES:
        raise ConfigurationError("CONDITIONAL_PARENT_NOT_CHOICE", "option conditions need a choice parent")
    if not question.trigger_option_ids:
        raise ConfigurationError("TRIGGER_OPTIONS_REQUIRED", "option conditions need at least one trigger option")
    if len(set(question.trigger_option_ids)) != len(question.trigger_option_ids):
        raise ConfigurationError("TRIGGER_OPTION_DUPLICATE", "trigger options must not repeat")
    parent_options = set(parent.option_ids)
    foreign = [oid for oid in question.trigger_option_ids if oid not in parent_options]
    if foreign:
        raise ConfigurationError("TRIGGER_OPTION_FOREIGN", f"trigger options must belong to the parent question: {foreign}")


def _check_conditional(question: QuestionSpec, questions_by_id: Mapping[str, QuestionSpec]) -> None:
    if not question.is_conditional:
        if question.trigger_option_ids:
            raise ConfigurationError("TRIGGER_OPTIONS_NOT_ALLOWED", "only conditional questions take trigger options")
        return
    parent_id = str(question.conditional_parent_id)
    if parent_id == question.id:
        raise ConfigurationError("CONDITIONAL_PARENT_SELF", "a question cannot be its own conditional parent")
    parent = questions_by_id.get(parent_id)
    if parent is None:
        raise ConfigurationError("CONDITIONAL_PARENT_NOT_FOUND", "conditional parent must be a question of the same survey")
    if parent.is_matrix_parent or parent.is_matrix_row:
        raise ConfigurationError("CONDITIONAL_PARENT_MATRIX", "matrix questions cannot be conditional parents")
    if parent.is_conditional:
        raise ConfigurationError("CONDITIONAL_PARENT_CHAINED", "conditional parent cannot be a conditional question itself")
    children = [q.id for q in questions_by_id.values() if q.conditional_parent_id == question.id]
    if children:
        raise ConfigurationError("CONDITIONAL_PARENT_CHAINED", "a question with conditional children cannot itself be conditional")

    if question.conditional_type is ConditionalType.OPTION:
        _check_option_condition(question, parent)
    else:
        _check_scale_condition(question, parent)


def validate_question_config(question: QuestionSpec, questions_by_id: Mapping[str, QuestionSpec]) -> None:
    """Raise ``ConfigurationError`` unless ``question`` is a valid configuration.

    ``questions_by_id`` holds the other questions of the same survey; an entry
    for ``question.id`` itself is ignored.
    """
    others = {qid: q for qid, q in questions_by_id.items() if qid != question.id}
    try:
        _check_scale_bounds(question)
        _check_options(question)
        _check_matrix(question, others)
        _check_conditional(question, others)
    except ConfigurationError as exc:
        logger.info("question_config_rejected qid=%s code=%s", question.id, exc.code)
        raise


__all__ = ["ConfigurationError", "validate_question_config", "OPTION_PARENT_CAPABILITIES"]
