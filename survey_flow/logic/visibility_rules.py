"""Visibility resolution for a response.

Computes which questions are currently presentable from the live answer set.
Nothing here is cached: callers pass the current answers on every read, so
the visible set cannot drift from what the respondent has answered.

Dependency depth is one hop by construction (see ``question_config``). The
resolver reads the parent's answer only; it never asks whether the parent
itself is visible and never walks further up.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping
import logging

from survey_flow.logic.condition_evaluator import should_show
from survey_flow.models.conditions import ConditionalType
from survey_flow.models.survey_types import AnswerValue, QuestionSpec, order_key

logger = logging.getLogger(__name__)


def answerable_questions(questions: Iterable[QuestionSpec]) -> list[QuestionSpec]:
    """Survey-ordered questions a respondent can answer (matrix parents excluded)."""
    return sorted((q for q in questions if not q.is_matrix_parent), key=order_key)


def observed_value(question: QuestionSpec, parent_answer: AnswerValue | None) -> Any:
    """Extract the value a condition compares from the parent's answer.

    Numeric for scale conditions, the selected option-id set for option
    conditions, None when the parent has not been answered.
    """
    if parent_answer is None:
        return None
    if question.conditional_type is ConditionalType.OPTION:
        return parent_answer.selected_option_ids()
    return parent_answer.number


def is_child_visible(question: QuestionSpec, answers: Mapping[str, AnswerValue]) -> bool:
    """Return True if ``question`` should be presented given ``answers``.

    Unconditional questions are always visible; a conditional question is
    hidden until its parent has an answer.
    """
    if not question.is_conditional:
        return True
    parent_answer = answers.get(str(question.conditional_parent_id))
    if parent_answer is None:
        return False
    return should_show(observed_value(question, parent_answer), question)


def resolve_visible_questions(
    questions: Iterable[QuestionSpec],
    answers: Mapping[str, AnswerValue],
) -> list[QuestionSpec]:
    """Order-preserving list of currently presentable questions."""
    visible = [q for q in answerable_questions(questions) if is_child_visible(q, answers)]
    logger.debug("visible_questions count=%s ids=%s", len(visible), [q.id for q in visible])
    return visible


def compute_visible_set(
    questions: Iterable[QuestionSpec],
    answers: Mapping[str, AnswerValue],
) -> set[str]:
    return {q.id for q in resolve_visible_questions(questions, answers)}


def visibility_map(
    questions: Iterable[QuestionSpec],
    answers: Mapping[str, AnswerValue],
) -> dict[str, bool]:
    """Visibility boolean for every answerable question id.

    Export tooling uses this to leave cells blank for questions a respondent
    was never shown.
    """
    return {q.id: is_child_visible(q, answers) for q in answerable_questions(questions)}


def question_was_shown(
    question_id: str,
    questions: Iterable[QuestionSpec],
    answers: Mapping[str, AnswerValue],
) -> bool:
    return visibility_map(questions, answers).get(str(question_id), False)


__all__ = [
    "answerable_questions",
    "observed_value",
    "is_child_visible",
    "resolve_visible_questions",
    "compute_visible_set",
    "visibility_map",
    "question_was_shown",
]
