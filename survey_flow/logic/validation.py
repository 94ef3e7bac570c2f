"""Capability-aware answer shape validation.

Runs at save time only. A payload that does not satisfy its question's
capability contract raises ``AnswerShapeError`` naming the offending field;
the caller must not persist anything in that case.
"""

from __future__ import annotations

from typing import Mapping
import math

from survey_flow.logic.condition_evaluator import as_number
from survey_flow.logic.matrix import effective_options
from survey_flow.models.answer_upsert import AnswerUpsertModel
from survey_flow.models.capability import Capability
from survey_flow.models.survey_types import AnswerValue, QuestionSpec


class AnswerShapeError(ValueError):
    """Answer content does not match the question's capability."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def to_error(self) -> dict:
        return {"field": self.field, "message": self.message}


def _text(question: QuestionSpec, payload: AnswerUpsertModel) -> AnswerValue:
    text = payload.text
    if not isinstance(text, str) or not text.strip():
        raise AnswerShapeError("text", "is required for text questions")
    return AnswerValue(question_id=question.id, text=text)


def _number(question: QuestionSpec, payload: AnswerUpsertModel) -> AnswerValue:
    value = as_number(payload.number)
    if value is None or not math.isfinite(value):
        raise AnswerShapeError("number", f"is required for {question.capability.value} questions")
    if question.capability is Capability.SCALE:
        low, high = question.scale_min, question.scale_max
        if (low is not None and value < low) or (high is not None and value > high):
            raise AnswerShapeError("number", f"must be within scale range {low}..{high}")
    return AnswerValue(question_id=question.id, number=value)


def _boolean(question: QuestionSpec, payload: AnswerUpsertModel) -> AnswerValue:
    if not isinstance(payload.boolean, bool):
        raise AnswerShapeError("boolean", "is required for boolean questions")
    return AnswerValue(question_id=question.id, boolean=payload.boolean)


def _check_known(selected: list[str], allowed: set[str], field: str) -> None:
    unknown = [oid for oid in selected if oid not in allowed]
    if unknown:
        raise AnswerShapeError(field, f"invalid option ids: {sorted(unknown)}")


def _single(question: QuestionSpec, payload: AnswerUpsertModel, allowed: set[str]) -> AnswerValue:
    selected = [str(o) for o in payload.option_ids or []]
    if len(selected) != 1:
        raise AnswerShapeError("option_ids", "exactly one option must be selected")
    _check_known(selected, allowed, "option_ids")
    return AnswerValue(question_id=question.id, option_ids=selected)


def _multiple(question: QuestionSpec, payload: AnswerUpsertModel, allowed: set[str]) -> AnswerValue:
    selected = [str(o) for o in payload.option_ids or []]
    if not selected:
        raise AnswerShapeError("option_ids", "at least one option must be selected")
    if len(set(selected)) != len(selected):
        raise AnswerShapeError("option_ids", "cannot select the same option twice")
    _check_known(selected, allowed, "option_ids")
    if question.min_selections is not None and len(selected) < question.min_selections:
        raise AnswerShapeError("option_ids", f"at least {question.min_selections} options must be selected")
    if question.max_selections is not None and len(selected) > question.max_selections:
        raise AnswerShapeError("option_ids", f"at most {question.max_selections} options may be selected")
    return AnswerValue(question_id=question.id, option_ids=selected)


def _ranking(question: QuestionSpec, payload: AnswerUpsertModel, allowed: set[str]) -> AnswerValue:
    rankings = {str(k): v for k, v in (payload.rankings or {}).items()}
    _check_known(list(rankings), allowed, "rankings")
    if any(isinstance(r, bool) or not isinstance(r, int) for r in rankings.values()):
        raise AnswerShapeError("rankings", "ranks must be integers")
    if set(rankings) != allowed:
        raise AnswerShapeError("rankings", "every option must be ranked")
    ranks = sorted(rankings.values())
    if ranks != list(range(1, len(allowed) + 1)):
        raise AnswerShapeError("rankings", f"ranks must be exactly 1..{len(allowed)} without gaps or duplicates")
    return AnswerValue(question_id=question.id, rankings=rankings)


def validate_answer(
    question: QuestionSpec,
    payload: AnswerUpsertModel,
    questions_by_id: Mapping[str, QuestionSpec],
) -> AnswerValue:
    """Validate ``payload`` against ``question`` and return the normalized answer.

    Only the field relevant to the capability is carried over; stray fields
    from the client are dropped.
    """
    capability = question.capability
    if not capability.is_answerable:
        raise AnswerShapeError("question_id", "matrix parent questions are not answerable")
    if capability.is_textual:
        return _text(question, payload)
    if capability.is_numeric:
        return _number(question, payload)
    if capability is Capability.BOOLEAN:
        return _boolean(question, payload)

    allowed = {o.id for o in effective_options(question, questions_by_id)}
    if capability is Capability.RANKING:
        return _ranking(question, payload, allowed)
    if capability.supports_multiple_selection:
        return _multiple(question, payload, allowed)
    return _single(question, payload, allowed)


__all__ = ["AnswerShapeError", "validate_answer"]
