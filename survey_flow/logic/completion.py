"""Completion percentage and unanswered list derived from the visible set.

Only visible questions count. An answer whose question became hidden after
a parent change stays stored but is left out of both numerator and
denominator, and a hidden required question never blocks completion.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping

from pydantic import BaseModel, Field

from survey_flow.logic.visibility_rules import resolve_visible_questions
from survey_flow.models.survey_types import AnswerValue, QuestionSpec

DEFAULT_PRECISION = 2


class CompletionReport(BaseModel):
    total: int
    answered: int
    percentage: float
    unanswered: List[str] = Field(default_factory=list)
    missing_required: List[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return not self.missing_required


def calculate_completion(
    questions: Iterable[QuestionSpec],
    answers: Mapping[str, AnswerValue],
    precision: int = DEFAULT_PRECISION,
) -> CompletionReport:
    visible = resolve_visible_questions(questions, answers)
    total = len(visible)
    answered_ids = [q.id for q in visible if q.id in answers]
    unanswered = [q for q in visible if q.id not in answers]
    if total == 0:
        # Nothing left to do is fully done
        percentage = 100.0
    else:
        percentage = round(len(answered_ids) / total * 100, precision)
    return CompletionReport(
        total=total,
        answered=len(answered_ids),
        percentage=percentage,
        unanswered=[q.id for q in unanswered],
        missing_required=[q.id for q in unanswered if q.required],
    )


__all__ = ["CompletionReport", "calculate_completion", "DEFAULT_PRECISION"]
