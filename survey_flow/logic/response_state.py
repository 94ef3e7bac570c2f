"""Response state helpers.

Loads a response's questions and answers once and derives the live
visibility and completion views from them, keeping route handlers
orchestration-focused.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List
import logging

from sqlalchemy.orm import Session

from survey_flow.logic.completion import DEFAULT_PRECISION, CompletionReport, calculate_completion
from survey_flow.logic.matrix import index_questions
from survey_flow.logic.repository_answers import load_answers
from survey_flow.logic.repository_questions import load_question_specs
from survey_flow.logic.visibility_rules import resolve_visible_questions, visibility_map
from survey_flow.models.orm import Response
from survey_flow.models.survey_types import AnswerValue, QuestionSpec

logger = logging.getLogger(__name__)


@dataclass
class ResponseState:
    response_id: str
    questions: List[QuestionSpec]
    answers: Dict[str, AnswerValue]

    @property
    def questions_by_id(self) -> Dict[str, QuestionSpec]:
        return index_questions(self.questions)

    def visible_ids(self) -> List[str]:
        return [q.id for q in resolve_visible_questions(self.questions, self.answers)]

    def visibility(self) -> Dict[str, bool]:
        return visibility_map(self.questions, self.answers)

    def completion(self, precision: int = DEFAULT_PRECISION) -> CompletionReport:
        return calculate_completion(self.questions, self.answers, precision=precision)

    def with_answer(self, value: AnswerValue) -> "ResponseState":
        answers = dict(self.answers)
        answers[value.question_id] = value
        return ResponseState(response_id=self.response_id, questions=self.questions, answers=answers)


def load_response_state(session: Session, response: Response) -> ResponseState:
    questions = load_question_specs(session, response.survey_id)
    answers = load_answers(session, response.response_id)
    logger.debug(
        "response_state_loaded response_id=%s questions=%s answers=%s",
        response.response_id,
        len(questions),
        len(answers),
    )
    return ResponseState(response_id=response.response_id, questions=questions, answers=answers)


__all__ = ["ResponseState", "load_response_state"]
