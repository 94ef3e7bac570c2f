"""Answer save and lookup endpoints.

A save validates the payload against the question's capability (nothing is
written on failure), upserts the answer keyed by (response, question), and
returns the visibility delta and live completion so the UI can reconcile.
Saving an answer to a currently hidden question is accepted and kept as
history; it simply does not count while hidden.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from survey_flow.db.base import get_session
from survey_flow.logic.events import ANSWER_SAVED, publish
from survey_flow.logic.repository_answers import get_answer, to_answer_value, upsert_answer
from survey_flow.logic.repository_questions import to_question_spec
from survey_flow.logic.response_state import load_response_state
from survey_flow.logic.validation import validate_answer
from survey_flow.logic.visibility_delta import compute_visibility_delta
from survey_flow.logic.visibility_rules import question_was_shown
from survey_flow.models.answer_upsert import AnswerUpsertModel
from survey_flow.models.orm import Question, Response
from survey_flow.models.response_types import AnswerOut, SavedResult
from survey_flow.models.survey_types import AnswerValue
from survey_flow.routes.common import completion_precision, not_found, require_question, require_response

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_pair(session: Session, response_id: str, question_id: str) -> tuple[Response, Question]:
    response = require_response(session, response_id)
    question = require_question(session, question_id)
    if question.survey_id != response.survey_id:
        raise not_found("QUESTION_NOT_IN_SURVEY", f"question {question_id} is not part of this response's survey")
    return response, question


def _answer_out(response_id: str, value: AnswerValue, visible: bool) -> AnswerOut:
    return AnswerOut(
        response_id=response_id,
        question_id=value.question_id,
        text=value.text,
        number=value.number,
        boolean=value.boolean,
        option_ids=list(value.option_ids),
        rankings=dict(value.rankings),
        visible=visible,
    )


@router.put(
    "/responses/{response_id}/answers/{question_id}",
    response_model=SavedResult,
    summary="Save one answer",
)
def put_answer(
    response_id: str,
    question_id: str,
    body: AnswerUpsertModel,
    request: Request,
    session: Session = Depends(get_session),
) -> SavedResult:
    response, question = _require_pair(session, response_id, question_id)
    state = load_response_state(session, response)
    spec = to_question_spec(question)
    value = validate_answer(spec, body, state.questions_by_id)

    pre_visible = state.visible_ids()
    _row, created = upsert_answer(session, response, question, value)
    session.commit()

    post_state = state.with_answer(value)
    delta = compute_visibility_delta(pre_visible, post_state.visible_ids(), lambda qid: qid in post_state.answers)
    visible = question_was_shown(spec.id, post_state.questions, post_state.answers)
    completion = post_state.completion(completion_precision(request))
    event = publish(
        ANSWER_SAVED,
        {"response_id": response.response_id, "question_id": spec.id, "created": created},
    )
    logger.info(
        "answer_saved rs_id=%s qid=%s now_visible=%s now_hidden=%s percentage=%s",
        response.response_id,
        spec.id,
        delta.now_visible,
        delta.now_hidden,
        completion.percentage,
    )
    return SavedResult(
        saved=True,
        created=created,
        answer=_answer_out(response.response_id, value, visible),
        visibility_delta=delta,
        completion=completion,
        events=[event],
    )


@router.get(
    "/responses/{response_id}/answers/{question_id}",
    response_model=AnswerOut,
    summary="Read one stored answer, hidden or not",
)
def read_answer(response_id: str, question_id: str, session: Session = Depends(get_session)) -> AnswerOut:
    response, question = _require_pair(session, response_id, question_id)
    row = get_answer(session, response.response_id, question.question_id)
    if row is None:
        raise not_found("ANSWER_NOT_FOUND", f"no answer stored for question {question_id}")
    state = load_response_state(session, response)
    visible = question_was_shown(question.question_id, state.questions, state.answers)
    return _answer_out(response.response_id, to_answer_value(row), visible)


__all__ = ["router"]
