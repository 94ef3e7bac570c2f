"""Authoring endpoints: surveys, questions and the client bootstrap payload.

Question configuration is validated by ``logic.question_config`` inside
``repository_questions.create_question``; a rejected configuration surfaces
as a 422 problem carrying the rejection ``code``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from survey_flow.db.base import get_session
from survey_flow.logic.client_payload import build_client_payload
from survey_flow.logic.events import QUESTION_DELETED, publish
from survey_flow.logic.repository_questions import create_question, delete_question, load_question_specs
from survey_flow.logic.repository_surveys import create_survey
from survey_flow.models.authoring_types import QuestionCreate, SurveyCreate
from survey_flow.models.response_types import QuestionList, SurveyOut
from survey_flow.models.survey_types import QuestionSpec
from survey_flow.routes.common import completion_precision, require_question, require_survey

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/surveys", status_code=201, response_model=SurveyOut, summary="Create a survey")
def post_survey(body: SurveyCreate, session: Session = Depends(get_session)) -> SurveyOut:
    survey = create_survey(session, body.title)
    session.commit()
    return SurveyOut(survey_id=survey.survey_id, title=survey.title)


@router.post(
    "/surveys/{survey_id}/questions",
    status_code=201,
    response_model=QuestionSpec,
    summary="Create a question",
)
def post_question(
    survey_id: str,
    body: QuestionCreate,
    session: Session = Depends(get_session),
) -> QuestionSpec:
    survey = require_survey(session, survey_id)
    spec = create_question(session, survey, body)
    session.commit()
    return spec


@router.get("/surveys/{survey_id}/questions", response_model=QuestionList, summary="List questions in survey order")
def list_questions(survey_id: str, session: Session = Depends(get_session)) -> QuestionList:
    require_survey(session, survey_id)
    return QuestionList(survey_id=survey_id, questions=load_question_specs(session, survey_id))


@router.delete("/questions/{question_id}", summary="Delete a question and everything that depends on it")
def remove_question(question_id: str, session: Session = Depends(get_session)) -> dict:
    question = require_question(session, question_id)
    survey_id = question.survey_id
    removed = delete_question(session, question)
    session.commit()
    event = publish(QUESTION_DELETED, {"survey_id": survey_id, "question_ids": removed})
    return {"deleted": removed, "events": [event]}


@router.get("/surveys/{survey_id}/client-config", summary="Bootstrap payload for the browser conditional flow")
def client_config(survey_id: str, request: Request, session: Session = Depends(get_session)) -> dict:
    require_survey(session, survey_id)
    return build_client_payload(
        load_question_specs(session, survey_id),
        survey_id=survey_id,
        precision=completion_precision(request),
    )


__all__ = ["router"]
