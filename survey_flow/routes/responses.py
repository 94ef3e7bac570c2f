"""Response endpoints: creation, live visibility, completion and submit.

Visibility and completion are recomputed from the stored answers on every
call; nothing derived is persisted apart from the completion timestamp.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from survey_flow.db.base import get_session
from survey_flow.logic.events import RESPONSE_COMPLETED, publish
from survey_flow.logic.repository_responses import get_or_create_response, mark_completed
from survey_flow.logic.response_state import load_response_state
from survey_flow.models.authoring_types import ResponseCreate
from survey_flow.models.response_types import CompletedResult, CompletionView, ResponseOut, VisibilityView
from survey_flow.routes.common import completion_precision, require_response, require_survey

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/surveys/{survey_id}/responses", response_model=ResponseOut, summary="Find or create a participant's response")
def post_response(
    survey_id: str,
    body: ResponseCreate,
    session: Session = Depends(get_session),
):
    survey = require_survey(session, survey_id)
    response, created = get_or_create_response(session, survey, body.participant_email)
    session.commit()
    out = ResponseOut(
        response_id=response.response_id,
        survey_id=response.survey_id,
        participant_email=response.participant_email,
        created=created,
        completed_at=response.completed_at,
    )
    return JSONResponse(out.model_dump(mode="json"), status_code=201 if created else 200)


@router.get("/responses/{response_id}/visibility", response_model=VisibilityView, summary="Current visibility per question")
def get_visibility(response_id: str, session: Session = Depends(get_session)) -> VisibilityView:
    response = require_response(session, response_id)
    state = load_response_state(session, response)
    return VisibilityView(
        response_id=response.response_id,
        visible_question_ids=state.visible_ids(),
        visibility=state.visibility(),
    )


@router.get("/responses/{response_id}/completion", response_model=CompletionView, summary="Completion over visible questions")
def get_completion(response_id: str, request: Request, session: Session = Depends(get_session)) -> CompletionView:
    response = require_response(session, response_id)
    state = load_response_state(session, response)
    return CompletionView(response_id=response.response_id, completion=state.completion(completion_precision(request)))


@router.post("/responses/{response_id}/complete", response_model=CompletedResult, summary="Submit a response")
def complete_response(response_id: str, request: Request, session: Session = Depends(get_session)) -> CompletedResult:
    """Mark the response complete unless a visible required question is unanswered.

    Required questions hidden by conditional logic are not checked.
    """
    response = require_response(session, response_id)
    report = load_response_state(session, response).completion(completion_precision(request))
    if not report.is_complete:
        logger.info(
            "response_incomplete response_id=%s missing=%s",
            response.response_id,
            report.missing_required,
        )
        raise HTTPException(
            status_code=409,
            detail={
                "title": "Response Incomplete",
                "detail": "required questions are unanswered",
                "code": "REQUIRED_QUESTIONS_UNANSWERED",
                "missing_required": report.missing_required,
            },
        )
    first_completion = response.completed_at is None
    completed_at = mark_completed(session, response)
    session.commit()
    if first_completion:
        publish(RESPONSE_COMPLETED, {"response_id": response.response_id, "percentage": report.percentage})
    return CompletedResult(response_id=response.response_id, completed_at=completed_at, completion=report)


__all__ = ["router"]
