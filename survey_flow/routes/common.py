"""Shared helpers for route handlers: 404 problems and config lookups."""

from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from survey_flow.logic.completion import DEFAULT_PRECISION
from survey_flow.logic.repository_questions import get_question
from survey_flow.logic.repository_responses import get_response
from survey_flow.logic.repository_surveys import get_survey
from survey_flow.models.orm import Question, Response, Survey


def not_found(code: str, detail: str) -> HTTPException:
    return HTTPException(status_code=404, detail={"title": "Not Found", "detail": detail, "code": code})


def completion_precision(request: Request) -> int:
    config = getattr(request.app.state, "config", None)
    return config.completion.precision if config is not None else DEFAULT_PRECISION


def require_survey(session: Session, survey_id: str) -> Survey:
    survey = get_survey(session, survey_id)
    if survey is None:
        raise not_found("SURVEY_NOT_FOUND", f"survey {survey_id} does not exist")
    return survey


def require_question(session: Session, question_id: str) -> Question:
    question = get_question(session, question_id)
    if question is None:
        raise not_found("QUESTION_NOT_FOUND", f"question {question_id} does not exist")
    return question


def require_response(session: Session, response_id: str) -> Response:
    response = get_response(session, response_id)
    if response is None:
        raise not_found("RESPONSE_NOT_FOUND", f"response {response_id} does not exist")
    return response


__all__ = [
    "not_found",
    "completion_precision",
    "require_survey",
    "require_question",
    "require_response",
]
