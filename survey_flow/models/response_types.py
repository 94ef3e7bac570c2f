"""Pydantic models for response bodies."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from survey_flow.logic.completion import CompletionReport
from survey_flow.models.survey_types import QuestionSpec
from survey_flow.models.visibility import VisibilityDelta, VisibilityView


class SurveyOut(BaseModel):
    survey_id: str
    title: str


class QuestionList(BaseModel):
    survey_id: str
    questions: List[QuestionSpec]


class ResponseOut(BaseModel):
    response_id: str
    survey_id: str
    participant_email: str
    created: bool
    completed_at: Optional[datetime] = None


class AnswerOut(BaseModel):
    response_id: str
    question_id: str
    text: Optional[str] = None
    number: Optional[float] = None
    boolean: Optional[bool] = None
    option_ids: List[str] = []
    rankings: Dict[str, int] = {}
    # False when the answer is kept as history for a now-hidden question
    visible: bool


class SavedResult(BaseModel):
    saved: bool
    created: bool
    answer: AnswerOut
    visibility_delta: VisibilityDelta
    completion: CompletionReport
    events: list | None = None


class CompletionView(BaseModel):
    response_id: str
    completion: CompletionReport


class CompletedResult(BaseModel):
    response_id: str
    completed_at: datetime
    completion: CompletionReport


__all__ = [
    "SurveyOut",
    "QuestionList",
    "ResponseOut",
    "AnswerOut",
    "SavedResult",
    "CompletionView",
    "CompletedResult",
    "VisibilityDelta",
    "VisibilityView",
]
