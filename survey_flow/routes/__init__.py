"""APIRouter registration for the survey flow service."""

from __future__ import annotations

from fastapi import APIRouter

from survey_flow.routes.answers import router as answers_router
from survey_flow.routes.authoring import router as authoring_router
from survey_flow.routes.responses import router as responses_router

api_router = APIRouter()
api_router.include_router(authoring_router, tags=["Authoring"])
api_router.include_router(responses_router, tags=["Responses"])
api_router.include_router(answers_router, tags=["Answers"])

__all__ = ["api_router"]
