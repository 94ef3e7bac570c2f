"""Survey data access helpers."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy.orm import Session

from survey_flow.models.orm import Survey

logger = logging.getLogger(__name__)


def create_survey(session: Session, title: str) -> Survey:
    survey = Survey(survey_id=str(uuid.uuid4()), title=title.strip())
    session.add(survey)
    session.flush()
    logger.info("survey_created survey_id=%s", survey.survey_id)
    return survey


def get_survey(session: Session, survey_id: str) -> Survey | None:
    return session.get(Survey, str(survey_id))


__all__ = ["create_survey", "get_survey"]
