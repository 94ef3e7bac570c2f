"""Response data access helpers.

One response per participant per survey; creation is find-or-create so a
participant re-entering the survey resumes the same response.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from survey_flow.models.orm import Response, Survey

logger = logging.getLogger(__name__)


def find_response(session: Session, survey_id: str, participant_email: str) -> Response | None:
    stmt = select(Response).where(
        Response.survey_id == str(survey_id),
        Response.participant_email == participant_email,
    )
    return session.scalars(stmt).first()


def get_or_create_response(session: Session, survey: Survey, participant_email: str) -> Tuple[Response, bool]:
    """Return ``(response, created)`` for the participant.

    A concurrent create for the same participant loses on the unique
    constraint and falls back to reading the winner's row.
    """
    existing = find_response(session, survey.survey_id, participant_email)
    if existing is not None:
        return existing, False
    response = Response(response_id=str(uuid.uuid4()), survey=survey, participant_email=participant_email)
    try:
        with session.begin_nested():
            session.add(response)
    except IntegrityError:
        # Drop the rolled-back row from the loaded collection so it is not re-flushed
        session.expire(survey, ["responses"])
        logger.warning(
            "response_create_conflict survey_id=%s; reusing existing response",
            survey.survey_id,
        )
        winner = find_response(session, survey.survey_id, participant_email)
        if winner is None:
            raise
        return winner, False
    logger.info("response_created survey_id=%s response_id=%s", survey.survey_id, response.response_id)
    return response, True


def get_response(session: Session, response_id: str) -> Response | None:
    return session.get(Response, str(response_id))


def mark_completed(session: Session, response: Response) -> datetime:
    """Stamp completion time; an already completed response keeps its first stamp."""
    if response.completed_at is None:
        response.completed_at = datetime.now(timezone.utc)
        session.flush()
        logger.info("response_completed response_id=%s", response.response_id)
    return response.completed_at


__all__ = ["find_response", "get_or_create_response", "get_response", "mark_completed"]
