"""Answer data access helpers.

Answers are keyed by (response, question): saving twice updates the same
row, last write wins. The answer id is derived from that key, so two
concurrent first saves collide on the primary key and the loser retries as
an update instead of creating a duplicate.

Answers of questions that later become hidden are never deleted here.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from survey_flow.models.orm import Answer, AnswerOption, Question, Response
from survey_flow.models.survey_types import AnswerValue

logger = logging.getLogger(__name__)


def answer_id_for(response_id: str, question_id: str) -> str:
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"survey-flow:{response_id}:{question_id}"))


def to_answer_value(row: Answer) -> AnswerValue:
    links = list(row.answer_options)
    ranked = {link.option_id: int(link.ranking_order) for link in links if link.ranking_order is not None}
    return AnswerValue(
        question_id=row.question_id,
        text=row.text_value,
        number=row.number_value,
        boolean=row.boolean_value,
        option_ids=[] if ranked else [link.option_id for link in links],
        rankings=ranked,
    )


def load_answers(session: Session, response_id: str) -> Dict[str, AnswerValue]:
    """Every stored answer of a response keyed by question id, hidden ones included."""
    stmt = (
        select(Answer)
        .where(Answer.response_id == str(response_id))
        .options(selectinload(Answer.answer_options))
    )
    return {row.question_id: to_answer_value(row) for row in session.scalars(stmt)}


def get_answer(session: Session, response_id: str, question_id: str) -> Answer | None:
    return session.get(Answer, answer_id_for(response_id, question_id))


def _apply_value(answer: Answer, value: AnswerValue) -> None:
    answer.text_value = value.text
    answer.number_value = value.number
    answer.boolean_value = value.boolean

    wanted: Dict[str, int | None] = {oid: None for oid in value.option_ids}
    wanted.update({oid: rank for oid, rank in value.rankings.items()})
    current = {link.option_id: link for link in answer.answer_options}
    # Reuse rows for options that stay selected; replacing them would insert
    # the new row before deleting the old one and trip the unique constraint.
    for option_id, link in current.items():
        if option_id not in wanted:
            answer.answer_options.remove(link)
        else:
            link.ranking_order = wanted[option_id]
    for option_id, rank in wanted.items():
        if option_id not in current:
            answer.answer_options.append(AnswerOption(option_id=option_id, ranking_order=rank))


def upsert_answer(
    session: Session,
    response: Response,
    question: Question,
    value: AnswerValue,
) -> Tuple[Answer, bool]:
    """Insert or update the answer for (response, question).

    Returns ``(answer, created)``. ``value`` must already be validated
    against the question's capability.
    """
    existing = get_answer(session, response.response_id, question.question_id)
    if existing is not None:
        _apply_value(existing, value)
        session.flush()
        logger.info("answer_upsert rs_id=%s qid=%s path=update", response.response_id, question.question_id)
        return existing, False

    answer = Answer(
        answer_id=answer_id_for(response.response_id, question.question_id),
        response=response,
        question=question,
    )
    _apply_value(answer, value)
    try:
        with session.begin_nested():
            session.add(answer)
    except IntegrityError:
        logger.warning(
            "answer_upsert_conflict rs_id=%s qid=%s; retrying as update",
            response.response_id,
            question.question_id,
        )
        session.expire(response, ["answers"])
        session.expire(question, ["answers"])
        winner = get_answer(session, response.response_id, question.question_id)
        if winner is None:
            raise
        _apply_value(winner, value)
        session.flush()
        return winner, False
    logger.info("answer_upsert rs_id=%s qid=%s path=insert", response.response_id, question.question_id)
    return answer, True


__all__ = [
    "answer_id_for",
    "to_answer_value",
    "load_answers",
    "get_answer",
    "upsert_answer",
]
