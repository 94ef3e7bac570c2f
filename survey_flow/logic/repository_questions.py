"""Question data access helpers for authoring.

Translates between ORM rows and ``QuestionSpec`` snapshots, and runs every
new question through ``question_config.validate_question_config`` before it
is written, so stored configurations are always valid when evaluated.
"""

from __future__ import annotations

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from survey_flow.logic.question_config import ConfigurationError, validate_question_config
from survey_flow.models.authoring_types import QuestionCreate
from survey_flow.models.capability import Capability
from survey_flow.models.conditions import ConditionalType, LogicType
from survey_flow.models.orm import Option, Question, QuestionConditionalOption, Survey
from survey_flow.models.survey_types import OptionSpec, QuestionSpec

logger = logging.getLogger(__name__)


def to_question_spec(row: Question) -> QuestionSpec:
    """Snapshot an ORM question (options and trigger links loaded) as a QuestionSpec."""
    return QuestionSpec(
        id=row.question_id,
        title=row.title,
        order_position=row.order_position,
        required=bool(row.is_required),
        capability=Capability(row.capability),
        scale_min=row.scale_min,
        scale_max=row.scale_max,
        min_selections=row.min_selections,
        max_selections=row.max_selections,
        options=[
            OptionSpec(
                id=o.option_id,
                option_text=o.option_text,
                option_value=o.option_value,
                order_position=o.order_position,
            )
            for o in row.options
        ],
        conditional_parent_id=row.conditional_parent_id,
        conditional_type=ConditionalType(row.conditional_type or ConditionalType.SCALE.value),
        operator=row.conditional_operator,
        value=row.conditional_value,
        operator_2=row.conditional_operator_2,
        value_2=row.conditional_value_2,
        logic_type=LogicType(row.conditional_logic_type or LogicType.SINGLE.value),
        show_if_condition_met=bool(row.show_if_condition_met),
        trigger_option_ids=sorted(link.option_id for link in row.trigger_links),
        matrix_parent_id=row.matrix_parent_id,
        matrix_row_text=row.matrix_row_text,
    )


def load_question_rows(session: Session, survey_id: str) -> List[Question]:
    stmt = (
        select(Question)
        .where(Question.survey_id == str(survey_id))
        .options(selectinload(Question.options), selectinload(Question.trigger_links))
        .order_by(Question.order_position, Question.question_id)
    )
    return list(session.scalars(stmt))


def load_question_specs(session: Session, survey_id: str) -> List[QuestionSpec]:
    """All questions of a survey, in survey order."""
    return [to_question_spec(row) for row in load_question_rows(session, survey_id)]


def get_question(session: Session, question_id: str) -> Question | None:
    return session.get(Question, str(question_id))


def next_order_position(session: Session, survey_id: str) -> int:
    current = session.scalar(
        select(func.max(Question.order_position)).where(Question.survey_id == str(survey_id))
    )
    return int(current or 0) + 1


def _build_spec(payload: QuestionCreate, order_position: int) -> QuestionSpec:
    question_id = str(uuid.uuid4())
    options = [
        OptionSpec(
            id=str(uuid.uuid4()),
            option_text=opt.option_text,
            option_value=opt.option_value,
            order_position=opt.order_position or index,
        )
        for index, opt in enumerate(payload.options, start=1)
    ]
    return QuestionSpec(
        id=question_id,
        title=payload.title,
        order_position=order_position,
        required=payload.required,
        capability=payload.capability,
        scale_min=payload.scale_min,
        scale_max=payload.scale_max,
        min_selections=payload.min_selections,
        max_selections=payload.max_selections,
        options=options,
        conditional_parent_id=payload.conditional_parent_id,
        conditional_type=payload.conditional_type,
        operator=payload.operator,
        value=payload.value,
        operator_2=payload.operator_2,
        value_2=payload.value_2,
        logic_type=payload.logic_type,
        show_if_condition_met=payload.show_if_condition_met,
        trigger_option_ids=[str(o) for o in payload.trigger_option_ids],
        matrix_parent_id=payload.matrix_parent_id,
        matrix_row_text=payload.matrix_row_text,
    )


def create_question(session: Session, survey: Survey, payload: QuestionCreate) -> QuestionSpec:
    """Validate and persist a new question with its options and trigger links.

    Raises ConfigurationError when the configuration is invalid; nothing is
    added to the session in that case.
    """
    existing = load_question_rows(session, survey.survey_id)
    taken = {row.order_position for row in existing}
    if payload.order_position is not None and payload.order_position in taken:
        raise ConfigurationError("ORDER_POSITION_TAKEN", f"order_position {payload.order_position} is already used")
    order_position = payload.order_position or next_order_position(session, survey.survey_id)

    spec = _build_spec(payload, order_position)
    others = {row.question_id: to_question_spec(row) for row in existing}
    validate_question_config(spec, others)
    if len({o.order_position for o in spec.options}) != len(spec.options):
        raise ConfigurationError("OPTION_ORDER_DUPLICATE", "option order positions must be unique")

    by_id = {row.question_id: row for row in existing}
    question = Question(
        question_id=spec.id,
        survey=survey,
        title=spec.title,
        order_position=spec.order_position,
        is_required=spec.required,
        capability=spec.capability.value,
        scale_min=spec.scale_min,
        scale_max=spec.scale_max,
        min_selections=spec.min_selections,
        max_selections=spec.max_selections,
        conditional_parent=by_id.get(str(spec.conditional_parent_id)) if spec.is_conditional else None,
        conditional_type=spec.conditional_type.value,
        conditional_operator=spec.operator,
        conditional_value=spec.value,
        conditional_operator_2=spec.operator_2,
        conditional_value_2=spec.value_2,
        conditional_logic_type=spec.logic_type.value,
        show_if_condition_met=spec.show_if_condition_met,
        matrix_parent=by_id.get(str(spec.matrix_parent_id)) if spec.is_matrix_row else None,
        matrix_row_text=spec.matrix_row_text,
    )
    for opt in spec.options:
        Option(
            option_id=opt.id,
            question=question,
            option_text=opt.option_text,
            option_value=opt.option_value,
            order_position=opt.order_position,
        )
    if spec.is_conditional:
        parent_options = {o.option_id: o for o in by_id[str(spec.conditional_parent_id)].options}
        for option_id in spec.trigger_option_ids:
            QuestionConditionalOption(question=question, option=parent_options[option_id])
    session.add(question)
    session.flush()
    logger.info(
        "question_created survey_id=%s qid=%s capability=%s conditional=%s",
        survey.survey_id,
        spec.id,
        spec.capability.value,
        spec.is_conditional,
    )
    return spec


def dependent_question_ids(question: Question) -> List[str]:
    """Ids removed along with ``question``: itself, matrix rows, conditional children."""
    ids = [question.question_id]
    ids.extend(row.question_id for row in question.matrix_rows)
    ids.extend(child.question_id for child in question.conditional_children)
    return ids


def delete_question(session: Session, question: Question) -> List[str]:
    """Delete a question; the ORM cascades to options, links, answers and dependants."""
    removed = dependent_question_ids(question)
    session.delete(question)
    session.flush()
    logger.info("question_deleted qid=%s removed=%s", question.question_id, removed)
    return removed


__all__ = [
    "to_question_spec",
    "load_question_rows",
    "load_question_specs",
    "get_question",
    "next_order_position",
    "create_question",
    "dependent_question_ids",
    "delete_question",
]
