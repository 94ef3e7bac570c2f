"""ORM models for surveys, questions, options, responses and answers.

Uniqueness rules that make answer saves idempotent live here as constraints:
one response per participant per survey, one answer per response and
question, one answer option row per answer and option.

Deleting a question cascades to its options, trigger links, answers, matrix
rows and conditional children.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Survey(Base):  # type: ignore[valid-type]
    __tablename__ = "surveys"

    survey_id = Column(String, primary_key=True)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    questions = relationship(
        "Question",
        back_populates="survey",
        cascade="all, delete-orphan",
        order_by="Question.order_position",
    )
    responses = relationship("Response", back_populates="survey", cascade="all, delete-orphan")


class Question(Base):  # type: ignore[valid-type]
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("survey_id", "order_position", name="uq_question_survey_order"),
    )

    question_id = Column(String, primary_key=True)
    survey_id = Column(ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    title = Column(String(500), nullable=False)
    order_position = Column(Integer, nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    capability = Column(String(32), nullable=False)
    scale_min = Column(Float, nullable=True)
    scale_max = Column(Float, nullable=True)
    min_selections = Column(Integer, nullable=True)
    max_selections = Column(Integer, nullable=True)
    # Conditional display
    conditional_parent_id = Column(ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=True)
    conditional_type = Column(String(16), nullable=False, default="scale")
    conditional_operator = Column(String(32), nullable=True)
    conditional_value = Column(Float, nullable=True)
    conditional_operator_2 = Column(String(32), nullable=True)
    conditional_value_2 = Column(Float, nullable=True)
    conditional_logic_type = Column(String(16), nullable=False, default="single")
    show_if_condition_met = Column(Boolean, nullable=False, default=True)
    # Matrix grouping
    matrix_parent_id = Column(ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=True)
    matrix_row_text = Column(String(255), nullable=True)

    survey = relationship("Survey", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="Option.order_position",
    )
    trigger_links = relationship(
        "QuestionConditionalOption",
        back_populates="question",
        cascade="all, delete-orphan",
    )
    answers = relationship("Answer", back_populates="question", cascade="all, delete")
    conditional_parent = relationship(
        "Question",
        foreign_keys=[conditional_parent_id],
        remote_side=[question_id],
        back_populates="conditional_children",
    )
    conditional_children = relationship(
        "Question",
        foreign_keys=[conditional_parent_id],
        back_populates="conditional_parent",
        cascade="all, delete",
    )
    matrix_parent = relationship(
        "Question",
        foreign_keys=[matrix_parent_id],
        remote_side=[question_id],
        back_populates="matrix_rows",
    )
    matrix_rows = relationship(
        "Question",
        foreign_keys=[matrix_parent_id],
        back_populates="matrix_parent",
        cascade="all, delete",
        order_by="Question.order_position",
    )


class Option(Base):  # type: ignore[valid-type]
    __tablename__ = "options"
    __table_args__ = (
        UniqueConstraint("question_id", "order_position", name="uq_option_question_order"),
    )

    option_id = Column(String, primary_key=True)
    question_id = Column(ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    option_text = Column(String(255), nullable=False)
    option_value = Column(String(100), nullable=True)
    order_position = Column(Integer, nullable=False)

    question = relationship("Question", back_populates="options")
    trigger_links = relationship(
        "QuestionConditionalOption",
        back_populates="option",
        cascade="all, delete",
    )
    answer_options = relationship("AnswerOption", back_populates="option", cascade="all, delete")


class QuestionConditionalOption(Base):  # type: ignore[valid-type]
    """Parent option whose selection activates an option-based condition."""

    __tablename__ = "question_conditional_options"
    __table_args__ = (
        UniqueConstraint("question_id", "option_id", name="uq_conditional_option"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    option_id = Column(ForeignKey("options.option_id", ondelete="CASCADE"), nullable=False)

    question = relationship("Question", back_populates="trigger_links")
    option = relationship("Option", back_populates="trigger_links")


class Response(Base):  # type: ignore[valid-type]
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("survey_id", "participant_email", name="uq_response_participant"),
    )

    response_id = Column(String, primary_key=True)
    survey_id = Column(ForeignKey("surveys.survey_id", ondelete="CASCADE"), nullable=False)
    participant_email = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    survey = relationship("Survey", back_populates="responses")
    answers = relationship("Answer", back_populates="response", cascade="all, delete-orphan")


class Answer(Base):  # type: ignore[valid-type]
    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_answer_response_question"),
    )

    answer_id = Column(String, primary_key=True)
    response_id = Column(ForeignKey("responses.response_id", ondelete="CASCADE"), nullable=False)
    question_id = Column(ForeignKey("questions.question_id", ondelete="CASCADE"), nullable=False)
    text_value = Column(Text, nullable=True)
    number_value = Column(Float, nullable=True)
    boolean_value = Column(Boolean, nullable=True)
    answered_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    response = relationship("Response", back_populates="answers")
    question = relationship("Question", back_populates="answers")
    answer_options = relationship(
        "AnswerOption",
        back_populates="answer",
        cascade="all, delete-orphan",
        order_by="AnswerOption.id",
    )


class AnswerOption(Base):  # type: ignore[valid-type]
    __tablename__ = "answer_options"
    __table_args__ = (
        UniqueConstraint("answer_id", "option_id", name="uq_answer_option"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    answer_id = Column(ForeignKey("answers.answer_id", ondelete="CASCADE"), nullable=False)
    option_id = Column(ForeignKey("options.option_id", ondelete="CASCADE"), nullable=False)
    ranking_order = Column(Integer, nullable=True)

    answer = relationship("Answer", back_populates="answer_options")
    option = relationship("Option", back_populates="answer_options")


__all__ = [
    "Base",
    "Survey",
    "Question",
    "Option",
    "QuestionConditionalOption",
    "Response",
    "Answer",
    "AnswerOption",
]
