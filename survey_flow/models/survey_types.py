"""Plain snapshots of questions and answers used by the pure logic layer.

Repositories translate ORM rows into these models so the evaluator,
resolver and calculator run without a database session, and so tests and the
shared visibility corpus can build them directly.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from survey_flow.models.capability import Capability
from survey_flow.models.conditions import ConditionalType, LogicType


class OptionSpec(BaseModel):
    id: str
    option_text: str = ""
    option_value: Optional[str] = None
    order_position: int = 0


class QuestionSpec(BaseModel):
    id: str
    title: str = ""
    order_position: int = 0
    required: bool = False
    capability: Capability
    scale_min: Optional[float] = None
    scale_max: Optional[float] = None
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None
    options: List[OptionSpec] = Field(default_factory=list)
    # Conditional display; operators are kept as raw tokens so a malformed
    # stored value reaches the evaluator and fails closed.
    conditional_parent_id: Optional[str] = None
    conditional_type: ConditionalType = ConditionalType.SCALE
    operator: Optional[str] = None
    value: Optional[float] = None
    operator_2: Optional[str] = None
    value_2: Optional[float] = None
    logic_type: LogicType = LogicType.SINGLE
    show_if_condition_met: bool = True
    trigger_option_ids: List[str] = Field(default_factory=list)
    # Matrix grouping
    matrix_parent_id: Optional[str] = None
    matrix_row_text: Optional[str] = None

    @property
    def is_conditional(self) -> bool:
        return self.conditional_parent_id is not None

    @property
    def is_matrix_parent(self) -> bool:
        return self.capability is Capability.MATRIX_PARENT

    @property
    def is_matrix_row(self) -> bool:
        return self.matrix_parent_id is not None

    @property
    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]


class AnswerValue(BaseModel):
    """Content of one stored answer, shaped by the question's capability."""

    question_id: str
    text: Optional[str] = None
    number: Optional[float] = None
    boolean: Optional[bool] = None
    option_ids: List[str] = Field(default_factory=list)
    # option_id -> rank, ranking questions only
    rankings: Dict[str, int] = Field(default_factory=dict)

    def selected_option_ids(self) -> set[str]:
        return set(self.option_ids) | set(self.rankings.keys())


def order_key(question: QuestionSpec) -> tuple[int, str]:
    """Survey order: order_position, then id as a stable tie-break."""
    return (question.order_position, question.id)


__all__ = ["OptionSpec", "QuestionSpec", "AnswerValue", "order_key"]
