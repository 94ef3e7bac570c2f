"""Pydantic request bodies for survey authoring and response creation."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from survey_flow.models.capability import Capability
from survey_flow.models.conditions import ConditionalType, LogicType


class SurveyCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)


class OptionCreate(BaseModel):
    option_text: str = Field(min_length=1, max_length=255)
    option_value: Optional[str] = None
    order_position: Optional[int] = Field(default=None, ge=1)


class QuestionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    capability: Capability
    required: bool = False
    order_position: Optional[int] = Field(default=None, ge=1)
    scale_min: Optional[float] = None
    scale_max: Optional[float] = None
    min_selections: Optional[int] = None
    max_selections: Optional[int] = None
    options: List[OptionCreate] = Field(default_factory=list)
    conditional_parent_id: Optional[str] = None
    conditional_type: ConditionalType = ConditionalType.SCALE
    operator: Optional[str] = None
    value: Optional[float] = None
    operator_2: Optional[str] = None
    value_2: Optional[float] = None
    logic_type: LogicType = LogicType.SINGLE
    show_if_condition_met: bool = True
    trigger_option_ids: List[str] = Field(default_factory=list)
    matrix_parent_id: Optional[str] = None
    matrix_row_text: Optional[str] = Field(default=None, max_length=255)


class ResponseCreate(BaseModel):
    participant_email: str = Field(min_length=3, max_length=255)

    @field_validator("participant_email")
    @classmethod
    def email_must_look_like_address(cls, v: str) -> str:
        value = v.strip().lower()
        if "@" not in value or value.startswith("@") or value.endswith("@"):
            raise ValueError("participant_email must be an email address")
        return value


__all__ = ["SurveyCreate", "OptionCreate", "QuestionCreate", "ResponseCreate"]
