"""Visibility-related reusable types."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class VisibilityDelta(BaseModel):
    """Change in the visible set caused by one answer save.

    ``suppressed_answers`` lists newly hidden questions that still have a
    stored answer; those answers are kept but no longer counted.
    """

    now_visible: List[str] = Field(default_factory=list)
    now_hidden: List[str] = Field(default_factory=list)
    suppressed_answers: List[str] = Field(default_factory=list)


class VisibilityView(BaseModel):
    response_id: str
    visible_question_ids: List[str]
    visibility: Dict[str, bool]


__all__ = ["VisibilityDelta", "VisibilityView"]
