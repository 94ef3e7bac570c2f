"""Pydantic model for answer upsert payloads.

Declares the payload accepted by the answer write route without coupling it
to the route module. Which field is meaningful depends on the question's
capability; ``logic.validation`` decides.
"""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field


class AnswerUpsertModel(BaseModel):
    text: str | None = None
    number: float | None = None
    boolean: bool | None = None
    option_ids: List[str] = Field(default_factory=list)
    # option_id -> rank for ranking questions
    rankings: Dict[str, int] = Field(default_factory=dict)


__all__ = ["AnswerUpsertModel"]
