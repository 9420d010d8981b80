# app/ticket/schemas.py
from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

_camel = {"alias_generator": to_camel, "populate_by_name": True}


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1)
    is_completed: bool | None = None

    model_config = _camel


class TicketTitleUpdate(BaseModel):
    title: str = Field(..., min_length=1)

    model_config = _camel


class TicketCompletedUpdate(BaseModel):
    is_completed: bool

    model_config = _camel


class TicketChildrenAdd(BaseModel):
    child_ids: list[int]

    model_config = _camel


class TicketParentSet(BaseModel):
    parent_id: int

    model_config = _camel


class TicketOut(BaseModel):
    id: int
    title: str
    is_completed: bool
    parent_id: int | None = None
    children: list[TicketOut] = Field(default_factory=list)

    model_config = {"from_attributes": True, **_camel}
