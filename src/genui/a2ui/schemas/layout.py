from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field

from .base import DataSchema, Number


class CardData(DataSchema):
    title: str = Field(min_length=1)
    body: Optional[str] = None
    child: Optional[str] = None


class StackData(DataSchema):
    children: List[str] = Field(min_length=1)
    direction: Optional[Literal["vertical", "horizontal"]] = None
    gap: Optional[Number] = Field(default=None, ge=0)


CARD_EXAMPLE = {"title": "Summary", "body": "Three things happened today."}
STACK_EXAMPLE = {"children": ["card-1", "map-1"], "direction": "vertical"}
