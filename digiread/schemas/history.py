"""
Reading History Schemas

A highlight is a text selection in the epub plus the colour it was marked
with. Sending remove=true drops the highlights whose selection matches.
"""

from pydantic import BaseModel, Field


class Highlight(BaseModel):
    selection: str = Field(..., min_length=1, description="epub CFI range")
    fill: str = Field(..., min_length=1, examples=["#fde047"])


class HistoryUpdate(BaseModel):
    book_id: int = Field(..., ge=1)
    last_location: str | None = Field(default=None, max_length=500)
    highlights: list[Highlight] = Field(default_factory=list)
    remove: bool = False


class HistoryResponse(BaseModel):
    book_id: int
    last_location: str | None = None
    highlights: list[Highlight] = Field(default_factory=list)
