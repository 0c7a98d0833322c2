from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _strip_title(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("title must not be blank")
    return v2


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    start: datetime
    end: Optional[datetime] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)


class EventUpdate(BaseModel):
    """
    Partial update. Only fields that were explicitly set are applied,
    see changes().
    """
    title: Optional[str] = Field(None, min_length=1)
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _strip_title(v)

    def changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        # title and start cannot be cleared, only replaced
        for required in ("title", "start"):
            if changes.get(required, "") is None:
                del changes[required]
        return changes


class Event(BaseModel):
    id: str
    title: str
    start: datetime
    # not enforced to be >= start
    end: Optional[datetime] = None
    description: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
