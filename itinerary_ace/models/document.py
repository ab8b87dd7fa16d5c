from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class DocumentIn(BaseModel):
    title: str
    body: str = ""

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("title cannot be empty")
        return value.strip()


class DocumentUpdateIn(BaseModel):
    title: Optional[str] = None
    body: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("title cannot be empty")
        return value.strip() if value is not None else None

    @model_validator(mode="after")
    def _at_least_one(self) -> "DocumentUpdateIn":
        if self.title is None and self.body is None:
            raise ValueError("at least one field must be provided")
        return self


class DocumentOut(DocumentIn):
    id: int
    created_at: datetime
    updated_at: datetime
