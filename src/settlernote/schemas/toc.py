"""Table of contents models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TocEntry(BaseModel):
    """One heading of a document outline."""

    id: str
    text: str
    level: int = Field(..., ge=1, le=6)
