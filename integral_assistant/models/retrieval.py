"""
Retrieval Models for Integral Assistant

Value objects used by the question-answering pipeline: the time window a
question refers to, and the documents semantic search brings back.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TemporalType(str, Enum):
    """Relative time phrases the extractor recognises."""
    NONE = "none"
    TODAY = "today"
    TOMORROW = "tomorrow"
    YESTERDAY = "yesterday"
    THIS_WEEK = "this_week"
    NEXT_WEEK = "next_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    NEXT_MONTH = "next_month"
    LAST_MONTH = "last_month"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class TemporalIntent(BaseModel):
    """
    Time window implied by a query.

    Dates are inclusive day boundaries (00:00:00.000 to 23:59:59.999).
    Recomputed per query, never stored.
    """

    model_config = ConfigDict(frozen=True)

    type: TemporalType = TemporalType.NONE
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    original_query: str
    cleaned_query: str

    @model_validator(mode="after")
    def check_dates_match_type(self) -> "TemporalIntent":
        """Dates are present exactly when a phrase matched."""
        has_dates = self.start_date is not None and self.end_date is not None
        if (self.type == TemporalType.NONE) == has_dates:
            raise ValueError("start/end dates must be set iff type is not 'none'")
        if has_dates and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    @property
    def has_range(self) -> bool:
        return self.type != TemporalType.NONE


class DocumentType(str, Enum):
    """Kinds of record that are indexed for search."""
    TASK = "task"
    NOTE = "note"
    JOURNAL = "journal"


class DocumentMetadata(BaseModel):
    type: DocumentType
    title: Optional[str] = None
    due_date: Optional[date] = None
    entry_date: Optional[date] = None
    original_id: Optional[str] = None

    @property
    def effective_date(self) -> Optional[date]:
        """Date used when filtering by a time window."""
        return self.entry_date or self.due_date


class RetrievedDocument(BaseModel):
    """One search hit."""

    content: str
    metadata: DocumentMetadata
    similarity: float = Field(default=0.0, ge=-1.0, le=1.0)
