# freestuff/schemas.py
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from freestuff.models import Category

class ScrapedItem(BaseModel):
    title: str
    description: Optional[str] = None
    category: Optional[Category] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    available_from: datetime
    available_until: Optional[datetime] = None
    url: Optional[str] = None
    time_details: Optional[str] = None
    source: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

class SourceResult(BaseModel):
    source: str
    count: int

class RunLogEntry(BaseModel):
    timestamp: str
    results: Optional[list[SourceResult]] = None
    error: Optional[str] = None
    success: bool

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)
