from typing import Optional

from pydantic import BaseModel, Field


class DateCount(BaseModel):
    date: str
    count: int = Field(..., ge=0)


class CategoryCount(BaseModel):
    category: Optional[str] = Field(None, description="None for uncategorised notes")
    count: int = Field(..., ge=0)


class ReportSummary(BaseModel):
    total: int
    completed: int
    incomplete: int
    completion_rate: float = Field(..., ge=0, le=1)
    by_date: list[DateCount]
    by_category: list[CategoryCount]
