"""
Quiz result domain model.
Tracks how well the senior recognizes the family over time.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class QuizResult(BaseModel):
    """One completed recognition quiz."""

    id: str
    family_id: str
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    completed_at: Optional[datetime] = None

    @property
    def percentage(self) -> float:
        return round(100.0 * self.score / self.total_questions, 1)
