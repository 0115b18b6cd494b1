"""
Home view domain models.
The per-family aggregate rendered as the category buttons on the home screen.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

from family_directory.models.domain.person import PersonCategory


class BackgroundPhoto(BaseModel):
    """Photo used as a category button background."""

    image: str
    eye_center_y: float = Field(..., ge=0.0, le=1.0)

    class Config:
        frozen = True


class CategorySummary(BaseModel):
    """One category button."""

    id: PersonCategory
    label: str
    description: str
    count: int = Field(0, ge=0)
    hidden: bool = False
    background_photos: List[BackgroundPhoto] = Field(default_factory=list)
    single_person_id: Optional[str] = Field(
        None, description="Set when the category has exactly one member"
    )

    class Config:
        frozen = True


class HomeView(BaseModel):
    """Memoized home screen aggregate for one family."""

    family_id: str
    senior_name: str
    categories: List[CategorySummary]
    total_people: int = Field(0, ge=0)
    generation: str = Field(..., description="Staleness marker '<boot>.<people>.<settings>'")
    generated_at: datetime

    def category(self, category: PersonCategory) -> CategorySummary:
        for summary in self.categories:
            if summary.id == category:
                return summary
        raise KeyError(category)

    class Config:
        frozen = True
