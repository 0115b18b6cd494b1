"""
People API - Pydantic Models
Request models for people endpoints.

Photo columns are not part of PersonCreate/PersonUpdate: every photo change
goes through the photo endpoints so the thumbnail stays derived from the
primary photo.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
import re

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def _validate_email(v):
    if v is not None and v != '':
        if not EMAIL_PATTERN.match(v):
            raise ValueError('Email must be a valid address')
    return v or None


class PersonCreate(BaseModel):
    name: str = Field(..., min_length=1)
    full_name: Optional[str] = None
    category: str
    relationship: str = Field(..., min_length=1)
    born: Optional[str] = None
    passed: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    spouse_id: Optional[str] = None
    parent_ids: List[str] = Field(default_factory=list)
    summary: Optional[str] = None
    sort_order: int = 0
    voice_note_data: Optional[str] = None
    photo: Optional[str] = Field(None, description="Initial primary photo (data URI)")

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _validate_email(v)


class PersonUpdate(BaseModel):
    name: Optional[str] = None
    full_name: Optional[str] = None
    category: Optional[str] = Field(None, description="Accepted only when unchanged")
    relationship: Optional[str] = None
    born: Optional[str] = None
    passed: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    spouse_id: Optional[str] = None
    parent_ids: Optional[List[str]] = None
    summary: Optional[str] = None
    sort_order: Optional[int] = None
    voice_note_data: Optional[str] = None
    eye_center_y: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        return _validate_email(v)

    class Config:
        extra = "forbid"


class PhotoRequest(BaseModel):
    image: str = Field(..., description="Photo as data URI")


class PhotoOrderRequest(BaseModel):
    photos: List[str] = Field(..., description="Whole gallery, primary first")


class VisitRequest(BaseModel):
    visit_date: Optional[str] = None
