"""
Family (tenant) and FamilyMember domain models.
"""

from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from family_directory.models.domain.person import PersonCategory


class MemberRole(str, Enum):
    """What a family member may do in the admin screens."""
    ADMIN = "admin"
    EDITOR = "editor"


class CategorySetting(BaseModel):
    """Display override for one category."""

    label: Optional[str] = Field(None, max_length=60, description="Custom label, default label when empty")
    hidden: Optional[bool] = Field(None, description="Hide the category button on the home screen")

    @field_validator("label", mode="before")
    @classmethod
    def blank_label_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    class Config:
        extra = "forbid"
        frozen = True


# Fixed-shape settings: one optional override per category
CategorySettings = Dict[PersonCategory, CategorySetting]


class Family(BaseModel):
    """A tenant: one senior and everyone around them."""

    id: str = Field(..., description="Unique family ID")
    slug: str = Field(..., description="URL slug, immutable after signup")
    name: str = Field(..., description="Display name, e.g. 'Demo Family'")
    senior_name: str = Field(..., description="Name of the senior the app serves")
    password_hash: Optional[str] = None
    join_code: Optional[str] = None
    welcome_message: Optional[str] = None
    category_settings: Dict[str, Any] = Field(
        default_factory=dict,
        description="Raw stored settings blob, see services.category_settings"
    )
    created_at: Optional[datetime] = None
    is_active: bool = True

    @field_validator("category_settings", mode="before")
    @classmethod
    def null_settings_to_empty(cls, v):
        return v if v is not None else {}

    class Config:
        frozen = True


class FamilyMember(BaseModel):
    """Someone who can edit the family's data. Never cached."""

    id: str
    family_id: str
    email: str
    name: str
    password_hash: str
    role: MemberRole = MemberRole.EDITOR
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None
    is_active: bool = True

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_admin(self) -> bool:
        return self.role == MemberRole.ADMIN
