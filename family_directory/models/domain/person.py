"""
Person domain model.
Represents someone the senior should remember, scoped to one family.
"""

from typing import Optional, List, Tuple
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from family_directory.core.logging import get_logger

logger = get_logger(__name__)


class PersonCategory(str, Enum):
    """Closed set of person categories, in home screen display order."""
    HUSBAND = "husband"
    WIFE = "wife"
    CHILDREN = "children"
    GRANDCHILDREN = "grandchildren"
    PARTNERS = "partners"
    CAREGIVERS = "caregivers"
    OTHER = "other"

    @property
    def display_index(self) -> int:
        return CATEGORY_ORDER.index(self)

    @property
    def is_spouse(self) -> bool:
        return self in SPOUSE_CATEGORIES

    @property
    def is_descendant(self) -> bool:
        return self in DESCENDANT_CATEGORIES


CATEGORY_ORDER: Tuple[PersonCategory, ...] = tuple(PersonCategory)

# Their photo doubles as the installable app icon
SPOUSE_CATEGORIES = frozenset({PersonCategory.HUSBAND, PersonCategory.WIFE})

# Listed oldest first instead of by sort order
DESCENDANT_CATEGORIES = frozenset({
    PersonCategory.CHILDREN,
    PersonCategory.GRANDCHILDREN,
    PersonCategory.PARTNERS,
})

DEFAULT_CATEGORY_LABELS = {
    PersonCategory.HUSBAND: "Husband",
    PersonCategory.WIFE: "Wife",
    PersonCategory.CHILDREN: "Children",
    PersonCategory.GRANDCHILDREN: "Grandchildren",
    PersonCategory.PARTNERS: "Partners",
    PersonCategory.CAREGIVERS: "Caregivers",
    PersonCategory.OTHER: "Friends & Neighbors",
}

# (singular, plural) used in home view descriptions
CATEGORY_NOUNS = {
    PersonCategory.CHILDREN: ("Child", "Children"),
    PersonCategory.GRANDCHILDREN: ("Grandchild", "Grandchildren"),
    PersonCategory.PARTNERS: ("Partner", "Partners"),
    PersonCategory.CAREGIVERS: ("Caregiver", "Caregivers"),
    PersonCategory.OTHER: ("Person", "People"),
}

# Older rows were written with categories that have since been folded
LEGACY_CATEGORIES = {
    "daughters_in_law": PersonCategory.PARTNERS,
    "sons_in_law": PersonCategory.PARTNERS,
    "friends": PersonCategory.OTHER,
}


def parse_category(value) -> Optional[PersonCategory]:
    """Resolve a category value, folding legacy names. None when it is not part of the enumeration."""
    if isinstance(value, PersonCategory):
        return value
    if isinstance(value, str):
        value = LEGACY_CATEGORIES.get(value, value)
    try:
        return PersonCategory(value)
    except ValueError:
        return None


class Person(BaseModel):
    """Full person record as stored in the people table."""

    id: str = Field(..., description="Unique person ID")
    family_id: str = Field(..., description="Owning family (tenant)")

    # Basic info
    name: str
    full_name: Optional[str] = None
    category: PersonCategory
    relationship: str = Field(..., description="Free-text label, e.g. 'Granddaughter'")

    # Dates are free text as typed by the family, e.g. "January 1, 2000"
    born: Optional[str] = None
    passed: Optional[str] = None

    # Contact
    location: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

    # Links to other people by ID
    spouse_id: Optional[str] = None
    parent_ids: List[str] = Field(default_factory=list)

    # Photo set: primary + derived thumbnail + additional photos
    photo_data: Optional[str] = Field(None, description="Primary photo (data URI)")
    thumbnail_data: Optional[str] = Field(None, description="Thumbnail of the primary photo")
    photos: List[str] = Field(default_factory=list, description="Additional photos, no duplicates")
    eye_center_y: Optional[float] = Field(None, ge=0.0, le=1.0, description="Eye line for crop framing")

    # Extras
    summary: Optional[str] = None
    sort_order: int = 0
    voice_note_data: Optional[str] = None

    # Visit tracking
    last_visit: Optional[str] = None
    visit_history: List[str] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def fold_legacy_category(cls, v):
        if isinstance(v, str) and v in LEGACY_CATEGORIES:
            logger.debug(f"Folding legacy category '{v}'")
            return LEGACY_CATEGORIES[v]
        return v

    @field_validator("parent_ids", "photos", "visit_history", mode="before")
    @classmethod
    def null_list_to_empty(cls, v):
        return v if v is not None else []

    @property
    def gallery(self) -> List[str]:
        """Conceptual gallery: primary first, then additional photos, deduplicated."""
        ordered = []
        for image in ([self.photo_data] if self.photo_data else []) + list(self.photos):
            if image not in ordered:
                ordered.append(image)
        return ordered

    @property
    def best_image(self) -> Optional[str]:
        """Thumbnail when available, full primary photo otherwise."""
        return self.thumbnail_data or self.photo_data

    class Config:
        frozen = True
        use_enum_values = False


class PersonListItem(BaseModel):
    """Lightweight person for list views (thumbnail instead of full photos)."""

    id: str
    name: str
    relationship: str
    category: PersonCategory
    born: Optional[str] = None
    passed: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    sort_order: int = 0
    thumbnail_data: Optional[str] = None
    eye_center_y: Optional[float] = None
    has_voice_note: bool = False
    age: Optional[int] = None

    @classmethod
    def from_person(cls, person: Person, age: Optional[int] = None) -> "PersonListItem":
        return cls(
            id=person.id,
            name=person.name,
            relationship=person.relationship,
            category=person.category,
            born=person.born,
            passed=person.passed,
            location=person.location,
            summary=person.summary,
            sort_order=person.sort_order,
            thumbnail_data=person.best_image,
            eye_center_y=person.eye_center_y,
            has_voice_note=bool(person.voice_note_data),
            age=age,
        )
