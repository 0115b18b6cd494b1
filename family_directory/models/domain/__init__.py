"""
Domain models - core business entities.

These are the source of truth for data structures.
All other layers (repositories, services, routers) derive from these.
"""

from family_directory.models.domain.person import (
    Person,
    PersonListItem,
    PersonCategory,
    CATEGORY_ORDER,
    DEFAULT_CATEGORY_LABELS,
)
from family_directory.models.domain.family import (
    Family,
    FamilyMember,
    MemberRole,
    CategorySetting,
    CategorySettings,
)
from family_directory.models.domain.home import HomeView, CategorySummary, BackgroundPhoto
from family_directory.models.domain.quiz import QuizResult

__all__ = [
    'Person',
    'PersonListItem',
    'PersonCategory',
    'CATEGORY_ORDER',
    'DEFAULT_CATEGORY_LABELS',
    'Family',
    'FamilyMember',
    'MemberRole',
    'CategorySetting',
    'CategorySettings',
    'HomeView',
    'CategorySummary',
    'BackgroundPhoto',
    'QuizResult',
]
