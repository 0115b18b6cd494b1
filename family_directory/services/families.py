"""
FamilyService - tenant lookup, signup and member reads.

Families and members are small and rarely read, so nothing here is cached:
every call goes to the record store.
"""

from typing import Optional, List

from family_directory.core.exceptions import FamilyNotFoundError, ValidationError
from family_directory.core.logging import get_logger
from family_directory.core.slug import generate_slug, is_valid_slug, generate_join_code
from family_directory.models.domain.family import Family, FamilyMember

logger = get_logger(__name__)


class FamilyService:
    """
    Args:
        families_repository: FamiliesRepository
        members_repository: MembersRepository
    """

    def __init__(self, families_repository, members_repository):
        self._families = families_repository
        self._members = members_repository

    async def get(self, family_id: str) -> Family:
        family = await self._families.get_by_id(family_id)
        if family is None:
            raise FamilyNotFoundError(family_id)
        return family

    async def get_by_slug(self, slug: str) -> Family:
        family = await self._families.get_by_slug(slug.strip().lower())
        if family is None or not family.is_active:
            raise FamilyNotFoundError(slug)
        return family

    async def get_by_join_code(self, join_code: str) -> Family:
        family = await self._families.get_by_join_code(join_code)
        if family is None:
            raise FamilyNotFoundError(join_code)
        return family

    async def create_family(
        self,
        name: str,
        senior_name: str,
        slug: Optional[str] = None,
        password_hash: Optional[str] = None,
        welcome_message: Optional[str] = None,
    ) -> Family:
        """
        Sign up a new family.

        The slug is derived from the name when not given and can never change
        afterwards.

        Raises:
            ValidationError: Blank name, malformed or taken slug
        """
        name = (name or "").strip()
        senior_name = (senior_name or "").strip()
        if not name:
            raise ValidationError("Family name is required", field="name")
        if not senior_name:
            raise ValidationError("Senior name is required", field="senior_name")

        slug = (slug or generate_slug(name)).strip().lower()
        if not is_valid_slug(slug):
            raise ValidationError(f"Invalid slug '{slug}'", field="slug", code="INVALID_SLUG")
        if await self._families.get_by_slug(slug) is not None:
            raise ValidationError(f"Slug '{slug}' is already taken", field="slug", code="SLUG_TAKEN")

        family = await self._families.create({
            "slug": slug,
            "name": name,
            "senior_name": senior_name,
            "password_hash": password_hash,
            "join_code": generate_join_code(),
            "welcome_message": welcome_message,
            "category_settings": {},
            "is_active": True,
        })
        logger.info(f"[Families] Created family {family.id} ({slug})")
        return family

    async def list_members(self, family_id: str, include_inactive: bool = False) -> List[FamilyMember]:
        await self.get(family_id)
        return await self._members.list_for_family(family_id, include_inactive=include_inactive)

    async def get_member_by_email(self, family_id: str, email: str) -> Optional[FamilyMember]:
        return await self._members.get_by_email(family_id, email)
