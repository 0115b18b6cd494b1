"""
Family members repository - handles family_members table operations.
Members are read through on every call, never cached.
"""

from datetime import datetime, timezone
from typing import Optional, List

from family_directory.repositories.base import BaseRepository
from family_directory.models.domain.family import FamilyMember


class MembersRepository(BaseRepository[FamilyMember]):
    """
    Repository for family_members table.
    """

    table_name = "family_members"
    model_class = FamilyMember

    async def list_for_family(self, family_id: str, include_inactive: bool = False) -> List[FamilyMember]:
        """
        Get members of one family ordered by name.
        """
        try:
            query = self.table.select("*").eq("family_id", family_id)
            if not include_inactive:
                query = query.eq("is_active", True)
            response = query.order("name").execute()
        except Exception as e:
            self._handle_error("list_for_family", e)

        return [self._to_model(row) for row in response.data or []]

    async def get_by_email(self, family_id: str, email: str) -> Optional[FamilyMember]:
        """
        Find member by email within a family (emails are unique per family only).
        """
        try:
            response = (
                self.table
                .select("*")
                .eq("family_id", family_id)
                .eq("email", email.strip().lower())
                .execute()
            )
        except Exception as e:
            self._handle_error("get_by_email", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def touch_login(self, member_id: str) -> Optional[FamilyMember]:
        """
        Record a successful login.
        """
        return await self.update(member_id, {"last_login_at": datetime.now(timezone.utc)})
