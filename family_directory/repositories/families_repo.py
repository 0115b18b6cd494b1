"""
Families repository - handles families table operations.
"""

from typing import Optional, Dict, Any

from family_directory.repositories.base import BaseRepository
from family_directory.models.domain.family import Family
from family_directory.core.logging import get_logger

logger = get_logger(__name__)


class FamiliesRepository(BaseRepository[Family]):
    """
    Repository for families table.
    """

    table_name = "families"
    model_class = Family
    default_order = ["created_at"]

    # Never written through update(): slug is fixed at signup
    IMMUTABLE_FIELDS = frozenset({"id", "slug", "created_at"})

    async def get_by_slug(self, slug: str) -> Optional[Family]:
        """
        Find family by URL slug.
        """
        try:
            response = self.table.select("*").eq("slug", slug).execute()
        except Exception as e:
            self._handle_error("get_by_slug", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def get_by_join_code(self, join_code: str) -> Optional[Family]:
        """
        Find active family by member join code.
        """
        try:
            response = (
                self.table
                .select("*")
                .eq("join_code", join_code.strip().upper())
                .eq("is_active", True)
                .execute()
            )
        except Exception as e:
            self._handle_error("get_by_join_code", e)

        if not response.data:
            return None
        return self._to_model(response.data[0])

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[Family]:
        mutable = {k: v for k, v in data.items() if k not in self.IMMUTABLE_FIELDS}
        dropped = set(data) - set(mutable)
        if dropped:
            logger.warning(f"Ignoring immutable family fields {sorted(dropped)} for {id}")
        return await super().update(id, mutable)

    async def update_category_settings(self, family_id: str, category_settings: Dict[str, Any]) -> Optional[Family]:
        """
        Replace the stored category settings blob.
        """
        return await self.update(family_id, {"category_settings": category_settings})
