"""
People repository - handles people table operations.
"""

from typing import Dict, List

from pydantic import ValidationError as PydanticValidationError

from family_directory.repositories.base import BaseRepository
from family_directory.models.domain.person import Person
from family_directory.core.logging import get_logger, timed_query

logger = get_logger(__name__)


class PeopleRepository(BaseRepository[Person]):
    """
    Repository for people table.

    Reads of the whole table feed the person cache; nothing else in the
    request path queries people directly.
    """

    table_name = "people"
    model_class = Person
    default_order = ["category", "sort_order", "id"]

    async def get_all(self) -> List[Person]:
        """Load every person that belongs to a family. Unreadable rows are skipped."""
        try:
            with timed_query(self.logger, "select all", self.table_name):
                rows = self.client.paginated_select(self.table_name, order_by=self.default_order)
        except Exception as e:
            self._handle_error("get_all", e)

        orphans = [row.get("id") for row in rows if not row.get("family_id")]
        if orphans:
            logger.warning(f"Skipping {len(orphans)} people without a family: {orphans[:5]}")

        people = []
        for row in rows:
            if not row.get("family_id"):
                continue
            try:
                people.append(self._to_model(row))
            except PydanticValidationError as e:
                logger.warning(f"Skipping unreadable person row {row.get('id')}: {e.errors()[0]['msg']}")
        return people

    def _to_model(self, data: Dict) -> Person:
        """
        Convert database row to Person model.
        """
        return Person(
            id=data["id"],
            family_id=data.get("family_id"),
            name=data.get("name") or "Unknown",
            full_name=data.get("full_name"),
            category=data.get("category"),
            relationship=data.get("relationship") or "",
            born=data.get("born"),
            passed=data.get("passed"),
            location=data.get("location"),
            phone=data.get("phone"),
            email=data.get("email"),
            spouse_id=data.get("spouse_id"),
            parent_ids=data.get("parent_ids"),
            photo_data=data.get("photo_data"),
            thumbnail_data=data.get("thumbnail_data"),
            photos=data.get("photos"),
            eye_center_y=data.get("eye_center_y"),
            summary=data.get("summary"),
            sort_order=data.get("sort_order") or 0,
            voice_note_data=data.get("voice_note_data"),
            last_visit=data.get("last_visit"),
            visit_history=data.get("visit_history"),
        )
