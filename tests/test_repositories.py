"""
Unit tests for the repositories over a mocked Supabase client.
"""

from datetime import datetime, timezone

import pytest
from unittest.mock import MagicMock

from family_directory.core.exceptions import DatabaseError
from family_directory.infrastructure.supabase import SupabaseClient
from family_directory.models.domain.person import PersonCategory
from family_directory.repositories import FamiliesRepository, PeopleRepository
from family_directory.services.directory import DirectoryService
from family_directory.services.person_cache import PersonCache


def person_row(person_id, **overrides):
    row = {
        "id": person_id,
        "family_id": "fam-1",
        "name": "Ann",
        "category": "wife",
        "relationship": "Wife",
        "photos": None,
        "parent_ids": None,
        "sort_order": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def client():
    client = MagicMock()
    client.clean_for_json.side_effect = SupabaseClient.clean_for_json
    return client


class TestPeopleRepository:

    @pytest.mark.asyncio
    async def test_get_all_skips_orphans_and_folds_legacy(self, client):
        client.paginated_select.return_value = [
            person_row("a"),
            person_row("b", family_id=None),
            person_row("c", category="sons_in_law"),
        ]
        repo = PeopleRepository(client)

        people = await repo.get_all()

        assert [p.id for p in people] == ["a", "c"]
        assert people[0].photos == []
        assert people[0].sort_order == 0
        assert people[1].category == PersonCategory.PARTNERS
        client.paginated_select.assert_called_once_with("people", order_by=["category", "sort_order", "id"])

    @pytest.mark.asyncio
    async def test_get_all_skips_unreadable_rows(self, client):
        client.paginated_select.return_value = [
            person_row("a"),
            person_row("b", family_id="fam-2", category="cousins"),
            person_row("c", family_id="fam-2", eye_center_y=4.2),
        ]
        repo = PeopleRepository(client)

        people = await repo.get_all()

        assert [p.id for p in people] == ["a"]

    @pytest.mark.asyncio
    async def test_bad_row_does_not_break_other_families(self, client):
        client.paginated_select.return_value = [
            person_row("a"),
            person_row("b", family_id="fam-2", category="cousins"),
        ]
        directory = DirectoryService(PersonCache(PeopleRepository(client)))

        people = await directory.list_all("fam-1")

        assert [p.id for p in people] == ["a"]

    @pytest.mark.asyncio
    async def test_client_error_becomes_database_error(self, client):
        client.paginated_select.side_effect = RuntimeError("timeout")
        repo = PeopleRepository(client)

        with pytest.raises(DatabaseError) as exc_info:
            await repo.get_all()

        assert exc_info.value.details["operation"] == "people.get_all"

    @pytest.mark.asyncio
    async def test_update_missing_row_returns_none(self, client):
        client.table.return_value.update.return_value.eq.return_value.execute.return_value = MagicMock(data=[])
        repo = PeopleRepository(client)

        assert await repo.update("nobody", {"name": "X"}) is None

    @pytest.mark.asyncio
    async def test_create_serializes_values(self, client):
        table = client.table.return_value
        table.insert.return_value.execute.return_value = MagicMock(data=[person_row("new")])
        repo = PeopleRepository(client)

        person = await repo.create({"category": PersonCategory.WIFE, "name": "Ann"})

        assert person.id == "new"
        table.insert.assert_called_once_with({"category": "wife", "name": "Ann"})

    @pytest.mark.asyncio
    async def test_create_without_returned_row(self, client):
        client.table.return_value.insert.return_value.execute.return_value = MagicMock(data=[])
        repo = PeopleRepository(client)

        with pytest.raises(DatabaseError):
            await repo.create({"name": "Ann"})

    @pytest.mark.asyncio
    async def test_delete_reports_missing_row(self, client):
        client.table.return_value.delete.return_value.eq.return_value.execute.return_value = MagicMock(data=[])
        repo = PeopleRepository(client)

        assert await repo.delete("nobody") is False


class TestFamiliesRepository:

    @pytest.mark.asyncio
    async def test_update_drops_immutable_fields(self, client):
        table = client.table.return_value
        table.update.return_value.eq.return_value.execute.return_value = MagicMock(data=[{
            "id": "fam-1",
            "slug": "smiths",
            "name": "Smiths",
            "senior_name": "Rose",
            "category_settings": None,
        }])
        repo = FamiliesRepository(client)

        family = await repo.update("fam-1", {"slug": "hijack", "name": "Smiths"})

        table.update.assert_called_once_with({"name": "Smiths"})
        assert family.category_settings == {}

    def test_clean_for_json(self):
        when = datetime(2025, 1, 1, tzinfo=timezone.utc)

        cleaned = SupabaseClient.clean_for_json({
            "category": PersonCategory.CHILDREN,
            "completed_at": when,
            "photos": ("a", "b"),
            "name": "Ann",
        })

        assert cleaned == {
            "category": "children",
            "completed_at": "2025-01-01T00:00:00+00:00",
            "photos": ["a", "b"],
            "name": "Ann",
        }
