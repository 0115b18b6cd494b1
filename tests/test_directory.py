"""
Unit tests for DirectoryService and the date helpers.
"""

from datetime import date

import pytest

from family_directory.core.exceptions import (
    PersonNotFoundError,
    ValidationError,
    InvalidCategoryError,
)
from family_directory.services.directory import (
    DirectoryService,
    compute_age,
    next_birthday,
    parse_birth_date,
)
from family_directory.services.person_cache import PersonCache

from conftest import FakePeopleRepository, make_person


class TestBirthDates:

    @pytest.mark.parametrize("text", [
        "January 1, 2000",
        "Jan 1, 2000",
        "January 1 2000",
        "2000-01-01",
        "01/01/2000",
        "1/1/2000",
        "  January   1,  2000 ",
    ])
    def test_accepted_formats(self, text):
        assert parse_birth_date(text) == date(2000, 1, 1)

    @pytest.mark.parametrize("text", [None, "", "   ", "sometime in the 50s", "13/45/2000"])
    def test_unparseable(self, text):
        assert parse_birth_date(text) is None

    def test_age_on_birthday(self):
        assert compute_age("January 1, 2000", None, date(2025, 1, 1)) == 25

    def test_age_day_before_birthday(self):
        assert compute_age("January 1, 2000", None, date(2024, 12, 31)) == 24

    def test_age_of_passed_person_is_none(self):
        assert compute_age("January 1, 2000", "March 3, 2020", date(2025, 1, 1)) is None

    def test_blank_passed_still_has_age(self):
        assert compute_age("January 1, 2000", "  ", date(2025, 1, 1)) == 25

    def test_age_unknown_birth_date(self):
        assert compute_age("long ago", None, date(2025, 1, 1)) is None

    def test_future_birth_date(self):
        assert compute_age("2030-01-01", None, date(2025, 1, 1)) is None

    def test_next_birthday_later_this_year(self):
        assert next_birthday(date(1950, 6, 15), date(2025, 1, 1)) == date(2025, 6, 15)

    def test_next_birthday_today(self):
        assert next_birthday(date(1950, 6, 15), date(2025, 6, 15)) == date(2025, 6, 15)

    def test_next_birthday_wraps_year(self):
        assert next_birthday(date(1950, 1, 1), date(2025, 6, 15)) == date(2026, 1, 1)

    def test_leap_day_birthday_in_common_year(self):
        assert next_birthday(date(2000, 2, 29), date(2025, 1, 1)) == date(2025, 3, 1)


@pytest.fixture
def repo():
    return FakePeopleRepository([
        make_person("gwen", category="grandchildren", born="March 5, 2010", sort_order=1),
        make_person("gary", category="grandchildren", born="2008-07-01", sort_order=5),
        make_person("gus", category="grandchildren", born="who knows", sort_order=0),
        make_person("gia", category="grandchildren", born="03/05/2010", sort_order=0),
        make_person("gil", category="grandchildren", sort_order=0),
        make_person("nina", category="caregivers", sort_order=2, location="Springfield"),
        make_person("carl", category="caregivers", sort_order=1, summary="Night nurse"),
        make_person("hank", category="husband", name="Hank", relationship="Husband"),
        make_person("zed", family_id="fam-2", category="grandchildren", born="2001-01-01",
                    name="Zed", location="Springfield"),
    ])


@pytest.fixture
def directory(repo):
    return DirectoryService(PersonCache(repo), clock=lambda: date(2025, 1, 1))


class TestDirectoryLists:

    @pytest.mark.asyncio
    async def test_list_all_is_tenant_scoped(self, directory):
        people = await directory.list_all("fam-1")

        assert {p.family_id for p in people} == {"fam-1"}
        assert "zed" not in [p.id for p in people]

    @pytest.mark.asyncio
    async def test_missing_tenant_is_rejected(self, directory):
        with pytest.raises(ValidationError):
            await directory.list_all("")
        with pytest.raises(ValidationError):
            await directory.search(None, "a")

    @pytest.mark.asyncio
    async def test_grandchildren_oldest_first_unparseable_last(self, directory):
        people = await directory.list_by_category("fam-1", "grandchildren")

        # gia and gwen share a birth date: sort order decides
        assert [p.id for p in people] == ["gary", "gia", "gwen", "gil", "gus"]

    @pytest.mark.asyncio
    async def test_other_categories_by_sort_order(self, directory):
        people = await directory.list_by_category("fam-1", "caregivers")

        assert [p.id for p in people] == ["carl", "nina"]

    @pytest.mark.asyncio
    async def test_unknown_category(self, directory):
        with pytest.raises(InvalidCategoryError):
            await directory.list_by_category("fam-1", "cousins")

    @pytest.mark.asyncio
    async def test_legacy_category_name_accepted(self, directory):
        people = await directory.list_by_category("fam-1", "friends")

        assert people == []

    @pytest.mark.asyncio
    async def test_everyone_category_then_name(self, directory):
        people = await directory.everyone("fam-1")

        assert people[0].id == "hank"
        assert [p.id for p in people[1:6]] == ["gary", "gia", "gil", "gus", "gwen"]
        assert [p.id for p in people[6:]] == ["carl", "nina"]


class TestDirectoryLookup:

    @pytest.mark.asyncio
    async def test_get_by_id(self, directory):
        person = await directory.get_by_id("zed")

        assert person.family_id == "fam-2"

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, directory):
        with pytest.raises(PersonNotFoundError):
            await directory.get_by_id("nobody")

    @pytest.mark.asyncio
    async def test_foreign_tenant_is_not_found(self, directory):
        with pytest.raises(PersonNotFoundError):
            await directory.get_for_tenant("fam-1", "zed")

    @pytest.mark.asyncio
    async def test_neighbors(self, directory):
        neighbors = await directory.neighbors("fam-1", "hank")

        assert neighbors["previous"] is None
        assert neighbors["next"].id == "gary"

    @pytest.mark.asyncio
    async def test_neighbors_of_foreign_person(self, directory):
        with pytest.raises(PersonNotFoundError):
            await directory.neighbors("fam-1", "zed")


class TestDirectorySearch:

    @pytest.mark.asyncio
    async def test_blank_query_returns_nothing(self, directory):
        assert await directory.search("fam-1", "   ") == []

    @pytest.mark.asyncio
    async def test_case_insensitive_over_fields(self, directory):
        by_location = await directory.search("fam-1", "SPRINGFIELD")
        by_summary = await directory.search("fam-1", "night")
        by_relationship = await directory.search("fam-1", "husb")

        assert [p.id for p in by_location] == ["nina"]
        assert [p.id for p in by_summary] == ["carl"]
        assert [p.id for p in by_relationship] == ["hank"]


class TestAgesAndBirthdays:

    @pytest.mark.asyncio
    async def test_list_item_carries_age(self, directory):
        person = await directory.get_by_id("gary")

        item = directory.to_list_item(person)

        assert item.age == 16
        assert item.category.value == "grandchildren"

    @pytest.mark.asyncio
    async def test_upcoming_birthdays(self):
        repo = FakePeopleRepository([
            make_person("a", born="January 10, 1950"),
            make_person("b", born="January 1, 1960"),
            make_person("c", born="December 31, 1940"),
            make_person("d", born="unknown"),
            make_person("e", born="February 2, 1930", passed="2020"),
        ])
        directory = DirectoryService(PersonCache(repo), clock=lambda: date(2025, 1, 1))

        birthdays = await directory.upcoming_birthdays("fam-1", limit=3)

        assert [b["id"] for b in birthdays] == ["b", "a", "c"]
        assert birthdays[0]["days_until"] == 0
        assert birthdays[0]["turning"] == 65
        assert birthdays[2]["next_birthday"] == date(2025, 12, 31)
