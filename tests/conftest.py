"""
Shared fixtures: in-memory record store fakes and builders.
"""

import asyncio
import base64
import itertools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

import pytest

from family_directory.core.exceptions import DatabaseError
from family_directory.models.domain.family import Family, FamilyMember
from family_directory.models.domain.person import Person
from family_directory.models.domain.quiz import QuizResult


def data_image(tag: str) -> str:
    """Distinct data-bearing image string; payload is not a real picture."""
    return "data:image/jpeg;base64," + base64.b64encode(tag.encode()).decode()


IMAGE_A = data_image("photo-a")
IMAGE_B = data_image("photo-b")
IMAGE_C = data_image("photo-c")


def make_person(person_id: str, family_id: str = "fam-1", **overrides) -> Person:
    data = {
        "id": person_id,
        "family_id": family_id,
        "name": person_id.title(),
        "category": "other",
        "relationship": "Friend",
    }
    data.update(overrides)
    return Person(**data)


def make_family(family_id: str = "fam-1", **overrides) -> Family:
    data = {
        "id": family_id,
        "slug": family_id,
        "name": f"Family {family_id}",
        "senior_name": "Grandma Rose",
        "join_code": "ABC234",
    }
    data.update(overrides)
    return Family(**data)


class FakePeopleRepository:
    """
    People table in memory.

    Counts full-table fetches, can hold get_all() on a gate and can be told
    to fail reads or writes the way the Supabase client would.
    """

    def __init__(self, people=()):
        self.rows: Dict[str, Person] = {p.id: p for p in people}
        self.fetches = 0
        self.writes = 0
        self.fail_reads = False
        self.fail_writes = False
        self.gate: Optional[asyncio.Event] = None
        self._ids = itertools.count(1)

    async def get_all(self) -> List[Person]:
        self.fetches += 1
        await asyncio.sleep(0)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_reads:
            raise DatabaseError("connection reset", operation="people.get_all")
        return list(self.rows.values())

    async def get_by_id(self, id: str) -> Optional[Person]:
        return self.rows.get(id)

    async def create(self, data: Dict[str, Any]) -> Person:
        if self.fail_writes:
            raise DatabaseError("insert rejected", operation="people.create")
        person = Person(id=f"new-{next(self._ids)}", **data)
        self.rows[person.id] = person
        self.writes += 1
        return person

    async def update(self, id: str, data: Dict[str, Any]) -> Optional[Person]:
        if self.fail_writes:
            raise DatabaseError("update rejected", operation="people.update")
        current = self.rows.get(id)
        if current is None:
            return None
        updated = Person.model_validate({**current.model_dump(), **data})
        self.rows[id] = updated
        self.writes += 1
        return updated

    async def delete(self, id: str) -> bool:
        if self.fail_writes:
            raise DatabaseError("delete rejected", operation="people.delete")
        self.writes += 1
        return self.rows.pop(id, None) is not None


class FakeFamiliesRepository:

    def __init__(self, families=()):
        self.rows: Dict[str, Family] = {f.id: f for f in families}
        self.fail_writes = False
        self._ids = itertools.count(1)

    async def get_by_id(self, id: str) -> Optional[Family]:
        return self.rows.get(id)

    async def get_by_slug(self, slug: str) -> Optional[Family]:
        return next((f for f in self.rows.values() if f.slug == slug), None)

    async def get_by_join_code(self, join_code: str) -> Optional[Family]:
        code = join_code.strip().upper()
        return next((f for f in self.rows.values() if f.join_code == code and f.is_active), None)

    async def create(self, data: Dict[str, Any]) -> Family:
        family = Family(id=f"fam-new-{next(self._ids)}", **data)
        self.rows[family.id] = family
        return family

    async def update_category_settings(self, family_id: str, category_settings: Dict[str, Any]) -> Optional[Family]:
        if self.fail_writes:
            raise DatabaseError("update rejected", operation="families.update")
        current = self.rows.get(family_id)
        if current is None:
            return None
        updated = current.model_copy(update={"category_settings": category_settings})
        self.rows[family_id] = updated
        return updated


class FakeMembersRepository:

    def __init__(self, members=()):
        self.rows: List[FamilyMember] = list(members)

    async def list_for_family(self, family_id: str, include_inactive: bool = False) -> List[FamilyMember]:
        return [
            m for m in self.rows
            if m.family_id == family_id and (include_inactive or m.is_active)
        ]

    async def get_by_email(self, family_id: str, email: str) -> Optional[FamilyMember]:
        email = email.strip().lower()
        return next((m for m in self.rows if m.family_id == family_id and m.email == email), None)


class FakeQuizRepository:

    def __init__(self):
        self.rows: List[QuizResult] = []
        self._ids = itertools.count(1)

    async def create(self, data: Dict[str, Any]) -> QuizResult:
        result = QuizResult(id=f"quiz-{next(self._ids)}", **data)
        self.rows.append(result)
        return result

    async def list_for_family(self, family_id: str, limit: int = 50) -> List[QuizResult]:
        results = [r for r in self.rows if r.family_id == family_id]
        results.sort(key=lambda r: r.completed_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return results[:limit]


class FakeThumbnailer:
    """Deterministic thumbnails; `fail` makes generate() return None."""

    def __init__(self):
        self.calls: List[str] = []
        self.fail = False

    def generate(self, image: str) -> Optional[str]:
        self.calls.append(image)
        if self.fail:
            return None
        return thumbnail_of(image)


def thumbnail_of(image: str) -> str:
    return image.replace("data:image/jpeg", "data:image/thumb", 1)


class FakeIconNotifier:

    def __init__(self):
        self.invalidated: List[str] = []

    async def invalidate(self, family_id: str) -> bool:
        self.invalidated.append(family_id)
        return True


@pytest.fixture
def people_repo():
    return FakePeopleRepository()


@pytest.fixture
def families_repo():
    return FakeFamiliesRepository([make_family("fam-1"), make_family("fam-2", senior_name="Grandpa Joe")])


@pytest.fixture
def thumbnailer():
    return FakeThumbnailer()


@pytest.fixture
def icon_notifier():
    return FakeIconNotifier()
