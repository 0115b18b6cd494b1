"""
DirectoryService - tenant-scoped read façade over the person cache.

Every list/search operation takes the family (tenant) ID and filters by it
before anything is returned. Reads never touch the record store directly.

Ordering rules:
- list_all / search: cache order (category, sort order)
- list_by_category: descendants oldest first (unknown birth dates last),
  everyone else by sort order
- everyone / neighbors: category display order, then name
"""

from datetime import date, datetime
from typing import Optional, List, Callable, Dict, Any, Tuple, Union

from family_directory.core.exceptions import (
    PersonNotFoundError,
    ValidationError,
    InvalidCategoryError,
)
from family_directory.core.logging import get_logger
from family_directory.models.domain.person import (
    Person,
    PersonCategory,
    PersonListItem,
    parse_category,
)

logger = get_logger(__name__)

# Formats families actually type into the "born" field
BIRTH_DATE_FORMATS = (
    "%B %d, %Y",   # January 1, 2000
    "%b %d, %Y",   # Jan 1, 2000
    "%B %d %Y",    # January 1 2000
    "%b %d %Y",    # Jan 1 2000
    "%Y-%m-%d",    # 2000-01-01
    "%m/%d/%Y",    # 01/01/2000, 1/1/2000
)

SEARCH_FIELDS = ("name", "relationship", "location", "summary")


def parse_birth_date(value: Optional[str]) -> Optional[date]:
    """Parse a free-text birth date, None when it cannot be understood."""
    if not value or not value.strip():
        return None
    text = " ".join(value.strip().split())
    for fmt in BIRTH_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # ISO timestamps, e.g. "2000-01-01T00:00:00Z"
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def compute_age(born: Optional[str], passed: Optional[str], today: date) -> Optional[int]:
    """
    Age in whole years on `today`.

    None when the person has passed, the birth date is missing or unparseable,
    or the birth date lies in the future.
    """
    if passed and passed.strip():
        return None
    birth = parse_birth_date(born)
    if birth is None:
        return None
    age = today.year - birth.year - ((today.month, today.day) < (birth.month, birth.day))
    return age if age >= 0 else None


def next_birthday(birth: date, today: date) -> date:
    """Next occurrence of the birthday on or after today (Feb 29 falls on Mar 1)."""
    def in_year(year: int) -> date:
        try:
            return date(year, birth.month, birth.day)
        except ValueError:
            return date(year, 3, 1)

    candidate = in_year(today.year)
    return candidate if candidate >= today else in_year(today.year + 1)


def _birth_order_key(person: Person) -> Tuple[int, date, int, str]:
    birth = parse_birth_date(person.born)
    if birth is None:
        return (1, date.max, person.sort_order, person.id)
    return (0, birth, person.sort_order, person.id)


def _sort_order_key(person: Person) -> Tuple[int, str]:
    return (person.sort_order, person.id)


def _everyone_key(person: Person) -> Tuple[int, str, str]:
    return (person.category.display_index, person.name.casefold(), person.id)


class DirectoryService:
    """
    Façade for tenant-scoped person reads.

    Args:
        person_cache: Shared PersonCache instance
        clock: Returns "today"; injectable for age and birthday calculations
    """

    def __init__(self, person_cache, clock: Callable[[], date] = None):
        self._cache = person_cache
        self._clock = clock or date.today

    @staticmethod
    def _require_tenant(family_id: Optional[str]) -> str:
        if not family_id or not str(family_id).strip():
            raise ValidationError("family_id is required", field="family_id")
        return family_id

    async def _family_people(self, family_id: str) -> List[Person]:
        family_id = self._require_tenant(family_id)
        snapshot = await self._cache.load()
        return snapshot.for_family(family_id)

    # ==================== Lists ====================

    async def list_all(self, family_id: str) -> List[Person]:
        """All people of the family in (category, sort order) order."""
        return await self._family_people(family_id)

    async def list_by_category(
        self,
        family_id: str,
        category: Union[PersonCategory, str]
    ) -> List[Person]:
        """People of one category, ordered per the category's rule."""
        parsed = parse_category(category)
        if parsed is None:
            raise InvalidCategoryError(str(category))

        people = [p for p in await self._family_people(family_id) if p.category == parsed]
        if parsed.is_descendant:
            return sorted(people, key=_birth_order_key)
        return sorted(people, key=_sort_order_key)

    async def everyone(self, family_id: str) -> List[Person]:
        """Everyone page: category display order, then name."""
        return sorted(await self._family_people(family_id), key=_everyone_key)

    # ==================== Single person ====================

    async def get_by_id(self, person_id: str) -> Person:
        """
        Get a person by globally unique ID.

        Callers at the boundary must check person.family_id against the session
        before exposing it; get_for_tenant does that check.
        """
        person = (await self._cache.load()).get(person_id)
        if person is None:
            raise PersonNotFoundError(person_id)
        return person

    async def get_for_tenant(self, family_id: str, person_id: str) -> Person:
        """Get a person, treating other families' people as not found."""
        family_id = self._require_tenant(family_id)
        person = await self.get_by_id(person_id)
        if person.family_id != family_id:
            logger.warning(f"[Directory] Person {person_id} requested from foreign family {family_id}")
            raise PersonNotFoundError(person_id)
        return person

    async def neighbors(self, family_id: str, person_id: str) -> Dict[str, Optional[Person]]:
        """Previous and next person in the everyone ordering (swipe navigation)."""
        ordered = await self.everyone(family_id)
        ids = [p.id for p in ordered]
        if person_id not in ids:
            raise PersonNotFoundError(person_id)
        index = ids.index(person_id)
        return {
            "previous": ordered[index - 1] if index > 0 else None,
            "next": ordered[index + 1] if index < len(ordered) - 1 else None,
        }

    # ==================== Search ====================

    async def search(self, family_id: str, query: Optional[str]) -> List[Person]:
        """
        Case-insensitive substring search over name, relationship, location
        and summary. A blank query returns nothing, not everyone.
        """
        family_id = self._require_tenant(family_id)
        needle = (query or "").strip().casefold()
        if not needle:
            return []

        results = []
        for person in await self._family_people(family_id):
            for field in SEARCH_FIELDS:
                value = getattr(person, field)
                if value and needle in value.casefold():
                    results.append(person)
                    break
        return results

    # ==================== Ages & birthdays ====================

    def age_of(self, person: Person) -> Optional[int]:
        """Age computed at read time, never stored."""
        return compute_age(person.born, person.passed, self._clock())

    def to_list_item(self, person: Person) -> PersonListItem:
        return PersonListItem.from_person(person, age=self.age_of(person))

    async def upcoming_birthdays(self, family_id: str, limit: int = 3) -> List[Dict[str, Any]]:
        """
        Living people with a known birth date, soonest birthday first.
        """
        today = self._clock()
        upcoming = []
        for person in await self._family_people(family_id):
            if person.passed and person.passed.strip():
                continue
            birth = parse_birth_date(person.born)
            if birth is None:
                continue
            upcoming_date = next_birthday(birth, today)
            upcoming.append({
                "id": person.id,
                "name": person.name,
                "born": person.born,
                "thumbnail_data": person.best_image,
                "next_birthday": upcoming_date,
                "days_until": (upcoming_date - today).days,
                "turning": upcoming_date.year - birth.year,
            })

        upcoming.sort(key=lambda b: (b["days_until"], b["name"].casefold(), b["id"]))
        return upcoming[:limit] if limit else upcoming
