"""
PersonCache - in-memory projection of the people table.

Every read in the request path is served from one snapshot of all people
(all families). The snapshot is loaded lazily, shared by concurrent readers
while it loads (singleflight), and discarded wholesale after any write.

Invalidation is an explicit generation counter: a population that started
under an older generation is handed to the readers that were already waiting
for it, but it is never installed as the current snapshot.

Writes are routed through this class so that invalidation happens right after
the record store acknowledged the change, and never after a failed write.
"""

import asyncio
import time
import uuid
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Callable, Iterable, Tuple

from family_directory.core.exceptions import (
    PersonNotFoundError,
    ValidationError,
    InvalidCategoryError,
)
from family_directory.core.logging import get_logger, log_error
from family_directory.models.domain.person import Person, parse_category

logger = get_logger(__name__)

REQUIRED_PERSON_FIELDS = ("family_id", "name", "category", "relationship")

# Only the creator decides these
IMMUTABLE_PERSON_FIELDS = ("category", "family_id")


def cache_order(person: Person) -> Tuple[int, int, str]:
    """Stable (category, sort order) ordering of the snapshot."""
    return (person.category.display_index, person.sort_order, person.id)


class PersonSnapshot:
    """Immutable view of all people at one cache generation."""

    def __init__(self, generation: int, people: Iterable[Person]):
        self.generation = generation
        self.people: Tuple[Person, ...] = tuple(people)
        self._by_id: Dict[str, Person] = {p.id: p for p in self.people}
        self._by_family: Dict[str, List[Person]] = {}
        for person in self.people:
            self._by_family.setdefault(person.family_id, []).append(person)

    def get(self, person_id: str) -> Optional[Person]:
        return self._by_id.get(person_id)

    def for_family(self, family_id: str) -> List[Person]:
        """People of one family, in snapshot order."""
        return list(self._by_family.get(family_id, ()))

    def __len__(self) -> int:
        return len(self.people)


class PersonCache:
    """
    Read-optimized cache of all Person records.

    One instance is created by the composition root and injected into the
    services that need it.
    """

    def __init__(self, repository):
        """
        Args:
            repository: PeopleRepository (or anything with the same async CRUD)
        """
        self._repository = repository
        self._generation = 0
        # Distinguishes generation numbers of this process from those of earlier ones
        self.boot_id = uuid.uuid4().hex[:12]
        self._snapshot: Optional[PersonSnapshot] = None
        self._inflight: Optional[asyncio.Task] = None
        self._inflight_generation = -1
        self._listeners: List[Callable[[int], None]] = []
        self.populations = 0

    # ==================== State ====================

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    def add_invalidation_listener(self, listener: Callable[[int], None]):
        """Register a callback run with the new generation after every invalidation."""
        self._listeners.append(listener)

    # ==================== Reads ====================

    async def load(self) -> PersonSnapshot:
        """
        Return the current snapshot, populating it from the record store if needed.

        Concurrent callers during a population share the same in-flight load.
        If the load fails, every waiter gets the error and the next call retries.
        """
        snapshot = self._snapshot
        if snapshot is not None:
            return snapshot

        task = self._inflight
        if task is None or self._inflight_generation != self._generation:
            task = asyncio.get_running_loop().create_task(self._populate(self._generation))
            task.add_done_callback(self._population_done)
            self._inflight = task
            self._inflight_generation = self._generation

        # Shielded: a cancelled reader must not abort the population for the others
        return await asyncio.shield(task)

    async def get(self, person_id: str) -> Optional[Person]:
        return (await self.load()).get(person_id)

    async def _populate(self, generation: int) -> PersonSnapshot:
        self.populations += 1
        started = time.perf_counter()
        logger.debug(f"[PersonCache] Populating generation {generation}")

        people = await self._repository.get_all()
        snapshot = PersonSnapshot(generation, sorted(people, key=cache_order))

        duration_ms = (time.perf_counter() - started) * 1000
        if generation == self._generation:
            self._snapshot = snapshot
            logger.info(
                f"[PersonCache] Loaded {len(snapshot)} people "
                f"(generation {generation}, {duration_ms:.1f}ms)"
            )
        else:
            logger.info(
                f"[PersonCache] Discarding population of generation {generation}, "
                f"cache moved to {self._generation}"
            )
        return snapshot

    def _population_done(self, task: asyncio.Task):
        if self._inflight is task:
            self._inflight = None
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"[PersonCache] Population failed, cache stays empty: {error}")

    # ==================== Invalidation ====================

    def invalidate(self, reason: str = "") -> int:
        """
        Discard the snapshot. The next load() repopulates from the record store.

        Returns:
            The new generation
        """
        self._generation += 1
        self._snapshot = None
        logger.info(f"[PersonCache] Invalidated -> generation {self._generation} {reason}".rstrip())

        for listener in list(self._listeners):
            try:
                listener(self._generation)
            except Exception as e:
                log_error(logger, e, context="PersonCache listener")
        return self._generation

    # ==================== Writes ====================

    async def create_person(self, data: Dict[str, Any]) -> Person:
        """
        Insert a person and invalidate.

        Raises:
            ValidationError: Required field missing or category unknown
            DatabaseError: Record store rejected the insert (cache untouched)
        """
        insert_data = {k: v for k, v in data.items() if k != "id"}

        missing = [
            field for field in REQUIRED_PERSON_FIELDS
            if not str(insert_data.get(field) or "").strip()
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                field=missing[0]
            )

        category = parse_category(insert_data["category"])
        if category is None:
            raise InvalidCategoryError(str(insert_data["category"]))
        insert_data["category"] = category
        insert_data.setdefault("sort_order", 0)

        person = await self._repository.create(insert_data)
        self.invalidate(f"(created person {person.id})")
        return person

    async def update_person(self, person_id: str, updates: Dict[str, Any]) -> Person:
        """
        Apply a partial update and invalidate.

        Category and family cannot change; passing the current value is allowed
        so that full-form submissions work.

        Raises:
            PersonNotFoundError: No such person (cache untouched)
            ValidationError: Attempt to change an immutable field
            DatabaseError: Record store rejected the update (cache untouched)
        """
        current = await self.get(person_id)
        if current is None:
            raise PersonNotFoundError(person_id)

        changes = {k: v for k, v in updates.items() if k != "id"}
        for field in IMMUTABLE_PERSON_FIELDS:
            if field not in changes:
                continue
            value = changes.pop(field)
            if field == "category":
                value = parse_category(value)
            if value != getattr(current, field):
                raise ValidationError(f"{field} cannot be changed", field=field)

        if not changes:
            return current

        person = await self._repository.update(person_id, changes)
        if person is None:
            raise PersonNotFoundError(person_id)

        self.invalidate(f"(updated person {person_id})")
        return person

    async def delete_person(self, person_id: str) -> bool:
        """
        Delete a person and invalidate.

        Raises:
            PersonNotFoundError: Nothing was deleted (cache untouched)
            DatabaseError: Record store rejected the delete (cache untouched)
        """
        deleted = await self._repository.delete(person_id)
        if not deleted:
            raise PersonNotFoundError(person_id)

        self.invalidate(f"(deleted person {person_id})")
        return True

    async def record_visit(self, person_id: str, visit_date: Optional[str] = None) -> Person:
        """Append a visit to the person's history and set it as the last visit."""
        current = await self.get(person_id)
        if current is None:
            raise PersonNotFoundError(person_id)

        visit_date = visit_date or datetime.now(timezone.utc).isoformat()
        return await self.update_person(person_id, {
            "last_visit": visit_date,
            "visit_history": list(current.visit_history) + [visit_date],
        })
