"""Nominee persistence collaborator."""

from typing import Protocol

import attrs
from attrs import define, field

from ..models.categories import Category
from ..models.nominee import NomineeEntity


class NomineeStore(Protocol):
    """Key-value store for nominees, keyed by id and by (name, category, ceremony year)."""

    async def get(self, subject_id: int) -> NomineeEntity | None: ...

    async def put(self, entity: NomineeEntity) -> NomineeEntity: ...

    async def upsert(self, entity: NomineeEntity) -> NomineeEntity: ...

    async def find(
        self, name: str, category: Category | str, ceremony_year: int
    ) -> NomineeEntity | None: ...

    async def all(self) -> list[NomineeEntity]: ...


@define
class InMemoryNomineeStore:
    """Single-process store. One record per natural key; ids are assigned on insert."""

    _by_id: dict[int, NomineeEntity] = field(factory=dict, init=False)
    _ids: dict[tuple[str, str, int], int] = field(factory=dict, init=False)
    _next_id: int = field(default=1, init=False)

    async def get(self, subject_id: int) -> NomineeEntity | None:
        return self._by_id.get(subject_id)

    async def put(self, entity: NomineeEntity) -> NomineeEntity:
        """Replace an existing record by id."""
        if entity.id is None or entity.id not in self._by_id:
            raise KeyError(f"No nominee with id {entity.id}")
        self._by_id[entity.id] = entity
        self._ids[entity.natural_key] = entity.id
        return entity

    async def upsert(self, entity: NomineeEntity) -> NomineeEntity:
        """Insert, or update the record with the same natural key (keeping its id)."""
        existing_id = self._ids.get(entity.natural_key)
        if existing_id is None:
            existing_id = self._next_id
            self._next_id += 1
        stored = attrs.evolve(entity, id=existing_id)
        self._by_id[existing_id] = stored
        self._ids[stored.natural_key] = existing_id
        return stored

    async def find(
        self, name: str, category: Category | str, ceremony_year: int
    ) -> NomineeEntity | None:
        value = category.value if isinstance(category, Category) else category
        subject_id = self._ids.get((name, value, ceremony_year))
        return self._by_id.get(subject_id) if subject_id is not None else None

    async def all(self) -> list[NomineeEntity]:
        return list(self._by_id.values())
