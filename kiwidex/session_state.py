from __future__ import annotations

import logging
from datetime import UTC, datetime

from kiwidex.api.models import (
    MAX_INTIMACY,
    AnimalRecord,
    AnimalTemplate,
    GameMode,
    Region,
    SessionProgress,
)
from kiwidex.catalog import ANIMALS, fresh_records

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def clamp_intimacy(value: int) -> int:
    return max(0, min(MAX_INTIMACY, value))


class SessionState:
    """Single mutable source of truth for one play session.

    Records and progress are only changed through the methods below. Every
    query hands out copies so callers can't bypass the invariants:

    - a record with intimacy > 0 is captured
    - `discovered_ids` holds exactly the captured ids, in capture order
    """

    def __init__(self, *, templates: tuple[AnimalTemplate, ...] = ANIMALS) -> None:
        self._animals: dict[str, AnimalRecord] = fresh_records(templates)
        self._progress = SessionProgress(total_animals=len(self._animals))

    @classmethod
    def from_parts(cls, *, animals: dict[str, AnimalRecord], progress: SessionProgress) -> SessionState:
        """Build a state from already validated parts (used by the codec)."""

        state = cls.__new__(cls)
        state._animals = animals
        state._progress = progress
        return state

    # --- queries ---

    def list_all(self) -> list[AnimalRecord]:
        return [a.model_copy(deep=True) for a in self._animals.values()]

    def list_by_region(self, region: Region) -> list[AnimalRecord]:
        return [a.model_copy(deep=True) for a in self._animals.values() if a.found_in(region)]

    def list_captured(self) -> list[AnimalRecord]:
        return [self._animals[aid].model_copy(deep=True) for aid in self._progress.discovered_ids]

    def get_animal(self, animal_id: str) -> AnimalRecord | None:
        animal = self._animals.get(animal_id)
        return animal.model_copy(deep=True) if animal is not None else None

    def is_captured(self, animal_id: str) -> bool:
        animal = self._animals.get(animal_id)
        return animal is not None and animal.captured

    def snapshot(self) -> SessionProgress:
        return self._progress.model_copy(deep=True)

    def get_region(self) -> Region | None:
        return self._progress.current_region

    def get_mode(self) -> GameMode:
        return self._progress.current_mode

    # --- mutators ---

    def capture(self, animal_id: str) -> bool:
        animal = self._animals.get(animal_id)
        if animal is None or animal.captured:
            return False

        animal.captured = True
        animal.intimacy = 1
        animal.last_interaction_at = _now()
        self._progress.discovered_ids.append(animal_id)
        logger.info("captured %s (%d/%d)", animal_id, len(self._progress.discovered_ids), len(self._animals))
        return True

    def feed(self, animal_id: str, food_tag: str) -> bool:
        """Flat feeding path: any food from the animal's diet is worth +1."""

        animal = self._animals.get(animal_id)
        if animal is None or not animal.captured:
            return False
        if food_tag not in animal.diet_tags:
            return False
        return self.raise_intimacy(animal_id, 1)

    def raise_intimacy(self, animal_id: str, amount: int) -> bool:
        """Add `amount` intimacy to a captured animal, clamped to the maximum."""

        animal = self._animals.get(animal_id)
        if animal is None or not animal.captured or amount < 0:
            return False

        animal.intimacy = clamp_intimacy(animal.intimacy + amount)
        animal.last_interaction_at = _now()
        return True

    def set_region(self, region: Region | None) -> None:
        if region == Region.both:
            raise ValueError("current region must be north, south or None")
        self._progress.current_region = region

    def set_mode(self, mode: GameMode) -> None:
        self._progress.current_mode = GameMode(mode)

    def award_achievement(self, name: str) -> bool:
        if not name or name in self._progress.achievements:
            return False
        self._progress.achievements.append(name)
        return True

    def replace_with(self, other: SessionState) -> None:
        """Take over every record and all progress from a decoded state."""

        self._animals = {aid: a.model_copy(deep=True) for aid, a in other._animals.items()}
        self._progress = other._progress.model_copy(deep=True)
