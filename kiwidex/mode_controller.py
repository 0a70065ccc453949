from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol

from statemachine.exceptions import TransitionNotAllowed

from kiwidex.api.models import AnimalRecord, GameMode, Region
from kiwidex.fsm import EDGES, ModeFSM
from kiwidex.transition_processing.guards import DenialReason, TransitionRequest, pipeline_for

logger = logging.getLogger(__name__)

# Saved modes that need an active animal can't be resumed directly.
_RESUMABLE_MODES = frozenset({GameMode.map, GameMode.collection})


class ModeSession(Protocol):
    """Session capabilities the controller relies on."""

    def get_region(self) -> Region | None: ...

    def is_captured(self, animal_id: str) -> bool: ...

    def list_by_region(self, region: Region) -> list[AnimalRecord]: ...

    def get_mode(self) -> GameMode: ...

    def set_mode(self, mode: GameMode) -> None: ...


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    """Result of a transition request.

    - `accepted`: whether the controller moved.
    - `mode`: the controller's mode after the request.
    - `reason`: why the request was denied.
    - `animal_id`: the animal picked for an encounter or launched in the mini-game.
    """

    accepted: bool
    mode: GameMode
    reason: DenialReason | None = None
    animal_id: str | None = None


def pick_encounter_animal(*, candidates: list[AnimalRecord], rng: random.Random) -> AnimalRecord | None:
    """Uniform pick among uncaptured candidates, or among all once every one is captured."""

    if not candidates:
        return None
    fresh = [a for a in candidates if not a.captured]
    return rng.choice(fresh or candidates)


class ModeController:
    """Explicit request/response API over ModeFSM.

    Every transition is caller initiated. A denied request leaves the mode
    untouched; an accepted one writes the new mode into the session and bumps
    `epoch`, which callers compare against to drop late async results.
    """

    def __init__(self, *, session: ModeSession, rng: random.Random | None = None) -> None:
        self._session = session
        self._rng = rng or random.Random()

        start = session.get_mode()
        if start not in _RESUMABLE_MODES:
            start = GameMode.map
        self._fsm = ModeFSM(start)
        self._session.set_mode(start)

        self.epoch = 0
        self.encounter_animal_id: str | None = None
        self.minigame_animal_id: str | None = None

    @property
    def mode(self) -> GameMode:
        return self._fsm.mode

    def is_current(self, epoch: int) -> bool:
        return epoch == self.epoch

    def request(self, target: GameMode, *, animal_id: str | None = None) -> TransitionOutcome:
        source = self.mode
        target = GameMode(target)

        event = EDGES.get((source, target))
        if event is None:
            return self._deny(source, target, DenialReason.illegal_transition)

        req = TransitionRequest(source=source, target=target, animal_id=animal_id)
        reason = pipeline_for(source, target).check(request=req, session=self._session)
        if reason is not None:
            return self._deny(source, target, reason)

        picked: str | None = None
        if target == GameMode.encounter:
            region = self._session.get_region()
            candidates = self._session.list_by_region(region) if region is not None else []
            animal = pick_encounter_animal(candidates=candidates, rng=self._rng)
            if animal is None:
                return self._deny(source, target, DenialReason.no_animals_in_region)
            picked = animal.id
        elif target == GameMode.minigame:
            picked = animal_id

        try:
            self._fsm.send(event)
        except TransitionNotAllowed:
            return self._deny(source, target, DenialReason.illegal_transition)

        self._enter(target, picked)
        logger.debug("mode %s -> %s (animal=%s, epoch=%d)", source.value, target.value, picked, self.epoch)
        return TransitionOutcome(accepted=True, mode=target, animal_id=picked)

    # Convenience wrappers, one per edge.

    def enter_encounter(self) -> TransitionOutcome:
        return self.request(GameMode.encounter)

    def exit_encounter(self) -> TransitionOutcome:
        return self.request(GameMode.map)

    def open_collection(self) -> TransitionOutcome:
        return self.request(GameMode.collection)

    def close_collection(self) -> TransitionOutcome:
        return self.request(GameMode.map)

    def start_minigame(self, animal_id: str) -> TransitionOutcome:
        return self.request(GameMode.minigame, animal_id=animal_id)

    def finish_minigame(self) -> TransitionOutcome:
        return self.request(GameMode.collection)

    def _enter(self, target: GameMode, animal_id: str | None) -> None:
        self.epoch += 1
        self.encounter_animal_id = animal_id if target == GameMode.encounter else None
        self.minigame_animal_id = animal_id if target == GameMode.minigame else None
        self._session.set_mode(target)

    def _deny(self, source: GameMode, target: GameMode, reason: DenialReason) -> TransitionOutcome:
        logger.info("mode %s -> %s denied: %s", source.value, target.value, reason.value)
        return TransitionOutcome(accepted=False, mode=source, reason=reason)
