from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from kiwidex.api.models import GameMode, Region


class DenialReason(StrEnum):
    no_region_selected = "NoRegionSelected"
    animal_not_captured = "AnimalNotCaptured"
    illegal_transition = "IllegalTransition"
    no_animals_in_region = "NoAnimalsInRegion"


class GuardedSession(Protocol):
    """What the guards need to read from the session, and nothing more."""

    def get_region(self) -> Region | None: ...

    def is_captured(self, animal_id: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class TransitionRequest:
    """Inputs available to guards."""

    source: GameMode
    target: GameMode
    animal_id: str | None = None


class TransitionGuard(ABC):
    """A small, composable precondition for a mode transition."""

    @abstractmethod
    def check(self, *, request: TransitionRequest, session: GuardedSession) -> DenialReason | None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class RegionSelectedGuard(TransitionGuard):
    def check(self, *, request: TransitionRequest, session: GuardedSession) -> DenialReason | None:
        if session.get_region() is None:
            return DenialReason.no_region_selected
        return None


@dataclass(frozen=True, slots=True)
class AnimalCapturedGuard(TransitionGuard):
    """Unknown ids are treated the same as uncaptured ones."""

    def check(self, *, request: TransitionRequest, session: GuardedSession) -> DenialReason | None:
        if not request.animal_id or not session.is_captured(request.animal_id):
            return DenialReason.animal_not_captured
        return None


@dataclass(frozen=True, slots=True)
class GuardPipeline:
    guards: tuple[TransitionGuard, ...] = ()

    def check(self, *, request: TransitionRequest, session: GuardedSession) -> DenialReason | None:
        for g in self.guards:
            reason = g.check(request=request, session=session)
            if reason is not None:
                return reason
        return None


OPEN = GuardPipeline()

# Only edges with preconditions are listed; every other known edge is open.
DEFAULT_TRANSITION_PIPELINES: dict[tuple[GameMode, GameMode], GuardPipeline] = {
    (GameMode.map, GameMode.encounter): GuardPipeline(guards=(RegionSelectedGuard(),)),
    (GameMode.collection, GameMode.minigame): GuardPipeline(guards=(AnimalCapturedGuard(),)),
}


def pipeline_for(source: GameMode, target: GameMode) -> GuardPipeline:
    return DEFAULT_TRANSITION_PIPELINES.get((source, target), OPEN)
