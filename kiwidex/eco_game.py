from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

ECO_ACHIEVEMENT = "eco-guardian"
WIN_THRESHOLD = 80


class EcoAction(StrEnum):
    plant = "plant"
    cut = "cut"
    feed = "feed"
    safe = "safe"
    danger = "danger"


class RewardSink(Protocol):
    def raise_intimacy(self, animal_id: str, amount: int) -> bool: ...

    def award_achievement(self, name: str) -> bool: ...


@dataclass(frozen=True, slots=True)
class EcoResult:
    ok: bool
    message: str


def _bounded(value: int) -> int:
    return max(0, min(100, value))


@dataclass(slots=True)
class EcoGame:
    """Island ecosystem mini-game played with one captured animal.

    Plant or cut trees, feed the birds, and steer the kakapo into the safe zone.
    Where the kakapo stands is a rendering concern; callers report it with
    `check_safety`.
    """

    animal_id: str
    birds: int = 50
    environment: int = 75
    trees: int = 10
    kakapo_safe: bool = False
    settled: bool = False

    @property
    def won(self) -> bool:
        return self.birds >= WIN_THRESHOLD and self.environment >= WIN_THRESHOLD and self.kakapo_safe

    def plant(self) -> EcoResult:
        if self.environment < 5:
            return EcoResult(ok=False, message="Not enough environmental resources!")
        self.trees += 1
        self.environment = _bounded(self.environment - 5)
        self.birds = _bounded(self.birds + 10)
        return EcoResult(ok=True, message="Tree planted! Birds love it!")

    def cut(self) -> EcoResult:
        if self.trees <= 0:
            return EcoResult(ok=False, message="No trees to cut!")
        self.trees -= 1
        self.environment = _bounded(self.environment + 5)
        self.birds = _bounded(self.birds - 15)
        return EcoResult(ok=True, message="Tree cut! Birds lost habitat!")

    def feed(self) -> EcoResult:
        self.birds = _bounded(self.birds + 5)
        return EcoResult(ok=True, message="Birds fed! Population increased!")

    def check_safety(self, is_safe: bool) -> EcoResult:
        self.kakapo_safe = is_safe
        if is_safe:
            self.birds = _bounded(self.birds + 2)
            self.environment = _bounded(self.environment + 1)
            return EcoResult(ok=True, message="Kakapo is safe! Birds +2, Environment +1")
        self.birds = _bounded(self.birds - 3)
        return EcoResult(ok=True, message="Kakapo is in danger! Birds -3")

    def apply(self, action: EcoAction) -> EcoResult:
        if action == EcoAction.plant:
            return self.plant()
        if action == EcoAction.cut:
            return self.cut()
        if action == EcoAction.feed:
            return self.feed()
        return self.check_safety(action == EcoAction.safe)

    def settle(self, session: RewardSink) -> bool:
        """Pay out a win once: the achievement plus one intimacy for the animal."""

        if not self.won or self.settled:
            return False
        self.settled = True
        session.award_achievement(ECO_ACHIEVEMENT)
        session.raise_intimacy(self.animal_id, 1)
        return True
