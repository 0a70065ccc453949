from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from kiwidex.api.models import FoodCategory, FoodItem
from kiwidex.catalog import FOODS


class Diner(Protocol):
    display_name: str
    diet_tags: tuple[str, ...]


class IntimacySink(Protocol):
    def raise_intimacy(self, animal_id: str, amount: int) -> bool: ...


class FeedingTier(StrEnum):
    preferred = "PREFERRED"
    compatible = "COMPATIBLE"
    rejected = "REJECTED"


@dataclass(frozen=True, slots=True)
class FeedingOutcome:
    accepted: bool
    intimacy_delta: int
    tier: FeedingTier
    message: str = ""


# Diet item name -> food category. Names missing here imply no category.
DIET_CATEGORIES: dict[str, FoodCategory] = {
    "Insects": FoodCategory.insect,
    "Worms": FoodCategory.insect,
    "Berries": FoodCategory.plant,
    "Leaves": FoodCategory.plant,
    "Flowers": FoodCategory.plant,
    "Fruits": FoodCategory.plant,
    "Fish": FoodCategory.fish,
    "Squid": FoodCategory.fish,
    "Small reptiles": FoodCategory.meat,
}


def diet_categories(diet_tags: tuple[str, ...]) -> set[FoodCategory]:
    return {DIET_CATEGORIES[t] for t in diet_tags if t in DIET_CATEGORIES}


def evaluate(animal: Diner, food: FoodItem) -> FeedingOutcome:
    """Score a food for an animal.

    An exact diet-name match is PREFERRED (double nutrition) and always wins
    over a category match, which is COMPATIBLE (plain nutrition).
    """

    if food.name in animal.diet_tags:
        return FeedingOutcome(
            accepted=True,
            intimacy_delta=2 * food.nutrition_value,
            tier=FeedingTier.preferred,
            message=f"{animal.display_name} loves {food.name}!",
        )

    if food.category in diet_categories(animal.diet_tags):
        return FeedingOutcome(
            accepted=True,
            intimacy_delta=food.nutrition_value,
            tier=FeedingTier.compatible,
            message=f"{animal.display_name} ate {food.name}",
        )

    return FeedingOutcome(
        accepted=False,
        intimacy_delta=0,
        tier=FeedingTier.rejected,
        message=f"{animal.display_name} doesn't like {food.name}",
    )


def available_foods(animal: Diner, *, foods: tuple[FoodItem, ...] = FOODS) -> list[FoodItem]:
    """Foods worth offering: preferred or category-compatible ones, in catalog order."""

    categories = diet_categories(animal.diet_tags)
    return [f for f in foods if f.name in animal.diet_tags or f.category in categories]


def feed_with_rules(*, session: IntimacySink, animal: Diner, animal_id: str, food: FoodItem) -> FeedingOutcome:
    """Evaluate a feeding and apply an accepted reward through the session.

    A rejected food, or an animal the session refuses to reward (not captured),
    comes back with `accepted=False` and no state change.
    """

    outcome = evaluate(animal, food)
    if not outcome.accepted:
        return outcome

    if not session.raise_intimacy(animal_id, outcome.intimacy_delta):
        return FeedingOutcome(
            accepted=False,
            intimacy_delta=0,
            tier=outcome.tier,
            message=f"{animal.display_name} is not in your collection yet",
        )
    return outcome
