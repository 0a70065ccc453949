from __future__ import annotations

from kiwidex.api.models import AnimalRecord, AnimalTemplate, ConservationTier, FoodCategory, FoodItem, Region


# New Zealand native animals. Ids are stable save-file keys.
ANIMALS: tuple[AnimalTemplate, ...] = (
    AnimalTemplate(
        id="kiwi",
        display_name="Kiwi",
        species="Apteryx",
        habitat="Forest",
        diet_tags=("Insects", "Worms", "Berries"),
        conservation_tier=ConservationTier.ENDANGERED,
        region=Region.both,
        description="New Zealand's national bird. It is nocturnal and cannot fly.",
    ),
    AnimalTemplate(
        id="kakapo",
        display_name="Kakapo",
        species="Strigops habroptilus",
        habitat="Mountain forest",
        diet_tags=("Leaves", "Flowers", "Fruits"),
        conservation_tier=ConservationTier.CRITICALLY_ENDANGERED,
        region=Region.south,
        description="The only flightless parrot in the world.",
    ),
    AnimalTemplate(
        id="tuatara",
        display_name="Tuatara",
        species="Sphenodon punctatus",
        habitat="Offshore islands",
        diet_tags=("Insects", "Small reptiles"),
        conservation_tier=ConservationTier.VULNERABLE,
        region=Region.north,
        description="A living fossil whose lineage goes back 200 million years.",
    ),
    AnimalTemplate(
        id="yellow-eyed-penguin",
        display_name="Yellow-eyed penguin",
        species="Megadyptes antipodes",
        habitat="Coast",
        diet_tags=("Fish", "Squid"),
        conservation_tier=ConservationTier.ENDANGERED,
        region=Region.south,
        description="One of the rarest penguins in the world.",
    ),
)


FOODS: tuple[FoodItem, ...] = (
    FoodItem(id="insects", name="Insects", category=FoodCategory.insect, nutrition_value=2),
    FoodItem(id="worms", name="Worms", category=FoodCategory.insect, nutrition_value=3),
    FoodItem(id="berries", name="Berries", category=FoodCategory.plant, nutrition_value=2),
    FoodItem(id="leaves", name="Leaves", category=FoodCategory.plant, nutrition_value=1),
    FoodItem(id="flowers", name="Flowers", category=FoodCategory.plant, nutrition_value=2),
    FoodItem(id="fruits", name="Fruits", category=FoodCategory.plant, nutrition_value=3),
    FoodItem(id="fish", name="Fish", category=FoodCategory.fish, nutrition_value=4),
    FoodItem(id="squid", name="Squid", category=FoodCategory.fish, nutrition_value=3),
    FoodItem(id="small-reptiles", name="Small reptiles", category=FoodCategory.meat, nutrition_value=4),
)


def catalog_ids() -> list[str]:
    return [a.id for a in ANIMALS]


def template_for(animal_id: str) -> AnimalTemplate | None:
    return next((a for a in ANIMALS if a.id == animal_id), None)


def food_for(food_id: str) -> FoodItem | None:
    return next((f for f in FOODS if f.id == food_id), None)


def fresh_records(templates: tuple[AnimalTemplate, ...] = ANIMALS) -> dict[str, AnimalRecord]:
    """Clone templates into uncaptured runtime records, keyed by id in catalog order."""

    return {t.id: AnimalRecord.from_template(t) for t in templates}
