from __future__ import annotations

from datetime import datetime
from enum import IntEnum, StrEnum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_INTIMACY = 10
MAX_SAVE_CHARS = 1_000_000


class Region(StrEnum):
    north = "north"
    south = "south"
    both = "both"


class GameMode(StrEnum):
    map = "map"
    encounter = "encounter"
    collection = "collection"
    minigame = "minigame"


class ConservationTier(IntEnum):
    LEAST_CONCERN = 0
    NEAR_THREATENED = 1
    VULNERABLE = 2
    ENDANGERED = 3
    CRITICALLY_ENDANGERED = 4

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()


class Difficulty(StrEnum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class FoodCategory(StrEnum):
    insect = "insect"
    plant = "plant"
    fish = "fish"
    meat = "meat"


def _dedupe(tags: tuple[str, ...]) -> tuple[str, ...]:
    seen: set[str] = set()
    out: list[str] = []
    for t in tags:
        if t not in seen:
            seen.add(t)
            out.append(t)
    return tuple(out)


class AnimalTemplate(BaseModel):
    """Static catalog entry for a discoverable animal."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    species: str
    habitat: str
    diet_tags: tuple[str, ...]
    conservation_tier: ConservationTier
    region: Region
    description: str = ""

    @field_validator("diet_tags")
    @classmethod
    def dedupe_diet_tags(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _dedupe(v)


class AnimalRecord(BaseModel):
    """Runtime roster entry: the catalog template plus per-session progress."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True)
    display_name: str = Field(frozen=True)
    species: str = Field(frozen=True)
    habitat: str = Field(frozen=True)
    diet_tags: tuple[str, ...] = Field(frozen=True)
    conservation_tier: ConservationTier = Field(frozen=True)
    region: Region = Field(frozen=True)
    description: str = Field(default="", frozen=True)

    captured: bool = False
    intimacy: int = Field(default=0, ge=0, le=MAX_INTIMACY)
    last_interaction_at: datetime | None = None

    @field_validator("diet_tags")
    @classmethod
    def dedupe_diet_tags(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _dedupe(v)

    @classmethod
    def from_template(cls, template: AnimalTemplate) -> AnimalRecord:
        return cls(**template.model_dump())

    def found_in(self, region: Region) -> bool:
        return self.region == region or self.region == Region.both


class SessionProgress(BaseModel):
    discovered_ids: list[str] = Field(default_factory=list)
    current_region: Region | None = None
    current_mode: GameMode = GameMode.map

    # Named milestones, e.g. finishing the eco mini-game.
    achievements: list[str] = Field(default_factory=list)

    total_animals: int = 0


class FoodItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: FoodCategory
    nutrition_value: int = Field(..., ge=0)


class FactKind(StrEnum):
    fact = "fact"
    conservation = "conservation"
    story = "story"
    quiz = "quiz"


class FactItem(BaseModel):
    topic: str
    content: str
    difficulty: Difficulty
    kind: FactKind = FactKind.fact


class QuizQuestion(BaseModel):
    question: str
    options: list[str] = Field(..., min_length=4, max_length=4)
    correct_index: int = Field(..., ge=0, le=3)
    explanation: str = ""


# --- HTTP request/response bodies ---


class RegionRequest(BaseModel):
    region: Region | None = None


class FeedRequest(BaseModel):
    animal_id: str
    food_id: str


class ModeRequest(BaseModel):
    mode: GameMode
    animal_id: str | None = None


class LoadRequest(BaseModel):
    blob: str = Field(..., min_length=1, max_length=MAX_SAVE_CHARS)


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)


class SessionView(BaseModel):
    session_id: UUID
    mode: GameMode
    epoch: int
    progress: SessionProgress
    animals: list[AnimalRecord]
    encounter_animal_id: str | None = None
    minigame_animal_id: str | None = None


class BoolResponse(BaseModel):
    ok: bool


class TransitionResponse(BaseModel):
    accepted: bool
    mode: GameMode
    reason: str | None = None
    animal_id: str | None = None
    epoch: int


class FeedResponse(BaseModel):
    accepted: bool
    tier: str
    intimacy_delta: int
    message: str
    intimacy: int


class SaveResponse(BaseModel):
    blob: str


class EcoGameView(BaseModel):
    animal_id: str
    birds: int
    environment: int
    trees: int
    kakapo_safe: bool
    won: bool
    message: str = ""


# AI content responses carry the controller epoch seen when the request started;
# clients drop a response whose epoch is older than their current one.


class FactsResponse(BaseModel):
    epoch: int
    items: list[FactItem]


class QuizResponse(BaseModel):
    epoch: int
    questions: list[QuizQuestion]


class ChatResponse(BaseModel):
    epoch: int
    answer: str
