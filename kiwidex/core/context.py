from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kiwidex.api.models import AnimalRecord, Difficulty


@dataclass(frozen=True, slots=True)
class GuideContext:
    """Shared instructions for every content request."""

    system_prompt: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AnimalContext:
    """Everything the model may know about one animal."""

    animal_id: str
    display_name: str
    species: str
    habitat: str
    diet: str
    conservation: str
    description: str
    intimacy: int = 0

    @classmethod
    def from_record(cls, animal: AnimalRecord) -> AnimalContext:
        return cls(
            animal_id=animal.id,
            display_name=animal.display_name,
            species=animal.species,
            habitat=animal.habitat,
            diet=", ".join(animal.diet_tags),
            conservation=animal.conservation_tier.label,
            description=animal.description,
            intimacy=animal.intimacy,
        )


@dataclass(frozen=True, slots=True)
class RenderedContext:
    """Final, merged context passed into the LLM agent."""

    system_prompt: str

    def as_messages(self) -> list[dict[str, str]]:
        return [{"role": "system", "content": self.system_prompt}]


def compose_context(*, base: GuideContext, animal: AnimalContext, difficulty: Difficulty | None = None) -> RenderedContext:
    parts: list[str] = [base.system_prompt.strip()]

    parts.append(
        "\n".join(
            [
                "ANIMAL CONTEXT:",
                f"- id: {animal.animal_id}",
                f"- name: {animal.display_name} ({animal.species})",
                f"- habitat: {animal.habitat}",
                f"- diet: {animal.diet}",
                f"- conservation status: {animal.conservation}",
                f"- description: {animal.description}",
                f"- player intimacy: {animal.intimacy}/10",
            ]
        ).strip()
    )

    if difficulty is not None:
        parts.append(f"AUDIENCE LEVEL: {difficulty.value}")

    system_prompt = "\n\n".join([p for p in parts if p.strip()]).strip()
    return RenderedContext(system_prompt=system_prompt)
